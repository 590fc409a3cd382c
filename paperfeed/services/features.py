"""Feature extraction for subject-area classification.

Turns a (title, abstract) pair into a fixed-order mapping of binary keyword
flags plus two normalized length signals.  The same mapping feeds both the
rule engine (by feature name) and the trained model (by position, see
:func:`to_array`).

Text and keywords go through one pipeline: lower-case, split on alphanumeric
runs, Porter-stem each token.  A keyword matches when its stemmed tokens
appear as a contiguous whole-token phrase in the stemmed text, so
"therapies" matches "therapy" but "general" does not match "gene".
"""

from __future__ import annotations

from functools import lru_cache
from typing import Mapping

import numpy as np
from nltk.stem.porter import PorterStemmer
from nltk.tokenize import RegexpTokenizer

# ---------------------------------------------------------------------------
# Keyword groups
# ---------------------------------------------------------------------------
KEYWORD_GROUPS: dict[str, tuple[str, ...]] = {
    "ai": (
        "artificial intelligence", "machine learning", "deep learning",
        "neural network", "algorithm", "computer vision", "nlp", "data mining",
    ),
    "computer": (
        "computer", "software", "system", "programming", "database",
        "network", "cybersecurity", "robotics",
    ),
    "medical": (
        "clinical", "medical", "patient", "treatment", "therapy", "diagnosis",
        "health", "disease", "hospital",
    ),
    "biological": (
        "biological", "cell", "gene", "protein", "molecular", "dna", "rna",
        "biology", "biochemistry",
    ),
    "cancer": (
        "cancer", "tumor", "oncology", "chemotherapy", "radiation",
        "metastasis", "malignant", "carcinoma", "neoplasm",
    ),
    "materials": (
        "material", "synthesis", "nanoparticle", "device", "fabrication",
        "nanotechnology", "composite",
    ),
    "energy": (
        "battery", "solar", "energy", "fuel cell", "photovoltaic",
        "renewable", "storage",
    ),
    "neuro": (
        "brain", "neuron", "cognitive", "memory", "alzheimer", "parkinson",
        "neurological", "behavior",
    ),
    "engineering": (
        "engineering", "technology", "manufacturing", "design",
        "optimization", "control", "automation",
    ),
    "environmental": (
        "environmental", "climate", "pollution", "ecology", "sustainability",
        "carbon", "water",
    ),
    "physics": (
        "physics", "quantum", "optics", "photon", "laser", "spectroscopy",
        "theoretical", "experimental",
    ),
    "methodology": (
        "method", "approach", "technique", "procedure", "protocol",
        "analysis", "study",
    ),
    "results": (
        "results", "findings", "outcome", "conclusion", "demonstrated",
        "showed", "revealed",
    ),
}

# ---------------------------------------------------------------------------
# Feature table: (name, keywords).  Order is the model's input order.
# Group flags reuse KEYWORD_GROUPS; the rest are finer single signals that
# deliberately overlap them.
# ---------------------------------------------------------------------------
_G = KEYWORD_GROUPS

FLAG_FEATURES: tuple[tuple[str, tuple[str, ...]], ...] = (
    # Computer Science
    ("has_ai", _G["ai"]),
    ("has_computer", _G["computer"]),
    ("has_machine_learning", ("machine learning", "deep learning")),
    ("has_algorithm", ("algorithm", "neural network")),
    ("has_deep_learning", ("deep learning", "cnn", "rnn")),
    ("has_neural_network", ("neural network", "neural net")),
    ("has_software", ("software", "system")),
    ("has_system", ("system", "platform")),
    # Biomedical
    ("has_clinical", _G["medical"]),
    ("has_medical", ("medical", "clinical")),
    ("has_patient", ("patient", "treatment")),
    ("has_treatment", ("treatment", "therapy")),
    ("has_therapy", ("therapy", "therapeutic")),
    ("has_diagnosis", ("diagnosis", "diagnostic")),
    ("has_health", ("health", "healthcare")),
    ("has_disease", ("disease", "disorder")),
    ("has_biological", _G["biological"]),
    ("has_cell", ("cell", "cellular")),
    ("has_gene", ("gene", "genetic")),
    ("has_protein", ("protein", "enzyme")),
    ("has_molecular", ("molecular", "molecule")),
    ("has_dna", ("dna", "genome")),
    ("has_rna", ("rna", "transcription")),
    ("has_biology", ("biology", "biological")),
    # Cancer research
    ("has_cancer", _G["cancer"]),
    ("has_tumor", ("tumor", "tumour")),
    ("has_oncology", ("oncology", "oncological")),
    ("has_chemotherapy", ("chemotherapy", "chemo")),
    ("has_radiation", ("radiation", "radiotherapy")),
    ("has_metastasis", ("metastasis", "metastatic")),
    ("has_malignant", ("malignant", "benign")),
    ("has_carcinoma", ("carcinoma", "sarcoma")),
    # Materials science
    ("has_material", _G["materials"]),
    ("has_synthesis", ("synthesis", "synthesized")),
    ("has_nanoparticle", ("nanoparticle", "nanomaterial")),
    ("has_device", ("device", "sensor")),
    ("has_battery", _G["energy"]),
    ("has_solar", ("solar", "photovoltaic")),
    ("has_energy", ("energy", "power")),
    ("has_fabrication", ("fabrication", "manufacturing")),
    ("has_polymers", ("polymer", "composite")),
    ("has_composite", ("composite", "matrix")),
    ("has_nanomaterials", ("nanomaterial", "nanostructure")),
    ("has_semiconductor", ("semiconductor", "silicon")),
    ("has_electronic", ("electronic", "electrical")),
    ("has_optical", ("optical", "optoelectronic")),
    ("has_mechanical", ("mechanical", "strength")),
    ("has_characterization", ("characterization", "analysis")),
    # Neuroscience
    ("has_brain", _G["neuro"]),
    ("has_neuron", ("neuron", "neuronal")),
    ("has_cognitive", ("cognitive", "cognition")),
    ("has_memory", ("memory", "recall")),
    ("has_alzheimer", ("alzheimer", "dementia")),
    ("has_parkinson", ("parkinson", "parkinsonian")),
    ("has_neurological", ("neurological", "neurology")),
    ("has_behavior", ("behavior", "behaviour")),
    # Engineering
    ("has_engineering", _G["engineering"]),
    ("has_technology", ("technology", "technological")),
    ("has_manufacturing", ("manufacturing", "production")),
    ("has_design", ("design", "designed")),
    ("has_optimization", ("optimization", "optimize")),
    ("has_control", ("control", "controller")),
    ("has_automation", ("automation", "automated")),
    ("has_robotics", ("robotics", "robot")),
    # Environmental
    ("has_environmental", _G["environmental"]),
    ("has_climate", ("climate", "climatic")),
    ("has_pollution", ("pollution", "contamination")),
    ("has_ecology", ("ecology", "ecological")),
    ("has_sustainability", ("sustainability", "sustainable")),
    ("has_renewable", ("renewable", "green")),
    ("has_carbon", ("carbon", "co2")),
    ("has_water", ("water", "aquatic")),
    # Physics
    ("has_physics", _G["physics"]),
    ("has_quantum", ("quantum", "qubit")),
    ("has_optics", ("optics", "optical")),
    ("has_photon", ("photon", "photonic")),
    ("has_laser", ("laser", "beam")),
    ("has_spectroscopy", ("spectroscopy", "spectral")),
    ("has_theoretical", ("theoretical", "theory")),
    ("has_experimental", ("experimental", "experiment")),
)

STRUCTURE_FLAG_FEATURES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("has_methodology", _G["methodology"]),
    ("has_results", _G["results"]),
    ("has_model", ("model", "modeling")),
    ("has_analysis", ("analysis", "analyzed")),
    ("has_data", ("data", "dataset")),
)

LENGTH_FEATURES: tuple[str, ...] = ("title_length", "abstract_length")

FEATURE_NAMES: tuple[str, ...] = (
    tuple(name for name, _ in FLAG_FEATURES)
    + LENGTH_FEATURES
    + tuple(name for name, _ in STRUCTURE_FLAG_FEATURES)
)

TITLE_LENGTH_SCALE = 100
ABSTRACT_LENGTH_SCALE = 2000

FeatureVector = dict[str, float]

_tokenizer = RegexpTokenizer(r"[a-z0-9]+")
_stemmer = PorterStemmer()


@lru_cache(maxsize=8192)
def _stem(token: str) -> str:
    return _stemmer.stem(token)


def stem_text(text: str) -> str:
    """Lower-case, tokenize and stem ``text``; tokens joined by single spaces."""
    tokens = _tokenizer.tokenize((text or "").lower())
    return " ".join(_stem(token) for token in tokens)


class FeatureExtractor:
    """Extract the fixed-order feature mapping from title and abstract."""

    def __init__(self) -> None:
        # Stemmed keyword phrases per feature, padded for whole-token search
        self._flags: list[tuple[str, tuple[str, ...]]] = [
            (name, self._compile(keywords))
            for name, keywords in FLAG_FEATURES + STRUCTURE_FLAG_FEATURES
        ]

    @staticmethod
    def _compile(keywords: tuple[str, ...]) -> tuple[str, ...]:
        phrases = (stem_text(keyword) for keyword in keywords)
        return tuple(f" {phrase} " for phrase in phrases if phrase)

    def extract(self, title: str, abstract: str) -> FeatureVector:
        """Compute the feature mapping for one publication.

        Args:
            title: Publication title (may be empty)
            abstract: Abstract or plain-text description (may be empty)

        Returns:
            Dict keyed by :data:`FEATURE_NAMES`, in that order
        """
        title = title or ""
        abstract = abstract or ""
        padded = f" {stem_text(f'{title} {abstract}')} "

        flags = {
            name: 1.0 if any(phrase in padded for phrase in phrases) else 0.0
            for name, phrases in self._flags
        }
        flags["title_length"] = min(len(title) / TITLE_LENGTH_SCALE, 1.0)
        flags["abstract_length"] = min(len(abstract) / ABSTRACT_LENGTH_SCALE, 1.0)

        return {name: flags[name] for name in FEATURE_NAMES}


def to_array(features: Mapping[str, float]) -> np.ndarray:
    """Lay out a feature mapping as a 1-D vector in :data:`FEATURE_NAMES` order.

    Missing names count as 0, so partial mappings are accepted.
    """
    return np.array(
        [float(features.get(name, 0.0)) for name in FEATURE_NAMES],
        dtype=np.float64,
    )
