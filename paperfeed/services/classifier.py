"""Subject-area classification.

Two interchangeable strategies behind one :class:`Classifier` interface:

* :class:`RuleClassifier`: weighted keyword-flag scoring, always available.
* :class:`TrainedClassifier`: a fitted scikit-learn estimator over the same
  features, falling back to the rules for any record it fails on.

Which one runs is decided once by :func:`create_classifier`, based on
whether a model artifact can be loaded.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import joblib
import numpy as np

from paperfeed.models.paper import (
    BIOMEDICAL,
    CANCER_RESEARCH,
    COMPUTER_SCIENCE,
    ENGINEERING,
    ENVIRONMENTAL,
    MATERIALS_SCIENCE,
    MULTIDISCIPLINARY,
    NEUROSCIENCE,
    PHYSICS,
    SUBJECT_AREAS,
)
from paperfeed.services.features import FeatureExtractor, to_array

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Rule weights
# ---------------------------------------------------------------------------
BROAD_WEIGHT = 2
SPECIFIC_WEIGHT = 5  # narrow domains outrank broad ones on comparable evidence

CATEGORY_RULES: dict[str, tuple[int, tuple[str, ...]]] = {
    COMPUTER_SCIENCE: (BROAD_WEIGHT, (
        "has_ai", "has_computer", "has_machine_learning", "has_algorithm",
        "has_deep_learning", "has_neural_network", "has_software", "has_system",
    )),
    BIOMEDICAL: (BROAD_WEIGHT, (
        "has_clinical", "has_medical", "has_patient", "has_treatment",
        "has_therapy", "has_diagnosis", "has_health", "has_disease",
        "has_biological", "has_cell", "has_gene", "has_protein",
    )),
    CANCER_RESEARCH: (SPECIFIC_WEIGHT, (
        "has_cancer", "has_tumor", "has_oncology", "has_chemotherapy",
        "has_radiation", "has_metastasis",
    )),
    MATERIALS_SCIENCE: (BROAD_WEIGHT, (
        "has_material", "has_synthesis", "has_nanoparticle", "has_device",
        "has_battery", "has_solar", "has_energy", "has_fabrication",
    )),
    NEUROSCIENCE: (SPECIFIC_WEIGHT, (
        "has_brain", "has_neuron", "has_cognitive", "has_memory",
        "has_alzheimer", "has_parkinson",
    )),
    ENGINEERING: (BROAD_WEIGHT, (
        "has_engineering", "has_technology", "has_manufacturing", "has_design",
        "has_optimization", "has_control",
    )),
    ENVIRONMENTAL: (BROAD_WEIGHT, (
        "has_environmental", "has_climate", "has_pollution", "has_ecology",
        "has_sustainability", "has_renewable",
    )),
    PHYSICS: (BROAD_WEIGHT, (
        "has_physics", "has_quantum", "has_optics", "has_photon", "has_laser",
        "has_spectroscopy",
    )),
}

FALLBACK_CONFIDENCE = 0.5
MAX_RULE_CONFIDENCE = 0.95

DEFAULT_MODEL_FILENAME = "subject_classifier.joblib"


@dataclass(frozen=True)
class Classification:
    """A subject-area label with the classifier's certainty in [0, 1]."""

    category: str
    confidence: float


class Classifier(ABC):
    """Common interface for subject-area classifiers."""

    name: str = "classifier"

    def __init__(self, extractor: Optional[FeatureExtractor] = None) -> None:
        self.extractor = extractor or FeatureExtractor()

    def classify(self, title: str, abstract: str = "") -> Classification:
        """Classify a publication from its title and abstract text."""
        features = self.extractor.extract(title, abstract)
        return self.classify_features(features)

    @abstractmethod
    def classify_features(self, features: Mapping[str, float]) -> Classification:
        """Classify an already extracted feature mapping."""


class RuleClassifier(Classifier):
    """Deterministic keyword-weight scorer.

    Each category sums its flags and multiplies by its weight.  The strictly
    highest score wins; equal top scores resolve to the category listed
    first in :data:`SUBJECT_AREAS`.  A zero maximum means nothing matched and
    yields ``Multidisciplinary`` at :data:`FALLBACK_CONFIDENCE`.
    """

    name = "rules"

    @staticmethod
    def score(features: Mapping[str, float]) -> dict[str, int]:
        """Return the integer score of every ruled category, in enumeration order."""
        scores: dict[str, int] = {}
        for category in SUBJECT_AREAS:
            if category not in CATEGORY_RULES:
                continue
            weight, flags = CATEGORY_RULES[category]
            hits = sum(1 for flag in flags if features.get(flag, 0) >= 1)
            scores[category] = hits * weight
        return scores

    def classify_features(self, features: Mapping[str, float]) -> Classification:
        scores = self.score(features)
        best_category = MULTIDISCIPLINARY
        best_score = 0
        for category, value in scores.items():
            if value > best_score:  # strict: earlier category keeps ties
                best_category, best_score = category, value

        if best_score == 0:
            return Classification(MULTIDISCIPLINARY, FALLBACK_CONFIDENCE)

        total = sum(scores.values())
        confidence = min(MAX_RULE_CONFIDENCE, 0.5 + 0.5 * best_score / total)
        return Classification(best_category, round(confidence, 2))


class TrainedClassifier(Classifier):
    """Classifier backed by a fitted estimator with ``predict_proba``.

    The estimator must have been trained on :func:`to_array` vectors and its
    ``classes_`` must be subject-area labels.  Inference errors never escape:
    the record is re-scored by the rule classifier instead.
    """

    name = "model"

    def __init__(
        self,
        model: Any,
        extractor: Optional[FeatureExtractor] = None,
        fallback: Optional[RuleClassifier] = None,
    ) -> None:
        super().__init__(extractor)
        self.model = model
        self.fallback = fallback or RuleClassifier(self.extractor)

    def classify_features(self, features: Mapping[str, float]) -> Classification:
        try:
            return self._predict(features)
        except Exception as e:
            logger.warning("Model inference failed, using rule classifier: %s", e)
            return self.fallback.classify_features(features)

    def _predict(self, features: Mapping[str, float]) -> Classification:
        vector = to_array(features).reshape(1, -1)
        probabilities = np.asarray(self.model.predict_proba(vector))[0]
        index = int(np.argmax(probabilities))
        category = str(self.model.classes_[index])
        if category not in SUBJECT_AREAS:
            raise ValueError(f"model predicted unknown subject area {category!r}")
        confidence = float(np.clip(probabilities[index], 0.0, 1.0))
        return Classification(category, round(confidence, 4))


# ---------------------------------------------------------------------------
# Model loading
# ---------------------------------------------------------------------------

def load_model(path: Optional[Path]) -> Optional[Any]:
    """Load a joblib model artifact, or return None when unavailable.

    A missing file is the normal "no model" case and is logged at info
    level; a file that fails to load is logged as a warning.
    """
    if path is None or not Path(path).exists():
        logger.info("No classifier model at %s, using keyword rules", path)
        return None
    try:
        model = joblib.load(path)
    except Exception as e:
        logger.warning("Could not load classifier model %s: %s", path, e)
        return None
    if not hasattr(model, "predict_proba") or not hasattr(model, "classes_"):
        logger.warning("Ignoring %s: object is not a fitted probabilistic classifier", path)
        return None
    return model


def create_classifier(
    model_path: Optional[Path] = None,
    extractor: Optional[FeatureExtractor] = None,
) -> Classifier:
    """Return the trained classifier when a model loads, else the rule classifier."""
    extractor = extractor or FeatureExtractor()
    model = load_model(model_path)
    if model is None:
        return RuleClassifier(extractor)
    logger.info("Loaded classifier model from %s", model_path)
    return TrainedClassifier(model, extractor)
