"""One-off training of the subject-area model.

Not part of a normal run: ``paperfeed train`` fits a small multi-layer
perceptron on the labelled examples in ``paperfeed/data/training_data.yaml``
and writes it where :func:`paperfeed.services.classifier.load_model` looks.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import joblib
import numpy as np
import yaml
from sklearn.neural_network import MLPClassifier

from paperfeed.models.paper import SUBJECT_AREAS
from paperfeed.services.features import FeatureExtractor, to_array

logger = logging.getLogger(__name__)

TRAINING_DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "training_data.yaml"


@dataclass
class TrainingSample:
    title: str
    abstract: str
    category: str


def load_training_data(path: Path = TRAINING_DATA_PATH) -> list[TrainingSample]:
    """Load labelled samples; a label outside the subject areas is an error."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    samples = []
    for entry in data.get("samples") or []:
        category = str(entry.get("category", ""))
        if category not in SUBJECT_AREAS:
            raise ValueError(f"Unknown subject area {category!r} in {path}")
        samples.append(
            TrainingSample(
                title=str(entry.get("title", "")),
                abstract=str(entry.get("abstract", "")),
                category=category,
            )
        )
    return samples


def build_matrix(
    samples: list[TrainingSample],
    extractor: Optional[FeatureExtractor] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Turn samples into (X, y) using the runtime feature layout."""
    extractor = extractor or FeatureExtractor()
    X = np.vstack([to_array(extractor.extract(s.title, s.abstract)) for s in samples])
    y = np.array([s.category for s in samples])
    return X, y


def train_model(
    samples: list[TrainingSample],
    random_state: int = 42,
    max_iter: int = 2000,
) -> MLPClassifier:
    """Fit the MLP (16 → 8 hidden units) on ``samples``."""
    if len({s.category for s in samples}) < 2:
        raise ValueError("Training needs samples from at least two subject areas")
    X, y = build_matrix(samples)
    model = MLPClassifier(
        hidden_layer_sizes=(16, 8),
        activation="relu",
        solver="adam",
        learning_rate_init=0.01,
        max_iter=max_iter,
        random_state=random_state,
    )
    model.fit(X, y)
    logger.info("Training accuracy: %.3f on %d samples", model.score(X, y), len(samples))
    return model


def save_model(model: MLPClassifier, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, path)
    return path
