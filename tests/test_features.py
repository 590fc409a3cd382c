from __future__ import annotations

import numpy as np

from paperfeed.services.features import (
    FEATURE_NAMES,
    FeatureExtractor,
    stem_text,
    to_array,
)

extractor = FeatureExtractor()


def test_extract_returns_every_feature_in_order() -> None:
    features = extractor.extract("A title", "An abstract")
    assert tuple(features) == FEATURE_NAMES


def test_empty_input_gives_zero_vector() -> None:
    features = extractor.extract("", "")
    assert all(value == 0.0 for value in features.values())


def test_none_input_is_treated_as_empty() -> None:
    assert extractor.extract(None, None) == extractor.extract("", "")


def test_extract_is_deterministic() -> None:
    title = "Quantum optics in silicon photonic devices"
    abstract = "We demonstrate a laser source with high energy efficiency."
    assert extractor.extract(title, abstract) == extractor.extract(title, abstract)


def test_inflected_forms_match_keywords() -> None:
    features = extractor.extract("Therapies for patients", "")
    assert features["has_therapy"] == 1.0
    assert features["has_patient"] == 1.0


def test_keywords_match_whole_tokens_only() -> None:
    features = extractor.extract("A general survey of the population", "")
    assert features["has_gene"] == 0.0


def test_multiword_keywords_require_the_full_phrase() -> None:
    assert extractor.extract("Machine learning models", "")["has_machine_learning"] == 1.0
    assert extractor.extract("Learning about machines", "")["has_machine_learning"] == 0.0


def test_fine_flags_overlap_group_flags() -> None:
    features = extractor.extract("A CNN for tumor images", "")
    assert features["has_deep_learning"] == 1.0
    assert features["has_cancer"] == 1.0
    assert features["has_tumor"] == 1.0


def test_memory_flag_is_not_raised_by_learning() -> None:
    assert extractor.extract("Deep learning", "")["has_memory"] == 0.0
    assert extractor.extract("Working memory in mice", "")["has_memory"] == 1.0


def test_length_features_are_scaled_and_capped() -> None:
    features = extractor.extract("x" * 50, "y" * 4000)
    assert features["title_length"] == 0.5
    assert features["abstract_length"] == 1.0


def test_stem_text_lowercases_and_splits_punctuation() -> None:
    assert stem_text("Cells, DNA-repair!") == "cell dna repair"


def test_to_array_follows_feature_order() -> None:
    features = extractor.extract("Brain neurons", "")
    vector = to_array(features)
    assert vector.shape == (len(FEATURE_NAMES),)
    assert vector[FEATURE_NAMES.index("has_brain")] == 1.0


def test_to_array_treats_missing_names_as_zero() -> None:
    vector = to_array({"has_quantum": 1})
    assert vector.sum() == 1.0
    assert np.argmax(vector) == FEATURE_NAMES.index("has_quantum")
