"""Service layer."""

from paperfeed.services.archive_service import ReconcileResult, reconcile
from paperfeed.services.classifier import (
    Classification,
    Classifier,
    RuleClassifier,
    TrainedClassifier,
    create_classifier,
)
from paperfeed.services.export_service import JsonExporter, RssExporter
from paperfeed.services.feed_service import FeedResult, FeedService
from paperfeed.services.features import FeatureExtractor
from paperfeed.services.merger import FeedStats, merge_papers, summarize
from paperfeed.services.normalizer import FeedNormalizer
from paperfeed.services.pipeline import AggregationPipeline, PipelineResult

__all__ = [
    "AggregationPipeline",
    "Classification",
    "Classifier",
    "FeatureExtractor",
    "FeedNormalizer",
    "FeedResult",
    "FeedService",
    "FeedStats",
    "JsonExporter",
    "PipelineResult",
    "ReconcileResult",
    "RssExporter",
    "RuleClassifier",
    "TrainedClassifier",
    "create_classifier",
    "merge_papers",
    "reconcile",
    "summarize",
]
