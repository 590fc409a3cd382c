"""End-to-end aggregation run: fetch, merge, sort, archive, summarize."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from paperfeed.database.archive import ArchiveRepository, ArchiveSchemaError
from paperfeed.models.paper import Paper
from paperfeed.services.archive_service import ReconcileResult, reconcile, sort_records
from paperfeed.services.feed_service import FeedResult, FeedService
from paperfeed.services.merger import FeedStats, merge_papers, sort_by_date, summarize

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything the output writers and console need from one run."""

    papers: list[Paper]
    stats: FeedStats
    feed_results: list[FeedResult] = field(default_factory=list)
    unique_count: int = 0
    archive: Optional[ReconcileResult] = None
    archive_error: Optional[str] = None

    @property
    def failed_feeds(self) -> list[FeedResult]:
        return [r for r in self.feed_results if not r.ok]


class AggregationPipeline:
    """Orchestrates one aggregation run over the configured feeds."""

    def __init__(
        self,
        feed_service: FeedService,
        archive: Optional[ArchiveRepository] = None,
        max_items: int = 100,
    ):
        """Initialize pipeline.

        Args:
            feed_service: Fetches and normalizes every feed
            archive: Archive store to reconcile into (skipped when None)
            max_items: Number of newest papers kept for the published feeds
        """
        self.feed_service = feed_service
        self.archive = archive
        self.max_items = max_items

    def run(self, concurrent: bool = False) -> PipelineResult:
        feed_results = self.feed_service.fetch_all(concurrent=concurrent)
        logger.info(
            "Raw items from feeds: %s",
            ", ".join(f"{r.source.name}: {len(r.papers)}" for r in feed_results) or "none",
        )

        papers = sort_by_date(merge_papers(r.papers for r in feed_results))
        multi = sum(1 for p in papers if p.is_multi_institutional)
        logger.info("After deduplication: %d unique items (%d multi-institutional)", len(papers), multi)

        archive_result = None
        archive_error = None
        if self.archive is not None:
            try:
                archive_result = self.update_archive(papers)
            except ArchiveSchemaError as e:
                # File left untouched; the feeds are still published
                logger.error("Archive not updated: %s", e)
                archive_error = str(e)

        display = papers[: self.max_items]
        institutions = [feed.name for feed in self.feed_service.feeds]
        return PipelineResult(
            papers=display,
            stats=summarize(display, institutions),
            feed_results=feed_results,
            unique_count=len(papers),
            archive=archive_result,
            archive_error=archive_error,
        )

    def update_archive(self, papers: list[Paper]) -> ReconcileResult:
        """Reconcile ``papers`` into the archive and rewrite it sorted by date."""
        if self.archive is None:
            raise ValueError("Pipeline has no archive configured")
        result = reconcile(self.archive.load(), papers)
        result.merged = sort_records(result.merged)
        self.archive.save(result.merged)
        logger.info(
            "Archive: %d new, %d total, %d malformed rows removed",
            result.added_count, result.total_count, result.dropped_count,
        )
        return result
