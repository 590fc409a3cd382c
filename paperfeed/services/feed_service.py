"""RSS feed fetching service."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

import feedparser
import requests

from paperfeed.config import FeedSource
from paperfeed.models.paper import Paper
from paperfeed.services.normalizer import FeedNormalizer

logger = logging.getLogger(__name__)

USER_AGENT = "paperfeed/1.0 (+https://github.com/paperfeed)"


@dataclass
class FeedResult:
    """Papers produced by one feed; ``error`` is set when the fetch failed."""

    source: FeedSource
    papers: list[Paper] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FeedService:
    """Service for fetching and normalizing institution RSS feeds."""

    def __init__(
        self,
        feeds: list[FeedSource],
        normalizer: FeedNormalizer,
        request_delay: float = 2.0,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        max_entries_per_feed: int = 200,
    ):
        """Initialize feed service.

        Args:
            feeds: Institution feeds to fetch, in reporting order
            normalizer: Turns raw entries into classified papers
            request_delay: Pause between sequential requests (seconds)
            timeout: HTTP timeout per request (seconds)
            session: Optional requests session (shared connection pool)
            max_entries_per_feed: Maximum entries taken from each feed
        """
        self.feeds = feeds
        self.normalizer = normalizer
        self.request_delay = request_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.max_entries_per_feed = max_entries_per_feed

    def fetch_feed(self, source: FeedSource) -> FeedResult:
        """Fetch and normalize one feed.

        Never raises: network errors, HTTP errors and unparseable documents
        produce an empty result with ``error`` set.
        """
        logger.info("Fetching %s feed...", source.name)
        try:
            response = self.session.get(source.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Error fetching %s feed: %s", source.name, e)
            return FeedResult(source, error=str(e))

        parsed = feedparser.parse(response.content)
        entries = list(parsed.entries)[: self.max_entries_per_feed]
        if not entries:
            if parsed.bozo:
                reason = f"malformed feed: {parsed.bozo_exception}"
                logger.warning("Error parsing %s feed: %s", source.name, reason)
                return FeedResult(source, error=reason)
            logger.info("No items found in %s feed", source.name)
            return FeedResult(source)

        papers = self.normalizer.normalize_all(entries, source.name)
        logger.info("%s: %d items", source.name, len(papers))
        return FeedResult(source, papers=papers)

    def fetch_all(self, concurrent: bool = False, max_workers: int = 4) -> list[FeedResult]:
        """Fetch every configured feed.

        Sequential mode sleeps ``request_delay`` between requests so that
        repeated hits on one host stay polite.  Concurrent mode fetches on a
        thread pool.  Either way the results come back in feed order, after
        all fetches have finished.
        """
        if not self.feeds:
            return []

        if concurrent:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                return list(executor.map(self.fetch_feed, self.feeds))

        results: list[FeedResult] = []
        for i, source in enumerate(self.feeds):
            if i > 0 and self.request_delay > 0:
                time.sleep(self.request_delay)
            results.append(self.fetch_feed(source))
        return results

    def check_feed(self, source: FeedSource) -> tuple[bool, Optional[str]]:
        """Check if a feed URL is reachable and has entries.

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            response = self.session.get(source.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            return False, str(e)
        parsed = feedparser.parse(response.content)
        if not parsed.entries:
            if parsed.bozo:
                return False, str(parsed.bozo_exception)
            return False, "No entries found"
        return True, None

    def check_all(self) -> dict[str, tuple[bool, Optional[str]]]:
        """Check every configured feed, pausing ``request_delay`` between probes.

        Returns:
            Mapping of feed URL to the ``(is_valid, error_message)`` pair
        """
        checks: dict[str, tuple[bool, Optional[str]]] = {}
        for i, source in enumerate(self.feeds):
            if i > 0 and self.request_delay > 0:
                time.sleep(self.request_delay)
            checks[source.url] = self.check_feed(source)
        return checks
