"""Normalization of raw feed entries into canonical papers."""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from dateutil import parser as dtparser

from paperfeed.models.paper import Paper
from paperfeed.services.classifier import Classifier, RuleClassifier
from paperfeed.utils.enrichment import extract_enrichment
from paperfeed.utils.text import (
    clean_title,
    extract_identifier,
    html_to_text,
    is_placeholder_title,
)

logger = logging.getLogger(__name__)

# Raw spellings of the publication date, best first
DATE_FIELDS = ("published", "pubDate", "pubdate", "updated", "dc_date", "date")
DESCRIPTION_FIELDS = ("description", "summary")


def parse_pub_date(raw: Mapping[str, Any]) -> datetime:
    """Parse the publication date from the first usable date field.

    Naive timestamps are taken as UTC.  When no field parses, the current
    time is returned instead of failing the record.
    """
    for field in DATE_FIELDS:
        value = raw.get(field)
        if not value or not isinstance(value, str):
            continue
        try:
            dt = dtparser.parse(value)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)
        except (ValueError, OverflowError) as e:
            logger.debug("Unparseable %s %r: %s", field, value, e)
    return datetime.now(timezone.utc)


def _first_text(raw: Mapping[str, Any], fields: tuple[str, ...]) -> str:
    for field in fields:
        value = raw.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


class FeedNormalizer:
    """Turn untrusted feed entries into validated, classified papers."""

    def __init__(self, classifier: Optional[Classifier] = None):
        """Initialize normalizer.

        Args:
            classifier: Subject-area classifier (rule-based when omitted)
        """
        self.classifier = classifier or RuleClassifier()

    def normalize(self, raw: Mapping[str, Any], source: str) -> Optional[Paper]:
        """Build a Paper from one raw entry, or None if it must be discarded.

        Args:
            raw: Feed entry (feedparser entry or plain dict)
            source: Institution name of the feed the entry came from

        Returns:
            Paper tagged with ``source``, or None for entries without a
            usable title or link
        """
        title = clean_title(raw.get("title"))
        link = raw.get("link") or ""
        link = link.strip() if isinstance(link, str) else ""

        if not title or is_placeholder_title(title):
            logger.warning("[%s] Skipping entry without title (link=%s)", source, link or "-")
            return None
        if not link:
            logger.warning("[%s] Skipping entry without link: %s", source, title[:80])
            return None

        description = _first_text(raw, DESCRIPTION_FIELDS)
        text = html_to_text(description)
        enrichment = extract_enrichment(text)
        classification = self.classifier.classify(title, text)

        return Paper(
            title=title,
            link=link,
            description=description,
            pub_date=parse_pub_date(raw),
            identifier=extract_identifier(link),
            institutions=[source],
            subject_area=classification.category,
            confidence=classification.confidence,
            journal=enrichment.journal,
            objective=enrichment.objective,
            significance=enrichment.significance,
            conclusion=enrichment.conclusion,
        )

    def normalize_all(self, entries: list[Mapping[str, Any]], source: str) -> list[Paper]:
        """Normalize every entry of one feed, dropping invalid ones."""
        papers = []
        for entry in entries:
            try:
                paper = self.normalize(entry, source)
            except Exception as e:
                logger.warning("[%s] Skipping entry that failed to normalize: %s", source, e)
                continue
            if paper is not None:
                papers.append(paper)
        return papers
