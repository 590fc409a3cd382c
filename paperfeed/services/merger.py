"""Cross-feed deduplication and aggregate counts."""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional

from paperfeed.models.paper import SUBJECT_AREAS, Paper


def merge_papers(feed_results: Iterable[Iterable[Paper]]) -> list[Paper]:
    """Combine per-feed paper lists into one deduplicated list.

    Papers are matched on :attr:`Paper.key`.  The first occurrence becomes
    the canonical record for every field (first writer wins); later
    occurrences only contribute their institutions.  Input papers are not
    mutated.

    Args:
        feed_results: One list of papers per fetched feed; empty lists are fine

    Returns:
        Canonical papers in first-seen order
    """
    merged: dict[str, Paper] = {}
    for papers in feed_results:
        for paper in papers:
            existing = merged.get(paper.key)
            if existing is None:
                merged[paper.key] = replace(paper, institutions=list(paper.institutions))
                continue
            for institution in paper.institutions:
                existing.add_institution(institution)
    return list(merged.values())


def sort_by_date(papers: list[Paper]) -> list[Paper]:
    """Return papers sorted newest first; equal dates keep their order."""
    return sorted(papers, key=lambda p: p.pub_date, reverse=True)


@dataclass
class LatestItem:
    title: str
    pub_date: datetime
    institutions: list[str]


@dataclass
class FeedStats:
    """Aggregate counts over a final paper list, for presentation layers."""

    total: int = 0
    institution_counts: dict[str, int] = field(default_factory=dict)
    subject_counts: dict[str, int] = field(default_factory=dict)
    multi_institutional: int = 0
    latest: Optional[LatestItem] = None


def summarize(papers: list[Paper], institutions: Optional[list[str]] = None) -> FeedStats:
    """Compute counts over ``papers`` (expected sorted newest first).

    Args:
        papers: Final deduplicated list
        institutions: Configured institution names; each gets a count even
            when zero.  Institutions seen only in papers are appended.

    Returns:
        FeedStats with the latest item taken from ``papers[0]``
    """
    institution_counts: Counter[str] = Counter()
    for paper in papers:
        institution_counts.update(paper.institutions)

    names = list(dict.fromkeys(institutions or []))
    names += sorted(name for name in institution_counts if name not in names)

    subjects = Counter(paper.subject_area for paper in papers)

    latest = None
    if papers:
        first = papers[0]
        latest = LatestItem(
            title=first.title,
            pub_date=first.pub_date,
            institutions=list(first.institutions),
        )

    return FeedStats(
        total=len(papers),
        institution_counts={name: institution_counts.get(name, 0) for name in names},
        subject_counts={area: subjects[area] for area in SUBJECT_AREAS if subjects[area]},
        multi_institutional=sum(1 for p in papers if p.is_multi_institutional),
        latest=latest,
    )
