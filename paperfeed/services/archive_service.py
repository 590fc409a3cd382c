"""Reconciliation of newly fetched papers against the archive."""

import logging
from dataclasses import dataclass
from typing import Iterable

from paperfeed.models.paper import ArchiveRecord, Paper

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    merged: list[ArchiveRecord]
    added_count: int
    total_count: int
    dropped_count: int = 0


def reconcile(existing: list[ArchiveRecord], new_papers: Iterable[Paper]) -> ReconcileResult:
    """Merge new papers into the archived records.

    Malformed existing rows (blank title or link) are dropped.  A new paper
    whose identity key is already archived is skipped; the archived row is
    left as it was.  New records are placed before the existing ones, in
    the order given.

    Args:
        existing: Records loaded from the archive
        new_papers: Papers from the current run

    Returns:
        ReconcileResult with the full record list to persist
    """
    kept = [record for record in existing if record.is_valid]
    dropped = len(existing) - len(kept)
    if dropped:
        logger.info("Dropping %d malformed archive rows", dropped)

    seen = {record.key for record in kept}
    added: list[ArchiveRecord] = []
    for paper in new_papers:
        if not paper.is_valid or paper.key in seen:
            continue
        seen.add(paper.key)
        added.append(ArchiveRecord.from_paper(paper))

    merged = added + kept
    return ReconcileResult(
        merged=merged,
        added_count=len(added),
        total_count=len(merged),
        dropped_count=dropped,
    )


def sort_records(records: list[ArchiveRecord]) -> list[ArchiveRecord]:
    """Sort records newest first by date; ties keep their current order."""
    return sorted(records, key=lambda r: r.date, reverse=True)
