"""Pattern tables for pulling structured fields out of feed descriptions.

Each field has an ordered list of ``(pattern, group)`` pairs. Patterns are
tried in order over the plain-text description; the first one that matches
wins and ``group`` selects the capture (0 for the whole match).
"""

import re
from dataclasses import dataclass
from typing import Optional

from paperfeed.utils.text import truncate

PatternTable = list[tuple[re.Pattern, int]]

# Lookahead that ends a structured-abstract section: the next "HEADING:" or end
_NEXT_SECTION = r"(?=\s+[A-Z][A-Z ]{3,}:|$)"

JOURNAL_PATTERNS: PatternTable = [
    (re.compile(r"\bJournal:\s*([^.\n|]+)"), 1),
    # PubMed citation line: "Nat Commun. 2025 Aug 22;16(1):7821."
    (re.compile(r"^\s*([A-Z][A-Za-z&\- ]{1,80}?)\.\s+(?:19|20)\d{2}\b"), 1),
    (re.compile(r"\bPublished in\s+([^.\n|]+)"), 1),
]

OBJECTIVE_PATTERNS: PatternTable = [
    (re.compile(r"\b(?:OBJECTIVES?|PURPOSE|AIMS?)\s*:\s*(.+?)" + _NEXT_SECTION), 1),
    (re.compile(r"\b(?:This study|We) (?:aimed|aims|sought|seek) to\s+(.+?\.)(?:\s|$)"), 1),
    (re.compile(r"\bBACKGROUND\s*:\s*(.+?)" + _NEXT_SECTION), 1),
]

SIGNIFICANCE_PATTERNS: PatternTable = [
    (re.compile(r"\bSIGNIFICANCE(?: STATEMENT)?\s*:\s*(.+?)" + _NEXT_SECTION), 1),
    (re.compile(
        r"\b(?:These|Our) (?:findings|results) (?:suggest|indicate|highlight|provide|demonstrate)\b.+?\.(?:\s|$)"
    ), 0),
    (re.compile(r"\bThis (?:work|study) (?:provides|offers|highlights)\b.+?\.(?:\s|$)"), 0),
]

CONCLUSION_PATTERNS: PatternTable = [
    (re.compile(r"\bCONCLUSIONS?(?: AND RELEVANCE)?\s*:\s*(.+?)" + _NEXT_SECTION), 1),
    (re.compile(r"\bIn conclusion,\s*(.+?\.)(?:\s|$)", re.IGNORECASE), 1),
    (re.compile(r"\bWe conclude that\s+(.+?\.)(?:\s|$)"), 1),
]

JOURNAL_MAX_LEN = 100
SECTION_MAX_LEN = 300


@dataclass
class Enrichment:
    """Optional structured fields found in a description."""

    journal: Optional[str] = None
    objective: Optional[str] = None
    significance: Optional[str] = None
    conclusion: Optional[str] = None


def first_match(text: str, patterns: PatternTable, max_len: int) -> Optional[str]:
    """Return the first pattern capture found in ``text``, truncated to ``max_len``."""
    if not text:
        return None
    for pattern, group in patterns:
        match = pattern.search(text)
        if not match:
            continue
        value = (match.group(group) or "").strip()
        if value:
            return truncate(value, max_len)
    return None


def extract_enrichment(text: str) -> Enrichment:
    """Run every field table over a plain-text description."""
    return Enrichment(
        journal=first_match(text, JOURNAL_PATTERNS, JOURNAL_MAX_LEN),
        objective=first_match(text, OBJECTIVE_PATTERNS, SECTION_MAX_LEN),
        significance=first_match(text, SIGNIFICANCE_PATTERNS, SECTION_MAX_LEN),
        conclusion=first_match(text, CONCLUSION_PATTERNS, SECTION_MAX_LEN),
    )
