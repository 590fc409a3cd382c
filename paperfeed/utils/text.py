"""Text utilities for feed titles, descriptions and identifiers."""

import re
from typing import Optional

from bs4 import BeautifulSoup

# https://pubmed.ncbi.nlm.nih.gov/12345678/ -> 12345678
PMID_RE = re.compile(r"pubmed\.ncbi\.nlm\.nih\.gov/(\d+)", re.IGNORECASE)

# DOI regex pattern: 10.XXXX/... format, only trusted inside a doi.org link
DOI_LINK_RE = re.compile(
    r"(?:dx\.)?doi\.org/(10\.\d{4,9}/[-._;()/:A-Z0-9]+)", re.IGNORECASE
)

ELLIPSIS = "..."

# Titles some feeds emit instead of leaving the field empty
PLACEHOLDER_TITLES = frozenset({"no title", "(no title)", "untitled"})


def normalize_doi(doi: str) -> str:
    """Normalize DOI by removing URL prefixes and converting to lowercase."""
    doi = doi.strip()
    doi = re.sub(r"^https?://(?:dx\.)?doi\.org/", "", doi, flags=re.IGNORECASE)
    return doi.strip().rstrip("/").lower()


def extract_pmid(url: str) -> Optional[str]:
    """Extract a PubMed ID from a PubMed article URL."""
    if not url:
        return None
    match = PMID_RE.search(url)
    return match.group(1) if match else None


def extract_identifier(url: str) -> Optional[str]:
    """Extract the stable publication identifier from a link.

    PubMed IDs are preferred; a DOI is used when the link points at
    ``doi.org``. Returns None when the link has neither shape.
    """
    if not url or not isinstance(url, str):
        return None
    pmid = extract_pmid(url)
    if pmid:
        return pmid
    match = DOI_LINK_RE.search(url)
    if match:
        return normalize_doi(match.group(1))
    return None


def clean_title(text: Optional[str]) -> str:
    """Clean title by removing MathML/HTML tags and normalizing whitespace.

    Args:
        text: Raw title string (may be None or contain markup)

    Returns:
        Cleaned title, or an empty string when nothing usable remains
    """
    if not text or not isinstance(text, str):
        return ""

    # Remove <math ...>...</math> blocks (including attributes, multiline)
    text = re.sub(r"<math[\s>].*?</math>", " ", text, flags=re.DOTALL | re.IGNORECASE)
    # Remove remaining HTML tags
    text = re.sub(r"<[^>]+>", " ", text)

    text = text.replace("&nbsp;", " ")
    text = text.replace("&amp;", "&")
    text = text.replace("&lt;", "<")
    text = text.replace("&gt;", ">")
    text = text.replace("&quot;", '"')
    text = text.replace("&#39;", "'")

    return " ".join(text.split()).strip()


def is_placeholder_title(title: str) -> bool:
    return title.strip().lower() in PLACEHOLDER_TITLES


def html_to_text(text: Optional[str]) -> str:
    """Convert an HTML feed description to whitespace-normalized plain text.

    MathML blocks are dropped; block-level tags become spaces so that
    adjacent paragraphs do not run together.
    """
    if not text:
        return ""
    soup = BeautifulSoup(text, "html.parser")
    for math_tag in soup.find_all(["math", "mml:math"]):
        math_tag.decompose()
    return " ".join(soup.get_text(" ").split())


def truncate(text: str, max_len: int) -> str:
    """Truncate to at most ``max_len`` characters, marking the cut with an ellipsis."""
    text = text.strip()
    if len(text) <= max_len:
        return text
    return text[: max_len - len(ELLIPSIS)].rstrip() + ELLIPSIS
