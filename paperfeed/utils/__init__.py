"""Utility functions."""

from paperfeed.utils.enrichment import Enrichment, extract_enrichment
from paperfeed.utils.text import (
    clean_title,
    extract_identifier,
    extract_pmid,
    html_to_text,
    normalize_doi,
    truncate,
)

__all__ = [
    "Enrichment",
    "clean_title",
    "extract_enrichment",
    "extract_identifier",
    "extract_pmid",
    "html_to_text",
    "normalize_doi",
    "truncate",
]
