"""RSS and JSON export services."""

import json
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Any, Optional
from xml.etree.ElementTree import Element, SubElement, tostring

from paperfeed.config import SiteConfig
from paperfeed.models.paper import Paper
from paperfeed.services.merger import FeedStats

ATOM_NS = "http://www.w3.org/2005/Atom"


def _iso(dt: Optional[datetime]) -> str:
    return (dt or datetime.now(timezone.utc)).isoformat()


class RssExporter:
    """Writes the RSS 2.0 feed (``feed.xml``)."""

    def __init__(self, output_dir: Path, site: SiteConfig):
        """Initialize exporter.

        Args:
            output_dir: Directory to write the feed into
            site: Channel metadata
        """
        self.output_dir = output_dir
        self.site = site
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def render(self, papers: list[Paper], now: Optional[datetime] = None) -> str:
        """Render papers as an RSS 2.0 document string."""
        now = now or datetime.now(timezone.utc)

        rss = Element("rss", version="2.0")
        rss.set("xmlns:atom", ATOM_NS)
        channel = SubElement(rss, "channel")

        SubElement(channel, "title").text = self.site.title
        SubElement(channel, "description").text = self.site.description
        SubElement(channel, "link").text = self.site.base_url
        atom_link = SubElement(channel, "atom:link")
        atom_link.set("href", self.site.base_url.rstrip("/") + "/feed.xml")
        atom_link.set("rel", "self")
        atom_link.set("type", "application/rss+xml")
        SubElement(channel, "lastBuildDate").text = format_datetime(now, usegmt=True)
        SubElement(channel, "language").text = self.site.language
        SubElement(channel, "ttl").text = str(self.site.ttl)

        for paper in papers:
            item = SubElement(channel, "item")
            SubElement(item, "title").text = paper.title
            SubElement(item, "link").text = paper.link
            SubElement(item, "description").text = paper.description
            SubElement(item, "pubDate").text = format_datetime(
                paper.pub_date.astimezone(timezone.utc), usegmt=True
            )
            guid = SubElement(item, "guid", isPermaLink="true")
            guid.text = paper.link
            SubElement(item, "category").text = ", ".join(paper.institutions)
            SubElement(item, "category", domain="subject").text = paper.subject_area

        body = tostring(rss, encoding="unicode")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"

    def export(self, papers: list[Paper], filename: str = "feed.xml") -> Path:
        """Write the feed file (overwrites if exists) and return its path."""
        filepath = self.output_dir / filename
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.render(papers))
        return filepath


class JsonExporter:
    """Writes the JSON feed (``feed.json``) and run statistics (``stats.json``)."""

    def __init__(self, output_dir: Path, site: SiteConfig):
        self.output_dir = output_dir
        self.site = site
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def paper_to_dict(paper: Paper) -> dict[str, Any]:
        return {
            "title": paper.title,
            "link": paper.link,
            "description": paper.description,
            "pubDate": _iso(paper.pub_date),
            "institutions": list(paper.institutions),
            "identifier": paper.identifier,
            "subjectArea": paper.subject_area,
            "confidence": paper.confidence,
            "journal": paper.journal,
            "objective": paper.objective,
            "significance": paper.significance,
            "conclusion": paper.conclusion,
        }

    @staticmethod
    def stats_to_dict(stats: FeedStats, now: Optional[datetime] = None) -> dict[str, Any]:
        latest = None
        if stats.latest is not None:
            latest = {
                "title": stats.latest.title,
                "date": _iso(stats.latest.pub_date),
                "institutions": stats.latest.institutions or ["Unknown"],
            }
        return {
            "lastUpdate": _iso(now),
            "totalItems": stats.total,
            "institutionBreakdown": dict(stats.institution_counts),
            "subjectAreas": dict(stats.subject_counts),
            "multiInstitutional": stats.multi_institutional,
            "latestItem": latest,
        }

    def export_feed(self, papers: list[Paper], stats: FeedStats, filename: str = "feed.json") -> Path:
        """Write the JSON feed with all items and the institution breakdown."""
        payload = {
            "title": self.site.title,
            "description": self.site.description,
            "lastBuildDate": _iso(None),
            "totalItems": stats.total,
            "institutionBreakdown": dict(stats.institution_counts),
            "subjectAreas": dict(stats.subject_counts),
            "items": [self.paper_to_dict(p) for p in papers],
        }
        return self._write(filename, payload)

    def export_stats(self, stats: FeedStats, filename: str = "stats.json") -> Path:
        """Write the run statistics."""
        return self._write(filename, self.stats_to_dict(stats))

    def _write(self, filename: str, payload: dict[str, Any]) -> Path:
        filepath = self.output_dir / filename
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        return filepath
