from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from xml.etree import ElementTree

import pytest

from paperfeed.config import SiteConfig
from paperfeed.models.paper import CANCER_RESEARCH
from paperfeed.services.export_service import ATOM_NS, JsonExporter, RssExporter
from paperfeed.services.merger import summarize

SITE = SiteConfig(
    title="Research Feed",
    description="Latest papers",
    base_url="https://example.org/feed/",
)


@pytest.fixture
def papers(make_paper):
    return [
        make_paper(
            pmid="2",
            title="Tumours & <markup> in titles",
            institutions=("KAIST", "SNU"),
            pub_date=datetime(2025, 8, 22, 10, 0, tzinfo=timezone.utc),
            subject_area=CANCER_RESEARCH,
            description="<p>Nat Commun. 2025.</p>",
            journal="Nat Commun",
        ),
        make_paper(pmid="1", institutions=("KAIST",)),
    ]


def test_empty_feed_is_well_formed(tmp_path: Path) -> None:
    path = RssExporter(tmp_path, SITE).export([])

    root = ElementTree.parse(path).getroot()

    assert root.tag == "rss"
    channel = root.find("channel")
    assert channel.findtext("title") == "Research Feed"
    assert channel.findall("item") == []
    self_link = channel.find(f"{{{ATOM_NS}}}link")
    assert self_link.get("href") == "https://example.org/feed/feed.xml"


def test_items_carry_institutions_and_subject(tmp_path: Path, papers) -> None:
    path = RssExporter(tmp_path, SITE).export(papers)

    items = ElementTree.parse(path).getroot().find("channel").findall("item")

    assert len(items) == 2
    first = items[0]
    assert first.findtext("title") == "Tumours & <markup> in titles"
    assert first.findtext("description") == "<p>Nat Commun. 2025.</p>"
    assert first.findtext("guid") == "https://pubmed.ncbi.nlm.nih.gov/2/"
    assert first.findtext("pubDate") == "Fri, 22 Aug 2025 10:00:00 GMT"
    categories = {c.get("domain"): c.text for c in first.findall("category")}
    assert categories[None] == "KAIST, SNU"
    assert categories["subject"] == CANCER_RESEARCH


def test_render_uses_given_build_date(tmp_path: Path, papers) -> None:
    now = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)
    xml = RssExporter(tmp_path, SITE).render(papers, now)
    assert "<lastBuildDate>Mon, 01 Sep 2025 12:00:00 GMT</lastBuildDate>" in xml


def test_stats_latest_item_is_first_paper(papers) -> None:
    stats = summarize(papers, ["KAIST", "SNU"])
    now = datetime(2025, 9, 1, tzinfo=timezone.utc)

    data = JsonExporter.stats_to_dict(stats, now)

    assert data["lastUpdate"] == "2025-09-01T00:00:00+00:00"
    assert data["totalItems"] == 2
    assert data["institutionBreakdown"] == {"KAIST": 2, "SNU": 1}
    assert data["multiInstitutional"] == 1
    assert data["latestItem"] == {
        "title": "Tumours & <markup> in titles",
        "date": "2025-08-22T10:00:00+00:00",
        "institutions": ["KAIST", "SNU"],
    }


def test_stats_without_papers_has_no_latest_item() -> None:
    data = JsonExporter.stats_to_dict(summarize([], ["KAIST"]))
    assert data["latestItem"] is None
    assert data["totalItems"] == 0


def test_json_feed_and_stats_files(tmp_path: Path, papers) -> None:
    exporter = JsonExporter(tmp_path / "out", SITE)
    stats = summarize(papers, ["KAIST", "SNU"])

    feed = json.loads(exporter.export_feed(papers, stats).read_text(encoding="utf-8"))
    written = json.loads(exporter.export_stats(stats).read_text(encoding="utf-8"))

    assert feed["title"] == "Research Feed"
    assert [item["identifier"] for item in feed["items"]] == ["2", "1"]
    assert feed["items"][0]["subjectArea"] == CANCER_RESEARCH
    assert feed["items"][0]["journal"] == "Nat Commun"
    assert written["latestItem"]["title"] == papers[0].title
