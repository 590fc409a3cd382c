from __future__ import annotations

from unittest.mock import patch

import requests

from paperfeed.config import FeedSource
from paperfeed.models.paper import CANCER_RESEARCH
from paperfeed.services.feed_service import USER_AGENT, FeedService
from paperfeed.services.normalizer import FeedNormalizer

KAIST = FeedSource("KAIST", "https://feeds.example/kaist")
SNU = FeedSource("SNU", "https://feeds.example/snu")


class FakeResponse:
    def __init__(self, content: bytes, status: int = 200):
        self.content = content
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    """Serves canned responses per URL; exceptions are raised on get."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.headers: dict[str, str] = {}
        self.requested: list[str] = []

    def get(self, url: str, timeout: float = None) -> FakeResponse:
        self.requested.append(url)
        outcome = self.routes[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _service(routes: dict, feeds=None, **kwargs) -> FeedService:
    return FeedService(
        feeds if feeds is not None else [KAIST, SNU],
        FeedNormalizer(),
        session=FakeSession(routes),
        **kwargs,
    )


def test_fetch_feed_normalizes_entries(sample_rss: bytes) -> None:
    service = _service({KAIST.url: FakeResponse(sample_rss)})

    result = service.fetch_feed(KAIST)

    assert result.ok
    assert [p.identifier for p in result.papers] == ["40846715", "40846716"]
    assert all(p.institutions == ["KAIST"] for p in result.papers)
    assert result.papers[0].subject_area == CANCER_RESEARCH
    assert service.session.headers["User-Agent"] == USER_AGENT


def test_network_error_gives_empty_result() -> None:
    service = _service({KAIST.url: requests.ConnectionError("connection refused")})

    result = service.fetch_feed(KAIST)

    assert not result.ok
    assert result.papers == []
    assert "connection refused" in result.error


def test_http_error_gives_empty_result() -> None:
    service = _service({KAIST.url: FakeResponse(b"oops", status=503)})
    result = service.fetch_feed(KAIST)
    assert result.papers == []
    assert "503" in result.error


def test_unparseable_document_gives_no_papers() -> None:
    service = _service({KAIST.url: FakeResponse(b"<html><body>Not a feed")})
    result = service.fetch_feed(KAIST)
    assert result.papers == []


def test_entries_per_feed_are_capped(sample_rss: bytes) -> None:
    service = _service({KAIST.url: FakeResponse(sample_rss)}, max_entries_per_feed=1)
    assert len(service.fetch_feed(KAIST).papers) == 1


def test_one_failing_feed_does_not_stop_the_others(sample_rss: bytes) -> None:
    service = _service(
        {KAIST.url: requests.Timeout("timed out"), SNU.url: FakeResponse(sample_rss)},
        request_delay=0,
    )

    results = service.fetch_all()

    assert [r.source.name for r in results] == ["KAIST", "SNU"]
    assert not results[0].ok
    assert len(results[1].papers) == 2


def test_sequential_fetch_sleeps_between_requests(sample_rss: bytes) -> None:
    service = _service(
        {KAIST.url: FakeResponse(sample_rss), SNU.url: FakeResponse(sample_rss)},
        request_delay=1.5,
    )

    with patch("paperfeed.services.feed_service.time.sleep") as sleep:
        service.fetch_all()

    sleep.assert_called_once_with(1.5)
    assert service.session.requested == [KAIST.url, SNU.url]


def test_concurrent_fetch_keeps_feed_order(sample_rss: bytes) -> None:
    service = _service(
        {KAIST.url: FakeResponse(sample_rss), SNU.url: requests.ConnectionError("down")},
    )

    with patch("paperfeed.services.feed_service.time.sleep") as sleep:
        results = service.fetch_all(concurrent=True)

    sleep.assert_not_called()
    assert [r.source.name for r in results] == ["KAIST", "SNU"]
    assert results[0].ok and not results[1].ok


def test_no_feeds_fetches_nothing() -> None:
    service = _service({}, feeds=[])
    assert service.fetch_all() == []
    assert service.fetch_all(concurrent=True) == []


def test_check_feed_accepts_feed_with_entries(sample_rss: bytes) -> None:
    service = _service({KAIST.url: FakeResponse(sample_rss)})
    assert service.check_feed(KAIST) == (True, None)


def test_check_feed_rejects_empty_channel() -> None:
    empty = b'<?xml version="1.0"?><rss version="2.0"><channel><title>x</title></channel></rss>'
    service = _service({KAIST.url: FakeResponse(empty)})
    ok, error = service.check_feed(KAIST)
    assert not ok
    assert error


def test_check_feed_reports_network_errors() -> None:
    service = _service({KAIST.url: requests.ConnectionError("dns failure")})
    ok, error = service.check_feed(KAIST)
    assert not ok
    assert "dns failure" in error


def test_check_all_pauses_between_probes(sample_rss: bytes) -> None:
    service = _service(
        {KAIST.url: FakeResponse(sample_rss), SNU.url: requests.ConnectionError("down")},
        request_delay=2.0,
    )

    with patch("paperfeed.services.feed_service.time.sleep") as sleep:
        checks = service.check_all()

    sleep.assert_called_once_with(2.0)
    assert checks[KAIST.url] == (True, None)
    assert checks[SNU.url][0] is False
