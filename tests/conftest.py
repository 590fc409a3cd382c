from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from paperfeed.config import Settings
from paperfeed.models.paper import MULTIDISCIPLINARY, Paper

SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>PubMed search</title>
    <link>https://pubmed.ncbi.nlm.nih.gov/</link>
    <description>Saved search</description>
    <item>
      <title>Deep learning for tumor detection</title>
      <link>https://pubmed.ncbi.nlm.nih.gov/40846715/</link>
      <description>&lt;p&gt;Nat Commun. 2025 Aug 22;16(1):7821.&lt;/p&gt;&lt;p&gt;We trained a neural network to predict chemotherapy response.&lt;/p&gt;</description>
      <pubDate>Fri, 22 Aug 2025 06:00:00 -0400</pubDate>
    </item>
    <item>
      <title>Quantum optics with entangled photons</title>
      <link>https://pubmed.ncbi.nlm.nih.gov/40846716/</link>
      <description>A laser spectroscopy experiment.</description>
      <pubDate>Thu, 21 Aug 2025 06:00:00 -0400</pubDate>
    </item>
    <item>
      <title></title>
      <link>https://pubmed.ncbi.nlm.nih.gov/40846717/</link>
      <description>Entry without a title.</description>
    </item>
  </channel>
</rss>
"""


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """Every test starts without a cached Settings singleton."""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def make_paper() -> Callable[..., Paper]:
    """Factory for papers keyed by a PubMed link."""

    def _make(
        pmid: str = "1000",
        title: str = "A paper",
        institutions: tuple[str, ...] = ("Inst-A",),
        pub_date: datetime = datetime(2025, 8, 22, tzinfo=timezone.utc),
        subject_area: str = MULTIDISCIPLINARY,
        **kwargs,
    ) -> Paper:
        return Paper(
            title=title,
            link=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
            pub_date=pub_date,
            identifier=pmid,
            institutions=list(institutions),
            subject_area=subject_area,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_rss() -> bytes:
    return SAMPLE_RSS
