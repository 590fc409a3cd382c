"""Paper and archive data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from paperfeed.utils.text import extract_identifier

# ---------------------------------------------------------------------------
# Subject areas (closed set, order is the rule-classifier tie-break order)
# ---------------------------------------------------------------------------

COMPUTER_SCIENCE = "Computer Science"
BIOMEDICAL = "Biomedical"
CANCER_RESEARCH = "Cancer Research"
MATERIALS_SCIENCE = "Materials Science"
NEUROSCIENCE = "Neuroscience"
ENGINEERING = "Engineering"
ENVIRONMENTAL = "Environmental"
PHYSICS = "Physics"
MULTIDISCIPLINARY = "Multidisciplinary"

SUBJECT_AREAS: tuple[str, ...] = (
    COMPUTER_SCIENCE,
    BIOMEDICAL,
    CANCER_RESEARCH,
    MATERIALS_SCIENCE,
    NEUROSCIENCE,
    ENGINEERING,
    ENVIRONMENTAL,
    PHYSICS,
    MULTIDISCIPLINARY,
)

INSTITUTION_SEPARATOR = "; "


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Paper:
    """Canonical publication record, merged across institution feeds."""

    title: str
    link: str
    description: str = ""
    pub_date: datetime = field(default_factory=_utcnow)
    identifier: Optional[str] = None
    institutions: list[str] = field(default_factory=list)

    # Classification (set by the classifier)
    subject_area: str = MULTIDISCIPLINARY
    confidence: float = 0.0

    # Enrichment extracted from the description
    journal: Optional[str] = None
    objective: Optional[str] = None
    significance: Optional[str] = None
    conclusion: Optional[str] = None

    def __post_init__(self) -> None:
        self.institutions = sorted(set(self.institutions))

    @property
    def key(self) -> str:
        """Identity key: the extracted identifier, falling back to the link."""
        return self.identifier or self.link

    @property
    def is_valid(self) -> bool:
        return bool(self.title.strip()) and bool(self.link.strip())

    @property
    def is_multi_institutional(self) -> bool:
        return len(self.institutions) > 1

    def add_institution(self, name: str) -> None:
        """Attribute this paper to another institution (sorted, no duplicates)."""
        if name and name not in self.institutions:
            self.institutions = sorted({*self.institutions, name})


@dataclass
class ArchiveRecord:
    """One row of the persisted archive (schema v1).

    The column order in :data:`ARCHIVE_COLUMNS` is a stable contract;
    changing it requires a migration, see ``paperfeed migrate-archive``.
    """

    institutions: str
    date: str
    title: str
    subject_area: str
    journal: str
    link: str

    @classmethod
    def from_paper(cls, paper: Paper) -> "ArchiveRecord":
        return cls(
            institutions=INSTITUTION_SEPARATOR.join(paper.institutions),
            date=paper.pub_date.date().isoformat(),
            title=paper.title,
            subject_area=paper.subject_area,
            journal=paper.journal or "",
            link=paper.link,
        )

    @classmethod
    def from_row(cls, row: dict[str, Optional[str]]) -> "ArchiveRecord":
        """Build a record from a ``csv.DictReader`` row keyed by column name."""
        values = [(row.get(col) or "").strip() for col in ARCHIVE_COLUMNS]
        return cls(*values)

    def to_row(self) -> list[str]:
        return [
            self.institutions,
            self.date,
            self.title,
            self.subject_area,
            self.journal,
            self.link,
        ]

    @property
    def key(self) -> str:
        return extract_identifier(self.link) or self.link

    @property
    def is_valid(self) -> bool:
        return bool(self.title.strip()) and bool(self.link.strip())

    @property
    def institution_list(self) -> list[str]:
        return [
            name.strip()
            for name in self.institutions.split(INSTITUTION_SEPARATOR.strip())
            if name.strip()
        ]


ARCHIVE_SCHEMA_VERSION = 1
ARCHIVE_COLUMNS: list[str] = [
    "Institutions",
    "Date",
    "Title",
    "Subject Area",
    "Journal",
    "Link",
]
