"""CSV-backed archive of every paper ever published by the feed."""

import csv
import logging
from pathlib import Path
from typing import Optional

from paperfeed.models.paper import ARCHIVE_COLUMNS, ARCHIVE_SCHEMA_VERSION, ArchiveRecord

logger = logging.getLogger(__name__)

# Header names used by earlier archive layouts, mapped onto schema v1
LEGACY_COLUMN_ALIASES: dict[str, str] = {
    "institution": "Institutions",
    "institutions": "Institutions",
    "source": "Institutions",
    "date": "Date",
    "pubdate": "Date",
    "published": "Date",
    "title": "Title",
    "subject": "Subject Area",
    "subject area": "Subject Area",
    "subject_area": "Subject Area",
    "category": "Subject Area",
    "journal": "Journal",
    "link": "Link",
    "url": "Link",
}


class ArchiveSchemaError(Exception):
    """The archive header does not match the current schema."""


class ArchiveRepository:
    """Read and rewrite the archive CSV.

    Every field is written quoted with embedded quotes doubled (RFC 4180),
    so titles containing commas, quotes or newlines survive a round trip.
    The store assumes a single writer: load, reconcile, save.
    """

    def __init__(self, path: Path):
        """Initialize repository with archive path.

        Args:
            path: Path to the archive CSV file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists() and self.path.stat().st_size > 0

    def load(self) -> list[ArchiveRecord]:
        """Load all archived records.

        A missing, unreadable or corrupt file is treated as an empty
        archive.  A readable file with a different header raises
        :class:`ArchiveSchemaError` so that it is never silently rewritten.
        """
        if not self.exists():
            return []
        try:
            with open(self.path, "r", newline="", encoding="utf-8-sig") as f:
                reader = csv.DictReader(f)
                header = reader.fieldnames or []
                if [name.strip() for name in header] != ARCHIVE_COLUMNS:
                    raise ArchiveSchemaError(
                        f"{self.path} has columns {header}, expected {ARCHIVE_COLUMNS} "
                        f"(schema v{ARCHIVE_SCHEMA_VERSION}); run `paperfeed migrate-archive`"
                    )
                return [ArchiveRecord.from_row(row) for row in reader]
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.warning("Could not read archive %s, starting empty: %s", self.path, e)
            return []

    def save(self, records: list[ArchiveRecord]) -> Path:
        """Overwrite the archive with ``records`` (header included)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL)
            writer.writerow(ARCHIVE_COLUMNS)
            for record in records:
                writer.writerow(record.to_row())
        return self.path

    def migrate(self) -> Optional[int]:
        """Rewrite a legacy-layout archive into the current schema.

        Columns are matched case-insensitively through
        :data:`LEGACY_COLUMN_ALIASES`; columns that do not exist in the old
        file are left blank.  Rows without a title or link are dropped.

        Returns:
            Number of records written, or None if there was nothing to do
        """
        if not self.exists():
            return None

        with open(self.path, "r", newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            header = reader.fieldnames or []
            if [name.strip() for name in header] == ARCHIVE_COLUMNS:
                return None
            mapping = {
                name: LEGACY_COLUMN_ALIASES.get(name.strip().lower())
                for name in header
            }
            if "Title" not in mapping.values() or "Link" not in mapping.values():
                raise ArchiveSchemaError(
                    f"Cannot migrate {self.path}: no title/link columns in {header}"
                )
            records = []
            for row in reader:
                converted = {
                    target: row.get(source)
                    for source, target in mapping.items()
                    if target
                }
                record = ArchiveRecord.from_row(converted)
                if record.is_valid:
                    records.append(record)

        self.save(records)
        logger.info("Migrated %s to schema v%d (%d records)", self.path, ARCHIVE_SCHEMA_VERSION, len(records))
        return len(records)
