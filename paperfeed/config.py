"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk.

All user-editable configuration lives under ``.metadata/``:

* ``feeds.yaml``     – institution feeds (name + RSS URL)
* ``settings.yaml``  – site metadata and fetch/output options

On first run, missing files are copied from ``.metadata.example/``.

The pipeline itself never reads ``Settings``; the CLI turns it into
explicit arguments (:class:`FeedSource` lists, :class:`SiteConfig`, paths).
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass
class FeedSource:
    """A single institution RSS feed; ``name`` is the institution tag."""

    name: str
    url: str


@dataclass
class SiteConfig:
    """Channel metadata for the published RSS/JSON feeds."""

    title: str = "Academic Publications"
    description: str = "Latest research publications (deduplicated)"
    base_url: str = "https://example.github.io/paperfeed/"
    language: str = "en-us"
    ttl: int = 360


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings, a singleton with runtime-mutable values.

    Usage::

        settings = Settings.load()                  # first call → create
        settings = Settings.load()                  # later → same object
        settings.update(max_items=50)               # runtime change
        settings = Settings.reload(Path("/srv/x"))  # re-read from disk
    """

    base_dir: Path = Path(".")
    metadata_dir: Path = Path(".metadata")
    output_dir: Path = Path("output")
    archive_path: Path = Path("output/archive.csv")
    model_path: Path = Path(".models/subject_classifier.joblib")

    feeds: list[FeedSource] = field(default_factory=list)
    site: SiteConfig = field(default_factory=SiteConfig)

    max_items: int = 100
    request_delay: float = 2.0
    request_timeout: float = 30.0
    concurrent_fetch: bool = False
    log_level: str = "INFO"

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(output_dir=Path("/tmp/out"))
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    @property
    def institutions(self) -> list[str]:
        """Configured institution names, in feed order, without duplicates."""
        return list(dict.fromkeys(feed.name for feed in self.feeds))

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the project
        root (defaults to the repository root one level above ``paperfeed/``).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path(__file__).resolve().parent.parent

        metadata_dir = base_dir / ".metadata"
        cls._ensure_default_files(base_dir, metadata_dir)

        feeds = _load_feeds(metadata_dir / "feeds.yaml")
        options = _load_options(metadata_dir / "settings.yaml")

        output_dir = base_dir / options.pop("output_dir", "output")
        return cls(
            base_dir=base_dir,
            metadata_dir=metadata_dir,
            output_dir=output_dir,
            archive_path=output_dir / "archive.csv",
            model_path=base_dir / ".models" / "subject_classifier.joblib",
            feeds=feeds,
            **options,
        )

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)

    # ── Private ───────────────────────────────────────────────────────

    @staticmethod
    def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
        """Copy ``.metadata.example/`` templates when real files are missing."""
        metadata_dir.mkdir(parents=True, exist_ok=True)

        example_dir = base_dir / ".metadata.example"
        if not example_dir.exists():
            return

        for example_file in example_dir.iterdir():
            if example_file.is_file():
                target = metadata_dir / example_file.name
                if not target.exists():
                    shutil.copy2(example_file, target)
                    logger.info("Created .metadata/%s from template", example_file.name)


# ---------------------------------------------------------------------------
# YAML loaders
# ---------------------------------------------------------------------------

def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _load_feeds(path: Path) -> list[FeedSource]:
    """Load institution feeds from ``feeds.yaml``; invalid entries are skipped."""
    feeds: list[FeedSource] = []
    for entry in _read_yaml(path).get("feeds") or []:
        if isinstance(entry, dict) and entry.get("name") and entry.get("url"):
            feeds.append(FeedSource(name=str(entry["name"]), url=str(entry["url"])))
    return feeds


def _load_options(path: Path) -> dict[str, Any]:
    """Load ``settings.yaml`` into keyword arguments for :class:`Settings`.

    Unknown keys are ignored; values of the wrong type fall back to the
    defaults.
    """
    data = _read_yaml(path)
    options: dict[str, Any] = {}

    site = data.get("site")
    if isinstance(site, dict):
        defaults = SiteConfig()
        options["site"] = SiteConfig(
            title=str(site.get("title") or defaults.title),
            description=str(site.get("description") or defaults.description),
            base_url=str(site.get("base_url") or defaults.base_url),
            language=str(site.get("language") or defaults.language),
            ttl=_as_int(site.get("ttl"), defaults.ttl),
        )

    if isinstance(data.get("output_dir"), str):
        options["output_dir"] = data["output_dir"]
    if "max_items" in data:
        options["max_items"] = _as_int(data["max_items"], 100)
    if "request_delay" in data:
        options["request_delay"] = _as_float(data["request_delay"], 2.0)
    if "request_timeout" in data:
        options["request_timeout"] = _as_float(data["request_timeout"], 30.0)
    if isinstance(data.get("concurrent_fetch"), bool):
        options["concurrent_fetch"] = data["concurrent_fetch"]
    if isinstance(data.get("log_level"), str):
        options["log_level"] = data["log_level"].upper()
    return options


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default

