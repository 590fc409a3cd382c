"""Command-line interface handlers."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from paperfeed.config import Settings
from paperfeed.console import ConsoleUI
from paperfeed.database.archive import ArchiveRepository
from paperfeed.services.classifier import create_classifier
from paperfeed.services.export_service import JsonExporter, RssExporter
from paperfeed.services.feed_service import FeedService
from paperfeed.services.normalizer import FeedNormalizer
from paperfeed.services.pipeline import AggregationPipeline
from paperfeed.services.training import load_training_data, save_model, train_model
from paperfeed.utils.text import html_to_text

logger = logging.getLogger(__name__)


class PaperFeedCLI:
    """CLI application for paperfeed."""

    def __init__(self, settings: Optional[Settings] = None, ui: Optional[ConsoleUI] = None):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loads from .metadata if not provided)
            ui: Console UI (a default Rich console if not provided)
        """
        self.settings = settings or Settings.load()
        self.ui = ui or ConsoleUI()

    def _feed_service(self) -> FeedService:
        classifier = create_classifier(self.settings.model_path)
        return FeedService(
            feeds=self.settings.feeds,
            normalizer=FeedNormalizer(classifier),
            request_delay=self.settings.request_delay,
            timeout=self.settings.request_timeout,
        )

    def cmd_generate(
        self,
        concurrent: Optional[bool] = None,
        max_items: Optional[int] = None,
        archive: bool = True,
    ) -> bool:
        """Fetch all feeds, update the archive and write the feed files.

        Returns:
            False when the archive could not be updated (the feed files are
            written regardless)
        """
        settings = self.settings
        if not settings.feeds:
            self.ui.warning("No feeds configured; writing empty outputs")

        pipeline = AggregationPipeline(
            feed_service=self._feed_service(),
            archive=ArchiveRepository(settings.archive_path) if archive else None,
            max_items=settings.max_items if max_items is None else max_items,
        )
        if concurrent is None:
            concurrent = settings.concurrent_fetch

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=self.ui.console,
            transient=True,
        ) as progress:
            progress.add_task(f"Fetching {len(settings.feeds)} feeds...", total=None)
            result = pipeline.run(concurrent=concurrent)

        self.ui.feed_results(result.feed_results)
        self.ui.run_summary(result.stats, result.unique_count)
        if result.archive is not None:
            self.ui.archive_summary(result.archive, settings.archive_path)

        rss = RssExporter(settings.output_dir, settings.site)
        json_exporter = JsonExporter(settings.output_dir, settings.site)
        self.ui.exported([
            rss.export(result.papers),
            json_exporter.export_feed(result.papers, result.stats),
            json_exporter.export_stats(result.stats),
        ])
        if result.archive_error is not None:
            self.ui.error(f"Archive not updated: {result.archive_error}")
            return False
        return True

    def cmd_classify(self, title: str, abstract: str = "") -> None:
        """Classify a single title/abstract and show which variant answered."""
        classifier = create_classifier(self.settings.model_path)
        result = classifier.classify(title, html_to_text(abstract))
        self.ui.classification(title, result, classifier.name)

    def cmd_train(self, output: Optional[Path] = None) -> None:
        """Fit the subject-area model on the bundled training data."""
        samples = load_training_data()
        model = train_model(samples)
        path = save_model(model, output or self.settings.model_path)
        self.ui.success(f"Trained on {len(samples)} samples, model saved to {path}")

    def cmd_feeds(self, check: bool = False) -> None:
        """List configured feeds, optionally probing each URL."""
        feeds = self.settings.feeds
        checks = None
        if check:
            service = FeedService(
                feeds,
                FeedNormalizer(),
                request_delay=self.settings.request_delay,
                timeout=self.settings.request_timeout,
            )
            checks = service.check_all()
        self.ui.display_feeds(feeds, checks)

    def cmd_migrate_archive(self) -> None:
        """Rewrite a legacy-layout archive into the current schema."""
        repo = ArchiveRepository(self.settings.archive_path)
        count = repo.migrate()
        if count is None:
            self.ui.info("Archive already uses the current schema (or does not exist).")
        else:
            self.ui.success(f"Migrated {count} records in {repo.path}")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="paperfeed",
        description="Institution RSS feeds → dedupe → subject areas → RSS/JSON/CSV",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Project root holding .metadata/ (default: repository root)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # generate command
    gen_parser = subparsers.add_parser("generate", help="Fetch feeds and write outputs")
    gen_parser.add_argument(
        "--concurrent",
        action="store_true",
        default=None,
        help="Fetch feeds in parallel instead of sequentially with a delay",
    )
    gen_parser.add_argument(
        "--max-items",
        type=int,
        default=None,
        help="Newest papers kept in feed.xml/feed.json (default: settings.yaml)",
    )
    gen_parser.add_argument(
        "--no-archive",
        action="store_false",
        dest="archive",
        help="Do not update the archive CSV",
    )

    # classify command
    cls_parser = subparsers.add_parser("classify", help="Classify a title and abstract")
    cls_parser.add_argument("title")
    cls_parser.add_argument("abstract", nargs="?", default="")

    # train command
    train_parser = subparsers.add_parser("train", help="Train the subject-area model")
    train_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Model path (default: .models/subject_classifier.joblib)",
    )

    # feeds command
    feeds_parser = subparsers.add_parser("feeds", help="List configured feeds")
    feeds_parser.add_argument("--check", action="store_true", help="Probe each feed URL")

    # migrate-archive command
    subparsers.add_parser("migrate-archive", help="Upgrade a legacy archive CSV")

    return parser


def setup_logging(ui: ConsoleUI, level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=ui.console, show_path=False)],
        force=True,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI.

    Returns:
        Process exit status: 0 on success, 1 on any unhandled error
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    ui = ConsoleUI()
    try:
        settings = Settings.load(args.base_dir)
        setup_logging(ui, "DEBUG" if args.verbose else settings.log_level)
        cli = PaperFeedCLI(settings, ui)

        if args.command == "generate":
            if not cli.cmd_generate(args.concurrent, args.max_items, args.archive):
                return 1
        elif args.command == "classify":
            cli.cmd_classify(args.title, args.abstract)
        elif args.command == "train":
            cli.cmd_train(args.output)
        elif args.command == "feeds":
            cli.cmd_feeds(args.check)
        elif args.command == "migrate-archive":
            cli.cmd_migrate_archive()
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        ui.error(str(e))
        return 1
    return 0


def run_cli() -> None:
    sys.exit(main())
