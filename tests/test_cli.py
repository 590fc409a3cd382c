from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from paperfeed.cli import PaperFeedCLI, create_parser, main
from paperfeed.services.pipeline import AggregationPipeline


def test_parser_defaults() -> None:
    args = create_parser().parse_args(["generate"])
    assert args.command == "generate"
    assert args.concurrent is None
    assert args.max_items is None
    assert args.archive is True


def test_parser_generate_flags() -> None:
    args = create_parser().parse_args(["generate", "--concurrent", "--max-items", "5", "--no-archive"])
    assert args.concurrent is True
    assert args.max_items == 5
    assert args.archive is False


def test_classify_command(tmp_path: Path, capsys) -> None:
    code = main(["--base-dir", str(tmp_path), "classify", "Quantum optics with lasers"])
    assert code == 0
    assert "Physics" in capsys.readouterr().out


def test_generate_without_feeds_writes_empty_outputs(tmp_path: Path) -> None:
    code = main(["--base-dir", str(tmp_path), "generate"])

    assert code == 0
    stats = json.loads((tmp_path / "output" / "stats.json").read_text(encoding="utf-8"))
    assert stats["totalItems"] == 0
    assert stats["latestItem"] is None
    assert (tmp_path / "output" / "feed.xml").exists()
    assert (tmp_path / "output" / "feed.json").exists()


def test_unhandled_error_returns_failure(tmp_path: Path) -> None:
    with patch.object(PaperFeedCLI, "cmd_generate", side_effect=RuntimeError("boom")):
        assert main(["--base-dir", str(tmp_path), "generate"]) == 1


def test_migrate_archive_without_archive(tmp_path: Path) -> None:
    assert main(["--base-dir", str(tmp_path), "migrate-archive"]) == 0


ARCHIVE_HEADER = '"Institutions","Date","Title","Subject Area","Journal","Link"\n'


def test_generate_accepts_archive_with_byte_order_mark(tmp_path: Path) -> None:
    archive = tmp_path / "output" / "archive.csv"
    archive.parent.mkdir(parents=True)
    archive.write_text(ARCHIVE_HEADER, encoding="utf-8-sig")

    assert main(["--base-dir", str(tmp_path), "generate"]) == 0
    assert (tmp_path / "output" / "feed.xml").exists()


def test_generate_with_foreign_archive_still_writes_outputs(tmp_path: Path) -> None:
    archive = tmp_path / "output" / "archive.csv"
    archive.parent.mkdir(parents=True)
    archive.write_text("Institution,Date,Title,Link\n", encoding="utf-8")

    code = main(["--base-dir", str(tmp_path), "generate"])

    assert code == 1
    for name in ("feed.xml", "feed.json", "stats.json"):
        assert (tmp_path / "output" / name).exists()
    assert archive.read_text(encoding="utf-8") == "Institution,Date,Title,Link\n"


def test_max_items_zero_is_respected(tmp_path: Path) -> None:
    with patch("paperfeed.cli.AggregationPipeline", wraps=AggregationPipeline) as pipeline_cls:
        assert main(["--base-dir", str(tmp_path), "generate", "--max-items", "0"]) == 0
    assert pipeline_cls.call_args.kwargs["max_items"] == 0
