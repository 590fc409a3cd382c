"""Entry point for running paperfeed as a module or installed script.

Usage:
    paperfeed generate / python -m paperfeed generate
    paperfeed classify "Title" "Abstract"
"""

from paperfeed.cli import run_cli


def run() -> None:
    run_cli()


if __name__ == "__main__":
    run()
