"""CLI entry point: python -m mdoutput [INPUT] [options]"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from mdoutput import settings
from mdoutput.extractors.markdown import HtmlToMarkdown
from mdoutput.middlewares import convert_page
from mdoutput.profiles import Profile, ProfileError, load_profile

logger = logging.getLogger(__name__)

_err_console = Console(stderr=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdoutput",
        description=(
            "Convert an HTML page to Markdown.\n"
            "Schema.org JSON-LD in the page becomes YAML-like frontmatter."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", default="-", metavar="INPUT",
                        help="HTML file to convert, or '-' to read stdin (default: -)")
    parser.add_argument("--out", default=None, metavar="FILE",
                        help="Write Markdown to FILE instead of stdout")
    parser.add_argument("--encoding", default="utf-8", metavar="CODEC",
                        help="Encoding of INPUT (default: utf-8)")
    parser.add_argument("--whole-page", action="store_true", default=False,
                        help="Convert the whole <body> instead of the main content element")
    parser.add_argument("--no-frontmatter", action="store_true", default=False,
                        help="Do not emit JSON-LD frontmatter")
    parser.add_argument("--profile", default=None, metavar="FILE",
                        help="YAML options profile (converter / negotiation sections)")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format=settings.LOG_FORMAT,
        handlers=[RichHandler(console=_err_console, show_time=False, show_path=False)],
        force=True,
    )


def _error(message: str) -> int:
    _err_console.print(f"[bold red]ERROR:[/bold red] {escape(message)}")
    return 1


def _read_input(source: str, encoding: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding=encoding, errors="replace")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        profile = load_profile(args.profile) if args.profile else Profile.defaults()
    except (OSError, ProfileError, yaml.YAMLError, ValidationError) as exc:
        return _error(f"Could not load profile {args.profile}: {exc}")

    options = profile.converter
    if args.no_frontmatter:
        options = options.model_copy(update={"include_frontmatter": False})
    selectors = ("body",) if args.whole_page else profile.negotiation.content_selectors

    try:
        html = _read_input(args.input, args.encoding)
    except (OSError, LookupError) as exc:
        return _error(f"Could not read {args.input}: {exc}")

    markdown = convert_page(html, HtmlToMarkdown(options), selectors)
    logger.info("Converted %d chars of HTML to %d chars of Markdown", len(html), len(markdown))

    if args.out is None:
        sys.stdout.write(markdown + "\n")
        return 0

    try:
        Path(args.out).write_text(markdown + "\n", encoding="utf-8")
    except OSError as exc:
        return _error(f"Could not write {args.out}: {exc}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
