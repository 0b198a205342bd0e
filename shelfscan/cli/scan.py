# =============================================================================
# shelfscan/cli/scan.py - Command-line front end for the fallback chains
# =============================================================================
#
# Runs the orchestration core without any web server:
#
#   python -m shelfscan.cli analyze shelf.jpg            # titles on a shelf
#   python -m shelfscan.cli analyze shelf.png --json     # same, as JSON
#   python -m shelfscan.cli rating "Dune" "Frank Herbert"
#   python -m shelfscan.cli summary "Dune" "Frank Herbert"
#   python -m shelfscan.cli quota                        # current windows
#
# Every command prints a result even when no provider is configured;
# that is the point of the chains.  --quiet (implied by --json) sends logs
# to stderr at WARNING+ so stdout carries only the result.
# =============================================================================

"""Standalone CLI for shelf analysis, ratings, summaries and quota stats."""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import sys
from pathlib import Path

from shelfscan.config.settings import Settings
from shelfscan.utils.logging import configure_logging

_ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
_CONTENT_TYPE_MAP = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
_MAX_FILE_SIZE = 10 * 1024 * 1024


def _load_image_payload(image_path: Path) -> str:
    """Read *image_path* and return it as a base64 data URI.

    Raises ``ValueError`` with a user-facing message on bad input.
    """
    if not image_path.exists():
        raise ValueError(f"File not found: {image_path}")
    suffix = image_path.suffix.lower()
    if suffix not in _ALLOWED_EXTENSIONS:
        raise ValueError(
            f"Unsupported file type: {suffix}. Allowed: {', '.join(sorted(_ALLOWED_EXTENSIONS))}"
        )
    data = image_path.read_bytes()
    if len(data) > _MAX_FILE_SIZE:
        raise ValueError(f"File too large: {len(data):,} bytes. Maximum: {_MAX_FILE_SIZE:,} bytes.")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{_CONTENT_TYPE_MAP[suffix]};base64,{encoded}"


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    # Deferred import so --help stays fast and logging is configured first.
    from shelfscan.main import build_services

    services = build_services(settings)
    try:
        if args.command == "analyze":
            try:
                payload = _load_image_payload(Path(args.image).resolve())
            except ValueError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                return 1
            outcome = await services.vision.resolve(payload)
            if args.json_output:
                print(json.dumps(
                    {**outcome.value.model_dump(by_alias=True), "source": outcome.source},
                    indent=2,
                ))
            else:
                print(f"Bookshelf: {'yes' if outcome.value.is_bookshelf else 'no'} "
                      f"(source: {outcome.source})")
                for title in outcome.value.book_titles:
                    print(f"  - {title}")
            return 0

        if args.command in ("rating", "summary"):
            resolve = (
                services.text.resolve_rating if args.command == "rating"
                else services.text.resolve_summary
            )
            outcome = await resolve(args.title, args.author)
            if args.json_output:
                print(json.dumps({args.command: outcome.value, "source": outcome.source}, indent=2))
            else:
                print(outcome.value)
            return 0

        stats = await services.quota.get_usage_stats()
        if args.json_output:
            print(json.dumps({k: v.model_dump(mode="json") for k, v in stats.items()}, indent=2))
        else:
            for key, usage in stats.items():
                daily_cap = "-" if usage.daily_limit is None else str(usage.daily_limit)
                print(f"{key:<18} {usage.count:>4}/{usage.limit:<4} "
                      f"window {usage.window_seconds:g}s, {usage.window_remaining_seconds:g}s left; "
                      f"today {usage.daily_count}/{daily_cap}")
        return 0
    finally:
        await services.aclose()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m shelfscan.cli",
        description="Identify books on a shelf photo and fetch ratings/summaries.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output below WARNING (implied by --json).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="List book titles visible in a shelf photo.")
    analyze.add_argument("image", help="Path to the photo (JPEG, PNG or WEBP).")

    for name, help_text in (("rating", "Rating for a book."), ("summary", "Summary of a book.")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("title")
        cmd.add_argument("author")

    sub.add_parser("quota", help="Show the current quota window for each provider.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    args = _build_parser().parse_args(argv)
    settings = Settings()

    if args.quiet or args.json_output:
        configure_logging(log_level="WARNING", json_output=False, stream=sys.stderr)
    else:
        configure_logging(
            log_level=settings.log_level,
            json_output=settings.app_env == "production",
            stream=sys.stderr,
        )

    return asyncio.run(_run(args, settings))
