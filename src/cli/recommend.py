# =============================================================================
# src/cli/recommend.py: CLI for the recommendation pipeline
# =============================================================================
#
# Runs the same orchestrator the API uses, without the web server:
#
#   python -m src.cli.recommend generate --user <id>         # fresh picks
#   python -m src.cli.recommend latest --user <id>           # stored picks
#   python -m src.cli.recommend generate --user <id> --json  # machine-readable
#
# Log lines go to stderr; --json implies WARNING-level logs so stdout holds
# only the JSON document.
#
# Exit codes: 0 success (including "no saved games" / "nothing stored"),
# 1 when the pipeline raised a gameScout error.
# =============================================================================

"""Standalone CLI for generating and reading game recommendations.

Usage::

    python -m src.cli.recommend generate --user 7f3c...
    python -m src.cli.recommend latest --user 7f3c... --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Any

from src.models.recommendation import EnrichedRecommendation
from src.utils.errors import GameScoutError


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_items(items: list[EnrichedRecommendation]) -> str:
    lines: list[str] = []
    for index, item in enumerate(items, start=1):
        header = f"{index}. {item.title}"
        if item.estimated_rating:
            header += f"  (est. {item.estimated_rating})"
        lines.append(header)
        if item.genres:
            lines.append(f"   Genres: {', '.join(item.genres)}")
        if item.reasoning:
            lines.append(f"   {item.reasoning}")
        if item.catalog_id is not None:
            lines.append(f"   Catalog id: {item.catalog_id}")
    return "\n".join(lines)


def format_text_output(
    items: list[EnrichedRecommendation],
    generated_at: datetime | None,
    message: str | None,
    based_on: int | None = None,
) -> str:
    """Render a human-readable report."""
    if message:
        return message
    header = f"{len(items)} recommendation(s)"
    if based_on is not None:
        header += f" based on {based_on} saved game(s)"
    if generated_at is not None:
        header += f", generated {generated_at.isoformat(timespec='seconds')}"
    return f"{header}\n\n{_format_items(items)}"


def format_json_output(
    items: list[EnrichedRecommendation],
    generated_at: datetime | None,
    message: str | None,
    extra: dict[str, Any] | None = None,
) -> str:
    """Render the same JSON shape the API returns."""
    payload: dict[str, Any] = {
        "recommendations": [item.model_dump(mode="json", by_alias=True) for item in items],
    }
    if message:
        payload["message"] = message
    if generated_at is not None:
        payload["generatedAt"] = generated_at.isoformat()
    payload.update(extra or {})
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _run(command: str, user_id: str, json_output: bool) -> int:
    # Deferred: importing src.main builds settings and wires the app.
    from src.main import build_components, config, initialize_storage, settings

    components = build_components(settings, config)
    orchestrator = components["orchestrator"]
    try:
        await initialize_storage(components)
        if command == "generate":
            outcome = await orchestrator.generate(user_id)
            items, generated_at, message = (
                outcome.recommendations,
                outcome.generated_at,
                outcome.message,
            )
            based_on = outcome.based_on_count if not message else None
            extra = {"basedOn": based_on} if based_on is not None else {}
        else:
            latest = await orchestrator.get_latest(user_id)
            items, generated_at, message = (
                latest.recommendations,
                latest.generated_at,
                latest.message,
            )
            based_on = None
            extra = {"cached": True} if latest.cached else {}
    except GameScoutError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await components["http_client"].aclose()

    if json_output:
        print(format_json_output(items, generated_at, message, extra))
    else:
        print(format_text_output(items, generated_at, message, based_on))
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.recommend",
        description="Generate or read AI game recommendations for a user.",
    )
    parser.add_argument(
        "command",
        choices=("generate", "latest"),
        help="'generate' creates and stores fresh picks; 'latest' reads the stored ones.",
    )
    parser.add_argument("--user", required=True, help="User id whose library to use.")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output JSON instead of formatted text.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show INFO-level pipeline logs on stderr.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    from src.utils.logging import configure_logging

    # Importing src.main configures logging for the server; re-point it at stderr.
    import src.main  # noqa: F401

    configure_logging(
        log_level="INFO" if args.verbose and not args.json_output else "WARNING",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(_run(args.command, args.user, args.json_output))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
