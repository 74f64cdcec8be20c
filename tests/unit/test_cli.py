"""Unit tests for the recommendation CLI (src.cli.recommend)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.cli.recommend import _build_parser, _run, format_json_output, format_text_output
from src.models.pipeline import GenerationOutcome, LatestRecommendations, RecommendationPhase
from src.models.recommendation import EnrichedRecommendation
from src.utils.errors import GenerationUnavailableError

_GENERATED_AT = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)  # noqa: UP017


def _items() -> list[EnrichedRecommendation]:
    return [
        EnrichedRecommendation(
            title="Hades",
            reasoning="Fast runs.",
            genres=["Action"],
            estimated_rating="4.7",
            catalog_id=274755,
        ),
        EnrichedRecommendation(title="Obscure Indie"),
    ]


def _components(orchestrator: MagicMock) -> dict:
    return {"orchestrator": orchestrator, "http_client": AsyncMock()}


# ======================================================================
# Formatting
# ======================================================================


class TestFormatting:
    def test_text_output_lists_items(self) -> None:
        text = format_text_output(_items(), _GENERATED_AT, None, based_on=3)

        assert text.startswith("2 recommendation(s) based on 3 saved game(s)")
        assert "1. Hades  (est. 4.7)" in text
        assert "   Genres: Action" in text
        assert "2. Obscure Indie" in text

    def test_text_output_message_only(self) -> None:
        assert format_text_output([], None, "Nothing yet") == "Nothing yet"

    def test_json_output_uses_wire_names(self) -> None:
        payload = json.loads(format_json_output(_items(), _GENERATED_AT, None, {"basedOn": 3}))

        assert payload["basedOn"] == 3
        assert payload["generatedAt"] == _GENERATED_AT.isoformat()
        assert payload["recommendations"][0]["catalogId"] == 274755
        assert payload["recommendations"][1]["image"] is None


# ======================================================================
# Argument parsing
# ======================================================================


class TestParser:
    def test_requires_user(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["generate"])

    def test_rejects_unknown_command(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["purge", "--user", "u"])

    def test_json_flag(self) -> None:
        args = _build_parser().parse_args(["latest", "--user", "u", "--json"])
        assert args.command == "latest"
        assert args.json_output is True


# ======================================================================
# _run
# ======================================================================


class TestRun:
    @pytest.mark.asyncio
    async def test_generate_prints_json(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.generate = AsyncMock(
            return_value=GenerationOutcome(
                status=RecommendationPhase.DONE,
                recommendations=_items(),
                based_on_count=3,
                generated_at=_GENERATED_AT,
                persisted=True,
            )
        )
        components = _components(orchestrator)

        with (
            patch("src.main.build_components", return_value=components),
            patch("src.main.initialize_storage", new=AsyncMock()),
        ):
            exit_code = await _run("generate", "user-1", json_output=True)

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["basedOn"] == 3
        assert len(payload["recommendations"]) == 2
        orchestrator.generate.assert_awaited_once_with("user-1")
        components["http_client"].aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_latest_empty_prints_message(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.get_latest = AsyncMock(
            return_value=LatestRecommendations(
                status=RecommendationPhase.EMPTY,
                message="No previous recommendations.",
            )
        )

        with (
            patch("src.main.build_components", return_value=_components(orchestrator)),
            patch("src.main.initialize_storage", new=AsyncMock()),
        ):
            exit_code = await _run("latest", "user-1", json_output=False)

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "No previous recommendations."

    @pytest.mark.asyncio
    async def test_pipeline_error_exits_1(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.generate = AsyncMock(side_effect=GenerationUnavailableError())
        components = _components(orchestrator)

        with (
            patch("src.main.build_components", return_value=components),
            patch("src.main.initialize_storage", new=AsyncMock()),
        ):
            exit_code = await _run("generate", "user-1", json_output=False)

        assert exit_code == 1
        assert "Error:" in capsys.readouterr().err
        components["http_client"].aclose.assert_awaited_once()
