"""Unit tests for reply parsing, prompt rendering and the GenerativeRecommender."""

from __future__ import annotations

import json

import pytest

from src.models.recommendation import OwnedGameSummary, UserContext
from src.services.recommendation_generator import (
    EXPLAIN_FALLBACK,
    GenerativeRecommender,
    extract_json,
    normalize_reply,
    render_prompt,
)
from src.utils.errors import GenerationParseError, GenerationUnavailableError

_ITEMS = [
    {"title": "Hades", "reasoning": "Fast runs.", "genres": ["Action"], "estimatedRating": "4.7"},
    {"title": "Stardew Valley", "reasoning": "Cozy.", "genres": ["Simulation"], "estimatedRating": "4.5"},
]


def _context(**overrides) -> UserContext:
    defaults = {
        "owned_games": [
            OwnedGameSummary(name="The Witcher 3", genres=["RPG", "Action"], rating=4.66),
            OwnedGameSummary(name="Portal 2", genres=["Puzzle"], rating=5),
        ],
        "favorite_genres": ["RPG"],
        "display_name": "ana",
    }
    defaults.update(overrides)
    return UserContext(**defaults)


# ======================================================================
# extract_json / normalize_reply
# ======================================================================


class TestNormalizeReply:
    def test_bare_and_wrapped_shapes_are_equivalent(self) -> None:
        bare = normalize_reply(json.dumps(_ITEMS))
        wrapped = normalize_reply(json.dumps({"recommendations": _ITEMS}))
        assert bare == wrapped
        assert [c.title for c in bare] == ["Hades", "Stardew Valley"]

    def test_preserves_model_order(self) -> None:
        reversed_items = list(reversed(_ITEMS))
        result = normalize_reply(json.dumps(reversed_items))
        assert [c.title for c in result] == ["Stardew Valley", "Hades"]

    def test_markdown_fence_is_stripped(self) -> None:
        reply = "```json\n" + json.dumps(_ITEMS) + "\n```"
        assert len(normalize_reply(reply)) == 2

    def test_prose_around_json_is_ignored(self) -> None:
        reply = "Sure! Here are some picks:\n" + json.dumps(_ITEMS) + "\nEnjoy!"
        assert len(normalize_reply(reply)) == 2

    def test_fewer_items_than_requested_are_accepted(self) -> None:
        result = normalize_reply(json.dumps(_ITEMS[:1]))
        assert len(result) == 1

    def test_empty_list_is_accepted(self) -> None:
        assert normalize_reply("[]") == []

    def test_estimated_rating_number_is_coerced_to_string(self) -> None:
        reply = json.dumps([{"title": "Hades", "estimatedRating": 4.7}])
        assert normalize_reply(reply)[0].estimated_rating == "4.7"

    def test_genres_string_is_split(self) -> None:
        reply = json.dumps([{"title": "Hades", "genres": "Action, Roguelike"}])
        assert normalize_reply(reply)[0].genres == ["Action", "Roguelike"]

    def test_missing_optional_fields_default(self) -> None:
        candidate = normalize_reply(json.dumps([{"title": "Hades"}]))[0]
        assert candidate.reasoning == ""
        assert candidate.genres == []
        assert candidate.estimated_rating == ""

    def test_object_without_recommendations_array_fails(self) -> None:
        with pytest.raises(GenerationParseError):
            normalize_reply(json.dumps({"games": _ITEMS}))

    def test_recommendations_not_a_list_fails(self) -> None:
        with pytest.raises(GenerationParseError):
            normalize_reply(json.dumps({"recommendations": "Hades"}))

    def test_scalar_reply_fails(self) -> None:
        with pytest.raises(GenerationParseError):
            normalize_reply("42")

    def test_non_json_reply_fails(self) -> None:
        with pytest.raises(GenerationParseError):
            normalize_reply("I cannot help with that.")

    def test_element_without_title_fails(self) -> None:
        with pytest.raises(GenerationParseError):
            normalize_reply(json.dumps([{"reasoning": "no title"}]))

    def test_blank_title_fails(self) -> None:
        with pytest.raises(GenerationParseError):
            normalize_reply(json.dumps([{"title": "   "}]))

    def test_non_object_element_fails(self) -> None:
        with pytest.raises(GenerationParseError):
            normalize_reply(json.dumps(["Hades"]))

    def test_extract_json_returns_object(self) -> None:
        assert extract_json('noise {"a": 1} noise') == {"a": 1}


# ======================================================================
# render_prompt
# ======================================================================


class TestRenderPrompt:
    def test_is_deterministic(self) -> None:
        assert render_prompt(_context()) == render_prompt(_context())

    def test_lists_each_game_with_genres_and_rating(self) -> None:
        prompt = render_prompt(_context())
        assert "- The Witcher 3 (RPG, Action) - Rating: 4.66/5" in prompt
        assert "- Portal 2 (Puzzle) - Rating: 5/5" in prompt

    def test_omits_missing_genres_and_rating(self) -> None:
        context = _context(owned_games=[OwnedGameSummary(name="Tetris")])
        prompt = render_prompt(context)
        assert "- Tetris" in prompt.splitlines()
        assert "Rating:" not in prompt.split("Recommend")[0]
        assert "()" not in prompt

    def test_favourite_genres_and_name_are_optional(self) -> None:
        prompt = render_prompt(_context(favorite_genres=[], display_name=None))
        assert "favorite genres" not in prompt
        assert "the user likes" in prompt

        named = render_prompt(_context())
        assert "the user ana likes" in named
        assert "The user's favorite genres: RPG" in named

    def test_requests_count_and_json_format(self) -> None:
        prompt = render_prompt(_context(), count=4)
        assert "Recommend 4 video games" in prompt
        assert '"estimatedRating"' in prompt
        assert '{"recommendations": [' in prompt

    def test_duplicate_genres_are_rendered_once(self) -> None:
        context = _context(
            owned_games=[OwnedGameSummary(name="Doom", genres=["Shooter", "Shooter", "Action"])]
        )
        assert "- Doom (Shooter, Action)" in render_prompt(context)


# ======================================================================
# GenerativeRecommender
# ======================================================================


class TestGenerativeRecommender:
    @pytest.mark.asyncio
    async def test_generate_returns_candidates(self, mock_llm_provider) -> None:
        recommender = GenerativeRecommender(llm_provider=mock_llm_provider, count=2)
        candidates = await recommender.generate(_context())

        assert [c.title for c in candidates] == ["Hollow Knight", "Celeste"]
        kwargs = mock_llm_provider.complete.call_args.kwargs
        assert kwargs["json_mode"] is True
        assert kwargs["temperature"] == 0.8
        assert "The Witcher 3" in kwargs["user_prompt"]

    @pytest.mark.asyncio
    async def test_generate_parse_failure_names_provider(self, mock_llm_provider) -> None:
        mock_llm_provider.complete.return_value = "Sorry, no JSON today."
        recommender = GenerativeRecommender(llm_provider=mock_llm_provider)

        with pytest.raises(GenerationParseError) as exc_info:
            await recommender.generate(_context())
        assert exc_info.value.provider_name == "mock-llm"

    @pytest.mark.asyncio
    async def test_generate_propagates_unavailable(self, mock_llm_provider) -> None:
        mock_llm_provider.complete.side_effect = GenerationUnavailableError(
            provider_name="mock-llm"
        )
        recommender = GenerativeRecommender(llm_provider=mock_llm_provider)

        with pytest.raises(GenerationUnavailableError):
            await recommender.generate(_context())

    @pytest.mark.asyncio
    async def test_explain_returns_model_text(self, mock_llm_provider) -> None:
        mock_llm_provider.complete.return_value = "  You loved Portal 2, so...  "
        recommender = GenerativeRecommender(llm_provider=mock_llm_provider)

        text = await recommender.explain("Outer Wilds", ["Portal 2"])
        assert text == "You loved Portal 2, so..."
        assert "Outer Wilds" in mock_llm_provider.complete.call_args.kwargs["user_prompt"]

    @pytest.mark.asyncio
    async def test_explain_falls_back_on_failure(self, mock_llm_provider) -> None:
        mock_llm_provider.complete.side_effect = GenerationUnavailableError()
        recommender = GenerativeRecommender(llm_provider=mock_llm_provider)

        assert await recommender.explain("Outer Wilds", []) == EXPLAIN_FALLBACK

    @pytest.mark.asyncio
    async def test_explain_falls_back_on_empty_reply(self, mock_llm_provider) -> None:
        mock_llm_provider.complete.return_value = "   "
        recommender = GenerativeRecommender(llm_provider=mock_llm_provider)

        assert await recommender.explain("Outer Wilds", []) == EXPLAIN_FALLBACK
