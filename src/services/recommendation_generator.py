"""Generative recommender: prompt → model → validated candidates.

Turns a :class:`UserContext` into a deterministic prompt, asks the
configured LLM for game suggestions as JSON, and normalizes the reply into
:class:`RecommendationCandidate` objects.

Architecture overview
---------------------
The model is not trusted:

  - It may wrap its JSON in markdown fences or chatter around it.
  - JSON mode on OpenAI forces an *object*, so the list usually arrives
    as ``{"recommendations": [...]}``; other backends often return a bare
    array.  Both shapes are accepted by :func:`normalize_reply`, the only
    place that knows about them.
  - It may return fewer than the requested count.  That is accepted.
  - Titles and genres are never checked against the catalog here.

Anything that is not one of the two accepted shapes raises
:class:`GenerationParseError`; there is no partial success at this stage.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from src.interfaces.llm_provider import ILLMProvider
from src.models.recommendation import RecommendationCandidate, UserContext
from src.utils.errors import GameScoutError, GenerationParseError
from src.utils.logging import get_logger

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

_DEFAULT_COUNT = 6

_SYSTEM_PROMPT = (
    "You are a video game recommendation expert. "
    "You reply ONLY with valid JSON and no additional text."
)

_EXPLAIN_SYSTEM_PROMPT = (
    "You are an enthusiastic video game expert who gives personalised recommendations."
)

EXPLAIN_FALLBACK = "This game is highly recommended for you."


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

def extract_json(response: str) -> Any:
    """Pull the first JSON value out of an LLM reply.

    Handles markdown code fences and leading/trailing prose around a bare
    array or object.

    Raises
    ------
    GenerationParseError
        If no JSON value can be decoded.
    """
    text = response.strip()

    fence_match = _JSON_FENCE_RE.search(text)
    if fence_match:
        text = fence_match.group(1).strip()

    # Fallback: cut from the first opening bracket/brace to its last closer.
    if text and text[0] not in "[{":
        starts = [i for i in (text.find("["), text.find("{")) if i != -1]
        if starts:
            start = min(starts)
            closer = "]" if text[start] == "[" else "}"
            end = text.rfind(closer)
            if end > start:
                text = text[start : end + 1]

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenerationParseError(
            message=f"Model reply is not valid JSON: {exc.msg}",
        ) from exc


def normalize_reply(response: str) -> list[RecommendationCandidate]:
    """Normalize a model reply into an ordered list of candidates.

    Accepted shapes:

    * a bare JSON array of recommendation objects
    * an object whose ``recommendations`` field is such an array

    Raises
    ------
    GenerationParseError
        For any other shape, an element that is not an object, or an
        element without a non-empty string ``title``.
    """
    parsed = extract_json(response)

    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("recommendations"), list):
        items = parsed["recommendations"]
    else:
        raise GenerationParseError(
            message=(
                "Model reply must be a JSON array or an object with a "
                f"'recommendations' array, got {type(parsed).__name__}"
            ),
        )

    candidates: list[RecommendationCandidate] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("title"), str):
            raise GenerationParseError(
                message=f"Recommendation {index} has no title",
            )
        try:
            candidates.append(RecommendationCandidate.model_validate(item))
        except ValidationError as exc:
            raise GenerationParseError(
                message=f"Recommendation {index} is malformed: {exc.error_count()} error(s)",
            ) from exc
    return candidates


# ---------------------------------------------------------------------------
# Prompt rendering
# ---------------------------------------------------------------------------

def _format_rating(rating: float) -> str:
    return f"{rating:g}"


def render_prompt(context: UserContext, count: int = _DEFAULT_COUNT) -> str:
    """Render the user prompt for *context*.

    Output depends only on the context and *count*.  Fields the user has
    not provided (genres, rating, favourite genres, name) are left out
    rather than rendered empty.
    """
    lines = []
    for game in context.owned_games:
        line = f"- {game.name}"
        if game.genres:
            line += f" ({', '.join(game.genres)})"
        if game.rating is not None:
            line += f" - Rating: {_format_rating(game.rating)}/5"
        lines.append(line)

    audience = f" {context.display_name}" if context.display_name else ""
    parts = [
        "You are a video game expert with deep knowledge of every genre and title.",
        "",
        f"Based on the following games the user{audience} likes:",
        "",
        "\n".join(lines),
    ]
    if context.favorite_genres:
        parts += ["", f"The user's favorite genres: {', '.join(context.favorite_genres)}"]
    parts += [
        "",
        f"Recommend {count} video games they will probably love. For each game:",
        "1. Give the exact title of the game",
        "2. Briefly explain (2-3 lines) why it is a good recommendation for their taste",
        "3. List the game's main genres",
        "4. Give an estimate of its average rating",
        "",
        "Return ONLY valid JSON in exactly this format (no additional text):",
        '{"recommendations": [',
        "  {",
        '    "title": "Game name",',
        '    "reasoning": "Why it is recommended",',
        '    "genres": ["Genre1", "Genre2"],',
        '    "estimatedRating": "4.5"',
        "  }",
        "]}",
        "",
        "Make the picks varied but aligned with the user's taste, "
        "mixing classics and recent releases.",
    ]
    return "\n".join(parts)


def render_explain_prompt(game_name: str, owned_game_names: list[str]) -> str:
    return (
        f"The user's favorite games are: {', '.join(owned_game_names)}.\n\n"
        f'Why would "{game_name}" be a great recommendation for this user?\n\n'
        "Explain in 2-3 sentences, in a conversational and enthusiastic tone."
    )


# ---------------------------------------------------------------------------
# GenerativeRecommender
# ---------------------------------------------------------------------------

class GenerativeRecommender:
    """Produces recommendation candidates for a user context via an LLM.

    Parameters
    ----------
    llm_provider:
        Backend used for completions.
    count:
        How many recommendations the prompt asks for.
    temperature:
        Sampling temperature; moderate so repeated calls differ.
    max_tokens:
        Output-token ceiling for the generation call.
    explain_temperature / explain_max_tokens:
        Sampling settings for :meth:`explain`.
    """

    def __init__(
        self,
        llm_provider: ILLMProvider,
        count: int = _DEFAULT_COUNT,
        temperature: float = 0.8,
        max_tokens: int = 1500,
        explain_temperature: float = 0.7,
        explain_max_tokens: int = 200,
    ) -> None:
        self._llm = llm_provider
        self._count = count
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._explain_temperature = explain_temperature
        self._explain_max_tokens = explain_max_tokens
        self._logger = get_logger(__name__)

    async def generate(self, context: UserContext) -> list[RecommendationCandidate]:
        """Ask the model for candidates matching *context*.

        Raises
        ------
        GenerationUnavailableError
            The model could not be reached (raised by the provider).
        GenerationParseError
            The reply was not a usable JSON structure.
        """
        prompt = render_prompt(context, self._count)
        response = await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            json_mode=True,
        )

        try:
            candidates = normalize_reply(response)
        except GenerationParseError as exc:
            self._logger.warning(
                "recommendation_parse_failed",
                error=exc.message,
                provider=self._llm.get_provider_name(),
                response_preview=response[:200],
            )
            raise GenerationParseError(
                message=exc.message,
                provider_name=self._llm.get_provider_name(),
            ) from exc

        if len(candidates) != self._count:
            self._logger.info(
                "recommendation_count_mismatch",
                requested=self._count,
                received=len(candidates),
            )
        return candidates

    async def explain(self, game_name: str, owned_game_names: list[str]) -> str:
        """Return a short, friendly reason why *game_name* suits the user.

        Never raises for model failures; a fixed fallback sentence is
        returned instead.
        """
        try:
            response = await self._llm.complete(
                system_prompt=_EXPLAIN_SYSTEM_PROMPT,
                user_prompt=render_explain_prompt(game_name, owned_game_names),
                temperature=self._explain_temperature,
                max_tokens=self._explain_max_tokens,
            )
        except GameScoutError as exc:
            self._logger.warning("explanation_failed", game=game_name, error=str(exc))
            return EXPLAIN_FALLBACK
        return response.strip() or EXPLAIN_FALLBACK
