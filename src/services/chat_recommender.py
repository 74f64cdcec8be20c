"""Conversational game recommendations.

A free-text request ("cozy co-op games for two") goes to the LLM, which
answers with a short message plus a list of suggested titles.  The titles
are enriched exactly like generated recommendations.  Chat replies are
not persisted.
"""

from __future__ import annotations

from pydantic import ValidationError

from src.interfaces.llm_provider import ILLMProvider
from src.models.recommendation import ChatReply, RecommendationCandidate
from src.services.recommendation_enricher import RecommendationEnricher
from src.services.recommendation_generator import extract_json
from src.utils.errors import GenerationParseError
from src.utils.logging import get_logger

_SYSTEM_PROMPT = (
    "You are a friendly video game expert chatting with a player. "
    "Answer their request with a short conversational message and, when it "
    "makes sense, up to 6 concrete game suggestions. Reply ONLY with valid "
    "JSON in exactly this format (no additional text):\n"
    '{"message": "Your reply to the player", "recommendations": ['
    '{"title": "Game name", "reasoning": "Why it fits the request", '
    '"genres": ["Genre1"], "estimatedRating": "4.5"}]}\n'
    'Use an empty "recommendations" list when no suggestion fits.'
)


def parse_chat_reply(response: str) -> tuple[str, list[RecommendationCandidate]]:
    """Split a chat reply into its message and candidates.

    Raises
    ------
    GenerationParseError
        If the reply is not an object with a string ``message``, or a
        recommendation entry is unusable.
    """
    parsed = extract_json(response)
    if not isinstance(parsed, dict) or not isinstance(parsed.get("message"), str):
        raise GenerationParseError(message="Chat reply has no message")

    raw_items = parsed.get("recommendations") or []
    if not isinstance(raw_items, list):
        raise GenerationParseError(message="Chat reply recommendations must be a list")

    candidates: list[RecommendationCandidate] = []
    for index, item in enumerate(raw_items):
        try:
            candidates.append(RecommendationCandidate.model_validate(item))
        except ValidationError as exc:
            raise GenerationParseError(
                message=f"Chat recommendation {index} is malformed",
            ) from exc
    return parsed["message"].strip(), candidates


class ChatRecommender:
    """Answers a player's free-text request with enriched suggestions."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        enricher: RecommendationEnricher,
        temperature: float = 0.8,
        max_tokens: int = 1500,
    ) -> None:
        self._llm = llm_provider
        self._enricher = enricher
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = get_logger(__name__)

    async def reply(self, user_id: str, message: str) -> ChatReply:
        response = await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=message.strip(),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            json_mode=True,
        )

        try:
            text, candidates = parse_chat_reply(response)
        except GenerationParseError as exc:
            self._logger.warning(
                "chat_parse_failed",
                user_id=user_id,
                error=exc.message,
                response_preview=response[:200],
            )
            raise GenerationParseError(
                message=exc.message,
                provider_name=self._llm.get_provider_name(),
            ) from exc

        recommendations = await self._enricher.enrich(candidates)
        self._logger.info(
            "chat_reply",
            user_id=user_id,
            recommendations=len(recommendations),
        )
        return ChatReply(message=text, recommendations=recommendations)
