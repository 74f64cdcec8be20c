"""Best-effort catalog enrichment of model recommendations.

Each candidate title is looked up in the catalog (``page_size=1``) to
attach a cover image, catalog id and catalog rating.  All lookups run
concurrently and each races its own timer, so one slow lookup never holds
up the others: the whole batch finishes in roughly one timeout, not the
sum of them.

A lookup that times out, errors, or finds nothing leaves the item with
null catalog fields.  Items are never dropped or reordered, and lookup
failures never reach the caller.
"""

from __future__ import annotations

import asyncio

from src.interfaces.catalog_provider import ICatalogProvider
from src.models.catalog import CatalogSearchQuery
from src.models.recommendation import EnrichedRecommendation, RecommendationCandidate
from src.utils.concurrency import timed_gather
from src.utils.errors import EnrichmentError, GameScoutError
from src.utils.logging import get_logger

_DEFAULT_TIMEOUT = 2.0


class RecommendationEnricher:
    """Attaches catalog data to recommendation candidates.

    Parameters
    ----------
    catalog:
        Catalog gateway used for the title lookups.
    timeout:
        Per-lookup bound in seconds.
    """

    def __init__(self, catalog: ICatalogProvider, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self._catalog = catalog
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def enrich(
        self, candidates: list[RecommendationCandidate]
    ) -> list[EnrichedRecommendation]:
        """Return one enriched item per candidate, in input order."""
        if not candidates:
            return []

        results = await timed_gather(
            [self._lookup(candidate) for candidate in candidates],
            timeout=self._timeout,
        )

        enriched: list[EnrichedRecommendation] = []
        for candidate, result in zip(candidates, results):
            if isinstance(result, EnrichedRecommendation):
                enriched.append(result)
                continue
            if isinstance(result, Exception):
                self._log_failure(candidate, result)
                enriched.append(EnrichedRecommendation.unmatched(candidate))
                continue
            # KeyboardInterrupt / CancelledError and friends are not ours to absorb.
            raise result

        matched = sum(1 for item in enriched if item.is_matched)
        self._logger.info(
            "enrichment_complete",
            total=len(enriched),
            matched=matched,
            unmatched=len(enriched) - matched,
        )
        return enriched

    async def _lookup(self, candidate: RecommendationCandidate) -> EnrichedRecommendation:
        try:
            page = await self._catalog.search(
                CatalogSearchQuery(text=candidate.title, page_size=1)
            )
        except GameScoutError as exc:
            raise EnrichmentError(
                message=f"Lookup for {candidate.title!r} failed: {exc.message}",
                provider_name=exc.provider_name,
            ) from exc

        if not page.items:
            self._logger.debug("enrichment_no_match", title=candidate.title)
            return EnrichedRecommendation.unmatched(candidate)

        match = page.items[0]
        return EnrichedRecommendation(
            **candidate.model_dump(),
            image=match.background_image,
            catalog_id=match.id,
            actual_rating=match.rating,
        )

    def _log_failure(self, candidate: RecommendationCandidate, error: BaseException) -> None:
        if isinstance(error, asyncio.TimeoutError):
            self._logger.warning(
                "enrichment_lookup_timeout",
                title=candidate.title,
                timeout=self._timeout,
            )
        else:
            self._logger.warning(
                "enrichment_lookup_failed",
                title=candidate.title,
                error=str(error),
                error_type=type(error).__name__,
            )
