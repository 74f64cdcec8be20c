"""RAWG game catalog provider implementing ICatalogProvider.

Thin typed pass-through to the RAWG REST API (https://api.rawg.io/api).
Every request carries the static API key as the ``key`` query parameter.
Query fields that are not set are left out of the request entirely, so
RAWG applies its own defaults.

No caching, rate limiting or retries happen here.  Any transport error,
non-2xx status, undecodable body or payload that does not match the
expected shape raises :class:`UpstreamUnavailableError`.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from src.config.settings import Settings
from src.interfaces.catalog_provider import ICatalogProvider
from src.models.catalog import (
    CatalogGame,
    CatalogPage,
    CatalogSearchQuery,
    GameDetails,
    Genre,
    Screenshot,
    Trailer,
)
from src.utils.errors import UpstreamUnavailableError
from src.utils.logging import get_logger

_DEFAULT_TIMEOUT = 10.0

# RAWG genre slugs → numeric ids, as used by the browse filters.
GENRE_SLUG_IDS: dict[str, int] = {
    "action": 4,
    "indie": 51,
    "adventure": 3,
    "rpg": 5,
    "strategy": 10,
    "shooter": 2,
    "casual": 40,
    "simulation": 14,
    "puzzle": 7,
    "arcade": 11,
    "platformer": 83,
    "racing": 1,
    "massively-multiplayer": 59,
    "sports": 15,
    "fighting": 6,
    "family": 19,
    "board-games": 28,
    "educational": 34,
    "card": 17,
}


def genre_ids_from_slugs(slugs: list[str]) -> list[int]:
    """Map genre slugs to RAWG ids, dropping unknown slugs and duplicates.

    >>> genre_ids_from_slugs(["rpg", "Action", "nope", "rpg"])
    [5, 4]
    """
    ids: list[int] = []
    for slug in slugs:
        genre_id = GENRE_SLUG_IDS.get(slug.strip().lower())
        if genre_id is not None and genre_id not in ids:
            ids.append(genre_id)
    return ids


def build_search_params(query: CatalogSearchQuery) -> dict[str, str]:
    """Translate a :class:`CatalogSearchQuery` into RAWG query parameters."""
    params: dict[str, str] = {}
    if query.text:
        params["search"] = query.text
    if query.genre_ids:
        params["genres"] = ",".join(str(g) for g in query.genre_ids)
    if query.platform_ids:
        params["platforms"] = ",".join(str(p) for p in query.platform_ids)
    if query.page is not None:
        params["page"] = str(query.page)
    if query.page_size is not None:
        params["page_size"] = str(query.page_size)
    if query.ordering:
        params["ordering"] = query.ordering
    if query.date_range is not None:
        start, end = query.date_range
        params["dates"] = f"{start.isoformat()},{end.isoformat()}"
    if query.precise:
        params["search_precise"] = "true"
    if query.exact:
        params["search_exact"] = "true"
    return params


class RawgCatalogProvider(ICatalogProvider):
    """Game catalog backed by the RAWG Video Games Database API.

    Parameters
    ----------
    settings:
        Supplies ``rawg_api_key`` and ``rawg_base_url``.
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection
        pooling.  When omitted the provider owns a client and closes it in
        :meth:`close`.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._api_key = settings.rawg_api_key
        self._base_url = settings.rawg_base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """GET ``{base_url}{path}`` with the API key and return the JSON body."""
        request_params = dict(params or {})
        request_params["key"] = self._api_key
        url = f"{self._base_url}{path}"

        try:
            response = await self._http.get(url, params=request_params)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            self._logger.warning(
                "catalog_request_failed",
                path=path,
                status=exc.response.status_code,
            )
            raise UpstreamUnavailableError(
                message=f"Catalog returned HTTP {exc.response.status_code} for {path}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            self._logger.warning("catalog_request_failed", path=path, error=str(exc))
            raise UpstreamUnavailableError(
                message=f"Catalog request failed for {path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except ValueError as exc:
            self._logger.warning("catalog_invalid_json", path=path)
            raise UpstreamUnavailableError(
                message=f"Catalog returned invalid JSON for {path}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not isinstance(body, dict):
            raise UpstreamUnavailableError(
                message=f"Catalog returned an unexpected payload for {path}",
                provider_name=self.get_provider_name(),
            )
        return body

    def _parse_results(self, body: dict[str, Any], model: type[BaseModel], path: str) -> list:
        try:
            return [model.model_validate(item) for item in body.get("results") or []]
        except ValidationError as exc:
            raise UpstreamUnavailableError(
                message=f"Catalog returned malformed results for {path}",
                provider_name=self.get_provider_name(),
            ) from exc

    # ------------------------------------------------------------------
    # ICatalogProvider implementation
    # ------------------------------------------------------------------

    async def search(self, query: CatalogSearchQuery) -> CatalogPage:
        body = await self._get("/games", build_search_params(query))
        items = self._parse_results(body, CatalogGame, "/games")
        count = body.get("count")
        page = CatalogPage(
            items=items,
            total_count=count if isinstance(count, int) else len(items),
            has_more=bool(body.get("next")),
        )
        self._logger.debug(
            "catalog_search",
            text=query.text,
            results=len(items),
            total=page.total_count,
        )
        return page

    async def get_genres(self, page_size: int = 40) -> list[Genre]:
        body = await self._get("/genres", {"page_size": str(page_size)})
        return self._parse_results(body, Genre, "/genres")

    async def get_game_details(self, game_id: int) -> GameDetails:
        path = f"/games/{game_id}"
        body = await self._get(path)
        try:
            return GameDetails.model_validate(body)
        except ValidationError as exc:
            raise UpstreamUnavailableError(
                message=f"Catalog returned a malformed game record for {path}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def get_screenshots(self, game_id: int) -> list[Screenshot]:
        path = f"/games/{game_id}/screenshots"
        return self._parse_results(await self._get(path), Screenshot, path)

    async def get_trailers(self, game_id: int) -> list[Trailer]:
        path = f"/games/{game_id}/movies"
        return self._parse_results(await self._get(path), Trailer, path)

    async def get_game_series(self, game_id: int) -> list[CatalogGame]:
        path = f"/games/{game_id}/game-series"
        return self._parse_results(await self._get(path), CatalogGame, path)

    def get_provider_name(self) -> str:
        return "rawg"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._http.aclose()
