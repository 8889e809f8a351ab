"""
YGOPRODeck API client.

Async wrapper around the public card database at db.ygoprodeck.com.
Bulk catalog fetches are fatal on failure; lookups treat the API's
"no card matching your query" 400 response as an empty result.
"""

import logging
from types import TracebackType
from typing import Any

import httpx

from duelvault.config import settings
from duelvault.models.card import CatalogCard, CatalogPage
from duelvault.models.failure import UpstreamUnavailableError
from duelvault.parsers.ygoprodeck import parse_cardinfo_response

logger = logging.getLogger(__name__)

USER_AGENT = "DuelVault/1.0"

# Locale fetched without a language parameter
ENGLISH_LOCALE = "en"


class YgoprodeckClient:
    """
    Client for the YGOPRODeck v7 API.

    Usage:
        async with YgoprodeckClient() as client:
            page = await client.fetch_catalog("de")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        bulk_timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.ygoprodeck_base_url).rstrip("/")
        self.bulk_timeout = bulk_timeout if bulk_timeout is not None else settings.bulk_http_timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=timeout if timeout is not None else settings.http_timeout,
        )

    async def __aenter__(self) -> "YgoprodeckClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
        not_found_ok: bool = False,
    ) -> Any:
        """
        GET a JSON document from the API.

        Returns None for a 400 response when ``not_found_ok`` is set; the API
        answers unmatched lookups with 400.

        Raises:
            UpstreamUnavailableError: On network errors, timeouts, other
                non-2xx statuses or a body that is not JSON
        """
        url = f"{self.base_url}{path}"
        kwargs: dict[str, Any] = {"params": params}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self._client.get(url, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(
                "Card database provider is unreachable", detail=f"{type(e).__name__}: {e}"
            ) from e

        if not_found_ok and response.status_code == 400:
            return None

        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailableError(
                "Card database provider returned an error",
                detail=f"HTTP {response.status_code} for {path}",
            ) from e
        except ValueError as e:
            raise UpstreamUnavailableError(
                "Card database provider returned an invalid response",
                detail=f"Non-JSON body for {path}",
            ) from e

    def _parse(self, payload: Any) -> CatalogPage:
        try:
            return parse_cardinfo_response(payload)
        except ValueError as e:
            raise UpstreamUnavailableError(
                "Card database provider returned malformed card data", detail=str(e)
            ) from e

    async def fetch_catalog(self, locale: str = ENGLISH_LOCALE) -> CatalogPage:
        """
        Fetch every card in one locale.

        English is the API default; any other locale is requested with the
        ``language`` parameter. Entries that cannot be parsed are counted in
        the page's ``rejected`` instead of failing the fetch.

        Raises:
            UpstreamUnavailableError: If the catalog cannot be fetched
        """
        params: dict[str, Any] = {}
        if locale.lower() != ENGLISH_LOCALE:
            params["language"] = locale.lower()

        logger.info("Fetching %s card catalog from YGOPRODeck...", locale)
        payload = await self._get_json("/cardinfo.php", params=params, timeout=self.bulk_timeout)
        page = self._parse(payload)
        logger.info("Fetched %d cards (%s), %d rejected", len(page.cards), locale, page.rejected)
        return page

    async def _lookup(self, params: dict[str, Any]) -> list[CatalogCard]:
        payload = await self._get_json("/cardinfo.php", params=params, not_found_ok=True)
        if payload is None:
            return []
        return self._parse(payload).cards

    async def fetch_card_by_name(self, name: str) -> CatalogCard | None:
        """Fetch a single card by exact English name."""
        cards = await self._lookup({"name": name})
        if not cards:
            logger.warning("Card not found: %s", name)
            return None
        return cards[0]

    async def search_cards(self, query: str) -> list[CatalogCard]:
        """Fuzzy name search."""
        cards = await self._lookup({"fname": query})
        if not cards:
            logger.warning("No cards found for query: %s", query)
        return cards

    async def fetch_card_by_konami_id(self, konami_id: int) -> CatalogCard | None:
        """Fetch a single card by its Konami id."""
        cards = await self._lookup({"id": konami_id})
        if not cards:
            logger.warning("Card not found with Konami ID: %s", konami_id)
            return None
        return cards[0]

    async def fetch_cards_by_archetype(self, archetype: str) -> list[CatalogCard]:
        """Fetch every card of an archetype."""
        return await self._lookup({"archetype": archetype})

    async def fetch_archetypes(self) -> list[str]:
        """Fetch the names of all archetypes."""
        payload = await self._get_json("/archetypes.php")
        if not isinstance(payload, list):
            raise UpstreamUnavailableError(
                "Card database provider returned malformed archetype data"
            )
        return [item["archetype_name"] for item in payload if "archetype_name" in item]

    async def fetch_card_sets(self) -> list[dict[str, Any]]:
        """
        Fetch all card sets.

        Returns:
            Dicts with set_name, set_code and num_of_cards
        """
        payload = await self._get_json("/cardsets.php")
        if not isinstance(payload, list):
            raise UpstreamUnavailableError("Card database provider returned malformed set data")
        return [
            {
                "set_name": item.get("set_name", ""),
                "set_code": item.get("set_code", ""),
                "num_of_cards": item.get("num_of_cards", 0),
            }
            for item in payload
        ]
