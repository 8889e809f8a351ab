"""Tests for the YGOPRODeck API client."""

import httpx
import pytest
import respx

from duelvault.models.failure import FailureKind, UpstreamUnavailableError
from duelvault.sources.ygoprodeck import YgoprodeckClient

BASE_URL = "https://db.ygoprodeck.com/api/v7"
CARDINFO_URL = f"{BASE_URL}/cardinfo.php"


def _card(konami_id: int, name: str) -> dict:
    return {
        "id": konami_id,
        "name": name,
        "type": "Normal Monster",
        "frameType": "normal",
        "desc": "",
        "card_sets": [{"set_name": "LOB", "set_code": "LOB-EN001", "set_rarity": "Common"}],
    }


@pytest.fixture
async def client():
    async with YgoprodeckClient(base_url=BASE_URL) as ygo:
        yield ygo


class TestFetchCatalog:
    @respx.mock
    async def test_english_has_no_language_param(self, client: YgoprodeckClient) -> None:
        route = respx.get(CARDINFO_URL).mock(
            return_value=httpx.Response(200, json={"data": [_card(1, "Kuriboh")]})
        )

        page = await client.fetch_catalog("en")

        assert [c.name for c in page.cards] == ["Kuriboh"]
        assert "language" not in route.calls.last.request.url.params

    @respx.mock
    async def test_other_locale_sets_language(self, client: YgoprodeckClient) -> None:
        route = respx.get(CARDINFO_URL).mock(
            return_value=httpx.Response(200, json={"data": [_card(1, "Kuriboh")]})
        )

        await client.fetch_catalog("DE")

        assert route.calls.last.request.url.params["language"] == "de"

    @respx.mock
    async def test_sends_user_agent(self, client: YgoprodeckClient) -> None:
        route = respx.get(CARDINFO_URL).mock(return_value=httpx.Response(200, json={"data": []}))

        await client.fetch_catalog()

        assert route.calls.last.request.headers["User-Agent"] == "DuelVault/1.0"

    @respx.mock
    async def test_server_error_raises(self, client: YgoprodeckClient) -> None:
        respx.get(CARDINFO_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.fetch_catalog("de")

        assert exc_info.value.kind == FailureKind.EXTERNAL_API_ERROR
        assert exc_info.value.status_code == 502

    @respx.mock
    async def test_bad_request_is_fatal_for_bulk_fetch(self, client: YgoprodeckClient) -> None:
        respx.get(CARDINFO_URL).mock(return_value=httpx.Response(400))

        with pytest.raises(UpstreamUnavailableError):
            await client.fetch_catalog()

    @respx.mock
    async def test_timeout_raises(self, client: YgoprodeckClient) -> None:
        respx.get(CARDINFO_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(UpstreamUnavailableError, match="unreachable"):
            await client.fetch_catalog()

    @respx.mock
    async def test_non_json_body_raises(self, client: YgoprodeckClient) -> None:
        respx.get(CARDINFO_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(UpstreamUnavailableError, match="invalid response"):
            await client.fetch_catalog()

    @respx.mock
    async def test_bad_record_is_counted_not_fatal(self, client: YgoprodeckClient) -> None:
        no_set_code = {**_card(3, "Mystery Card"), "card_sets": [{"set_name": "LOB"}]}
        respx.get(CARDINFO_URL).mock(
            return_value=httpx.Response(
                200, json={"data": [_card(1, "Kuriboh"), no_set_code, _card(2, "Dark Magician")]}
            )
        )

        page = await client.fetch_catalog("en")

        assert [c.konami_id for c in page.cards] == [1, 2]
        assert page.rejected == 1

    @respx.mock
    async def test_malformed_payload_raises(self, client: YgoprodeckClient) -> None:
        respx.get(CARDINFO_URL).mock(return_value=httpx.Response(200, json={"oops": True}))

        with pytest.raises(UpstreamUnavailableError, match="malformed"):
            await client.fetch_catalog()


class TestLookups:
    @respx.mock
    async def test_fetch_card_by_name(self, client: YgoprodeckClient) -> None:
        route = respx.get(CARDINFO_URL).mock(
            return_value=httpx.Response(200, json={"data": [_card(2, "Dark Magician")]})
        )

        card = await client.fetch_card_by_name("Dark Magician")

        assert card is not None
        assert card.konami_id == 2
        assert route.calls.last.request.url.params["name"] == "Dark Magician"

    @respx.mock
    async def test_no_match_returns_none(self, client: YgoprodeckClient) -> None:
        """The API answers an unmatched lookup with 400."""
        respx.get(CARDINFO_URL).mock(
            return_value=httpx.Response(400, json={"error": "No card matching your query"})
        )

        assert await client.fetch_card_by_name("Nope") is None
        assert await client.fetch_card_by_konami_id(1) is None
        assert await client.search_cards("zzz") == []
        assert await client.fetch_cards_by_archetype("Nothing") == []

    @respx.mock
    async def test_search_uses_fuzzy_param(self, client: YgoprodeckClient) -> None:
        route = respx.get(CARDINFO_URL).mock(
            return_value=httpx.Response(
                200, json={"data": [_card(3, "Blue-Eyes White Dragon"), _card(4, "Blue-Eyes Alt")]}
            )
        )

        cards = await client.search_cards("blue-eyes")

        assert len(cards) == 2
        assert route.calls.last.request.url.params["fname"] == "blue-eyes"

    @respx.mock
    async def test_lookup_server_error_still_raises(self, client: YgoprodeckClient) -> None:
        respx.get(CARDINFO_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(UpstreamUnavailableError):
            await client.fetch_card_by_konami_id(89631139)


class TestListings:
    @respx.mock
    async def test_fetch_archetypes(self, client: YgoprodeckClient) -> None:
        respx.get(f"{BASE_URL}/archetypes.php").mock(
            return_value=httpx.Response(
                200, json=[{"archetype_name": "Blue-Eyes"}, {"archetype_name": "Dark Magician"}]
            )
        )

        assert await client.fetch_archetypes() == ["Blue-Eyes", "Dark Magician"]

    @respx.mock
    async def test_fetch_card_sets(self, client: YgoprodeckClient) -> None:
        respx.get(f"{BASE_URL}/cardsets.php").mock(
            return_value=httpx.Response(
                200,
                json=[
                    {
                        "set_name": "Legend of Blue Eyes White Dragon",
                        "set_code": "LOB",
                        "num_of_cards": 126,
                        "tcg_date": "2002-03-08",
                    }
                ],
            )
        )

        sets = await client.fetch_card_sets()

        assert sets == [
            {"set_name": "Legend of Blue Eyes White Dragon", "set_code": "LOB", "num_of_cards": 126}
        ]

    @respx.mock
    async def test_malformed_listing_raises(self, client: YgoprodeckClient) -> None:
        respx.get(f"{BASE_URL}/archetypes.php").mock(
            return_value=httpx.Response(200, json={"data": []})
        )

        with pytest.raises(UpstreamUnavailableError):
            await client.fetch_archetypes()


class TestClientLifecycle:
    async def test_does_not_close_injected_client(self) -> None:
        http = httpx.AsyncClient()
        async with YgoprodeckClient(client=http):
            pass

        assert not http.is_closed
        await http.aclose()

    async def test_closes_own_client(self) -> None:
        ygo = YgoprodeckClient()
        await ygo.aclose()

        assert ygo._client.is_closed
