"""Tests for deck API endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.services.auth import issue_token


@pytest.fixture
async def printings(session: AsyncSession, make_printing) -> dict[str, int]:
    dragon = await make_printing("LOB-EN001", name="Blue-Eyes White Dragon")
    fusion = await make_printing(
        "LOB-EN000", name="Blue-Eyes Ultimate Dragon", type="Fusion Monster"
    )
    await session.commit()
    return {"dragon": dragon.id, "fusion": fusion.id}


class TestCreateDeck:
    async def test_create(self, client: AsyncClient, auth_headers, printings) -> None:
        response = await client.post(
            "/decks",
            json={
                "name": "Kaiba Classic",
                "isPublic": True,
                "cards": [
                    {"printingId": printings["dragon"], "quantity": 3},
                    {"printingId": printings["fusion"], "zone": "EXTRA"},
                ],
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Kaiba Classic"
        assert data["isPublic"] is True
        assert [(c["printingId"], c["quantity"], c["zone"]) for c in data["cards"]] == [
            (printings["dragon"], 3, "MAIN"),
            (printings["fusion"], 1, "EXTRA"),
        ]
        assert data["cards"][0]["printing"]["card"]["name"] == "Blue-Eyes White Dragon"

    async def test_more_than_three_copies(
        self, client: AsyncClient, auth_headers, printings
    ) -> None:
        response = await client.post(
            "/decks",
            json={"name": "Deck", "cards": [{"printingId": printings["dragon"], "quantity": 4}]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "validation_failed"

        listed = await client.get("/decks", headers=auth_headers)
        assert listed.json() == []

    async def test_empty_name(self, client: AsyncClient, auth_headers) -> None:
        response = await client.post("/decks", json={"name": ""}, headers=auth_headers)

        assert response.status_code == 422


class TestDeckRoutes:
    async def create(self, client: AsyncClient, headers, cards: list[dict]) -> int:
        response = await client.post(
            "/decks", json={"name": "Deck", "cards": cards}, headers=headers
        )
        return response.json()["id"]

    async def test_update_replaces_cards(
        self, client: AsyncClient, auth_headers, printings
    ) -> None:
        deck_id = await self.create(
            client, auth_headers, [{"printingId": printings["dragon"], "quantity": 2}]
        )

        response = await client.put(
            f"/decks/{deck_id}",
            json={
                "name": "Renamed",
                "cards": [{"printingId": printings["fusion"], "zone": "SIDE"}],
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Renamed"
        assert [(c["printingId"], c["zone"]) for c in data["cards"]] == [
            (printings["fusion"], "SIDE")
        ]

    async def test_update_without_cards_keeps_them(
        self, client: AsyncClient, auth_headers, printings
    ) -> None:
        deck_id = await self.create(
            client, auth_headers, [{"printingId": printings["dragon"], "quantity": 2}]
        )

        response = await client.put(
            f"/decks/{deck_id}", json={"description": "Dragons"}, headers=auth_headers
        )

        assert response.json()["description"] == "Dragons"
        assert len(response.json()["cards"]) == 1

    async def test_stats(self, client: AsyncClient, auth_headers, printings) -> None:
        deck_id = await self.create(
            client,
            auth_headers,
            [
                {"printingId": printings["dragon"], "quantity": 3},
                {"printingId": printings["fusion"], "zone": "EXTRA"},
            ],
        )

        response = await client.get(f"/decks/{deck_id}/stats", headers=auth_headers)

        data = response.json()
        assert data["mainDeckCount"] == 3
        assert data["extraDeckCount"] == 1
        assert data["sideDeckCount"] == 0
        assert data["totalCards"] == 4
        assert data["typeBreakdown"] == {"Normal Monster": 3, "Fusion Monster": 1}
        assert data["warnings"] == ["Main deck has 3 cards; at least 40 required"]

    async def test_ownership(self, client: AsyncClient, auth_headers, printings) -> None:
        await client.post(
            "/collection",
            json={"printingId": printings["dragon"], "quantity": 1},
            headers=auth_headers,
        )
        deck_id = await self.create(
            client, auth_headers, [{"printingId": printings["dragon"], "quantity": 3}]
        )

        response = await client.get(f"/decks/{deck_id}/ownership", headers=auth_headers)

        data = response.json()
        assert data["deckId"] == deck_id
        assert data["isComplete"] is False
        assert data["ownedCards"] == [
            {"printingId": printings["dragon"], "required": 3, "owned": 1, "complete": False}
        ]
        assert data["missingCards"] == [{"printingId": printings["dragon"], "missing": 2}]

    async def test_delete(self, client: AsyncClient, auth_headers) -> None:
        deck_id = await self.create(client, auth_headers, [])

        response = await client.delete(f"/decks/{deck_id}", headers=auth_headers)
        fetched = await client.get(f"/decks/{deck_id}", headers=auth_headers)

        assert response.status_code == 204
        assert fetched.status_code == 404

    async def test_other_users_deck_is_hidden(
        self, client: AsyncClient, session: AsyncSession, auth_headers, make_user
    ) -> None:
        deck_id = await self.create(client, auth_headers, [])
        kaiba = await make_user("kaiba")
        await session.commit()
        kaiba_headers = {"Authorization": f"Bearer {issue_token(kaiba.id)}"}

        fetched = await client.get(f"/decks/{deck_id}", headers=kaiba_headers)
        listed = await client.get("/decks", headers=kaiba_headers)

        assert fetched.status_code == 404
        assert listed.json() == []
