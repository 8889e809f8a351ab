"""Tests for collection valuation and set progress."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.models.db import CollectionItemDB
from duelvault.models.enums import CardCondition, CardEdition, PortfolioType
from duelvault.services.valuation import (
    compute_stats,
    export_collection,
    round_money,
    round_percentage,
    set_prefix,
    set_progress,
    top_value_items,
)


async def add_item(
    session: AsyncSession,
    user_id: int,
    printing_id: int,
    quantity: int = 1,
    purchase_price: float | None = None,
    portfolio: PortfolioType = PortfolioType.COLLECTION,
    condition: CardCondition = CardCondition.NEAR_MINT,
) -> CollectionItemDB:
    item = CollectionItemDB(
        user_id=user_id,
        printing_id=printing_id,
        quantity=quantity,
        purchase_price=purchase_price,
        portfolio=portfolio,
        condition=condition,
        language="EN",
        edition=CardEdition.UNLIMITED,
    )
    session.add(item)
    await session.flush()
    return item


class TestRounding:
    def test_money_rounds_half_up(self) -> None:
        assert round_money(Decimal("0.125")) == 0.13
        assert round_money(Decimal("-0.125")) == -0.13
        assert round_money(Decimal("10")) == 10.0

    def test_percentage(self) -> None:
        assert round_percentage(2, 4) == 50
        assert round_percentage(1, 3) == 33
        assert round_percentage(2, 3) == 67
        assert round_percentage(1, 8) == 13

    def test_empty_total_is_zero(self) -> None:
        assert round_percentage(0, 0) == 0

    @pytest.mark.parametrize(
        ("code", "prefix"), [("LOB-EN001", "LOB"), ("LOB", "LOB"), ("SDK-001", "SDK")]
    )
    def test_set_prefix(self, code: str, prefix: str) -> None:
        assert set_prefix(code) == prefix


class TestComputeStats:
    async def test_value_and_profit(self, session: AsyncSession, make_user, make_printing) -> None:
        """One item: price 10.00 x 4 bought at 6.00 each."""
        user = await make_user()
        printing = await make_printing("LOB-EN001", price=10.0)
        await add_item(session, user.id, printing.id, quantity=4, purchase_price=6.0)

        stats = await compute_stats(session, user.id)

        assert stats.total_cards == 4
        assert stats.total_unique_cards == 1
        assert stats.total_value == 40.0
        assert stats.total_purchase_value == 24.0
        assert stats.profit_loss == 16.0

    async def test_hundred_euro_collection(
        self, session: AsyncSession, make_user, make_printing
    ) -> None:
        user = await make_user()
        expensive = await make_printing("LOB-EN001", price=25.5)
        cheap = await make_printing("LOB-EN002", price=0.1)
        await add_item(session, user.id, expensive.id, quantity=3)
        await add_item(session, user.id, cheap.id, quantity=235)

        stats = await compute_stats(session, user.id)

        # 76.50 + 23.50; naive float summing would drift
        assert stats.total_value == 100.0

    async def test_missing_prices_count_as_zero(
        self, session: AsyncSession, make_user, make_printing
    ) -> None:
        user = await make_user()
        unpriced = await make_printing("LOB-EN001", price=None)
        priced = await make_printing("LOB-EN002", price=2.0)
        await add_item(session, user.id, unpriced.id, quantity=2, purchase_price=1.0)
        await add_item(session, user.id, priced.id, quantity=1)

        stats = await compute_stats(session, user.id)

        assert stats.total_value == 2.0
        assert stats.total_purchase_value == 2.0
        assert stats.profit_loss == 0.0

    async def test_portfolio_breakdown(
        self, session: AsyncSession, make_user, make_printing
    ) -> None:
        user = await make_user()
        printing = await make_printing("LOB-EN001", price=1.5)
        await add_item(session, user.id, printing.id, quantity=2)
        await add_item(
            session,
            user.id,
            printing.id,
            quantity=3,
            portfolio=PortfolioType.TRADES,
            condition=CardCondition.PLAYED,
        )

        stats = await compute_stats(session, user.id)

        assert set(stats.portfolio_breakdown) == {"COLLECTION", "TRADES"}
        assert stats.portfolio_breakdown["COLLECTION"].count == 2
        assert stats.portfolio_breakdown["COLLECTION"].value == 3.0
        assert stats.portfolio_breakdown["TRADES"].count == 3
        assert stats.portfolio_breakdown["TRADES"].value == 4.5

    async def test_empty_collection(self, session: AsyncSession, make_user) -> None:
        user = await make_user()

        stats = await compute_stats(session, user.id)

        assert stats.total_cards == 0
        assert stats.total_value == 0.0
        assert stats.portfolio_breakdown == {}

    async def test_only_counts_own_items(
        self, session: AsyncSession, make_user, make_printing
    ) -> None:
        yugi = await make_user("yugi")
        kaiba = await make_user("kaiba")
        printing = await make_printing("LOB-EN001", price=5.0)
        await add_item(session, kaiba.id, printing.id, quantity=10)

        stats = await compute_stats(session, yugi.id)

        assert stats.total_cards == 0


class TestTopValueItems:
    async def test_sorted_by_total_value(
        self, session: AsyncSession, make_user, make_printing
    ) -> None:
        user = await make_user()
        a = await make_printing("LOB-EN001", price=1.0)
        b = await make_printing("LOB-EN002", price=30.0)
        c = await make_printing("LOB-EN003", price=4.0)
        await add_item(session, user.id, a.id, quantity=1)
        await add_item(session, user.id, b.id, quantity=1)
        await add_item(session, user.id, c.id, quantity=10)

        ranked = await top_value_items(session, user.id)

        assert [entry.item.printing_id for entry in ranked] == [c.id, b.id, a.id]
        assert [entry.total_value for entry in ranked] == [40.0, 30.0, 1.0]

    async def test_limit(self, session: AsyncSession, make_user, make_printing) -> None:
        user = await make_user()
        for n in range(5):
            printing = await make_printing(f"LOB-EN00{n}", price=float(n))
            await add_item(session, user.id, printing.id)

        ranked = await top_value_items(session, user.id, limit=2)

        assert [entry.total_value for entry in ranked] == [4.0, 3.0]


class TestSetProgress:
    async def test_half_owned(self, session: AsyncSession, make_user, make_printing) -> None:
        """4 printings in LOB, 2 owned -> 50%."""
        user = await make_user()
        printings = [
            await make_printing(f"LOB-EN00{n}", price=float(n), rarity="Rare") for n in range(1, 5)
        ]
        await make_printing("SDK-001", price=1.0)
        await add_item(session, user.id, printings[0].id)
        await add_item(session, user.id, printings[2].id, quantity=3)

        progress = await set_progress(session, user.id, "LOB-EN001")

        assert progress.set_code == "LOB"
        assert progress.total_cards == 4
        assert progress.owned_cards == 2
        assert progress.missing_cards == 2
        assert progress.completion_percentage == 50
        assert not progress.is_complete
        assert [m.set_code for m in progress.missing_list] == ["LOB-EN002", "LOB-EN004"]
        assert progress.missing_list[0].rarity == "Rare"
        assert progress.missing_list[0].price == 2.0

    async def test_multiple_items_of_one_printing_count_once(
        self, session: AsyncSession, make_user, make_printing
    ) -> None:
        user = await make_user()
        printing = await make_printing("LOB-EN001")
        await make_printing("LOB-EN002")
        await add_item(session, user.id, printing.id)
        await add_item(session, user.id, printing.id, condition=CardCondition.POOR)

        progress = await set_progress(session, user.id, "LOB")

        assert progress.owned_cards == 1
        assert progress.completion_percentage == 50

    async def test_complete_set(self, session: AsyncSession, make_user, make_printing) -> None:
        user = await make_user()
        printing = await make_printing("MRD-EN001")
        await add_item(session, user.id, printing.id)

        progress = await set_progress(session, user.id, "MRD")

        assert progress.completion_percentage == 100
        assert progress.is_complete
        assert progress.missing_list == []

    async def test_unknown_set_is_zero(self, session: AsyncSession, make_user) -> None:
        user = await make_user()

        progress = await set_progress(session, user.id, "XYZ")

        assert progress.total_cards == 0
        assert progress.completion_percentage == 0
        assert not progress.is_complete


class TestExportCollection:
    async def test_flattens_items(self, session: AsyncSession, make_user, make_printing) -> None:
        user = await make_user()
        printing = await make_printing(
            "LOB-EN001", price=12.0, rarity="Ultra Rare", name="Blue-Eyes White Dragon"
        )
        await add_item(session, user.id, printing.id, quantity=2, purchase_price=8.0)

        rows = await export_collection(session, user.id)

        assert len(rows) == 1
        row = rows[0]
        assert row.card_name == "Blue-Eyes White Dragon"
        assert row.set_code == "LOB-EN001"
        assert row.set_name == "Legend of Blue Eyes White Dragon"
        assert row.rarity == "Ultra Rare"
        assert row.quantity == 2
        assert row.purchase_price == 8.0
        assert row.current_price == 12.0
        assert row.condition == CardCondition.NEAR_MINT
        assert row.portfolio == PortfolioType.COLLECTION
