"""
Collection valuation and set progress.

Read-only aggregation over a user's collection items. All arithmetic is done
in-process with Decimal so that rounding and missing-price handling do not
depend on the database's aggregate functions.

ROUNDING:
Monetary outputs are rounded to cents, half away from zero. Percentages are
rounded to whole numbers the same way.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db.operations import get_printings_by_set_prefix, get_user_collection_items
from duelvault.models.collection import (
    CollectionStats,
    ExportRow,
    MissingPrinting,
    PortfolioSummary,
    SetProgress,
)
from duelvault.models.db import CollectionItemDB

CENT = Decimal("0.01")

DEFAULT_TOP_VALUE_LIMIT = 10


def to_decimal(value: float | None) -> Decimal:
    """Convert a stored float to Decimal; None counts as zero."""
    if value is None:
        return Decimal(0)
    # str() keeps the shortest repr, so 0.1 becomes Decimal("0.1") not its binary expansion
    return Decimal(str(value))


def round_money(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


def round_percentage(owned: int, total: int) -> int:
    """Whole-number percentage of owned/total; 0 for an empty total."""
    if total == 0:
        return 0
    ratio = Decimal(100 * owned) / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def item_value(item: CollectionItemDB) -> Decimal:
    """Market value of an item: printing price x quantity."""
    return to_decimal(item.printing.price) * item.quantity


def set_prefix(set_code: str) -> str:
    """Set identifier of a printed set code ("LOB-EN001" -> "LOB")."""
    return set_code.split("-")[0]


def summarize_items(items: list[CollectionItemDB]) -> CollectionStats:
    """Aggregate already-loaded collection items."""
    total_value = Decimal(0)
    total_purchase_value = Decimal(0)
    total_cards = 0
    breakdown_values: dict[str, Decimal] = {}
    breakdown_counts: dict[str, int] = {}

    for item in items:
        value = item_value(item)
        purchase_value = to_decimal(item.purchase_price) * item.quantity

        total_value += value
        total_purchase_value += purchase_value
        total_cards += item.quantity

        portfolio = item.portfolio.value
        breakdown_counts[portfolio] = breakdown_counts.get(portfolio, 0) + item.quantity
        breakdown_values[portfolio] = breakdown_values.get(portfolio, Decimal(0)) + value

    return CollectionStats(
        total_cards=total_cards,
        total_unique_cards=len(items),
        total_value=round_money(total_value),
        total_purchase_value=round_money(total_purchase_value),
        profit_loss=round_money(total_value - total_purchase_value),
        portfolio_breakdown={
            portfolio: PortfolioSummary(
                count=breakdown_counts[portfolio],
                value=round_money(breakdown_values[portfolio]),
            )
            for portfolio in breakdown_counts
        },
    )


async def compute_stats(session: AsyncSession, user_id: int) -> CollectionStats:
    """Total value, purchase value, profit/loss and portfolio breakdown."""
    items = await get_user_collection_items(session, user_id)
    return summarize_items(items)


@dataclass
class TopValueItem:
    """A collection item annotated with its market value."""

    item: CollectionItemDB
    total_value: float


async def top_value_items(
    session: AsyncSession, user_id: int, limit: int = DEFAULT_TOP_VALUE_LIMIT
) -> list[TopValueItem]:
    """
    Most valuable items by price x quantity.

    Ties keep insertion order.
    """
    items = await get_user_collection_items(session, user_id)
    ranked = sorted(items, key=item_value, reverse=True)
    return [
        TopValueItem(item=item, total_value=round_money(item_value(item)))
        for item in ranked[:limit]
    ]


async def set_progress(session: AsyncSession, user_id: int, set_code: str) -> SetProgress:
    """
    Completion of a set.

    Every printing whose set code starts with the set prefix counts toward
    the total. A printing is owned if the user has any item of it,
    regardless of quantity.
    """
    prefix = set_prefix(set_code)
    printings = await get_printings_by_set_prefix(session, prefix)

    items = await get_user_collection_items(session, user_id)
    owned_ids = {item.printing_id for item in items}

    owned = [p for p in printings if p.id in owned_ids]
    missing = [p for p in printings if p.id not in owned_ids]

    return SetProgress(
        set_code=prefix,
        total_cards=len(printings),
        owned_cards=len(owned),
        missing_cards=len(missing),
        completion_percentage=round_percentage(len(owned), len(printings)),
        missing_list=[
            MissingPrinting(
                id=p.id,
                set_code=p.set_code,
                card_name=p.card.name,
                rarity=p.rarity,
                price=p.price,
            )
            for p in missing
        ],
    )


async def export_collection(session: AsyncSession, user_id: int) -> list[ExportRow]:
    """Flat snapshot of every collection item."""
    items = await get_user_collection_items(session, user_id)
    return [
        ExportRow(
            card_name=item.printing.card.name,
            set_code=item.printing.set_code,
            set_name=item.printing.set_name,
            rarity=item.printing.rarity,
            condition=item.condition,
            language=item.language,
            edition=item.edition,
            quantity=item.quantity,
            purchase_price=item.purchase_price,
            current_price=item.printing.price,
            storage_location=item.storage_location,
            portfolio=item.portfolio,
        )
        for item in items
    ]
