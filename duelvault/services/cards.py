"""
Card catalog queries.

Read-only access to the synced catalog. Name search is language aware:
English searches match the English name, German searches match the German
or default name, and anything else matches any stored name.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from duelvault.db import operations
from duelvault.models.db import CardDB, PrintingDB
from duelvault.models.enums import SearchLanguage
from duelvault.models.failure import NotFoundError

DEFAULT_SEARCH_LIMIT = 20


@dataclass
class CardPage:
    """A page of cards plus the unpaginated total."""

    items: list[CardDB]
    total: int
    limit: int
    offset: int


@dataclass
class CardStats:
    total_cards: int
    total_printings: int
    total_archetypes: int


def _name_filter(name: str, language: SearchLanguage) -> Any:
    pattern = f"%{name}%"
    if language == SearchLanguage.EN:
        return CardDB.name_en.ilike(pattern)
    if language == SearchLanguage.DE:
        return or_(CardDB.name_de.ilike(pattern), CardDB.name.ilike(pattern))
    return or_(
        CardDB.name.ilike(pattern),
        CardDB.name_en.ilike(pattern),
        CardDB.name_de.ilike(pattern),
    )


async def search_cards(
    session: AsyncSession,
    name: str | None = None,
    language: SearchLanguage = SearchLanguage.DE,
    type: str | None = None,
    archetype: str | None = None,
    attribute: str | None = None,
    limit: int = DEFAULT_SEARCH_LIMIT,
    offset: int = 0,
) -> CardPage:
    """
    Search the catalog.

    All filters are case-insensitive substring matches. Results are ordered
    by the English name for English searches and by the default name
    otherwise.
    """
    conditions: list[Any] = []
    if name:
        conditions.append(_name_filter(name, language))
    if type:
        conditions.append(CardDB.type.ilike(f"%{type}%"))
    if archetype:
        conditions.append(CardDB.archetype.ilike(f"%{archetype}%"))
    if attribute:
        conditions.append(CardDB.attribute.ilike(f"%{attribute}%"))

    order_column = CardDB.name_en if language == SearchLanguage.EN else CardDB.name
    base = select(CardDB).where(*conditions)

    result = await session.execute(
        base.options(selectinload(CardDB.printings))
        .order_by(order_column, CardDB.id)
        .limit(limit)
        .offset(offset)
    )
    total = await session.execute(select(func.count()).select_from(base.subquery()))

    return CardPage(
        items=list(result.scalars().all()),
        total=int(total.scalar_one()),
        limit=limit,
        offset=offset,
    )


async def get_card(session: AsyncSession, card_id: int) -> CardDB:
    """
    Get a card with its printings.

    Raises:
        NotFoundError: If no card has this id
    """
    card = await operations.get_card(session, card_id)
    if card is None:
        raise NotFoundError("Card", card_id)
    return card


async def get_card_by_konami_id(session: AsyncSession, konami_id: int) -> CardDB:
    card = await operations.get_card_by_konami_id(session, konami_id, with_printings=True)
    if card is None:
        raise NotFoundError("Card", konami_id)
    return card


async def get_card_printings(session: AsyncSession, card_id: int) -> list[PrintingDB]:
    """Printings of a card in set-code order. Raises NotFoundError for an unknown card."""
    if await operations.get_card(session, card_id) is None:
        raise NotFoundError("Card", card_id)
    return await operations.get_card_printings(session, card_id)


async def get_printing_by_set_code(session: AsyncSession, set_code: str) -> PrintingDB:
    printing = await operations.get_printing_by_set_code(session, set_code)
    if printing is None:
        raise NotFoundError("Printing", set_code)
    return printing


async def card_stats(session: AsyncSession) -> CardStats:
    """Catalog size: cards, printings and distinct archetypes."""
    total_cards = await session.execute(select(func.count()).select_from(CardDB))
    total_printings = await session.execute(select(func.count()).select_from(PrintingDB))
    total_archetypes = await session.execute(
        select(func.count(func.distinct(CardDB.archetype))).where(CardDB.archetype.is_not(None))
    )
    return CardStats(
        total_cards=int(total_cards.scalar_one()),
        total_printings=int(total_printings.scalar_one()),
        total_archetypes=int(total_archetypes.scalar_one()),
    )
