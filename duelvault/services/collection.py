"""
Collection management.

Adding an item whose (printing, condition, language, edition) already
exists for the user merges quantities into the existing row. Quantity zero
deletes a row. Free-tier accounts are capped at ``settings.free_tier_limit``
rows; at the cap every add is rejected, merges included.
"""

import logging
from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from duelvault.config import settings
from duelvault.db.operations import (
    count_collection_items,
    find_collection_item,
    get_collection_item,
    get_printing,
    get_user,
)
from duelvault.models.db import CardDB, CollectionItemDB, PrintingDB
from duelvault.models.enums import CardCondition, CardEdition, PortfolioType, UserTier
from duelvault.models.failure import ConflictError, NotFoundError, QuotaExceededError

logger = logging.getLogger(__name__)

SortField = Literal["created", "name", "price"]
SortOrder = Literal["asc", "desc"]

# Fields a caller may change on an existing item
UPDATABLE_FIELDS = frozenset(
    {"quantity", "condition", "edition", "purchase_price", "storage_location", "portfolio"}
)

# Fields that can be cleared by passing None
NULLABLE_FIELDS = frozenset({"purchase_price", "storage_location"})


@dataclass
class CollectionPage:
    """A page of collection items plus the unpaginated total."""

    items: list[CollectionItemDB]
    total: int
    limit: int
    offset: int


async def _require_item(session: AsyncSession, user_id: int, item_id: int) -> CollectionItemDB:
    item = await get_collection_item(session, user_id, item_id)
    if item is None:
        raise NotFoundError("Collection item", item_id)
    return item


async def _flush_or_conflict(session: AsyncSession) -> None:
    try:
        await session.flush()
    except IntegrityError as e:
        raise ConflictError(
            "An identical collection item already exists",
            detail="Same printing, condition, language and edition",
        ) from e


async def add_to_collection(
    session: AsyncSession,
    user_id: int,
    printing_id: int,
    quantity: int = 1,
    condition: CardCondition = CardCondition.NEAR_MINT,
    language: str = "EN",
    edition: CardEdition = CardEdition.UNLIMITED,
    purchase_price: float | None = None,
    storage_location: str | None = None,
    portfolio: PortfolioType = PortfolioType.COLLECTION,
) -> CollectionItemDB:
    """
    Add copies of a printing to a user's collection.

    Returns:
        The created or merged item, with printing and card loaded

    Raises:
        NotFoundError: If the printing or user does not exist
        QuotaExceededError: If a free-tier user is at the limit
        ConflictError: If a concurrent add created the same row first
    """
    if quantity < 1:
        raise ValueError(f"quantity must be at least 1, got {quantity}")

    if await get_printing(session, printing_id) is None:
        raise NotFoundError("Printing", printing_id)

    user = await get_user(session, user_id)
    if user is None:
        raise NotFoundError("User", user_id)

    if user.tier == UserTier.FREE:
        item_count = await count_collection_items(session, user_id)
        if item_count >= settings.free_tier_limit:
            logger.info("User %s hit the free tier limit (%d items)", user_id, item_count)
            raise QuotaExceededError(settings.free_tier_limit)

    existing = await find_collection_item(
        session, user_id, printing_id, condition, language, edition
    )

    if existing is not None:
        existing.quantity += quantity
        if purchase_price is not None:
            existing.purchase_price = purchase_price
        if storage_location is not None:
            existing.storage_location = storage_location
        await session.flush()
        return await _require_item(session, user_id, existing.id)

    item = CollectionItemDB(
        user_id=user_id,
        printing_id=printing_id,
        condition=condition,
        language=language,
        edition=edition,
        quantity=quantity,
        purchase_price=purchase_price,
        storage_location=storage_location,
        portfolio=portfolio,
    )
    session.add(item)
    await _flush_or_conflict(session)
    return await _require_item(session, user_id, item.id)


async def list_collection(
    session: AsyncSession,
    user_id: int,
    portfolio: PortfolioType | None = None,
    condition: CardCondition | None = None,
    search: str | None = None,
    set_code: str | None = None,
    sort_by: SortField = "created",
    sort_order: SortOrder | None = None,
    limit: int = 50,
    offset: int = 0,
) -> CollectionPage:
    """
    Filtered, sorted, paginated view of a user's collection.

    ``search`` matches the card's default or English name, ``set_code``
    matches any part of the printing's set code; both case-insensitive.
    Default ordering is newest first for ``created`` and ``price`` and A-Z
    for ``name``.
    """
    conditions: list[Any] = [CollectionItemDB.user_id == user_id]
    if portfolio is not None:
        conditions.append(CollectionItemDB.portfolio == portfolio)
    if condition is not None:
        conditions.append(CollectionItemDB.condition == condition)
    if set_code:
        conditions.append(PrintingDB.set_code.ilike(f"%{set_code}%"))
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(CardDB.name.ilike(pattern), CardDB.name_en.ilike(pattern)))

    if sort_by == "name":
        column: Any = CardDB.name
        default_order: SortOrder = "asc"
    elif sort_by == "price":
        column = PrintingDB.price
        default_order = "desc"
    else:
        column = CollectionItemDB.created_at
        default_order = "desc"
    order = sort_order or default_order
    order_by = column.asc() if order == "asc" else column.desc()
    tiebreak = CollectionItemDB.id.asc() if order == "asc" else CollectionItemDB.id.desc()

    base = (
        select(CollectionItemDB)
        .join(PrintingDB, CollectionItemDB.printing_id == PrintingDB.id)
        .join(CardDB, PrintingDB.card_id == CardDB.id)
        .where(*conditions)
    )

    result = await session.execute(
        base.options(selectinload(CollectionItemDB.printing).selectinload(PrintingDB.card))
        .order_by(order_by, tiebreak)
        .limit(limit)
        .offset(offset)
    )
    items = list(result.scalars().all())

    total = await session.execute(select(func.count()).select_from(base.subquery()))

    return CollectionPage(items=items, total=int(total.scalar_one()), limit=limit, offset=offset)


async def get_item(session: AsyncSession, user_id: int, item_id: int) -> CollectionItemDB:
    """
    Get one of a user's items.

    Raises:
        NotFoundError: If the item does not exist or belongs to another user
    """
    return await _require_item(session, user_id, item_id)


async def update_item(
    session: AsyncSession, user_id: int, item_id: int, changes: dict[str, Any]
) -> CollectionItemDB | None:
    """
    Apply a partial update to an item.

    A quantity of 0 deletes the item and returns None.

    Raises:
        NotFoundError: If the item does not exist or belongs to another user
        ValueError: If changes contain an unknown field or a negative quantity
        ConflictError: If the new condition/edition collides with another item
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")

    item = await _require_item(session, user_id, item_id)

    quantity = changes.get("quantity")
    if quantity is not None and quantity < 0:
        raise ValueError(f"quantity must not be negative, got {quantity}")
    if quantity == 0:
        await session.delete(item)
        await session.flush()
        return None

    for field_name, value in changes.items():
        if value is None and field_name not in NULLABLE_FIELDS:
            continue
        setattr(item, field_name, value)

    await _flush_or_conflict(session)
    return await _require_item(session, user_id, item_id)


async def remove_item(session: AsyncSession, user_id: int, item_id: int) -> None:
    """
    Delete one of a user's items.

    Raises:
        NotFoundError: If the item does not exist or belongs to another user
    """
    item = await _require_item(session, user_id, item_id)
    await session.delete(item)
    await session.flush()
