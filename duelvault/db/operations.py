"""
Database CRUD operations.

Point lookups and simple writes shared by the services. Every function
takes the caller's session and only flushes; committing is the caller's job.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from duelvault.models.db import (
    CardDB,
    CollectionItemDB,
    DeckCardDB,
    DeckDB,
    PrintingDB,
    UserDB,
)
from duelvault.models.enums import CardCondition, CardEdition

# --- User Operations ---


async def get_user(session: AsyncSession, user_id: int) -> UserDB | None:
    """Get a user by id. Returns None if absent."""
    return await session.get(UserDB, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> UserDB | None:
    result = await session.execute(select(UserDB).where(UserDB.email == email))
    return result.scalar_one_or_none()


async def get_user_by_username(session: AsyncSession, username: str) -> UserDB | None:
    result = await session.execute(select(UserDB).where(UserDB.username == username))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession, email: str, username: str, password_hash: str
) -> UserDB:
    """
    Create a new user.

    Raises IntegrityError if email or username is already taken.
    """
    user = UserDB(email=email, username=username, password_hash=password_hash)
    session.add(user)
    await session.flush()
    return user


# --- Card / Printing Operations ---


async def get_card(session: AsyncSession, card_id: int) -> CardDB | None:
    """Get a card with its printings."""
    result = await session.execute(
        select(CardDB).where(CardDB.id == card_id).options(selectinload(CardDB.printings))
    )
    return result.scalar_one_or_none()


async def get_card_by_konami_id(
    session: AsyncSession, konami_id: int, with_printings: bool = False
) -> CardDB | None:
    """Get a card by its natural key."""
    stmt = select(CardDB).where(CardDB.konami_id == konami_id)
    if with_printings:
        stmt = stmt.options(selectinload(CardDB.printings))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_printing(session: AsyncSession, printing_id: int) -> PrintingDB | None:
    """Get a printing with its card."""
    result = await session.execute(
        select(PrintingDB)
        .where(PrintingDB.id == printing_id)
        .options(selectinload(PrintingDB.card))
    )
    return result.scalar_one_or_none()


async def get_printing_by_card_and_set(
    session: AsyncSession, card_id: int, set_code: str
) -> PrintingDB | None:
    """Get a printing by its natural key (card, set code)."""
    result = await session.execute(
        select(PrintingDB).where(
            PrintingDB.card_id == card_id,
            PrintingDB.set_code == set_code,
        )
    )
    return result.scalar_one_or_none()


async def get_printing_by_set_code(session: AsyncSession, set_code: str) -> PrintingDB | None:
    """Get the first printing with a set code, with its card."""
    result = await session.execute(
        select(PrintingDB)
        .where(PrintingDB.set_code == set_code)
        .options(selectinload(PrintingDB.card))
        .order_by(PrintingDB.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_printings_by_set_prefix(session: AsyncSession, prefix: str) -> list[PrintingDB]:
    """All printings whose set code starts with prefix, with their cards, in set-code order."""
    result = await session.execute(
        select(PrintingDB)
        .where(PrintingDB.set_code.startswith(prefix, autoescape=True))
        .options(selectinload(PrintingDB.card))
        .order_by(PrintingDB.set_code, PrintingDB.id)
    )
    return list(result.scalars().all())


async def get_card_printings(session: AsyncSession, card_id: int) -> list[PrintingDB]:
    result = await session.execute(
        select(PrintingDB).where(PrintingDB.card_id == card_id).order_by(PrintingDB.set_code)
    )
    return list(result.scalars().all())


# --- Collection Operations ---


async def count_collection_items(session: AsyncSession, user_id: int) -> int:
    """Number of collection rows (not copies) a user holds."""
    result = await session.execute(
        select(func.count())
        .select_from(CollectionItemDB)
        .where(CollectionItemDB.user_id == user_id)
    )
    return int(result.scalar_one())


async def find_collection_item(
    session: AsyncSession,
    user_id: int,
    printing_id: int,
    condition: CardCondition,
    language: str,
    edition: CardEdition,
) -> CollectionItemDB | None:
    """Look up a collection item by its natural key."""
    result = await session.execute(
        select(CollectionItemDB).where(
            CollectionItemDB.user_id == user_id,
            CollectionItemDB.printing_id == printing_id,
            CollectionItemDB.condition == condition,
            CollectionItemDB.language == language,
            CollectionItemDB.edition == edition,
        )
    )
    return result.scalar_one_or_none()


async def get_collection_item(
    session: AsyncSession, user_id: int, item_id: int
) -> CollectionItemDB | None:
    """Get one of a user's items with its printing and card."""
    result = await session.execute(
        select(CollectionItemDB)
        .where(CollectionItemDB.id == item_id, CollectionItemDB.user_id == user_id)
        .options(selectinload(CollectionItemDB.printing).selectinload(PrintingDB.card))
    )
    return result.scalar_one_or_none()


async def get_user_collection_items(session: AsyncSession, user_id: int) -> list[CollectionItemDB]:
    """All of a user's items with printings and cards, in insertion order."""
    result = await session.execute(
        select(CollectionItemDB)
        .where(CollectionItemDB.user_id == user_id)
        .options(selectinload(CollectionItemDB.printing).selectinload(PrintingDB.card))
        .order_by(CollectionItemDB.id)
    )
    return list(result.scalars().all())


async def get_owned_quantities(
    session: AsyncSession, user_id: int, printing_ids: list[int]
) -> dict[int, int]:
    """
    Total owned copies per printing.

    Sums across every condition, language and edition.
    """
    if not printing_ids:
        return {}
    result = await session.execute(
        select(CollectionItemDB.printing_id, func.sum(CollectionItemDB.quantity))
        .where(
            CollectionItemDB.user_id == user_id,
            CollectionItemDB.printing_id.in_(printing_ids),
        )
        .group_by(CollectionItemDB.printing_id)
    )
    return {printing_id: int(total) for printing_id, total in result.all()}


# --- Deck Operations ---


async def get_deck(session: AsyncSession, user_id: int, deck_id: int) -> DeckDB | None:
    """Get one of a user's decks with cards, printings and card data."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.id == deck_id, DeckDB.user_id == user_id)
        .options(
            selectinload(DeckDB.cards)
            .selectinload(DeckCardDB.printing)
            .selectinload(PrintingDB.card)
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_decks(session: AsyncSession, user_id: int) -> list[DeckDB]:
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.user_id == user_id)
        .options(
            selectinload(DeckDB.cards)
            .selectinload(DeckCardDB.printing)
            .selectinload(PrintingDB.card)
        )
        .order_by(DeckDB.id)
    )
    return list(result.scalars().all())


async def count_user_decks(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count()).select_from(DeckDB).where(DeckDB.user_id == user_id)
    )
    return int(result.scalar_one())
