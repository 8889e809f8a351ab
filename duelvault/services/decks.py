"""
Deck management.

Every submitted card list goes through ``DeckBuilder.from_cards`` before it
is written, so stored decks never exceed the per-zone copy cap. Zone size
targets are only reported, never enforced.
"""

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db.operations import get_owned_quantities, get_printing, get_user, get_user_decks
from duelvault.db.operations import get_deck as fetch_deck
from duelvault.models.db import DeckCardDB, DeckDB
from duelvault.models.deck_builder import DeckBuilder, DeckCardSpec, zone_warnings
from duelvault.models.enums import DeckZone
from duelvault.models.failure import NotFoundError

logger = logging.getLogger(__name__)

# Deck metadata a caller may change
UPDATABLE_FIELDS = frozenset({"name", "description", "format", "is_public"})


@dataclass
class DeckStats:
    main_deck_count: int
    extra_deck_count: int
    side_deck_count: int
    total_cards: int
    type_breakdown: dict[str, int]
    warnings: list[str] = field(default_factory=list)


@dataclass
class OwnedCard:
    printing_id: int
    required: int
    owned: int
    complete: bool


@dataclass
class MissingCard:
    printing_id: int
    missing: int


@dataclass
class OwnershipReport:
    """Which deck cards the user can build from their collection."""

    deck_id: int
    is_complete: bool
    owned_cards: list[OwnedCard]
    missing_cards: list[MissingCard]


async def _require_deck(session: AsyncSession, user_id: int, deck_id: int) -> DeckDB:
    deck = await fetch_deck(session, user_id, deck_id)
    if deck is None:
        raise NotFoundError("Deck", deck_id)
    return deck


async def _build_cards(session: AsyncSession, cards: Sequence[DeckCardSpec]) -> list[DeckCardDB]:
    """Apply the copy cap and resolve printings; returns unsaved rows."""
    builder = DeckBuilder.from_cards(cards)
    rows: list[DeckCardDB] = []
    for spec in builder.cards():
        if await get_printing(session, spec.printing_id) is None:
            raise NotFoundError("Printing", spec.printing_id)
        rows.append(
            DeckCardDB(printing_id=spec.printing_id, quantity=spec.quantity, zone=spec.zone)
        )
    return rows


async def create_deck(
    session: AsyncSession,
    user_id: int,
    name: str,
    description: str | None = None,
    format: str | None = None,
    is_public: bool = False,
    cards: Sequence[DeckCardSpec] = (),
) -> DeckDB:
    """
    Create a deck with an optional initial card list.

    Raises:
        NotFoundError: If the user or a printing does not exist
        DeckRuleError: If the card list breaks the copy cap
    """
    if await get_user(session, user_id) is None:
        raise NotFoundError("User", user_id)

    deck = DeckDB(
        user_id=user_id,
        name=name,
        description=description,
        format=format,
        is_public=is_public,
    )
    deck.cards = await _build_cards(session, cards)
    session.add(deck)
    await session.flush()
    logger.info("Created deck %s for user %s (%d cards)", deck.id, user_id, len(deck.cards))
    return await _require_deck(session, user_id, deck.id)


async def list_decks(session: AsyncSession, user_id: int) -> list[DeckDB]:
    return await get_user_decks(session, user_id)


async def get_deck(session: AsyncSession, user_id: int, deck_id: int) -> DeckDB:
    """
    Get one of a user's decks.

    Raises:
        NotFoundError: If the deck does not exist or belongs to another user
    """
    return await _require_deck(session, user_id, deck_id)


async def update_deck(
    session: AsyncSession,
    user_id: int,
    deck_id: int,
    changes: dict[str, Any],
    cards: Sequence[DeckCardSpec] | None = None,
) -> DeckDB:
    """
    Update deck metadata and optionally replace its whole card list.

    ``cards=None`` leaves the cards untouched; an empty list clears them.

    Raises:
        NotFoundError: If the deck or a printing does not exist
        DeckRuleError: If the new card list breaks the copy cap
        ValueError: If changes contain an unknown field
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")

    deck = await _require_deck(session, user_id, deck_id)

    for field_name, value in changes.items():
        if value is None and field_name in ("name", "is_public"):
            continue
        setattr(deck, field_name, value)

    if cards is not None:
        # Build first so a rule violation leaves the existing list in place
        new_cards = await _build_cards(session, cards)
        deck.cards.clear()
        await session.flush()
        deck.cards.extend(new_cards)

    await session.flush()
    return await _require_deck(session, user_id, deck_id)


async def delete_deck(session: AsyncSession, user_id: int, deck_id: int) -> None:
    """
    Delete a deck and its cards.

    Raises:
        NotFoundError: If the deck does not exist or belongs to another user
    """
    deck = await _require_deck(session, user_id, deck_id)
    await session.delete(deck)
    await session.flush()
    logger.info("Deleted deck %s for user %s", deck_id, user_id)


def summarize_deck(deck: DeckDB) -> DeckStats:
    """Zone counts, per-type counts and size warnings for a loaded deck."""
    counts: Counter[DeckZone] = Counter()
    type_breakdown: Counter[str] = Counter()
    for deck_card in deck.cards:
        counts[deck_card.zone] += deck_card.quantity
        type_breakdown[deck_card.printing.card.type] += deck_card.quantity

    return DeckStats(
        main_deck_count=counts[DeckZone.MAIN],
        extra_deck_count=counts[DeckZone.EXTRA],
        side_deck_count=counts[DeckZone.SIDE],
        total_cards=sum(counts.values()),
        type_breakdown=dict(type_breakdown),
        warnings=zone_warnings(dict(counts)),
    )


async def deck_stats(session: AsyncSession, user_id: int, deck_id: int) -> DeckStats:
    deck = await _require_deck(session, user_id, deck_id)
    return summarize_deck(deck)


async def validate_ownership(session: AsyncSession, user_id: int, deck_id: int) -> OwnershipReport:
    """
    Compare a deck's card list with the user's collection.

    Each deck card row is checked on its own against the total copies the
    user owns of that printing, across every condition, language and edition.

    Raises:
        NotFoundError: If the deck does not exist or belongs to another user
    """
    deck = await _require_deck(session, user_id, deck_id)
    owned_by_printing = await get_owned_quantities(
        session, user_id, list({deck_card.printing_id for deck_card in deck.cards})
    )

    owned_cards: list[OwnedCard] = []
    missing_cards: list[MissingCard] = []
    for deck_card in deck.cards:
        owned = owned_by_printing.get(deck_card.printing_id, 0)
        complete = owned >= deck_card.quantity
        owned_cards.append(
            OwnedCard(
                printing_id=deck_card.printing_id,
                required=deck_card.quantity,
                owned=owned,
                complete=complete,
            )
        )
        if not complete:
            missing_cards.append(
                MissingCard(printing_id=deck_card.printing_id, missing=deck_card.quantity - owned)
            )

    return OwnershipReport(
        deck_id=deck.id,
        is_complete=not missing_cards,
        owned_cards=owned_cards,
        missing_cards=missing_cards,
    )
