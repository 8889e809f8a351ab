"""
Deck builder state.

Pure model of a deck under construction: zone -> {printing_id: quantity}.
The same rules apply to interactive building (``add``/``remove`` clamp at
the copy cap) and to validating a submitted card list before it is
persisted (``from_cards`` rejects anything over the cap).

Zone size targets are advisory and reported by ``warnings()``.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from duelvault.config import (
    EXTRA_DECK_MAX,
    MAIN_DECK_MAX,
    MAIN_DECK_MIN,
    MAX_COPIES_PER_ZONE,
    SIDE_DECK_MAX,
)
from duelvault.models.enums import DeckZone
from duelvault.models.failure import DeckRuleError


@dataclass(frozen=True, slots=True)
class DeckCardSpec:
    """A printing placed in a deck zone."""

    printing_id: int
    quantity: int = 1
    zone: DeckZone = DeckZone.MAIN


def zone_warnings(counts: dict[DeckZone, int]) -> list[str]:
    """Advisory messages for zones outside their target size."""
    warnings: list[str] = []
    main = counts.get(DeckZone.MAIN, 0)
    extra = counts.get(DeckZone.EXTRA, 0)
    side = counts.get(DeckZone.SIDE, 0)

    if main < MAIN_DECK_MIN:
        warnings.append(f"Main deck has {main} cards; at least {MAIN_DECK_MIN} required")
    elif main > MAIN_DECK_MAX:
        warnings.append(f"Main deck has {main} cards; at most {MAIN_DECK_MAX} allowed")
    if extra > EXTRA_DECK_MAX:
        warnings.append(f"Extra deck has {extra} cards; at most {EXTRA_DECK_MAX} allowed")
    if side > SIDE_DECK_MAX:
        warnings.append(f"Side deck has {side} cards; at most {SIDE_DECK_MAX} allowed")
    return warnings


@dataclass
class DeckBuilder:
    """
    Mutable deck-in-progress.

    Quantities are kept per zone in insertion order; a printing can appear in
    several zones, each with its own cap.
    """

    max_copies: int = MAX_COPIES_PER_ZONE
    zones: dict[DeckZone, dict[int, int]] = field(
        default_factory=lambda: {zone: {} for zone in DeckZone}
    )

    @classmethod
    def from_cards(
        cls, cards: Iterable[DeckCardSpec], max_copies: int = MAX_COPIES_PER_ZONE
    ) -> "DeckBuilder":
        """
        Load a submitted card list.

        Entries for the same printing and zone are merged.

        Raises:
            DeckRuleError: If a quantity is not positive or a printing exceeds
                the copy cap in a zone
        """
        builder = cls(max_copies=max_copies)
        for card in cards:
            if card.quantity < 1:
                raise DeckRuleError(
                    f"Quantity for printing {card.printing_id} must be positive",
                    detail=f"quantity={card.quantity}",
                )
            zone = builder.zones[card.zone]
            total = zone.get(card.printing_id, 0) + card.quantity
            if total > max_copies:
                raise DeckRuleError(
                    f"Printing {card.printing_id} appears {total} times in the "
                    f"{card.zone.value} deck; at most {max_copies} copies are allowed",
                    detail=f"zone={card.zone.value}",
                )
            zone[card.printing_id] = total
        return builder

    def add(self, printing_id: int, zone: DeckZone = DeckZone.MAIN) -> bool:
        """Add one copy. Returns False (no change) if the cap is reached."""
        cards = self.zones[zone]
        current = cards.get(printing_id, 0)
        if current >= self.max_copies:
            return False
        cards[printing_id] = current + 1
        return True

    def remove(self, printing_id: int, zone: DeckZone = DeckZone.MAIN) -> bool:
        """Remove one copy. Returns False if the printing is not in the zone."""
        cards = self.zones[zone]
        current = cards.get(printing_id, 0)
        if current == 0:
            return False
        if current == 1:
            del cards[printing_id]
        else:
            cards[printing_id] = current - 1
        return True

    def quantity(self, printing_id: int, zone: DeckZone = DeckZone.MAIN) -> int:
        return self.zones[zone].get(printing_id, 0)

    def count(self, zone: DeckZone) -> int:
        """Total copies in a zone."""
        return sum(self.zones[zone].values())

    def total(self) -> int:
        return sum(self.count(zone) for zone in DeckZone)

    def clear(self) -> None:
        for cards in self.zones.values():
            cards.clear()

    def counts(self) -> dict[DeckZone, int]:
        return {zone: self.count(zone) for zone in DeckZone}

    def warnings(self) -> list[str]:
        return zone_warnings(self.counts())

    def cards(self) -> list[DeckCardSpec]:
        """Flatten to one spec per (zone, printing)."""
        return [
            DeckCardSpec(printing_id=printing_id, quantity=quantity, zone=zone)
            for zone in DeckZone
            for printing_id, quantity in self.zones[zone].items()
        ]
