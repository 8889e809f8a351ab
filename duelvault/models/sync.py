from dataclasses import dataclass
from typing import Any


@dataclass
class RecordOutcome:
    """Result of reconciling one catalog record."""

    created: bool
    card_id: int
    printings_created: int = 0


@dataclass
class SyncResult:
    """
    Totals of a catalog sync run.

    A run that completes is successful even if individual records failed;
    those are counted in ``errors``.
    """

    cards_created: int = 0
    cards_updated: int = 0
    printings_created: int = 0
    total_cards: int = 0
    errors: int = 0
    success: bool = True

    def record(self, outcome: RecordOutcome | None) -> None:
        """Tally one record's outcome; None means the record failed."""
        if outcome is None:
            self.errors += 1
            return
        if outcome.created:
            self.cards_created += 1
        else:
            self.cards_updated += 1
        self.printings_created += outcome.printings_created

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "cardsCreated": self.cards_created,
            "cardsUpdated": self.cards_updated,
            "printingsCreated": self.printings_created,
            "totalCards": self.total_cards,
            "errors": self.errors,
        }
