from dataclasses import dataclass, field

from duelvault.models.enums import CardCondition, CardEdition, PortfolioType


@dataclass
class PortfolioSummary:
    """Copies and market value held in one portfolio."""

    count: int = 0
    value: float = 0.0


@dataclass
class CollectionStats:
    """
    Aggregate value of a user's collection.

    Attributes:
        total_cards: Sum of quantities across all items
        total_unique_cards: Number of collection items
        total_value: Market value (price x quantity), rounded to cents
        total_purchase_value: What the user paid, rounded to cents
        profit_loss: total_value - total_purchase_value, rounded to cents
        portfolio_breakdown: Per-portfolio copies and value
    """

    total_cards: int = 0
    total_unique_cards: int = 0
    total_value: float = 0.0
    total_purchase_value: float = 0.0
    profit_loss: float = 0.0
    portfolio_breakdown: dict[str, PortfolioSummary] = field(default_factory=dict)


@dataclass
class MissingPrinting:
    """A printing of a set the user does not own."""

    id: int
    set_code: str
    card_name: str
    rarity: str
    price: float | None


@dataclass
class SetProgress:
    """How much of a set a user owns."""

    set_code: str
    total_cards: int
    owned_cards: int
    missing_cards: int
    completion_percentage: int
    missing_list: list[MissingPrinting] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True if every printing of a non-empty set is owned."""
        return self.total_cards > 0 and self.missing_cards == 0


@dataclass
class ExportRow:
    """One collection item flattened with its printing and card."""

    card_name: str
    set_code: str
    set_name: str
    rarity: str
    condition: CardCondition
    language: str
    edition: CardEdition
    quantity: int
    purchase_price: float | None
    current_price: float | None
    storage_location: str | None
    portfolio: PortfolioType
