from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CatalogSet:
    """
    One set appearance of a card as reported by the external catalog.

    Attributes:
        set_name: Full set name (e.g., "Legend of Blue Eyes White Dragon")
        set_code: Printed set code (e.g., "LOB-EN001")
        rarity: Rarity name (e.g., "Ultra Rare")
        rarity_code: Short rarity code (e.g., "(UR)")
        price: Last known market price, None if absent or unparseable
    """

    set_name: str
    set_code: str
    rarity: str
    rarity_code: str | None = None
    price: float | None = None


@dataclass(frozen=True, slots=True)
class CatalogCard:
    """
    A card record from the external catalog, in a single locale.

    Attributes:
        konami_id: External numeric id, the natural key of a card
        name: Name in the locale the record was fetched in
        atk/defense/level: Absent for spells and traps
        image_url/image_url_small: From the first image entry
        sets: Every printing of this card
    """

    konami_id: int
    name: str
    type: str
    frame_type: str
    description: str
    race: str | None = None
    atk: int | None = None
    defense: int | None = None
    level: int | None = None
    attribute: str | None = None
    archetype: str | None = None
    image_url: str = ""
    image_url_small: str | None = None
    sets: tuple[CatalogSet, ...] = field(default_factory=tuple)


@dataclass
class CatalogPage:
    """
    Parsed records of one catalog response.

    Attributes:
        cards: Records that parsed, in API order
        rejected: Entries dropped because they could not be parsed
    """

    cards: list[CatalogCard] = field(default_factory=list)
    rejected: int = 0

    @property
    def total(self) -> int:
        return len(self.cards) + self.rejected
