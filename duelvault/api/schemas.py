"""
Shared API response models.

Request and response bodies use camelCase on the wire; fields stay
snake_case in Python. Printing and card payloads are reused across the
cards, collection and deck routers.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from duelvault.models.db import CardDB, PrintingDB, UserDB
from duelvault.models.enums import SearchLanguage, UserTier


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PrintingResponse(CamelModel):
    id: int
    card_id: int
    set_code: str
    set_name: str
    rarity: str
    rarity_code: str | None = None
    price: float | None = None
    price_updated_at: datetime | None = None

    @classmethod
    def from_db(cls, printing: PrintingDB) -> "PrintingResponse":
        return cls(
            id=printing.id,
            card_id=printing.card_id,
            set_code=printing.set_code,
            set_name=printing.set_name,
            rarity=printing.rarity,
            rarity_code=printing.rarity_code,
            price=printing.price,
            price_updated_at=printing.price_updated_at,
        )


class CardSummary(CamelModel):
    """Card fields without printings."""

    id: int
    konami_id: int
    name: str
    name_en: str | None = None
    name_de: str | None = None
    type: str
    frame_type: str
    description: str = ""
    race: str | None = None
    atk: int | None = None
    def_: int | None = Field(default=None, alias="def")
    level: int | None = None
    attribute: str | None = None
    archetype: str | None = None
    image_url: str = ""
    image_url_small: str | None = None

    @classmethod
    def fields_from_db(cls, card: CardDB) -> dict:
        return {
            "id": card.id,
            "konami_id": card.konami_id,
            "name": card.name,
            "name_en": card.name_en,
            "name_de": card.name_de,
            "type": card.type,
            "frame_type": card.frame_type,
            "description": card.description,
            "race": card.race,
            "atk": card.atk,
            "def_": card.def_,
            "level": card.level,
            "attribute": card.attribute,
            "archetype": card.archetype,
            "image_url": card.image_url,
            "image_url_small": card.image_url_small,
        }

    @classmethod
    def from_db(cls, card: CardDB) -> "CardSummary":
        return cls(**cls.fields_from_db(card))


class CardResponse(CardSummary):
    printings: list[PrintingResponse] = []

    @classmethod
    def from_db(cls, card: CardDB) -> "CardResponse":
        return cls(
            **cls.fields_from_db(card),
            printings=[PrintingResponse.from_db(p) for p in card.printings],
        )


class PrintingWithCard(PrintingResponse):
    card: CardSummary

    @classmethod
    def from_db(cls, printing: PrintingDB) -> "PrintingWithCard":
        return cls(
            **PrintingResponse.from_db(printing).model_dump(),
            card=CardSummary.from_db(printing.card),
        )


class UserResponse(CamelModel):
    id: int
    email: str
    username: str
    tier: UserTier
    search_language: SearchLanguage

    @classmethod
    def from_db(cls, user: UserDB) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            tier=user.tier,
            search_language=user.search_language,
        )
