"""
Deck API endpoints.

CRUD for the user's decks, deck statistics and ownership validation
against the collection.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import Field

from duelvault.api.deps import CurrentUser, SessionDep
from duelvault.api.schemas import CamelModel, PrintingWithCard
from duelvault.models.db import DeckDB
from duelvault.models.deck_builder import DeckCardSpec
from duelvault.models.enums import DeckZone
from duelvault.services import decks as deck_service

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckCardRequest(CamelModel):
    printing_id: int
    quantity: int = Field(default=1, ge=1)
    zone: DeckZone = DeckZone.MAIN

    def to_spec(self) -> DeckCardSpec:
        return DeckCardSpec(printing_id=self.printing_id, quantity=self.quantity, zone=self.zone)


class CreateDeckRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    format: str | None = Field(default=None, max_length=50)
    is_public: bool = False
    cards: list[DeckCardRequest] = Field(default_factory=list)


class UpdateDeckRequest(CamelModel):
    """Metadata changes plus an optional full replacement of the card list."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    format: str | None = Field(default=None, max_length=50)
    is_public: bool | None = None
    cards: list[DeckCardRequest] | None = None


class DeckCardResponse(CamelModel):
    id: int
    printing_id: int
    quantity: int
    zone: DeckZone
    printing: PrintingWithCard


class DeckResponse(CamelModel):
    id: int
    name: str
    description: str | None = None
    format: str | None = None
    is_public: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    cards: list[DeckCardResponse] = Field(default_factory=list)

    @classmethod
    def from_db(cls, deck: DeckDB) -> "DeckResponse":
        return cls(
            id=deck.id,
            name=deck.name,
            description=deck.description,
            format=deck.format,
            is_public=deck.is_public,
            created_at=deck.created_at,
            updated_at=deck.updated_at,
            cards=[
                DeckCardResponse(
                    id=deck_card.id,
                    printing_id=deck_card.printing_id,
                    quantity=deck_card.quantity,
                    zone=deck_card.zone,
                    printing=PrintingWithCard.from_db(deck_card.printing),
                )
                for deck_card in deck.cards
            ],
        )


class DeckStatsResponse(CamelModel):
    main_deck_count: int
    extra_deck_count: int
    side_deck_count: int
    total_cards: int
    type_breakdown: dict[str, int]
    warnings: list[str]


class OwnedCardResponse(CamelModel):
    printing_id: int
    required: int
    owned: int
    complete: bool


class MissingCardResponse(CamelModel):
    printing_id: int
    missing: int


class OwnershipResponse(CamelModel):
    deck_id: int
    is_complete: bool
    owned_cards: list[OwnedCardResponse]
    missing_cards: list[MissingCardResponse]


@router.get("", response_model=list[DeckResponse])
async def list_decks(user: CurrentUser, session: SessionDep) -> list[DeckResponse]:
    decks = await deck_service.list_decks(session, user.id)
    return [DeckResponse.from_db(deck) for deck in decks]


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    request: CreateDeckRequest, user: CurrentUser, session: SessionDep
) -> DeckResponse:
    """
    Create a deck.

    More than 3 copies of a printing in one zone is rejected with 400;
    zone sizes are reported by the stats endpoint instead.
    """
    deck = await deck_service.create_deck(
        session,
        user.id,
        name=request.name,
        description=request.description,
        format=request.format,
        is_public=request.is_public,
        cards=[card.to_spec() for card in request.cards],
    )
    return DeckResponse.from_db(deck)


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_deck(deck_id: int, user: CurrentUser, session: SessionDep) -> DeckResponse:
    deck = await deck_service.get_deck(session, user.id, deck_id)
    return DeckResponse.from_db(deck)


@router.put("/{deck_id}", response_model=DeckResponse)
async def update_deck(
    deck_id: int, request: UpdateDeckRequest, user: CurrentUser, session: SessionDep
) -> DeckResponse:
    changes = request.model_dump(exclude_unset=True, exclude={"cards"})
    cards = None if request.cards is None else [card.to_spec() for card in request.cards]
    try:
        deck = await deck_service.update_deck(session, user.id, deck_id, changes, cards=cards)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return DeckResponse.from_db(deck)


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(deck_id: int, user: CurrentUser, session: SessionDep) -> Response:
    await deck_service.delete_deck(session, user.id, deck_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{deck_id}/stats", response_model=DeckStatsResponse)
async def deck_stats(deck_id: int, user: CurrentUser, session: SessionDep) -> DeckStatsResponse:
    stats = await deck_service.deck_stats(session, user.id, deck_id)
    return DeckStatsResponse(
        main_deck_count=stats.main_deck_count,
        extra_deck_count=stats.extra_deck_count,
        side_deck_count=stats.side_deck_count,
        total_cards=stats.total_cards,
        type_breakdown=stats.type_breakdown,
        warnings=stats.warnings,
    )


@router.get("/{deck_id}/ownership", response_model=OwnershipResponse)
async def validate_ownership(
    deck_id: int, user: CurrentUser, session: SessionDep
) -> OwnershipResponse:
    """Which of the deck's cards the user owns enough copies of."""
    report = await deck_service.validate_ownership(session, user.id, deck_id)
    return OwnershipResponse(
        deck_id=report.deck_id,
        is_complete=report.is_complete,
        owned_cards=[
            OwnedCardResponse(
                printing_id=card.printing_id,
                required=card.required,
                owned=card.owned,
                complete=card.complete,
            )
            for card in report.owned_cards
        ],
        missing_cards=[
            MissingCardResponse(printing_id=card.printing_id, missing=card.missing)
            for card in report.missing_cards
        ],
    )
