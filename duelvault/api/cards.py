"""
Card catalog endpoints.

Public read-only access to the synced catalog.
"""

from typing import Annotated

from fastapi import APIRouter, Query

from duelvault.api.deps import SessionDep
from duelvault.api.schemas import CamelModel, CardResponse, PrintingResponse, PrintingWithCard
from duelvault.models.enums import SearchLanguage
from duelvault.services import cards as card_service

router = APIRouter(prefix="/cards", tags=["cards"])


class CardSearchResponse(CamelModel):
    data: list[CardResponse]
    total: int
    limit: int
    offset: int


class CardStatsResponse(CamelModel):
    total_cards: int
    total_printings: int
    total_archetypes: int


@router.get("", response_model=CardSearchResponse)
async def search_cards(
    session: SessionDep,
    name: str | None = None,
    language: SearchLanguage = SearchLanguage.DE,
    type: str | None = None,
    archetype: str | None = None,
    attribute: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = card_service.DEFAULT_SEARCH_LIMIT,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CardSearchResponse:
    """Search cards by name, type, archetype and attribute."""
    page = await card_service.search_cards(
        session,
        name=name,
        language=language,
        type=type,
        archetype=archetype,
        attribute=attribute,
        limit=limit,
        offset=offset,
    )
    return CardSearchResponse(
        data=[CardResponse.from_db(card) for card in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/stats", response_model=CardStatsResponse)
async def card_stats(session: SessionDep) -> CardStatsResponse:
    stats = await card_service.card_stats(session)
    return CardStatsResponse(
        total_cards=stats.total_cards,
        total_printings=stats.total_printings,
        total_archetypes=stats.total_archetypes,
    )


@router.get("/printings/{set_code}", response_model=PrintingWithCard)
async def get_printing_by_set_code(set_code: str, session: SessionDep) -> PrintingWithCard:
    """Look up a printing by its exact set code (e.g. LOB-EN001)."""
    printing = await card_service.get_printing_by_set_code(session, set_code)
    return PrintingWithCard.from_db(printing)


@router.get("/konami/{konami_id}", response_model=CardResponse)
async def get_card_by_konami_id(konami_id: int, session: SessionDep) -> CardResponse:
    card = await card_service.get_card_by_konami_id(session, konami_id)
    return CardResponse.from_db(card)


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: int, session: SessionDep) -> CardResponse:
    card = await card_service.get_card(session, card_id)
    return CardResponse.from_db(card)


@router.get("/{card_id}/printings", response_model=list[PrintingResponse])
async def get_card_printings(card_id: int, session: SessionDep) -> list[PrintingResponse]:
    printings = await card_service.get_card_printings(session, card_id)
    return [PrintingResponse.from_db(p) for p in printings]
