"""
Catalog sync and upstream passthrough endpoints.

Sync runs in the request and returns the run's totals. The passthrough
routes query YGOPRODeck directly without touching the local store.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from duelvault.api.deps import CurrentUser
from duelvault.api.schemas import CamelModel
from duelvault.config import settings
from duelvault.jobs.sync_catalog import run_sync
from duelvault.models.card import CatalogCard
from duelvault.models.sync import SyncResult
from duelvault.sources.ygoprodeck import YgoprodeckClient

router = APIRouter(prefix="/catalog", tags=["catalog"])

# Upstream fuzzy search returns at most this many results
SEARCH_RESULT_LIMIT = 20


async def get_ygoprodeck_client() -> AsyncGenerator[YgoprodeckClient, None]:
    async with YgoprodeckClient() as client:
        yield client


SourceDep = Annotated[YgoprodeckClient, Depends(get_ygoprodeck_client)]


class SyncResponse(CamelModel):
    """Totals of a sync run."""

    success: bool
    cards_created: int
    cards_updated: int
    printings_created: int
    total_cards: int
    errors: int


class CatalogSetResponse(CamelModel):
    set_name: str
    set_code: str
    rarity: str
    rarity_code: str | None = None
    price: float | None = None


class CatalogCardResponse(CamelModel):
    """A card as reported by YGOPRODeck (not yet stored)."""

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
    sets: list[CatalogSetResponse]

    @classmethod
    def from_record(cls, record: CatalogCard) -> "CatalogCardResponse":
        return cls(
            konami_id=record.konami_id,
            name=record.name,
            type=record.type,
            frame_type=record.frame_type,
            description=record.description,
            race=record.race,
            atk=record.atk,
            defense=record.defense,
            level=record.level,
            attribute=record.attribute,
            archetype=record.archetype,
            image_url=record.image_url,
            image_url_small=record.image_url_small,
            sets=[
                CatalogSetResponse(
                    set_name=s.set_name,
                    set_code=s.set_code,
                    rarity=s.rarity,
                    rarity_code=s.rarity_code,
                    price=s.price,
                )
                for s in record.sets
            ],
        )


class CardSetInfo(CamelModel):
    set_name: str
    set_code: str
    num_of_cards: int | None = None


def _sync_response(result: SyncResult) -> SyncResponse:
    return SyncResponse(
        success=result.success,
        cards_created=result.cards_created,
        cards_updated=result.cards_updated,
        printings_created=result.printings_created,
        total_cards=result.total_cards,
        errors=result.errors,
    )


@router.post("/sync", response_model=SyncResponse)
async def sync_catalog(_user: CurrentUser) -> SyncResponse:
    """
    Sync the full catalog one card at a time.

    Per-card failures are counted in ``errors``; an unreachable provider
    aborts the run with 502.
    """
    return _sync_response(await run_sync())


@router.post("/sync/batch", response_model=SyncResponse)
async def sync_catalog_in_batches(
    _user: CurrentUser,
    batch_size: Annotated[int | None, Query(alias="batchSize", ge=1)] = None,
) -> SyncResponse:
    """Sync the full catalog with concurrent upserts in fixed-size batches."""
    return _sync_response(await run_sync(batch_size or settings.sync_batch_size))


@router.get("/search", response_model=list[CatalogCardResponse])
async def search_upstream(
    source: SourceDep, q: Annotated[str, Query(min_length=1)]
) -> list[CatalogCardResponse]:
    """Fuzzy name search against YGOPRODeck; first 20 matches."""
    records = await source.search_cards(q)
    return [CatalogCardResponse.from_record(r) for r in records[:SEARCH_RESULT_LIMIT]]


@router.get("/archetypes", response_model=list[str])
async def list_archetypes(source: SourceDep) -> list[str]:
    return await source.fetch_archetypes()


@router.get("/sets", response_model=list[CardSetInfo])
async def list_card_sets(source: SourceDep) -> list[CardSetInfo]:
    sets = await source.fetch_card_sets()
    return [
        CardSetInfo(
            set_name=s["set_name"],
            set_code=s["set_code"],
            num_of_cards=s.get("num_of_cards"),
        )
        for s in sets
    ]
