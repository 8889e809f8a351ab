"""
Collection API endpoints.

CRUD for a user's collection items plus valuation, top-value ranking, set
progress and export. All routes act on the authenticated user.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import Field

from duelvault.api.deps import CurrentUser, SessionDep
from duelvault.api.schemas import CamelModel, PrintingWithCard
from duelvault.models.collection import CollectionStats, SetProgress
from duelvault.models.db import CollectionItemDB
from duelvault.models.enums import CardCondition, CardEdition, PortfolioType
from duelvault.services import collection as collection_service
from duelvault.services import valuation
from duelvault.services.collection import SortField, SortOrder

router = APIRouter(prefix="/collection", tags=["collection"])


class CollectionItemResponse(CamelModel):
    id: int
    printing_id: int
    condition: CardCondition
    language: str
    edition: CardEdition
    quantity: int
    purchase_price: float | None = None
    storage_location: str | None = None
    portfolio: PortfolioType
    created_at: datetime | None = None
    updated_at: datetime | None = None
    printing: PrintingWithCard

    @classmethod
    def from_db(cls, item: CollectionItemDB) -> "CollectionItemResponse":
        return cls(
            id=item.id,
            printing_id=item.printing_id,
            condition=item.condition,
            language=item.language,
            edition=item.edition,
            quantity=item.quantity,
            purchase_price=item.purchase_price,
            storage_location=item.storage_location,
            portfolio=item.portfolio,
            created_at=item.created_at,
            updated_at=item.updated_at,
            printing=PrintingWithCard.from_db(item.printing),
        )


class CollectionListResponse(CamelModel):
    data: list[CollectionItemResponse]
    total: int
    limit: int
    offset: int


class AddItemRequest(CamelModel):
    """Request model for adding copies of a printing."""

    printing_id: int
    quantity: int = Field(default=1, ge=1)
    condition: CardCondition = CardCondition.NEAR_MINT
    language: str = Field(default="EN", min_length=2, max_length=5)
    edition: CardEdition = CardEdition.UNLIMITED
    purchase_price: float | None = Field(default=None, ge=0)
    storage_location: str | None = Field(default=None, max_length=255)
    portfolio: PortfolioType = PortfolioType.COLLECTION


class UpdateItemRequest(CamelModel):
    """Partial update; a quantity of 0 deletes the item."""

    quantity: int | None = Field(default=None, ge=0)
    condition: CardCondition | None = None
    edition: CardEdition | None = None
    purchase_price: float | None = Field(default=None, ge=0)
    storage_location: str | None = Field(default=None, max_length=255)
    portfolio: PortfolioType | None = None


class PortfolioSummaryResponse(CamelModel):
    count: int
    value: float


class CollectionStatsResponse(CamelModel):
    total_cards: int
    total_unique_cards: int
    total_value: float
    total_purchase_value: float
    profit_loss: float
    portfolio_breakdown: dict[str, PortfolioSummaryResponse]

    @classmethod
    def from_stats(cls, stats: CollectionStats) -> "CollectionStatsResponse":
        return cls(
            total_cards=stats.total_cards,
            total_unique_cards=stats.total_unique_cards,
            total_value=stats.total_value,
            total_purchase_value=stats.total_purchase_value,
            profit_loss=stats.profit_loss,
            portfolio_breakdown={
                name: PortfolioSummaryResponse(count=summary.count, value=summary.value)
                for name, summary in stats.portfolio_breakdown.items()
            },
        )


class TopValueItemResponse(CollectionItemResponse):
    total_value: float


class MissingPrintingResponse(CamelModel):
    id: int
    set_code: str
    card_name: str
    rarity: str
    price: float | None = None


class SetProgressResponse(CamelModel):
    set_code: str
    total_cards: int
    owned_cards: int
    missing_cards: int
    completion_percentage: int
    missing_list: list[MissingPrintingResponse]

    @classmethod
    def from_progress(cls, progress: SetProgress) -> "SetProgressResponse":
        return cls(
            set_code=progress.set_code,
            total_cards=progress.total_cards,
            owned_cards=progress.owned_cards,
            missing_cards=progress.missing_cards,
            completion_percentage=progress.completion_percentage,
            missing_list=[
                MissingPrintingResponse(
                    id=p.id,
                    set_code=p.set_code,
                    card_name=p.card_name,
                    rarity=p.rarity,
                    price=p.price,
                )
                for p in progress.missing_list
            ],
        )


class ExportRowResponse(CamelModel):
    card_name: str
    set_code: str
    set_name: str
    rarity: str
    condition: CardCondition
    language: str
    edition: CardEdition
    quantity: int
    purchase_price: float | None = None
    current_price: float | None = None
    storage_location: str | None = None
    portfolio: PortfolioType


@router.get("", response_model=CollectionListResponse)
async def list_collection(
    user: CurrentUser,
    session: SessionDep,
    portfolio: PortfolioType | None = None,
    condition: CardCondition | None = None,
    search: str | None = None,
    set_code: Annotated[str | None, Query(alias="setCode")] = None,
    sort_by: Annotated[SortField, Query(alias="sortBy")] = "created",
    sort_order: Annotated[SortOrder | None, Query(alias="sortOrder")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CollectionListResponse:
    """List the user's collection with filters, sorting and pagination."""
    page = await collection_service.list_collection(
        session,
        user.id,
        portfolio=portfolio,
        condition=condition,
        search=search,
        set_code=set_code,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return CollectionListResponse(
        data=[CollectionItemResponse.from_db(item) for item in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.post("", response_model=CollectionItemResponse, status_code=status.HTTP_201_CREATED)
async def add_item(
    request: AddItemRequest, user: CurrentUser, session: SessionDep
) -> CollectionItemResponse:
    """
    Add copies of a printing.

    Merges into an existing item with the same printing, condition, language
    and edition. Free accounts at their item limit get a 400.
    """
    item = await collection_service.add_to_collection(
        session,
        user.id,
        request.printing_id,
        quantity=request.quantity,
        condition=request.condition,
        language=request.language,
        edition=request.edition,
        purchase_price=request.purchase_price,
        storage_location=request.storage_location,
        portfolio=request.portfolio,
    )
    return CollectionItemResponse.from_db(item)


@router.get("/stats", response_model=CollectionStatsResponse)
async def collection_stats(user: CurrentUser, session: SessionDep) -> CollectionStatsResponse:
    stats = await valuation.compute_stats(session, user.id)
    return CollectionStatsResponse.from_stats(stats)


@router.get("/top-value", response_model=list[TopValueItemResponse])
async def top_value(
    user: CurrentUser,
    session: SessionDep,
    limit: Annotated[int, Query(ge=1, le=100)] = valuation.DEFAULT_TOP_VALUE_LIMIT,
) -> list[TopValueItemResponse]:
    ranked = await valuation.top_value_items(session, user.id, limit=limit)
    return [
        TopValueItemResponse(
            **CollectionItemResponse.from_db(entry.item).model_dump(),
            total_value=entry.total_value,
        )
        for entry in ranked
    ]


@router.get("/set-progress/{set_code}", response_model=SetProgressResponse)
async def set_progress(
    set_code: str, user: CurrentUser, session: SessionDep
) -> SetProgressResponse:
    """Completion of a set, by set prefix (LOB-EN001 and LOB are equivalent)."""
    progress = await valuation.set_progress(session, user.id, set_code)
    return SetProgressResponse.from_progress(progress)


@router.get("/export", response_model=list[ExportRowResponse])
async def export_collection(user: CurrentUser, session: SessionDep) -> list[ExportRowResponse]:
    rows = await valuation.export_collection(session, user.id)
    return [
        ExportRowResponse(
            card_name=row.card_name,
            set_code=row.set_code,
            set_name=row.set_name,
            rarity=row.rarity,
            condition=row.condition,
            language=row.language,
            edition=row.edition,
            quantity=row.quantity,
            purchase_price=row.purchase_price,
            current_price=row.current_price,
            storage_location=row.storage_location,
            portfolio=row.portfolio,
        )
        for row in rows
    ]


@router.get("/{item_id}", response_model=CollectionItemResponse)
async def get_item(item_id: int, user: CurrentUser, session: SessionDep) -> CollectionItemResponse:
    item = await collection_service.get_item(session, user.id, item_id)
    return CollectionItemResponse.from_db(item)


@router.put(
    "/{item_id}",
    response_model=CollectionItemResponse,
    responses={204: {"description": "Quantity set to 0; item deleted"}},
)
async def update_item(
    item_id: int,
    request: UpdateItemRequest,
    user: CurrentUser,
    session: SessionDep,
) -> CollectionItemResponse | Response:
    """Partially update an item. Setting quantity to 0 deletes it (204)."""
    try:
        item = await collection_service.update_item(
            session, user.id, item_id, request.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if item is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return CollectionItemResponse.from_db(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(item_id: int, user: CurrentUser, session: SessionDep) -> Response:
    await collection_service.remove_item(session, user.id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
