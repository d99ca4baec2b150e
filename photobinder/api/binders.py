"""
Binder API endpoints.

Binder and card CRUD is proxied to the backend. Page views and reordering
are computed here from the fetched card order.

Page numbers in URLs and request bodies are 1-based.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from photobinder.api.dependencies import get_backend
from photobinder.config import settings
from photobinder.models.binder import (
    Binder,
    BinderTheme,
    CardCondition,
    CardPosition,
    CardRarity,
    Photocard,
    default_theme,
)
from photobinder.models.failure import (
    FailureDetail,
    KnownError,
    ValidationFailedError,
    category_for,
)
from photobinder.services.backend_client import BackendClient, find_binder, find_card
from photobinder.services.error_messages import plan_for, raise_for_binder_creation
from photobinder.services.overlays import card_overlays
from photobinder.services.pagination import BinderPagination
from photobinder.services.reorder import reorder_cards
from photobinder.services.validation import parse_layout

router = APIRouter(prefix="/binders", tags=["binders"])

Backend = Annotated[BackendClient, Depends(get_backend)]


class BinderSummary(BaseModel):
    """One entry in the binder library."""

    id: str
    name: str
    created: int
    card_count: int
    theme: BinderTheme


class CreateBinderRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    theme: BinderTheme | None = None


class CreatedResponse(BaseModel):
    id: str


class CardRequest(BaseModel):
    """Fields for adding or updating a photocard."""

    name: str = Field(..., min_length=1)
    image: str = Field(..., description="URL of the uploaded image blob")
    position: CardPosition = Field(default_factory=CardPosition)
    quantity: int = Field(default=1, ge=1)
    rarity: CardRarity = CardRarity.NONE
    condition: CardCondition = CardCondition.NONE


class OverlayView(BaseModel):
    condition_sticker: str | None = None
    rarity_badge: str | None = None
    glint: str | None = None
    quantity_badge: str | None = None


class CardView(BaseModel):
    card: Photocard
    overlays: OverlayView


class PageView(BaseModel):
    """One page of a binder as it should be drawn."""

    binder_id: str
    binder_name: str
    layout: str
    columns: int
    rows: int
    page_number: int
    total_pages: int
    has_next: bool
    has_prev: bool
    cards: list[CardView]
    theme: BinderTheme


class ReorderRequest(BaseModel):
    page: int = Field(default=1, ge=1, description="1-based page the drag happened on")
    layout: str = Field(default=settings.default_layout)
    source_index: int = Field(..., ge=0)
    target_index: int = Field(..., ge=0)
    rollback_on_failure: bool = False


class ReorderResponse(BaseModel):
    card_ids: list[str]
    changed: bool
    persisted: bool
    rolled_back: bool = False
    failure: FailureDetail | None = None


def _summary(binder: Binder) -> BinderSummary:
    return BinderSummary(
        id=binder.id,
        name=binder.name,
        created=binder.created,
        card_count=len(binder.cards),
        theme=binder.theme,
    )


def _failure_detail(error: KnownError) -> FailureDetail:
    return FailureDetail(
        kind=error.kind,
        category=category_for(error.kind),
        message=error.message,
        detail=error.detail,
        suggestion=error.suggestion,
        retryable=error.retryable,
    )


async def load_binder(backend: BackendClient, binder_id: str) -> Binder:
    """
    Fetch the caller's binders and pick one.

    Raises:
        NotFoundError: If the caller has no binder with that id
    """
    return find_binder(await backend.get_binders(), binder_id)


# =============================================================================
# BINDERS
# =============================================================================


@router.get("", response_model=list[BinderSummary])
async def list_binders(backend: Backend) -> list[BinderSummary]:
    return [_summary(binder) for binder in await backend.get_binders()]


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_binder(request: CreateBinderRequest, backend: Backend) -> CreatedResponse:
    """
    Create a binder.

    When the plan's binder limit is reached the failure explains how to
    upgrade or free up a slot.
    """
    theme = request.theme or default_theme()
    try:
        binder_id = await backend.create_binder(request.name.strip(), theme)
    except KnownError as e:
        plan = plan_for(await backend.get_subscription_status())
        raise_for_binder_creation(e, plan)
    return CreatedResponse(id=binder_id)


@router.get("/{binder_id}", response_model=Binder)
async def get_binder(binder_id: str, backend: Backend) -> Binder:
    return await load_binder(backend, binder_id)


@router.delete("/{binder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_binder(binder_id: str, backend: Backend) -> None:
    await backend.delete_binder(binder_id)


@router.put("/{binder_id}/theme", response_model=BinderTheme)
async def update_theme(binder_id: str, theme: BinderTheme, backend: Backend) -> BinderTheme:
    await backend.update_binder_theme(binder_id, theme)
    return theme


# =============================================================================
# PAGES
# =============================================================================


@router.get("/{binder_id}/pages/{page_number}", response_model=PageView)
async def get_page(
    binder_id: str,
    page_number: int,
    backend: Backend,
    layout: Annotated[str, Query()] = settings.default_layout,
) -> PageView:
    """
    One page of a binder with overlays resolved for every card.

    Out-of-range page numbers clamp to the nearest page.
    """
    grid = parse_layout(layout)
    binder = await load_binder(backend, binder_id)
    pagination = BinderPagination(binder.cards, grid.cards_per_page, page_number - 1)

    cards = []
    for card in pagination.current_cards:
        overlays = card_overlays(card, settings.asset_base_url)
        cards.append(
            CardView(
                card=card,
                overlays=OverlayView(
                    condition_sticker=overlays.condition_sticker,
                    rarity_badge=overlays.rarity_badge,
                    glint=overlays.glint,
                    quantity_badge=overlays.quantity_badge,
                ),
            )
        )

    return PageView(
        binder_id=binder.id,
        binder_name=binder.name,
        layout=grid.token,
        columns=grid.columns,
        rows=grid.rows,
        page_number=pagination.current_page + 1,
        total_pages=pagination.total_pages,
        has_next=pagination.has_next,
        has_prev=pagination.has_prev,
        cards=cards,
        theme=binder.theme,
    )


@router.post("/{binder_id}/reorder", response_model=ReorderResponse)
async def reorder(binder_id: str, request: ReorderRequest, backend: Backend) -> ReorderResponse:
    """
    Move a card within a page by dragging it onto another slot.

    A failed save is reported in ``failure`` rather than as an error status,
    since the new order has already been applied.
    """
    grid = parse_layout(request.layout)
    binder = await load_binder(backend, binder_id)
    pagination = BinderPagination(binder.cards, grid.cards_per_page, request.page - 1)

    on_page = len(pagination.current_cards)
    if request.source_index >= on_page or request.target_index >= on_page:
        raise ValidationFailedError(
            "That slot is not on this page.",
            detail=f"indexes {request.source_index}->{request.target_index}, page holds {on_page}",
        )

    outcome = await reorder_cards(
        binder.id,
        binder.cards,
        page_offset=pagination.page_offset,
        source_index=request.source_index,
        target_index=request.target_index,
        backend=backend,
        rollback_on_failure=request.rollback_on_failure,
    )
    return ReorderResponse(
        card_ids=[card.id for card in outcome.cards],
        changed=outcome.changed,
        persisted=outcome.persisted,
        rolled_back=outcome.rolled_back,
        failure=_failure_detail(outcome.error) if outcome.error else None,
    )


# =============================================================================
# CARDS
# =============================================================================


@router.get("/{binder_id}/cards/{card_id}", response_model=Photocard)
async def get_card(binder_id: str, card_id: str, backend: Backend) -> Photocard:
    return find_card(await load_binder(backend, binder_id), card_id)


@router.post(
    "/{binder_id}/cards",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_card(binder_id: str, request: CardRequest, backend: Backend) -> CreatedResponse:
    card_id = await backend.add_photocard(
        binder_id,
        name=request.name,
        image_url=request.image,
        position=request.position,
        quantity=request.quantity,
        rarity=request.rarity,
        condition=request.condition,
    )
    return CreatedResponse(id=card_id)


@router.put("/{binder_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_card(
    binder_id: str, card_id: str, request: CardRequest, backend: Backend
) -> None:
    await backend.update_photocard(
        binder_id,
        card_id,
        name=request.name,
        image_url=request.image,
        position=request.position,
        quantity=request.quantity,
        rarity=request.rarity,
        condition=request.condition,
    )


@router.delete("/{binder_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(binder_id: str, card_id: str, backend: Backend) -> None:
    await backend.delete_photocard(binder_id, card_id)
