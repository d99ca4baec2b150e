"""
Per-user preference endpoints.

The accent color lives in the local store; the grid layout, profile and
subscription tier live in the backend.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from photobinder.api.binders import Backend
from photobinder.api.dependencies import get_store
from photobinder.config import settings
from photobinder.models.account import SubscriptionStatus, UserProfile
from photobinder.models.failure import NotFoundError
from photobinder.services.accent_color import AccentColor, AccentColorPreference, css_variables
from photobinder.services.error_messages import plan_for, upgrade_url
from photobinder.services.storage import KeyValueStore
from photobinder.services.validation import parse_layout

router = APIRouter(tags=["preferences"])


class AccentColorRequest(BaseModel):
    color: AccentColor


class AccentColorResponse(BaseModel):
    color: AccentColor
    css_variables: dict[str, str]


class LayoutRequest(BaseModel):
    layout: str


class LayoutResponse(BaseModel):
    layout: str
    columns: int
    rows: int
    cards_per_page: int


class SubscriptionResponse(BaseModel):
    status: SubscriptionStatus
    plan_name: str
    max_binders: int
    upgrade_url: str | None = None


def _preference(store: KeyValueStore) -> AccentColorPreference:
    return AccentColorPreference(store)


def _layout_response(token: str) -> LayoutResponse:
    grid = parse_layout(token)
    return LayoutResponse(
        layout=grid.token,
        columns=grid.columns,
        rows=grid.rows,
        cards_per_page=grid.cards_per_page,
    )


@router.get("/preferences/accent-color", response_model=AccentColorResponse)
async def get_accent_color(
    store: Annotated[KeyValueStore, Depends(get_store)],
) -> AccentColorResponse:
    color = await _preference(store).get()
    return AccentColorResponse(color=color, css_variables=css_variables(color))


@router.put("/preferences/accent-color", response_model=AccentColorResponse)
async def set_accent_color(
    request: AccentColorRequest,
    store: Annotated[KeyValueStore, Depends(get_store)],
) -> AccentColorResponse:
    await _preference(store).set(request.color)
    return AccentColorResponse(color=request.color, css_variables=css_variables(request.color))


@router.get("/preferences/layout", response_model=LayoutResponse)
async def get_layout(backend: Backend) -> LayoutResponse:
    """
    The caller's grid layout.

    Falls back to the admin default, then to the built-in default.
    """
    token = (
        await backend.get_user_layout()
        or await backend.get_default_layout()
        or settings.default_layout
    )
    return _layout_response(token)


@router.put("/preferences/layout", response_model=LayoutResponse)
async def set_layout(request: LayoutRequest, backend: Backend) -> LayoutResponse:
    response = _layout_response(request.layout)
    await backend.update_user_layout(response.layout)
    return response


@router.get("/profile", response_model=UserProfile)
async def get_profile(backend: Backend) -> UserProfile:
    profile = await backend.get_caller_user_profile()
    if profile is None:
        raise NotFoundError("profile", "caller")
    return profile


@router.put("/profile", response_model=UserProfile)
async def save_profile(profile: UserProfile, backend: Backend) -> UserProfile:
    await backend.save_caller_user_profile(profile)
    return profile


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(backend: Backend) -> SubscriptionResponse:
    status = await backend.get_subscription_status()
    plan = plan_for(status)
    return SubscriptionResponse(
        status=status,
        plan_name=plan.name,
        max_binders=plan.max_binders,
        upgrade_url=upgrade_url() if plan.is_free else None,
    )
