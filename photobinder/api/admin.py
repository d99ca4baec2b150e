"""
Admin portal endpoints.

``POST /admin/unlock`` trades the master admin key for a session token.
Every other endpoint requires that token in the ``X-Admin-Session`` header
and locks again after 30 minutes without activity.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from photobinder.api.binders import Backend
from photobinder.api.dependencies import (
    get_client_id,
    get_master_key_gate,
    require_admin_session,
)
from photobinder.config import settings
from photobinder.models.account import (
    AdminContentSettings,
    StripeKeys,
    SubscriptionStatus,
    UserAnalytics,
)
from photobinder.models.binder import Binder
from photobinder.services.admin import (
    AdminLockedError,
    MasterKeyGate,
    check_new_master_key,
    filter_users_by_email,
    get_session_store,
    is_superuser_email,
)
from photobinder.services.validation import (
    normalize_email,
    validate_layout,
    validate_new_preset,
    validate_stripe_keys,
)

router = APIRouter(prefix="/admin", tags=["admin"])

AdminSession = Annotated[str, Depends(require_admin_session)]


class UnlockRequest(BaseModel):
    key: str
    email: str | None = Field(
        default=None,
        description="Caller's email; checked against the superuser allowlist when one is set",
    )


class UnlockResponse(BaseModel):
    token: str
    inactivity_timeout_seconds: int


class MasterKeyUpdateRequest(BaseModel):
    new_key: str
    confirmation: str


class LayoutPresetRequest(BaseModel):
    layout: str


class LayoutPresetsResponse(BaseModel):
    presets: list[str]
    default_layout: str


class SubscriptionUpdateRequest(BaseModel):
    status: SubscriptionStatus


class StripeKeysRequest(BaseModel):
    publishable_key: str
    secret_key: str


# =============================================================================
# ACCESS
# =============================================================================


@router.post("/unlock", response_model=UnlockResponse)
async def unlock(
    request: UnlockRequest,
    gate: Annotated[MasterKeyGate, Depends(get_master_key_gate)],
    client_id: Annotated[str, Depends(get_client_id)],
) -> UnlockResponse:
    """
    Unlock the admin portal.

    Attempts are rate-limited per client.
    """
    if settings.superuser_emails and not is_superuser_email(request.email):
        raise AdminLockedError("Access denied.", detail="email not on the superuser allowlist")

    token = await gate.unlock(request.key, client_id)
    return UnlockResponse(
        token=token,
        inactivity_timeout_seconds=settings.admin_inactivity_timeout_seconds,
    )


@router.post("/lock", status_code=status.HTTP_204_NO_CONTENT)
async def lock(session: AdminSession) -> None:
    get_session_store().close(session)


@router.put("/master-key", status_code=status.HTTP_204_NO_CONTENT)
async def update_master_key(
    request: MasterKeyUpdateRequest, backend: Backend, _session: AdminSession
) -> None:
    await backend.update_master_admin_key(
        check_new_master_key(request.new_key, request.confirmation)
    )


# =============================================================================
# CONTENT
# =============================================================================


@router.get("/content", response_model=AdminContentSettings)
async def get_content(backend: Backend, _session: AdminSession) -> AdminContentSettings:
    return await backend.get_admin_content_settings()


@router.put("/content", response_model=AdminContentSettings)
async def update_content(
    content: AdminContentSettings, backend: Backend, _session: AdminSession
) -> AdminContentSettings:
    await backend.update_admin_content_settings(content)
    return content


# =============================================================================
# LAYOUT PRESETS
# =============================================================================


async def _presets(backend: Backend) -> LayoutPresetsResponse:
    return LayoutPresetsResponse(
        presets=await backend.get_layout_presets(),
        default_layout=await backend.get_default_layout() or settings.default_layout,
    )


@router.get("/layouts", response_model=LayoutPresetsResponse)
async def list_layout_presets(backend: Backend, _session: AdminSession) -> LayoutPresetsResponse:
    return await _presets(backend)


@router.post("/layouts", response_model=LayoutPresetsResponse)
async def add_layout_preset(
    request: LayoutPresetRequest, backend: Backend, _session: AdminSession
) -> LayoutPresetsResponse:
    layout = validate_new_preset(request.layout, await backend.get_layout_presets())
    await backend.add_layout_preset(layout)
    return await _presets(backend)


@router.delete("/layouts/{layout}", response_model=LayoutPresetsResponse)
async def remove_layout_preset(
    layout: str, backend: Backend, _session: AdminSession
) -> LayoutPresetsResponse:
    await backend.remove_layout_preset(validate_layout(layout))
    return await _presets(backend)


@router.put("/layouts/default", response_model=LayoutPresetsResponse)
async def set_default_layout(
    request: LayoutPresetRequest, backend: Backend, _session: AdminSession
) -> LayoutPresetsResponse:
    await backend.set_default_layout(validate_layout(request.layout))
    return await _presets(backend)


# =============================================================================
# USERS
# =============================================================================


@router.get("/users", response_model=list[UserAnalytics])
async def list_users(
    backend: Backend,
    _session: AdminSession,
    email: Annotated[str | None, Query(description="Case-insensitive email substring")] = None,
) -> list[UserAnalytics]:
    """
    User analytics, optionally narrowed to emails containing ``email``.

    The backend narrows the set and the match is re-applied locally:
    case-insensitive, users without an email never match.
    """
    search = normalize_email(email or "")
    if not search:
        return await backend.get_all_users()
    return filter_users_by_email(await backend.get_filtered_users(search), search)


@router.put("/users/{principal}/subscription", status_code=status.HTTP_204_NO_CONTENT)
async def update_subscription(
    principal: str,
    request: SubscriptionUpdateRequest,
    backend: Backend,
    _session: AdminSession,
) -> None:
    await backend.update_subscription_status(principal, request.status)


@router.get("/users/{principal}/binders", response_model=list[Binder])
async def user_binders(principal: str, backend: Backend, _session: AdminSession) -> list[Binder]:
    """Read-only view of another user's binders."""
    return await backend.get_binders_by_user(principal)


# =============================================================================
# PAYMENTS
# =============================================================================


@router.put("/stripe-keys", status_code=status.HTTP_204_NO_CONTENT)
async def save_stripe_keys(
    request: StripeKeysRequest, backend: Backend, _session: AdminSession
) -> None:
    publishable_key = request.publishable_key.strip()
    secret_key = request.secret_key.strip()
    validate_stripe_keys(publishable_key, secret_key)
    await backend.save_stripe_keys(
        StripeKeys(publishable_key=publishable_key, secret_key=secret_key)
    )
