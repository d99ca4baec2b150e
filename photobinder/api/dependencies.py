"""
Shared FastAPI dependencies.

Each collaborator is provided through a small function so tests can swap it
with ``app.dependency_overrides``.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Header, Request

from photobinder.config import settings
from photobinder.db.database import async_session_factory
from photobinder.services.admin import (
    MasterKeyGate,
    get_attempt_tracker,
    get_session_store,
)
from photobinder.services.backend_client import BackendClient
from photobinder.services.edited_images import EditedImageCache
from photobinder.services.image_resolver import ImageResolver, embed_overlay_assets
from photobinder.services.storage import KeyValueStore, SqlKeyValueStore


async def get_backend() -> AsyncGenerator[BackendClient, None]:
    """Backend client scoped to one request."""
    async with BackendClient(settings.backend_url, settings.request_timeout_seconds) as client:
        yield client


def get_store() -> KeyValueStore:
    return SqlKeyValueStore(async_session_factory)


def get_edited_image_cache(
    store: Annotated[KeyValueStore, Depends(get_store)],
) -> EditedImageCache:
    return EditedImageCache(store)


def get_image_resolver(
    cache: Annotated[EditedImageCache, Depends(get_edited_image_cache)],
) -> ImageResolver:
    return ImageResolver(cache, timeout_seconds=settings.request_timeout_seconds)


@lru_cache(maxsize=1)
def _embedded_overlays(asset_dir: str) -> dict[str, str]:
    return embed_overlay_assets(Path(asset_dir))


def get_overlay_sources() -> dict[str, str]:
    """
    Overlay assets as data URLs when a local asset directory is configured.

    Without one, print documents reference overlays by URL.
    """
    if not settings.asset_dir:
        return {}
    return _embedded_overlays(settings.asset_dir)


def get_master_key_gate(
    backend: Annotated[BackendClient, Depends(get_backend)],
) -> MasterKeyGate:
    return MasterKeyGate(
        backend,
        tracker=get_attempt_tracker(),
        sessions=get_session_store(),
        local_key=settings.master_admin_key,
    )


def get_client_id(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def require_admin_session(
    x_admin_session: Annotated[str | None, Header()] = None,
) -> str:
    """
    Confirm the admin portal is unlocked for this caller.

    Raises:
        AdminLockedError: If the session token is missing or expired
    """
    get_session_store().touch(x_admin_session)
    return x_admin_session or ""
