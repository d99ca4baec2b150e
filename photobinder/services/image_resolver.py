"""
Card image resolution for export.

Print documents are rendered in a detached context with no access to the
user's session, so every card image is inlined as a ``data:`` URL first.

Resolution order for a card:
1. A locally cached edited image, returned as-is. The cache always wins;
   there is no freshness check against the remote blob.
2. The remote blob, fetched and base64 encoded.

Failures propagate to the caller. Nothing here retries.
"""

import asyncio
import base64
import logging
import mimetypes
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import httpx

from photobinder.models.binder import Photocard
from photobinder.models.failure import FailureKind, KnownError
from photobinder.services.edited_images import EditedImageCache
from photobinder.services.overlays import overlay_asset_paths

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/jpeg"


class ImageFetchError(KnownError):
    """Raised when a card image cannot be fetched or converted."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="A card image could not be loaded.",
            detail=f"{url}: {reason}",
            suggestion="Check your connection and press Retry.",
            status_code=502,
            retryable=True,
        )


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """A card paired with its inline image."""

    card: Photocard
    image_data_url: str


def bytes_to_data_url(data: bytes, mime_type: str = DEFAULT_IMAGE_MIME) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _image_mime(content_type: str | None) -> str:
    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        if mime.startswith("image/"):
            return mime
    return DEFAULT_IMAGE_MIME


class ImageResolver:
    def __init__(
        self,
        cache: EditedImageCache,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._cache = cache
        self._client = client
        self._timeout_seconds = timeout_seconds

    async def resolve(self, card_id: str, image_url: str) -> str:
        """
        Return an inline image for a card.

        Raises:
            ImageFetchError: If the remote blob cannot be fetched
        """
        edited = await self._cache.get(card_id)
        if edited:
            return edited
        return await self.fetch_data_url(image_url)

    async def fetch_data_url(self, url: str) -> str:
        """
        Fetch a remote image and inline it.

        Raises:
            ImageFetchError: On HTTP or transport failure
        """
        try:
            if self._client is not None:
                response = await self._client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ImageFetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise ImageFetchError(url, str(e) or type(e).__name__) from e

        return bytes_to_data_url(response.content, _image_mime(response.headers.get("content-type")))

    async def resolve_many(self, cards: Sequence[Photocard]) -> list[ResolvedCard]:
        """Resolve all cards concurrently, preserving order."""
        images = await asyncio.gather(*(self.resolve(card.id, card.image) for card in cards))
        return [
            ResolvedCard(card=card, image_data_url=image)
            for card, image in zip(cards, images, strict=True)
        ]


def embed_overlay_assets(asset_dir: Path) -> dict[str, str]:
    """
    Inline the overlay assets found under ``asset_dir``.

    Returns a map from asset path (as used in pages) to data URL. Assets
    missing on disk are left out, so pages fall back to the plain path.
    """
    embedded: dict[str, str] = {}
    for asset_path in overlay_asset_paths():
        file_path = asset_dir / asset_path.lstrip("/")
        if not file_path.is_file():
            logger.warning("Overlay asset missing, not embedded: %s", file_path)
            continue
        mime = mimetypes.guess_type(file_path.name)[0] or "image/png"
        embedded[asset_path] = bytes_to_data_url(file_path.read_bytes(), mime)
    return embedded
