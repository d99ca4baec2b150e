"""
Edited-image cache.

When a user decorates a card with stickers, the composed image is kept
locally as a data URL under ``edited_card_<cardId>``. It overrides the card's
stored blob for display and export until cleared, and is never synced to the
backend.

The cache is best-effort: storage failures are logged and treated as a miss
(reads) or ignored (writes), so a broken cache never blocks viewing a binder.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from photobinder.services.storage import KeyValueStore, NamespacedStore

logger = logging.getLogger(__name__)

CACHE_PREFIX = "edited_card_"


class EditedImageCache:
    def __init__(self, store: KeyValueStore) -> None:
        self._entries = NamespacedStore(store, CACHE_PREFIX)

    async def save(self, card_id: str, image_url: str) -> None:
        try:
            await self._entries.set(card_id, image_url)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to save edited image for %s: %s", card_id, e)

    async def get(self, card_id: str) -> str | None:
        try:
            return await self._entries.get(card_id)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to read edited image for %s: %s", card_id, e)
            return None

    async def clear(self, card_id: str) -> None:
        try:
            await self._entries.remove(card_id)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to clear edited image for %s: %s", card_id, e)

    async def clear_all(self) -> None:
        try:
            await self._entries.clear()
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to clear edited images: %s", e)

    async def card_ids(self) -> list[str]:
        return await self._entries.names()
