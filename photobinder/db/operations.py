"""
Local storage CRUD operations.

Async functions over the ``local_storage_entries`` table.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from photobinder.models.db import LocalStorageEntryDB


def _has_prefix(prefix: str):
    # substr keeps the match case-sensitive, unlike LIKE on SQLite
    return func.substr(LocalStorageEntryDB.key, 1, len(prefix)) == prefix


async def get_entry(session: AsyncSession, key: str) -> str | None:
    """Return the stored value, or None if the key is absent."""
    entry = await session.get(LocalStorageEntryDB, key)
    return entry.value if entry else None


async def set_entry(session: AsyncSession, key: str, value: str) -> None:
    """Insert or overwrite a value."""
    entry = await session.get(LocalStorageEntryDB, key)
    if entry is None:
        session.add(LocalStorageEntryDB(key=key, value=value))
    else:
        entry.value = value
    await session.flush()


async def remove_entry(session: AsyncSession, key: str) -> bool:
    """
    Delete one key.

    Returns True if deleted, False if not found.
    """
    result = await session.execute(
        delete(LocalStorageEntryDB).where(LocalStorageEntryDB.key == key)
    )
    return result.rowcount > 0


async def list_keys(session: AsyncSession, prefix: str = "") -> list[str]:
    """List keys starting with prefix, sorted."""
    stmt = select(LocalStorageEntryDB.key).order_by(LocalStorageEntryDB.key)
    if prefix:
        stmt = stmt.where(_has_prefix(prefix))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def clear_entries(session: AsyncSession, prefix: str = "") -> int:
    """Delete every key starting with prefix. Returns the number removed."""
    stmt = delete(LocalStorageEntryDB)
    if prefix:
        stmt = stmt.where(_has_prefix(prefix))
    result = await session.execute(stmt)
    return result.rowcount
