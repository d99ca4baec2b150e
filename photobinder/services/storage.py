"""
Key-value store for client-local state.

Preferences and the edited-image cache live behind this interface so they can
be swapped for an in-memory fake in tests. Each concern owns a key prefix;
``NamespacedStore`` applies it so concerns never collide.

There is no locking between concurrent callers: two requests writing the same
key race, and the last write wins.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from photobinder.db.operations import (
    clear_entries,
    get_entry,
    list_keys,
    remove_entry,
    set_entry,
)


class KeyValueStore(Protocol):
    """Minimal async key-value interface."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def keys(self, prefix: str = "") -> list[str]: ...

    async def clear(self, prefix: str = "") -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store for tests and one-shot CLI runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))

    async def clear(self, prefix: str = "") -> None:
        for key in [k for k in self._data if k.startswith(prefix)]:
            del self._data[key]


class SqlKeyValueStore:
    """
    Store persisted through SQLAlchemy.

    Each call runs in its own short transaction so values survive restarts
    the same way browser local storage survives sessions.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            return await get_entry(session, key)

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session, session.begin():
            await set_entry(session, key, value)

    async def remove(self, key: str) -> None:
        async with self._session_factory() as session, session.begin():
            await remove_entry(session, key)

    async def keys(self, prefix: str = "") -> list[str]:
        async with self._session_factory() as session:
            return await list_keys(session, prefix)

    async def clear(self, prefix: str = "") -> None:
        async with self._session_factory() as session, session.begin():
            await clear_entries(session, prefix)


class NamespacedStore:
    """View of a store restricted to one key prefix."""

    def __init__(self, store: KeyValueStore, prefix: str) -> None:
        self.store = store
        self.prefix = prefix

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    async def get(self, name: str) -> str | None:
        return await self.store.get(self._key(name))

    async def set(self, name: str, value: str) -> None:
        await self.store.set(self._key(name), value)

    async def remove(self, name: str) -> None:
        await self.store.remove(self._key(name))

    async def names(self) -> list[str]:
        keys = await self.store.keys(self.prefix)
        return [key[len(self.prefix) :] for key in keys]

    async def clear(self) -> None:
        await self.store.clear(self.prefix)
