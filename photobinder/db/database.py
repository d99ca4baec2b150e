"""
Local store engine and sessions.

The store is a single SQLite file by default. Its directory is created on
startup so a fresh checkout or container can run without setup.
"""

import logging
from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from photobinder.config import settings
from photobinder.models.db import Base

logger = logging.getLogger(__name__)

# Seconds a writer waits on SQLite's file lock before giving up
SQLITE_BUSY_TIMEOUT = 15


def sqlite_file_path(database_url: str) -> Path | None:
    """
    Path of the database file for a file-backed SQLite URL.

    Returns None for in-memory SQLite and for other backends.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return Path(url.database)


def create_store_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    connect_args = {}
    if make_url(database_url).get_backend_name() == "sqlite":
        connect_args["timeout"] = SQLITE_BUSY_TIMEOUT
    return create_async_engine(database_url, echo=echo, connect_args=connect_args)


engine = create_store_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Session for one request; committed on success, rolled back on store errors."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db(target: AsyncEngine | None = None) -> None:
    """
    Create the store's directory and tables.

    Called once at application startup.
    """
    target = target or engine
    path = sqlite_file_path(target.url.render_as_string(hide_password=False))
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Local store at %s", path.resolve())
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
