"""
SQLAlchemy ORM models for local persistent state.

Only client-local state lives here: preferences and the edited-image cache.
Binders, cards and accounts belong to the remote backend.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class LocalStorageEntryDB(Base):
    """
    One namespaced key-value pair.

    Keys carry their concern prefix (e.g. ``edited_card_<cardId>``).
    """

    __tablename__ = "local_storage_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<LocalStorageEntryDB(key={self.key})>"
