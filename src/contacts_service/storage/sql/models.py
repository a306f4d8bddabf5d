"""SQLAlchemy ORM model for the ``contacts`` table.

The id is an ``ALWAYS`` identity column, matching the migration, so
PostgreSQL rejects explicit ids. SQLite has no identity columns and falls
back to ``INTEGER PRIMARY KEY`` rowid assignment.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Identity, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


class ContactRecord(Base):
    """Persisted contact row."""

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        Identity(always=True),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    def __repr__(self) -> str:
        return f"<ContactRecord id={self.id} name={self.name!r}>"
