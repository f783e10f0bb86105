"""SQLAlchemy ORM models for the SQL ephemeral store.

The table holds namespaced key/value entries with an absolute expiry. Table
names are prefixed with ``tf_`` to avoid collisions in shared databases.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class EphemeralEntryRow(Base):
    """Row model for ``tf_ephemeral_entries``.

    Key fields:

    - ``key``: fully namespaced key (``<prefix><owner>:<suffix>``).
    - ``expires_at``: absolute expiry; rows past it are treated as absent.
    """

    __tablename__ = "tf_ephemeral_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
