"""SQLAlchemy async implementation of the expirable key/value store.

Usage
-----

Typical wiring (tests or application setup):

- Create an async engine with ``create_engine``.
- Create tables with ``create_all`` (for tests/dev).
- Create a session factory with ``create_sessionmaker``.
- Build the store with ``SqlExpirableStore(session_factory)``.

Transaction model
-----------------

Each method opens an ``AsyncSession``, performs its operation, and commits.
``delete`` is a single conditional ``DELETE`` whose row count tells the caller
whether it removed the entry; two concurrent deletes of the same key can
never both report success. ``pop`` adds ``RETURNING`` to the same statement,
so the payload a consumer receives is always the one its DELETE removed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .interfaces import ExpirableKeyValueStore
from .models import Base, EphemeralEntryRow


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Postgres URLs are normalized so the async driver is used: ``postgresql://``
    and other variants become ``postgresql+asyncpg://``. Other URLs (for
    example ``sqlite+aiosqlite://``) are passed through.
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata.

    This is mainly intended for tests and local development.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SqlExpirableStore(ExpirableKeyValueStore):
    """SQL implementation of ``ExpirableKeyValueStore``."""

    session_factory: async_sessionmaker[AsyncSession]
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def set_with_expire(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Insert or replace an entry.

        Args:
            key: The namespaced key.
            value: The payload.
            ttl_seconds: Lifetime of the entry.
        """
        now = self.clock()
        async with self.session_factory() as s:
            await s.merge(
                EphemeralEntryRow(
                    key=key,
                    value=value,
                    created_at=now,
                    expires_at=now + timedelta(seconds=ttl_seconds),
                )
            )
            await s.commit()

    async def get(self, key: str) -> Optional[str]:
        """
        Read a live entry.

        Args:
            key: The namespaced key.
        """
        async with self.session_factory() as s:
            stmt = select(EphemeralEntryRow.value).where(
                EphemeralEntryRow.key == key,
                EphemeralEntryRow.expires_at > self.clock(),
            )
            return (await s.execute(stmt)).scalar_one_or_none()

    async def delete(self, key: str) -> bool:
        """
        Remove a live entry.

        Returns:
            True only for the call whose DELETE removed the row.
        """
        async with self.session_factory() as s:
            stmt = delete(EphemeralEntryRow).where(
                EphemeralEntryRow.key == key,
                EphemeralEntryRow.expires_at > self.clock(),
            )
            res = await s.execute(stmt)
            await s.commit()
            return (res.rowcount or 0) == 1

    async def pop(self, key: str) -> Optional[str]:
        """
        Remove a live entry and return its payload.

        Returns:
            The payload of the row this call's DELETE removed, or None.
        """
        async with self.session_factory() as s:
            stmt = (
                delete(EphemeralEntryRow)
                .where(
                    EphemeralEntryRow.key == key,
                    EphemeralEntryRow.expires_at > self.clock(),
                )
                .returning(EphemeralEntryRow.value)
            )
            value = (await s.execute(stmt)).scalar_one_or_none()
            await s.commit()
            return value

    async def purge_expired(self) -> int:
        """Delete every expired row and return how many were removed."""
        async with self.session_factory() as s:
            res = await s.execute(delete(EphemeralEntryRow).where(EphemeralEntryRow.expires_at <= self.clock()))
            await s.commit()
            return res.rowcount or 0
