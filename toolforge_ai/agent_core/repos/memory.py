"""In-memory backend implementations.

Used for tests, local development and the default ``memory://`` ephemeral
store. All of them are safe to share between threads.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..schemas.domain import Entity
from .interfaces import ConfigStorage, EntityStorage, EntityTypeManager, ExpirableKeyValueStore

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Entry:
    value: str
    expires_at: datetime


class InMemoryExpirableStore(ExpirableKeyValueStore):
    """Expiring key/value store guarded by a lock.

    Expired entries are purged lazily when they are touched.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or _utc_now
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    async def set_with_expire(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=expires_at)

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry is not None else None

    async def delete(self, key: str) -> bool:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return False
            del self._entries[key]
            return True

    async def pop(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            del self._entries[key]
            return entry.value

    def expires_at(self, key: str) -> Optional[datetime]:
        with self._lock:
            entry = self._live_entry(key)
            return entry.expires_at if entry is not None else None

    def _live_entry(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry


class InMemoryConfigStorage(ConfigStorage):
    """Config store backed by a dict; enumeration follows insertion order."""

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(data or {})

    def list_all(self) -> List[str]:
        return list(self._data)

    def read(self, name: str) -> Optional[Any]:
        return self._data.get(name)

    def write(self, name: str, data: Any) -> None:
        self._data[name] = data


class InMemoryEntityStorage(EntityStorage):
    def __init__(self, entities: Iterable[Entity] = ()) -> None:
        self._entities: Dict[str, Entity] = {str(e.id): e for e in entities}
        self.loads: List[str] = []

    def load(self, entity_id: str) -> Optional[Entity]:
        self.loads.append(str(entity_id))
        return self._entities.get(str(entity_id))

    def add(self, entity: Entity) -> None:
        self._entities[str(entity.id)] = entity


class InMemoryEntityTypeManager(EntityTypeManager):
    """Entity kinds and storages held in memory."""

    def __init__(self) -> None:
        self._storages: Dict[str, InMemoryEntityStorage] = {}

    def define(self, entity_type: str) -> InMemoryEntityStorage:
        return self._storages.setdefault(entity_type, InMemoryEntityStorage())

    def add(self, entity: Entity) -> None:
        self.define(entity.entity_type).add(entity)

    def has_definition(self, entity_type: str) -> bool:
        return entity_type in self._storages

    def get_storage(self, entity_type: str) -> Optional[InMemoryEntityStorage]:
        return self._storages.get(entity_type)
