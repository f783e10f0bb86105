"""Backend interface contracts.

The runtime and the built-in capabilities depend on these Protocols instead of
concrete storage implementations.

Contract guidelines
-------------------

- The expirable key/value store is async and shared between concurrent runs;
  ``delete`` reports whether it removed a live entry so callers can build an
  atomic consume on top of it.
- Config storages and entity storages are read-only from this package's
  point of view and are called synchronously.

These interfaces mirror what the capabilities need:

- The ephemeral store passes drafts between otherwise stateless invocations.
- Config storages ("active" and "staging") feed the config tools and differ.
- Entity storages back entity-reference resolution.
- The module locator tells the schema-file writer where a module lives.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Protocol

from ..schemas.domain import Entity


class ExpirableKeyValueStore(Protocol):
    """Key/value service whose entries expire."""

    async def set_with_expire(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value that expires ``ttl_seconds`` from now.

        Args:
            key: The fully namespaced key.
            value: The payload.
            ttl_seconds: Lifetime of the entry.
        """
        ...

    async def get(self, key: str) -> Optional[str]:
        """
        Read a live entry.

        Returns:
            The payload, or None when missing or expired.
        """
        ...

    async def delete(self, key: str) -> bool:
        """
        Remove an entry.

        Returns:
            True if this call removed a live entry, False otherwise.
        """
        ...

    async def pop(self, key: str) -> Optional[str]:
        """
        Remove a live entry and return its payload in one step.

        Returns:
            The payload if this call removed the entry, None otherwise.
        """
        ...


class ConfigStorage(Protocol):
    """Read access to one configuration store."""

    def list_all(self) -> List[str]:
        """Return every config name in the store's enumeration order."""
        ...

    def read(self, name: str) -> Optional[Any]:
        """Return the config tree for ``name`` or None when absent."""
        ...


class EntityStorage(Protocol):
    """Load entities of one kind by id."""

    def load(self, entity_id: str) -> Optional[Entity]: ...


class EntityTypeManager(Protocol):
    """Registry of entity kinds and their storages."""

    def has_definition(self, entity_type: str) -> bool: ...

    def get_storage(self, entity_type: str) -> Optional[EntityStorage]: ...


class ModuleLocator(Protocol):
    """Locate installed modules on disk."""

    def exists(self, module: str) -> bool: ...

    def get_path(self, module: str) -> Optional[Path]: ...
