"""Backend interfaces and reference implementations.

The repository layer is the boundary between the capability runtime and the
systems it reads from or writes to.

Responsibilities
----------------

- Provide small Protocols the runtime can depend on:

  - an expirable key/value store (shared between runs),
  - read-only config storages ("active" and "staging"),
  - entity kinds and storages for entity-reference resolution,
  - a module locator for the schema-file writer.

- Ship reference implementations:

  - in-memory fakes (``repos.memory``) used by tests and ``memory://``,
  - a YAML directory config storage and directory module locator
    (``repos.files``),
  - an async SQLAlchemy expirable store (``repos.sql``).
"""

from .files import DirectoryModuleLocator, YamlDirectoryConfigStorage
from .interfaces import (
    ConfigStorage,
    EntityStorage,
    EntityTypeManager,
    ExpirableKeyValueStore,
    ModuleLocator,
)
from .memory import (
    InMemoryConfigStorage,
    InMemoryEntityStorage,
    InMemoryEntityTypeManager,
    InMemoryExpirableStore,
)

__all__ = [
    "ConfigStorage",
    "EntityStorage",
    "EntityTypeManager",
    "ExpirableKeyValueStore",
    "ModuleLocator",
    "InMemoryConfigStorage",
    "InMemoryEntityStorage",
    "InMemoryEntityTypeManager",
    "InMemoryExpirableStore",
    "YamlDirectoryConfigStorage",
    "DirectoryModuleLocator",
]
