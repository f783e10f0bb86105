"""Runtime dependency bundle.

The invoker is dependency-injected:

- ``RuntimeDeps`` collects the registry, stores and storages capabilities
  reach through ``CapabilityContext.deps``.

It is typically constructed by ``ToolboxService`` from settings, or directly
by tests with in-memory backends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..capabilities.registry import CapabilityRegistry
from ..repos.interfaces import ConfigStorage, EntityTypeManager, ModuleLocator
from ..repos.memory import InMemoryConfigStorage
from ..schemas.domain import Principal
from ..storage.ephemeral import ScopedEphemeralStore


def _default_elevated_principal() -> Principal:
    return Principal(id="1", name="admin", is_superuser=True)


@dataclass(frozen=True)
class RuntimeDeps:
    """Dependency bundle for ``CapabilityInvoker``.

    - ``registry`` resolves identifiers to capability classes.
    - ``ephemeral`` is the one store shared between invocations.
    - ``active_config``/``staging_config`` feed the config tools.
    - ``entities`` backs entity-reference resolution.
    - ``modules`` locates modules for the schema-file writer.
    - ``elevated_principal`` is the principal capabilities execute as.
    """

    registry: CapabilityRegistry
    ephemeral: ScopedEphemeralStore
    active_config: ConfigStorage = field(default_factory=InMemoryConfigStorage)
    staging_config: ConfigStorage = field(default_factory=InMemoryConfigStorage)
    entities: Optional[EntityTypeManager] = None
    modules: Optional[ModuleLocator] = None
    elevated_principal: Principal = field(default_factory=_default_elevated_principal)
