"""Application wiring for the capability runtime.

``ToolboxService`` builds the registry, backends, invoker and agent registry
from ``Settings`` so that applications (the HTTP server, scripts) do not need
to wire them by hand.

Backends
--------

- Ephemeral store: ``memory://`` gives the in-memory store; any other URL is an
  async SQLAlchemy URL for ``SqlExpirableStore``.
- Active/staging config: YAML directories when configured, empty in-memory
  storages otherwise.
- Modules: a directory whose sub-directories are modules, when configured.

``ToolboxService`` is intentionally thin: execution semantics live in the
invoker and the agent runner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from ..core.config import Settings
from .agents import AgentRegistry, AgentRunner, ToolCallingModel
from .capabilities import CapabilityRegistry, register_builtin_capabilities
from .policy import GlobalPolicy, PolicyConfig
from .repos import (
    DirectoryModuleLocator,
    InMemoryConfigStorage,
    InMemoryEntityTypeManager,
    InMemoryExpirableStore,
    YamlDirectoryConfigStorage,
)
from .repos.interfaces import ConfigStorage
from .repos.sql import SqlExpirableStore, create_all, create_engine, create_sessionmaker
from .runtime import CapabilityInvoker, RuntimeDeps
from .schemas.domain import Principal
from .storage import ScopedEphemeralStore

logger = logging.getLogger(__name__)

MEMORY_URL = "memory://"


def _config_storage(directory: Optional[str]) -> ConfigStorage:
    return YamlDirectoryConfigStorage(directory) if directory else InMemoryConfigStorage()


@dataclass
class ToolboxService:
    """Invoker, agents and optional model for one application."""

    invoker: CapabilityInvoker
    agents: AgentRegistry = field(default_factory=AgentRegistry)
    model: Optional[ToolCallingModel] = None
    engine: Optional[AsyncEngine] = None

    @classmethod
    def from_settings(cls, cfg: Settings, *, model: Optional[ToolCallingModel] = None) -> "ToolboxService":
        engine: Optional[AsyncEngine] = None
        store_cfg = cfg.ephemeral_store
        if store_cfg.backend_url.startswith(MEMORY_URL):
            backend = InMemoryExpirableStore()
        else:
            engine = create_engine(store_cfg.backend_url)
            backend = SqlExpirableStore(create_sessionmaker(engine))

        storage_cfg = cfg.config_storage
        deps = RuntimeDeps(
            registry=register_builtin_capabilities(CapabilityRegistry()),
            ephemeral=ScopedEphemeralStore(backend, prefix=store_cfg.key_prefix, ttl_seconds=store_cfg.ttl_seconds),
            active_config=_config_storage(storage_cfg.active_dir),
            staging_config=_config_storage(storage_cfg.staging_dir),
            entities=InMemoryEntityTypeManager(),
            modules=DirectoryModuleLocator(storage_cfg.modules_root) if storage_cfg.modules_root else None,
            elevated_principal=Principal(id=cfg.elevated_principal_id, name="admin", is_superuser=True),
        )
        policy = GlobalPolicy(PolicyConfig(invoke_permission=cfg.invoke_permission))
        agents = AgentRegistry.from_yaml(cfg.agents_file) if cfg.agents_file else AgentRegistry()
        return cls(invoker=CapabilityInvoker(deps, policy=policy), agents=agents, model=model, engine=engine)

    def runner(self) -> AgentRunner:
        """
        Build an agent runner over this service.

        Raises:
            RuntimeError: If no language model is configured.
        """
        if self.model is None:
            raise RuntimeError("No language model is configured.")
        return AgentRunner(invoker=self.invoker, agents=self.agents, model=self.model)

    async def startup(self) -> None:
        if self.engine is not None:
            await create_all(self.engine)
            logger.info("Ephemeral store tables created")

    async def shutdown(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


_toolbox: Optional[ToolboxService] = None


def get_toolbox() -> ToolboxService:
    """Return the process-wide ``ToolboxService``, building it from settings on first use."""
    global _toolbox
    if _toolbox is None:
        from ..core.config import settings

        _toolbox = ToolboxService.from_settings(settings)
    return _toolbox
