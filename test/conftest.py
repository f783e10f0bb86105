from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Sequence

import pytest

from toolforge_ai.agent_core.agents import ModelTurn
from toolforge_ai.agent_core.capabilities import CapabilityRegistry, register_builtin_capabilities
from toolforge_ai.agent_core.policy import AuthorizationContext
from toolforge_ai.agent_core.repos import (
    DirectoryModuleLocator,
    InMemoryConfigStorage,
    InMemoryEntityTypeManager,
    InMemoryExpirableStore,
)
from toolforge_ai.agent_core.runtime import CapabilityInvoker, RuntimeDeps
from toolforge_ai.agent_core.schemas.domain import CapabilityDescriptor, ChatMessage, Entity, Principal
from toolforge_ai.agent_core.storage import ScopedEphemeralStore


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class ScriptedModel:
    """Tool-calling model that replays prepared turns and records what it saw."""

    def __init__(self, turns: Sequence[ModelTurn]) -> None:
        self._turns = list(turns)
        self.calls: List[List[ChatMessage]] = []
        self.offered: List[List[str]] = []

    async def complete(
        self, messages: Sequence[ChatMessage], tools: Sequence[CapabilityDescriptor]
    ) -> ModelTurn:
        self.calls.append(list(messages))
        self.offered.append([t.id for t in tools])
        if not self._turns:
            return ModelTurn(content="done")
        return self._turns.pop(0)


@pytest.fixture
def scripted_model() -> Callable[..., ScriptedModel]:
    """Factory for a model replaying the given turns."""

    def _make(*turns: ModelTurn) -> ScriptedModel:
        return ScriptedModel(turns)

    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock: FakeClock) -> InMemoryExpirableStore:
    return InMemoryExpirableStore(clock=clock)


@pytest.fixture
def ephemeral(backend: InMemoryExpirableStore) -> ScopedEphemeralStore:
    return ScopedEphemeralStore(backend)


@pytest.fixture
def registry() -> CapabilityRegistry:
    return register_builtin_capabilities(CapabilityRegistry())


@pytest.fixture
def entities() -> InMemoryEntityTypeManager:
    manager = InMemoryEntityTypeManager()
    manager.add(Entity(entity_type="node", id="1", label="Welcome", values={"title": "Welcome", "status": True}))
    manager.add(Entity(entity_type="node", id="2", label="About", values={"title": "About"}))
    manager.add(Entity(entity_type="user", id="1", label="admin", values={"name": "admin"}))
    return manager


@pytest.fixture
def active_config() -> InMemoryConfigStorage:
    return InMemoryConfigStorage(
        {
            "system.site": {"name": "Example", "mail": "admin@example.com", "page": {"front": "/node"}},
            "system.performance": {"cache": {"page": {"max_age": 300}}},
        }
    )


@pytest.fixture
def staging_config() -> InMemoryConfigStorage:
    return InMemoryConfigStorage(
        {
            "system.site": {"name": "Example", "mail": "admin@example.com", "page": {"front": "/node"}},
            "system.performance": {"cache": {"page": {"max_age": 0}}},
        }
    )


@pytest.fixture
def modules_root(tmp_path: Path) -> Path:
    root = tmp_path / "modules"
    (root / "my_module").mkdir(parents=True)
    return root


@pytest.fixture
def elevated() -> Principal:
    return Principal(id="1", name="admin", is_superuser=True)


@pytest.fixture
def deps(
    registry: CapabilityRegistry,
    ephemeral: ScopedEphemeralStore,
    active_config: InMemoryConfigStorage,
    staging_config: InMemoryConfigStorage,
    entities: InMemoryEntityTypeManager,
    modules_root: Path,
    elevated: Principal,
) -> RuntimeDeps:
    return RuntimeDeps(
        registry=registry,
        ephemeral=ephemeral,
        active_config=active_config,
        staging_config=staging_config,
        entities=entities,
        modules=DirectoryModuleLocator(modules_root),
        elevated_principal=elevated,
    )


@pytest.fixture
def invoker(deps: RuntimeDeps) -> CapabilityInvoker:
    return CapabilityInvoker(deps)


@pytest.fixture
def caller() -> Principal:
    return Principal(id="42", name="editor", permissions=frozenset({"use tools"}))


@pytest.fixture
def auth(caller: Principal) -> AuthorizationContext:
    return AuthorizationContext(caller)
