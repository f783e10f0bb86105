"""Capability base class and execution data models.

A capability is the concrete execution unit behind a tool call.

The invoker resolves an identifier through a ``CapabilityRegistry``, creates a
fresh instance, fills its contexts and executes it with a
``CapabilityContext``.

Capabilities should:

- declare their inputs in a ``CapabilityDescriptor`` class attribute,
- return a ``CapabilityResult`` with a readable ``output`` and, where it makes
  sense, a structured ``result``,
- leave caller-level policy decisions to the invoker (the invoker checks the
  caller before any context is touched).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from ..errors import InvalidInputError, UnauthorizedError
from ..schemas.domain import CapabilityDescriptor, ContextSpec, Principal

PERMISSION_DENIED_MESSAGE = "You do not have permission to access this function."


@dataclass(frozen=True)
class CapabilityContext:
    """Execution context passed to capability implementations.

    Attributes
    ----------
    principal:
        The effective principal the capability executes as (the elevated one
        when run through the invoker).
    caller:
        The principal that requested the invocation.
    deps:
        Runtime dependencies (stores, config storages, entity manager) bundled
        in ``RuntimeDeps``.
    run_id:
        Id of the run the invocation belongs to, if any.
    """

    principal: Principal
    deps: Any
    caller: Optional[Principal] = None
    run_id: Optional[str] = None


@dataclass(frozen=True)
class CapabilityResult:
    """Readable output plus optional structured result of one execution."""

    output: str
    result: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class Capability(ABC):
    """Single-use capability instance.

    Subclasses set ``descriptor`` and implement ``run``. An instance holds the
    context values assigned before execution and may be executed once.
    """

    descriptor: ClassVar[CapabilityDescriptor]

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._executed = False
        self._result: Optional[CapabilityResult] = None

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def function_name(self) -> str:
        return self.descriptor.function_name

    @property
    def executed(self) -> bool:
        return self._executed

    def context_definitions(self) -> Dict[str, ContextSpec]:
        return dict(self.descriptor.contexts)

    def set_context_value(self, name: str, value: Any) -> None:
        """Assign a context value; ``None`` unsets the context."""
        if name not in self.descriptor.contexts:
            raise InvalidInputError(f"Unknown context '{name}' for tool '{self.id}'.")
        if value is None:
            self._values.pop(name, None)
            return
        self._values[name] = value

    def has_context_value(self, name: str) -> bool:
        return name in self._values

    def get_context_value(self, name: str) -> Any:
        """Return the assigned value, or the declared default when unset."""
        if name in self._values:
            return self._values[name]
        spec = self.descriptor.contexts.get(name)
        if spec is None:
            raise InvalidInputError(f"Unknown context '{name}' for tool '{self.id}'.")
        return spec.default

    def context_values(self) -> Dict[str, Any]:
        """Assigned context values in declaration order."""
        return {name: self._values[name] for name in self.descriptor.contexts if name in self._values}

    async def execute(self, ctx: CapabilityContext) -> CapabilityResult:
        """Execute the capability once.

        Raises:
            RuntimeError: If the instance was already executed.
            UnauthorizedError: If the effective principal lacks the descriptor's permission.
        """
        if self._executed:
            raise RuntimeError(f"Capability '{self.id}' instance has already been executed.")
        self._executed = True
        if not ctx.principal.has_permission(self.descriptor.permission):
            raise UnauthorizedError(PERMISSION_DENIED_MESSAGE)
        self._result = await self.run(ctx)
        return self._result

    @abstractmethod
    async def run(self, ctx: CapabilityContext) -> CapabilityResult: ...

    @property
    def readable_output(self) -> str:
        return self._result.output if self._result is not None else ""

    @property
    def result(self) -> Any:
        return self._result.result if self._result is not None else None
