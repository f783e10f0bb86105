"""Capability invocation runtime, built-in tools and agent loop.

Design overview
---------------

A caller asks for a capability by id or function name and supplies untyped
input. The runtime then:

- resolves the capability through ``CapabilityRegistry``,
- checks the caller against ``GlobalPolicy``,
- coerces, resolves and validates the context values,
- executes the capability exactly once under an elevated, call-local
  ``AuthorizationContext``,
- records the invocation in the run's ``RunLedger``.

Typical usage
-------------

Most applications should use ``agent_core.service.ToolboxService``:

1. Build it with ``ToolboxService.from_settings``.
2. Invoke tools through ``toolbox.invoker``.
3. Run agents through ``toolbox.runner()``.
"""

from .errors import (
    AgentNotFoundError,
    CapabilityError,
    CapabilityNotFoundError,
    ErrorKind,
    ExecutionFailedError,
    InvalidInputError,
    UnauthorizedError,
    ValidationFailedError,
    Violation,
)
from .runtime import CapabilityInvoker, InvocationOutcome, RunLedger, RuntimeDeps
from .schemas.domain import CapabilityDescriptor, ContextSpec, Entity, Principal
from .service import ToolboxService, get_toolbox

__all__ = [
    "AgentNotFoundError",
    "CapabilityError",
    "CapabilityNotFoundError",
    "ErrorKind",
    "ExecutionFailedError",
    "InvalidInputError",
    "UnauthorizedError",
    "ValidationFailedError",
    "Violation",
    "CapabilityInvoker",
    "InvocationOutcome",
    "RunLedger",
    "RuntimeDeps",
    "CapabilityDescriptor",
    "ContextSpec",
    "Entity",
    "Principal",
    "ToolboxService",
    "get_toolbox",
]
