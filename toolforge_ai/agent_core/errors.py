"""Error types for the capability runtime.

Every failure of an invocation is raised as a ``CapabilityError`` subclass.
Each carries an ``ErrorKind`` so callers (the HTTP layer, the agent runner)
can branch on the kind without inspecting classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence


class ErrorKind(str, Enum):
    not_found = "not_found"
    unauthorized = "unauthorized"
    invalid_input = "invalid_input"
    validation_failed = "validation_failed"
    execution_failed = "execution_failed"


class CapabilityError(Exception):
    """Base error for all capability runtime exceptions."""

    kind: ErrorKind = ErrorKind.execution_failed


class CapabilityNotFoundError(CapabilityError):
    """Raised when an identifier resolves neither as an id nor as a function name."""

    kind = ErrorKind.not_found

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Unable to load tool '{identifier}' as a capability id or function name.")
        self.identifier = identifier


class UnauthorizedError(CapabilityError):
    """Raised when a principal lacks the privilege an operation requires."""

    kind = ErrorKind.unauthorized


class InvalidInputError(CapabilityError, ValueError):
    """Raised for malformed caller input: unknown contexts, bad payloads, bad keys or filenames."""

    kind = ErrorKind.invalid_input


@dataclass(frozen=True)
class Violation:
    """One failed constraint on one context."""

    context_name: str
    label: str
    message: str

    def render(self) -> str:
        return f"Invalid value for {self.label}: {self.message}"


class ValidationFailedError(CapabilityError):
    """Raised when context validation produced one or more violations."""

    kind = ErrorKind.validation_failed

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations: List[Violation] = list(violations)
        super().__init__("\n".join(v.render() for v in self.violations))


class ExecutionFailedError(CapabilityError):
    """Raised when a capability failed during its single execution attempt."""

    kind = ErrorKind.execution_failed

    def __init__(self, capability_id: str, message: str) -> None:
        super().__init__(f"Capability '{capability_id}' failed: {message}")
        self.capability_id = capability_id


class AgentNotFoundError(CapabilityError):
    """Raised when no agent definition exists for an id."""

    kind = ErrorKind.not_found

    def __init__(self, agent_id: str) -> None:
        super().__init__(f'AI agent "{agent_id}" was not found.')
        self.agent_id = agent_id
