"""Caller-level policy decisions for capability invocation.

``GlobalPolicy`` is the authority the invoker consults before it touches any
context value. A blocked decision surfaces as ``UnauthorizedError`` with no
side effect.

It implements:

- an optional permission every caller must hold,
- capability allow/block lists,
- capability group allow-lists.
"""

from __future__ import annotations

from ..errors import UnauthorizedError
from ..schemas.domain import CapabilityDescriptor, Principal
from .models import PolicyConfig, PolicyDecision


class GlobalPolicy:
    """Aggregate policy decisions for invocations.

    ``GlobalPolicy`` is configured by ``PolicyConfig``.
    """

    def __init__(self, config: PolicyConfig | None = None) -> None:
        self._cfg = config or PolicyConfig()

    @property
    def config(self) -> PolicyConfig:
        """Return the underlying configuration object."""
        return self._cfg

    def decide(self, caller: Principal, descriptor: CapabilityDescriptor) -> PolicyDecision:
        """
        Compute the policy decision for ``caller`` invoking ``descriptor``.

        Evaluates, in order:
        1. The global invoke permission.
        2. The capability block list.
        3. The capability allow-list.
        4. The group allow-list.
        """
        if not caller.has_permission(self._cfg.invoke_permission):
            return PolicyDecision(block=True, block_reason=f"caller lacks permission: {self._cfg.invoke_permission}")

        tools = self._cfg.tool_policy
        if descriptor.id in tools.blocked_capabilities:
            return PolicyDecision(block=True, block_reason=f"capability blocked: {descriptor.id}")
        if tools.allowed_capabilities is not None and descriptor.id not in tools.allowed_capabilities:
            return PolicyDecision(block=True, block_reason=f"capability not allowed: {descriptor.id}")
        if tools.allowed_groups is not None and descriptor.group not in tools.allowed_groups:
            return PolicyDecision(block=True, block_reason=f"capability group not allowed: {descriptor.group}")
        return PolicyDecision(block=False)

    def authorize(self, caller: Principal, descriptor: CapabilityDescriptor) -> None:
        """
        Raise ``UnauthorizedError`` when the decision blocks the invocation.
        """
        decision = self.decide(caller, descriptor)
        if decision.block:
            raise UnauthorizedError(f"Not authorized to invoke '{descriptor.id}': {decision.block_reason}")
