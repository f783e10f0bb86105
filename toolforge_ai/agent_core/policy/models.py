from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import Field

from ..schemas.base import BaseSchema


class ToolPolicy(BaseSchema):
    """
    Configuration for capability allow/deny lists.

    Controls which capabilities a caller is permitted to invoke.
    Default behavior is permissive unless allow-lists are configured.
    """
    allowed_capabilities: Optional[set[str]] = Field(
        default=None,
        description="If set, only these capability ids may be invoked.",
    )
    blocked_capabilities: set[str] = Field(
        default_factory=set,
        description="Capability ids in this set will be blocked.",
    )
    allowed_groups: Optional[set[str]] = Field(
        default=None,
        description="If set, only capabilities of these groups may be invoked.",
    )


class PolicyConfig(BaseSchema):
    """
    Aggregate configuration object for caller-level policy.

    This is the root configuration object used to instantiate a ``GlobalPolicy``.
    """
    version: str = Field(default="policy-v1")

    invoke_permission: Optional[str] = Field(
        default=None,
        description="Permission the caller must hold to invoke any capability.",
    )
    tool_policy: ToolPolicy = Field(default_factory=ToolPolicy)


@dataclass(frozen=True)
class PolicyDecision:
    """
    Result of a policy evaluation for one invocation.

    Attributes:
        block: Whether the invocation is blocked by policy.
        block_reason: Human-readable reason if the invocation is blocked.
    """
    block: bool
    block_reason: Optional[str] = None
