"""Policy and authorization for capability invocation.

Components
----------

- ``ToolPolicy``: allow/deny which capabilities (and groups) may be invoked.
- ``PolicyConfig``: root configuration, including an optional permission every
  caller must hold.
- ``GlobalPolicy``: evaluates the configuration for one caller and descriptor;
  the invoker calls ``authorize`` before any context is parsed.
- ``AuthorizationContext``: call-local effective principal with scoped
  elevation for capability execution.
"""

from .authorization import AuthorizationContext
from .global_policy import GlobalPolicy
from .models import PolicyConfig, PolicyDecision, ToolPolicy

__all__ = [
    "AuthorizationContext",
    "GlobalPolicy",
    "PolicyConfig",
    "PolicyDecision",
    "ToolPolicy",
]
