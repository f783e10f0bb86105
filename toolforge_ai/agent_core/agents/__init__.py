"""Agent definitions and the agent run loop.

- ``AgentDefinition``: loaded, immutable agent configuration.
- ``AgentRegistry``: agent id → definition, loadable from YAML.
- ``ToolCallingModel``: the language-model transport boundary.
- ``AgentRunner``: drives a model, running requested tools through the
  capability invoker with one ledger per run.
"""

from .models import AgentDefinition, AgentResponse, ModelTurn, ToolCall, ToolCallingModel
from .registry import AgentRegistry
from .runner import AgentRunner

__all__ = [
    "AgentDefinition",
    "AgentRegistry",
    "AgentResponse",
    "AgentRunner",
    "ModelTurn",
    "ToolCall",
    "ToolCallingModel",
]
