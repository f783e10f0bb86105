from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

import yaml
from pydantic import Field, field_validator

from ..schemas.base import BaseSchema, FrozenSchema
from ..schemas.domain import CapabilityDescriptor, ChatMessage, InvocationRecord

logger = logging.getLogger(__name__)


class AgentDefinition(FrozenSchema):
    """Loaded, immutable configuration of one agent.

    ``tools`` may be given as a list of capability ids or as a mapping of
    capability id to an enabled flag; only enabled ids are kept.
    """

    id: str
    label: str
    description: str = ""
    system_prompt: str = ""
    secured_system_prompt: str = ""
    tools: List[str] = Field(default_factory=list)
    tool_settings: Dict[str, Any] = Field(default_factory=dict)
    tool_usage_limits: Dict[str, Any] = Field(default_factory=dict)
    default_information_tools: Optional[str] = Field(
        default=None,
        description="YAML text describing tools whose output is always given to the agent.",
    )
    max_loops: int = Field(default=3, ge=1)
    orchestration_agent: bool = False
    triage_agent: bool = False
    structured_output_enabled: bool = False
    structured_output_schema: Optional[str] = None

    @field_validator("tools", mode="before")
    @classmethod
    def _enabled_tools(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [name for name, enabled in value.items() if enabled]
        return value

    def parsed_information_tools(self) -> Dict[str, Any]:
        """Decode ``default_information_tools``; unparsable text is kept under ``raw``."""
        if not self.default_information_tools:
            return {}
        try:
            parsed = yaml.safe_load(self.default_information_tools)
        except yaml.YAMLError as e:
            logger.warning(f"Failed to parse default information tools YAML: {e}")
            return {"raw": self.default_information_tools}
        return parsed if isinstance(parsed, dict) else {"raw": self.default_information_tools}

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "tools": ", ".join(self.tools),
        }

    def describe(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "system_prompt": self.system_prompt,
            "secured_system_prompt": self.secured_system_prompt,
            "tools": list(self.tools),
            "tool_settings": dict(self.tool_settings),
            "tool_usage_limits": dict(self.tool_usage_limits),
            "default_information_tools": self.parsed_information_tools(),
            "max_loops": self.max_loops,
            "orchestration_agent": self.orchestration_agent,
            "triage_agent": self.triage_agent,
            "structured_output_enabled": self.structured_output_enabled,
            "structured_output_schema": self.structured_output_schema,
        }


class ToolCall(BaseSchema):
    """One tool call requested by the model."""

    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ModelTurn(BaseSchema):
    """One model reply: final text, or tool calls to run before the next turn."""

    content: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)


class ToolCallingModel(Protocol):
    """Language-model transport used by ``AgentRunner``."""

    async def complete(
        self, messages: Sequence[ChatMessage], tools: Sequence[CapabilityDescriptor]
    ) -> ModelTurn: ...


class AgentResponse(BaseSchema):
    """Final reply of one agent run plus what happened on the way."""

    agent_id: str
    run_id: str
    response: str
    history: List[ChatMessage] = Field(default_factory=list)
    tool_results: List[InvocationRecord] = Field(default_factory=list)

    def to_payload(self, *, with_history: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"agent_id": self.agent_id, "response": self.response}
        if with_history:
            payload["history"] = [{"role": m.role.value, "content": m.content} for m in self.history]
        if self.tool_results:
            payload["tool_results"] = [
                {
                    "tool_id": r.capability_id,
                    "function_name": r.function_name,
                    **({"output": r.readable_output} if r.readable_output else {}),
                }
                for r in self.tool_results
            ]
        return payload
