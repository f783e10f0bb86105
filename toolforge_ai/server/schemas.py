"""
API Schemas.

This module contains Pydantic models used for API request bodies.
These schemas define the interface contract between the client and the server.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from toolforge_ai.agent_core.schemas.domain import ChatMessage


class OutputMode(str, Enum):
    text = "text"
    json = "json"


class InvokeRequest(BaseModel):
    """
    Schema for invoking one capability.

    ``context`` holds ``name=value`` assignments; ``context_json`` holds a JSON
    object (as text or inline). Assignments win over the JSON object.
    """

    context: List[str] = Field(
        default_factory=list,
        description="Context values as name=value assignments.",
        examples=[["config_id=system.site"]],
    )
    context_json: Optional[Union[str, Dict[str, Any]]] = Field(
        default=None,
        description="All context values as one JSON object.",
        examples=[{"key": "draft", "data": "hello"}],
    )
    output: OutputMode = Field(default=OutputMode.text, description="text (default) or json.")


class AgentRunRequest(BaseModel):
    """Schema for running one prompt through an agent."""

    prompt: str = Field(..., min_length=1, description="The prompt for the agent.")
    with_history: bool = Field(default=False, description="Include the chat history in the response.")
    history: List[ChatMessage] = Field(
        default_factory=list,
        description="Earlier messages of the conversation, oldest first.",
    )
