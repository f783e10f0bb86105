"""
Agents API Endpoints.

This module lists and describes agent definitions and runs one prompt through
an agent. Runs need a language model configured on the ``ToolboxService``.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, status

from toolforge_ai.core.logging_config import get_logger
from toolforge_ai.server.schemas import AgentRunRequest
from toolforge_ai.server.services.deps import CallerDep, ToolboxDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/",
    summary="List Agents",
    description="Retrieve every agent definition with its high-level metadata, sorted by id.",
)
async def list_agents(toolbox: ToolboxDep) -> List[Dict[str, Any]]:
    return [agent.summary() for agent in toolbox.agents.list()]


@router.get(
    "/{agent_id}",
    summary="Describe Agent",
    description="Retrieve the full configuration of one agent.",
    responses={404: {"description": "Agent not found"}},
)
async def describe_agent(agent_id: str, toolbox: ToolboxDep) -> Dict[str, Any]:
    return toolbox.agents.get(agent_id).describe()


@router.post(
    "/{agent_id}/runs",
    summary="Run Agent",
    description="Run one prompt through an agent and return its final response.",
    responses={
        404: {"description": "Agent not found"},
        503: {"description": "No language model is configured"},
    },
)
async def run_agent(agent_id: str, body: AgentRunRequest, toolbox: ToolboxDep, caller: CallerDep) -> Dict[str, Any]:
    """
    Run an agent.

    The response always carries ``agent_id`` and ``response``; ``history`` is
    included when requested and ``tool_results`` when any tool ran.
    """
    if toolbox.model is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="No language model is configured.")
    result = await toolbox.runner().run(agent_id, body.prompt, caller=caller, history=body.history)
    return result.to_payload(with_history=body.with_history)
