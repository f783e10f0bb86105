"""
Capabilities API Endpoints.

This module exposes the capability surface of the runtime:

- list registered capabilities (optionally by group),
- describe one capability by id or function name,
- invoke one capability with raw context values.

Failures raised by the runtime are mapped to status codes by the exception
handlers registered in ``toolforge_ai.server.exception_handlers``.
"""

from typing import List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from toolforge_ai.agent_core.policy import AuthorizationContext
from toolforge_ai.agent_core.schemas.domain import CapabilityDescriptor
from toolforge_ai.core.logging_config import get_logger
from toolforge_ai.server.schemas import InvokeRequest, OutputMode
from toolforge_ai.server.services.deps import CallerDep, ToolboxDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/",
    response_model=List[CapabilityDescriptor],
    summary="List Capabilities",
    description="Retrieve every registered capability, optionally filtered by group.",
)
async def list_capabilities(
    toolbox: ToolboxDep,
    group: Optional[str] = Query(default=None, description="Only list capabilities of this group."),
) -> List[CapabilityDescriptor]:
    return toolbox.invoker.list_capabilities(group=group)


@router.get(
    "/{capability_id}",
    response_model=CapabilityDescriptor,
    summary="Describe Capability",
    description="Retrieve one capability by id or function name.",
    responses={404: {"description": "Capability not found"}},
)
async def describe_capability(capability_id: str, toolbox: ToolboxDep) -> CapabilityDescriptor:
    return toolbox.invoker.describe_capability(capability_id)


@router.post(
    "/{capability_id}/invoke",
    summary="Invoke Capability",
    description="Execute one capability with raw context values.",
    responses={
        200: {"description": "Readable output (text) or the serialized invocation payload (json)"},
        400: {"description": "Malformed or unknown context input"},
        403: {"description": "Caller is not allowed to invoke the capability"},
        404: {"description": "Capability not found"},
        422: {"description": "Context validation failed"},
        500: {"description": "The capability failed while executing"},
    },
)
async def invoke_capability(
    capability_id: str,
    body: InvokeRequest,
    toolbox: ToolboxDep,
    caller: CallerDep,
) -> Response:
    """
    Invoke a capability.

    With ``output=json`` the response is the full invocation payload
    (``tool_id``, ``function_name``, ``output``, ``result``,
    ``provided_context``, ``resolved_context``). Otherwise it is the readable
    output as plain text.
    """
    outcome = await toolbox.invoker.invoke(
        capability_id,
        auth=AuthorizationContext(caller),
        assignments=body.context,
        context_json=body.context_json,
    )
    if body.output == OutputMode.json:
        return JSONResponse(content=outcome.to_payload())
    text = outcome.readable_output or f'Tool "{outcome.capability_id}" executed.'
    return PlainTextResponse(content=text)
