"""
Health Check Endpoints.

Basic status endpoints used for monitoring and deployment verification. The
version endpoint also reports how many capabilities the runtime has
registered, so a deployment missing its built-in tools is visible at a glance.
"""

from fastapi import APIRouter

from toolforge_ai.server.core import constant
from toolforge_ai.server.services.deps import ToolboxDep

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information and the number of registered capabilities.",
    response_description="Version object.",
)
async def version(toolbox: ToolboxDep):
    return {
        "version": constant.VERSION,
        "schema_version": constant.SCHEMA_VERSION,
        "capabilities": len(toolbox.invoker.list_capabilities()),
    }
