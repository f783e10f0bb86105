"""
Request Dependencies.

Provides the process-wide ``ToolboxService`` and the calling principal for
API endpoints. The caller is taken from request headers; verifying who the
caller really is belongs to whatever sits in front of this server.
"""

from typing import Annotated, Optional

from fastapi import Depends, Header

from toolforge_ai.agent_core.schemas.domain import Principal
from toolforge_ai.agent_core.service import ToolboxService, get_toolbox

ToolboxDep = Annotated[ToolboxService, Depends(get_toolbox)]


def get_caller(
    x_principal_id: Annotated[Optional[str], Header()] = None,
    x_principal_permissions: Annotated[Optional[str], Header()] = None,
) -> Principal:
    """Build the calling principal from the ``X-Principal-*`` headers."""
    if not x_principal_id:
        return Principal.anonymous()
    permissions = frozenset(p.strip() for p in (x_principal_permissions or "").split(",") if p.strip())
    return Principal(id=x_principal_id, permissions=permissions)


CallerDep = Annotated[Principal, Depends(get_caller)]
