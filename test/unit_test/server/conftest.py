from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolforge_ai.agent_core.agents import AgentDefinition, AgentRegistry
from toolforge_ai.agent_core.runtime import CapabilityInvoker
from toolforge_ai.agent_core.service import ToolboxService

ADMIN_HEADERS = {"X-Principal-Id": "1", "X-Principal-Permissions": "use tools, administer site configuration"}


@pytest.fixture
def toolbox(invoker: CapabilityInvoker) -> ToolboxService:
    """Toolbox over the in-memory runtime, with one agent and no model."""
    agents = AgentRegistry(
        [
            AgentDefinition(
                id="config",
                label="Config Agent",
                description="Reads and diffs configuration.",
                system_prompt="You manage configuration.",
                tools=["ai_agent:get_config_by_id", "ai_agent:config_diff"],
            )
        ]
    )
    return ToolboxService(invoker=invoker, agents=agents)


@pytest_asyncio.fixture(name="client")
async def client_fixture(toolbox: ToolboxService) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from toolforge_ai.agent_core.service import get_toolbox
    from toolforge_ai.server.main import app

    app.dependency_overrides[get_toolbox] = lambda: toolbox

    # Mock the lifespan to prevent backend initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("toolforge_ai.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
