import pytest
from httpx import AsyncClient

from toolforge_ai.agent_core.policy import GlobalPolicy, PolicyConfig
from toolforge_ai.agent_core.runtime import CapabilityInvoker, RuntimeDeps
from toolforge_ai.agent_core.service import ToolboxService

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

BASE = "http://localhost/api/v1/capabilities"
HEADERS = {"X-Principal-Id": "42", "X-Principal-Permissions": "use tools"}


async def test_list_capabilities(client: AsyncClient):
    response = await client.get(f"{BASE}/")
    assert response.status_code == 200
    ids = [item["id"] for item in response.json()]
    assert "ai_agent:save_schema_file" in ids
    assert len(ids) == 9


async def test_list_capabilities_by_group(client: AsyncClient):
    response = await client.get(f"{BASE}/", params={"group": "modification_tools"})
    assert response.status_code == 200
    assert response.json() == []


async def test_describe_by_function_name(client: AsyncClient):
    response = await client.get(f"{BASE}/ai_agent_get_config_by_id")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "ai_agent:get_config_by_id"
    assert data["contexts"]["config_id"]["required"] is True


async def test_describe_unknown(client: AsyncClient):
    response = await client.get(f"{BASE}/nope")
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


async def test_invoke_text_output(client: AsyncClient):
    response = await client.post(
        f"{BASE}/ai_agent:get_config_by_id/invoke",
        json={"context": ["config_id=system.site.yml"]},
        headers=HEADERS,
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert '"name": "Example"' in response.text


async def test_invoke_json_output(client: AsyncClient):
    response = await client.post(
        f"{BASE}/ai_agent_save_temporary_data/invoke",
        json={"context_json": {"key": "draft", "data": "hello"}, "output": "json"},
        headers=HEADERS,
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["tool_id"] == "ai_agent:save_temporary_data"
    assert payload["function_name"] == "ai_agent_save_temporary_data"
    assert payload["result"] == {"key": "ai_agent_tmp_1:draft"}
    assert payload["provided_context"] == {"key": "draft", "data": "hello"}


async def test_invoke_unknown_context(client: AsyncClient):
    response = await client.post(
        f"{BASE}/ai_agent:get_config_by_id/invoke",
        json={"context": ["bogus=1"]},
        headers=HEADERS,
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"


async def test_invoke_missing_required_context(client: AsyncClient):
    response = await client.post(f"{BASE}/ai_agent:get_config_by_id/invoke", json={}, headers=HEADERS)
    assert response.status_code == 422
    body = response.json()
    assert body["kind"] == "validation_failed"
    assert body["violations"] == [
        {"context": "config_id", "label": "Configuration id", "message": "This value is required."}
    ]


async def test_invoke_execution_failure(client: AsyncClient):
    response = await client.post(
        f"{BASE}/ai_agent:get_capability_code/invoke",
        json={"context": ["capability=nope"]},
        headers=HEADERS,
    )
    assert response.status_code == 500
    assert response.json()["kind"] == "execution_failed"


async def test_invoke_without_caller_permission(client: AsyncClient, toolbox: ToolboxService, deps: RuntimeDeps):
    toolbox.invoker = CapabilityInvoker(deps, policy=GlobalPolicy(PolicyConfig(invoke_permission="use tools")))

    response = await client.post(f"{BASE}/ai_agent:config_diff/invoke", json={})
    assert response.status_code == 403
    assert response.json()["kind"] == "unauthorized"

    response = await client.post(f"{BASE}/ai_agent:config_diff/invoke", json={}, headers=HEADERS)
    assert response.status_code == 200
    assert "UPDATED:\n * system.performance" in response.text
