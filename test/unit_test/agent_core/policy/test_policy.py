from __future__ import annotations

import pytest

from toolforge_ai.agent_core.errors import ErrorKind, UnauthorizedError
from toolforge_ai.agent_core.policy import GlobalPolicy, PolicyConfig, ToolPolicy
from toolforge_ai.agent_core.schemas.domain import CapabilityDescriptor, Principal

DESCRIPTOR = CapabilityDescriptor(id="a:read", function_name="a_read", label="Read", group="information_tools")
EDITOR = Principal(id="2", permissions=frozenset({"use tools"}))


def test_default_policy_allows_everyone() -> None:
    decision = GlobalPolicy().decide(Principal.anonymous(), DESCRIPTOR)
    assert decision.block is False
    assert decision.block_reason is None


def test_invoke_permission_is_required() -> None:
    policy = GlobalPolicy(PolicyConfig(invoke_permission="use tools"))
    assert policy.decide(EDITOR, DESCRIPTOR).block is False
    decision = policy.decide(Principal(id="3"), DESCRIPTOR)
    assert decision.block is True
    assert decision.block_reason == "caller lacks permission: use tools"


def test_superuser_holds_invoke_permission() -> None:
    policy = GlobalPolicy(PolicyConfig(invoke_permission="use tools"))
    assert policy.decide(Principal(id="1", is_superuser=True), DESCRIPTOR).block is False


@pytest.mark.parametrize(
    "tool_policy,reason",
    [
        (ToolPolicy(blocked_capabilities={"a:read"}), "capability blocked: a:read"),
        (ToolPolicy(allowed_capabilities={"a:write"}), "capability not allowed: a:read"),
        (ToolPolicy(allowed_groups={"modification_tools"}), "capability group not allowed: information_tools"),
    ],
)
def test_tool_policy_blocks(tool_policy: ToolPolicy, reason: str) -> None:
    decision = GlobalPolicy(PolicyConfig(tool_policy=tool_policy)).decide(EDITOR, DESCRIPTOR)
    assert decision.block is True
    assert decision.block_reason == reason


def test_block_list_wins_over_allow_list() -> None:
    tool_policy = ToolPolicy(allowed_capabilities={"a:read"}, blocked_capabilities={"a:read"})
    assert GlobalPolicy(PolicyConfig(tool_policy=tool_policy)).decide(EDITOR, DESCRIPTOR).block is True


def test_authorize_raises_unauthorized() -> None:
    policy = GlobalPolicy(PolicyConfig(invoke_permission="use tools"))
    policy.authorize(EDITOR, DESCRIPTOR)
    with pytest.raises(UnauthorizedError) as exc:
        policy.authorize(Principal(id="3"), DESCRIPTOR)
    assert exc.value.kind is ErrorKind.unauthorized
    assert str(exc.value) == "Not authorized to invoke 'a:read': caller lacks permission: use tools"


def test_config_is_exposed() -> None:
    cfg = PolicyConfig(invoke_permission="x")
    assert GlobalPolicy(cfg).config is cfg
    assert GlobalPolicy().config.version == "policy-v1"
