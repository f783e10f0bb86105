from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import ClassVar, List

import pytest

from toolforge_ai.agent_core.capabilities import Capability, CapabilityContext, CapabilityRegistry, CapabilityResult
from toolforge_ai.agent_core.errors import (
    CapabilityNotFoundError,
    ErrorKind,
    ExecutionFailedError,
    InvalidInputError,
    UnauthorizedError,
    ValidationFailedError,
)
from toolforge_ai.agent_core.policy import AuthorizationContext, GlobalPolicy, PolicyConfig, ToolPolicy
from toolforge_ai.agent_core.runtime import CapabilityInvoker, RunLedger, RuntimeDeps, serialize_value
from toolforge_ai.agent_core.schemas.domain import CapabilityDescriptor, ContextSpec, Entity, Principal


class _Recorder(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="test:recorder",
        function_name="test_recorder",
        label="Recorder",
        contexts=[
            ContextSpec(name="count", data_type="integer", required=True, label="Count"),
            ContextSpec(name="tags", data_type="list"),
        ],
    )
    seen: List[CapabilityContext] = []

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        type(self).seen.append(ctx)
        return CapabilityResult(output=f"count={self.get_context_value('count')}")


class _Exploding(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="test:exploding",
        function_name="test_exploding",
        label="Exploding",
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        raise ValueError("boom")


@pytest.fixture(autouse=True)
def _extra_capabilities(registry: CapabilityRegistry) -> None:
    _Recorder.seen = []
    registry.register(_Recorder)
    registry.register(_Exploding)


class TestLookup:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier", ["ai_agent:save_temporary_data", "ai_agent_save_temporary_data"])
    async def test_by_id_or_function_name(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext, identifier: str
    ) -> None:
        outcome = await invoker.invoke(identifier, auth=auth, assignments=["key=draft", "data=hello"])
        assert outcome.capability_id == "ai_agent:save_temporary_data"
        assert outcome.readable_output == "The data has been successfully saved. Use the key: ai_agent_tmp_1:draft"

    @pytest.mark.asyncio
    async def test_unknown_identifier(self, invoker: CapabilityInvoker, auth: AuthorizationContext) -> None:
        with pytest.raises(CapabilityNotFoundError) as exc:
            await invoker.invoke("nope", auth=auth)
        assert exc.value.kind is ErrorKind.not_found

    def test_list_and_describe(self, invoker: CapabilityInvoker) -> None:
        ids = [d.id for d in invoker.list_capabilities()]
        assert "test:recorder" in ids
        assert invoker.describe_capability("test_recorder").id == "test:recorder"


class TestContextParsing:
    @pytest.mark.asyncio
    async def test_json_and_assignments_merge_with_assignments_winning(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext
    ) -> None:
        outcome = await invoker.invoke(
            "test:recorder",
            auth=auth,
            context_json='{"count": 1, "tags": ["a", "b"]}',
            assignments=["count=5"],
        )
        assert outcome.provided_context == {"count": 5, "tags": ["a", "b"]}
        assert outcome.readable_output == "count=5"

    @pytest.mark.asyncio
    async def test_mapping_payload(self, invoker: CapabilityInvoker, auth: AuthorizationContext) -> None:
        outcome = await invoker.invoke("test:recorder", auth=auth, context_json={"count": "3", "tags": "x, y"})
        assert outcome.resolved_context == {"count": 3, "tags": ["x", "y"]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"assignments": ["bogus=1"]}, 'Unknown context "bogus" for tool "test:recorder"'),
            ({"assignments": ["count"]}, 'Context "count" must use name=value format.'),
            ({"context_json": "{not json"}, "Failed to decode the context JSON payload"),
            ({"context_json": "[1, 2]"}, "must decode to a JSON object"),
        ],
    )
    async def test_malformed_input_is_rejected_before_execution(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext, kwargs: dict, message: str
    ) -> None:
        with pytest.raises(InvalidInputError, match=message):
            await invoker.invoke("test:recorder", auth=auth, **kwargs)
        assert _Recorder.seen == []

    @pytest.mark.asyncio
    async def test_context_for_tool_without_contexts_is_ignored(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext
    ) -> None:
        outcome = await invoker.invoke("ai_agent:config_diff", auth=auth, assignments=["foo=bar"])
        assert outcome.provided_context == {}


class TestValidation:
    @pytest.mark.asyncio
    async def test_missing_required_context(self, invoker: CapabilityInvoker, auth: AuthorizationContext) -> None:
        ledger = RunLedger()
        ledger.start_run()
        with pytest.raises(ValidationFailedError) as exc:
            await invoker.invoke("test:recorder", auth=auth, ledger=ledger)

        assert [(v.context_name, v.message) for v in exc.value.violations] == [("count", "This value is required.")]
        assert str(exc.value) == "Invalid value for Count: This value is required."
        assert _Recorder.seen == []
        assert ledger.entries() == ()

    @pytest.mark.asyncio
    async def test_uncastable_value(self, invoker: CapabilityInvoker, auth: AuthorizationContext) -> None:
        with pytest.raises(ValidationFailedError, match="This value should be of type integer."):
            await invoker.invoke("test:recorder", auth=auth, assignments=["count=abc"])

    @pytest.mark.asyncio
    async def test_unresolvable_entity(self, invoker: CapabilityInvoker, auth: AuthorizationContext) -> None:
        with pytest.raises(ValidationFailedError, match="This value should be an entity."):
            await invoker.invoke("ai_agent:entity_summary", auth=auth, assignments=["entity=node:404"])


class TestElevation:
    @pytest.mark.asyncio
    async def test_executes_as_elevated_principal(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext, caller: Principal, elevated: Principal
    ) -> None:
        await invoker.invoke("test:recorder", auth=auth, assignments=["count=1"])
        ctx = _Recorder.seen[0]
        assert ctx.principal == elevated
        assert ctx.caller == caller
        assert auth.current == caller
        assert auth.is_elevated is False

    @pytest.mark.asyncio
    async def test_restored_after_validation_failure(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext, caller: Principal
    ) -> None:
        with pytest.raises(ValidationFailedError):
            await invoker.invoke("test:recorder", auth=auth)
        assert auth.current == caller
        assert auth.is_elevated is False

    @pytest.mark.asyncio
    async def test_restored_after_execution_failure(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext, caller: Principal
    ) -> None:
        with pytest.raises(ExecutionFailedError) as exc:
            await invoker.invoke("test:exploding", auth=auth)
        assert str(exc.value) == "Capability 'test:exploding' failed: boom"
        assert isinstance(exc.value.__cause__, ValueError)
        assert auth.current == caller
        assert auth.is_elevated is False

    @pytest.mark.asyncio
    async def test_capability_errors_pass_through(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext
    ) -> None:
        await invoker.invoke("ai_agent:save_temporary_data", auth=auth, assignments=["key=s", "data=a: 1"])
        with pytest.raises(InvalidInputError, match="Invalid filename provided."):
            await invoker.invoke(
                "ai_agent:save_schema_file",
                auth=auth,
                assignments=["key=s", "filename=../x.schema.yml", "module=my_module"],
            )


class TestPolicy:
    @pytest.mark.asyncio
    async def test_missing_invoke_permission_is_rejected_before_parsing(
        self, deps: RuntimeDeps, auth: AuthorizationContext
    ) -> None:
        invoker = CapabilityInvoker(deps, policy=GlobalPolicy(PolicyConfig(invoke_permission="use agents")))
        with pytest.raises(UnauthorizedError, match="caller lacks permission: use agents"):
            await invoker.invoke("test:recorder", auth=auth, context_json="{not json")
        assert _Recorder.seen == []

    @pytest.mark.asyncio
    async def test_blocked_capability(self, deps: RuntimeDeps, auth: AuthorizationContext) -> None:
        policy = GlobalPolicy(PolicyConfig(tool_policy=ToolPolicy(blocked_capabilities={"test:recorder"})))
        with pytest.raises(UnauthorizedError):
            await CapabilityInvoker(deps, policy=policy).invoke("test_recorder", auth=auth, assignments=["count=1"])


class TestOutcome:
    @pytest.mark.asyncio
    async def test_payload_serializes_entities(self, invoker: CapabilityInvoker, auth: AuthorizationContext) -> None:
        outcome = await invoker.invoke("ai_agent:entity_summary", auth=auth, assignments=["entity=node:1"])
        payload = outcome.to_payload()
        reference = {"entity_type": "node", "id": "1", "label": "Welcome"}

        assert list(payload) == [
            "tool_id",
            "function_name",
            "output",
            "result",
            "provided_context",
            "resolved_context",
        ]
        assert payload["provided_context"] == {"entity": "node:1"}
        assert payload["resolved_context"] == {"entity": reference}
        assert payload["result"] == reference
        assert json.loads(outcome.to_json()) == payload

    @pytest.mark.asyncio
    async def test_ledger_records_each_invocation_in_order(
        self, invoker: CapabilityInvoker, auth: AuthorizationContext
    ) -> None:
        ledger = RunLedger()
        run_id = ledger.start_run()
        await invoker.invoke("test:recorder", auth=auth, assignments=["count=1"], ledger=ledger)
        await invoker.invoke("test:recorder", auth=auth, assignments=["count=2"], ledger=ledger)

        entries = ledger.entries()
        assert [e.readable_output for e in entries] == ["count=1", "count=2"]
        assert all(e.capability_id == "test:recorder" for e in entries)
        assert _Recorder.seen[0].run_id == run_id


def test_serialize_value() -> None:
    entity = Entity(entity_type="user", id="1")
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert serialize_value({"who": entity, "when": when, "ids": (1, 2), "obj": object}) == {
        "who": {"entity_type": "user", "id": "1"},
        "when": "2024-01-01T00:00:00+00:00",
        "ids": [1, 2],
        "obj": str(object),
    }
