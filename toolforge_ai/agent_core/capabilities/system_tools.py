"""Introspection capabilities: registered tools, their code, loaded entities."""

from __future__ import annotations

import inspect
from typing import ClassVar, List

import yaml

from ..errors import CapabilityNotFoundError
from ..schemas.domain import CapabilityDescriptor, ContextDataType, ContextSpec, Entity
from .base import Capability, CapabilityContext, CapabilityResult
from .ephemeral import ADMIN_PERMISSION


class ListCapabilitiesCapability(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:list_capabilities",
        function_name="ai_agent_list_capabilities",
        label="List Capabilities",
        description="Lists every tool registered on the system.",
        permission=ADMIN_PERMISSION,
        contexts=[
            ContextSpec(name="group", label="Group", description="Only list tools of this group."),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        group = self.get_context_value("group") or None
        descriptors = ctx.deps.registry.definitions(group=group)

        lines: List[str] = ["This is a list of all the tools on the system:", ""]
        for d in descriptors:
            lines.append(f"  - Name: {d.id}")
            lines.append(f"  - Function name: {d.function_name}")
            if d.description:
                lines.append(f"  - Description: {d.description}")
            if d.contexts:
                lines.append(f"  - Contexts: {', '.join(d.contexts)}")
            lines.append(f"  - Class: {ctx.deps.registry.get(d.id).__qualname__}")
            lines.append("")
        return CapabilityResult(
            output="\n".join(lines) + "\n",
            result=[d.model_dump(mode="json") for d in descriptors],
        )


class GetCapabilityCodeCapability(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:get_capability_code",
        function_name="ai_agent_get_capability_code",
        label="Get Capability Code",
        description="Gets the source code of the class implementing a tool.",
        permission=ADMIN_PERMISSION,
        contexts=[
            ContextSpec(
                name="capability",
                label="Capability",
                required=True,
                description="The id or function name of the tool to get code for.",
            ),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        identifier = str(self.get_context_value("capability"))
        registry = ctx.deps.registry
        try:
            cap = registry.get(registry.describe(identifier).id)
        except CapabilityNotFoundError as e:
            raise RuntimeError(f"The tool '{identifier}' does not exist.") from e
        try:
            code = inspect.getsource(cap)
        except (OSError, TypeError) as e:
            raise RuntimeError(f"Could not read the source for tool '{identifier}'.") from e
        return CapabilityResult(output=f"Here is the code for the tool '{identifier}':\n\n{code}", result=code)


class EntitySummaryCapability(Capability):
    """Summarize one loaded entity.

    The ``entity`` context accepts ``<kind>:<id>`` references (or any other
    reference form) and receives the loaded entity.
    """

    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:entity_summary",
        function_name="ai_agent_entity_summary",
        label="Entity Summary",
        description="Summarizes one entity given as '<entity_type>:<id>'.",
        contexts=[
            ContextSpec(
                name="entity",
                data_type=ContextDataType.entity,
                label="Entity",
                required=True,
                description="The entity reference, e.g. node:1.",
            ),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        entity: Entity = self.get_context_value("entity")
        summary = {**entity.reference(), "fields": sorted(entity.values)}
        return CapabilityResult(
            output=yaml.safe_dump(summary, default_flow_style=False, sort_keys=False),
            result=entity,
        )
