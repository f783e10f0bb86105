"""Capabilities reading configuration and entities.

Config objects are read from the active config storage in ``RuntimeDeps``;
the differ compares it against the staging storage.
"""

from __future__ import annotations

import json
import logging
from typing import ClassVar

import yaml

from ..config_diff import ConfigDiffer
from ..schemas.domain import CapabilityDescriptor, ContextSpec
from .base import Capability, CapabilityContext, CapabilityResult
from .ephemeral import ADMIN_PERMISSION

logger = logging.getLogger(__name__)


def _dump_yaml(data) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)


class ConfigDiffCapability(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:config_diff",
        function_name="ai_agent_config_diff",
        label="Config Diff",
        description="Gives the difference between the staged config and the active config.",
        permission=ADMIN_PERMISSION,
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        diff = ConfigDiffer().diff(ctx.deps.active_config, ctx.deps.staging_config)
        return CapabilityResult(output=diff.render(), result=diff.model_dump(mode="json"))


class GetConfigByIdCapability(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:get_config_by_id",
        function_name="ai_agent_get_config_by_id",
        label="Get Config By ID",
        description="Gets the configuration object with the given id as JSON.",
        permission=ADMIN_PERMISSION,
        contexts=[
            ContextSpec(
                name="config_id",
                label="Configuration id",
                required=True,
                description="The id to get the configuration for.",
            ),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        config_id = str(self.get_context_value("config_id"))
        if config_id.endswith(".yml"):
            config_id = config_id[: -len(".yml")]

        data = ctx.deps.active_config.read(config_id)
        if data is None:
            return CapabilityResult(output=f'The config "{config_id}" does not exist.')
        return CapabilityResult(output=json.dumps(data), result=data)


class GetConfigEntityCapability(Capability):
    """Read one entity (when ``entity_type`` is given) or one config object, as YAML.

    Refusals are reported as readable output rather than raised.
    """

    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:get_config_entity",
        function_name="ai_agent_get_config_entity",
        label="Get Config Entity",
        description="Gets one config entity, or one config object when no entity type is given.",
        contexts=[
            ContextSpec(
                name="entity_id",
                label="Config ID",
                required=True,
                description="The exact id of the config object, or the entity id for an entity.",
            ),
            ContextSpec(
                name="entity_type",
                label="Entity Type",
                description="The entity type to load from. Leave empty for a general config object.",
            ),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        entity_id = str(self.get_context_value("entity_id"))
        entity_type = self.get_context_value("entity_type")

        if entity_type:
            entity_type = str(entity_type)
            entities = ctx.deps.entities
            storage = entities.get_storage(entity_type) if entities is not None else None
            if storage is None:
                return CapabilityResult(output="Could not load the entity.")
            entity = storage.load(entity_id)
            if entity is None:
                return CapabilityResult(output="The entity does not exist.")
            if not ctx.principal.has_permission(f"view {entity_type}"):
                return CapabilityResult(output="You do not have access to the entity.")
            return CapabilityResult(output=_dump_yaml(entity.to_dict()), result=entity)

        if not ctx.principal.has_permission(ADMIN_PERMISSION):
            return CapabilityResult(output="You do not have permission to view configuration.")
        data = ctx.deps.active_config.read(entity_id)
        if data is None:
            return CapabilityResult(output=f'The configuration "{entity_id}" does not exist.')
        return CapabilityResult(output=_dump_yaml(data), result=data)
