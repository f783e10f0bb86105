"""Capabilities built on the scoped ephemeral store.

- ``SaveTemporaryDataCapability`` stores a draft and returns its namespaced key.
- ``LoadTemporaryDataCapability`` reads a draft back.
- ``SaveSchemaFileCapability`` consumes a draft and writes it as a YAML schema
  file into ``<module>/config/schema``.

Entries are owned by the effective principal the capability runs as.
"""

from __future__ import annotations

import logging
import os
from typing import ClassVar

import yaml

from ..errors import InvalidInputError
from ..schemas.domain import CapabilityDescriptor, ContextSpec
from .base import Capability, CapabilityContext, CapabilityResult

logger = logging.getLogger(__name__)

ADMIN_PERMISSION = "administer site configuration"
SCHEMA_SUFFIX = ".schema.yml"


class SaveTemporaryDataCapability(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:save_temporary_data",
        function_name="ai_agent_save_temporary_data",
        label="Save Temporary Data",
        description="Saves temporary data that can be retrieved later by key.",
        permission=ADMIN_PERMISSION,
        contexts=[
            ContextSpec(name="key", label="Key", required=True, description="The key for the data you want to save."),
            ContextSpec(name="data", label="Data", required=True, description="The data you want to save."),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        key = await ctx.deps.ephemeral.save(
            ctx.principal.id,
            str(self.get_context_value("key")),
            str(self.get_context_value("data")),
        )
        return CapabilityResult(
            output=f"The data has been successfully saved. Use the key: {key}",
            result={"key": key},
        )


class LoadTemporaryDataCapability(Capability):
    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:load_temporary_data",
        function_name="ai_agent_load_temporary_data",
        label="Load Temporary Data",
        description="Loads temporary data saved earlier.",
        permission=ADMIN_PERMISSION,
        contexts=[
            ContextSpec(name="key", label="Key", required=True, description="The key for the data you want to load."),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        data = await ctx.deps.ephemeral.load(ctx.principal.id, str(self.get_context_value("key")))
        if data is None:
            return CapabilityResult(output="No data found.")
        return CapabilityResult(output=data, result=data)


class SaveSchemaFileCapability(Capability):
    """Write a saved draft to ``<module>/config/schema/<filename>``.

    The draft is removed from the store as soon as it has been read, whatever
    happens afterwards.
    """

    descriptor: ClassVar[CapabilityDescriptor] = CapabilityDescriptor(
        id="ai_agent:save_schema_file",
        function_name="ai_agent_save_schema_file",
        label="Save Schema File to Module",
        description="Saves a schema file from temporary storage to a module's config/schema directory.",
        permission=ADMIN_PERMISSION,
        contexts=[
            ContextSpec(name="key", label="Key", required=True, description="The key of the saved schema draft."),
            ContextSpec(
                name="filename",
                label="Filename",
                required=True,
                description="The name of the schema file to save, e.g. my_module.schema.yml.",
            ),
            ContextSpec(
                name="module",
                label="Module name",
                required=True,
                description="The machine name of the module to save the schema file to.",
            ),
        ],
    )

    async def run(self, ctx: CapabilityContext) -> CapabilityResult:
        filename = str(self.get_context_value("filename"))
        module = str(self.get_context_value("module"))

        data = await ctx.deps.ephemeral.consume(ctx.principal.id, str(self.get_context_value("key")))
        if data is None:
            return CapabilityResult(output="Key not found.")

        modules = ctx.deps.modules
        module_path = modules.get_path(module) if modules is not None and modules.exists(module) else None
        if module_path is None:
            return CapabilityResult(output="Module not found.")

        if os.path.basename(filename) != filename or "\\" in filename or ".." in filename or not filename:
            raise InvalidInputError("Invalid filename provided.")
        if not filename.endswith(SCHEMA_SUFFIX):
            raise InvalidInputError(f"Schema files must use the {SCHEMA_SUFFIX} extension.")

        schema_dir = module_path / "config" / "schema"
        file_path = schema_dir / filename
        overwritten = file_path.exists()
        try:
            parsed = yaml.safe_load(data)
            schema_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_text(
                yaml.safe_dump(parsed, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True),
                encoding="utf-8",
            )
        except (yaml.YAMLError, OSError) as e:
            logger.warning(f"Failed to save schema file {file_path}: {e}")
            return CapabilityResult(output=f"Failed to save schema file: {e}")

        output = f"Schema file saved successfully to {file_path}"
        if overwritten:
            output += " Note: An existing file was overwritten."
        logger.info(f"Wrote schema file {file_path} (overwritten={overwritten})")
        return CapabilityResult(output=output, result={"path": str(file_path), "overwritten": overwritten})
