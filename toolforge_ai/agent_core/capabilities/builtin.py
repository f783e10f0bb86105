from __future__ import annotations

from typing import List, Type

from .base import Capability
from .config_tools import ConfigDiffCapability, GetConfigByIdCapability, GetConfigEntityCapability
from .ephemeral import LoadTemporaryDataCapability, SaveSchemaFileCapability, SaveTemporaryDataCapability
from .registry import CapabilityRegistry
from .system_tools import EntitySummaryCapability, GetCapabilityCodeCapability, ListCapabilitiesCapability

BUILTIN_CAPABILITIES: List[Type[Capability]] = [
    SaveTemporaryDataCapability,
    LoadTemporaryDataCapability,
    SaveSchemaFileCapability,
    ConfigDiffCapability,
    GetConfigByIdCapability,
    GetConfigEntityCapability,
    ListCapabilitiesCapability,
    GetCapabilityCodeCapability,
    EntitySummaryCapability,
]


def register_builtin_capabilities(registry: CapabilityRegistry) -> CapabilityRegistry:
    """Register every built-in capability and return the registry."""
    for cap in BUILTIN_CAPABILITIES:
        registry.register(cap)
    return registry
