"""Capabilities and the pipeline that prepares their input.

A *capability* is one named tool. Its ``CapabilityDescriptor`` declares the
contexts (typed input slots) it accepts.

Before a capability executes, its raw input passes through:

- ``coercion``: raw text/JSON values → typed values by declared data type,
- ``resolver``: entity references → loaded entities,
- ``validation``: required and type checks, aggregated into violations.

This package exports:

- ``Capability``: base class for single-use capability instances.
- ``CapabilityRegistry``: id / function name → capability class mapping.
- ``CapabilityContext``/``CapabilityResult``: execution input/output models.
- ``register_builtin_capabilities``: registers the built-in tools.
"""

from .base import Capability, CapabilityContext, CapabilityResult
from .builtin import BUILTIN_CAPABILITIES, register_builtin_capabilities
from .coercion import coerce
from .registry import CapabilityRegistry
from .resolver import EntityReferenceResolver
from .validation import validate

__all__ = [
    "Capability",
    "CapabilityContext",
    "CapabilityResult",
    "CapabilityRegistry",
    "BUILTIN_CAPABILITIES",
    "register_builtin_capabilities",
    "EntityReferenceResolver",
    "coerce",
    "validate",
]
