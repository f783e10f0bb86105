"""Entity reference resolution for entity-typed contexts.

A context declared as ``entity:<kind>`` (or ``entity`` on a capability whose
descriptor names a known ``operating_kind``) accepts loose references and has
them turned into loaded ``Entity`` objects before validation:

- a loaded ``Entity`` is kept as is,
- ``{"entity": <Entity>}`` is unwrapped,
- ``{"target_id": <id>}`` and ``[<id>, ...]`` yield the id,
- a bare int or string is used as the id,
- ``"<kind>:<id>"`` names the kind itself when the context does not.

The id is then looked up once in the kind's storage. A value that cannot be
resolved stays raw so the validator can report it.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from ..repos.interfaces import EntityTypeManager
from ..schemas.domain import CapabilityDescriptor, ContextDataType, ContextSpec, Entity

logger = logging.getLogger(__name__)


class EntityReferenceResolver:
    """Turn raw entity references into loaded entities."""

    def __init__(self, entities: Optional[EntityTypeManager]) -> None:
        self._entities = entities

    def kind_for(self, spec: ContextSpec, descriptor: CapabilityDescriptor) -> Optional[str]:
        """Entity kind a context resolves against, or None if it does not resolve."""
        if spec.entity_kind:
            return spec.entity_kind
        if spec.data_type == ContextDataType.entity.value and descriptor.operating_kind:
            if self._entities is not None and self._entities.has_definition(descriptor.operating_kind):
                return descriptor.operating_kind
        return None

    def resolve(self, spec: ContextSpec, value: Any, descriptor: CapabilityDescriptor) -> Any:
        """Resolve one context value. Returns the loaded entity or the raw value."""
        if value is None or isinstance(value, Entity):
            return value

        if isinstance(value, dict) and isinstance(value.get("entity"), Entity):
            return value["entity"]

        kind = self.kind_for(spec, descriptor)
        entity_id = self._extract_id(value)
        if entity_id is None:
            return value

        if kind is None:
            kind, entity_id = self._split_reference(entity_id)
            if kind is None:
                return value

        entity = self._load(kind, entity_id)
        if entity is None:
            logger.debug(f"Entity reference '{kind}:{entity_id}' for context '{spec.name}' did not resolve")
            return value
        return entity

    @staticmethod
    def _extract_id(value: Any) -> Optional[str]:
        if isinstance(value, dict):
            target = value.get("target_id")
            return str(target) if isinstance(target, (int, str)) and not isinstance(target, bool) else None
        if isinstance(value, list):
            if value and isinstance(value[0], (int, str)) and not isinstance(value[0], bool):
                return str(value[0])
            return None
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            text = str(value).strip()
            return text or None
        return None

    def _split_reference(self, reference: str) -> Tuple[Optional[str], str]:
        kind, sep, entity_id = reference.partition(":")
        if not sep or not kind or not entity_id:
            return None, reference
        if self._entities is None or not self._entities.has_definition(kind):
            return None, reference
        return kind, entity_id

    def _load(self, kind: str, entity_id: str) -> Optional[Entity]:
        if self._entities is None:
            return None
        storage = self._entities.get_storage(kind)
        if storage is None:
            return None
        return storage.load(entity_id)
