from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import Field, field_validator

from .base import BaseSchema, FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ContextDataType(str, Enum):
    """Declared data types for capability contexts.

    ``entity:<kind>`` references are not enumerated here; they are plain strings
    that start with ``ENTITY_PREFIX``.
    """
    string = "string"
    integer = "integer"
    float = "float"
    decimal = "decimal"
    boolean = "boolean"
    list = "list"
    entity = "entity"
    any = "any"


ENTITY_PREFIX = "entity:"


class ContextSpec(FrozenSchema):
    """Declaration of one named input slot of a capability."""

    name: str
    data_type: str = ContextDataType.string.value
    required: bool = False
    default: Any = None
    label: Optional[str] = None
    description: Optional[str] = None

    @field_validator("data_type", mode="before")
    @classmethod
    def _normalize_data_type(cls, value: Any) -> str:
        if isinstance(value, ContextDataType):
            return value.value
        return str(value).strip().lower()

    @property
    def display_label(self) -> str:
        """Human label, falling back to the raw context name."""
        return self.label or self.name

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def entity_kind(self) -> Optional[str]:
        """Entity kind named explicitly by an ``entity:<kind>`` data type."""
        if self.data_type.startswith(ENTITY_PREFIX):
            return self.data_type[len(ENTITY_PREFIX):] or None
        return None

    @property
    def is_entity_reference(self) -> bool:
        return self.data_type == ContextDataType.entity.value or self.data_type.startswith(ENTITY_PREFIX)


class CapabilityDescriptor(FrozenSchema):
    """Immutable description of a registered capability.

    ``contexts`` keeps declaration order; it may be given as a list of
    ``ContextSpec`` and is keyed by context name.
    """

    id: str
    function_name: str
    label: str
    description: str = ""
    group: str = "information_tools"
    contexts: Dict[str, ContextSpec] = Field(default_factory=dict)
    operating_kind: Optional[str] = Field(
        default=None,
        description="Entity kind used by contexts declared with the bare 'entity' type.",
    )
    permission: Optional[str] = Field(
        default=None,
        description="Permission the effective principal must hold when the capability executes.",
    )

    @field_validator("contexts", mode="before")
    @classmethod
    def _key_contexts_by_name(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            keyed: Dict[str, Any] = {}
            for spec in value:
                name = spec.name if isinstance(spec, ContextSpec) else spec["name"]
                keyed[name] = spec
            return keyed
        return value

    def context_names(self) -> List[str]:
        return list(self.contexts)


class Principal(FrozenSchema):
    """An authenticated caller.

    ``is_superuser`` holds every permission, the way the runtime's
    highest-trust account does.
    """

    id: str
    name: str = ""
    permissions: FrozenSet[str] = Field(default_factory=frozenset)
    is_superuser: bool = False

    def has_permission(self, permission: Optional[str]) -> bool:
        if not permission:
            return True
        return self.is_superuser or permission in self.permissions

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(id="0", name="anonymous")


class Entity(BaseSchema):
    """A loaded domain object addressed as ``<entity_type>:<id>``."""

    entity_type: str
    id: str
    label: Optional[str] = None
    values: Dict[str, Any] = Field(default_factory=dict)

    def reference(self) -> Dict[str, Any]:
        """Compact serialized form used in invocation payloads."""
        entry: Dict[str, Any] = {"entity_type": self.entity_type, "id": self.id}
        if self.label is not None:
            entry["label"] = self.label
        return entry

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, **self.values}


class InvocationRecord(BaseSchema):
    """One completed capability invocation inside a run."""

    capability_id: str
    function_name: str
    readable_output: str
    created_at: datetime = Field(default_factory=_utc_now)


class ChatRole(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"
    tool = "tool"


class ChatMessage(BaseSchema):
    role: ChatRole
    content: str
    tool_call_id: Optional[str] = None
