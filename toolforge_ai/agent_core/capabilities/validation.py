"""Context validation.

``validate`` checks every declared context of a capability instance and
returns the violations; the invoker only executes when the list is empty.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ..errors import Violation
from ..schemas.domain import ContextDataType, ContextSpec, Entity
from .base import Capability

REQUIRED_MESSAGE = "This value is required."


def _type_error(spec: ContextSpec, value: Any) -> Optional[str]:
    data_type = spec.data_type
    is_bool = isinstance(value, bool)

    if data_type.startswith("string"):
        if isinstance(value, (str, int, float)) and not is_bool:
            return None
        return "This value should be of type string."
    if data_type.startswith("int"):
        if isinstance(value, int) and not is_bool:
            return None
        return "This value should be of type integer."
    if data_type.startswith("float") or data_type == ContextDataType.decimal.value:
        if isinstance(value, (int, float)) and not is_bool:
            return None
        return "This value should be of type float."
    if data_type.startswith("bool"):
        return None if is_bool else "This value should be of type boolean."
    if data_type == ContextDataType.list.value:
        return None if isinstance(value, list) else "This value should be of type list."
    if spec.entity_kind:
        if isinstance(value, Entity) and value.entity_type == spec.entity_kind:
            return None
        return f"This value should be a {spec.entity_kind} entity."
    if data_type == ContextDataType.entity.value:
        return None if isinstance(value, Entity) else "This value should be an entity."
    return None


def validate(instance: Capability) -> List[Violation]:
    """Collect all violations of the instance's context values."""
    violations: List[Violation] = []
    for name, spec in instance.context_definitions().items():
        if not instance.has_context_value(name):
            if spec.required and not spec.has_default:
                violations.append(Violation(name, spec.display_label, REQUIRED_MESSAGE))
            continue
        message = _type_error(spec, instance.get_context_value(name))
        if message is not None:
            violations.append(Violation(name, spec.display_label, message))
    return violations
