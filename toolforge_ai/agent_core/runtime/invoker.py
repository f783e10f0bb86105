"""Capability invoker.

``CapabilityInvoker.invoke`` is the single entry point that turns an
identifier plus untyped input into one executed capability:

1. Resolve the identifier through the registry (id first, then function name).
2. Check the caller against ``GlobalPolicy``.
3. Parse the raw context: a JSON object payload merged with ``name=value``
   assignments (assignments win).
4. Coerce every provided value by its declared data type.
5. Elevate the call-local ``AuthorizationContext`` to the runtime's
   highest-trust principal.
6. Resolve entity references, validate, and execute exactly once.
7. Restore the caller's authorization, whichever way execution ended.
8. Record the invocation in the run ledger, if one was given.

Steps 1 to 3 raise before anything is coerced or executed. Exceptions a
capability raises that are not ``CapabilityError`` are surfaced as
``ExecutionFailedError``; nothing is retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

from ..capabilities.base import Capability, CapabilityContext
from ..capabilities.coercion import coerce
from ..capabilities.resolver import EntityReferenceResolver
from ..capabilities.validation import validate
from ..errors import CapabilityError, ExecutionFailedError, InvalidInputError, ValidationFailedError
from ..policy.authorization import AuthorizationContext
from ..policy.global_policy import GlobalPolicy
from ..schemas.domain import CapabilityDescriptor, Entity, InvocationRecord
from .ledger import RunLedger
from .models import RuntimeDeps

logger = logging.getLogger(__name__)

ContextPayload = Union[str, Mapping[str, Any], None]


def serialize_value(value: Any) -> Any:
    """Convert a context value or result into JSON-compatible data.

    Entities become ``{"entity_type", "id", "label"}`` and datetimes ISO-8601.
    """
    if isinstance(value, Entity):
        return value.reference()
    if isinstance(value, Mapping):
        return {str(k): serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize_value(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


@dataclass(frozen=True)
class InvocationOutcome:
    """Result of one successful invocation."""

    capability_id: str
    function_name: str
    readable_output: str
    result: Any = None
    provided_context: Dict[str, Any] = field(default_factory=dict)
    resolved_context: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "tool_id": self.capability_id,
            "function_name": self.function_name,
            "output": self.readable_output,
            "result": serialize_value(self.result),
            "provided_context": serialize_value(self.provided_context),
            "resolved_context": serialize_value(self.resolved_context),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), indent=4, ensure_ascii=False)


def _decode_context_json(context_json: ContextPayload) -> Dict[str, Any]:
    if context_json is None:
        return {}
    if isinstance(context_json, str):
        text = context_json.strip()
        if not text:
            return {}
        try:
            decoded = json.loads(text)
        except ValueError as e:
            raise InvalidInputError(f"Failed to decode the context JSON payload: {e}") from e
    else:
        decoded = context_json
    if not isinstance(decoded, Mapping):
        raise InvalidInputError("The context JSON payload must decode to a JSON object with named properties.")
    return dict(decoded)


def parse_context(
    instance: Capability,
    *,
    assignments: Iterable[str] = (),
    context_json: ContextPayload = None,
) -> Dict[str, Any]:
    """Merge and check raw context input for one capability instance.

    Returns the raw (uncoerced) values keyed by context name.

    Raises:
        InvalidInputError: For malformed payloads or assignments and for
            context names the capability does not declare.
    """
    provided = _decode_context_json(context_json)
    for assignment in assignments:
        if not isinstance(assignment, str) or assignment == "":
            continue
        if "=" not in assignment:
            raise InvalidInputError(f'Context "{assignment}" must use name=value format.')
        name, raw = assignment.split("=", 1)
        provided[name.strip()] = raw

    definitions = instance.context_definitions()
    if not definitions:
        if provided:
            logger.warning(f"Tool '{instance.id}' does not declare contexts; ignoring provided values.")
        return {}

    for name in provided:
        if name not in definitions:
            raise InvalidInputError(
                f'Unknown context "{name}" for tool "{instance.id}". Allowed contexts: {", ".join(definitions)}'
            )
    return {name: provided[name] for name in definitions if name in provided}


class CapabilityInvoker:
    """Runs capabilities for callers.

    One invoker is shared by all callers; everything per-invocation
    (instance, authorization context, ledger) is passed in or created per call.
    """

    def __init__(self, deps: RuntimeDeps, *, policy: Optional[GlobalPolicy] = None) -> None:
        self._deps = deps
        self._policy = policy or GlobalPolicy()
        self._resolver = EntityReferenceResolver(deps.entities)

    @property
    def deps(self) -> RuntimeDeps:
        return self._deps

    def list_capabilities(self, group: Optional[str] = None) -> List[CapabilityDescriptor]:
        return self._deps.registry.definitions(group=group)

    def describe_capability(self, identifier: str) -> CapabilityDescriptor:
        return self._deps.registry.describe(identifier)

    async def invoke(
        self,
        identifier: str,
        *,
        auth: AuthorizationContext,
        assignments: Iterable[str] = (),
        context_json: ContextPayload = None,
        ledger: Optional[RunLedger] = None,
    ) -> InvocationOutcome:
        """
        Invoke one capability.

        Args:
            identifier: Capability id or function name.
            auth: The caller's call-local authorization context.
            assignments: ``name=value`` context assignments.
            context_json: A JSON object (text or mapping) of context values.
            ledger: Run ledger to record the completed invocation in.

        Raises:
            CapabilityNotFoundError: Unknown identifier.
            UnauthorizedError: The caller is not allowed to invoke the capability.
            InvalidInputError: Malformed or unknown context input.
            ValidationFailedError: One or more context violations.
            ExecutionFailedError: The capability failed while executing.
        """
        instance = self._deps.registry.instantiate(identifier)
        descriptor = instance.descriptor
        self._policy.authorize(auth.caller, descriptor)

        raw = parse_context(instance, assignments=assignments, context_json=context_json)
        provided: Dict[str, Any] = {}
        for name, raw_value in raw.items():
            value = coerce(raw_value, descriptor.contexts[name].data_type)
            provided[name] = value
            instance.set_context_value(name, value)

        with auth.elevated(self._deps.elevated_principal) as principal:
            self._resolve_entities(instance)
            violations = validate(instance)
            if violations:
                logger.info(f"Validation failed for '{descriptor.id}': {len(violations)} violation(s)")
                raise ValidationFailedError(violations)

            ctx = CapabilityContext(
                principal=principal,
                deps=self._deps,
                caller=auth.caller,
                run_id=ledger.run_id if ledger is not None else None,
            )
            try:
                await instance.execute(ctx)
            except CapabilityError:
                raise
            except Exception as e:
                logger.error(f"Capability '{descriptor.id}' failed: {e}", exc_info=True)
                raise ExecutionFailedError(descriptor.id, str(e)) from e

        outcome = InvocationOutcome(
            capability_id=descriptor.id,
            function_name=descriptor.function_name,
            readable_output=instance.readable_output,
            result=instance.result,
            provided_context=provided,
            resolved_context=instance.context_values(),
        )
        if ledger is not None:
            ledger.record(
                InvocationRecord(
                    capability_id=outcome.capability_id,
                    function_name=outcome.function_name,
                    readable_output=outcome.readable_output,
                )
            )
        logger.info(f"Invoked capability '{descriptor.id}' for caller {auth.caller.id}")
        return outcome

    def _resolve_entities(self, instance: Capability) -> None:
        for name, spec in instance.context_definitions().items():
            if not spec.is_entity_reference or not instance.has_context_value(name):
                continue
            value = instance.get_context_value(name)
            instance.set_context_value(name, self._resolver.resolve(spec, value, instance.descriptor))
