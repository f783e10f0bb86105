"""Capability invocation runtime.

The runtime takes an identifier and untyped input and executes exactly one
capability:

- ``CapabilityInvoker`` looks up, checks, coerces, resolves, validates and
  executes under an elevated, call-local authorization context.
- ``RunLedger`` records every completed invocation of a run in order.
- ``RuntimeDeps`` bundles the registry and backends capabilities use.
"""

from .invoker import CapabilityInvoker, InvocationOutcome, parse_context, serialize_value
from .ledger import RunLedger
from .models import RuntimeDeps

__all__ = [
    "CapabilityInvoker",
    "InvocationOutcome",
    "RunLedger",
    "RuntimeDeps",
    "parse_context",
    "serialize_value",
]
