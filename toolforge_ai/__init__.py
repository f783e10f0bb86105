"""Toolforge-AI.

This package contains a capability invocation runtime: a way for an agent loop
(or a direct tool call) to discover named tools, hand them untyped input, have
that input coerced and validated against the tool's declared contexts, execute
the tool exactly once and collect both a human-readable output and a
machine-serializable result.

High-level architecture
-----------------------

- ``toolforge_ai.agent_core``:

  - Capability descriptors, context coercion, entity resolution and validation.
  - A registry and an invoker with call-local authorization elevation.
  - A per-run result ledger.
  - Built-in capabilities: a scoped ephemeral store, a structural config differ,
    a schema-file writer and config readers.
  - Agent definitions and a tool-calling agent runner.

- ``toolforge_ai.server``: a FastAPI surface for listing, describing and
  invoking capabilities and for running agents.

Typical workflow
----------------

Most integrations should use ``toolforge_ai.agent_core.service.ToolboxService``:

1. Build the service from settings (backends, registry, policy).
2. List or describe capabilities.
3. Invoke a capability by id or function name with raw context values.
4. Or run an agent, which invokes capabilities on the model's behalf and
   records every invocation in the run's ledger.
"""
