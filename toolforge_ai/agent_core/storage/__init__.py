"""Owner-scoped ephemeral storage shared between invocations."""

from .ephemeral import DEFAULT_KEY_PREFIX, DEFAULT_TTL_SECONDS, ScopedEphemeralStore, sanitize_suffix

__all__ = [
    "DEFAULT_KEY_PREFIX",
    "DEFAULT_TTL_SECONDS",
    "ScopedEphemeralStore",
    "sanitize_suffix",
]
