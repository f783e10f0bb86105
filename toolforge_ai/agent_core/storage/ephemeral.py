"""Owner-scoped, expiring key/value storage.

``ScopedEphemeralStore`` is the namespacing layer on top of an
``ExpirableKeyValueStore`` backend. It is the one way two independent
invocations (for example "save a schema draft" then "write the schema file")
exchange data.

Key normalization
-----------------

1. Trim; an empty key is rejected.
2. A key without ``:`` is bare and gets ``<prefix><owner_id>:`` prepended.
3. A key that does not start with the owner's own prefix is rejected, even if
   the caller namespaced it by hand.
4. In the suffix, every character outside ``[A-Za-z0-9_.-]`` becomes ``_``
   and every run of two or more dots becomes underscores.
5. An empty suffix is rejected.

Every entry is written with the same fixed TTL and reads never refresh it.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..errors import InvalidInputError
from ..repos.interfaces import ExpirableKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "ai_agent_tmp_"
DEFAULT_TTL_SECONDS = 86400

_DISALLOWED = re.compile(r"[^A-Za-z0-9_\-.]")
_DOT_RUN = re.compile(r"\.{2,}")


def sanitize_suffix(suffix: str) -> str:
    cleaned = _DISALLOWED.sub("_", suffix)
    return _DOT_RUN.sub(lambda m: "_" * len(m.group(0)), cleaned)


class ScopedEphemeralStore:
    """Namespaced save/load/consume over an expirable backend."""

    def __init__(
        self,
        backend: ExpirableKeyValueStore,
        *,
        prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._backend = backend
        self._prefix = prefix
        self._ttl = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def owner_prefix(self, owner_id: str) -> str:
        return f"{self._prefix}{owner_id}:"

    def normalize_key(self, owner_id: str, raw_key: str) -> str:
        """
        Turn a caller-supplied key into the owner's namespaced key.

        Raises:
            InvalidInputError: For empty keys, keys of another owner, or keys
                that are empty after sanitization.
        """
        key = (raw_key or "").strip()
        if not key:
            raise InvalidInputError("A non-empty key is required.")

        owner_prefix = self.owner_prefix(str(owner_id))
        if ":" not in key:
            key = owner_prefix + key

        if not key.startswith(owner_prefix):
            raise InvalidInputError("The provided key does not belong to the current user.")

        sanitized = sanitize_suffix(key[len(owner_prefix):])
        if not sanitized:
            raise InvalidInputError("The provided key is not valid after sanitization.")
        return owner_prefix + sanitized

    async def save(self, owner_id: str, raw_key: str, payload: str) -> str:
        """Store ``payload`` under the owner's namespaced key and return that key."""
        key = self.normalize_key(owner_id, raw_key)
        await self._backend.set_with_expire(key, payload, self._ttl)
        logger.debug(f"Saved ephemeral entry {key} (ttl={self._ttl}s)")
        return key

    async def load(self, owner_id: str, raw_key: str) -> Optional[str]:
        """Return the payload for the owner's key, or None when missing or expired."""
        key = self.normalize_key(owner_id, raw_key)
        return await self._backend.get(key)

    async def consume(self, owner_id: str, raw_key: str) -> Optional[str]:
        """Load and delete the entry in one backend step.

        Only the caller whose pop removed the entry receives the payload; a
        concurrent consumer of the same key observes None, and a save landing
        during the consume is never lost.
        """
        key = self.normalize_key(owner_id, raw_key)
        payload = await self._backend.pop(key)
        if payload is None:
            logger.debug(f"No live ephemeral entry {key} to consume")
        return payload
