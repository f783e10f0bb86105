"""Call-local authorization context.

An ``AuthorizationContext`` is created per invocation and carries the
principal the invocation currently acts as. ``elevated`` swaps in a
higher-trust principal for the duration of a ``with`` block and always
restores the caller afterwards, whichever way the block exits.

Nothing here is process-wide: two concurrent invocations each hold their own
context.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from ..schemas.domain import Principal

logger = logging.getLogger(__name__)


class AuthorizationContext:
    """The effective principal of one invocation."""

    def __init__(self, caller: Principal) -> None:
        self._caller = caller
        self._current = caller
        self._elevated = False

    @property
    def caller(self) -> Principal:
        return self._caller

    @property
    def current(self) -> Principal:
        return self._current

    @property
    def is_elevated(self) -> bool:
        return self._elevated

    @contextmanager
    def elevated(self, principal: Principal) -> Iterator[Principal]:
        """
        Act as ``principal`` inside the block.

        Raises:
            RuntimeError: If the context is already elevated.
        """
        if self._elevated:
            raise RuntimeError("Authorization context is already elevated.")
        previous = self._current
        self._current = principal
        self._elevated = True
        logger.debug(f"Elevated caller {previous.id} to principal {principal.id}")
        try:
            yield principal
        finally:
            self._current = previous
            self._elevated = False
            logger.debug(f"Restored principal {previous.id}")
