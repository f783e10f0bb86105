"""Per-run record of completed capability invocations."""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Tuple

from ..schemas.domain import InvocationRecord

logger = logging.getLogger(__name__)


class RunLedger:
    """Append-only, ordered record of one run.

    ``start_run`` clears the ledger and opens a new run; ``close`` freezes it.
    Duplicate invocations are all kept.
    """

    def __init__(self) -> None:
        self._entries: List[InvocationRecord] = []
        self._run_id: Optional[str] = None
        self._closed = False

    @property
    def run_id(self) -> Optional[str]:
        return self._run_id

    @property
    def closed(self) -> bool:
        return self._closed

    def start_run(self, run_id: Optional[str] = None) -> str:
        self._entries = []
        self._closed = False
        self._run_id = run_id or str(uuid.uuid4())
        logger.debug(f"Started run {self._run_id}")
        return self._run_id

    def record(self, entry: InvocationRecord) -> None:
        """
        Append one completed invocation.

        Raises:
            RuntimeError: If no run was started or the run is closed.
        """
        if self._run_id is None:
            raise RuntimeError("No run has been started on this ledger.")
        if self._closed:
            raise RuntimeError(f"Run {self._run_id} is closed.")
        self._entries.append(entry)

    def entries(self) -> Tuple[InvocationRecord, ...]:
        return tuple(self._entries)

    def close(self) -> None:
        self._closed = True
        logger.debug(f"Closed run {self._run_id} with {len(self._entries)} invocation(s)")
