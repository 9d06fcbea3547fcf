"""
History Recorder - wrap finished results and hand them to a HistoryStore.

The recorder validates nothing; it only timestamps, prepends, filters by
mode, clears on confirmation and restores stored results.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional, Union

from tarifcheck.core.exceptions import HistoryEntryNotFoundError
from tarifcheck.engine.models import ReconciliationResult, ReconMode
from tarifcheck.history.models import HistoryEntry
from tarifcheck.history.stores import HistoryStore, InMemoryHistoryStore

logger = logging.getLogger(__name__)


class HistoryRecorder:
    """
    Records reconciliation runs, most recent first.

    Usage:
        recorder = HistoryRecorder(JsonFileHistoryStore(Path("history.json")))
        entry = recorder.record(result, governing_name="it.csv", reference_name="master.csv")
        for entry in recorder.entries(ReconMode.BIAYA):
            print(entry.timestamp, entry.result.matches)
    """

    def __init__(
        self,
        store: Optional[HistoryStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store or InMemoryHistoryStore()
        self.clock = clock

    def _next_id(self, now: float) -> str:
        candidate = int(now * 1000)
        taken = {entry.id for entry in self.store.list()}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def record(
        self,
        result: ReconciliationResult,
        governing_name: str,
        reference_name: str,
    ) -> HistoryEntry:
        """Create a History Entry for result and store it as the newest."""
        now = self.clock()
        entry = HistoryEntry(
            id=self._next_id(now),
            timestamp=datetime.fromtimestamp(now).isoformat(timespec="seconds"),
            governing_file=governing_name,
            reference_file=reference_name,
            mode=result.mode,
            result=result,
        )
        self.store.save(entry)
        logger.info(f"Recorded {entry.mode.value} run {entry.id} ({governing_name} vs {reference_name})")
        return entry

    def entries(self, mode: Union[ReconMode, str, None] = None) -> List[HistoryEntry]:
        """Stored entries, most recent first, optionally only one mode."""
        entries = self.store.list()
        if mode is None:
            return entries
        mode = ReconMode.parse(mode)
        return [entry for entry in entries if entry.mode is mode]

    def get(self, entry_id: str) -> HistoryEntry:
        entry = self.store.get(entry_id)
        if entry is None:
            raise HistoryEntryNotFoundError(entry_id)
        return entry

    def restore(self, entry_id: str) -> ReconciliationResult:
        """Return a stored result as-is, without re-running reconciliation."""
        return self.get(entry_id).result

    def clear(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """
        Delete all history if confirm() agrees.

        Args:
            confirm: Asked before clearing; None clears unconditionally

        Returns:
            True if the history was cleared
        """
        if confirm is not None and not confirm():
            return False
        self.store.clear()
        logger.info("History cleared")
        return True
