"""
Reconciliation Session - the seam external callers drive runs through.

Holds the current result and a busy flag so only one run is in flight at a
time. The current result and the history are replaced as whole values, only
when a run finishes; a failed run leaves both untouched.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

from tarifcheck.core.exceptions import ReconciliationInProgressError
from tarifcheck.engine.models import ReconciliationResult, ReconMode, ReportFilter, ReportRow
from tarifcheck.engine.reconciler import Reconciler, Source

logger = logging.getLogger(__name__)


class ReconciliationSession:
    """
    One user's reconciliation workspace.

    Usage:
        session = ReconciliationSession(Reconciler(config), recorder)
        result = session.run("master.csv", "it.csv", ReconMode.BIAYA)
        rows = session.displayed_rows(ReportFilter.MISMATCH)
    """

    def __init__(self, reconciler: Optional[Reconciler] = None, recorder=None):
        """
        Initialize session.

        Args:
            reconciler: Engine used for runs
            recorder: Optional HistoryRecorder receiving every finished run
        """
        self.reconciler = reconciler or Reconciler()
        self.recorder = recorder
        self.current_result: Optional[ReconciliationResult] = None
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @staticmethod
    def _name_of(source: Source, name: Optional[str]) -> str:
        if name:
            return name
        if isinstance(source, (str, Path)):
            return Path(source).name
        return getattr(source, "name", None) or "<stream>"

    def run(
        self,
        reference: Source,
        governing: Source,
        mode: Union[ReconMode, str],
        on_progress: Optional[Callable[[int], None]] = None,
        reference_name: Optional[str] = None,
        governing_name: Optional[str] = None,
    ) -> ReconciliationResult:
        """
        Run one reconciliation and record it.

        Raises:
            ReconciliationInProgressError: If a run is already in flight
        """
        if not self._lock.acquire(blocking=False):
            raise ReconciliationInProgressError()

        try:
            mode = ReconMode.parse(mode)
            result = self.reconciler.reconcile(reference, governing, mode, on_progress=on_progress)
            if self.recorder is not None:
                self.recorder.record(
                    result,
                    governing_name=self._name_of(governing, governing_name),
                    reference_name=self._name_of(reference, reference_name),
                )
            self.current_result = result
            return result
        finally:
            self._lock.release()

    def restore(self, entry_id: str) -> ReconciliationResult:
        """Show a stored result again without re-running it."""
        if self.recorder is None:
            raise ValueError("Session has no history recorder")
        self.current_result = self.recorder.restore(entry_id)
        return self.current_result

    def displayed_rows(self, report_filter: Union[ReportFilter, str] = ReportFilter.ALL) -> List[ReportRow]:
        if self.current_result is None:
            return []
        return self.current_result.filter(report_filter)
