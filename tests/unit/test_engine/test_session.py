"""
Unit tests for ReconciliationSession.
"""

import pytest

from tarifcheck.core.exceptions import MissingColumnError, ReconciliationInProgressError
from tarifcheck.engine.models import ReconMode, ReportFilter
from tarifcheck.engine.reconciler import Reconciler
from tarifcheck.engine.session import ReconciliationSession
from tarifcheck.history.recorder import HistoryRecorder
from tarifcheck.history.stores import InMemoryHistoryStore


class FailingStore(InMemoryHistoryStore):
    """Store whose writes always fail."""

    def save(self, entry):
        raise OSError("disk full")


@pytest.fixture
def session(config):
    return ReconciliationSession(Reconciler(config), HistoryRecorder())


class TestReconciliationSession:
    """Tests for ReconciliationSession."""

    def test_run_sets_result_and_records(self, session, tarif_files):
        master, it = tarif_files
        result = session.run(master, it, ReconMode.TARIF)

        assert session.current_result is result
        assert not session.busy
        entries = session.recorder.entries()
        assert len(entries) == 1
        assert entries[0].governing_file == "it_tarif.csv"
        assert entries[0].reference_file == "master_tarif.csv"
        assert entries[0].result == result

    def test_busy_during_run(self, session, tarif_files):
        """A second run started while one is in flight is rejected."""
        master, it = tarif_files
        observed = []

        def on_progress(percent):
            observed.append(session.busy)
            if len(observed) == 1:
                with pytest.raises(ReconciliationInProgressError):
                    session.run(master, it, ReconMode.TARIF)

        session.run(master, it, ReconMode.TARIF, on_progress=on_progress)

        assert observed and all(observed)
        assert not session.busy
        assert len(session.recorder.entries()) == 1

    def test_failed_run_keeps_previous_state(self, session, tarif_files, write_csv):
        master, it = tarif_files
        first = session.run(master, it, ReconMode.TARIF)
        bad_it = write_csv("KODE,TARIF\nAB1,1\n")

        with pytest.raises(MissingColumnError):
            session.run(master, bad_it, ReconMode.TARIF)

        assert session.current_result is first
        assert len(session.recorder.entries()) == 1
        assert not session.busy

    def test_failed_history_write_keeps_previous_result(self, config, tarif_files, biaya_files):
        """A result that could not be recorded is not shown."""
        session = ReconciliationSession(Reconciler(config), HistoryRecorder())
        first = session.run(*tarif_files, ReconMode.TARIF)
        session.recorder.store = FailingStore()

        with pytest.raises(OSError):
            session.run(*biaya_files, ReconMode.BIAYA)

        assert session.current_result is first
        assert not session.busy

    def test_displayed_rows(self, session, biaya_files):
        master, it = biaya_files
        assert session.displayed_rows() == []

        session.run(master, it, "BIAYA")

        assert len(session.displayed_rows()) == 3
        assert [r.key for r in session.displayed_rows(ReportFilter.MISMATCH)] == ["AMI10000"]
        assert [r.key for r in session.displayed_rows("BLANK")] == ["XXX99999"]

    def test_restore(self, session, tarif_files, biaya_files):
        tarif = session.run(*tarif_files, ReconMode.TARIF)
        session.run(*biaya_files, ReconMode.BIAYA)
        tarif_entry = session.recorder.entries(ReconMode.TARIF)[0]

        restored = session.restore(tarif_entry.id)

        assert restored == tarif
        assert session.current_result is restored

    def test_without_recorder(self, config, tarif_files):
        session = ReconciliationSession(Reconciler(config))
        session.run(*tarif_files, ReconMode.TARIF)

        with pytest.raises(ValueError):
            session.restore("1")

    def test_explicit_names(self, session, tarif_files):
        master, it = tarif_files
        session.run(master, it, ReconMode.TARIF, reference_name="Master Juli.csv", governing_name="IT Juli.csv")

        entry = session.recorder.entries()[0]
        assert entry.reference_file == "Master Juli.csv"
        assert entry.governing_file == "IT Juli.csv"
