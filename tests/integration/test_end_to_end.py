"""
Integration tests: generated exports of realistic size run through the
whole pipeline (reader, indexer, reconciler, session, history, reports).
"""

import csv
import sqlite3
import threading

import pytest

from tarifcheck.core.config import ReconConfig
from tarifcheck.core.exceptions import ReconciliationInProgressError
from tarifcheck.engine.models import ReconMode, ReportFilter, Verdict
from tarifcheck.engine.reconciler import Reconciler
from tarifcheck.engine.session import ReconciliationSession
from tarifcheck.history.recorder import HistoryRecorder
from tarifcheck.history.stores import SqliteHistoryStore
from tarifcheck.reports.reconciliation_report import ReconciliationReporter

ROWS = 5000


@pytest.fixture
def large_tarif_files(write_csv):
    """
    ROWS Master keys; IT has every key except the last 10, every 100th
    tariff off by one and 5 keys unknown to Master.
    """
    master = ["ORIGIN;DEST;SYS_CODE;Service REG;Tarif REG;sla form REG;sla thru REG"]
    it = ["ORIGIN,DEST,SYS_CODE,SERVICE,TARIF,SLA_FORM,SLA_THRU"]
    for i in range(ROWS):
        code = f"ORG{i:05d}DST{i:05d}"
        tariff = 10000 + i
        master.append(f"ORG{i:05d};DST{i:05d};{code};REG23;{tariff:,};2;4".replace(",", "."))
        if i >= ROWS - 10:
            continue
        it_tariff = tariff + 1 if i % 100 == 0 else tariff
        it.append(f'ORG{i:05d},DST{i:05d},{code.lower()},REG23,"{it_tariff:,}",2,4')
    for i in range(5):
        it.append(f"NEW{i:05d},DST{i:05d},NEW{i:05d}DST{i:05d},REG23,1000,1,1")
    return (
        write_csv("\r\n".join(master) + "\r\n", "master_large.csv", encoding="utf-8-sig"),
        write_csv("\n".join(it), "it_large.csv"),
    )


class TestLargeTarifRun:
    """A TARIF run spanning many reader windows."""

    def test_counts(self, large_tarif_files):
        master, it = large_tarif_files
        data = ReconConfig().to_dict()
        data["reader"]["chunk_size"] = 4096
        result = Reconciler(ReconConfig(data)).reconcile(master, it, ReconMode.TARIF)

        mismatched = len([i for i in range(ROWS - 10) if i % 100 == 0])
        assert result.total_rows == ROWS + 5
        assert result.mismatch_count == mismatched
        assert result.blanks == 15
        assert result.matches == ROWS - 10 - mismatched
        assert result.is_consistent
        assert result.full_report[-1].remarks == "Data IT Tidak Ada"

    def test_report_files(self, large_tarif_files, config, tmp_path):
        master, it = large_tarif_files
        result = Reconciler(config).reconcile(master, it, ReconMode.TARIF)
        reporter = ReconciliationReporter(output_dir=tmp_path / "out")

        path = reporter.generate_csv(result, ReportFilter.MISMATCH)
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert len(rows) == 1 + result.mismatch_count
        assert all(row[-1] == "Tidak sesuai: Tarif" for row in rows[1:])
        assert reporter.generate_excel(result).exists()


class TestSessionWithSqliteHistory:
    """Session runs recorded in a SQLite history store."""

    def test_runs_recorded_and_restored(self, tarif_files, biaya_files, config):
        conn = sqlite3.connect(":memory:")
        session = ReconciliationSession(Reconciler(config), HistoryRecorder(SqliteHistoryStore(conn)))

        tarif = session.run(*tarif_files, ReconMode.TARIF)
        biaya = session.run(*biaya_files, ReconMode.BIAYA)
        entries = session.recorder.entries()

        assert [e.mode for e in entries] == [ReconMode.BIAYA, ReconMode.TARIF]
        assert session.restore(entries[1].id) == tarif
        assert session.restore(entries[0].id) == biaya
        assert session.current_result.full_report[1].verdict is Verdict.MISMATCH
        conn.close()

    def test_concurrent_run_rejected(self, tarif_files, config):
        """A run started from another thread while one is in flight fails fast."""
        session = ReconciliationSession(Reconciler(config), HistoryRecorder())
        started = threading.Event()
        release = threading.Event()
        errors = []

        def on_progress(percent):
            if not started.is_set():
                started.set()
                release.wait(timeout=5)

        worker = threading.Thread(target=session.run, args=(*tarif_files, ReconMode.TARIF, on_progress))
        worker.start()
        assert started.wait(timeout=5)

        try:
            session.run(*tarif_files, ReconMode.TARIF)
        except ReconciliationInProgressError as e:
            errors.append(e)
        finally:
            release.set()
            worker.join(timeout=10)

        assert len(errors) == 1
        assert not session.busy
        assert len(session.recorder.entries()) == 1
