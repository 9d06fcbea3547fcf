"""
Unit tests for history stores.
"""

import json
import sqlite3

import pytest

from tarifcheck.engine.models import ReconMode, Verdict
from tarifcheck.engine.report import ReportAssembler
from tarifcheck.history.models import HistoryEntry
from tarifcheck.history.stores import InMemoryHistoryStore, JsonFileHistoryStore, SqliteHistoryStore


def make_entry(entry_id, mode=ReconMode.TARIF):
    assembler = ReportAssembler(mode)
    assembler.add("AB1", Verdict.MATCH, "Sesuai")
    assembler.add("CD2", Verdict.MISMATCH, "Tidak sesuai: Tarif", ("Tarif",))
    return HistoryEntry(
        id=entry_id,
        timestamp="2024-07-01T10:00:00",
        governing_file="it.csv",
        reference_file="master.csv",
        mode=mode,
        result=assembler.build(),
    )


@pytest.fixture(params=["memory", "json", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryHistoryStore()
    elif request.param == "json":
        yield JsonFileHistoryStore(tmp_path / "history.json")
    else:
        conn = sqlite3.connect(":memory:")
        yield SqliteHistoryStore(conn)
        conn.close()


class TestHistoryStores:
    """Behaviour shared by every store."""

    def test_most_recent_first(self, store):
        store.save(make_entry("1"))
        store.save(make_entry("2", ReconMode.BIAYA))

        assert [e.id for e in store.list()] == ["2", "1"]

    def test_entries_survive_storage(self, store):
        entry = make_entry("1", ReconMode.BIAYA)
        store.save(entry)

        assert store.list()[0] == entry

    def test_get(self, store):
        store.save(make_entry("1"))

        assert store.get("1").id == "1"
        assert store.get("missing") is None

    def test_clear(self, store):
        store.save(make_entry("1"))
        store.clear()

        assert store.list() == []


class TestJsonFileHistoryStore:
    """Tests specific to the JSON file store."""

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileHistoryStore(tmp_path / "none.json").list() == []

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "sub" / "history.json"
        JsonFileHistoryStore(path).save(make_entry("1"))

        assert [e.id for e in JsonFileHistoryStore(path).list()] == ["1"]
        assert not list(path.parent.glob("*.tmp"))

    def test_legacy_entry_without_mode_is_tarif(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps([{
            "id": 1690000000000,
            "timestamp": "2023-07-22T08:00:00",
            "governing_file": "it.csv",
            "reference_file": "master.csv",
            "result": {"total_rows": 1, "matches": 1, "blanks": 0},
        }]), encoding="utf-8")

        entry = JsonFileHistoryStore(path).list()[0]

        assert entry.id == "1690000000000"
        assert entry.mode is ReconMode.TARIF
        assert entry.result.mode is ReconMode.TARIF
        assert entry.result.mismatch_count == 0

    def test_legacy_category_key(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps([{"id": "5", "category": "BIAYA", "result": {}}]), encoding="utf-8")

        assert JsonFileHistoryStore(path).list()[0].mode is ReconMode.BIAYA

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{}", encoding="utf-8")

        with pytest.raises(ValueError):
            JsonFileHistoryStore(path).list()
