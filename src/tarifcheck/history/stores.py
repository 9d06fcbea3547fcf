"""
History stores - persistence collaborators for reconciliation history.

Every store keeps entries most-recent-first and supports save, list and
full clear. Entries are never updated in place.
"""

import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from tarifcheck.history.models import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Abstract persistence collaborator for History Entries."""

    @abstractmethod
    def save(self, entry: HistoryEntry) -> None:
        """Persist entry as the most recent one."""

    @abstractmethod
    def list(self) -> List[HistoryEntry]:
        """All entries, most recent first."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every entry."""

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self.list():
            if entry.id == entry_id:
                return entry
        return None


class InMemoryHistoryStore(HistoryStore):
    """History kept for the lifetime of the process."""

    def __init__(self):
        self._entries: List[HistoryEntry] = []

    def save(self, entry: HistoryEntry) -> None:
        self._entries = [entry] + self._entries

    def list(self) -> List[HistoryEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries = []


class JsonFileHistoryStore(HistoryStore):
    """
    History kept as one JSON list in a file.

    The whole list is rewritten on every change through a temporary file and
    os.replace(), so readers never see a half-written file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load_raw(self) -> list:
        if not self.path.exists():
            return []
        with open(self.path, encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"History file {self.path} does not contain a list")
        return data

    def _write_raw(self, data: list) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def save(self, entry: HistoryEntry) -> None:
        data = self._load_raw()
        data.insert(0, entry.to_dict())
        self._write_raw(data)
        logger.debug(f"Saved history entry {entry.id} to {self.path}")

    def list(self) -> List[HistoryEntry]:
        return [HistoryEntry.from_dict(item) for item in self._load_raw()]

    def clear(self) -> None:
        self._write_raw([])
        logger.info(f"Cleared history in {self.path}")


class SqliteHistoryStore(HistoryStore):
    """History kept in a SQLite table, one row per entry."""

    def __init__(self, db_connection: sqlite3.Connection):
        """
        Initialize with database connection.

        Args:
            db_connection: SQLite connection object
        """
        self.conn = db_connection
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS validation_history (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                timestamp TEXT NOT NULL,
                mode TEXT NOT NULL,
                governing_file TEXT,
                reference_file TEXT,
                entry_json TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def save(self, entry: HistoryEntry) -> None:
        self.conn.execute("""
            INSERT INTO validation_history
                (id, timestamp, mode, governing_file, reference_file, entry_json)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            entry.id,
            entry.timestamp,
            entry.mode.value,
            entry.governing_file,
            entry.reference_file,
            json.dumps(entry.to_dict()),
        ))
        self.conn.commit()

    def list(self) -> List[HistoryEntry]:
        cursor = self.conn.execute(
            "SELECT entry_json FROM validation_history ORDER BY seq DESC"
        )
        return [HistoryEntry.from_dict(json.loads(row[0])) for row in cursor.fetchall()]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        cursor = self.conn.execute(
            "SELECT entry_json FROM validation_history WHERE id = ?", (entry_id,)
        )
        row = cursor.fetchone()
        return HistoryEntry.from_dict(json.loads(row[0])) if row else None

    def clear(self) -> None:
        self.conn.execute("DELETE FROM validation_history")
        self.conn.commit()
