"""
tarifcheck history - append-only record of finished reconciliations.
"""

from .models import HistoryEntry
from .stores import HistoryStore, InMemoryHistoryStore, JsonFileHistoryStore, SqliteHistoryStore
from .recorder import HistoryRecorder

__all__ = [
    'HistoryEntry',
    'HistoryStore',
    'InMemoryHistoryStore',
    'JsonFileHistoryStore',
    'SqliteHistoryStore',
    'HistoryRecorder',
]
