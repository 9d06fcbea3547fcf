"""
tarifcheck core - configuration and exceptions.
"""

from .config import ReconConfig, DEFAULT_CONFIG, DEFAULT_CHUNK_SIZE
from .exceptions import (
    TarifCheckError,
    ConfigError,
    MissingColumnError,
    EmptyDatasetError,
    DuplicateKeyError,
    ReconciliationInProgressError,
    ReaderExhaustedError,
    HistoryEntryNotFoundError,
)

__all__ = [
    'ReconConfig',
    'DEFAULT_CONFIG',
    'DEFAULT_CHUNK_SIZE',
    'TarifCheckError',
    'ConfigError',
    'MissingColumnError',
    'EmptyDatasetError',
    'DuplicateKeyError',
    'ReconciliationInProgressError',
    'ReaderExhaustedError',
    'HistoryEntryNotFoundError',
]
