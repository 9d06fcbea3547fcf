"""
Custom exceptions for tarifcheck.

All tarifcheck-specific exceptions inherit from TarifCheckError for easy catching.
"""

from typing import List, Optional


class TarifCheckError(Exception):
    """Base exception for all tarifcheck errors."""

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigError(TarifCheckError):
    """Invalid configuration values."""

    def __init__(self, message: str, code: str = "CONFIG_ERROR"):
        super().__init__(message, code)


class MissingColumnError(TarifCheckError):
    """
    Raised when a dataset header lacks a column required by the active mode.

    Fatal: the whole run is aborted before any row is compared.
    """

    def __init__(
        self,
        dataset: str,
        missing: List[str],
        available: Optional[List[str]] = None,
        code: str = "MISSING_COLUMN"
    ):
        available = available or []
        super().__init__(
            f"Required column(s) {', '.join(missing)} not found in {dataset} file. "
            f"Available: {available}",
            code
        )
        self.dataset = dataset
        self.missing = list(missing)
        self.available = list(available)


class EmptyDatasetError(TarifCheckError):
    """Raised when a dataset yields no usable rows."""

    def __init__(self, dataset: str, reason: str = "no usable rows", code: str = "EMPTY_DATASET"):
        super().__init__(f"{dataset} file is empty or invalid: {reason}", code)
        self.dataset = dataset


class DuplicateKeyError(TarifCheckError):
    """Raised when a duplicate reference key is found under the 'error' policy."""

    def __init__(self, key: str, dataset: str = "Master", code: str = "DUPLICATE_KEY"):
        super().__init__(f"Duplicate key in {dataset} file: {key}", code)
        self.key = key
        self.dataset = dataset


class ReconciliationInProgressError(TarifCheckError):
    """Raised when a run is started while another one is in flight."""

    def __init__(self, message: str = "A reconciliation run is already in progress",
                 code: str = "RUN_IN_PROGRESS"):
        super().__init__(message, code)


class ReaderExhaustedError(TarifCheckError):
    """Raised when a forward-only reader is iterated a second time."""

    def __init__(self, source: str, code: str = "READER_EXHAUSTED"):
        super().__init__(f"Reader for {source} has already been consumed", code)
        self.source = source


class HistoryEntryNotFoundError(TarifCheckError):
    """Raised when a history entry id is not in the store."""

    def __init__(self, entry_id: str, code: str = "HISTORY_NOT_FOUND"):
        super().__init__(f"History entry not found: {entry_id}", code)
        self.entry_id = entry_id
