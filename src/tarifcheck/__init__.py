"""
tarifcheck - reconcile IT tariff/cost extracts against Master reference data.

Usage:
    from tarifcheck import Reconciler, ReconMode

    result = Reconciler().reconcile("master.csv", "it.csv", ReconMode.BIAYA)
"""

from tarifcheck.core.config import ReconConfig
from tarifcheck.core.exceptions import TarifCheckError
from tarifcheck.engine import (
    Reconciler,
    ReconciliationSession,
    ReconMode,
    ReportFilter,
    Verdict,
    ReconciliationResult,
)
from tarifcheck.history import HistoryRecorder

__version__ = "1.0.0"

__all__ = [
    'ReconConfig',
    'TarifCheckError',
    'Reconciler',
    'ReconciliationSession',
    'ReconMode',
    'ReportFilter',
    'Verdict',
    'ReconciliationResult',
    'HistoryRecorder',
    '__version__',
]
