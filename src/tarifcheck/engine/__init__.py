"""
tarifcheck engine - key building, reconciliation and report assembly.

Usage:
    from tarifcheck.engine import Reconciler, ReconMode, ReportFilter

    result = Reconciler().reconcile("master.csv", "it.csv", ReconMode.TARIF)
    print(f"Match rate: {result.match_rate:.1f}%")
    for row in result.filter(ReportFilter.MISMATCH):
        print(row.key, row.remarks)
"""

from .models import (
    ReconMode,
    Verdict,
    ReportFilter,
    FieldSpec,
    ModeLayout,
    TARIF_LAYOUT,
    BIAYA_LAYOUT,
    layout_for,
    ComparisonField,
    ReportRow,
    MismatchRecord,
    ReconciliationResult,
)
from .normalize import normalize_key, normalize_text, parse_number, normalize_service_family
from .columns import ColumnMap, resolve_columns, REFERENCE, GOVERNING
from .indexer import ReferenceIndex, build_index
from .report import ReportAssembler
from .reconciler import Reconciler, ProgressTracker, reconcile
from .session import ReconciliationSession

__all__ = [
    'ReconMode',
    'Verdict',
    'ReportFilter',
    'FieldSpec',
    'ModeLayout',
    'TARIF_LAYOUT',
    'BIAYA_LAYOUT',
    'layout_for',
    'ComparisonField',
    'ReportRow',
    'MismatchRecord',
    'ReconciliationResult',
    'normalize_key',
    'normalize_text',
    'parse_number',
    'normalize_service_family',
    'ColumnMap',
    'resolve_columns',
    'REFERENCE',
    'GOVERNING',
    'ReferenceIndex',
    'build_index',
    'ReportAssembler',
    'Reconciler',
    'ProgressTracker',
    'reconcile',
    'ReconciliationSession',
]
