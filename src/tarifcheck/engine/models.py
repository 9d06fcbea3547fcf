"""
Reconciliation Data Models.

Provides enums and immutable dataclasses for the reconciliation engine:
- ReconMode, Verdict, ReportFilter enums
- FieldSpec / ModeLayout describing each mode's compared fields and report columns
- ComparisonField, ReportRow, MismatchRecord, ReconciliationResult
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

Value = Union[int, str]

REMARK_MATCH = "Sesuai"
REMARK_MISMATCH = "Tidak sesuai"
MISSING_MASTER = "Master Data Tidak Ada"
MISSING_IT = "Data IT Tidak Ada"
REMARKS_COLUMN = "Keterangan"


class ReconMode(Enum):
    """Reconciliation modes."""

    TARIF = "TARIF"  # direct-code: keyed by system code, union of keys
    BIAYA = "BIAYA"  # composite: keyed by destination + service family

    @classmethod
    def parse(cls, value: Union[str, "ReconMode", None]) -> "ReconMode":
        """Accept enum members or case-insensitive names; None means TARIF."""
        if value is None:
            return cls.TARIF
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


class Verdict(Enum):
    """Per-key outcome of a reconciliation."""

    MATCH = "MATCH"
    MISMATCH = "MISMATCH"
    MISSING_COUNTERPART = "MISSING_COUNTERPART"


class ReportFilter(Enum):
    """Read-only views over the full report."""

    ALL = "ALL"
    MATCH = "MATCH"
    MISMATCH = "MISMATCH"
    BLANK = "BLANK"

    def accepts(self, verdict: Verdict) -> bool:
        if self is ReportFilter.ALL:
            return True
        if self is ReportFilter.BLANK:
            return verdict is Verdict.MISSING_COUNTERPART
        return verdict.value == self.value


@dataclass(frozen=True)
class FieldSpec:
    """A compared field and its report column labels."""

    name: str
    reference_label: str
    governing_label: str
    numeric: bool = True


@dataclass(frozen=True)
class ModeLayout:
    """Report layout for one mode: context columns, then compared fields."""

    context: Tuple[Tuple[str, str], ...]  # (attribute, column label)
    fields: Tuple[FieldSpec, ...]

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def csv_header(self) -> List[str]:
        """Reference-side columns, governing-side columns, then remarks."""
        return (
            [label for _, label in self.context]
            + [f.reference_label for f in self.fields]
            + [f.governing_label for f in self.fields]
            + [REMARKS_COLUMN]
        )


TARIF_LAYOUT = ModeLayout(
    context=(("origin", "ORIGIN"), ("dest", "DEST"), ("sys_code", "SYS_CODE")),
    fields=(
        FieldSpec("Service", "Service REG", "SERVICE", numeric=False),
        FieldSpec("Tarif", "Tarif REG", "TARIF"),
        FieldSpec("SLA_FORM", "sla form REG", "SLA_FORM"),
        FieldSpec("SLA_THRU", "sla thru REG", "SLA_THRU"),
    ),
)

BIAYA_LAYOUT = ModeLayout(
    context=(("origin", "ORIGIN"), ("dest", "DESTINASI"), ("service", "SERVICE")),
    fields=(
        FieldSpec("BP", "BP Master", "BP IT"),
        FieldSpec("BP NEXT", "BP Next Master", "BP Next IT"),
        FieldSpec("BT", "BT Master", "BT IT"),
        FieldSpec("BD", "BD Master", "BD IT"),
        FieldSpec("BD NEXT", "BD Next Master", "BD Next IT"),
    ),
)

LAYOUTS = {
    ReconMode.TARIF: TARIF_LAYOUT,
    ReconMode.BIAYA: BIAYA_LAYOUT,
}


def layout_for(mode: ReconMode) -> ModeLayout:
    return LAYOUTS[ReconMode.parse(mode)]


@dataclass(frozen=True)
class ComparisonField:
    """One compared field: governing (IT) value vs reference (Master) value."""

    name: str
    governing_value: Value
    reference_value: Value
    numeric: bool = True
    is_match: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'governing_value': self.governing_value,
            'reference_value': self.reference_value,
            'numeric': self.numeric,
            'is_match': self.is_match,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComparisonField":
        return cls(
            name=data['name'],
            governing_value=data['governing_value'],
            reference_value=data['reference_value'],
            numeric=data.get('numeric', True),
            is_match=data.get('is_match', True),
        )


@dataclass(frozen=True)
class ReportRow:
    """One row of the full report, i.e. one processed key."""

    row_id: int
    key: str
    verdict: Verdict
    remarks: str
    reasons: Tuple[str, ...] = ()
    context: Mapping[str, str] = field(default_factory=dict)
    fields: Tuple[ComparisonField, ...] = ()

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "context", MappingProxyType(dict(self.context)))

    def get_field(self, name: str) -> Optional[ComparisonField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def governing(self, name: str) -> Optional[Value]:
        f = self.get_field(name)
        return f.governing_value if f else None

    def reference(self, name: str) -> Optional[Value]:
        f = self.get_field(name)
        return f.reference_value if f else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row_id': self.row_id,
            'key': self.key,
            'verdict': self.verdict.value,
            'remarks': self.remarks,
            'reasons': list(self.reasons),
            'context': dict(self.context),
            'fields': [f.to_dict() for f in self.fields],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportRow":
        return cls(
            row_id=data['row_id'],
            key=data['key'],
            verdict=Verdict(data['verdict']),
            remarks=data.get('remarks', ''),
            reasons=tuple(data.get('reasons', ())),
            context=dict(data.get('context', {})),
            fields=tuple(ComparisonField.from_dict(f) for f in data.get('fields', ())),
        )


@dataclass(frozen=True)
class MismatchRecord:
    """Detail record for a non-matching key."""

    row_id: int
    key: str
    reasons: Tuple[str, ...]
    details: Tuple[ComparisonField, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row_id': self.row_id,
            'key': self.key,
            'reasons': list(self.reasons),
            'details': [d.to_dict() for d in self.details],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MismatchRecord":
        return cls(
            row_id=data['row_id'],
            key=data['key'],
            reasons=tuple(data.get('reasons', ())),
            details=tuple(ComparisonField.from_dict(d) for d in data.get('details', ())),
        )


@dataclass(frozen=True)
class ReconciliationResult:
    """Immutable outcome of one reconciliation run."""

    mode: ReconMode
    total_rows: int = 0
    matches: int = 0
    mismatch_count: int = 0
    blanks: int = 0
    mismatches: Tuple[MismatchRecord, ...] = ()
    full_report: Tuple[ReportRow, ...] = ()
    duplicate_keys: int = 0
    skipped_rows: int = 0

    @property
    def match_rate(self) -> float:
        """Percentage of processed keys that matched."""
        if self.total_rows == 0:
            return 0.0
        return (self.matches / self.total_rows) * 100

    @property
    def is_consistent(self) -> bool:
        return (
            self.matches + self.mismatch_count + self.blanks == self.total_rows
            and len(self.full_report) == self.total_rows
        )

    def filter(self, report_filter: Union[ReportFilter, str] = ReportFilter.ALL) -> List[ReportRow]:
        """Rows of the full report accepted by the given filter."""
        report_filter = ReportFilter(report_filter) if isinstance(report_filter, str) else report_filter
        return [row for row in self.full_report if report_filter.accepts(row.verdict)]

    def __iter__(self) -> Iterator[ReportRow]:
        return iter(self.full_report)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode.value,
            'total_rows': self.total_rows,
            'matches': self.matches,
            'mismatch_count': self.mismatch_count,
            'blanks': self.blanks,
            'duplicate_keys': self.duplicate_keys,
            'skipped_rows': self.skipped_rows,
            'mismatches': [m.to_dict() for m in self.mismatches],
            'full_report': [r.to_dict() for r in self.full_report],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReconciliationResult":
        full_report = tuple(ReportRow.from_dict(r) for r in data.get('full_report', ()))
        matches = data.get('matches', 0)
        blanks = data.get('blanks', 0)
        total_rows = data.get('total_rows', len(full_report))
        return cls(
            mode=ReconMode.parse(data.get('mode')),
            total_rows=total_rows,
            matches=matches,
            mismatch_count=data.get('mismatch_count', total_rows - matches - blanks),
            blanks=blanks,
            mismatches=tuple(MismatchRecord.from_dict(m) for m in data.get('mismatches', ())),
            full_report=full_report,
            duplicate_keys=data.get('duplicate_keys', 0),
            skipped_rows=data.get('skipped_rows', 0),
        )
