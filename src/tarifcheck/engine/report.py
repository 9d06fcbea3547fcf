"""
Report Assembler - accumulate per-key verdicts into a ReconciliationResult.

Counters and the two ordered sequences (full report, mismatch records) are
filled in a single pass; nothing is recomputed afterwards.
"""

from typing import Dict, List, Sequence

from tarifcheck.engine.models import (
    ComparisonField,
    MismatchRecord,
    ReconciliationResult,
    ReconMode,
    ReportRow,
    Verdict,
)


class ReportAssembler:
    """
    Collects ReportRows for one run.

    Usage:
        assembler = ReportAssembler(ReconMode.TARIF)
        assembler.add("AB1", Verdict.MATCH, "Sesuai", fields=fields)
        result = assembler.build()
    """

    def __init__(self, mode: ReconMode):
        self.mode = ReconMode.parse(mode)
        self.matches = 0
        self.mismatch_count = 0
        self.blanks = 0
        self._rows: List[ReportRow] = []
        self._mismatches: List[MismatchRecord] = []

    @property
    def total_rows(self) -> int:
        return len(self._rows)

    def add(
        self,
        key: str,
        verdict: Verdict,
        remarks: str,
        reasons: Sequence[str] = (),
        context: Dict[str, str] = None,
        fields: Sequence[ComparisonField] = (),
    ) -> ReportRow:
        """
        Append one processed key.

        Non-matching keys also get a MismatchRecord; missing-counterpart
        records carry their single reason and no field details.
        """
        row = ReportRow(
            row_id=len(self._rows) + 1,
            key=key,
            verdict=verdict,
            remarks=remarks,
            reasons=tuple(reasons),
            context=dict(context or {}),
            fields=tuple(fields),
        )
        self._rows.append(row)

        if verdict is Verdict.MATCH:
            self.matches += 1
            return row

        if verdict is Verdict.MISSING_COUNTERPART:
            self.blanks += 1
            details = ()
        else:
            self.mismatch_count += 1
            details = row.fields

        self._mismatches.append(
            MismatchRecord(row_id=row.row_id, key=key, reasons=row.reasons, details=details)
        )
        return row

    def build(self, duplicate_keys: int = 0, skipped_rows: int = 0) -> ReconciliationResult:
        """Freeze the collected rows into a ReconciliationResult."""
        return ReconciliationResult(
            mode=self.mode,
            total_rows=len(self._rows),
            matches=self.matches,
            mismatch_count=self.mismatch_count,
            blanks=self.blanks,
            mismatches=tuple(self._mismatches),
            full_report=tuple(self._rows),
            duplicate_keys=duplicate_keys,
            skipped_rows=skipped_rows,
        )
