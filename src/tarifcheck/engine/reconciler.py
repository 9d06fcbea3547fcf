"""
Reconciliation Engine - compare an IT extract against Master data.

Builds the Master (reference) index first, then streams the IT (governing)
file through it and classifies every key as MATCH, MISMATCH or
MISSING_COUNTERPART.

Modes:
- TARIF: keyed by system code; every key of either file is reported
- BIAYA: keyed by destination; each IT row's service family selects the
  "<FIELD> <FAMILY>" Master columns to compare against
"""

import logging
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Optional, Tuple, Union

from tarifcheck.core.config import ReconConfig
from tarifcheck.core.exceptions import EmptyDatasetError
from tarifcheck.engine.columns import GOVERNING, REFERENCE, ColumnMap
from tarifcheck.engine.indexer import ReferenceIndex, build_index, check_header
from tarifcheck.engine.models import (
    MISSING_IT,
    MISSING_MASTER,
    REMARK_MATCH,
    REMARK_MISMATCH,
    BIAYA_LAYOUT,
    TARIF_LAYOUT,
    ComparisonField,
    ReconciliationResult,
    ReconMode,
    Verdict,
)
from tarifcheck.engine.normalize import (
    normalize_key,
    normalize_service_family,
    normalize_text,
    parse_number,
)
from tarifcheck.engine.report import ReportAssembler
from tarifcheck.parsers.chunked_reader import ChunkedCsvReader

logger = logging.getLogger(__name__)

Source = Union[str, Path, BinaryIO]

MISSING_SERVICE = "-"
MISSING_DESTINATION = f"{MISSING_MASTER} (Destinasi)"

# Keys compared between two progress reports in the TARIF comparison pass
COMPARE_PROGRESS_STEP = 1000


class ProgressTracker:
    """
    Map per-phase fractions onto one monotonic 0-100 integer percentage.

    The callback fires only when the percentage increases.
    """

    def __init__(self, callback: Optional[Callable[[int], None]] = None):
        self.callback = callback
        self.percent = 0

    def phase(self, start: float, end: float) -> Callable[[float], None]:
        def report(fraction: float) -> None:
            self.update(start + (end - start) * min(max(fraction, 0.0), 1.0))
        return report

    def update(self, value: float) -> None:
        percent = min(int(value), 100)
        if percent > self.percent:
            self.percent = percent
            if self.callback is not None:
                self.callback(percent)

    def finish(self) -> None:
        self.update(100)


def _remarks_for(issues) -> str:
    return f"{REMARK_MISMATCH}: {', '.join(issues)}"


def _compare(name: str, governing, reference, numeric: bool = True) -> ComparisonField:
    if numeric:
        is_match = governing == reference
    else:
        is_match = normalize_text(governing) == normalize_text(reference)
    return ComparisonField(
        name=name,
        governing_value=governing,
        reference_value=reference,
        numeric=numeric,
        is_match=is_match,
    )


def _tarif_values(columns: Optional[ColumnMap], row: Optional[Dict[str, str]]) -> Dict[str, Union[int, str]]:
    """Service string and numeric fields of one TARIF row; zeros and '-' when absent."""
    if row is None:
        return {"Service": MISSING_SERVICE, "Tarif": 0, "SLA_FORM": 0, "SLA_THRU": 0}
    return {
        "Service": columns.value(row, "service").strip() or MISSING_SERVICE,
        "Tarif": parse_number(columns.value(row, "tarif")),
        "SLA_FORM": parse_number(columns.value(row, "sla_form")),
        "SLA_THRU": parse_number(columns.value(row, "sla_thru")),
    }


def reconcile_tarif(
    governing_reader: ChunkedCsvReader,
    index: ReferenceIndex,
    on_compare_progress: Optional[Callable[[float], None]] = None,
) -> ReconciliationResult:
    """
    Direct-code reconciliation over the union of IT and Master keys.

    Keys are reported in IT order, followed by Master-only keys in Master order.
    """
    governing = build_index(governing_reader, ReconMode.TARIF, side=GOVERNING)
    gov_cols = governing.columns
    ref_cols = index.columns

    keys = list(governing.rows) + [k for k in index.rows if k not in governing]
    assembler = ReportAssembler(ReconMode.TARIF)

    for position, key in enumerate(keys, start=1):
        it_row = governing.get(key)
        master_row = index.get(key)
        it_values = _tarif_values(gov_cols, it_row)
        master_values = _tarif_values(ref_cols, master_row)

        source_row, source_cols = (it_row, gov_cols) if it_row is not None else (master_row, ref_cols)
        context = {
            "origin": source_cols.value(source_row, "origin"),
            "dest": source_cols.value(source_row, "dest"),
            "sys_code": key,
        }

        fields = [
            _compare(spec.name, it_values[spec.name], master_values[spec.name], spec.numeric)
            for spec in TARIF_LAYOUT.fields
        ]

        if master_row is None or it_row is None:
            reason = MISSING_MASTER if master_row is None else MISSING_IT
            fields = [
                ComparisonField(f.name, f.governing_value, f.reference_value, f.numeric, False)
                for f in fields
            ]
            assembler.add(key, Verdict.MISSING_COUNTERPART, reason, (reason,), context, fields)
        else:
            issues = [f.name for f in fields if not f.is_match]
            if issues:
                assembler.add(key, Verdict.MISMATCH, _remarks_for(issues), issues, context, fields)
            else:
                assembler.add(key, Verdict.MATCH, REMARK_MATCH, (), context, fields)

        if on_compare_progress is not None and position % COMPARE_PROGRESS_STEP == 0:
            on_compare_progress(position / len(keys))

    if on_compare_progress is not None:
        on_compare_progress(1.0)

    return assembler.build(
        duplicate_keys=index.duplicate_keys + governing.duplicate_keys,
        skipped_rows=index.skipped_rows + governing.skipped_rows,
    )


def reconcile_biaya(
    governing_reader: ChunkedCsvReader,
    index: ReferenceIndex,
    family_table: Optional[Dict[str, str]] = None,
) -> ReconciliationResult:
    """
    Composite reconciliation: one report row per distinct (destination, service family) of IT.

    Repeated IT identities after the first occurrence are skipped, counted as
    duplicates and logged as warnings naming any fields that differ.
    """
    columns = check_header(governing_reader, ReconMode.BIAYA, GOVERNING)
    assembler = ReportAssembler(ReconMode.BIAYA)
    seen: Dict[Tuple[str, str], Dict[str, int]] = {}
    data_rows = 0
    skipped = 0
    duplicates = 0

    for row in governing_reader:
        data_rows += 1
        dest = columns.key_value(row).strip()
        key = normalize_key(dest)
        if not key:
            skipped += 1
            continue

        service = columns.value(row, "service").strip()
        family = normalize_service_family(service, family_table)
        it_values = {spec.name: parse_number(columns.value(row, spec.name)) for spec in BIAYA_LAYOUT.fields}

        kept = seen.get((key, family))
        if kept is not None:
            duplicates += 1
            conflict = [name for name, value in it_values.items() if kept[name] != value]
            detail = f", differs on {', '.join(conflict)}" if conflict else ""
            logger.warning(
                f"IT {governing_reader.name}: row {data_rows} ({key}/{service}) repeats "
                f"{key}/{family} and was dropped{detail}"
            )
            continue
        seen[(key, family)] = it_values

        context = {
            "origin": columns.value(row, "origin"),
            "dest": dest,
            "service": service,
        }
        master_row = index.get(key)

        if master_row is None:
            fields = [ComparisonField(name, value, 0, True, False) for name, value in it_values.items()]
            assembler.add(key, Verdict.MISSING_COUNTERPART, MISSING_DESTINATION, (MISSING_MASTER,), context, fields)
            continue

        fields = [
            _compare(name, value, index.cost_value(master_row, name, family))
            for name, value in it_values.items()
        ]
        issues = [f.name for f in fields if not f.is_match]
        if issues:
            assembler.add(key, Verdict.MISMATCH, _remarks_for(issues), issues, context, fields)
        else:
            assembler.add(key, Verdict.MATCH, REMARK_MATCH, (), context, fields)

    if data_rows == 0:
        raise EmptyDatasetError("IT", f"{governing_reader.name} has no data rows")

    return assembler.build(
        duplicate_keys=index.duplicate_keys + duplicates,
        skipped_rows=index.skipped_rows + skipped,
    )


def reconcile(
    governing_reader: ChunkedCsvReader,
    index: ReferenceIndex,
    config: Optional[ReconConfig] = None,
    on_compare_progress: Optional[Callable[[float], None]] = None,
) -> ReconciliationResult:
    """Reconcile a governing stream against a prebuilt reference index."""
    config = config or ReconConfig()
    if index.mode is ReconMode.TARIF:
        return reconcile_tarif(governing_reader, index, on_compare_progress)
    return reconcile_biaya(governing_reader, index, config.service_family_table())


class Reconciler:
    """
    Runs complete reconciliations from file sources.

    Usage:
        reconciler = Reconciler(ReconConfig.load())
        result = reconciler.reconcile("master.csv", "it.csv", ReconMode.TARIF, on_progress=print)

        print(f"{result.matches}/{result.total_rows} matched")
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize reconciler.

        Args:
            config: Reconciliation configuration (defaults when omitted)
        """
        self.config = config or ReconConfig()

    def reader(
        self,
        source: Source,
        on_progress: Optional[Callable[[float], None]] = None,
        name: Optional[str] = None,
    ) -> ChunkedCsvReader:
        return ChunkedCsvReader(
            source,
            chunk_size=self.config.reader.chunk_size,
            encoding=self.config.reader.encoding,
            on_progress=on_progress,
            name=name,
        )

    def build_index(
        self,
        reference: Source,
        mode: ReconMode,
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> ReferenceIndex:
        """Index a Master file for the given mode."""
        return build_index(
            self.reader(reference, on_progress),
            ReconMode.parse(mode),
            duplicate_policy=self.config.index.duplicate_policy,
            side=REFERENCE,
        )

    def reconcile(
        self,
        reference: Source,
        governing: Source,
        mode: ReconMode,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> ReconciliationResult:
        """
        Reconcile an IT file against a Master file.

        Both headers are validated before any data row is processed.

        Args:
            reference: Master file (path or binary stream)
            governing: IT file (path or binary stream)
            mode: TARIF or BIAYA
            on_progress: Called with an increasing 0-100 percentage

        Returns:
            ReconciliationResult

        Raises:
            MissingColumnError: If either file lacks a required column
            EmptyDatasetError: If the Master has no keyed rows or IT has no rows
        """
        mode = ReconMode.parse(mode)
        tracker = ProgressTracker(on_progress)
        phases = self.config.progress.phase_bounds(two_pass=mode is ReconMode.TARIF)

        governing_reader = self.reader(governing)
        reference_reader = self.reader(reference, tracker.phase(*phases[0]))

        try:
            check_header(governing_reader, mode, GOVERNING)
            index = build_index(
                reference_reader,
                mode,
                duplicate_policy=self.config.index.duplicate_policy,
                side=REFERENCE,
            )

            # IT progress is reported only once the Master phase is done
            governing_reader.on_progress = tracker.phase(*phases[1])
            governing_reader.on_progress(governing_reader.progress)

            compare_progress = tracker.phase(*phases[2]) if len(phases) > 2 else None
            result = reconcile(governing_reader, index, self.config, compare_progress)
        finally:
            governing_reader.close()
            reference_reader.close()

        tracker.finish()
        logger.info(
            f"{mode.value} reconciliation complete: {result.total_rows} keys, "
            f"{result.matches} matched, {result.mismatch_count} mismatched, {result.blanks} missing"
        )
        return result
