"""
Reconciliation Report Generator.

Generates downloadable reports for reconciliation results:
- CSV (mode-specific fixed header, one row per processed key)
- Excel (xlsx) with a summary sheet and a highlighted report sheet
- pandas DataFrame for further analysis
- Text summary
"""

import csv
import io
import logging
from pathlib import Path
from typing import Any, List, Optional, TextIO, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from tarifcheck.core.config import ReportConfig
from tarifcheck.engine.models import (
    ReconciliationResult,
    ReportFilter,
    ReportRow,
    Verdict,
    layout_for,
)

logger = logging.getLogger(__name__)

FilterArg = Union[ReportFilter, str]


def _as_filter(report_filter: FilterArg) -> ReportFilter:
    return ReportFilter(report_filter) if isinstance(report_filter, str) else report_filter


def report_header(result: ReconciliationResult) -> List[str]:
    return layout_for(result.mode).csv_header


def report_values(row: ReportRow, result: ReconciliationResult) -> List[Any]:
    """Context columns, Master values, IT values, remarks - in header order."""
    layout = layout_for(result.mode)
    values = [row.context.get(attr, "") for attr, _ in layout.context]
    values += [row.reference(spec.name) for spec in layout.fields]
    values += [row.governing(spec.name) for spec in layout.fields]
    values.append(row.remarks)
    return values


def write_csv(
    result: ReconciliationResult,
    stream: TextIO,
    report_filter: FilterArg = ReportFilter.ALL,
) -> int:
    """
    Write the report as CSV to an open text stream.

    Returns:
        Number of data rows written
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(report_header(result))
    rows = result.filter(_as_filter(report_filter))
    for row in rows:
        writer.writerow(report_values(row, result))
    return len(rows)


def to_csv_string(result: ReconciliationResult, report_filter: FilterArg = ReportFilter.ALL) -> str:
    buffer = io.StringIO()
    write_csv(result, buffer, report_filter)
    return buffer.getvalue()


def to_dataframe(result: ReconciliationResult, report_filter: FilterArg = ReportFilter.ALL) -> pd.DataFrame:
    """Report rows as a DataFrame with the CSV column names."""
    rows = [report_values(row, result) for row in result.filter(_as_filter(report_filter))]
    return pd.DataFrame(rows, columns=report_header(result))


class ReconciliationReporter:
    """
    Generates reconciliation reports.

    Usage:
        reporter = ReconciliationReporter(output_dir=Path("reports"))

        csv_path = reporter.generate_csv(result)
        xlsx_path = reporter.generate_excel(result)
        reporter.print_summary(result)
    """

    def __init__(self, output_dir: Optional[Path] = None, config: Optional[ReportConfig] = None):
        """
        Initialize reporter.

        Args:
            output_dir: Directory for output files
            config: Report naming configuration
        """
        self.output_dir = Path(output_dir) if output_dir else Path(".")
        self.config = config or ReportConfig()

    def default_filename(self, result: ReconciliationResult, report_filter: FilterArg, extension: str) -> str:
        return self.config.generate_filename(result.mode.value, _as_filter(report_filter).value, extension)

    def generate_csv(
        self,
        result: ReconciliationResult,
        report_filter: FilterArg = ReportFilter.ALL,
        filename: Optional[str] = None,
    ) -> Path:
        """
        Generate CSV reconciliation report.

        Args:
            result: Reconciliation result
            report_filter: Which verdicts to include
            filename: Optional custom filename

        Returns:
            Path to generated file
        """
        output_path = self.output_dir / (filename or self.default_filename(result, report_filter, "csv"))
        self.output_dir.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            count = write_csv(result, f, report_filter)

        logger.info(f"Generated CSV report: {output_path} ({count} rows)")
        return output_path

    def generate_excel(
        self,
        result: ReconciliationResult,
        report_filter: FilterArg = ReportFilter.ALL,
        filename: Optional[str] = None,
    ) -> Path:
        """
        Generate Excel reconciliation report.

        Mismatched rows are filled red and missing-counterpart rows yellow.

        Returns:
            Path to generated file
        """
        output_path = self.output_dir / (filename or self.default_filename(result, report_filter, "xlsx"))
        self.output_dir.mkdir(parents=True, exist_ok=True)

        wb = Workbook()
        summary = wb.active
        summary.title = "Summary"

        # Styles
        header_font = Font(bold=True, size=14)
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        header_font_white = Font(bold=True, color="FFFFFF")
        mismatch_fill = PatternFill(start_color="F8CBAD", end_color="F8CBAD", fill_type="solid")
        blank_fill = PatternFill(start_color="FFE699", end_color="FFE699", fill_type="solid")
        border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )

        summary.cell(row=1, column=1, value=f"Validasi {result.mode.value}").font = header_font
        summary_rows = [
            ("Total Rows", result.total_rows),
            ("Sesuai", result.matches),
            ("Tidak Sesuai", result.mismatch_count),
            ("Data Tidak Ada", result.blanks),
            ("Match Rate (%)", round(result.match_rate, 2)),
            ("Duplicate Keys", result.duplicate_keys),
            ("Rows Without Key", result.skipped_rows),
        ]
        for offset, (label, value) in enumerate(summary_rows, start=3):
            summary.cell(row=offset, column=1, value=label).font = Font(bold=True)
            summary.cell(row=offset, column=2, value=value)
        summary.column_dimensions["A"].width = 20
        summary.column_dimensions["B"].width = 14

        ws = wb.create_sheet("Report")
        headers = report_header(result)
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font_white
            cell.fill = header_fill
            cell.border = border
            cell.alignment = Alignment(horizontal="center")

        for row_idx, row in enumerate(result.filter(_as_filter(report_filter)), start=2):
            fill = None
            if row.verdict is Verdict.MISMATCH:
                fill = mismatch_fill
            elif row.verdict is Verdict.MISSING_COUNTERPART:
                fill = blank_fill
            for col, value in enumerate(report_values(row, result), 1):
                cell = ws.cell(row=row_idx, column=col, value=value)
                cell.border = border
                if fill is not None:
                    cell.fill = fill

        for col in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 16
        ws.column_dimensions[get_column_letter(len(headers))].width = 40
        ws.freeze_panes = "A2"

        wb.save(output_path)
        logger.info(f"Generated Excel report: {output_path}")
        return output_path

    @staticmethod
    def format_summary(result: ReconciliationResult) -> str:
        lines = [
            f"Validasi {result.mode.value}",
            f"  Total rows:      {result.total_rows}",
            f"  Sesuai:          {result.matches}",
            f"  Tidak sesuai:    {result.mismatch_count}",
            f"  Data tidak ada:  {result.blanks}",
            f"  Match rate:      {result.match_rate:.1f}%",
        ]
        if result.duplicate_keys:
            lines.append(f"  Duplicate keys:  {result.duplicate_keys}")
        if result.skipped_rows:
            lines.append(f"  Rows w/o key:    {result.skipped_rows}")
        return "\n".join(lines)

    def print_summary(self, result: ReconciliationResult) -> None:
        print(self.format_summary(result))
