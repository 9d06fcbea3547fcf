#!/usr/bin/env python3
"""
tarifcheck CLI - validate IT tariff/cost extracts against Master data.

Usage:
    tarifcheck validate --mode tarif --it data_it.csv --master master.csv
    tarifcheck validate --mode biaya --it biaya_it.csv --master master_biaya.csv --excel report.xlsx
    tarifcheck template --mode biaya --side master
    tarifcheck history list --mode tarif
    tarifcheck history clear --yes
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tarifcheck.core.config import ReconConfig
from tarifcheck.core.exceptions import TarifCheckError
from tarifcheck.engine.models import ReconMode, ReportFilter
from tarifcheck.engine.reconciler import Reconciler
from tarifcheck.engine.session import ReconciliationSession
from tarifcheck.history.recorder import HistoryRecorder
from tarifcheck.history.stores import JsonFileHistoryStore
from tarifcheck.reports.reconciliation_report import ReconciliationReporter
from tarifcheck.reports.templates import write_template

MODES = ["tarif", "biaya"]
FILTERS = [f.value for f in ReportFilter]


def setup_logging(verbose: bool = False, debug: bool = False):
    """Configure logging."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def get_recorder(config: ReconConfig, history_path: Optional[str] = None) -> HistoryRecorder:
    path = Path(history_path) if history_path else Path(config.history.path)
    return HistoryRecorder(JsonFileHistoryStore(path))


def print_progress(percent: int) -> None:
    print(f"\r  Progress: {percent:3d}%", end="", file=sys.stderr, flush=True)
    if percent >= 100:
        print(file=sys.stderr)


# ============================================================================
# Command Handlers
# ============================================================================

def cmd_validate(args, config: ReconConfig) -> int:
    """Handle validate command - reconcile IT file against Master file."""
    mode = ReconMode.parse(args.mode)
    recorder = None if args.no_history else get_recorder(config, args.history_file)
    session = ReconciliationSession(Reconciler(config), recorder)

    print(f"\nValidating {mode.value}: {args.it} vs {args.master}")
    result = session.run(
        Path(args.master),
        Path(args.it),
        mode,
        on_progress=None if args.quiet else print_progress,
    )

    reporter = ReconciliationReporter(output_dir=Path(args.output_dir), config=config.reports)
    print()
    reporter.print_summary(result)

    if result.mismatches and not args.quiet:
        print("\nMismatches:")
        for record in result.mismatches[:args.show]:
            print(f"  #{record.row_id} {record.key}: {', '.join(record.reasons)}")
        if len(result.mismatches) > args.show:
            print(f"  ... and {len(result.mismatches) - args.show} more")

    csv_path = reporter.generate_csv(result, args.filter, filename=args.output)
    print(f"\nReport: {csv_path}")

    if args.excel:
        xlsx_path = reporter.generate_excel(result, args.filter, filename=args.excel)
        print(f"Excel:  {xlsx_path}")

    return 0


def cmd_template(args, config: ReconConfig) -> int:
    """Handle template command - write an example input file."""
    path = write_template(args.mode, args.side, Path(args.output_dir))
    print(f"Template written: {path}")
    return 0


def cmd_history(args, config: ReconConfig) -> int:
    """Handle history command - list, show or clear stored runs."""
    recorder = get_recorder(config, args.history_file)

    if args.action == 'list':
        entries = recorder.entries(args.mode)
        if not entries:
            print("No validation history.")
            return 0
        print(f"\n{'ID':<15} {'Timestamp':<20} {'Mode':<6} {'Total':>7} {'Match':>7} {'Blank':>7}  Files")
        for entry in entries:
            r = entry.result
            print(
                f"{entry.id:<15} {entry.timestamp:<20} {entry.mode.value:<6} "
                f"{r.total_rows:>7} {r.matches:>7} {r.blanks:>7}  "
                f"{entry.governing_file} / {entry.reference_file}"
            )
        return 0

    if args.action == 'show':
        if not args.entry_id:
            print("history show requires an entry id")
            return 1
        entry = recorder.get(args.entry_id)
        print(f"\n{entry.governing_file} vs {entry.reference_file} ({entry.timestamp})")
        ReconciliationReporter().print_summary(recorder.restore(entry.id))
        return 0

    if args.action == 'clear':
        def confirm() -> bool:
            if args.yes:
                return True
            answer = input("Hapus semua riwayat validasi? [y/N] ")
            return answer.strip().lower() in ('y', 'yes')

        if recorder.clear(confirm):
            print("History cleared.")
        else:
            print("History kept.")
        return 0

    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tarifcheck',
        description='tarifcheck - IT vs Master tariff/cost reconciliation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tarifcheck validate --mode tarif --it data_it.csv --master master.csv
  tarifcheck validate --mode biaya --it it.csv --master master.csv --filter MISMATCH
  tarifcheck template --mode tarif --side it
  tarifcheck history list --mode biaya
        """
    )

    # Global arguments
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--debug', action='store_true', help='Debug output')
    parser.add_argument('--config', '-c', help='JSON config file')
    parser.add_argument('--history-file', help='History JSON file (default: from config)')

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Command')

    # validate command
    validate_parser = subparsers.add_parser('validate', help='Reconcile IT file against Master file')
    validate_parser.add_argument('--mode', '-m', required=True, choices=MODES, help='Validation mode')
    validate_parser.add_argument('--it', required=True, help='IT data file (CSV)')
    validate_parser.add_argument('--master', required=True, help='Master data file (CSV)')
    validate_parser.add_argument('--output-dir', '-o', default='.', help='Directory for reports')
    validate_parser.add_argument('--output', help='CSV report filename (default: from naming pattern)')
    validate_parser.add_argument('--excel', help='Also write an Excel report with this filename')
    validate_parser.add_argument('--filter', default='ALL', choices=FILTERS, help='Rows to include in reports')
    validate_parser.add_argument('--show', type=int, default=10, help='Mismatches to print')
    validate_parser.add_argument('--no-history', action='store_true', help='Do not record this run')
    validate_parser.add_argument('--quiet', '-q', action='store_true', help='No progress or mismatch listing')

    # template command
    template_parser = subparsers.add_parser('template', help='Write an example input CSV')
    template_parser.add_argument('--mode', '-m', required=True, choices=MODES, help='Validation mode')
    template_parser.add_argument('--side', '-s', required=True, choices=['it', 'master'], help='Which file')
    template_parser.add_argument('--output-dir', '-o', default='.', help='Output directory')

    # history command
    history_parser = subparsers.add_parser('history', help='Validation history')
    history_parser.add_argument('action', choices=['list', 'show', 'clear'], help='History action')
    history_parser.add_argument('entry_id', nargs='?', help='Entry id (for show)')
    history_parser.add_argument('--mode', '-m', choices=MODES, help='Only entries of this mode')
    history_parser.add_argument('--yes', '-y', action='store_true', help='Clear without asking')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose, args.debug)

    try:
        config = ReconConfig.load(Path(args.config) if args.config else None)

        if args.command == 'validate':
            return cmd_validate(args, config)
        elif args.command == 'template':
            return cmd_template(args, config)
        elif args.command == 'history':
            return cmd_history(args, config)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled")
        return 130
    except (TarifCheckError, OSError, ValueError) as e:
        print(f"\nError: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
