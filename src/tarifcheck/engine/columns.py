"""
Header resolution - map tolerant header names onto logical columns.

Source exports disagree on header spelling ("SYS_CODE" vs "Sys Code",
"DEST" vs "DESTINASI", "sla form REG" vs "SLA_FORM"). Each file's header is
resolved once into a ColumnMap; required columns that cannot be found raise
MissingColumnError before any row is processed.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from tarifcheck.core.exceptions import MissingColumnError
from tarifcheck.engine.models import ReconMode

REFERENCE = "reference"
GOVERNING = "governing"

DATASET_LABELS = {
    REFERENCE: "Master",
    GOVERNING: "IT",
}

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
_SEPARATORS = re.compile(r"[\s_]+")


def alnum_upper(name: str) -> str:
    """'Sys_Code ' -> 'SYSCODE'"""
    return _NON_ALNUM.sub("", name).upper()


def normalize_header(name: str) -> str:
    """Uppercase and collapse whitespace/underscore runs: 'bp_next  reg23' -> 'BP NEXT REG23'."""
    return _SEPARATORS.sub(" ", name.strip()).upper()


def find_column(header: Sequence[str], predicate: Callable[[str], bool]) -> Optional[str]:
    """Return the first header name satisfying predicate."""
    for name in header:
        if name and predicate(name):
            return name
    return None


def find_by_prefix(header: Sequence[str], *prefixes: str) -> Optional[str]:
    """First header starting with any prefix, prefixes tried in priority order."""
    for prefix in prefixes:
        wanted = normalize_header(prefix)
        found = find_column(header, lambda h: normalize_header(h).startswith(wanted))
        if found:
            return found
    return None


def find_by_name(header: Sequence[str], *names: str) -> Optional[str]:
    """First header equal to any name after normalize_header()."""
    for name in names:
        wanted = normalize_header(name)
        found = find_column(header, lambda h: normalize_header(h) == wanted)
        if found:
            return found
    return None


def find_containing(header: Sequence[str], fragment: str) -> Optional[str]:
    wanted = fragment.upper()
    return find_column(header, lambda h: wanted in h.upper())


def find_sys_code(header: Sequence[str]) -> Optional[str]:
    return find_column(header, lambda h: alnum_upper(h) == "SYSCODE")


@dataclass
class ColumnMap:
    """Resolved columns for one file."""

    dataset: str
    mode: ReconMode
    header: List[str]
    key: str
    columns: Dict[str, Optional[str]] = field(default_factory=dict)
    _normalized: Dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        for name in self.header:
            if name:
                self._normalized.setdefault(normalize_header(name), name)

    def column(self, logical: str) -> Optional[str]:
        return self.columns.get(logical)

    def value(self, row: Dict[str, str], logical: str) -> str:
        """Raw value of a logical column, '' when the column is absent."""
        name = self.columns.get(logical)
        if name is None:
            return ""
        return row.get(name, "")

    def key_value(self, row: Dict[str, str]) -> str:
        return row.get(self.key, "")

    def lookup(self, row: Dict[str, str], header_name: str) -> Optional[str]:
        """Value of the column whose normalized header equals header_name, None if absent."""
        name = self._normalized.get(normalize_header(header_name))
        if name is None:
            return None
        return row.get(name, "")


def _resolve_tarif(header: Sequence[str], side: str) -> Dict[str, Optional[str]]:
    columns = {
        "origin": find_by_prefix(header, "ORIGIN"),
        "dest": find_by_prefix(header, "DEST"),
    }
    if side == REFERENCE:
        columns.update({
            "service": find_by_prefix(header, "Service REG", "SERVICE"),
            "tarif": find_by_prefix(header, "Tarif REG", "TARIF"),
            "sla_form": find_by_prefix(header, "sla form", "SLA_FORM"),
            "sla_thru": find_by_prefix(header, "sla thru", "SLA_THRU"),
        })
    else:
        columns.update({
            "service": find_by_prefix(header, "SERVICE"),
            "tarif": find_by_prefix(header, "TARIF"),
            "sla_form": find_by_prefix(header, "SLA_FORM"),
            "sla_thru": find_by_prefix(header, "SLA_THRU"),
        })
    return columns


def _resolve_biaya(header: Sequence[str], side: str) -> Dict[str, Optional[str]]:
    columns = {"origin": find_by_prefix(header, "ORIGIN")}
    if side == GOVERNING:
        columns.update({
            "service": find_containing(header, "SERVICE"),
            "BP": find_by_name(header, "BP"),
            "BP NEXT": find_by_name(header, "BP NEXT"),
            "BT": find_by_name(header, "BT"),
            "BD": find_by_name(header, "BD"),
            "BD NEXT": find_by_name(header, "BD NEXT"),
        })
    return columns


def resolve_columns(header: Sequence[str], mode: ReconMode, side: str) -> ColumnMap:
    """
    Resolve a file header into a ColumnMap for the given mode and side.

    Args:
        header: Column names as read from the file
        mode: Reconciliation mode
        side: REFERENCE (Master) or GOVERNING (IT)

    Returns:
        ColumnMap

    Raises:
        MissingColumnError: If a required column is not present
    """
    mode = ReconMode.parse(mode)
    if side not in DATASET_LABELS:
        raise ValueError(f"Unknown dataset side: {side}")
    dataset = DATASET_LABELS[side]
    header = list(header)

    missing = []
    if mode is ReconMode.TARIF:
        key = find_sys_code(header)
        if key is None:
            missing.append("SYS_CODE")
        columns = _resolve_tarif(header, side)
    else:
        key = find_containing(header, "DEST")
        if key is None:
            missing.append("DESTINASI")
        columns = _resolve_biaya(header, side)
        if side == GOVERNING and columns["service"] is None:
            missing.append("SERVICE")

    if missing:
        raise MissingColumnError(dataset, missing, header)

    return ColumnMap(dataset=dataset, mode=mode, header=header, key=key, columns=columns)
