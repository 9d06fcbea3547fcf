"""
Value normalization rules shared by key building and field comparison.
"""

import re
from typing import Any, Mapping, Optional

_NON_DIGIT = re.compile(r"\D")


def normalize_key(value: Any) -> str:
    """Trim and uppercase a key value; None becomes ''."""
    if value is None:
        return ""
    return str(value).strip().upper()


def normalize_text(value: Any) -> str:
    """Uppercase with all whitespace removed, for string comparisons."""
    if value is None:
        return ""
    return "".join(str(value).split()).upper()


def parse_number(value: Any) -> int:
    """
    Parse a numeric cell by dropping every non-digit character.

    "80,000", "80.000", " 80000 " all parse to 80000. Signs and decimal
    separators are discarded; empty or digit-less values parse to 0.
    """
    if value is None:
        return 0
    digits = _NON_DIGIT.sub("", str(value))
    return int(digits) if digits else 0


def normalize_service_family(code: Any, table: Optional[Mapping[str, str]] = None) -> str:
    """
    Collapse a raw service code into its canonical family.

    Codes absent from the table map to themselves (uppercased, no whitespace).

    Examples:
        >>> normalize_service_family(" reg19 ", {"REG19": "REG23"})
        'REG23'
        >>> normalize_service_family("OKE23", {})
        'OKE23'
    """
    compact = normalize_text(code)
    if table:
        return table.get(compact, compact)
    return compact
