"""
Text decoding and row parsing for IT / Master CSV exports.

Exports come from spreadsheets and legacy systems, so parsing is lenient:
malformed quoting never raises, it only yields a best-effort split.
"""

import codecs
from typing import List

BOM = "\ufeff"

COMMA = ","
SEMICOLON = ";"


def detect_encoding(sample: bytes) -> str:
    """
    Guess the encoding of a file from its first bytes.

    Args:
        sample: Leading bytes of the file (typically the first window)

    Returns:
        Codec name usable with codecs.getincrementaldecoder()
    """
    if sample.startswith(codecs.BOM_UTF8):
        return "utf-8-sig"
    if sample.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return "utf-16"

    # A multibyte character may be cut at the end of the sample
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        decoder.decode(sample, final=False)
        return "utf-8"
    except UnicodeDecodeError:
        return "cp1252"


def strip_bom(text: str) -> str:
    """Remove a leading byte-order mark."""
    if text.startswith(BOM):
        return text[len(BOM):]
    return text


def normalize_newlines(text: str) -> str:
    """Convert \\r\\n and lone \\r line endings to \\n."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def detect_delimiter(header_line: str) -> str:
    """
    Choose the field delimiter from the header line.

    Semicolon wins only when it strictly outnumbers commas.

    Examples:
        >>> detect_delimiter("A;B;C")
        ';'
        >>> detect_delimiter("A,B;C")
        ','
    """
    if header_line.count(SEMICOLON) > header_line.count(COMMA):
        return SEMICOLON
    return COMMA


def _unquote(value: str) -> str:
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def parse_line(line: str, delimiter: str = COMMA) -> List[str]:
    """
    Split one line into fields, honouring double-quoted segments.

    A double quote toggles the in-quotes state and the delimiter only splits
    outside quotes. Each field is trimmed and one leading/trailing quote is
    removed. Doubled quotes ("") inside a field are not unescaped.

    Args:
        line: A single logical line without its newline
        delimiter: Field delimiter

    Returns:
        List of field values

    Examples:
        >>> parse_line('ORIGIN,"A,B",DEST')
        ['ORIGIN', 'A,B', 'DEST']
    """
    fields = []
    start = 0
    in_quotes = False

    for i, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append(line[start:i])
            start = i + 1

    fields.append(line[start:])
    return [_unquote(f) for f in fields]


def build_row(header: List[str], values: List[str]) -> dict:
    """
    Map parsed values onto header names.

    Empty header names are ignored; missing trailing values read as "".
    Returns an empty dict when every cell is empty.
    """
    if not any(v.strip() for v in values):
        return {}

    row = {}
    for idx, name in enumerate(header):
        if name:
            row[name] = values[idx] if idx < len(values) else ""
    return row
