"""
tarifcheck parsers - text decoding, row parsing and chunked reading.

Architecture:
- text: BOM/newline normalization, delimiter detection, quote-aware split
- ChunkedCsvReader: windowed, forward-only Raw Row stream with progress
"""

from .text import (
    detect_encoding,
    strip_bom,
    normalize_newlines,
    detect_delimiter,
    parse_line,
    build_row,
)
from .chunked_reader import ChunkedCsvReader

__all__ = [
    'detect_encoding',
    'strip_bom',
    'normalize_newlines',
    'detect_delimiter',
    'parse_line',
    'build_row',
    'ChunkedCsvReader',
]
