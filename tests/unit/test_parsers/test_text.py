"""
Unit tests for text decoding and row parsing.
"""

import codecs

import pytest

from tarifcheck.parsers.text import (
    build_row,
    detect_delimiter,
    detect_encoding,
    normalize_newlines,
    parse_line,
    strip_bom,
)


class TestDetectDelimiter:
    """Tests for detect_delimiter."""

    def test_semicolon_header(self):
        """Header with only semicolons selects ';'."""
        assert detect_delimiter("A;B;C") == ";"

    def test_comma_header(self):
        """Header with only commas selects ','."""
        assert detect_delimiter("A,B,C") == ","

    def test_tie_prefers_comma(self):
        """Semicolon must strictly outnumber commas."""
        assert detect_delimiter("A;B,C") == ","

    def test_no_delimiter_defaults_to_comma(self):
        assert detect_delimiter("SYS_CODE") == ","


class TestParseLine:
    """Tests for parse_line."""

    def test_quoted_delimiter_not_split(self):
        """Delimiters inside quotes are kept in the field."""
        assert parse_line('ORIGIN,"A,B",DEST', ",") == ["ORIGIN", "A,B", "DEST"]

    def test_fields_are_trimmed(self):
        assert parse_line("  A , B ,C  ", ",") == ["A", "B", "C"]

    def test_semicolon_delimiter(self):
        assert parse_line('X;"1,5";Y', ";") == ["X", "1,5", "Y"]

    def test_empty_fields_preserved(self):
        assert parse_line("A,,C,", ",") == ["A", "", "C", ""]

    def test_unbalanced_quote_does_not_raise(self):
        """Malformed quoting yields a best-effort split."""
        fields = parse_line('A,"B,C', ",")
        assert fields[0] == "A"
        assert len(fields) == 2

    def test_doubled_quotes_not_unescaped(self):
        """Only one leading and one trailing quote is removed."""
        assert parse_line('"say ""hi"""', ",") == ['say ""hi""']


class TestNormalization:
    """Tests for BOM and newline handling."""

    def test_strip_bom(self):
        assert strip_bom("\ufeffA,B") == "A,B"

    def test_strip_bom_only_leading(self):
        assert strip_bom("A\ufeff") == "A\ufeff"

    def test_normalize_newlines(self):
        assert normalize_newlines("a\r\nb\rc\nd") == "a\nb\nc\nd"


class TestDetectEncoding:
    """Tests for detect_encoding."""

    def test_utf8_bom(self):
        assert detect_encoding(codecs.BOM_UTF8 + b"A,B") == "utf-8-sig"

    def test_utf16_bom(self):
        assert detect_encoding("A,B".encode("utf-16")) == "utf-16"

    def test_plain_utf8(self):
        assert detect_encoding("KOTA,BANDUNG".encode("utf-8")) == "utf-8"

    def test_truncated_multibyte_still_utf8(self):
        """A multibyte character cut at the end of the sample is tolerated."""
        data = "é".encode("utf-8")
        assert detect_encoding(b"A," + data[:1]) == "utf-8"

    def test_invalid_utf8_falls_back_to_cp1252(self):
        assert detect_encoding(b"A,\xe9t\xe9,B") == "cp1252"


class TestBuildRow:
    """Tests for build_row."""

    def test_maps_values_to_header(self):
        assert build_row(["A", "B"], ["1", "2"]) == {"A": "1", "B": "2"}

    def test_missing_trailing_values_are_empty(self):
        assert build_row(["A", "B", "C"], ["1"]) == {"A": "1", "B": "", "C": ""}

    def test_all_empty_row_dropped(self):
        assert build_row(["A", "B"], ["", "  "]) == {}

    def test_empty_header_names_ignored(self):
        assert build_row(["A", "", "C"], ["1", "2", "3"]) == {"A": "1", "C": "3"}
