"""
Unit tests for header resolution.
"""

import pytest

from tarifcheck.core.exceptions import MissingColumnError
from tarifcheck.engine.columns import (
    GOVERNING,
    REFERENCE,
    alnum_upper,
    find_by_prefix,
    normalize_header,
    resolve_columns,
)
from tarifcheck.engine.models import ReconMode


class TestHeaderHelpers:
    """Tests for header normalization helpers."""

    def test_alnum_upper(self):
        assert alnum_upper(" Sys_Code ") == "SYSCODE"

    def test_normalize_header(self):
        assert normalize_header("bp_next  reg23") == "BP NEXT REG23"

    def test_prefix_priority(self):
        """Earlier prefixes win even when a later one matches an earlier column."""
        header = ["SERVICE", "Service REG"]
        assert find_by_prefix(header, "Service REG", "SERVICE") == "Service REG"


class TestResolveTarif:
    """Tests for TARIF header resolution."""

    def test_reference_header(self):
        header = ["ORIGIN", "DEST", "SYS_CODE", "Service REG", "Tarif REG", "sla form REG", "sla thru REG"]
        cols = resolve_columns(header, ReconMode.TARIF, REFERENCE)

        assert cols.dataset == "Master"
        assert cols.key == "SYS_CODE"
        assert cols.column("service") == "Service REG"
        assert cols.column("tarif") == "Tarif REG"
        assert cols.column("sla_form") == "sla form REG"
        assert cols.column("sla_thru") == "sla thru REG"

    def test_sys_code_spelling_variants(self):
        for name in ("Sys Code", "sys_code", "SYSCODE", "Sys-Code"):
            cols = resolve_columns(["ORIGIN", name], ReconMode.TARIF, GOVERNING)
            assert cols.key == name

    def test_missing_key_column(self):
        with pytest.raises(MissingColumnError) as exc_info:
            resolve_columns(["ORIGIN", "DEST", "TARIF"], ReconMode.TARIF, GOVERNING)

        assert exc_info.value.dataset == "IT"
        assert exc_info.value.missing == ["SYS_CODE"]
        assert "DEST" in exc_info.value.available
        assert exc_info.value.code == "MISSING_COLUMN"

    def test_optional_columns_absent(self):
        cols = resolve_columns(["SYS_CODE"], ReconMode.TARIF, GOVERNING)
        assert cols.column("tarif") is None
        assert cols.value({"SYS_CODE": "X"}, "tarif") == ""


class TestResolveBiaya:
    """Tests for BIAYA header resolution."""

    def test_governing_header(self):
        header = ["ORIGIN", "DESTINASI", "SERVICE", "BT", "BD", "BD NEXT", "BP", "BP NEXT"]
        cols = resolve_columns(header, ReconMode.BIAYA, GOVERNING)

        assert cols.key == "DESTINASI"
        assert cols.column("service") == "SERVICE"
        assert cols.column("BP") == "BP"
        assert cols.column("BP NEXT") == "BP NEXT"
        assert cols.column("BD NEXT") == "BD NEXT"

    def test_dest_found_by_substring(self):
        cols = resolve_columns(["Kode Destination", "ZONA"], ReconMode.BIAYA, REFERENCE)
        assert cols.key == "Kode Destination"

    def test_governing_requires_service(self):
        with pytest.raises(MissingColumnError) as exc_info:
            resolve_columns(["DESTINASI", "BP"], ReconMode.BIAYA, GOVERNING)
        assert exc_info.value.missing == ["SERVICE"]

    def test_reference_missing_destination(self):
        with pytest.raises(MissingColumnError) as exc_info:
            resolve_columns(["ZONA", "BP REG23"], ReconMode.BIAYA, REFERENCE)
        assert exc_info.value.dataset == "Master"
        assert exc_info.value.missing == ["DESTINASI"]

    def test_lookup_by_normalized_name(self):
        cols = resolve_columns(["DESTINASI", "bp_next reg23"], ReconMode.BIAYA, REFERENCE)
        row = {"DESTINASI": "AMI", "bp_next reg23": "700"}

        assert cols.lookup(row, "BP NEXT REG23") == "700"
        assert cols.lookup(row, "BP NEXT OKE23") is None

    def test_unknown_side(self):
        with pytest.raises(ValueError):
            resolve_columns(["DESTINASI"], ReconMode.BIAYA, "other")
