from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from hscode_import.excel.reader import (
    SheetHeaderError,
    SheetNotFoundError,
    frame_to_sheet,
    read_sheet,
)

HEADERS = ["HS Code", "Description", "CD", "SD", "RD", "VAT", "AIT", "TTI"]


def test_read_first_sheet_by_default(tmp_path: Path, make_workbook, tax_rows):
    path = make_workbook(tmp_path / "hs.xlsx", {"Tariff": [HEADERS, *tax_rows], "Other": [["x"], [1]]})
    sheet = read_sheet(path)
    assert sheet.sheet_name == "Tariff"
    assert sheet.headers == HEADERS
    assert len(sheet.rows) == 3
    assert sheet.rows[0]["HS Code"] == "0101.21.00"
    assert sheet.file_name == "hs.xlsx"


def test_empty_cells_become_empty_string(tmp_path: Path, make_workbook, tax_rows):
    path = make_workbook(tmp_path / "hs.xlsx", {"Sheet1": [HEADERS, *tax_rows]})
    sheet = read_sheet(path)
    assert sheet.rows[1]["SD"] == ""
    assert sheet.rows[2]["TTI"] == pytest.approx(89.32)


def test_named_sheet(tmp_path: Path, make_workbook, tax_rows):
    path = make_workbook(tmp_path / "hs.xlsx", {"A": [["x"], [1]], "Tariff": [HEADERS, *tax_rows]})
    assert read_sheet(path, sheet="Tariff").headers == HEADERS


def test_missing_sheet_raises(tmp_path: Path, make_workbook):
    path = make_workbook(tmp_path / "hs.xlsx", {"Sheet1": [HEADERS]})
    with pytest.raises(SheetNotFoundError, match="'Nope' not found"):
        read_sheet(path, sheet="Nope")


def test_header_only_sheet_has_no_rows(tmp_path: Path, make_workbook):
    path = make_workbook(tmp_path / "hs.xlsx", {"Sheet1": [HEADERS]})
    sheet = read_sheet(path)
    assert sheet.headers == HEADERS
    assert sheet.rows == []


def test_frame_to_sheet_requires_header_row():
    with pytest.raises(SheetHeaderError):
        frame_to_sheet(pd.DataFrame(), "Empty")


def test_frame_to_sheet_drops_blank_rows_and_strips_headers():
    df = pd.DataFrame([
        [" HS Code ", "VAT", None],
        ["0101", 15, None],
        [None, None, None],
        ["", None, float("nan")],
        ["0102", None, 3],
    ], dtype=object)
    sheet = frame_to_sheet(df, "S")
    assert sheet.headers == ["HS Code", "VAT", ""]
    assert [r["HS Code"] for r in sheet.rows] == ["0101", "0102"]
    assert sheet.rows[1]["VAT"] == ""
    assert sheet.path is None


def test_frame_to_sheet_duplicate_header_first_column_wins():
    df = pd.DataFrame([["VAT", "VAT"], [15, 99]], dtype=object)
    sheet = frame_to_sheet(df, "S")
    assert sheet.rows == [{"VAT": 15}]
    assert sheet.duplicate_headers == ["VAT"]


def test_na_string_is_nan_by_default(tmp_path: Path, make_workbook):
    path = make_workbook(tmp_path / "hs.xlsx", {"Sheet1": [["HSCode", "Description"], ["0101", "NA"]]})
    assert read_sheet(path).rows[0]["Description"] == ""


def test_keep_na_strings_preserves_literal(tmp_path: Path, make_workbook):
    path = make_workbook(tmp_path / "hs.xlsx", {"Sheet1": [["HSCode", "Description"], ["0101", "NA"]]})
    sheet = read_sheet(path, keep_na_strings=["NA"])
    assert sheet.rows[0]["Description"] == "NA"
