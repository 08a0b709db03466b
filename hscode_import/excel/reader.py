from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from ..models.parsed_sheet import ParsedSheet, RawRow

"""Excel reader for HS code sheets.

Row 1 is the header row, data starts at row 2. Structural problems (no
sheets, no header row) are raised here so that header reconciliation only
ever sees a well-formed ParsedSheet.

pandas (openpyxl engine) does the parsing; empty cells are normalized to ""
and rows where every cell is empty are dropped.
"""

__all__ = [
    "SheetReadError",
    "SheetNotFoundError",
    "SheetHeaderError",
    "read_excel_frame",
    "frame_to_sheet",
    "read_sheet",
]


class SheetReadError(Exception):
    """Base class for unreadable / malformed workbook input."""


class SheetNotFoundError(SheetReadError):
    """Raised when the workbook has no sheets or the named sheet is absent."""


class SheetHeaderError(SheetReadError):
    """Raised when the header row (1st line) is missing."""


def _cell(val: Any) -> Any:
    if val is None:
        return ""
    try:
        if pd.isna(val):
            return ""
    except (TypeError, ValueError):  # list-like cell values
        return val
    return val


def read_excel_frame(
    path: Path, sheet: str | None = None, keep_na_strings: list[str] | None = None
) -> tuple[str, pd.DataFrame]:
    """Read one worksheet raw (no header inference).

    Parameters
    ----------
    path: workbook path
    sheet: sheet name; None selects the first sheet
    keep_na_strings: strings pandas must keep verbatim instead of NaN (e.g. ['NA'])

    Returns
    -------
    (sheet name, DataFrame with header=None)
    """
    # pandas._libs.parsers.STR_NA_VALUES holds the default NA string set
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        na_values = list(parsers.STR_NA_VALUES - set(keep_na_strings))
        keep_default_na = False
    else:
        na_values = None
        keep_default_na = True

    xls = pd.ExcelFile(path)
    names = [str(n) for n in xls.sheet_names]
    if not names:
        raise SheetNotFoundError(f"no sheet found in workbook: {path.name}")
    if sheet is None:
        name = names[0]
    elif sheet in names:
        name = sheet
    else:
        raise SheetNotFoundError(f"sheet '{sheet}' not found in {path.name} (sheets: {names})")

    df = xls.parse(
        name,
        header=None,
        dtype=object,
        keep_default_na=keep_default_na,
        na_values=na_values,
    )
    return name, df


def frame_to_sheet(df: pd.DataFrame, sheet_name: str, path: Path | None = None) -> ParsedSheet:
    """Turn a raw (header=None) DataFrame into a ParsedSheet.

    Steps:
    1. Validate at least 1 row exists (the header)
    2. Header cells -> stripped strings ("" for blank cells)
    3. Remaining rows -> dicts keyed by header, empty cells -> ""
    4. Drop rows whose cells are all empty
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")

    headers = [str(_cell(c)).strip() for c in df.iloc[0].tolist()]
    rows: list[RawRow] = []
    for _, raw in df.iloc[1:].iterrows():
        cells = [_cell(v) for v in raw.tolist()]
        if all(c == "" for c in cells):
            continue
        row: RawRow = {}
        for header, val in zip(headers, cells, strict=False):
            # duplicate header names: first column wins
            if header in row:
                continue
            row[header] = val
        rows.append(row)
    return ParsedSheet(headers=headers, rows=rows, sheet_name=sheet_name, path=path)


def read_sheet(
    path: Path, sheet: str | None = None, keep_na_strings: list[str] | None = None
) -> ParsedSheet:
    """Read the first (or named) worksheet of ``path`` into a ParsedSheet.

    Raises:
        SheetNotFoundError: No sheets / named sheet missing
        SheetHeaderError: Worksheet is completely empty
    """
    name, df = read_excel_frame(path, sheet=sheet, keep_na_strings=keep_na_strings)
    return frame_to_sheet(df, name, path=path)
