from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from ..models.projected_row import ProjectedRow
from ..models.tax_fields import EXPORT_COLUMNS

"""Writers for projected HS code rows (rows in, file out).

Only the shape of ProjectedRow is relied upon; the sheet carries a bold,
centred header row and thin borders, nothing more.
"""

__all__ = [
    "SHEET_TITLE",
    "write_rows_xlsx",
    "write_rows_json",
]

SHEET_TITLE = "HS Codes"

_COLUMN_WIDTHS = {"HS Code": 15, "Description": 45}
_DEFAULT_WIDTH = 8

_thin = Side(border_style="thin", color="000000")
_THIN_BORDER = Border(top=_thin, left=_thin, bottom=_thin, right=_thin)


def write_rows_xlsx(rows: Sequence[ProjectedRow], path: Path) -> Path:
    """Write rows to a single-sheet workbook at ``path`` (parents created)."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append([label for _, label in EXPORT_COLUMNS])
    for row in rows:
        ws.append([row.values.get(field, "") for field, _ in EXPORT_COLUMNS])

    for idx, (_, label) in enumerate(EXPORT_COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = _COLUMN_WIDTHS.get(label, _DEFAULT_WIDTH)

    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center", vertical="center")
    for excel_row in ws.iter_rows(min_row=1, max_row=ws.max_row, max_col=len(EXPORT_COLUMNS)):
        for cell in excel_row:
            cell.border = _THIN_BORDER

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def write_rows_json(rows: Sequence[ProjectedRow], path: Path) -> Path:
    """Write the submission payload (records without row index) as JSON."""
    payload = [r.as_payload() for r in rows]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
    return path
