from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..models.parsed_sheet import RawRow
from ..models.projected_row import ProjectedRow
from ..models.tax_fields import REQUIRED_FIELDS, TaxField

"""Row projection: raw spreadsheet rows -> fixed-shape ProjectedRow records.

Callers are expected to check the reconciliation ready predicate first. With
an incomplete mapping the projector still does not raise: unmapped fields
fall back to their canonical name as column key, which usually yields 0.
"""

__all__ = [
    "EMPTY_DEFAULT",
    "FIRST_DATA_ROW",
    "project_row",
    "project_rows",
]

# Substituted for undefined / None / "" cells
EMPTY_DEFAULT = 0

# Spreadsheet row number of rows[0] (row 1 holds the headers)
FIRST_DATA_ROW = 2


def _cell_value(raw: RawRow, key: str) -> Any:
    val = raw.get(key)
    if val is None or (isinstance(val, str) and val == ""):
        return EMPTY_DEFAULT
    return val


def project_row(
    raw: RawRow,
    row_index: int,
    mapping: Mapping[TaxField, str],
    fields: Sequence[TaxField] = REQUIRED_FIELDS,
) -> ProjectedRow:
    """Project a single raw row. See ``project_rows``."""
    values: dict[TaxField, Any] = {}
    for field in fields:
        column = mapping.get(field) or field.value
        values[field] = _cell_value(raw, column)
    return ProjectedRow(row_index=row_index, values=values)


def project_rows(
    raw_rows: Iterable[RawRow],
    mapping: Mapping[TaxField, str],
    fields: Sequence[TaxField] = REQUIRED_FIELDS,
) -> list[ProjectedRow]:
    """Map every raw row onto the required fields.

    Args:
        raw_rows: Rows keyed by raw header, in sheet order
        mapping: Required field -> raw header (missing entries fall back to
            the field's canonical name)
        fields: Fields to project, in output order

    Returns:
        One ProjectedRow per raw row; ``row_index`` of the first is 2
    """
    return [
        project_row(raw, idx + FIRST_DATA_ROW, mapping, fields)
        for idx, raw in enumerate(raw_rows)
    ]
