from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .tax_fields import TaxField

"""ProjectedRow model: one fixed-shape tax line ready for export/submission.

A ProjectedRow holds exactly one value per required tax field, read from the
spreadsheet column the header mapping resolved for that field, plus the
spreadsheet row number it came from.
"""

__all__ = [
    "ProjectedRow",
    "ROW_INDEX_KEY",
]

ROW_INDEX_KEY = "__rowIndex"


@dataclass(frozen=True)
class ProjectedRow:
    """Fully resolved tax line.

    The row_index refers to the spreadsheet row (header is row 1, so the
    first data row is 2). Empty cells have already been replaced by 0;
    other cell values are passed through without coercion.
    """
    row_index: int
    values: Mapping[TaxField, Any]

    def __post_init__(self) -> None:
        # read-only copy: the caller's dict stays detached from the row
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, field: TaxField) -> Any:
        return self.values[field]

    def as_payload(self) -> dict[str, Any]:
        """Field-name keyed dict without the row index (HTTP / JSON shape)."""
        return {field.value: value for field, value in self.values.items()}

    def as_record(self) -> dict[str, Any]:
        """Field-name keyed dict including ``__rowIndex`` for traceability."""
        record = self.as_payload()
        record[ROW_INDEX_KEY] = self.row_index
        return record
