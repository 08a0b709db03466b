from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

"""ParsedSheet domain model: the reader's output and the core's only input.

Header is row 1 of the sheet, data starts at row 2. Rows that were entirely
empty have already been removed by the reader, so ``rows[0]`` is always the
first non-empty data row.
"""

__all__ = [
    "RawRow",
    "ParsedSheet",
]

# Raw header text -> cell value ("" for empty cells)
RawRow = dict[str, Any]


@dataclass(frozen=True)
class ParsedSheet:
    """Headers and rows of one worksheet, in sheet order.

    Attributes:
        headers: Raw header strings (stripped; blank cells become "")
        rows: Data rows keyed by raw header
        sheet_name: Worksheet the data came from
        path: Workbook path, when read from disk
    """
    headers: list[str] = field(default_factory=list)
    rows: list[RawRow] = field(default_factory=list)
    sheet_name: str = ""
    path: Path | None = None

    @property
    def file_name(self) -> str:
        return self.path.name if self.path is not None else "<memory>"

    @property
    def duplicate_headers(self) -> list[str]:
        """Header strings appearing more than once (first column wins)."""
        seen: set[str] = set()
        dups: list[str] = []
        for h in self.headers:
            if h in seen and h not in dups:
                dups.append(h)
            seen.add(h)
        return dups
