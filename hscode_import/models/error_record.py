from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the structured error log.

One record per problem that stopped (part of) an import: a required field
left unmatched, an unreadable workbook, a failed submission. Serialized as a
single JSON Lines entry with a fixed key set.
"""

__all__ = [
    "ErrorRecord",
    "HEADER_ROW",
    "UNKNOWN_ROW",
    "FILE_LEVEL",
    "HEADER_MISSING",
    "READ_ERROR",
    "SUBMISSION_ERROR",
]

# Row number used for header problems (headers live in row 1)
HEADER_ROW = 1
# Row number used when the problem is not tied to a row
UNKNOWN_ROW = -1
# Sheet name used when the workbook could not be opened far enough to know it
FILE_LEVEL = "<FILE_LEVEL>"

HEADER_MISSING = "HEADER_MISSING"
READ_ERROR = "READ_ERROR"
SUBMISSION_ERROR = "SUBMISSION_ERROR"


def _utc_stamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Workbook file name
        sheet: Sheet name, FILE_LEVEL if unknown
        row: Spreadsheet row number, 1 for header problems, -1 when unknown
        error_type: UPPER_SNAKE_CASE classification
        message: Human-readable description
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a record stamped with the current UTC time."""
        return ErrorRecord(_utc_stamp(), file, sheet, row, error_type, message)

    @classmethod
    def header_missing(cls, file: str, sheet: str, field: str, suggestion: str | None = None) -> ErrorRecord:
        hint = f" (suggestion: {suggestion!r})" if suggestion else ""
        return cls.create(file, sheet, HEADER_ROW, HEADER_MISSING, f"required column '{field}' not found{hint}")

    @classmethod
    def read_error(cls, file: str, sheet: str | None, message: str) -> ErrorRecord:
        return cls.create(file, sheet or FILE_LEVEL, UNKNOWN_ROW, READ_ERROR, message)

    @classmethod
    def submission_error(cls, file: str, sheet: str, message: str) -> ErrorRecord:
        return cls.create(file, sheet, UNKNOWN_ROW, SUBMISSION_ERROR, message)

    def to_json_line(self) -> str:
        # asdict keeps the key set fixed to the dataclass fields
        return json.dumps(asdict(self), ensure_ascii=False)
