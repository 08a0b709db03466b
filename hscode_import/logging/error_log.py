from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log buffering.

Records collected during a run are written once, as JSON Lines, to
``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC, relative to the working
directory). A run without errors leaves no file behind.
"""

__all__ = [
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects ErrorRecords for one import run.

    The log file name is fixed by the first flush; later flushes append to
    it. Single-threaded use only.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._written: Counter[str] = Counter()
        self._path: Path | None = None

    @property
    def records(self) -> list[ErrorRecord]:
        """Records not yet flushed."""
        return list(self._pending)

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def __len__(self) -> int:
        return len(self._pending)

    def counts(self) -> dict[str, int]:
        """error_type -> number of records, flushed and pending together."""
        totals = Counter(self._written)
        totals.update(r.error_type for r in self._pending)
        return dict(totals)

    def _target(self) -> Path:
        if self._path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self._path = self.logs_dir / f"errors-{datetime.now(UTC).strftime(TIMESTAMP_FMT)}.log"
        return self._path

    def flush(self) -> Path | None:
        """Append pending records to the log file.

        Returns:
            The log file path, or None when nothing was pending
        """
        if not self._pending:
            return None
        path = self._target()
        with path.open("a", encoding="utf-8") as f:
            f.writelines(r.to_json_line() + "\n" for r in self._pending)
        self._written.update(r.error_type for r in self._pending)
        self._pending.clear()
        return path
