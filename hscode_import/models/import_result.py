from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .header_check import HeaderCheckResult
from .projected_row import ProjectedRow

"""Import result models for the HS code importer.

ImportResult aggregates one run (read -> reconcile -> project -> export ->
submit) for the SUMMARY line and the CLI exit code. BatchStatsAccumulator
summarises submission request timings.
"""


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a single import run.

    ``ready`` False means header reconciliation left required fields missing:
    no rows were projected, written or submitted in that case.
    """
    file_name: str
    sheet_name: str
    ready: bool
    checks: list[HeaderCheckResult]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    rows: list[ProjectedRow] = field(default_factory=list)
    manual_mappings: int = 0  # fields resolved by suggestion / manual selection
    outputs: dict[str, Path] = field(default_factory=dict)  # format -> written file
    submitted_rows: int = 0
    submission_error: str | None = None
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0

    @property
    def matched_fields(self) -> int:
        return sum(1 for c in self.checks if c.ok)

    @property
    def total_fields(self) -> int:
        return len(self.checks)

    @property
    def submission_failed(self) -> bool:
        return self.submission_error is not None


class BatchStatsAccumulator:
    """Accumulates per-request timings of a batched submission."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        """Add a batch timing measurement."""
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            # 95th percentile = 19th of 20 quantiles
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
