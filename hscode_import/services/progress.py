from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Submission progress bar (tqdm, TTY only).

The bar counts rows and advances once per POSTed batch, showing the batch
number as postfix. Without a terminal (CI, piped output) no bar is created
and only the counters are kept, so log output stays free of control
sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]

BAR_OPTIONS: dict[str, Any] = {
    "disable": False,
    "leave": True,
    "position": 0,
    "ncols": 80,
    "ascii": True,
}


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Row counter with an optional tqdm bar.

    Attributes:
        total: Rows expected
        done: Rows reported through ``update``
        batches: Number of ``update`` calls (one per submitted batch)
    """

    def __init__(self, total: int, *, description: str = "Submitting rows", unit: str = "row") -> None:
        self.total = total
        self.description = description
        self.done = 0
        self.batches = 0
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = (
            tqdm(total=total, desc=description, unit=unit, **BAR_OPTIONS) if self.enabled else None
        )

    @property
    def remaining(self) -> int:
        return max(self.total - self.done, 0)

    def update(self, n: int) -> None:
        """Record a submitted batch of ``n`` rows."""
        self.done += n
        self.batches += 1
        if self.pbar is not None:
            self.pbar.update(n)
            self.pbar.set_postfix(batch=self.batches)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
