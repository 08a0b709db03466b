from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .tax_fields import TaxField

"""HeaderCheckResult model: per-field view of header reconciliation.

Results are computed from the loaded headers and the current header mapping
on every read; they are never stored or mutated independently.
"""

__all__ = [
    "MatchStatus",
    "MatchSource",
    "HeaderCheckResult",
]


class MatchStatus(Enum):
    """Whether a required field is backed by a spreadsheet column.

    - OK: exact normalized match or a mapping entry exists
    - MISSING: neither; recoverable by accepting a suggestion or manual selection
    """
    OK = "OK"
    MISSING = "MISSING"


class MatchSource(Enum):
    """How a mapping entry came to exist."""
    EXACT = "exact"  # auto-populated on load
    SUGGESTED = "suggested"  # user accepted the fuzzy suggestion
    MANUAL = "manual"  # explicit selection / config override


@dataclass(frozen=True)
class HeaderCheckResult:
    """Reconciliation status of one required field.

    Attributes:
        expected: The required tax field
        found: Raw header backing the field, or "-" when missing
        status: OK / MISSING
        suggestion: Closest raw header within the threshold, if any
        message: User-facing text ("Matched" / "Column missing")
        source: Provenance of the backing header (None when unmapped)
    """
    expected: TaxField
    found: str
    status: MatchStatus
    suggestion: str | None = None
    message: str = ""
    source: MatchSource | None = None

    @property
    def ok(self) -> bool:
        return self.status is MatchStatus.OK
