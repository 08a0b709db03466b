from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

"""Header string matching: normalization, edit distance and suggestions.

All functions are pure. Comparison of spreadsheet headers against canonical
tax field names always happens on the normalized form:

    normalize_header("  hs_code ") == normalize_header("HS-Code") == "HSCODE"
"""

__all__ = [
    "SUGGESTION_THRESHOLD",
    "normalize_header",
    "levenshtein",
    "best_suggestion",
]

# Max edit distance (after normalization) at which a header is offered as a
# suggestion for a missing field. Ties go to the first candidate in sheet order.
SUGGESTION_THRESHOLD = 2

_WHITESPACE_RE = re.compile(r"\s+")
_SEPARATOR_RE = re.compile(r"[_\-]")


def normalize_header(value: Any) -> str:
    """Canonicalize a raw header: trim, uppercase, drop whitespace, ``-`` and ``_``.

    ``None`` is treated as the empty string, other non-strings are ``str()``-ed.
    Idempotent: ``normalize_header(normalize_header(s)) == normalize_header(s)``.
    """
    if value is None:
        return ""
    text = str(value).strip().upper()
    text = _WHITESPACE_RE.sub("", text)
    return _SEPARATOR_RE.sub("", text)


def levenshtein(a: str, b: str) -> int:
    """Classic Levenshtein distance (insert/delete/substitute cost 1 each)."""
    m, n = len(a), len(b)
    if m == 0:
        return n
    if n == 0:
        return m

    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m + 1):
        dp[i][0] = i
    for j in range(n + 1):
        dp[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            dp[i][j] = min(
                dp[i - 1][j] + 1,
                dp[i][j - 1] + 1,
                dp[i - 1][j - 1] + cost,
            )
    return dp[m][n]


def best_suggestion(
    target: str,
    candidates: Sequence[str] | None,
    threshold: int = SUGGESTION_THRESHOLD,
) -> str | None:
    """Return the candidate closest to ``target`` or ``None``.

    Args:
        target: Canonical field name the suggestion is for
        candidates: Raw headers in sheet order (``None``/empty -> no suggestion)
        threshold: Largest accepted distance between normalized strings

    Returns:
        The raw candidate header (not normalized) with the smallest distance,
        first occurrence winning ties, if that distance is ``<= threshold``.
    """
    if not candidates:
        return None

    wanted = normalize_header(target)
    best_name: str | None = None
    best_score: int | None = None
    for candidate in candidates:
        score = levenshtein(wanted, normalize_header(candidate))
        if best_score is None or score < best_score:
            best_name, best_score = candidate, score

    if best_score is not None and best_score <= threshold:
        return best_name
    return None
