from __future__ import annotations

from collections.abc import Iterable

from ..models.header_check import HeaderCheckResult
from ..models.import_result import ImportResult

"""Summary and header-check line rendering for CLI output.

SUMMARY line format:

    SUMMARY file={name} ready={yes|no} fields={ok}/{total} manual={n}
    rows={rows} submitted={n} elapsed_sec={elapsed}

(one line; the ``SUMMARY`` label itself is added by the logger.)
"""

__all__ = [
    "format_seconds",
    "render_check_line",
    "render_check_lines",
    "render_summary_line",
]


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation or trailing zeros."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_check_line(check: HeaderCheckResult) -> str:
    """One row of the header check table.

    Examples:
        HSCode       OK       HS Code              (exact)
        VAT          MISSING  -                    Column missing, suggestion: 'VATT'
    """
    line = f"{check.expected.value:<12} {check.status.value:<8} {check.found:<20}"
    if check.ok:
        source = check.source.value if check.source is not None else "exact"
        return f"{line} ({source})".rstrip()
    if check.suggestion is not None:
        return f"{line} {check.message}, suggestion: {check.suggestion!r}"
    return f"{line} {check.message}, no suggestion"


def render_check_lines(checks: Iterable[HeaderCheckResult]) -> list[str]:
    return [render_check_line(c) for c in checks]


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line content (without the label) for ``result``."""
    return (
        f"file={result.file_name} "
        f"ready={'yes' if result.ready else 'no'} "
        f"fields={result.matched_fields}/{result.total_fields} "
        f"manual={result.manual_mappings} "
        f"rows={len(result.rows)} "
        f"submitted={result.submitted_rows} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
