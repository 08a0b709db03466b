from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..models.header_check import HeaderCheckResult, MatchSource, MatchStatus
from ..models.parsed_sheet import ParsedSheet, RawRow
from ..models.projected_row import ProjectedRow
from ..models.tax_fields import REQUIRED_FIELDS, TaxField
from .header_matching import SUGGESTION_THRESHOLD, best_suggestion, normalize_header
from .projection import project_rows

"""Header reconciliation state for one spreadsheet import.

Holds the headers/rows of the most recently loaded sheet and the header
mapping (required field -> raw header). Per-field status is derived on every
read, never cached:

    Unmatched       no mapping entry, no header normalizes to the field name
    Matched-Exact   no mapping entry, some header normalizes to the field name
    Matched-Manual  a mapping entry exists (accepted suggestion / selection)

Transitions: load, accept_suggestion, select, reset. Each transition notifies
subscribed listeners with ``(state, event)`` after the state has changed.

A missing field is not an error; it only withholds the ready predicate.
"""

__all__ = [
    "HeaderReconciliation",
    "Listener",
]

logger = logging.getLogger(__name__)

Listener = Callable[["HeaderReconciliation", str], None]

MESSAGE_MATCHED = "Matched"
MESSAGE_MISSING = "Column missing"
NOT_FOUND = "-"


class HeaderReconciliation:
    """Explicit, caller-owned reconciliation state (one per import session)."""

    def __init__(
        self,
        fields: Sequence[TaxField] = REQUIRED_FIELDS,
        threshold: int = SUGGESTION_THRESHOLD,
    ) -> None:
        self.fields: tuple[TaxField, ...] = tuple(fields)
        self.threshold = threshold
        self._sheet: ParsedSheet | None = None
        self._headers: list[str] = []
        self._rows: list[RawRow] = []
        self._mapping: dict[TaxField, str] = {}
        self._sources: dict[TaxField, MatchSource] = {}
        self._import_confirmed = False
        self._listeners: list[Listener] = []

    # -- state accessors ---------------------------------------------------

    @property
    def sheet(self) -> ParsedSheet | None:
        return self._sheet

    @property
    def headers(self) -> list[str]:
        return list(self._headers)

    @property
    def rows(self) -> list[RawRow]:
        return list(self._rows)

    @property
    def mapping(self) -> dict[TaxField, str]:
        """Copy of the header mapping (required field -> raw header)."""
        return dict(self._mapping)

    @property
    def import_confirmed(self) -> bool:
        return self._import_confirmed

    def source_of(self, field: TaxField) -> MatchSource | None:
        return self._sources.get(field)

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(self, event)

    # -- transitions -------------------------------------------------------

    def load(self, sheet: ParsedSheet) -> None:
        """Replace headers/rows with ``sheet`` and record its exact matches.

        Suggested and manual entries are kept. Exact entries belong to the
        previous sheet and are recomputed: every field without a kept entry
        is auto-populated with the first raw header that matches exactly.
        """
        self._sheet = sheet
        self._headers = list(sheet.headers)
        self._rows = list(sheet.rows)
        self._import_confirmed = False
        for field in [f for f, src in self._sources.items() if src is MatchSource.EXACT]:
            self._mapping.pop(field, None)
            self._sources.pop(field, None)

        for dup in sheet.duplicate_headers:
            logger.warning("duplicate header %r in sheet=%s, first column is used", dup, sheet.sheet_name)

        for field in self.fields:
            if field in self._mapping:
                continue
            exact = self._exact_match(field)
            if exact is not None:
                self._set(field, exact, MatchSource.EXACT)
        logger.debug(
            "loaded sheet=%s headers=%s rows=%d mapping=%s",
            sheet.sheet_name,
            self._headers,
            len(self._rows),
            {f.value: h for f, h in self._mapping.items()},
        )
        self._notify("load")

    def accept_suggestion(self, field: TaxField) -> str | None:
        """Map ``field`` to its current suggestion. No-op if there is none.

        Returns:
            The accepted raw header, or None when no suggestion was available
        """
        suggestion = best_suggestion(field.value, self._candidates(), self.threshold)
        if suggestion is None:
            logger.debug("no suggestion for field=%s", field.value)
            return None
        self._set(field, suggestion, MatchSource.SUGGESTED)
        logger.info("suggestion applied for %s -> %r", field.value, suggestion)
        self._notify("accept_suggestion")
        return suggestion

    def accept_all_suggestions(self) -> dict[TaxField, str]:
        """Accept the suggestion of every currently missing field that has one."""
        accepted: dict[TaxField, str] = {}
        for field in self.missing_fields():
            suggestion = self.accept_suggestion(field)
            if suggestion is not None:
                accepted[field] = suggestion
        return accepted

    def select(self, field: TaxField, header: str | None) -> bool:
        """Manually map ``field`` to ``header``; always overrides.

        A blank ``header`` clears the field's entry instead (the field falls
        back to exact matching).

        Returns:
            True if ``header`` is a column of the loaded sheet. A header that
            is not still maps, with a warning; its cells project to 0.
        """
        if header is None or not str(header).strip():
            self._mapping.pop(field, None)
            self._sources.pop(field, None)
            logger.info("manual mapping cleared for %s", field.value)
            self._notify("select")
            return False
        present = header in self._headers
        if not present:
            logger.warning("manual mapping %s -> %r: header not in loaded sheet", field.value, header)
        self._set(field, header, MatchSource.MANUAL)
        logger.info("manual mapping applied for %s -> %r", field.value, header)
        self._notify("select")
        return present

    def reset(self) -> None:
        """Forget headers, rows, mapping and import confirmation."""
        self._sheet = None
        self._headers = []
        self._rows = []
        self._mapping = {}
        self._sources = {}
        self._import_confirmed = False
        self._notify("reset")

    # -- derived views -----------------------------------------------------

    def _set(self, field: TaxField, header: str, source: MatchSource) -> None:
        self._mapping[field] = header
        self._sources[field] = source

    def _candidates(self) -> list[str]:
        # blank header cells are not columns anyone can pick
        return [h for h in self._headers if normalize_header(h)]

    def _exact_match(self, field: TaxField) -> str | None:
        wanted = normalize_header(field.value)
        for header in self._headers:
            if normalize_header(header) == wanted:
                return header
        return None

    def _is_matched(self, field: TaxField) -> bool:
        return field in self._mapping or self._exact_match(field) is not None

    def check(self, field: TaxField) -> HeaderCheckResult:
        """Compute the HeaderCheckResult of a single field."""
        if field in self._mapping:
            found: str = self._mapping[field]
            source: MatchSource | None = self._sources.get(field, MatchSource.MANUAL)
        else:
            exact = self._exact_match(field)
            found = exact if exact is not None else NOT_FOUND
            source = MatchSource.EXACT if exact is not None else None

        status = MatchStatus.OK if source is not None else MatchStatus.MISSING
        return HeaderCheckResult(
            expected=field,
            found=found,
            status=status,
            suggestion=best_suggestion(field.value, self._candidates(), self.threshold),
            message=MESSAGE_MATCHED if status is MatchStatus.OK else MESSAGE_MISSING,
            source=source,
        )

    def checks(self) -> list[HeaderCheckResult]:
        """Per-field results in field order, recomputed on every call."""
        return [self.check(field) for field in self.fields]

    def missing_fields(self) -> list[TaxField]:
        return [field for field in self.fields if not self._is_matched(field)]

    def is_ready(self) -> bool:
        """True iff every required field is matched (exact or via mapping)."""
        return all(self._is_matched(field) for field in self.fields)

    def resolved_mapping(self) -> dict[TaxField, str]:
        """Mapping entries plus exact matches of fields without an entry."""
        resolved: dict[TaxField, str] = {}
        for field in self.fields:
            if field in self._mapping:
                resolved[field] = self._mapping[field]
                continue
            exact = self._exact_match(field)
            if exact is not None:
                resolved[field] = exact
        return resolved

    def manual_count(self) -> int:
        """Number of fields mapped by suggestion acceptance or manual selection."""
        return sum(
            1 for field in self.fields
            if self._sources.get(field) in (MatchSource.SUGGESTED, MatchSource.MANUAL)
        )

    # -- import gate -------------------------------------------------------

    def confirm_import(self) -> bool:
        """Open the projection gate if (and only if) the state is ready."""
        if not self.is_ready():
            logger.debug("import not confirmed, missing=%s", [f.value for f in self.missing_fields()])
            return False
        self._import_confirmed = True
        return True

    def projected_rows(self) -> list[ProjectedRow]:
        """Full projection of the loaded rows; empty until the gate is open."""
        if not self._import_confirmed or not self.is_ready():
            return []
        return project_rows(self._rows, self._mapping, self.fields)
