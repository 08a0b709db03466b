from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

import requests

from ..api.submit import SubmissionError, submit_rows
from ..excel.reader import read_sheet
from ..excel.writer import write_rows_json, write_rows_xlsx
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig
from ..models.error_record import ErrorRecord
from ..models.import_result import ImportResult
from ..models.parsed_sheet import ParsedSheet
from ..models.tax_fields import TaxField
from .progress import ProgressTracker
from .reconciliation import HeaderReconciliation

"""Service orchestration for one HS code import run.

read workbook -> load into HeaderReconciliation -> apply manual mappings
(config header_overrides, then caller overrides) -> optionally accept all
suggestions -> gate on the ready predicate -> project rows -> write outputs
-> optionally submit over HTTP.

Unmatched headers are not an exception here: the run returns an ImportResult
with ``ready=False`` and one HEADER_MISSING error record per missing field.
"""

logger = logging.getLogger(__name__)

class ProcessingError(Exception):
    """Fatal problem that prevents an import run (unreadable input, bad setup)."""
    pass


def load_workbook(config: ImportConfig, error_log: ErrorLogBuffer | None = None) -> ParsedSheet:
    """Read the configured workbook/sheet.

    Raises:
        ProcessingError: If the file is missing or cannot be parsed
    """
    path = Path(config.source_file)
    if not path.exists():
        raise ProcessingError(f"source file not found: {path}")
    if not path.is_file():
        raise ProcessingError(f"source path is not a file: {path}")
    try:
        return read_sheet(path, sheet=config.sheet, keep_na_strings=config.keep_na_strings)
    except Exception as e:
        # SheetReadError as well as whatever pandas/openpyxl raise for corrupt files
        if error_log is not None:
            error_log.append(ErrorRecord.read_error(path.name, config.sheet, str(e)))
        raise ProcessingError(f"cannot read {path.name}: {e}") from e


def apply_mappings(
    state: HeaderReconciliation,
    config: ImportConfig,
    overrides: Mapping[TaxField, str] | None = None,
    accept_suggestions: bool = False,
) -> None:
    """Apply manual selections (config first, caller overrides win) and suggestions."""
    for field, header in config.header_overrides.items():
        state.select(field, header)
    for field, header in (overrides or {}).items():
        state.select(field, header)
    if accept_suggestions:
        accepted = state.accept_all_suggestions()
        if accepted:
            logger.debug("accepted suggestions: %s", {f.value: h for f, h in accepted.items()})


def _flush(error_log: ErrorLogBuffer) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning("could not write error log: %s", e)
        return
    if path is not None:
        counts = ", ".join(f"{k}={v}" for k, v in sorted(error_log.counts().items()))
        logger.info("error log written: %s (%s)", path, counts)


def run_import(
    config: ImportConfig,
    overrides: Mapping[TaxField, str] | None = None,
    accept_suggestions: bool = False,
    submit: bool = False,
    *,
    state: HeaderReconciliation | None = None,
    error_log: ErrorLogBuffer | None = None,
    session: requests.Session | None = None,
) -> ImportResult:
    """Run one import.

    Args:
        config: Import configuration
        overrides: Extra manual selections (field -> raw header), applied after
            config.header_overrides
        accept_suggestions: Accept the suggestion of every missing field
        submit: POST projected rows to config.submission.url
        state: Reconciliation state to use (a fresh one by default); it is
            reset before loading
        error_log: Error log buffer (flushed before returning)
        session: requests session for submission

    Returns:
        ImportResult; ``ready`` False if required fields stayed unmatched,
        ``submission_error`` set if the HTTP submission failed

    Raises:
        ProcessingError: Unreadable input, or submission requested without URL
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    if submit and not config.submission.url:
        raise ProcessingError("submission requested but no submission url configured")

    try:
        sheet = load_workbook(config, error_log)
    except ProcessingError:
        _flush(error_log)
        raise
    logger.info(
        "read file=%s sheet=%s headers=%d rows=%d",
        sheet.file_name, sheet.sheet_name, len(sheet.headers), len(sheet.rows),
    )

    if state is None:
        state = HeaderReconciliation(threshold=config.suggestion_threshold)
    else:
        state.reset()
    state.load(sheet)
    apply_mappings(state, config, overrides, accept_suggestions)
    checks = state.checks()

    def _result(**kwargs) -> ImportResult:
        end_time = datetime.now(UTC)
        return ImportResult(
            file_name=sheet.file_name,
            sheet_name=sheet.sheet_name,
            checks=checks,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
            manual_mappings=state.manual_count(),
            **kwargs,
        )

    if not state.confirm_import():
        for check in checks:
            if check.ok:
                continue
            error_log.append(ErrorRecord.header_missing(
                sheet.file_name, sheet.sheet_name, check.expected.value, check.suggestion,
            ))
        _flush(error_log)
        return _result(ready=False)

    rows = state.projected_rows()
    outputs: dict[str, Path] = {}
    if config.output.xlsx:
        outputs["xlsx"] = write_rows_xlsx(rows, Path(config.output.xlsx))
        logger.info("wrote %d rows to %s", len(rows), outputs["xlsx"])
    if config.output.json:
        outputs["json"] = write_rows_json(rows, Path(config.output.json))
        logger.info("wrote %d rows to %s", len(rows), outputs["json"])

    submitted = 0
    submission_error: str | None = None
    batch_stats = (0, 0.0, 0.0)
    if submit:
        sub = config.submission
        try:
            with ProgressTracker(len(rows), description="Submitting rows") as progress:
                sub_result = submit_rows(
                    rows,
                    sub.url,  # type: ignore[arg-type]  # checked above
                    session=session,
                    timeout=sub.timeout,
                    batch_size=sub.batch_size,
                    headers=sub.headers,
                    progress=progress,
                )
            submitted = sub_result.submitted_rows
            batch_stats = (sub_result.total_batches, sub_result.avg_batch_seconds, sub_result.p95_batch_seconds)
            logger.info("submitted %d rows in %d request(s)", submitted, sub_result.total_batches)
        except SubmissionError as e:
            submitted = e.submitted_rows
            submission_error = str(e)
            logger.error("submission: %s", e)
            error_log.append(ErrorRecord.submission_error(sheet.file_name, sheet.sheet_name, str(e)))

    _flush(error_log)
    return _result(
        ready=True,
        rows=rows,
        outputs=outputs,
        submitted_rows=submitted,
        submission_error=submission_error,
        total_batches=batch_stats[0],
        avg_batch_seconds=batch_stats[1],
        p95_batch_seconds=batch_stats[2],
    )
