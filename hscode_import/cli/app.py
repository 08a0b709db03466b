from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..logging.init import get_logger, log_summary, set_debug, setup_logging
from ..models.config_models import ImportConfig
from ..models.header_check import HeaderCheckResult
from ..models.tax_fields import TaxField
from ..services.orchestrator import ProcessingError, apply_mappings, load_workbook, run_import
from ..services.reconciliation import HeaderReconciliation
from ..services.summary import render_check_line, render_summary_line

"""CLI entrypoint: ``hscode-import`` / ``python -m hscode_import.cli``.

Flow:
- Load .env (overriding) and the YAML config
- Read the workbook, reconcile its headers against the tax field schema
- Print the header check table
- If every field is matched: project rows, write outputs, optionally submit
- Finish with a SUMMARY line

Exit codes: 0 success, 1 fatal (config / unreadable input), 2 headers not
reconciled, 3 submission failed.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NOT_READY = 2
EXIT_SUBMISSION_FAILED = 3

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env via python-dotenv; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="hscode-import",
        description="Import an HS code / tax-line spreadsheet with header reconciliation",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file")
    p.add_argument("--file", type=Path, help="Workbook to import (overrides source_file)")
    p.add_argument("--sheet", help="Sheet name (overrides config; default first sheet)")
    p.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="FIELD=HEADER",
        help="Manually map a required field to a spreadsheet header (repeatable)",
    )
    p.add_argument("--accept-suggestions", action="store_true", help="Accept suggestions for all missing fields")
    p.add_argument("--check-headers", action="store_true", help="Print the header check table then exit")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    p.add_argument("--submit", action="store_true", help="POST projected rows to the configured endpoint")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _parse_map_args(values: list[str]) -> dict[TaxField, str]:
    """Parse ``FIELD=HEADER`` pairs.

    Raises:
        ValueError: Missing '=' or unknown field name
    """
    overrides: dict[TaxField, str] = {}
    for item in values:
        name, sep, header = item.partition("=")
        if not sep:
            raise ValueError(f"expected FIELD=HEADER, got {item!r}")
        overrides[TaxField.parse(name.strip())] = header.strip()
    return overrides


def _log_checks(checks: list[HeaderCheckResult]) -> None:
    logger = get_logger()
    for check in checks:
        line = render_check_line(check)
        if check.ok:
            logger.info(line)
        else:
            logger.warning(line)


def _inspect_data(cfg: ImportConfig) -> int:
    try:
        sheet = load_workbook(cfg)
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {sheet.file_name}")
    print(f"  SHEET: {sheet.sheet_name} cols={sheet.headers}")
    safe_rows = []
    for r in sheet.rows[:INSPECT_SAMPLE_ROWS]:
        # datetime cells are not JSON/repr friendly
        safe_rows.append({k: (v.isoformat() if hasattr(v, 'isoformat') else v) for k, v in r.items()})
    print("    sample_rows=", safe_rows)
    return EXIT_SUCCESS


def _check_headers(cfg: ImportConfig, overrides: dict[TaxField, str], accept_suggestions: bool) -> int:
    logger = get_logger()
    try:
        sheet = load_workbook(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    state = HeaderReconciliation(threshold=cfg.suggestion_threshold)
    state.load(sheet)
    apply_mappings(state, cfg, overrides, accept_suggestions)
    _log_checks(state.checks())
    return EXIT_SUCCESS if state.is_ready() else EXIT_NOT_READY


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] (tests) must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    _load_env_file(Path('.env'), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.file is not None:
        cfg = dataclasses.replace(cfg, source_file=str(args.file))
    if args.sheet is not None:
        cfg = dataclasses.replace(cfg, sheet=args.sheet)

    try:
        overrides = _parse_map_args(args.map)
    except ValueError as e:
        logger.error(f"map: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Importing: {cfg.source_file}")

    if args.check_headers:
        return _check_headers(cfg, overrides, args.accept_suggestions)

    try:
        result = run_import(
            cfg,
            overrides=overrides,
            accept_suggestions=args.accept_suggestions,
            submit=args.submit,
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    _log_checks(result.checks)
    if not result.ready:
        missing = [c.expected.value for c in result.checks if not c.ok]
        logger.error(
            f"required headers missing: {', '.join(missing)} "
            "(use --map FIELD=HEADER or --accept-suggestions)"
        )

    log_summary(render_summary_line(result))

    if not result.ready:
        return EXIT_NOT_READY
    if result.submission_failed:
        return EXIT_SUBMISSION_FAILED
    return EXIT_SUCCESS
