from __future__ import annotations

from dataclasses import dataclass, field

from .tax_fields import TaxField

"""Config dataclasses for the HS code importer.

Built by ``hscode_import.config.loader.load_config`` from config/import.yml
after JSON-schema validation; these are the typed view the rest of the
application works with.
"""


@dataclass(frozen=True)
class OutputConfig:
    """Files written once reconciliation is complete (None = not written)."""
    xlsx: str | None = None
    json: str | None = None


@dataclass(frozen=True)
class SubmissionConfig:
    """HTTP import endpoint.

    Environment variables take precedence: HSCODE_API_URL replaces ``url``,
    HSCODE_API_TOKEN adds an ``Authorization: Bearer`` header.
    """
    url: str | None = None
    timeout: float = 30.0
    batch_size: int | None = None  # None -> single request
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for one import run."""
    source_file: str  # workbook to import
    sheet: str | None = None  # None -> first sheet
    suggestion_threshold: int = 2  # max edit distance of accepted suggestions
    keep_na_strings: list[str] | None = None  # strings pandas must not read as NaN
    header_overrides: dict[TaxField, str] = field(default_factory=dict)  # manual selections
    output: OutputConfig = field(default_factory=OutputConfig)
    submission: SubmissionConfig = field(default_factory=SubmissionConfig)
