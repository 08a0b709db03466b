"""Domain models for the HS code importer.

Tax field schema, reconciliation views (HeaderCheckResult), the reader's
ParsedSheet, projected rows, configuration and run results.
"""

from .config_models import ImportConfig, OutputConfig, SubmissionConfig
from .header_check import HeaderCheckResult, MatchSource, MatchStatus
from .parsed_sheet import ParsedSheet, RawRow
from .projected_row import ProjectedRow
from .tax_fields import EXPORT_COLUMNS, REQUIRED_FIELDS, TaxField

__all__ = [
    # Schema
    "TaxField",
    "REQUIRED_FIELDS",
    "EXPORT_COLUMNS",
    # Configuration models
    "ImportConfig",
    "OutputConfig",
    "SubmissionConfig",
    # Reconciliation / rows
    "HeaderCheckResult",
    "MatchSource",
    "MatchStatus",
    "ParsedSheet",
    "RawRow",
    "ProjectedRow",
]
