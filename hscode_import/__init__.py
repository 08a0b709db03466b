"""HS code / tax-line spreadsheet importer with header reconciliation."""

__version__ = "0.1.0"
