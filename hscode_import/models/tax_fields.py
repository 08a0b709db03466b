from __future__ import annotations

from enum import Enum

from ..services.header_matching import normalize_header

"""Tax-line field schema for the HS code importer.

The set of columns an HS code sheet must provide is closed and fixed: it is
declared here once and never inferred from the workbook being imported.
Order matters only for display (header check table, exported columns).
"""

__all__ = [
    "TaxField",
    "REQUIRED_FIELDS",
    "EXPORT_COLUMNS",
]


class TaxField(str, Enum):
    """Canonical tax-line columns (enum value == canonical header name)."""
    HS_CODE = "HSCode"
    DESCRIPTION = "Description"
    CD = "CD"  # customs duty
    SD = "SD"  # supplementary duty
    RD = "RD"  # regulatory duty
    VAT = "VAT"
    AIT = "AIT"  # advance income tax
    TTI = "TTI"  # total tax incidence

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> TaxField:
        """Resolve a user-typed field name (case/space/separator-insensitive).

        Raises:
            ValueError: If the name does not denote any tax field.
        """
        wanted = normalize_header(name)
        for field in cls:
            if normalize_header(field.value) == wanted:
                return field
        raise ValueError(f"unknown tax field: {name!r}")


REQUIRED_FIELDS: tuple[TaxField, ...] = (
    TaxField.HS_CODE,
    TaxField.DESCRIPTION,
    TaxField.CD,
    TaxField.SD,
    TaxField.RD,
    TaxField.VAT,
    TaxField.AIT,
    TaxField.TTI,
)

# Column order and labels of the exported HS code sheet
EXPORT_COLUMNS: tuple[tuple[TaxField, str], ...] = (
    (TaxField.HS_CODE, "HS Code"),
    (TaxField.DESCRIPTION, "Description"),
    (TaxField.CD, "CD"),
    (TaxField.SD, "SD"),
    (TaxField.VAT, "VAT"),
    (TaxField.AIT, "AIT"),
    (TaxField.RD, "RD"),
    (TaxField.TTI, "TTI"),
)
