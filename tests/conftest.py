# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from hscode_import.logging.init import LOGGER_NAME, reset_logging

TAX_HEADERS = ["HSCode", "Description", "CD", "SD", "RD", "VAT", "AIT", "TTI"]


@pytest.fixture(autouse=True)
def _fresh_logging():
    # every test gets a logger bound to the current (captured) stdout
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def app_caplog(caplog):
    """caplog wired to the application logger (which does not propagate to root)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(caplog.handler)
    old_level = logger.level
    logger.setLevel(logging.DEBUG)
    yield caplog
    logger.removeHandler(caplog.handler)
    logger.setLevel(old_level)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "out").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("HSCODE_API_URL", raising=False)
        monkeypatch.delenv("HSCODE_API_TOKEN", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_file: ./data/hs_codes.xlsx
sheet: null
suggestion_threshold: 2
keep_na_strings: [NA]
header_overrides: {}
output:
  xlsx: ./out/VAT_HS_Code.xlsx
  json: ./out/VAT_HS_Code.json
submission:
  url: http://localhost:8080/api/hs-code/import
  timeout: 5
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook() -> Callable[[Path, dict[str, list[list[object]]]], Path]:
    """Factory writing raw rows (first row = header row) into an .xlsx file."""
    return _make_workbook


@pytest.fixture()
def tax_rows() -> list[list[object]]:
    return [
        ["0101.21.00", "Pure-bred breeding horses", 0, 0, 0, 0, 0, 0],
        ["8471.30.00", "Portable computers", 5, "", 0, 15, 5, 26.2],
        ["2106.90.00", "Food preparations", 25, 20, 3, 15, 5, 89.32],
    ]


@pytest.fixture()
def hs_workbook(temp_workdir: Path, tax_rows) -> Path:
    """data/hs_codes.xlsx with all 8 headers spelled with spacing/case noise."""
    headers = ["HS Code", "description", "CD", "SD", "RD", "vat", "AIT", "TTI"]
    return _make_workbook(temp_workdir / "data" / "hs_codes.xlsx", {"Sheet1": [headers, *tax_rows]})


@pytest.fixture()
def misspelled_workbook(temp_workdir: Path, tax_rows) -> Path:
    """data/hs_codes.xlsx where VAT and TTI are misspelled (VATT, TTII)."""
    headers = ["HSCode", "Description", "CD", "SD", "RD", "VATT", "AIT", "TTII"]
    return _make_workbook(temp_workdir / "data" / "hs_codes.xlsx", {"Sheet1": [headers, *tax_rows]})
