from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import requests
from openpyxl import load_workbook

from hscode_import.cli import main as cli_main


def test_full_run_writes_xlsx_and_json(temp_workdir: Path, write_config, hs_workbook, capsys):
    """Real workbook in, styled HS code sheet and JSON payload out."""
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Importing: ./data/hs_codes.xlsx" in out

    xlsx = temp_workdir / "out" / "VAT_HS_Code.xlsx"
    ws = load_workbook(xlsx).active
    assert [c.value for c in ws[1]] == ["HS Code", "Description", "CD", "SD", "VAT", "AIT", "RD", "TTI"]
    assert ws.max_row == 4
    # row 3 had an empty SD cell
    assert [c.value for c in ws[3]] == ["8471.30.00", "Portable computers", 5, 0, 15, 5, 0, 26.2]

    payload = json.loads((temp_workdir / "out" / "VAT_HS_Code.json").read_text(encoding="utf-8"))
    assert len(payload) == 3
    assert payload[2] == {
        "HSCode": "2106.90.00", "Description": "Food preparations",
        "CD": 25, "SD": 20, "RD": 3, "VAT": 15, "AIT": 5, "TTI": 89.32,
    }


def test_file_and_sheet_flags(temp_workdir: Path, write_config, make_workbook, tax_rows, capsys):
    headers = ["HSCode", "Description", "CD", "SD", "RD", "VAT", "AIT", "TTI"]
    other = make_workbook(
        temp_workdir / "data" / "tariff_2024.xlsx",
        {"Cover": [["Tariff schedule"]], "Lines": [headers, *tax_rows]},
    )
    code = cli_main(["--file", str(other), "--sheet", "Lines"])
    assert code == 0
    assert "SUMMARY file=tariff_2024.xlsx ready=yes fields=8/8 manual=0 rows=3" in capsys.readouterr().out


def test_unknown_sheet_is_fatal(temp_workdir: Path, write_config, hs_workbook, capsys):
    assert cli_main(["--sheet", "Nope"]) == 1
    assert "ERROR processing: cannot read hs_codes.xlsx" in capsys.readouterr().out


def test_check_headers_only(temp_workdir: Path, write_config, hs_workbook, capsys):
    code = cli_main(["--check-headers"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY" not in out
    assert not (temp_workdir / "out" / "VAT_HS_Code.xlsx").exists()
    assert out.count(" OK ") == 8


def test_inspect_data(temp_workdir: Path, write_config, hs_workbook, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: hs_codes.xlsx" in out
    assert "SHEET: Sheet1 cols=['HS Code', 'description'" in out
    assert "sample_rows=" in out


def test_env_file_overrides_submission_url(temp_workdir: Path, write_config, hs_workbook, monkeypatch, capsys):
    # .env values win over the process environment
    monkeypatch.setenv("HSCODE_API_URL", "http://stale.example/api")
    (temp_workdir / ".env").write_text("HSCODE_API_URL=http://tax.example/api/hs-code/import\n", encoding="utf-8")
    session = MagicMock(spec=requests.Session)
    session.post.return_value = Mock(status_code=200)
    with patch("hscode_import.api.submit.requests.Session", return_value=session):
        code = cli_main(["--submit"])
    assert code == 0
    assert session.post.call_args.args[0] == "http://tax.example/api/hs-code/import"
