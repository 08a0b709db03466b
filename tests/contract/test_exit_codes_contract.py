from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import requests

from hscode_import.cli import main as cli_main
from hscode_import.cli.app import EXIT_FATAL, EXIT_NOT_READY, EXIT_SUBMISSION_FAILED, EXIT_SUCCESS

"""Exit code contract: 0 success, 1 fatal, 2 headers not reconciled, 3 submission failed."""


def test_exit_code_constants():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_NOT_READY, EXIT_SUBMISSION_FAILED) == (0, 1, 2, 3)


def test_exit_code_fatal_without_config(temp_workdir: Path, capsys):
    # config/import.yml missing -> exit 1
    code = cli_main([])
    captured = capsys.readouterr()
    assert code == 1
    assert "ERROR config:" in captured.out


def test_exit_code_fatal_missing_workbook(temp_workdir: Path, write_config, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR processing: source file not found" in out


def test_exit_code_fatal_bad_map_argument(temp_workdir: Path, write_config, hs_workbook, capsys):
    code = cli_main(["--map", "GST=Tax"])
    assert code == 1
    assert "ERROR map:" in capsys.readouterr().out


def test_exit_code_success(temp_workdir: Path, write_config, hs_workbook, capsys):
    code = cli_main([])
    assert code == 0
    assert "SUMMARY file=hs_codes.xlsx ready=yes" in capsys.readouterr().out


def test_exit_code_not_ready(temp_workdir: Path, write_config, misspelled_workbook, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "ERROR required headers missing: VAT, TTI" in out


def test_exit_code_submission_failed(temp_workdir: Path, write_config, hs_workbook, capsys):
    session = MagicMock(spec=requests.Session)
    session.post.side_effect = requests.ConnectionError("connection refused")
    with patch("hscode_import.api.submit.requests.Session", return_value=session):
        code = cli_main(["--submit"])
    out = capsys.readouterr().out
    assert code == 3
    assert "ERROR submission:" in out


def test_exit_code_submission_success(temp_workdir: Path, write_config, hs_workbook, capsys):
    session = MagicMock(spec=requests.Session)
    session.post.return_value = Mock(status_code=200)
    with patch("hscode_import.api.submit.requests.Session", return_value=session):
        code = cli_main(["--submit"])
    assert code == 0
    assert "submitted=3" in capsys.readouterr().out
