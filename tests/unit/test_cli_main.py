from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg2

from aie_importer.cli.__main__ import EXIT_FATAL, EXIT_SUCCESS, EXIT_WITH_WARNINGS, main as cli_main


def test_cli_dry_run_success(temp_workdir: Path, make_workbook, capsys):
    wb = make_workbook([
        {"album_id": "A1", "album_title": "Songs", "track_title": "T1", "obra_code": "W1"},
        {"track_title": "Solo", "obra_code": "W2"},
    ])

    code = cli_main([str(wb), "--dry-run"])

    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS
    assert "INFO Import completed. Albums: 1, Singles: 1, Songs: 2, Performers: 2." in out
    assert "SUMMARY albums=1 singles=1 songs=2 performers=2 warnings=0 status=publish" in out
    assert len(list((temp_workdir / "logs").glob("aieimporter-*.log"))) == 1


def test_cli_dry_run_with_warnings(temp_workdir: Path, make_workbook, capsys):
    # dry run has no accounts: every cedula is unresolved
    wb = make_workbook([{"track_title": "Solo", "obra_code": "W1", "cedula": "101110111"}])

    code = cli_main([str(wb), "--dry-run", "--status", "draft", "--no-run-log"])

    out = capsys.readouterr().out
    assert code == EXIT_WITH_WARNINGS
    assert 'WARN No account found for cedula "101110111" (row 1).' in out
    assert "warnings=1 status=draft" in out
    assert list((temp_workdir / "logs").glob("*.log")) == []


def test_cli_status_from_config(write_config: Path, make_workbook, capsys):
    wb = make_workbook([{"track_title": "Solo"}])
    code = cli_main([str(wb), "--dry-run", "--no-run-log"])
    assert code == EXIT_SUCCESS
    assert "status=draft" in capsys.readouterr().out


def test_cli_missing_file(temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "missing.xlsx"), "--dry-run"])
    out = capsys.readouterr().out
    assert code == EXIT_FATAL
    assert "ERROR import:" in out
    assert "SUMMARY" not in out


def test_cli_missing_file_never_connects(temp_workdir: Path, capsys):
    with patch("aie_importer.cli.__main__.connect") as mock_connect:
        code = cli_main([str(temp_workdir / "data" / "missing.xlsx")])
    assert code == EXIT_FATAL
    mock_connect.assert_not_called()


def test_cli_config_error(write_config: Path, make_workbook, capsys):
    write_config.write_text("publish_status: private\n", encoding="utf-8")
    code = cli_main([str(make_workbook([{"track_title": "T"}])), "--dry-run"])
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_cli_explicit_config_path(temp_workdir: Path, make_workbook, capsys):
    cfg = temp_workdir / "custom.yml"
    cfg.write_text("publish_status: draft\nlog_directory: ./runlogs\n", encoding="utf-8")
    wb = make_workbook([{"track_title": "T"}])

    code = cli_main([str(wb), "--dry-run", "--config", str(cfg)])

    assert code == EXIT_SUCCESS
    assert "status=draft" in capsys.readouterr().out
    assert len(list((temp_workdir / "runlogs").glob("aieimporter-*.log"))) == 1


def test_cli_inspect_data(temp_workdir: Path, make_workbook, capsys):
    wb = make_workbook([
        {"album_id": "A1", "album_title": "Songs", "track_title": "T1"},
        {"album_id": "A1", "album_title": "Songs", "track_title": "T2"},
    ])

    code = cli_main([str(wb), "--inspect-data"])

    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS
    assert "FILE: releases.xlsx rows=2 releases=1" in out
    assert "GROUP: A1 rows=2" in out


def test_cli_debug_flag(temp_workdir: Path, make_workbook, capsys):
    code = cli_main([str(make_workbook([{"track_title": "T"}])), "--dry-run", "--debug", "--no-run-log"])
    assert code == EXIT_SUCCESS
    assert "DEBUG debug mode enabled" in capsys.readouterr().out


def test_cli_live_mode_uses_postgres_stores(temp_workdir: Path, make_workbook, capsys):
    cur = MagicMock()
    cur.fetchone.side_effect = [None, (11,)]
    connect_cm = MagicMock()
    connect_cm.__enter__.return_value = cur

    wb = make_workbook([{"track_title": "Solo", "obra_code": "W1", "cedula": "101110111"}])
    with patch("aie_importer.cli.__main__.connect", return_value=connect_cm) as mock_connect:
        code = cli_main([str(wb), "--no-run-log"])

    out = capsys.readouterr().out
    mock_connect.assert_called_once()
    # owner lookup finds nothing (cached for the performer), insert returns id 11
    assert code == EXIT_WITH_WARNINGS
    assert "singles=1" in out


def test_cli_database_error(temp_workdir: Path, make_workbook, capsys):
    wb = make_workbook([{"track_title": "T"}])
    with patch("aie_importer.cli.__main__.connect", side_effect=psycopg2.OperationalError("connection refused")):
        code = cli_main([str(wb)])
    assert code == EXIT_FATAL
    assert "ERROR database: connection refused" in capsys.readouterr().out
