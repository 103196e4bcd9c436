from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from aie_importer.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from aie_importer.db.postgres import PostgresAccountStore, PostgresContentStore, connect, ensure_schema
from aie_importer.db.store import InMemoryAccountStore, InMemoryContentStore
from aie_importer.excel.reader import SpreadsheetError, check_source, parse_rows
from aie_importer.logging.init import log_summary, set_debug, setup_logging
from aie_importer.logging.run_log import RunLogWriter
from aie_importer.models.config_models import ImporterConfig
from aie_importer.models.import_summary import ImportSummary
from aie_importer.services.grouping import group_rows
from aie_importer.services.orchestrator import ProcessingError, run_import
from aie_importer.services.summary import render_counts_message, render_summary_line

"""CLI entrypoint.

    python -m aie_importer.cli releases.xlsx --status draft

- Load .env (connection settings win over the config file)
- Load config/import.yml when present, built-in defaults otherwise
- Import the workbook into PostgreSQL, or into memory with --dry-run
- Print every warning, the SUMMARY line, and write the run log
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_WITH_WARNINGS = 2

INSPECT_ROWS = 5


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values override existing environment variables."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="aie-import",
        description="Import albums (fonogramas) and singles (sencillos) from the official .xlsx",
    )
    p.add_argument("file", type=Path, help="Path to the .xlsx workbook")
    p.add_argument(
        "--status",
        choices=["publish", "draft"],
        default=None,
        help="Publish status for created records (default: from config, else publish)",
    )
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--dry-run", action="store_true", help="Build everything in memory; no database access")
    p.add_argument("--no-run-log", action="store_true", help="Do not write the run log file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print the first parsed rows and groups then exit")
    return p.parse_args(argv)


def _load_cli_config(path: Path | None) -> ImporterConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return load_config(None)


def _inspect_data(path: Path, cfg: ImporterConfig) -> int:
    try:
        rows = parse_rows(path, cfg.columns)
    except SpreadsheetError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    groups = group_rows(rows)
    print(f"FILE: {path.name} rows={len(rows)} releases={len(groups)}")
    for row in rows[:INSPECT_ROWS]:
        print("  row=", dataclasses.asdict(row))
    for key, group in list(groups.items())[:INSPECT_ROWS]:
        print(f"  GROUP: {key} rows={len(group)}")
    return EXIT_SUCCESS


def _run(path: Path, status: str, cfg: ImporterConfig, dry_run: bool) -> ImportSummary:
    if dry_run:
        return run_import(
            path,
            status,
            content_store=InMemoryContentStore(),
            account_store=InMemoryAccountStore(),
            config=cfg,
        )
    with connect(cfg.database) as cur:
        ensure_schema(cur)
        return run_import(
            path,
            status,
            content_store=PostgresContentStore(cur),
            account_store=PostgresAccountStore(cur, cfg.accounts),
            config=cfg,
        )


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug()
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _load_cli_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    path: Path = args.file
    if args.inspect_data:
        return _inspect_data(path, cfg)

    status = args.status or cfg.publish_status
    mode = "dry-run" if args.dry_run else "live"
    logger.info(f"Importing {path} mode={mode} status={status}")
    try:
        # file problems are reported before any database connection is opened
        check_source(path)
        summary = _run(path, status, cfg, args.dry_run)
    except (SpreadsheetError, ProcessingError) as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {str(e).strip()}")
        return EXIT_FATAL

    for warning in summary.warnings:
        logger.warning(warning)
    logger.info(render_counts_message(summary))

    if not args.no_run_log:
        log_path = RunLogWriter(cfg.log_directory).write(summary)
        if log_path is not None:
            logger.info(f"run log: {log_path}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(summary)[len("SUMMARY "):])
    return EXIT_WITH_WARNINGS if summary.warnings else EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
