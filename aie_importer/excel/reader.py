from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.utils import column_index_from_string, get_column_letter

from ..models.logical_row import LOGICAL_FIELDS, LogicalRow

"""Excel reader for the official releases workbook.

Row 1 of the active sheet is the header and is always skipped; every later
non-blank row becomes one LogicalRow. Columns are addressed by letter through
the configured column map, so moving a column never touches the builders.

The whole sheet is read into memory before any record is built.
"""

__all__ = [
    "SUPPORTED_EXTENSION",
    "SpreadsheetError",
    "SpreadsheetNotFoundError",
    "SpreadsheetReadError",
    "UnsupportedFormatError",
    "cell_text",
    "parse_rows",
    "read_raw_rows",
]

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSION = ".xlsx"

RawRow = dict[str, Any]  # column letter -> raw cell value


class SpreadsheetError(Exception):
    """Base class for file-level failures; these abort the whole import."""


class SpreadsheetNotFoundError(SpreadsheetError, FileNotFoundError):
    """Raised when the spreadsheet path does not exist."""


class UnsupportedFormatError(SpreadsheetError):
    """Raised when the file is not an .xlsx workbook."""


class SpreadsheetReadError(SpreadsheetError):
    """Raised when the workbook cannot be opened or parsed."""


def check_source(path: Path) -> None:
    """Validate that ``path`` exists and has the supported extension."""
    if not path.exists():
        raise SpreadsheetNotFoundError(f"File not found: {path}")
    if path.suffix.lower() != SUPPORTED_EXTENSION:
        raise UnsupportedFormatError(
            f"Only {SUPPORTED_EXTENSION} files are supported (got '{path.suffix or path.name}')"
        )


def read_raw_rows(path: Path) -> list[tuple[int, RawRow]]:
    """Read the active sheet as (sheet_row, {column letter: value}) pairs.

    The header row is included; ``parse_rows`` is responsible for skipping it.
    NA-string conversion is disabled so that cell text such as ``NA`` or
    ``null`` survives as written.
    """
    check_source(path)
    try:
        with pd.ExcelFile(path, engine="openpyxl") as xls:
            active = xls.book.active
            sheet_name = active.title if active is not None else xls.sheet_names[0]
            df = xls.parse(
                sheet_name,
                header=None,
                dtype=object,
                keep_default_na=False,
                na_values=[],
            )
    except Exception as e:
        raise SpreadsheetReadError(f"could not read workbook {path.name}: {e}") from e

    letters = [get_column_letter(int(i) + 1) for i in df.columns]
    rows: list[tuple[int, RawRow]] = []
    for position, values in enumerate(df.itertuples(index=False, name=None)):
        rows.append((position + 1, dict(zip(letters, values, strict=False))))
    logger.debug("sheet=%s raw_rows=%d columns=%d", sheet_name, len(rows), len(letters))
    return rows


def cell_text(value: Any) -> str:
    """Render a raw cell value as trimmed text; blank/missing -> ''."""
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value).strip()


def _validate_column_map(column_map: Mapping[str, str]) -> dict[str, str]:
    unknown = set(column_map) - set(LOGICAL_FIELDS)
    if unknown:
        raise ValueError(f"column map has unknown fields: {sorted(unknown)}")
    normalized: dict[str, str] = {}
    for field_name, letter in column_map.items():
        letter = str(letter).strip().upper()
        column_index_from_string(letter)  # ValueError on bad letters
        normalized[field_name] = letter
    return normalized


def parse_rows(path: Path, column_map: Mapping[str, str]) -> list[LogicalRow]:
    """Parse the workbook at ``path`` into LogicalRows.

    Args:
        path: Path to the .xlsx file
        column_map: Logical field name -> column letter

    Returns:
        One LogicalRow per non-header row, in sheet order. Rows whose cells
        are all blank are skipped.

    Raises:
        SpreadsheetNotFoundError: path does not exist
        UnsupportedFormatError: extension is not .xlsx
        SpreadsheetReadError: workbook is corrupt or unreadable
    """
    columns = _validate_column_map(column_map)
    logical_rows: list[LogicalRow] = []
    for sheet_row, raw in read_raw_rows(path):
        if sheet_row == 1:
            continue  # header
        if all(cell_text(v) == "" for v in raw.values()):
            continue
        values = {name: cell_text(raw.get(letter)) for name, letter in columns.items()}
        logical_rows.append(LogicalRow(sheet_row=sheet_row, **values))
    logger.info("parsed %d data rows from %s", len(logical_rows), path.name)
    return logical_rows
