# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
from openpyxl.utils import column_index_from_string

from aie_importer.db.store import InMemoryAccountStore, InMemoryContentStore
from aie_importer.logging.init import reset_logging
from aie_importer.models.config_models import DEFAULT_COLUMN_MAP, FieldKeyMap, DEFAULT_RECORD_TYPES
from aie_importer.models.import_summary import ImportAccumulator
from aie_importer.services.account_resolver import AccountResolver
from aie_importer.services.context import ImportContext

HEADER_LABELS = {
    "obra_code": "NUMERO_OBRA",
    "track_title": "TITULO",
    "artist_name": "INTERPRETE",
    "bmat": "ID_BMAT",
    "performer_name": "NOMBRE",
    "cedula": "CEDULA",
    "performer_role": "IDROL",
    "performer_instrument": "INSTRUMENTO",
    "album_title": "NOMBRE_ALBUM",
    "album_id": "ID_ALBUM",
    "track_isrc": "ISRC",
    "year": "YEAR_PUBLI",
    "duration": "DURACION",
}


def sheet_matrix(
    rows: list[dict[str, Any]], column_map: dict[str, str] | None = None
) -> list[list[Any]]:
    """Header + data rows laid out by column letter (None = empty cell)."""
    column_map = column_map or DEFAULT_COLUMN_MAP
    width = max(column_index_from_string(c) for c in column_map.values())
    header: list[Any] = [None] * width
    for name, letter in column_map.items():
        header[column_index_from_string(letter) - 1] = HEADER_LABELS[name]
    matrix = [header]
    for values in rows:
        line: list[Any] = [None] * width
        for name, value in values.items():
            line[column_index_from_string(column_map[name]) - 1] = value
        matrix.append(line)
    return matrix


def write_workbook(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, matrix in sheets.items():
            pd.DataFrame(matrix).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture(autouse=True)
def _reset_app_logger():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def make_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Write a releases workbook: ``make_workbook([{"track_title": "T1", ...}])``."""
    def _make(
        rows: list[dict[str, Any]],
        name: str = "releases.xlsx",
        column_map: dict[str, str] | None = None,
    ) -> Path:
        return write_workbook(tmp_path / name, {"Releases": sheet_matrix(rows, column_map)})
    return _make


@pytest.fixture()
def sample_config_yaml() -> str:
    return """columns:
  cedula: H
  album_id: M
record_types:
  album: fonograma
  single: sencillo
field_keys:
  single:
    year: field_65fb86103e5df
accounts:
  table: wp.usermeta
  identifier_key: numero_de_identificacion
publish_status: draft
log_directory: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def content_store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture()
def account_store() -> InMemoryAccountStore:
    return InMemoryAccountStore({"101110111": 7, "202220222": 8})


@pytest.fixture()
def make_context(content_store: InMemoryContentStore, account_store: InMemoryAccountStore):
    def _make(status: str = "publish", field_keys: FieldKeyMap | None = None) -> ImportContext:
        return ImportContext(
            content_store=content_store,
            resolver=AccountResolver(account_store),
            field_keys=field_keys or FieldKeyMap.build(),
            record_types=dict(DEFAULT_RECORD_TYPES),
            publish_status=status,
            accumulator=ImportAccumulator(publish_status=status),
        )
    return _make
