from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg2
from psycopg2 import sql
from psycopg2.extras import Json

from ..models.config_models import AccountLookupConfig, DatabaseConfig
from ..models.release import AccountId, RecordId
from .store import StoreError

"""PostgreSQL-backed content and account stores (psycopg2).

Records land in ``aie_records``; top-level fields and repeaters land in
``aie_record_fields`` as JSONB, one row per (record, key). Every statement
runs inside a savepoint: a rejected statement rolls back to it and surfaces
as StoreError, leaving the surrounding transaction usable for the next
group. The connection commits once, when the run completes.
"""

__all__ = [
    "SCHEMA_SQL",
    "PostgresAccountStore",
    "PostgresContentStore",
    "connect",
    "ensure_schema",
    "resolve_dsn",
]

logger = logging.getLogger(__name__)

SAVEPOINT = "aie_store_op"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS aie_records (
    id BIGSERIAL PRIMARY KEY,
    record_type TEXT NOT NULL,
    title TEXT NOT NULL,
    status TEXT NOT NULL,
    owner_account_id TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE TABLE IF NOT EXISTS aie_record_fields (
    record_id BIGINT NOT NULL REFERENCES aie_records (id) ON DELETE CASCADE,
    field_key TEXT NOT NULL,
    value JSONB,
    PRIMARY KEY (record_id, field_key)
);
"""


@contextmanager
def _savepoint(cursor: Any, action: str) -> Iterator[None]:
    cursor.execute(f"SAVEPOINT {SAVEPOINT}")
    try:
        yield
    except psycopg2.Error as e:
        cursor.execute(f"ROLLBACK TO SAVEPOINT {SAVEPOINT}")
        raise StoreError(f"{action}: {str(e).strip()}") from e
    cursor.execute(f"RELEASE SAVEPOINT {SAVEPOINT}")


def _table_identifier(name: str) -> sql.Identifier:
    # schema-qualified names: "wp.usermeta" -> "wp"."usermeta"
    return sql.Identifier(*name.split("."))


def ensure_schema(cursor: Any) -> None:
    """Create the record tables if they do not exist yet."""
    cursor.execute(SCHEMA_SQL)


class PostgresContentStore:
    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor

    def create_record(
        self,
        record_type: str,
        title: str,
        status: str,
        owner_account_id: AccountId | None = None,
    ) -> int:
        owner = str(owner_account_id) if owner_account_id is not None else None
        with _savepoint(self.cursor, f"create {record_type} '{title}'"):
            self.cursor.execute(
                "INSERT INTO aie_records (record_type, title, status, owner_account_id) "
                "VALUES (%s, %s, %s, %s) RETURNING id",
                (record_type, title, status, owner),
            )
            row = self.cursor.fetchone()
        if not row:
            raise StoreError(f"create {record_type} '{title}': no id returned")
        return int(row[0])

    def set_field(self, record_id: RecordId, field_key: str, value: Any) -> None:
        with _savepoint(self.cursor, f"set {field_key} on record {record_id}"):
            self.cursor.execute(
                "INSERT INTO aie_record_fields (record_id, field_key, value) VALUES (%s, %s, %s) "
                "ON CONFLICT (record_id, field_key) DO UPDATE SET value = EXCLUDED.value",
                (record_id, field_key, Json(value)),
            )

    def set_nested_field(
        self, record_id: RecordId, field_key: str, rows: Sequence[dict[str, Any]]
    ) -> None:
        self.set_field(record_id, field_key, list(rows))


class PostgresAccountStore:
    """Identifier lookup against a key/value meta table; first match wins."""

    def __init__(self, cursor: Any, lookup: AccountLookupConfig | None = None) -> None:
        self.cursor = cursor
        self.lookup = lookup or AccountLookupConfig()
        self._query = sql.SQL(
            "SELECT {id} FROM {table} WHERE {key} = %s AND {value} = %s ORDER BY {id} LIMIT 1"
        ).format(
            id=sql.Identifier(self.lookup.id_column),
            table=_table_identifier(self.lookup.table),
            key=sql.Identifier(self.lookup.key_column),
            value=sql.Identifier(self.lookup.value_column),
        )

    def find_account_by_identifier(self, identifier: str) -> AccountId | None:
        with _savepoint(self.cursor, f"account lookup '{identifier}'"):
            self.cursor.execute(self._query, (self.lookup.identifier_key, identifier))
            row = self.cursor.fetchone()
        return row[0] if row else None


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Build a libpq DSN.

    Precedence: DATABASE_URL / PGDSN, then the config ``dsn``, then the
    individual PG* variables with config values as fallback.
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def connect(db_cfg: DatabaseConfig) -> Iterator[Any]:
    """Yield a cursor inside one transaction; commit on success, rollback on error."""
    conn = psycopg2.connect(resolve_dsn(db_cfg))
    conn.autocommit = False
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        try:
            cur.close()
        finally:
            conn.close()
