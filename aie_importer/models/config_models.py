from __future__ import annotations

from dataclasses import dataclass, field

from .logical_row import LOGICAL_FIELDS
from .release import ReleaseKind

"""Config dataclasses for the release importer.

Column positions, record types and store field keys are configuration, not
logic: the builders only ever speak logical names and ask these tables for
the store-specific spelling. The loader in ``aie_importer.config.loader``
builds these objects from YAML.
"""

__all__ = [
    "DEFAULT_COLUMN_MAP",
    "DEFAULT_FIELD_KEYS",
    "DEFAULT_RECORD_TYPES",
    "FIELD_KEY_NAMES",
    "PUBLISH_STATUSES",
    "AccountLookupConfig",
    "DatabaseConfig",
    "FieldKeyMap",
    "ImporterConfig",
]

# Official workbook layout (logical field -> column letter)
DEFAULT_COLUMN_MAP: dict[str, str] = {
    "obra_code": "A",
    "track_title": "B",
    "artist_name": "C",
    "bmat": "E",
    "performer_name": "G",
    "cedula": "H",
    "performer_role": "I",
    "performer_instrument": "K",
    "album_title": "L",
    "album_id": "M",
    "track_isrc": "N",
    "year": "Q",
    "duration": "R",
}

# Logical field name -> store key, shared by both record kinds unless overridden
DEFAULT_FIELD_KEYS: dict[str, str] = {
    "year": "ano_de_publicacion",
    "artist_name": "nombre_del_artista_solista_o_agrupacion",
    "album_id": "numero_album_o_single",
    "songs": "nombre_de_cada_tema_del_album_o_sencillo",
    "song.title": "titulo_de_la_cancion",
    "song.isrc": "isrc",
    "song.bmat": "bmat",
    "song.duration": "duracion_en_segundos",
    "song.work_code": "codigo_de_obra",
    "song.performers": "interpretes_y_ejecutantes",
    "performer.full_name": "nombre_completo",
    "performer.account_id": "id_de_usuario",
    "performer.instrument": "instrumento",
    "performer.role": "role",
}

FIELD_KEY_NAMES: frozenset[str] = frozenset(DEFAULT_FIELD_KEYS)

DEFAULT_RECORD_TYPES: dict[ReleaseKind, str] = {
    ReleaseKind.ALBUM: "fonograma",
    ReleaseKind.SINGLE: "sencillo",
}

PUBLISH_STATUSES: frozenset[str] = frozenset({"publish", "draft"})


@dataclass(frozen=True)
class FieldKeyMap:
    """Logical field name -> store key table, parameterized by record kind."""
    keys: dict[ReleaseKind, dict[str, str]]

    @classmethod
    def build(
        cls,
        album: dict[str, str] | None = None,
        single: dict[str, str] | None = None,
    ) -> FieldKeyMap:
        """Default keys for both kinds with per-kind overrides applied."""
        return cls(
            keys={
                ReleaseKind.ALBUM: {**DEFAULT_FIELD_KEYS, **(album or {})},
                ReleaseKind.SINGLE: {**DEFAULT_FIELD_KEYS, **(single or {})},
            }
        )

    def key(self, kind: ReleaseKind, name: str) -> str:
        try:
            return self.keys[kind][name]
        except KeyError:
            raise KeyError(f"no store key for field '{name}' ({kind.value})") from None


@dataclass(frozen=True)
class AccountLookupConfig:
    """Where account identifiers live in the account store.

    The default mirrors a WordPress-style meta table: one row per
    (user_id, meta_key, meta_value).
    """
    table: str = "usermeta"
    id_column: str = "user_id"
    key_column: str = "meta_key"
    value_column: str = "meta_value"
    identifier_key: str = "numero_de_identificacion"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback.

    Environment variables (DATABASE_URL / PGDSN / PG*) take precedence.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImporterConfig:
    """Root configuration object for an import run."""
    columns: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLUMN_MAP))
    record_types: dict[ReleaseKind, str] = field(default_factory=lambda: dict(DEFAULT_RECORD_TYPES))
    field_keys: FieldKeyMap = field(default_factory=FieldKeyMap.build)
    accounts: AccountLookupConfig = field(default_factory=AccountLookupConfig)
    publish_status: str = "publish"
    log_directory: str = "./logs"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    def __post_init__(self) -> None:
        missing = set(LOGICAL_FIELDS) - set(self.columns)
        if missing:
            raise ValueError(f"column map missing fields: {sorted(missing)}")
