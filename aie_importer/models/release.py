from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .logical_row import LogicalRow

"""Release domain models: groups of rows and the records built from them.

A ReleaseGroup is the set of rows describing one release. The builders turn
it into a ReleaseRecord that owns its SongEntry tuple, each SongEntry owning
its PerformerEntry tuple. Account ids are weak references into the account
store, never owned objects.
"""

__all__ = [
    "AccountId",
    "RecordId",
    "PerformerEntry",
    "ReleaseGroup",
    "ReleaseKind",
    "ReleaseRecord",
    "SongEntry",
]

AccountId = int | str
RecordId = int | str


class ReleaseKind(Enum):
    """Record type of a release.

    - ALBUM: fonograma, at least one row carries an album title
    - SINGLE: sencillo, no row carries an album title
    """
    ALBUM = "album"
    SINGLE = "single"


@dataclass(frozen=True)
class ReleaseGroup:
    """Rows sharing one release key, in sheet order. Never empty."""
    key: str
    rows: tuple[LogicalRow, ...]

    def __post_init__(self) -> None:
        if not self.rows:
            raise ValueError(f"release group '{self.key}' has no rows")

    @property
    def first(self) -> LogicalRow:
        return self.rows[0]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class PerformerEntry:
    full_name: str
    account_id: str  # "" when the cedula did not resolve
    instrument: str
    role: str


@dataclass(frozen=True)
class SongEntry:
    """One distinct song of a release, keyed by (title, work_code)."""
    title: str
    isrc: str
    bmat: str
    duration_seconds: str
    work_code: str
    performers: tuple[PerformerEntry, ...] = ()


@dataclass(frozen=True)
class ReleaseRecord:
    """Release created in the content store.

    ``songs`` is empty until the repeater builder attaches the full tree
    (via ``dataclasses.replace``); the record is written exactly once.
    """
    group_key: str
    kind: ReleaseKind
    title: str
    year: str
    artist_name: str
    album_id: str
    record_id: RecordId | None = None
    owner_account_id: AccountId | None = None
    songs: tuple[SongEntry, ...] = ()
