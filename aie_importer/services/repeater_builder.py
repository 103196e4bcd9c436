from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from ..db.store import StoreError
from ..models.config_models import FieldKeyMap
from ..models.import_summary import ImportAccumulator
from ..models.logical_row import LogicalRow
from ..models.release import (
    PerformerEntry,
    ReleaseGroup,
    ReleaseKind,
    ReleaseRecord,
    SongEntry,
)
from .account_resolver import AccountResolver
from .context import ImportContext

"""Nested repeater builder: songs of a release and performers of each song.

Rows sharing (track_title, obra_code) are one song. The first such row
seeds the song's scalar fields; every row, first or repeated, contributes
exactly one performer entry, whether or not its cedula resolved.
"""

__all__ = [
    "RepeaterResult",
    "build_performer_entry",
    "build_song_entries",
    "song_store_rows",
    "write_song_repeater",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepeaterResult:
    record: ReleaseRecord  # with the song tree attached
    songs: int
    performers: int
    saved: bool = True


def build_performer_entry(
    row: LogicalRow,
    row_number: int,
    resolver: AccountResolver,
    accumulator: ImportAccumulator,
) -> PerformerEntry:
    """Performer entry for ``row``; ``row_number`` is 1-based within the group."""
    account_id = resolver.resolve(row.cedula)
    if account_id is None and row.cedula:
        accumulator.warn(
            f'No account found for cedula "{row.cedula}" (row {row_number}). '
            "Performer will be saved without account ID."
        )
    return PerformerEntry(
        full_name=row.performer_name,
        account_id=str(account_id) if account_id is not None else "",
        instrument=row.performer_instrument,
        role=row.performer_role,
    )


def build_song_entries(
    group: ReleaseGroup,
    resolver: AccountResolver,
    accumulator: ImportAccumulator,
) -> list[SongEntry]:
    """Deduplicate the group's rows into songs, in first-occurrence order."""
    seeds: dict[tuple[str, str], LogicalRow] = {}
    performers: dict[tuple[str, str], list[PerformerEntry]] = {}

    for index, row in enumerate(group.rows):
        key = row.song_key
        if key not in seeds:
            seeds[key] = row
            performers[key] = []
        performers[key].append(build_performer_entry(row, index + 1, resolver, accumulator))

    return [
        SongEntry(
            title=seed.track_title,
            isrc=seed.track_isrc,
            bmat=seed.bmat,
            duration_seconds=seed.duration,
            work_code=seed.obra_code,
            performers=tuple(performers[key]),
        )
        for key, seed in seeds.items()
    ]


def song_store_rows(
    songs: list[SongEntry], kind: ReleaseKind, field_keys: FieldKeyMap
) -> list[dict[str, Any]]:
    """Translate songs into store rows keyed by the store's field names."""
    def k(name: str) -> str:
        return field_keys.key(kind, name)

    return [
        {
            k("song.title"): song.title,
            k("song.isrc"): song.isrc,
            k("song.bmat"): song.bmat,
            k("song.duration"): song.duration_seconds,
            k("song.work_code"): song.work_code,
            k("song.performers"): [
                {
                    k("performer.full_name"): p.full_name,
                    k("performer.account_id"): p.account_id,
                    k("performer.instrument"): p.instrument,
                    k("performer.role"): p.role,
                }
                for p in song.performers
            ],
        }
        for song in songs
    ]


def write_song_repeater(
    group: ReleaseGroup, record: ReleaseRecord, ctx: ImportContext
) -> RepeaterResult:
    """Build the song tree for ``record`` and write it in one nested-field call.

    Returns:
        RepeaterResult with the distinct song count and the total performer
        count (unresolved performers included). When the store rejects the
        write, a warning is recorded, ``saved`` is False and both counts
        are zero.
    """
    songs = build_song_entries(group, ctx.resolver, ctx.accumulator)
    performer_count = sum(len(s.performers) for s in songs)
    record = dataclasses.replace(record, songs=tuple(songs))

    repeater_key = ctx.field_keys.key(record.kind, "songs")
    try:
        ctx.content_store.set_nested_field(
            record.record_id,
            repeater_key,
            song_store_rows(songs, record.kind, ctx.field_keys),
        )
    except StoreError as e:
        ctx.accumulator.warn(f'Could not save songs for group "{group.key}": {e}')
        logger.error("group=%s repeater write failed: %s", group.key, e)
        return RepeaterResult(record=record, songs=0, performers=0, saved=False)

    logger.debug(
        "group=%s songs=%d performers=%d", group.key, len(songs), performer_count
    )
    return RepeaterResult(record=record, songs=len(songs), performers=performer_count)
