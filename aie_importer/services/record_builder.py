from __future__ import annotations

import logging

from ..db.store import StoreError
from ..models.release import ReleaseGroup, ReleaseKind, ReleaseRecord
from .context import ImportContext

"""Record builder: one release record per group.

Decides album vs. single, derives the title, resolves the owning account
and writes the top-level fields. Field names are looked up in the
kind-parameterized key table, never spelled here.
"""

__all__ = [
    "TOP_LEVEL_FIELDS",
    "build_release_record",
    "derive_title",
    "determine_kind",
]

logger = logging.getLogger(__name__)

TOP_LEVEL_FIELDS: tuple[str, ...] = ("year", "artist_name", "album_id")


def determine_kind(group: ReleaseGroup) -> ReleaseKind:
    """Album iff any row in the group carries an album title."""
    if any(row.album_title for row in group.rows):
        return ReleaseKind.ALBUM
    return ReleaseKind.SINGLE


def derive_title(group: ReleaseGroup, kind: ReleaseKind) -> str:
    first = group.first
    if kind is ReleaseKind.SINGLE:
        return first.track_title
    if first.album_title:
        return first.album_title
    return next((row.track_title for row in group.rows if row.track_title), "")


def build_release_record(group: ReleaseGroup, ctx: ImportContext) -> ReleaseRecord | None:
    """Create the release record for ``group`` in the content store.

    Returns the created record (without songs), or None when the store
    rejected the record. In that case a warning naming the group has been
    recorded and nothing else should be written for the group.
    """
    first = group.first
    kind = determine_kind(group)
    title = derive_title(group, kind)
    owner = ctx.resolver.resolve(first.cedula)

    try:
        record_id = ctx.content_store.create_record(
            ctx.record_types[kind],
            title,
            ctx.publish_status,
            owner,
        )
    except StoreError as e:
        ctx.accumulator.warn(f'Could not create {kind.value} for group "{group.key}" ("{title}"): {e}')
        logger.error("group=%s create failed: %s", group.key, e)
        return None

    record = ReleaseRecord(
        group_key=group.key,
        kind=kind,
        title=title,
        year=first.year,
        artist_name=first.artist_name,
        album_id=first.album_id,
        record_id=record_id,
        owner_account_id=owner,
    )

    for name in TOP_LEVEL_FIELDS:
        store_key = ctx.field_keys.key(kind, name)
        try:
            ctx.content_store.set_field(record_id, store_key, getattr(record, name))
        except StoreError as e:
            ctx.accumulator.warn(f'Could not set field "{store_key}" for group "{group.key}": {e}')

    logger.debug(
        "group=%s kind=%s record_id=%s title=%r owner=%s",
        group.key,
        kind.value,
        record_id,
        title,
        owner,
    )
    return record
