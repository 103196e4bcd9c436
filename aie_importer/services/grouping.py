from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.logical_row import LogicalRow
from ..models.release import ReleaseGroup

"""Grouping of parsed rows into releases.

Rows sharing a non-empty album_id form one group. A row without album_id is
a release of its own: its key is synthesized as ``single-<obra_code>`` (or
``single-<row index>`` without a work code) and made unique so that such
rows never merge. Album keys and synthesized keys never share a group: an
album_id that happens to equal a synthesized key gets a suffixed key.
"""

__all__ = [
    "SINGLE_KEY_PREFIX",
    "group_rows",
    "release_key",
]

logger = logging.getLogger(__name__)

SINGLE_KEY_PREFIX = "single-"


def release_key(row: LogicalRow, index: int) -> str:
    """Key for ``row`` at 0-based position ``index`` of the parsed rows."""
    if row.album_id:
        return row.album_id
    return SINGLE_KEY_PREFIX + (row.obra_code or str(index))


def group_rows(rows: Sequence[LogicalRow]) -> dict[str, ReleaseGroup]:
    """Partition ``rows`` into release groups.

    Returns:
        Ordered mapping key -> ReleaseGroup. Groups appear in first-seen
        order and keep their rows in sheet order.
    """
    buckets: dict[str, list[LogicalRow]] = {}
    album_keys: dict[str, str] = {}  # album_id -> bucket key
    for index, row in enumerate(rows):
        key = release_key(row, index)
        if not row.album_id:
            # a work code shared by several singles must not merge them
            base, n = key, 1
            if key in buckets:
                key = f"{base}-{index}"
            while key in buckets:
                key = f"{base}-{index}-{n}"
                n += 1
            buckets[key] = [row]
            continue
        if row.album_id not in album_keys:
            base, n = key, 1
            while key in buckets:
                key = f"{base}-album-{n}"
                n += 1
            album_keys[row.album_id] = key
            buckets[key] = []
        buckets[album_keys[row.album_id]].append(row)

    groups = {key: ReleaseGroup(key=key, rows=tuple(members)) for key, members in buckets.items()}
    logger.debug("grouped %d rows into %d releases", len(rows), len(groups))
    return groups
