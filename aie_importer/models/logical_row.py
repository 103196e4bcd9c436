from __future__ import annotations

from dataclasses import dataclass, fields

"""LogicalRow model for the release importer.

A LogicalRow is one spreadsheet data row after the column map has been
applied: every logical field holds trimmed cell text, never ``None``.
"""

__all__ = [
    "LOGICAL_FIELDS",
    "LogicalRow",
]


@dataclass(frozen=True)
class LogicalRow:
    """Named-field view of a single non-header spreadsheet row."""
    track_title: str = ""
    artist_name: str = ""
    bmat: str = ""
    performer_name: str = ""
    cedula: str = ""  # national identifier, sole account lookup key
    performer_role: str = ""
    performer_instrument: str = ""
    album_title: str = ""
    album_id: str = ""
    track_isrc: str = ""
    year: str = ""
    duration: str = ""
    obra_code: str = ""  # work code
    sheet_row: int = 0  # 1-based sheet row (header = 1), debug only

    @property
    def song_key(self) -> tuple[str, str]:
        """Identity of the song this row describes within its group."""
        return (self.track_title, self.obra_code)


# The 13 fields addressed by the column map (sheet_row is positional metadata)
LOGICAL_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(LogicalRow) if f.name != "sheet_row"
)
