from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from .release import ReleaseKind

"""Import summary models.

ImportSummary is the immutable result handed back to the caller.
ImportAccumulator is the mutable aggregate owned by a single run: the
builders append warnings to it and the orchestrator bumps its counters.
"""

__all__ = [
    "ImportAccumulator",
    "ImportSummary",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportSummary:
    """Aggregated result of one import run.

    Callers are expected to show the counts and every warning verbatim.
    """
    albums_created: int
    singles_created: int
    songs_created: int
    performers_created: int
    warnings: tuple[str, ...]
    publish_status: str
    source_file: str
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def records_created(self) -> int:
        return self.albums_created + self.singles_created

    def as_dict(self) -> dict[str, object]:
        """Plain mapping in the shape the original importer returned."""
        return {
            "albums_created": self.albums_created,
            "singles_created": self.singles_created,
            "songs_created": self.songs_created,
            "performers_created": self.performers_created,
            "warnings": list(self.warnings),
            "post_status_used": self.publish_status,
        }


class ImportAccumulator:
    """Append-only counters and warnings for one run."""

    def __init__(self, publish_status: str = "publish", source_file: str = "") -> None:
        self.publish_status = publish_status
        self.source_file = source_file
        self.start_time = datetime.now(UTC)
        self.albums_created = 0
        self.singles_created = 0
        self.songs_created = 0
        self.performers_created = 0
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.debug("warning recorded: %s", message)

    def add_release(self, kind: ReleaseKind, songs: int, performers: int) -> None:
        if kind is ReleaseKind.ALBUM:
            self.albums_created += 1
        else:
            self.singles_created += 1
        self.songs_created += songs
        self.performers_created += performers

    def freeze(self) -> ImportSummary:
        end_time = datetime.now(UTC)
        return ImportSummary(
            albums_created=self.albums_created,
            singles_created=self.singles_created,
            songs_created=self.songs_created,
            performers_created=self.performers_created,
            warnings=tuple(self.warnings),
            publish_status=self.publish_status,
            source_file=self.source_file,
            start_time=self.start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - self.start_time).total_seconds(),
        )
