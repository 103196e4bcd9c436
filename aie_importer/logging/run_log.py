from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..models.import_summary import ImportSummary

"""Persisted run log: one plain-text file per import run.

Files are named ``aieimporter-YYYY-MM-DD_HH-MM-SS.log`` (UTC) and contain the
timestamp, source file, publish status, counts, every warning and the run
duration. Writing the log never fails an import: I/O errors are logged and
swallowed by ``write``.
"""

__all__ = [
    "RunLogWriter",
    "render_run_log",
]

logger = logging.getLogger(__name__)

FILENAME_FMT = "%Y-%m-%d_%H-%M-%S"
TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"


def render_run_log(summary: ImportSummary) -> str:
    lines = [
        f"Timestamp: {summary.end_time.strftime(TIMESTAMP_FMT)} UTC",
        f"Source file: {summary.source_file}",
        f"Publish status: {summary.publish_status}",
        (
            f"Counts => albums: {summary.albums_created}, "
            f"singles: {summary.singles_created}, "
            f"songs: {summary.songs_created}, "
            f"performers: {summary.performers_created}"
        ),
    ]
    if summary.warnings:
        lines.append("Warnings:")
        lines.extend(f"- {w}" for w in summary.warnings)
    else:
        lines.append("Warnings: none")
    lines.append(f"Duration: {summary.elapsed_seconds:.4f} seconds")
    return "\n".join(lines) + "\n"


class RunLogWriter:
    """Writes run logs under ``log_dir``; the path is fixed on first access."""

    def __init__(self, log_dir: Path | str = "./logs") -> None:
        self.log_dir = Path(log_dir)
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(FILENAME_FMT)
            self._file_path = self.log_dir / f"aieimporter-{stamp}.log"
        return self._file_path

    def write(self, summary: ImportSummary) -> Path | None:
        """Write ``summary``; returns the file path, or None if it could not be written."""
        try:
            fp = self.file_path
            fp.write_text(render_run_log(summary), encoding="utf-8")
        except OSError as e:
            logger.warning("run log not written (%s): %s", self.log_dir, e)
            return None
        return fp
