from __future__ import annotations

from ..models.import_summary import ImportSummary

"""Summary line rendering.

Format:
SUMMARY albums={n} singles={n} songs={n} performers={n} warnings={n}
status={publish|draft} elapsed_sec={elapsed}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(summary: ImportSummary) -> str:
    """Render the one-line SUMMARY for ``summary``.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> s = ImportSummary(1, 0, 1, 1, (), "publish", "a.xlsx", t, t, 2.0)
        >>> render_summary_line(s)
        'SUMMARY albums=1 singles=0 songs=1 performers=1 warnings=0 status=publish elapsed_sec=2'
    """
    return (
        f"SUMMARY albums={summary.albums_created} "
        f"singles={summary.singles_created} "
        f"songs={summary.songs_created} "
        f"performers={summary.performers_created} "
        f"warnings={len(summary.warnings)} "
        f"status={summary.publish_status} "
        f"elapsed_sec={_format_seconds(summary.elapsed_seconds)}"
    )


def render_counts_message(summary: ImportSummary) -> str:
    """Human-readable counts line, as shown after an import completes."""
    return (
        f"Import completed. Albums: {summary.albums_created}, "
        f"Singles: {summary.singles_created}, "
        f"Songs: {summary.songs_created}, "
        f"Performers: {summary.performers_created}."
    )
