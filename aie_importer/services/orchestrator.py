from __future__ import annotations

import logging
from pathlib import Path

from ..db.store import AccountStore, ContentStore
from ..excel.reader import check_source, parse_rows
from ..models.config_models import PUBLISH_STATUSES, ImporterConfig
from ..models.import_summary import ImportAccumulator, ImportSummary
from ..models.release import ReleaseGroup
from .account_resolver import AccountResolver
from .context import ImportContext
from .grouping import group_rows
from .progress import ProgressTracker
from .record_builder import build_release_record
from .repeater_builder import write_song_repeater

"""Import orchestration: workbook -> release records.

parse -> group -> for each group (first-seen order): create the record,
then its song/performer repeater. Counters and warnings live in one
ImportAccumulator owned by the run.

Only file-level failures (missing file, wrong format, unreadable workbook)
and invalid run arguments escape ``run_import``; anything that goes wrong
inside a group becomes a warning and the next group is processed.
"""

__all__ = [
    "ProcessingError",
    "run_import",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Raised for invalid run arguments, before any record is created."""


def _process_group(group: ReleaseGroup, ctx: ImportContext) -> None:
    record = build_release_record(group, ctx)
    if record is None:
        return
    result = write_song_repeater(group, record, ctx)
    record = result.record
    ctx.accumulator.add_release(record.kind, result.songs, result.performers)
    if not result.saved:
        logger.warning(
            "%s %r saved as record #%s without its %d songs",
            record.kind.value,
            record.title,
            record.record_id,
            len(record.songs),
        )
        return
    logger.info(
        "%s %r imported as record #%s (songs=%d performers=%d)",
        record.kind.value,
        record.title,
        record.record_id,
        result.songs,
        result.performers,
    )


def run_import(
    file_path: Path | str,
    publish_status: str = "publish",
    *,
    content_store: ContentStore,
    account_store: AccountStore,
    config: ImporterConfig | None = None,
    show_progress: bool | None = None,
) -> ImportSummary:
    """Import every release described in the workbook at ``file_path``.

    Args:
        file_path: Path to the .xlsx workbook
        publish_status: Status given to every created record (publish|draft)
        content_store: Target content store
        account_store: Store used to resolve cedulas to accounts
        config: Column map, record types and field keys (defaults if None)
        show_progress: Force the progress bar on/off (None = TTY only)

    Returns:
        ImportSummary with counts and every warning, in emission order

    Raises:
        ProcessingError: unsupported publish status
        SpreadsheetError: file missing, not .xlsx, or unreadable
    """
    config = config or ImporterConfig()
    path = Path(file_path)
    if publish_status not in PUBLISH_STATUSES:
        raise ProcessingError(
            f"unsupported publish status '{publish_status}' (expected one of {sorted(PUBLISH_STATUSES)})"
        )
    check_source(path)

    accumulator = ImportAccumulator(publish_status=publish_status, source_file=str(path))
    ctx = ImportContext(
        content_store=content_store,
        resolver=AccountResolver(account_store),
        field_keys=config.field_keys,
        record_types=config.record_types,
        publish_status=publish_status,
        accumulator=accumulator,
    )

    rows = parse_rows(path, config.columns)
    groups = group_rows(rows)
    logger.info("Importing %d releases from %s (status=%s)", len(groups), path.name, publish_status)

    with ProgressTracker(len(groups), enabled=show_progress) as progress:
        for group in groups.values():
            progress.start_group(group.key)
            try:
                _process_group(group, ctx)
            except Exception as e:
                logger.exception("group=%s unexpected error", group.key)
                accumulator.warn(f'Unexpected error while importing group "{group.key}": {e}')
            progress.set_postfix(
                albums=accumulator.albums_created,
                singles=accumulator.singles_created,
                warnings=len(accumulator.warnings),
            )
            progress.finish_group()

    summary = accumulator.freeze()
    logger.debug(
        "account lookups=%d for %d rows", ctx.resolver.lookups, len(rows)
    )
    return summary
