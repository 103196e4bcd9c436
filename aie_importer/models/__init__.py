"""Domain models for the release importer.

Rows, release groups, the record tree written to the content store, run
summaries and configuration.
"""

from .config_models import AccountLookupConfig, DatabaseConfig, FieldKeyMap, ImporterConfig
from .import_summary import ImportAccumulator, ImportSummary
from .logical_row import LOGICAL_FIELDS, LogicalRow
from .release import (
    PerformerEntry,
    ReleaseGroup,
    ReleaseKind,
    ReleaseRecord,
    SongEntry,
)

__all__ = [
    # Configuration models
    "AccountLookupConfig",
    "DatabaseConfig",
    "FieldKeyMap",
    "ImporterConfig",
    # Row / release models
    "LOGICAL_FIELDS",
    "LogicalRow",
    "PerformerEntry",
    "ReleaseGroup",
    "ReleaseKind",
    "ReleaseRecord",
    "SongEntry",
    # Run results
    "ImportAccumulator",
    "ImportSummary",
]
