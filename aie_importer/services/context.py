from __future__ import annotations

from dataclasses import dataclass

from ..db.store import ContentStore
from ..models.config_models import FieldKeyMap
from ..models.import_summary import ImportAccumulator
from ..models.release import ReleaseKind
from .account_resolver import AccountResolver

__all__ = [
    "ImportContext",
]


@dataclass(frozen=True)
class ImportContext:
    """Collaborators and the run-owned accumulator passed to the builders."""
    content_store: ContentStore
    resolver: AccountResolver
    field_keys: FieldKeyMap
    record_types: dict[ReleaseKind, str]
    publish_status: str
    accumulator: ImportAccumulator
