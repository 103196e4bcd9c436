from __future__ import annotations

import copy
import itertools
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..models.release import AccountId, RecordId

"""Store contracts the importer core depends on, plus in-memory stores.

The content store and the account store are external collaborators. The
core only needs: create a record, set a field, set a nested (repeater) field,
and look up an account by identifier. The in-memory implementations back
``--dry-run`` and the test suite.
"""

__all__ = [
    "AccountStore",
    "ContentStore",
    "InMemoryAccountStore",
    "InMemoryContentStore",
    "StoredRecord",
    "StoreError",
]


class StoreError(Exception):
    """Raised when a store rejects an operation."""


class ContentStore(Protocol):
    def create_record(
        self,
        record_type: str,
        title: str,
        status: str,
        owner_account_id: AccountId | None = None,
    ) -> RecordId: ...

    def set_field(self, record_id: RecordId, field_key: str, value: Any) -> None: ...

    def set_nested_field(
        self, record_id: RecordId, field_key: str, rows: Sequence[dict[str, Any]]
    ) -> None: ...


class AccountStore(Protocol):
    def find_account_by_identifier(self, identifier: str) -> AccountId | None: ...


@dataclass
class StoredRecord:
    record_id: int
    record_type: str
    title: str
    status: str
    owner_account_id: AccountId | None
    fields: dict[str, Any] = field(default_factory=dict)


class InMemoryContentStore:
    """Dict-backed content store.

    ``reject_titles`` makes ``create_record`` fail for matching titles so
    callers can exercise group-level failure handling.
    """

    def __init__(self, reject_titles: Iterable[str] = ()) -> None:
        self.records: dict[int, StoredRecord] = {}
        self.reject_titles = set(reject_titles)
        self._ids = itertools.count(1)

    def create_record(
        self,
        record_type: str,
        title: str,
        status: str,
        owner_account_id: AccountId | None = None,
    ) -> int:
        if title in self.reject_titles:
            raise StoreError(f"record rejected: '{title}'")
        record_id = next(self._ids)
        self.records[record_id] = StoredRecord(
            record_id=record_id,
            record_type=record_type,
            title=title,
            status=status,
            owner_account_id=owner_account_id,
        )
        return record_id

    def _get(self, record_id: RecordId) -> StoredRecord:
        try:
            return self.records[int(record_id)]
        except (KeyError, ValueError):
            raise StoreError(f"unknown record id: {record_id}") from None

    def set_field(self, record_id: RecordId, field_key: str, value: Any) -> None:
        self._get(record_id).fields[field_key] = value

    def set_nested_field(
        self, record_id: RecordId, field_key: str, rows: Sequence[dict[str, Any]]
    ) -> None:
        self._get(record_id).fields[field_key] = copy.deepcopy(list(rows))

    def by_type(self, record_type: str) -> list[StoredRecord]:
        return [r for r in self.records.values() if r.record_type == record_type]


class InMemoryAccountStore:
    """Identifier -> account id mapping.

    Accepts either a mapping or (identifier, account_id) pairs; with pairs,
    the first account registered for an identifier wins, as in a real
    ordered lookup.
    """

    def __init__(self, accounts: dict[str, AccountId] | Iterable[tuple[str, AccountId]] = ()) -> None:
        items = accounts.items() if isinstance(accounts, dict) else accounts
        self._accounts: dict[str, AccountId] = {}
        for identifier, account_id in items:
            self._accounts.setdefault(identifier, account_id)
        self.lookups: list[str] = []

    def find_account_by_identifier(self, identifier: str) -> AccountId | None:
        self.lookups.append(identifier)
        return self._accounts.get(identifier)
