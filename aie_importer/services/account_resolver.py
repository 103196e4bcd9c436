from __future__ import annotations

import logging

from ..db.store import AccountStore
from ..models.release import AccountId

"""Account resolution by national identifier (cedula).

This is the single lookup path for every account reference: the record
owner and each performer. Policy:

- the identifier is trimmed; empty input is "not found" without a lookup
- exactly one lookup by identifier; the first match wins
- no match is "not found", never an error

Callers decide whether "not found" deserves a warning.
"""

__all__ = [
    "AccountResolver",
]

logger = logging.getLogger(__name__)


class AccountResolver:
    """Resolve cedulas to account ids through an AccountStore.

    A resolver lives for one import run. With ``cache=True`` repeated
    identifiers hit the store once; results are identical either way.
    """

    def __init__(self, store: AccountStore, *, cache: bool = True) -> None:
        self.store = store
        self._cache: dict[str, AccountId | None] | None = {} if cache else None
        self.lookups = 0

    def resolve(self, identifier: str | None) -> AccountId | None:
        cedula = (identifier or "").strip()
        if not cedula:
            return None
        if self._cache is not None and cedula in self._cache:
            return self._cache[cedula]

        self.lookups += 1
        account_id = self.store.find_account_by_identifier(cedula)
        logger.debug("account lookup cedula=%s -> %s", cedula, account_id)
        if self._cache is not None:
            self._cache[cedula] = account_id
        return account_id
