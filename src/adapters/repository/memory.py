"""
In-memory repository adapters - Implement the domain's store protocols.

Process-local stores guarded by a lock. Every method holds the lock for its
whole read-modify-write, which gives the same per-identity and per-token
atomicity as the PostgreSQL adapters within a single process. Nothing here
is shared between processes, so run a single worker when using them.
"""

import threading
from datetime import datetime

from src.domain.exceptions import ConflictError
from src.domain.models import Account, PendingRegistration


class InMemoryPendingRegistrationStore:
    """Implements PendingRegistrationStore protocol with two dict indexes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_token: dict[str, PendingRegistration] = {}
        self._token_by_identity: dict[str, str] = {}

    def replace(self, record: PendingRegistration) -> None:
        with self._lock:
            previous = self._token_by_identity.pop(record.identity, None)
            if previous is not None:
                self._by_token.pop(previous, None)
            self._by_token[record.token] = record
            self._token_by_identity[record.identity] = record.token

    def get(self, token: str) -> PendingRegistration | None:
        with self._lock:
            return self._by_token.get(token)

    def delete(self, token: str) -> bool:
        with self._lock:
            return self._remove(token)

    def delete_by_identity(self, identity: str) -> int:
        with self._lock:
            token = self._token_by_identity.get(identity)
            if token is None:
                return 0
            return int(self._remove(token))

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [token for token, record in self._by_token.items() if record.is_expired(now)]
            for token in expired:
                self._remove(token)
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_token)

    def _remove(self, token: str) -> bool:
        # Caller holds the lock.
        record = self._by_token.pop(token, None)
        if record is None:
            return False
        if self._token_by_identity.get(record.identity) == token:
            del self._token_by_identity[record.identity]
        return True


class InMemoryAccountStore:
    """Implements AccountStore protocol keyed by account id, unique on identity."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[str, Account] = {}
        self._id_by_identity: dict[str, str] = {}

    def add(self, account: Account) -> None:
        with self._lock:
            if account.identity in self._id_by_identity:
                raise ConflictError(account.identity)
            self._by_id[account.id] = account
            self._id_by_identity[account.identity] = account.id

    def get_by_identity(self, identity: str) -> Account | None:
        with self._lock:
            account_id = self._id_by_identity.get(identity)
            return self._by_id.get(account_id) if account_id is not None else None

    def exists(self, identity: str) -> bool:
        with self._lock:
            return identity in self._id_by_identity

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
