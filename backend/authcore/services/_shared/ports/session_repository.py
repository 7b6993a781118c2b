from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """
    Persisted refresh-credential record, one per issued refresh token.

    :ivar id: Unique record identifier generated at issuance.
    :ivar user_id: Owner user identifier (token subject).
    :ivar credential_digest: Keyed one-way digest of the refresh secret.
    :ivar created_at: Issuance time (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked_at: Revocation time, ``None`` while not revoked.
    :ivar device_info: Optional client description for audit.
    :ivar client_address: Optional client network address for audit.
    """

    id: str
    user_id: str
    credential_digest: str
    created_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None
    device_info: str | None = None
    client_address: str | None = None

    def is_active(self, now: datetime) -> bool:
        return self.revoked_at is None and now < self.expires_at


class SessionRepository(Protocol):
    """
    Durable store of session credential records.

    All operations MUST be safe under concurrent callers for the same user, and
    :meth:`try_consume` MUST be an atomic conditional transition. Adapters raise
    :class:`~authcore.services._shared.errors.StorageUnavailableError` when the
    backing store fails.
    """

    def create(self, record: SessionRecord) -> None:
        """
        Insert a new active record.

        This MUST be durably committed *before* any token is handed to a client.
        """

    def list_active(self, user_id: str, *, now: datetime) -> list[SessionRecord]:
        """Active records for ``user_id`` ordered by ``created_at``."""

    def try_consume(self, record_id: str, *, now: datetime) -> bool:
        """
        Atomically move one record from active to revoked.

        :returns: ``True`` for exactly one caller per record; ``False`` when the
            record is unknown, already revoked or expired.
        """

    def revoke(self, record_id: str, *, now: datetime) -> bool:
        """Mark a single record revoked. :returns: True if this call revoked it."""

    def revoke_all(self, user_id: str, *, now: datetime) -> int:
        """
        Revoke every non-revoked record for the user.

        :returns: Number of records affected.
        """

    def prune(self, *, before: datetime) -> int:
        """
        Physically delete records revoked or expired before ``before``.

        Housekeeping only; never called on the request path.
        """


class InMemorySessionRepository(SessionRepository):
    """
    In-memory session repository with atomic consume behaviour.

    .. note::
       A single lock serialises every operation; records are immutable
       snapshots replaced on revocation.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, SessionRecord] = {}
        self._by_user: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    # -------------------------- API ----------------------------

    def create(self, record: SessionRecord) -> None:
        with self._lock:
            if record.id in self._by_id:
                raise ValueError(f"Duplicate session record id: {record.id}")
            self._by_id[record.id] = record
            self._by_user.setdefault(record.user_id, []).append(record.id)

    def list_active(self, user_id: str, *, now: datetime) -> list[SessionRecord]:
        with self._lock:
            records = [self._by_id[i] for i in self._by_user.get(user_id, [])]
        active = [r for r in records if r.is_active(now)]
        return sorted(active, key=lambda r: (r.created_at, r.id))

    def try_consume(self, record_id: str, *, now: datetime) -> bool:
        with self._lock:
            record = self._by_id.get(record_id)
            if record is None or not record.is_active(now):
                return False
            self._by_id[record_id] = replace(record, revoked_at=now)
            return True

    def revoke(self, record_id: str, *, now: datetime) -> bool:
        with self._lock:
            record = self._by_id.get(record_id)
            if record is None or record.revoked_at is not None:
                return False
            self._by_id[record_id] = replace(record, revoked_at=now)
            return True

    def revoke_all(self, user_id: str, *, now: datetime) -> int:
        with self._lock:
            count = 0
            for record_id in self._by_user.get(user_id, []):
                record = self._by_id[record_id]
                if record.revoked_at is None:
                    self._by_id[record_id] = replace(record, revoked_at=now)
                    count += 1
            return count

    def prune(self, *, before: datetime) -> int:
        with self._lock:
            dead = [
                r
                for r in self._by_id.values()
                if r.expires_at < before or (r.revoked_at is not None and r.revoked_at < before)
            ]
            for record in dead:
                del self._by_id[record.id]
                self._by_user[record.user_id].remove(record.id)
            return len(dead)

    # ------------------------ test helpers ----------------------

    def get(self, record_id: str) -> SessionRecord | None:
        """Fetch a single record snapshot (including revoked ones)."""
        return self._by_id.get(record_id)
