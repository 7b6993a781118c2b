# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import redis  # type: ignore[import-untyped]

from authcore.services._shared.errors import StorageUnavailableError
from authcore.services._shared.ports import SessionRecord, SessionRepository


def _s(value: bytes | str | None, default: str = "") -> str:
    """Decode helper tolerant of clients with or without ``decode_responses``."""
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisSessionRepository(SessionRepository):
    """
    Redis-backed session repository with atomic consume.

    Layout
    ------
    - ``sess:{id}``: hash with the record fields (``revoked_at`` empty while active).
    - ``sess:u:{user_id}``: sorted set of record ids scored by ``created_at``.

    Records are never deleted by the auth flows. When ``retention`` is set, each
    hash gets a TTL of ``expires_at + retention`` so Redis itself prunes dead
    rows after the audit window.

    :param r: A Redis client (already connected).
    :param retention: Optional audit retention after expiry.
    """

    r: redis.Redis
    retention: timedelta | None = None

    # -------------------- helpers --------------------

    @staticmethod
    def _k(record_id: str) -> str:
        return f"sess:{record_id}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"sess:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> str:
        return f"{dt.timestamp():.6f}"

    @staticmethod
    def _from_ts(raw: str) -> datetime:
        return datetime.fromtimestamp(float(raw), tz=UTC)

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            raise StorageUnavailableError(operation) from exc

    def _to_record(self, record_id: str, h: dict) -> SessionRecord:
        fields = {_s(k): _s(v) for k, v in h.items()}
        revoked_raw = fields.get("revoked_at", "")
        return SessionRecord(
            id=record_id,
            user_id=fields["user_id"],
            credential_digest=fields["credential_digest"],
            created_at=self._from_ts(fields["created_at"]),
            expires_at=self._from_ts(fields["expires_at"]),
            revoked_at=self._from_ts(revoked_raw) if revoked_raw else None,
            device_info=fields.get("device_info") or None,
            client_address=fields.get("client_address") or None,
        )

    def _transition(self, record_id: str, now: datetime, *, require_unexpired: bool) -> bool:
        """
        Set ``revoked_at`` only if the record is currently not revoked.

        Uses WATCH/MULTI/EXEC (optimistic locking): of several concurrent callers
        exactly one EXEC succeeds; the others retry, observe the revocation and
        return ``False``.
        """
        key = self._k(record_id)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h:
                        p.unwatch()
                        return False
                    fields = {_s(k): _s(v) for k, v in h.items()}
                    if fields.get("revoked_at"):
                        p.unwatch()
                        return False
                    if require_unexpired and self._from_ts(fields["expires_at"]) <= now:
                        p.unwatch()
                        return False

                    p.multi()
                    p.hset(key, "revoked_at", self._to_ts(now))
                    p.execute()
                    return True
            except redis.WatchError:
                # Concurrent modification detected; re-read and decide again
                continue

    # -------------------- API ------------------------

    def create(self, record: SessionRecord) -> None:
        key = self._k(record.id)
        mapping = {
            "user_id": record.user_id,
            "credential_digest": record.credential_digest,
            "created_at": self._to_ts(record.created_at),
            "expires_at": self._to_ts(record.expires_at),
            "revoked_at": self._to_ts(record.revoked_at) if record.revoked_at else "",
            "device_info": record.device_info or "",
            "client_address": record.client_address or "",
        }
        with self._guard("create"):
            pipe = self.r.pipeline(transaction=True)
            pipe.hset(key, mapping=mapping)
            pipe.zadd(self._ku(record.user_id), {record.id: record.created_at.timestamp()})
            if self.retention is not None:
                pipe.expireat(key, int((record.expires_at + self.retention).timestamp()))
            pipe.execute()

    def list_active(self, user_id: str, *, now: datetime) -> list[SessionRecord]:
        key_u = self._ku(user_id)
        with self._guard("list_active"):
            ids = [_s(m) for m in self.r.zrange(key_u, 0, -1)]
            if not ids:
                return []
            pipe = self.r.pipeline(transaction=False)
            for record_id in ids:
                pipe.hgetall(self._k(record_id))
            hashes = pipe.execute()

            active: list[SessionRecord] = []
            stale: list[str] = []
            for record_id, h in zip(ids, hashes, strict=True):
                if not h:
                    # Underlying hash gone (retention TTL / prune) -> drop from index
                    stale.append(record_id)
                    continue
                record = self._to_record(record_id, h)
                if record.is_active(now):
                    active.append(record)
            if stale:
                self.r.zrem(key_u, *stale)
        return sorted(active, key=lambda rec: (rec.created_at, rec.id))

    def try_consume(self, record_id: str, *, now: datetime) -> bool:
        with self._guard("try_consume"):
            return self._transition(record_id, now, require_unexpired=True)

    def revoke(self, record_id: str, *, now: datetime) -> bool:
        with self._guard("revoke"):
            return self._transition(record_id, now, require_unexpired=False)

    def revoke_all(self, user_id: str, *, now: datetime) -> int:
        with self._guard("revoke_all"):
            # Snapshot of ids at call time; rows created afterwards are out of scope.
            ids = [_s(m) for m in self.r.zrange(self._ku(user_id), 0, -1)]
            return sum(
                1 for record_id in ids if self._transition(record_id, now, require_unexpired=False)
            )

    def prune(self, *, before: datetime) -> int:
        removed = 0
        with self._guard("prune"):
            for raw_key in self.r.scan_iter(match=self._ku("*")):
                key_u = _s(raw_key)
                for record_id in [_s(m) for m in self.r.zrange(key_u, 0, -1)]:
                    h = self.r.hgetall(self._k(record_id))
                    if h:
                        record = self._to_record(record_id, h)
                        dead = record.expires_at < before or (
                            record.revoked_at is not None and record.revoked_at < before
                        )
                        if not dead:
                            continue
                        self.r.delete(self._k(record_id))
                        removed += 1
                    self.r.zrem(key_u, record_id)
        return removed

    # ------------------------ inspection ------------------------

    def get(self, record_id: str) -> SessionRecord | None:
        """Fetch a single record snapshot (including revoked ones)."""
        with self._guard("get"):
            h = self.r.hgetall(self._k(record_id))
        return self._to_record(record_id, h) if h else None
