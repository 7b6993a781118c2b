"""Session credential repository: conditional state transitions in SQL."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, insert, or_, select, update

from authcore.models.session_credential import SessionCredential
from authcore.repositories.base import BaseRepository


class SessionCredentialRepository(BaseRepository[SessionCredential]):
    """Persistence-only repository for :class:`SessionCredential`.

    Revocation is expressed as a single conditional ``UPDATE`` so the database
    arbitrates concurrent callers: the ``WHERE revoked_at IS NULL`` guard lets
    exactly one statement change a given row.
    """

    model = SessionCredential

    def insert(self, row: SessionCredential) -> None:
        """Insert ``row`` with a plain ``INSERT`` (bypasses the identity map).

        A duplicate primary key surfaces as ``IntegrityError`` from the database.
        """
        stmt = insert(SessionCredential).values(
            id=row.id,
            user_id=row.user_id,
            credential_digest=row.credential_digest,
            created_at=row.created_at,
            expires_at=row.expires_at,
            revoked_at=row.revoked_at,
            device_info=row.device_info,
            client_address=row.client_address,
        )
        self.session.execute(stmt)

    def list_active(self, user_id: str, *, now: datetime) -> list[SessionCredential]:
        """Return non-revoked, unexpired rows for ``user_id`` (oldest first).

        :param user_id: Owner of the sessions.
        :param now: Reference time for expiry.
        :rtype: list[SessionCredential]
        """
        stmt = (
            select(SessionCredential)
            .where(
                SessionCredential.user_id == user_id,
                SessionCredential.revoked_at.is_(None),
                SessionCredential.expires_at > now,
            )
            .order_by(SessionCredential.created_at.asc(), SessionCredential.id.asc())
            .execution_options(populate_existing=True)
        )
        return list(self.session.execute(stmt).scalars().all())

    def consume(self, record_id: str, *, now: datetime) -> bool:
        """Revoke ``record_id`` only if it is still active.

        :returns: ``True`` when this statement performed the transition.
        """
        stmt = (
            update(SessionCredential)
            .where(
                SessionCredential.id == record_id,
                SessionCredential.revoked_at.is_(None),
                SessionCredential.expires_at > now,
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def revoke(self, record_id: str, *, now: datetime) -> bool:
        stmt = (
            update(SessionCredential)
            .where(SessionCredential.id == record_id, SessionCredential.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def revoke_all(self, user_id: str, *, now: datetime) -> int:
        stmt = (
            update(SessionCredential)
            .where(SessionCredential.user_id == user_id, SessionCredential.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def prune(self, *, before: datetime) -> int:
        """Delete rows that expired, or were revoked, before ``before``."""
        stmt = (
            delete(SessionCredential)
            .where(
                or_(
                    SessionCredential.expires_at < before,
                    SessionCredential.revoked_at < before,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
