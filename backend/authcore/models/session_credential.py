"""Persisted refresh-session credential."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from authcore.core.extensions import db
from authcore.services._shared.clock import ensure_utc
from authcore.services._shared.ports.session_repository import SessionRecord

from .base import ReprMixin


class SessionCredential(ReprMixin, db.Model):
    """
    One row per issued refresh token.

    Rows are never deleted by the authentication flows; consuming or revoking a
    credential only stamps ``revoked_at`` so the table doubles as an audit
    trail. Housekeeping removes dead rows through ``prune``.

    Fields
    ------
    id : str
        Opaque record id (uuid4 hex).
    user_id : str
        Subject the session belongs to.
    credential_digest : str
        Keyed hex digest of the refresh secret; the secret itself is never stored.
    created_at, expires_at : datetime
        Issue time and absolute expiry (timezone-aware, UTC).
    revoked_at : datetime | None
        Set exactly once, when the credential is consumed or revoked.
    device_info : str | None
        Client ``User-Agent`` at issue time.
    client_address : str | None
        Client IP (IPv6-sized column).
    """

    __tablename__ = "session_credentials"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    credential_digest: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    device_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    __table_args__ = (
        Index("ix_session_credentials_user_id_created_at", "user_id", "created_at"),
        Index("ix_session_credentials_expires_at", "expires_at"),
    )

    # -------------------- Record mapping --------------------

    def to_record(self) -> SessionRecord:
        """
        Convert the row into the immutable port-level record.

        SQLite drops tzinfo on round-trip, so timestamps are normalized to UTC.
        """
        return SessionRecord(
            id=self.id,
            user_id=self.user_id,
            credential_digest=self.credential_digest,
            created_at=ensure_utc(self.created_at),
            expires_at=ensure_utc(self.expires_at),
            revoked_at=ensure_utc(self.revoked_at) if self.revoked_at else None,
            device_info=self.device_info,
            client_address=self.client_address,
        )

    @classmethod
    def from_record(cls, record: SessionRecord) -> SessionCredential:
        return cls(
            id=record.id,
            user_id=record.user_id,
            credential_digest=record.credential_digest,
            created_at=ensure_utc(record.created_at),
            expires_at=ensure_utc(record.expires_at),
            revoked_at=ensure_utc(record.revoked_at) if record.revoked_at else None,
            device_info=record.device_info,
            client_address=record.client_address,
        )
