# authcore/infra/sqlalchemy/sqlalchemy_session_repository.py
from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authcore.models.session_credential import SessionCredential
from authcore.services._shared.errors import StorageUnavailableError
from authcore.services._shared.ports import SessionRecord, SessionRepository
from authcore.uow import SQLAlchemyUnitOfWork


@dataclass(slots=True)
class SQLAlchemySessionRepository(SessionRepository):
    """
    Relational adapter for :class:`SessionRepository`.

    Each call runs inside its own :class:`SQLAlchemyUnitOfWork`, so a successful
    return means the change is committed. Atomicity of ``try_consume`` comes from
    the conditional ``UPDATE`` in
    :class:`~authcore.repositories.SessionCredentialRepository`.

    :param uow_factory: Builds a fresh unit of work per operation.
    """

    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork

    @contextmanager
    def _guard(self, operation: str) -> Iterator[SQLAlchemyUnitOfWork]:
        try:
            with self.uow_factory() as uow:
                yield uow
        except IntegrityError as exc:
            # Duplicate id is a caller bug, not an outage
            raise ValueError(f"Session record rejected by the database: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(operation) from exc

    def create(self, record: SessionRecord) -> None:
        with self._guard("create") as uow:
            uow.credentials.insert(SessionCredential.from_record(record))

    def list_active(self, user_id: str, *, now: datetime) -> list[SessionRecord]:
        with self._guard("list_active") as uow:
            return [row.to_record() for row in uow.credentials.list_active(user_id, now=now)]

    def try_consume(self, record_id: str, *, now: datetime) -> bool:
        with self._guard("try_consume") as uow:
            return uow.credentials.consume(record_id, now=now)

    def revoke(self, record_id: str, *, now: datetime) -> bool:
        with self._guard("revoke") as uow:
            return uow.credentials.revoke(record_id, now=now)

    def revoke_all(self, user_id: str, *, now: datetime) -> int:
        with self._guard("revoke_all") as uow:
            return uow.credentials.revoke_all(user_id, now=now)

    def prune(self, *, before: datetime) -> int:
        with self._guard("prune") as uow:
            return uow.credentials.prune(before=before)

    # ------------------------ inspection ------------------------

    def get(self, record_id: str) -> SessionRecord | None:
        """Fetch a single record snapshot (including revoked ones)."""
        with self._guard("get") as uow:
            row = uow.credentials.get(record_id)
            return row.to_record() if row is not None else None
