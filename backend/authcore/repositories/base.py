"""Shared plumbing for SQLAlchemy repositories.

Repositories build and execute statements on the session they are given.
Transactions belong to :mod:`authcore.uow`; nothing here commits.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.orm import Session

from authcore.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Statement helpers bound to one mapped class (``model``) and one session."""

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Unit-of-work session; ``None`` uses the Flask-scoped
            ``db.session``.
        """
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    def get(self, entity_id: Any) -> E | None:
        """Load by primary key, refreshing any stale identity-map copy.

        Conditional bulk UPDATEs run with ``synchronize_session=False``, so a
        cached instance may predate them; ``populate_existing`` reloads it.
        """
        stmt = (
            select(self.model)
            .where(self.model.id == entity_id)  # type: ignore[attr-defined]
            .execution_options(populate_existing=True)
        )
        return cast(E | None, self.session.execute(stmt).scalars().first())
