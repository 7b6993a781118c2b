"""Transaction boundary contract for session-credential persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from authcore.repositories import SessionCredentialRepository


class UnitOfWork(ABC):
    """
    One transaction around one repository operation.

    ``credentials`` is bound to the unit's session. Leaving the ``with`` block
    commits; an exception inside it rolls back and propagates.
    """

    credentials: SessionCredentialRepository

    @abstractmethod
    def __enter__(self) -> Self: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
