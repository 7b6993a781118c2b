"""Unit of Work abstractions and the SQLAlchemy implementation.

This package re-exports the SQLAlchemy-backed unit of work used by the session
repository adapter, alongside the abstract contract.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = ["UnitOfWork", "SQLAlchemyUnitOfWork"]
