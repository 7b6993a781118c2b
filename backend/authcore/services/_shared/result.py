"""Explicit success/failure values returned by the authentication core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, cast

from authcore.services._shared.errors import AuthErrorKind, AuthFailure

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """
    Result of a core operation: either a value or an error kind, never both.

    Callers branch on :attr:`error` (the *kind* of failure) rather than on the
    mere presence of an exception.

    :ivar value: Payload on success, ``None`` on failure.
    :ivar error: Failure kind, ``None`` on success.
    """

    value: T | None = None
    error: AuthErrorKind | None = None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthErrorKind) -> Outcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """
        Return the value or raise :class:`AuthFailure` carrying the error kind.

        :raises AuthFailure: If the outcome is a failure.
        """
        if self.error is not None:
            raise AuthFailure(self.error)
        return cast(T, self.value)
