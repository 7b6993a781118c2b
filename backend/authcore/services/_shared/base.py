# authcore/services/_shared/base.py
from __future__ import annotations

import logging
from datetime import datetime

from authcore.services._shared.clock import Clock, ensure_utc, utc_now
from authcore.services._shared.errors import AuthErrorKind, StorageUnavailableError
from authcore.services._shared.result import Outcome


class BaseService:
    """
    Base class for authentication services.

    Responsibilities
    ----------------
    * Own the injected time source so every component of a flow agrees on "now".
    * Provide a per-service logger.
    * Turn storage faults into fail-closed ``STORAGE_UNAVAILABLE`` outcomes.

    Notes
    -----
    - Services hold configuration and ports only; no mutable session data.
    - Services never import Flask; the HTTP layer adapts outcomes to responses.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        """
        Initialize the base service.

        :param clock: Time source returning aware datetimes (defaults to UTC now).
        :type clock: Clock | None
        """
        self._clock = clock or utc_now
        self.log = logging.getLogger(self.__class__.__module__)

    def now_utc(self) -> datetime:
        return ensure_utc(self._clock())

    # -------------------------- Error handling ------------------------------

    def storage_failure(self, exc: StorageUnavailableError, *, event: str) -> Outcome:
        """
        Log a storage fault and return the fail-closed outcome.

        :param exc: Error raised by the repository adapter.
        :param event: Stable log event name.
        :returns: ``Outcome`` carrying ``STORAGE_UNAVAILABLE``.
        """
        self.log.error(
            event,
            extra={"event": event, "operation": exc.operation},
            exc_info=exc,
        )
        return Outcome.failure(AuthErrorKind.STORAGE_UNAVAILABLE)
