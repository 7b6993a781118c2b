"""Factory Boy definition for :class:`authcore.models.SessionCredential`."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

from authcore.models import SessionCredential

import factory
from tests.factories import BaseFactory
from tests.helpers.clock import EPOCH


class SessionCredentialFactory(BaseFactory):
    """
    Build persisted :class:`SessionCredential` rows.

    Notes
    -----
    - ``credential_digest`` is a placeholder; tests that need a matching secret
      should compute it with :class:`CredentialDigester` and pass it explicitly.
    """

    class Meta:
        model = SessionCredential

    id = factory.LazyFunction(lambda: uuid4().hex)
    user_id = factory.Sequence(lambda n: f"user-{n}")
    credential_digest = factory.Sequence(lambda n: f"{n:064x}")
    created_at = EPOCH
    expires_at = factory.LazyAttribute(lambda o: o.created_at + timedelta(days=7))
    revoked_at = None
    device_info = "pytest/1.0"
    client_address = "203.0.113.7"
