"""Repository package exposing persistence-layer access for persisted models."""

from __future__ import annotations

from authcore.repositories.base import BaseRepository
from authcore.repositories.session_credential import SessionCredentialRepository

__all__ = ["BaseRepository", "SessionCredentialRepository"]
