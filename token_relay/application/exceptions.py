"""Custom exception hierarchy for the token relay."""

from __future__ import annotations


class ApplicationError(Exception):
    """Base exception for relay failures."""


class InvalidClientIdError(ApplicationError, ValueError):
    """Raised when a client identifier is not safe to use as a storage key."""


class TokenStorageError(ApplicationError):
    """Raised when a refresh token cannot be persisted."""


__all__ = [
    "ApplicationError",
    "InvalidClientIdError",
    "TokenStorageError",
]
