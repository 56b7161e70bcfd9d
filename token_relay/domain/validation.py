"""Validation helpers for caller supplied identifiers."""

from __future__ import annotations

import re

from token_relay.application.exceptions import InvalidClientIdError

MAX_CLIENT_ID_LENGTH = 128
_CLIENT_ID_PATTERN = re.compile(rf"^[A-Za-z0-9_.-]{{1,{MAX_CLIENT_ID_LENGTH}}}$")


def is_valid_client_id(value: str | None) -> bool:
    """Return ``True`` when ``value`` can be used as a storage key."""

    if not value or not _CLIENT_ID_PATTERN.match(value):
        return False
    # "." and ".." style names would resolve to the storage directory itself.
    return value.strip(".") != ""


def validate_client_id(value: str | None) -> str:
    """Return ``value`` unchanged or raise :class:`InvalidClientIdError`.

    Client identifiers double as file names inside the token directory, so
    only letters, digits, ``_``, ``-`` and ``.`` are accepted.
    """

    if not is_valid_client_id(value):
        raise InvalidClientIdError(f"Invalid client identifier: {value!r}")
    return value  # type: ignore[return-value]


__all__ = ["MAX_CLIENT_ID_LENGTH", "is_valid_client_id", "validate_client_id"]
