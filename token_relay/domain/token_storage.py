"""Domain-level protocol for persisting refresh tokens per client."""

from __future__ import annotations

from typing import List, Optional, Protocol

from token_relay.domain.entities import StoredToken, UserToken


class TokenStorage(Protocol):
    """Abstraction for persisting one token envelope per client identifier."""

    def load(self, client_id: str) -> Optional[StoredToken]:
        """Return the stored token for ``client_id`` if available, otherwise ``None``."""

    def save(self, client_id: str, user_token: UserToken) -> None:
        """Persist ``user_token`` for ``client_id``, replacing any previous record."""

    def list_client_ids(self) -> List[str]:
        """Return the identifiers that currently have a stored token."""


__all__ = ["TokenStorage"]
