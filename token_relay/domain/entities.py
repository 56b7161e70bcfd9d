"""Domain entities for tokens persisted by the relay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class UserToken:
    """A Google user's email paired with the refresh token granted for them."""

    email: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {"email": self.email, "refreshToken": self.refresh_token}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserToken":
        return cls(
            email=str(data.get("email") or ""),
            refresh_token=str(data.get("refreshToken") or ""),
        )


@dataclass(frozen=True)
class StoredToken:
    """On-disk envelope holding the token stored for one client identifier."""

    user_token: UserToken

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {"userToken": self.user_token.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StoredToken":
        """Build the envelope from parsed JSON.

        Raises ``ValueError`` when the payload does not carry a ``userToken``
        object, so callers can treat malformed files like unreadable ones.
        """

        user_token = data.get("userToken") if isinstance(data, Mapping) else None
        if not isinstance(user_token, Mapping):
            raise ValueError("Stored token payload is missing 'userToken'.")
        return cls(user_token=UserToken.from_dict(user_token))


__all__ = ["UserToken", "StoredToken"]
