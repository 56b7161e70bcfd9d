"""Google OAuth2 client: builds consent URLs and talks to the token endpoint.

The client only holds the application's own credentials. Refresh tokens are
passed per call, so one instance can be shared by concurrent requests without
leaking a user's credentials into another request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Optional, Sequence
from urllib.parse import urlencode

import jwt
import requests
from pydantic import SecretStr

from token_relay.config import Settings, settings, unwrap_secret
from token_relay.infrastructure.log_utils import module_logger

log_message = module_logger(__name__)


AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"

SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",  # spreadsheet access
    "https://www.googleapis.com/auth/userinfo.email",  # tells users apart by email
    "https://www.googleapis.com/auth/drive.file",  # drive picker
)


class ProviderNoResponse(RuntimeError):
    """Raised when Google did not give a usable answer to a token request."""

    kind = "no_response"


class ProviderNetworkError(ProviderNoResponse):
    """The token endpoint could not be reached."""

    kind = "network"


class ProviderTimeout(ProviderNoResponse):
    """The token endpoint did not answer within the configured timeout."""

    kind = "timeout"


class ProviderMalformedResponse(ProviderNoResponse):
    """The token endpoint answered 200 with a body that is not a JSON object."""

    kind = "malformed"


def _status_text(response: requests.Response) -> str:
    if response.reason:
        return str(response.reason)
    try:
        return HTTPStatus(response.status_code).phrase
    except ValueError:
        return str(response.status_code)


@dataclass(frozen=True)
class TokenExchange:
    """Outcome of exchanging an authorization code."""

    status_code: int
    status_text: str
    tokens: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == HTTPStatus.OK

    @property
    def id_token(self) -> Optional[str]:
        return self.tokens.get("id_token") or None

    @property
    def refresh_token(self) -> Optional[str]:
        return self.tokens.get("refresh_token") or None


@dataclass(frozen=True)
class AccessTokenGrant:
    """Outcome of exchanging a refresh token for an access token."""

    status_code: int
    status_text: str
    access_token: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code == HTTPStatus.OK


class GoogleOAuthClient:
    """Thin wrapper around Google's OAuth2 authorization and token endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str | SecretStr,
        redirect_uri: str,
        *,
        scopes: Sequence[str] = SCOPES,
        request_timeout: float = 30.0,
        auth_url: str = AUTH_URL,
        token_url: str = TOKEN_URL,
    ) -> None:
        self.client_id = client_id
        self._client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = tuple(scopes)
        self.auth_url = auth_url
        self.token_url = token_url
        self._request_timeout = request_timeout

    @classmethod
    def from_settings(cls, app_settings: Settings = settings) -> "GoogleOAuthClient":
        return cls(
            app_settings.CLIENT_ID,
            app_settings.CLIENT_SECRET,
            app_settings.REDIRECT_URI,
            request_timeout=app_settings.PROVIDER_TIMEOUT_SECONDS,
        )

    def build_authorize_url(self, state: str) -> str:
        """Return the consent URL carrying ``state`` back to the callback."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "access_type": "offline",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    def exchange_code(self, code: str) -> TokenExchange:
        """Exchange an authorization code for identity and refresh tokens."""
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": unwrap_secret(self._client_secret),
            "redirect_uri": self.redirect_uri,
        }
        response, payload = self._post_token_request(data, context="code exchange")
        return TokenExchange(
            status_code=response.status_code,
            status_text=_status_text(response),
            tokens=payload,
        )

    def refresh_access_token(self, refresh_token: str) -> AccessTokenGrant:
        """Exchange ``refresh_token`` for a short-lived access token."""
        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": unwrap_secret(self._client_secret),
        }
        response, payload = self._post_token_request(data, context="token refresh")
        return AccessTokenGrant(
            status_code=response.status_code,
            status_text=_status_text(response),
            access_token=payload.get("access_token") or None,
        )

    def _post_token_request(self, data: dict, *, context: str) -> tuple[requests.Response, Dict[str, Any]]:
        try:
            response = requests.post(self.token_url, data=data, timeout=self._request_timeout)
        except requests.exceptions.Timeout as exc:
            log_message(f"Google {context} timed out: {exc}", "ERROR")
            raise ProviderTimeout(f"Google {context} timed out") from exc
        except requests.exceptions.RequestException as exc:
            log_message(f"Google {context} request failed: {exc}", "ERROR")
            raise ProviderNetworkError(f"Google {context} request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            payload = None
            if response.status_code == HTTPStatus.OK:
                log_message(f"Failed to parse Google {context} response as JSON: {exc}", "ERROR")
                raise ProviderMalformedResponse(f"Invalid JSON response from Google during {context}.") from exc

        if not isinstance(payload, dict):
            if response.status_code == HTTPStatus.OK:
                log_message(f"Google {context} response was not a JSON object.", "ERROR")
                raise ProviderMalformedResponse(f"Unexpected response shape from Google during {context}.")
            payload = {}

        return response, payload


def decode_email(id_token: str) -> Optional[str]:
    """Read the ``email`` claim from an identity token.

    The signature is not verified: the token was just returned by Google's
    token endpoint over TLS, which is the provenance being trusted.
    """
    try:
        claims = jwt.decode(id_token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        log_message(f"Could not decode identity token: {exc}", "WARN")
        return None

    email = claims.get("email")
    return str(email) if email else None


__all__ = [
    "AUTH_URL",
    "TOKEN_URL",
    "SCOPES",
    "AccessTokenGrant",
    "GoogleOAuthClient",
    "ProviderMalformedResponse",
    "ProviderNetworkError",
    "ProviderNoResponse",
    "ProviderTimeout",
    "TokenExchange",
    "decode_email",
]
