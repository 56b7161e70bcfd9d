from functools import lru_cache

from fastapi import Depends, FastAPI, Query
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

from token_relay.application.exceptions import TokenStorageError
from token_relay.config import settings  # loads .env via BaseSettings
from token_relay.domain.entities import UserToken
from token_relay.domain.token_storage import TokenStorage
from token_relay.domain.validation import is_valid_client_id
from token_relay.infrastructure.google_oauth_client import (
    GoogleOAuthClient,
    ProviderNoResponse,
    decode_email,
)
from token_relay.infrastructure.log_utils import module_logger
from token_relay.infrastructure.token_storage import JsonFileTokenStorage
from token_relay.logging_setup import configure_logging
from token_relay.pages import render_confirmation_page

log_message = module_logger(__name__)

app = FastAPI(title="Token Relay")
configure_logging()


@lru_cache(maxsize=1)
def get_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient.from_settings(settings)


@lru_cache(maxsize=1)
def get_token_storage() -> TokenStorage:
    return JsonFileTokenStorage(settings.TOKEN_DIR)


# OAuth callback - Google redirects the browser here with ?code=...&state=...
@app.get("/")
def oauth_callback(
    code: str | None = Query(None, description="Authorization code issued by Google."),
    state: str | None = Query(None, description="Client identifier passed through the consent screen."),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    token_storage: TokenStorage = Depends(get_token_storage),
):
    """
    Exchange the authorization code, store the refresh token under the client
    identifier carried in ``state`` and render a confirmation page.
    """
    client_id = state
    if not code or not client_id:
        return PlainTextResponse("Auth Code or clientId Missing", status_code=400)
    if not is_valid_client_id(client_id):
        return PlainTextResponse("Invalid clientId", status_code=400)

    try:
        exchange = oauth_client.exchange_code(code)
    except ProviderNoResponse as exc:
        log_message(f"No usable response exchanging code ({exc.kind}): {exc}", "ERROR")
        return PlainTextResponse("no response from google api.", status_code=400)

    if not exchange.ok:
        log_message(f"Error exchanging code for tokens. {exchange.status_text}", "ERROR")
        return PlainTextResponse(exchange.status_text, status_code=exchange.status_code)

    if exchange.id_token and exchange.refresh_token:
        email = decode_email(exchange.id_token)
        if not exchange.refresh_token or not email:
            return PlainTextResponse("no token or no email", status_code=500)

        try:
            token_storage.save(client_id, UserToken(email=email, refresh_token=exchange.refresh_token))
        except TokenStorageError as exc:
            log_message(f"Refresh token for {client_id} was not persisted: {exc}", "ERROR")
            return PlainTextResponse("Failed to save token", status_code=500)

        return HTMLResponse(render_confirmation_page(email, exchange.refresh_token))

    return PlainTextResponse("Exhaustive Unhandled Error", status_code=500)


@app.get("/authorize")
def authorize(
    client_id: str | None = Query(None, alias="clientId", description="Caller's client identifier."),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
):
    """Redirect the browser to Google's consent screen."""
    try:
        if not client_id:
            raise ValueError("Missing client ID")
        if not is_valid_client_id(client_id):
            return PlainTextResponse("Invalid clientId", status_code=400)

        authorize_url = oauth_client.build_authorize_url(state=client_id)
        return RedirectResponse(authorize_url, status_code=302)
    except Exception as exc:
        log_message(f"Error in /authorize: {exc}", "ERROR")

    return PlainTextResponse("Internal Server Error", status_code=500)


@app.post("/refreshToken")
def refresh_token(
    client_id: str | None = Query(None, alias="clientId", description="Caller's client identifier."),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    token_storage: TokenStorage = Depends(get_token_storage),
):
    """Trade the stored refresh token for a fresh access token."""
    if not client_id:
        return JSONResponse({"error": "Client ID is required"}, status_code=400)
    if not is_valid_client_id(client_id):
        return JSONResponse({"error": "Invalid clientId"}, status_code=400)

    saved_token = token_storage.load(client_id)
    if saved_token is None:
        return PlainTextResponse("No token found", status_code=404)

    user_token = saved_token.user_token
    if not user_token.refresh_token:
        return JSONResponse({"error": "no token available"}, status_code=404)

    try:
        grant = oauth_client.refresh_access_token(user_token.refresh_token)
    except ProviderNoResponse as exc:
        log_message(f"No usable response refreshing token for {client_id} ({exc.kind}): {exc}", "ERROR")
        return PlainTextResponse("no response form google api.", status_code=400)

    if grant.ok and grant.access_token:
        return JSONResponse(
            {"token": grant.access_token, "email": user_token.email},
            status_code=grant.status_code,
        )

    log_message(f"Token refresh for {client_id} failed: {grant.status_code} {grant.status_text}", "WARN")
    return PlainTextResponse(grant.status_text, status_code=grant.status_code)
