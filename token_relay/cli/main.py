"""
Command-line interface for the token relay.

Starts the HTTP relay and offers a couple of helpers for operators: printing
the consent URL for a client identifier and reporting on stored tokens.
"""
from rich.console import Console
from rich.table import Table

from typing_extensions import Annotated

import typer

from typer import Argument, Option

from token_relay.application.exceptions import InvalidClientIdError
from token_relay.cli.status import render_results, run_status_checks
from token_relay.config import settings
from token_relay.domain.validation import validate_client_id
from token_relay.infrastructure.google_oauth_client import GoogleOAuthClient
from token_relay.infrastructure.log_utils import module_logger
from token_relay.infrastructure.token_storage import JsonFileTokenStorage
from token_relay.logging_setup import configure_logging
from token_relay.utils.formatters import truncate_secret

console = Console()
log_message = module_logger(__name__)

app = typer.Typer(
    name="token-relay",
    help="OAuth2 authorization-code relay that stores Google refresh tokens per client.",
    add_completion=False,
)


@app.command()
def serve(
    host: Annotated[str, Option(help="Interface to bind.")] = settings.HOST,
    port: Annotated[int, Option(help="Port to listen on.")] = settings.PORT,
) -> None:
    """
    Run the relay's HTTP server.
    """
    import uvicorn

    configure_logging()
    log_message(f"Server is running on port {port}", "INFO")
    uvicorn.run("token_relay.api:app", host=host, port=port)


@app.command("auth-url")
def auth_url(
    client_id: Annotated[str, Argument(help="Client identifier to carry through the consent screen.")],
) -> None:
    """
    Print the Google consent URL for a client identifier.
    """
    try:
        validate_client_id(client_id)
    except InvalidClientIdError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)

    url = GoogleOAuthClient.from_settings(settings).build_authorize_url(state=client_id)
    typer.echo("-> Visit this URL to authorize the relay with Google:")
    typer.echo(url)


@app.command()
def status() -> None:
    """
    Check configuration and list the refresh tokens currently stored.
    """
    storage = JsonFileTokenStorage(settings.TOKEN_DIR)
    results = run_status_checks(storage=storage)
    typer.echo(render_results(results))

    client_ids = storage.list_client_ids()
    if client_ids:
        table = Table(title="Stored tokens")
        table.add_column("Client ID")
        table.add_column("Email")
        table.add_column("Refresh token")
        for client_id in client_ids:
            stored = storage.load(client_id)
            if stored is None:
                table.add_row(client_id, "[red]unreadable[/red]", "-")
                continue
            table.add_row(
                client_id,
                stored.user_token.email or "-",
                truncate_secret(stored.user_token.refresh_token),
            )
        console.print(table)

    if not all(result.ok for result in results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
