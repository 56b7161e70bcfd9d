from urllib.parse import parse_qs, urlsplit

import pytest
from typer.testing import CliRunner

import token_relay.cli.main as cli_main
import token_relay.cli.status as status
from token_relay.cli.main import app
from token_relay.cli.status import CheckResult, check_config, check_token_store
from token_relay.config import Settings
from token_relay.domain.entities import UserToken


runner = CliRunner()


@pytest.fixture()
def stored_tokens(token_storage, monkeypatch):
    monkeypatch.setattr(cli_main.settings, "TOKEN_DIR", token_storage.directory)
    return token_storage


def test_auth_url_prints_consent_url():
    result = runner.invoke(app, ["auth-url", "client1"])

    assert result.exit_code == 0
    url = result.stdout.strip().splitlines()[-1]
    assert parse_qs(urlsplit(url).query)["state"] == ["client1"]


def test_auth_url_rejects_unsafe_client_id():
    result = runner.invoke(app, ["auth-url", "../x"])

    assert result.exit_code == 2


def test_status_lists_stored_tokens(stored_tokens):
    stored_tokens.save("client1", UserToken(email="a@b.com", refresh_token="1//0abcdefghijklmnop"))

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "Config" in result.stdout
    assert "1 client(s)" in result.stdout
    assert "client1" in result.stdout
    assert "a@b.com" in result.stdout
    assert "1//0abcdefghijklmnop" not in result.stdout


def test_status_failure_propagates(monkeypatch, stored_tokens):
    stub = lambda *, storage=None, checks=None: [
        CheckResult("Config", False, "missing CLIENT_SECRET"),
        CheckResult("Store", True, "0 client(s)"),
    ]
    monkeypatch.setattr(status, "run_status_checks", stub)
    monkeypatch.setattr(cli_main, "run_status_checks", stub)

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 1
    assert "FAIL" in result.stdout
    assert "missing CLIENT_SECRET" in result.stdout


def test_serve_runs_uvicorn_on_configured_port(monkeypatch):
    captured = {}

    import uvicorn

    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: captured.update(target=target, **kwargs))

    result = runner.invoke(app, ["serve", "--port", "3001"])

    assert result.exit_code == 0
    assert captured == {"target": "token_relay.api:app", "host": cli_main.settings.HOST, "port": 3001}


def test_check_config_flags_missing_values():
    settings = Settings.model_construct(CLIENT_ID="id", CLIENT_SECRET="", REDIRECT_URI="")

    result = check_config(settings)

    assert not result.ok
    assert "CLIENT_SECRET" in result.detail
    assert "REDIRECT_URI" in result.detail


def test_check_token_store_before_first_save(token_storage):
    result = check_token_store(token_storage)

    assert result.ok
    assert "not created yet" in result.detail


def test_serve_configures_logging_before_starting(monkeypatch):
    calls = []

    import uvicorn

    monkeypatch.setattr(cli_main, "configure_logging", lambda: calls.append("configure"))
    monkeypatch.setattr(cli_main, "log_message", lambda msg, level="INFO": calls.append(msg))
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append("run"))

    result = runner.invoke(app, ["serve", "--port", "3001"])

    assert result.exit_code == 0
    assert calls == ["configure", "Server is running on port 3001", "run"]
