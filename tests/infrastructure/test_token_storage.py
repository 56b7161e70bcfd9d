import json
import os

import pytest

from token_relay.application.exceptions import InvalidClientIdError, TokenStorageError
from token_relay.domain.entities import StoredToken, UserToken
from token_relay.infrastructure import token_storage as token_storage_module
from token_relay.infrastructure.token_storage import JsonFileTokenStorage


def test_load_returns_none_when_missing(token_storage):
    assert token_storage.load("unknown") is None


def test_load_logs_error_code_when_missing(token_storage, monkeypatch):
    messages = []
    monkeypatch.setattr(token_storage_module, "log_message", lambda msg, level="INFO": messages.append((msg, level)))

    assert token_storage.load("unknown") is None
    assert any("ENOENT" in msg for msg, _ in messages)


def test_save_and_load_round_trip(token_storage):
    token = UserToken(email="a@b.com", refresh_token="R1")

    token_storage.save("client1", token)

    assert token_storage.load("client1") == StoredToken(user_token=token)


def test_save_writes_user_token_envelope(tmp_path):
    directory = tmp_path / "nested" / "RefreshTokens"
    storage = JsonFileTokenStorage(directory)

    storage.save("client1", UserToken(email="a@b.com", refresh_token="R1"))

    with (directory / "client1.json").open("r", encoding="utf-8") as handle:
        assert json.load(handle) == {"userToken": {"email": "a@b.com", "refreshToken": "R1"}}


def test_second_save_overwrites_first(token_storage):
    token_storage.save("client1", UserToken(email="a@b.com", refresh_token="R1"))
    token_storage.save("client1", UserToken(email="c@d.com", refresh_token="R2"))

    stored = token_storage.load("client1")

    assert stored.user_token == UserToken(email="c@d.com", refresh_token="R2")


def test_load_returns_none_for_corrupt_file(token_storage):
    token_storage.directory.mkdir(parents=True)
    (token_storage.directory / "client1.json").write_text("{not json", encoding="utf-8")

    assert token_storage.load("client1") is None


def test_load_returns_none_for_empty_file(token_storage):
    token_storage.directory.mkdir(parents=True)
    (token_storage.directory / "client1.json").write_text("", encoding="utf-8")

    assert token_storage.load("client1") is None


def test_load_returns_none_when_envelope_missing(token_storage):
    token_storage.directory.mkdir(parents=True)
    (token_storage.directory / "client1.json").write_text(json.dumps({"email": "a@b.com"}), encoding="utf-8")

    assert token_storage.load("client1") is None


def test_save_raises_storage_error_when_directory_is_a_file(tmp_path):
    blocker = tmp_path / "RefreshTokens"
    blocker.write_text("not a directory", encoding="utf-8")
    storage = JsonFileTokenStorage(blocker)

    with pytest.raises(TokenStorageError):
        storage.save("client1", UserToken(email="a@b.com", refresh_token="R1"))


@pytest.mark.parametrize("client_id", ["../escape", "a/b", "..", ""])
def test_unsafe_client_ids_are_rejected(token_storage, client_id):
    with pytest.raises(InvalidClientIdError):
        token_storage.save(client_id, UserToken(email="a@b.com", refresh_token="R1"))
    with pytest.raises(InvalidClientIdError):
        token_storage.load(client_id)


def test_list_client_ids(token_storage):
    assert token_storage.list_client_ids() == []

    token_storage.save("beta", UserToken(email="b@b.com", refresh_token="R2"))
    token_storage.save("alpha", UserToken(email="a@b.com", refresh_token="R1"))

    assert token_storage.list_client_ids() == ["alpha", "beta"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX file permissions only")
def test_save_sets_restrictive_permissions(token_storage):
    token_storage.save("client1", UserToken(email="a@b.com", refresh_token="R1"))

    mode = token_storage.path_for("client1").stat().st_mode & 0o777
    assert mode == 0o600
