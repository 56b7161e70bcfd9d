import os
import sys
import tempfile
from pathlib import Path

import pytest

# Settings are read once at import time, so the required values must exist
# before any token_relay module is imported.
os.environ.setdefault("CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("REDIRECT_URI", "http://localhost:3000/")
os.environ.setdefault("RELAY_LOG_TO_CONSOLE", "false")
os.environ.setdefault("RELAY_LOG_DIR", tempfile.mkdtemp(prefix="token-relay-logs-"))


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from token_relay.infrastructure.token_storage import JsonFileTokenStorage  # noqa: E402


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(self, status_code=200, payload=None, reason=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason if reason is not None else ("OK" if status_code == 200 else "Bad Request")
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture()
def make_response():
    return FakeResponse


@pytest.fixture()
def token_storage(tmp_path):
    return JsonFileTokenStorage(tmp_path / "RefreshTokens")
