"""Infrastructure implementation of per-client token persistence."""

from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import List, Optional

from token_relay.application.exceptions import TokenStorageError
from token_relay.domain.entities import StoredToken, UserToken
from token_relay.domain.token_storage import TokenStorage
from token_relay.domain.validation import is_valid_client_id, validate_client_id
from token_relay.infrastructure.log_utils import module_logger

log_message = module_logger(__name__)


def _error_code(exc: BaseException) -> str:
    code = getattr(exc, "errno", None)
    if isinstance(code, int):
        return errno.errorcode.get(code, str(code))
    return exc.__class__.__name__


class JsonFileTokenStorage(TokenStorage):
    """Persist one ``{"userToken": ...}`` JSON file per client identifier."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, client_id: str) -> Path:
        return self._directory / f"{validate_client_id(client_id)}.json"

    def load(self, client_id: str) -> Optional[StoredToken]:
        path = self.path_for(client_id)
        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = handle.read()
            if not raw:
                return None
            return StoredToken.from_dict(json.loads(raw))
        except OSError as exc:
            log_message(f"Could not read token for {client_id}: {_error_code(exc)}", "WARN")
            return None
        except ValueError as exc:
            log_message(f"Stored token for {client_id} is not valid JSON: {exc}", "WARN")
            return None

    def save(self, client_id: str, user_token: UserToken) -> None:
        path = self.path_for(client_id)
        log_message(f"Saving token for {client_id}.", "INFO")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as handle:
                json.dump(StoredToken(user_token).to_dict(), handle)
        except OSError as exc:
            log_message(f"Error saving refresh token for {client_id}: {exc}", "ERROR")
            raise TokenStorageError(f"Could not write {path}: {_error_code(exc)}") from exc

        try:
            os.chmod(path, 0o600)
        except OSError as exc:  # pragma: no cover - depends on platform
            log_message(f"Could not set permissions on {path}: {exc}", "WARN")

        log_message(f"Token for {client_id} saved successfully.", "INFO")

    def list_client_ids(self) -> List[str]:
        if not self._directory.is_dir():
            return []
        return sorted(
            entry.stem
            for entry in self._directory.glob("*.json")
            if entry.is_file() and is_valid_client_id(entry.stem)
        )


__all__ = ["JsonFileTokenStorage"]
