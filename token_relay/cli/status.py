"""Health check support for the token-relay CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence

from token_relay.config import Settings, settings, unwrap_secret
from token_relay.infrastructure.token_storage import JsonFileTokenStorage


@dataclass
class CheckResult:
    """Represents a single check outcome."""

    name: str
    ok: bool
    detail: str


def check_config(app_settings: Settings = settings) -> CheckResult:
    missing = [
        name
        for name in ("CLIENT_ID", "CLIENT_SECRET", "REDIRECT_URI")
        if not str(unwrap_secret(getattr(app_settings, name, "")) or "").strip()
    ]
    if missing:
        return CheckResult(name="Config", ok=False, detail=f"missing {', '.join(missing)}")
    return CheckResult(name="Config", ok=True, detail=f"redirect {app_settings.REDIRECT_URI}")


def check_token_store(storage: JsonFileTokenStorage) -> CheckResult:
    directory = storage.directory
    if not directory.exists():
        return CheckResult(name="Store", ok=True, detail=f"{directory} not created yet")
    if not os.access(directory, os.W_OK):
        return CheckResult(name="Store", ok=False, detail=f"{directory} is not writable")
    count = len(storage.list_client_ids())
    return CheckResult(name="Store", ok=True, detail=f"{count} client(s) in {directory}")


def run_status_checks(
    *,
    storage: JsonFileTokenStorage | None = None,
    checks: Sequence[Callable[[], CheckResult]] | None = None,
) -> List[CheckResult]:
    """Executes configuration checks, allowing override for testing."""

    if checks is None:
        token_storage = storage or JsonFileTokenStorage(settings.TOKEN_DIR)
        checks = (
            lambda: check_config(settings),
            lambda: check_token_store(token_storage),
        )

    return [check() for check in checks]


def render_results(results: Iterable[CheckResult]) -> str:
    lines = []
    for result in results:
        status = "OK" if result.ok else "FAIL"
        lines.append(f"{result.name:<8} {status:<4} {result.detail}")
    return "\n".join(lines)
