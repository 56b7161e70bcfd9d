"""
Centralised config for the token relay.

This module consolidates all configuration settings, loading the Google OAuth
application credentials from environment variables (or a ``.env`` file) and
providing typed, validated access to them through a singleton ``settings``
object.
"""

from pathlib import Path
from typing import Any
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE = Path(__file__).resolve()


def _discover_env_file(config_file: Path) -> Path:
    """Return the ``.env`` path to load without assuming the file exists.

    Deployments keep a ``.env`` file alongside the checkout, but it is absent
    in development and CI. Walk the parents looking for one and fall back to
    the repository root (detected via common project markers) when missing.
    """

    parents = list(config_file.parents)

    for parent in parents:
        env_file = parent / ".env"
        if env_file.exists():
            return env_file

    for marker in ("pyproject.toml", ".git"):
        for parent in parents:
            if (parent / marker).exists():
                return parent / ".env"

    fallback_root = parents[1] if len(parents) > 1 else parents[0]
    return fallback_root / ".env"


ENV_FILE_PATH = _discover_env_file(CONFIG_FILE)


class Settings(BaseSettings):
    """
    Centralised and validated relay settings.
    """
    model_config = SettingsConfigDict(
        env_file=ENV_FILE_PATH, env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )

    # --- GOOGLE OAUTH APPLICATION (from environment) ---
    CLIENT_ID: str
    CLIENT_SECRET: SecretStr
    REDIRECT_URI: str

    # --- HTTP SERVER ---
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    PROVIDER_TIMEOUT_SECONDS: float = Field(30.0, gt=0)

    # --- TOKEN STORE ---
    TOKEN_DIR: Path = Path("RefreshTokens")

    # --- LOGGING ---
    RELAY_LOG_LEVEL: str = "INFO"
    RELAY_LOG_TO_CONSOLE: bool = True
    RELAY_LOG_DIR: Path = Path("logs")

    # --- DYNAMIC FILE PATHS ---
    @property
    def log_path(self) -> Path:
        """Path for the relay's rotating history log."""
        return self.RELAY_LOG_DIR / "token_relay.log"


# Create a single, importable instance of the settings for the entire application.
settings = Settings()


def unwrap_secret(value: Any) -> Any:
    """Return the plain value behind a ``SecretStr``; other values pass through."""
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return value
