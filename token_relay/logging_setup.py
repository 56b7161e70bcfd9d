"""Central logging configuration for the token relay."""

from __future__ import annotations

import logging
import sys
import threading
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from token_relay.config import settings

LOGGER_NAME = "token_relay.history"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5 MB per log file
DEFAULT_BACKUP_COUNT = 7

_logger: Optional[logging.Logger] = None
_configured: bool = False
_lock = threading.Lock()


class TaggedLogger(logging.LoggerAdapter):
    """Logger adapter that injects a tag field for structured relay logs."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        if "tag" not in extra:
            extra["tag"] = self.extra.get("tag", "GEN")
        kwargs["extra"] = extra
        return msg, kwargs


def _resolve_level(level: Optional[str]) -> int:
    """Translate a textual level into the numeric value logging expects."""

    candidate = str(level or settings.RELAY_LOG_LEVEL).upper()
    numeric_level = logging.getLevelName(candidate)
    if isinstance(numeric_level, int):
        return numeric_level

    print(
        f"token-relay logger: unknown log level '{candidate}', defaulting to INFO.",
        file=sys.stderr,
    )
    return logging.INFO


def _build_formatter() -> logging.Formatter:
    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(tag)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    formatter.converter = time.gmtime
    return formatter


def _remove_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def configure_logging(
    *,
    log_path: Optional[Path] = None,
    level: Optional[str] = None,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
    log_to_console: Optional[bool] = None,
    force: bool = False,
) -> logging.Logger:
    """Attach the rotating file handler (and console handler) to the shared logger.

    The API module and the ``serve`` command call this once at startup; later
    calls are no-ops unless ``force`` or an explicit ``log_path`` asks for a
    rebuild, in which case existing handlers are replaced rather than added to.
    """
    global _logger, _configured

    with _lock:
        logger = logging.getLogger(LOGGER_NAME)

        if _configured and not force and log_path is None:
            if level is not None:
                logger.setLevel(_resolve_level(level))
            return logger

        _remove_handlers(logger)
        logger.setLevel(_resolve_level(level))

        formatter = _build_formatter()
        resolved_path = Path(log_path) if log_path is not None else settings.log_path

        try:
            resolved_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                resolved_path,
                maxBytes=max_bytes or DEFAULT_MAX_BYTES,
                backupCount=backup_count or DEFAULT_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as exc:
            print(
                f"token-relay logger: unable to access log file {resolved_path}: {exc}",
                file=sys.stderr,
            )

        if log_to_console is None:
            log_to_console = settings.RELAY_LOG_TO_CONSOLE
        if log_to_console:
            stream_handler = logging.StreamHandler()
            stream_handler.setFormatter(formatter)
            logger.addHandler(stream_handler)

        logger.propagate = False

        _configured = True
        _logger = logger
        return logger


def get_logger(tag: str = "GEN") -> TaggedLogger:
    """Return a tagged relay logger, configuring it on first access."""

    base_logger = _logger if _configured and _logger else configure_logging()
    return TaggedLogger(base_logger, {"tag": tag})


# Default tag map per module keyword
TAG_MAP = {
    "api": "HTTP",
    "oauth": "OAUTH",
    "token_storage": "STORE",
    "cli": "CLI",
}


def get_tag_for_module(module_name: str) -> str:
    """Map a module's ``__name__`` to its logging tag."""
    module_name = module_name.lower()
    for key, tag in TAG_MAP.items():
        if key in module_name:
            return tag
    return "GEN"


def reset_logging() -> None:
    """Tear down handlers so tests can reconfigure the logger cleanly."""

    global _configured, _logger
    with _lock:
        _remove_handlers(logging.getLogger(LOGGER_NAME))
        _configured = False
        _logger = None
