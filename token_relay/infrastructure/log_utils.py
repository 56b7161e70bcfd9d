"""Helpers for writing relay logs with rotation and tagging support."""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Dict
from token_relay.logging_setup import get_logger, get_tag_for_module

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def log_message(msg: str, level: str = "INFO", tag: str = "GEN", **kwargs) -> None:
    """
    Log a message to the relay's rotating history log under ``tag``.

    Accepts **kwargs for compatibility with standard logging arguments
    like exc_info=True, stacklevel=2, etc.
    """
    logger = get_logger(tag)

    level_name = str(level).upper()
    numeric_level = _LEVEL_MAP.get(level_name)
    if numeric_level is None:
        logger.warning(
            "Received unknown log level '%s'; defaulting to INFO. Message: %s",
            level,
            msg,
        )
        numeric_level = logging.INFO

    logger.log(numeric_level, msg, **kwargs)


def module_logger(module_name: str) -> Callable[..., None]:
    """Return ``log_message`` bound to the tag for ``module_name``.

    Modules call ``log_message = module_logger(__name__)`` once at import.
    """
    return partial(log_message, tag=get_tag_for_module(module_name))
