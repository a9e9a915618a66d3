"""
Logging for the storefront.

Usage:
    from storefront.logging import get_logger, get_session_logger
    logger = get_logger(__name__)
    logger.error("Failed to save cart", exc_info=True)

    session_logger = get_session_logger(__name__, session_id)
    session_logger.info("Order placed")   # -> "[session 3f2a...] Order placed"

Cart ids and session ids come from shoppers, so anything user-supplied is
passed through sanitize_id_for_logging before it reaches a log line.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Longest id fragment written to logs
MAX_LOGGED_ID_LENGTH = 16

# Libraries that log one line per HTTP request (order API, Upstash REST)
NOISY_LOGGERS = ("httpx", "httpcore", "upstash_redis")


def _get_log_level() -> int:
    """LOG_LEVEL env var, INFO when unset or unknown."""
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _configure_root_logger() -> None:
    """Attach a stdout handler to the root logger unless the host already did."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = _get_log_level()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    # Vercel timestamps every line itself
    is_production = os.environ.get("VERCEL") == "1"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if is_production else LOG_FORMAT))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    """Module logger (typically get_logger(__name__))."""
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: object) -> str:
    """
    Make a product or session id safe to log.

    Control characters are escaped (CWE-117) and the result is cut to
    MAX_LOGGED_ID_LENGTH characters. Empty or missing ids log as "N/A".
    """
    if id_value is None or id_value == "":
        return "N/A"
    safe_value = (
        str(id_value)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )
    return safe_value[:MAX_LOGGED_ID_LENGTH]


class SessionLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the (sanitized) shopper session id."""

    def process(self, msg, kwargs):
        return f"[session {self.extra['session']}] {msg}", kwargs


def get_session_logger(name: str, session_id: object) -> SessionLoggerAdapter:
    """Logger whose lines are tagged with one shopper session."""
    return SessionLoggerAdapter(get_logger(name), {"session": sanitize_id_for_logging(session_id)})


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "get_logger",
    "get_session_logger",
    "sanitize_id_for_logging",
    "SessionLoggerAdapter",
]
