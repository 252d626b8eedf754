"""
Logging for the storefront client.

Every module takes its logger from here:

    from storefront.logging import get_logger
    logger = get_logger(__name__)

The root logger is configured on first import from LOG_LEVEL, unless the host
application already installed handlers. Ids and user-entered text pass
through the sanitizers before they reach a log line.
"""

import logging
import os
import sys
from functools import cache

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# supabase-py requests go through httpx; keep per-request lines out of INFO
_QUIET_LOGGERS = ("httpx", "httpcore")

# Control characters a user could use to forge extra log lines
_LOG_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def configure_logging(level: str | None = None) -> None:
    """Attach a stdout handler to the root logger once."""
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Logger for a storefront module (pass __name__)."""
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: str | None) -> str:
    """First 8 characters of an id, escaped. "N/A" when empty."""
    if not id_value:
        return "N/A"
    return str(id_value).translate(_LOG_ESCAPES)[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """
    Escape user-entered text (search queries, names) for a log line.

    Text longer than `max_length` is cut and suffixed with "...".
    """
    if not value:
        return "N/A"
    text = str(value).translate(_LOG_ESCAPES)
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


__all__ = [
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
