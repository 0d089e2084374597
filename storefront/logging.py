"""
Logging setup for the cart engine.

Modules take a named logger:

    from storefront.logging import get_logger
    logger = get_logger(__name__)

Product ids and titles arrive from the UI layer, so anything user-supplied
goes through sanitize_id_for_logging / sanitize_string_for_logging before
it is interpolated into a log line (CWE-117).
"""

import logging
import os
import sys
from functools import cache

_CART_LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

# Control characters that could forge or split a log record
_LOG_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def configure_logging() -> None:
    """Attach a stdout handler to the root logger unless the host app already did."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_CART_LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    # The Upstash client logs every REST round trip at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _clip(value, max_length: int, marker: str) -> str:
    if not value:
        return "N/A"
    text = str(value).translate(_LOG_ESCAPES)
    if len(text) <= max_length:
        return text
    return text[:max_length] + marker


def sanitize_id_for_logging(id_value, max_length: int = 36) -> str:
    """Escaped product id, cut to max_length; "N/A" when empty."""
    return _clip(id_value, max_length, "")


def sanitize_string_for_logging(value, max_length: int = 50) -> str:
    """Escaped free text (titles, toast messages) with a "..." when cut."""
    return _clip(value, max_length, "...")
