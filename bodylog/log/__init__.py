"""
Logging setup for body logging.

Library modules log through ``logging.getLogger(__name__)``; request
records go to the middleware's configured logger. ``setup_logging`` wires a
handler with the JSON or console formatter and the redacting filter.

Example:
    from bodylog.log import setup_logging

    lg = setup_logging(level="debug", fmt="console")
    lg.info("HTTP Request", extra={"method": "POST", "path": "/login"})
"""

import logging
import sys
from typing import IO

from ..redact import RedactingFilter, RedactionScanner
from .formatters import ConsoleFormatter, JSONFormatter, record_extras

FORMATS = ("json", "console")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def parse_level(level: str | int | None) -> int:
    """Resolve a level name or number; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    return _LEVELS.get(level.strip().lower(), logging.INFO)


def setup_logging(
    name: str = "bodylog",
    level: str | int | None = "info",
    fmt: str = "json",
    stream: IO[str] | None = None,
    redact: bool = True,
    scanner: RedactionScanner | None = None,
) -> logging.Logger:
    """
    Configure a logger with a stream handler.

    Args:
        name: Logger name (default: "bodylog", parent of the request logger)
        level: Level name or number; unknown names fall back to INFO
        fmt: "json" or "console"; anything else is treated as "json"
        stream: Output stream (default: sys.stdout)
        redact: Install a RedactingFilter on the handler
        scanner: Scanner for the filter (default: global scanner)

    Returns:
        The configured logger. Handlers previously added by this function
        are replaced, so calling it twice does not duplicate output.
    """
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(level))

    for handler in list(logger.handlers):
        if getattr(handler, "_bodylog_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(ConsoleFormatter() if fmt == "console" else JSONFormatter())
    if redact:
        handler.addFilter(RedactingFilter(scanner))
    handler._bodylog_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    return logger


__all__ = [
    "FORMATS",
    "ConsoleFormatter",
    "JSONFormatter",
    "parse_level",
    "record_extras",
    "setup_logging",
]
