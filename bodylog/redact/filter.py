"""
Logging filter for body redaction.

Provides a logging.Filter that runs the redaction scanner over log records
before they are emitted, so a body logged without an explicit redact() call
still has its sensitive values masked.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scanner import RedactionScanner

# Record attributes carrying captured payloads (set via ``extra=``)
BODY_ATTRIBUTES = ("params", "response_body")


class RedactingFilter(logging.Filter):
    """
    Logging filter that masks sensitive values in log records.

    Example:
        from bodylog.redact import RedactingFilter

        logger = logging.getLogger("myapp")
        logger.addFilter(RedactingFilter())

        logger.info('login %s', '{"user":"bob","password":"hunter2"}')
        # Output: login {"user":"bob","password":"***"}
    """

    def __init__(
        self,
        scanner: RedactionScanner | None = None,
        name: str = "",
    ):
        """
        Initialize the filter.

        Args:
            scanner: RedactionScanner instance (default: global scanner)
            name: Filter name for logging hierarchy
        """
        super().__init__(name)
        self._scanner = scanner

    @property
    def scanner(self) -> RedactionScanner:
        """Get the scanner instance."""
        if self._scanner is None:
            from .scanner import get_scanner

            self._scanner = get_scanner()
        return self._scanner

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact the log record in place.

        Returns:
            True (the record is always let through)
        """
        if isinstance(record.msg, str) and record.msg:
            record.msg = self.scanner.redact(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self.scanner.redact(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            else:
                record.args = tuple(
                    self.scanner.redact(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        for attr in BODY_ATTRIBUTES:
            value = getattr(record, attr, None)
            if isinstance(value, str) and value:
                setattr(record, attr, self.scanner.redact(value))

        return True


def add_redacting_filter(
    logger: logging.Logger | str,
    scanner: RedactionScanner | None = None,
) -> RedactingFilter:
    """
    Add a redacting filter to a logger.

    Args:
        logger: Logger instance or logger name
        scanner: RedactionScanner instance (default: global scanner)

    Returns:
        The created filter instance
    """
    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    filter_instance = RedactingFilter(scanner)
    logger.addFilter(filter_instance)
    return filter_instance
