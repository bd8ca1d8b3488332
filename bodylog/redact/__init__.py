"""
Redaction of sensitive values in captured bodies.

Example:
    from bodylog.redact import RedactionScanner, redact

    # Default field set (password, token, phone, ...)
    safe = redact('{"password": "hunter2"}')
    # '{"password": "***"}'

    # Custom field set
    scanner = RedactionScanner(fields=["pin", "cvv"])
    safe = scanner.redact('{"cvv": "123"}')
"""

from .fields import DEFAULT_SENSITIVE_FIELDS, FIELD_GROUPS, normalize_fields
from .filter import RedactingFilter, add_redacting_filter
from .scanner import (
    MASK,
    Edit,
    RedactionScanner,
    ScanState,
    get_scanner,
    redact,
    reset_scanner,
)

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "FIELD_GROUPS",
    "MASK",
    "Edit",
    "RedactingFilter",
    "RedactionScanner",
    "ScanState",
    "add_redacting_filter",
    "get_scanner",
    "normalize_fields",
    "redact",
    "reset_scanner",
]
