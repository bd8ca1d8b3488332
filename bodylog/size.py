"""
Byte size helpers for body limits.

Config values such as ``max_body_size: 64KB`` are parsed here, and the
truncation marker in log lines uses the reverse conversion.

Example Usage:
    >>> size_to_bytes('64KB')
    65536

    >>> size_str(1536)
    '1.5KB'
"""

import re

from .exceptions import ConfigError

BYTES_PER_KB = 1024
BYTES_PER_MB = 1024**2
BYTES_PER_GB = 1024**3

_UNITS = [
    (BYTES_PER_GB, "GB"),
    (BYTES_PER_MB, "MB"),
    (BYTES_PER_KB, "KB"),
    (1, "B"),
]

_UNIT_MAP = {
    "B": 1,
    "KB": BYTES_PER_KB,
    "MB": BYTES_PER_MB,
    "GB": BYTES_PER_GB,
    "KIB": BYTES_PER_KB,
    "MIB": BYTES_PER_MB,
    "GIB": BYTES_PER_GB,
}

_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(GIB|MIB|KIB|GB|MB|KB|B)$", re.IGNORECASE)


class InvalidSizeError(ConfigError):
    """Raised when a size value or string cannot be interpreted."""

    pass


def size_str(size: int) -> str:
    """
    Format a size in bytes as a compact human-readable string.

    Examples:
        >>> size_str(0)
        '0B'
        >>> size_str(1024)
        '1KB'
        >>> size_str(1536)
        '1.5KB'
    """
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        raise InvalidSizeError("Size must be a non-negative integer", size=size)

    if size == 0:
        return "0B"

    for threshold, suffix in _UNITS:
        if size >= threshold:
            value = size / threshold
            if value == int(value):
                return f"{int(value)}{suffix}"
            return f"{value:.1f}".rstrip("0").rstrip(".") + suffix

    return f"{size}B"


def size_to_bytes(value: str | int) -> int:
    """
    Parse a size string (or pass through an integer) to bytes.

    Binary (1024-based) multipliers are used for both the SI-looking and the
    IEC suffixes.

    Raises:
        InvalidSizeError: If the value cannot be parsed or is negative
    """
    if isinstance(value, bool):
        raise InvalidSizeError("Size must be an integer or size string", value=value)

    if isinstance(value, int):
        if value < 0:
            raise InvalidSizeError("Size cannot be negative", value=value)
        return value

    if not isinstance(value, str):
        raise InvalidSizeError("Size must be an integer or size string", value=value)
    if not value.strip():
        raise InvalidSizeError("Size string cannot be empty")

    match = _SIZE_PATTERN.match(value.strip())
    if not match:
        raise InvalidSizeError("Could not parse size string", value=value)

    return int(float(match.group(1)) * _UNIT_MAP[match.group(2).upper()])


__all__ = [
    "size_str",
    "size_to_bytes",
    "InvalidSizeError",
]
