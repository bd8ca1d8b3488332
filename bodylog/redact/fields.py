"""
Sensitive field names.

Values of these keys are masked before a body reaches the log. Names are
matched case-insensitively as quoted keys, so ``"Password"`` and
``"PASSWORD"`` are both covered by ``password``.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..exceptions import ConfigError

# Field names for documentation and configuration
FIELD_GROUPS = {
    "credentials": ("password", "passwd", "pwd", "old_password", "new_password"),
    "tokens": ("secret", "token", "access_token", "refresh_token"),
    "api_keys": ("api_key", "apikey", "api-key"),
    "contact": ("phone", "mobile", "telephone"),
    "identity": ("id_card", "idcard"),
}

DEFAULT_SENSITIVE_FIELDS: tuple[str, ...] = tuple(
    name for group in FIELD_GROUPS.values() for name in group
)


def normalize_fields(fields: Iterable[str]) -> tuple[str, ...]:
    """
    Lowercase and de-duplicate field names, keeping first-seen order.

    Raises:
        ConfigError: If a name is not a string, is empty, or contains a quote
    """
    if isinstance(fields, str):
        raise ConfigError("Sensitive fields must be a list of names, not a string")

    seen: dict[str, None] = {}
    for name in fields:
        if not isinstance(name, str):
            raise ConfigError("Sensitive field name must be a string", field=name)
        normalized = name.strip().lower()
        if not normalized:
            raise ConfigError("Sensitive field name cannot be empty")
        if '"' in normalized:
            raise ConfigError("Sensitive field name cannot contain quotes", field=name)
        seen.setdefault(normalized, None)
    return tuple(seen)
