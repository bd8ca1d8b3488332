"""
Redaction scanner for JSON-like bodies.

Finds ``"<field>": "<value>"`` pairs for each sensitive field and replaces the
string value's content with ``***``. Everything else, including the casing of
keys and the surrounding quotes, is left byte-for-byte unchanged.

The input is not parsed. A body only has to look like JSON: quoted keys
followed by a colon. Scanning for one occurrence goes through these states:

    SEEK_FIELD -> SEEK_COLON -> SKIP_WHITESPACE
        -> SEEK_STRING_VALUE_END -> REPLACE_OR_SKIP -> SEEK_FIELD
        -> SKIP_NON_STRING -> SEEK_FIELD

Occurrences that do not fit (no colon after the key, unterminated string,
numeric/boolean/null value, nested object or array) are left unredacted.
Nested values are deliberately not descended into.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, auto

from .fields import DEFAULT_SENSITIVE_FIELDS, normalize_fields

MASK = "***"

_WHITESPACE = " \t"


class ScanState(Enum):
    """States of a single field pass."""

    SEEK_FIELD = auto()
    SEEK_COLON = auto()
    SKIP_WHITESPACE = auto()
    SEEK_STRING_VALUE_END = auto()
    SKIP_NON_STRING = auto()
    REPLACE_OR_SKIP = auto()
    DONE = auto()


@dataclass(frozen=True)
class Edit:
    """Interior of a string value to mask: ``text[start:end]``."""

    start: int
    end: int


def shadow_copy(text: str) -> str:
    """
    Lowercase ``text`` without changing its length.

    Characters whose lowercase form is longer than one character (such as
    U+0130) are kept as-is so that indexes into the shadow and the original
    always line up.
    """
    lowered = text.lower()
    if len(lowered) == len(text):
        return lowered
    return "".join(c.lower() if len(c.lower()) == 1 else c for c in text)


class _FieldScan:
    """Cursor state for locating every value of one field in a text."""

    def __init__(self, text: str, shadow: str, token: str) -> None:
        self._text = text
        self._shadow = shadow
        self._token = token
        self._length = len(text)
        self._search_from = 0
        self._cursor = 0
        self._value_start = 0
        self._value_end = 0
        self.edits: list[Edit] = []

        self._handlers: dict[ScanState, Callable[[], ScanState]] = {
            ScanState.SEEK_FIELD: self._seek_field,
            ScanState.SEEK_COLON: self._seek_colon,
            ScanState.SKIP_WHITESPACE: self._skip_whitespace,
            ScanState.SEEK_STRING_VALUE_END: self._seek_string_value_end,
            ScanState.SKIP_NON_STRING: self._skip_non_string,
            ScanState.REPLACE_OR_SKIP: self._replace_or_skip,
        }

    def run(self) -> list[Edit]:
        state = ScanState.SEEK_FIELD
        while state is not ScanState.DONE:
            state = self._handlers[state]()
        return self.edits

    def _seek_field(self) -> ScanState:
        pos = self._shadow.find(self._token, self._search_from)
        if pos == -1:
            return ScanState.DONE

        # A match starting at the opening quote or inside a value that is about
        # to be masked would not exist in the masked text.
        if self.edits and self.edits[-1].start - 1 <= pos < self.edits[-1].end:
            self._search_from = self.edits[-1].end
            return ScanState.SEEK_FIELD

        self._search_from = pos + len(self._token)
        self._cursor = self._search_from
        return ScanState.SEEK_COLON

    def _seek_colon(self) -> ScanState:
        colon = self._text.find(":", self._cursor)
        if colon == -1:
            return ScanState.SEEK_FIELD
        self._cursor = colon + 1
        return ScanState.SKIP_WHITESPACE

    def _skip_whitespace(self) -> ScanState:
        while self._cursor < self._length and self._text[self._cursor] in _WHITESPACE:
            self._cursor += 1

        if self._cursor < self._length and self._text[self._cursor] == '"':
            self._value_start = self._cursor
            return ScanState.SEEK_STRING_VALUE_END
        return ScanState.SKIP_NON_STRING

    def _skip_non_string(self) -> ScanState:
        return ScanState.SEEK_FIELD

    def _seek_string_value_end(self) -> ScanState:
        end = self._value_start + 1
        while end < self._length and self._text[end] != '"':
            if self._text[end] == "\\" and end + 1 < self._length:
                end += 2
            else:
                end += 1
        self._value_end = end
        return ScanState.REPLACE_OR_SKIP

    def _replace_or_skip(self) -> ScanState:
        if self._value_end >= self._length:
            return ScanState.SEEK_FIELD  # unterminated string

        edit = Edit(self._value_start + 1, self._value_end)
        # Two keys before the same colon resolve to the same value.
        if not self.edits or self.edits[-1] != edit:
            self.edits.append(edit)
        return ScanState.SEEK_FIELD


def apply_edits(text: str, edits: list[Edit], mask: str = MASK) -> str:
    """Replace each edit's span with ``mask``; edits must be sorted and disjoint."""
    parts: list[str] = []
    prev = 0
    for edit in edits:
        parts.append(text[prev : edit.start])
        parts.append(mask)
        prev = edit.end
    parts.append(text[prev:])
    return "".join(parts)


class RedactionScanner:
    """
    Mask string values of sensitive fields in JSON-like text.

    The field set is fixed at construction. Fields are processed one after
    another in configured order; each pass collects all of its edits and
    applies them at once.

    Example:
        scanner = RedactionScanner()
        scanner.redact('{"username":"alice","password":"secret123"}')
        # '{"username":"alice","password":"***"}'

        scanner = RedactionScanner(fields=["pin"])
        scanner.redact('{"PIN": "1234"}')
        # '{"PIN": "***"}'
    """

    def __init__(self, fields: Iterable[str] = DEFAULT_SENSITIVE_FIELDS) -> None:
        """
        Initialize the scanner.

        Args:
            fields: Sensitive field names; lowercased and de-duplicated

        Raises:
            ConfigError: If a field name is invalid
        """
        self._fields = normalize_fields(fields)
        self._tokens = tuple(f'"{name}"' for name in self._fields)

    @property
    def fields(self) -> tuple[str, ...]:
        """Configured field names, lowercase, in processing order."""
        return self._fields

    def find_spans(self, text: str, field: str) -> list[Edit]:
        """
        Return the spans a single pass for ``field`` would mask in ``text``.

        Useful for diagnostics; does not consult the configured field set.
        """
        token = f'"{field.lower()}"'
        return _FieldScan(text, shadow_copy(text), token).run()

    def redact(self, text: str) -> str:
        """
        Mask sensitive string values in ``text``.

        Never raises; malformed structure only means that the affected
        occurrence is left as-is.
        """
        if not text:
            return text

        shadow = shadow_copy(text)
        for token in self._tokens:
            if token not in shadow:
                continue
            edits = _FieldScan(text, shadow, token).run()
            if edits:
                text = apply_edits(text, edits)
                shadow = shadow_copy(text)
        return text

    def __repr__(self) -> str:
        return f"RedactionScanner(fields={list(self._fields)!r})"


# Global scanner instance
_global_scanner: RedactionScanner | None = None


def get_scanner() -> RedactionScanner:
    """
    Get or create the global scanner instance.

    Returns:
        RedactionScanner using the default sensitive fields
    """
    global _global_scanner

    if _global_scanner is None:
        _global_scanner = RedactionScanner()

    return _global_scanner


def reset_scanner() -> None:
    """Reset the global scanner instance."""
    global _global_scanner
    _global_scanner = None


def redact(text: str) -> str:
    """Mask sensitive values in ``text`` using the global scanner."""
    return get_scanner().redact(text)
