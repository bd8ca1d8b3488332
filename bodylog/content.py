"""
Decide which captured bodies are worth logging and shape them for the log.

Binary payloads are skipped: they are large, unreadable in a log line, and
the redaction scanner has nothing to find in them. Multipart forms are
reduced to a summary of their fields (redacted) and file names and sizes.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import AsyncIterator, Iterable

from starlette.datastructures import Headers, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from .config import DEFAULT_SKIP_CONTENT_TYPES
from .redact import RedactionScanner
from .size import size_str

logger = logging.getLogger(__name__)

MULTIPART_ERROR = '{"error": "unable to parse form data"}'


def is_skipped_content_type(
    content_type: str | None,
    skip_content_types: Iterable[str] = DEFAULT_SKIP_CONTENT_TYPES,
) -> bool:
    """Check the Content-Type header against the skip list (substring match)."""
    if not content_type:
        return False
    lowered = content_type.lower()
    return any(skipped in lowered for skipped in skip_content_types)


def looks_binary(text: str, ratio: float = 0.2, min_length: int = 100) -> bool:
    """
    Guess whether decoded body text is really binary data.

    Bodies longer than ``min_length`` bytes are considered binary when
    non-ASCII characters exceed ``ratio`` of the byte length. Undecodable
    bytes show up as U+FFFD and count as non-ASCII.
    """
    byte_length = len(text.encode("utf-8", errors="surrogatepass"))
    if byte_length <= min_length:
        return False

    non_ascii = sum(1 for c in text if ord(c) > 127)
    return non_ascii / byte_length > ratio


def should_log_body(
    content_type: str | None,
    text: str,
    skip_content_types: Iterable[str] = DEFAULT_SKIP_CONTENT_TYPES,
    ratio: float = 0.2,
    min_length: int = 100,
) -> bool:
    """
    Return False for uploads, binary content types and binary-looking bodies.

    Example:
        >>> should_log_body("application/json", '{"a": 1}')
        True
        >>> should_log_body("multipart/form-data; boundary=x", "...")
        False
    """
    if is_skipped_content_type(content_type, skip_content_types):
        return False
    return not looks_binary(text, ratio, min_length)


def extract_params(
    method: str, query_string: str, body: str, scanner: RedactionScanner
) -> str:
    """
    Pick what to log as the request parameters.

    GET requests log their raw query string; everything else logs the
    redacted body.
    """
    if method.upper() == "GET":
        return query_string
    return scanner.redact(body)


def is_multipart(content_type: str | None) -> bool:
    """Check whether a Content-Type header announces a multipart form."""
    if not content_type:
        return False
    return "multipart/form-data" in content_type.lower()


async def _single_chunk(body: bytes) -> AsyncIterator[bytes]:
    yield body


async def multipart_summary(
    body: bytes, content_type: str, scanner: RedactionScanner
) -> str:
    """
    Summarize a multipart/form-data body without file contents.

    Form fields are logged as ``"key[i]":<redacted "key":"value">`` and files
    as ``"key[i]":"file: <name> (<size> bytes)"``, fields first. ``i`` counts
    repeated keys separately for fields and files.

    Example:
        {"username[0]":"username":"bob", "password[0]":"password":"***", "avatar[0]":"file: me.png (2048 bytes)"}

    Returns:
        The summary, ``{}`` for a form without parts, or MULTIPART_ERROR
        when the body cannot be parsed.
    """
    parser = MultiPartParser(Headers({"content-type": content_type}), _single_chunk(body))
    try:
        form = await parser.parse()
    except MultiPartException as e:
        logger.debug("multipart body could not be parsed", extra={"error": str(e)})
        return MULTIPART_ERROR

    fields: list[str] = []
    files: list[str] = []
    field_counts: Counter[str] = Counter()
    file_counts: Counter[str] = Counter()
    try:
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                index = file_counts[key]
                file_counts[key] += 1
                files.append(f'"{key}[{index}]":"file: {value.filename} ({value.size} bytes)"')
            else:
                index = field_counts[key]
                field_counts[key] += 1
                pair = scanner.redact(f'"{key}":"{value}"')
                fields.append(f'"{key}[{index}]":{pair}')
    finally:
        await form.close()

    parts = fields + files
    if not parts:
        return "{}"
    return "{" + ", ".join(parts) + "}"


def truncate(text: str, limit: int) -> str:
    """
    Cut ``text`` to at most ``limit`` bytes of UTF-8 for a log line.

    A marker with the full size is appended when anything was dropped.
    """
    encoded = text.encode("utf-8", errors="surrogatepass")
    if len(encoded) <= limit:
        return text

    head = encoded[:limit].decode("utf-8", errors="ignore")
    return f"{head}...(truncated, {size_str(len(encoded))})"


__all__ = [
    "MULTIPART_ERROR",
    "extract_params",
    "is_multipart",
    "is_skipped_content_type",
    "looks_binary",
    "multipart_summary",
    "should_log_body",
    "truncate",
]
