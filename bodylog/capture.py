"""
Stream capture for body logging.

A request or response body can only be read once. The helpers here drain a
body into memory, hand back its text for logging, and build a fresh stream
that yields the identical bytes so downstream handlers still see the full,
unmodified payload.

Two transports are supported:

- file-like objects with ``read()`` and ``close()`` (``capture``)
- ASGI ``receive`` channels (``capture_receive``)

Failure policy:
    A failed read never propagates. Both helpers return an empty text and no
    replay, and the caller keeps going without a logged body. Logging
    instrumentation must not be the reason a request fails, so a read error
    is reported at debug level only. Do not turn this into a raised error
    without revisiting every middleware that relies on it.

Example:
    text, replay = capture(environ["wsgi.input"])
    if replay is not None:
        environ["wsgi.input"] = replay
"""

from __future__ import annotations

import io
import logging
from typing import NamedTuple, Protocol

from starlette.types import Message, Receive

from .exceptions import CaptureError

logger = logging.getLogger(__name__)


class ReadableCloseable(Protocol):
    """Anything that can be read to exhaustion and closed."""

    def read(self) -> bytes | str: ...

    def close(self) -> None: ...


class CaptureResult(NamedTuple):
    """Captured text plus the stream that replays the original bytes."""

    text: str
    replay: io.BytesIO | None


class ReceiveCaptureResult(NamedTuple):
    """Captured text plus the ASGI receive channel that replays the body."""

    text: str
    replay: Receive | None


def decode_body(data: bytes) -> str:
    """Decode body bytes for logging; invalid UTF-8 becomes U+FFFD."""
    return data.decode("utf-8", errors="replace")


def _drain(stream: ReadableCloseable) -> bytes:
    """Read a stream to exhaustion, wrapping any failure in CaptureError."""
    try:
        data = stream.read()
    except Exception as e:
        raise CaptureError("Failed to read stream", error=repr(e)) from e

    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _close(stream: ReadableCloseable) -> None:
    try:
        stream.close()
    except Exception as e:
        logger.debug("failed to close captured stream", extra={"error": repr(e)})


def capture(stream: ReadableCloseable | None) -> CaptureResult:
    """
    Drain a stream and return its text with a byte-identical replay.

    The input stream is always closed, whether or not the read succeeded,
    and must not be used again.

    Args:
        stream: Readable, closeable byte stream, or None

    Returns:
        CaptureResult("", None) when no stream was given or the read failed,
        otherwise the decoded text and a new stream over the same bytes.
        An empty stream yields ("", <exhausted stream>), which is distinct
        from the no-stream case.
    """
    if stream is None:
        return CaptureResult("", None)

    try:
        data = _drain(stream)
    except CaptureError as e:
        logger.debug("stream capture failed, body will not be logged", extra={"error": str(e)})
        return CaptureResult("", None)
    finally:
        _close(stream)

    return CaptureResult(decode_body(data), io.BytesIO(data))


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """Build a receive channel that yields the body once, then delegates."""
    delivered = False

    async def replay() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


async def _drain_receive(receive: Receive) -> bytes:
    chunks: list[bytes] = []
    while True:
        try:
            message = await receive()
        except Exception as e:
            raise CaptureError("Failed to receive request body", error=repr(e)) from e

        if message["type"] == "http.disconnect":
            raise CaptureError("Client disconnected before body was complete")
        if message["type"] != "http.request":
            continue

        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            return b"".join(chunks)


async def drain_receive(receive: Receive) -> tuple[bytes, Receive] | None:
    """
    Drain an ASGI request body and return the raw bytes with a replay channel.

    Returns None when the body could not be read; the failure is logged at
    debug level.
    """
    try:
        body = await _drain_receive(receive)
    except CaptureError as e:
        logger.debug("request body capture failed, body will not be logged", extra={"error": str(e)})
        return None

    return body, _replay_receive(body, receive)


async def capture_receive(receive: Receive) -> ReceiveCaptureResult:
    """
    Drain an ASGI request body and return its text with a replay channel.

    The replay channel delivers the whole body as a single ``http.request``
    message and then forwards to the original channel, so later messages
    such as ``http.disconnect`` still reach the application.

    On failure the result is ("", None). The messages consumed so far are
    lost and the caller should keep using the original channel, which will
    report the disconnect.
    """
    drained = await drain_receive(receive)
    if drained is None:
        return ReceiveCaptureResult("", None)

    body, replay = drained
    return ReceiveCaptureResult(decode_body(body), replay)


__all__ = [
    "CaptureResult",
    "ReadableCloseable",
    "ReceiveCaptureResult",
    "capture",
    "capture_receive",
    "decode_body",
    "drain_receive",
]
