"""
ASGI middleware that logs requests with redacted bodies.

Works with any ASGI framework built on Starlette, including FastAPI:

    from fastapi import FastAPI
    from bodylog import BodyLogConfig, BodyLoggingMiddleware

    app = FastAPI()
    app.add_middleware(BodyLoggingMiddleware, config=BodyLogConfig(log_response_body=True))

One "HTTP Request" record is written per request, with the request id,
method, path, query, client ip, status, duration and user agent as extra
fields, plus the redacted request parameters and (optionally) response
body. The application always receives the original request bytes.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .capture import decode_body, drain_receive
from .config import BodyLogConfig
from .content import (
    extract_params,
    is_multipart,
    multipart_summary,
    should_log_body,
    truncate,
)
from .redact import RedactionScanner
from .size import size_str


def client_ip(scope: Scope, headers: Headers) -> str:
    """Client address, preferring proxy headers over the socket peer."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    client = scope.get("client")
    return client[0] if client else ""


class _ResponseRecorder:
    """Wraps ``send`` to note the status and copy the response body."""

    def __init__(
        self,
        send: Send,
        request_id_header: str,
        request_id: str,
        keep_body: bool,
        max_body_size: int,
    ) -> None:
        self._send = send
        self._request_id_header = request_id_header
        self._request_id = request_id
        self._keep_body = keep_body
        self._max_body_size = max_body_size
        self._chunks: list[bytes] = []
        self.size = 0
        self.status = 500
        self.started = False
        self.content_type: str | None = None

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.started = True
            self.status = message["status"]
            headers = MutableHeaders(scope=message)
            headers[self._request_id_header] = self._request_id
            self.content_type = headers.get("content-type")
        elif message["type"] == "http.response.body" and self._keep_body:
            chunk = message.get("body", b"")
            self.size += len(chunk)
            if self.size <= self._max_body_size:
                self._chunks.append(chunk)
            else:
                self._chunks.clear()

        await self._send(message)

    @property
    def overflowed(self) -> bool:
        return self.size > self._max_body_size

    def body_text(self) -> str:
        return decode_body(b"".join(self._chunks))


class BodyLoggingMiddleware:
    """
    Log each HTTP request with its redacted body.

    Args:
        app: Downstream ASGI application
        config: Logging settings (default: BodyLogConfig())
        scanner: Redaction scanner (default: built from config)
        logger: Destination logger (default: config.logger_name)
    """

    def __init__(
        self,
        app: ASGIApp,
        config: BodyLogConfig | None = None,
        scanner: RedactionScanner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.app = app
        self.config = config if config is not None else BodyLogConfig()
        self.scanner = scanner if scanner is not None else self.config.scanner()
        self.logger = (
            logger if logger is not None else logging.getLogger(self.config.logger_name)
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path") in self.config.skip_paths:
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        headers = Headers(scope=scope)
        request_id = headers.get(self.config.request_id_header) or str(uuid.uuid4())
        method = scope["method"]
        query = scope.get("query_string", b"").decode("latin-1")

        params, receive = await self._request_params(method, query, headers, receive)

        recorder = _ResponseRecorder(
            send,
            self.config.request_id_header,
            request_id,
            self.config.log_response_body,
            self.config.max_body_size,
        )

        error: Exception | None = None
        try:
            await self.app(scope, receive, recorder)
        except Exception as e:
            error = e
            raise
        finally:
            fields = {
                "request_id": request_id,
                "method": method,
                "path": scope.get("path", ""),
                "query": query,
                "ip": client_ip(scope, headers),
                "status": recorder.status,
                "duration_ms": round((time.perf_counter() - start) * 1000, 3),
                "user_agent": headers.get("user-agent", ""),
            }
            if params:
                fields["params"] = params
            response_body = self._response_body(recorder)
            if response_body:
                fields["response_body"] = response_body

            self.logger.info("HTTP Request", extra=fields)
            if error is not None:
                self.logger.error(
                    "Request Error", exc_info=error, extra={"request_id": request_id}
                )

    async def _request_params(
        self, method: str, query: str, headers: Headers, receive: Receive
    ) -> tuple[str, Receive]:
        """Capture and redact the request body; returns the receive to pass on."""
        if not self.config.log_request_body:
            return "", receive
        if method.upper() == "GET":
            return extract_params(method, query, "", self.scanner), receive

        drained = await drain_receive(receive)
        if drained is None:
            return "", receive
        body, replay = drained

        content_type = headers.get("content-type")
        if is_multipart(content_type):
            summary = await multipart_summary(body, content_type, self.scanner)
            return truncate(summary, self.config.max_body_size), replay

        text = decode_body(body)
        if not should_log_body(
            content_type,
            text,
            self.config.skip_content_types,
            self.config.binary_ratio,
            self.config.binary_min_length,
        ):
            return "", replay

        # Redact the whole body before cutting it so no value is split open.
        params = extract_params(method, query, text, self.scanner)
        return truncate(params, self.config.max_body_size), replay

    def _response_body(self, recorder: _ResponseRecorder) -> str:
        if not self.config.log_response_body or not recorder.started:
            return ""
        if recorder.overflowed:
            return f"(omitted, {size_str(recorder.size)})"

        text = recorder.body_text()
        if not should_log_body(
            recorder.content_type,
            text,
            self.config.skip_content_types,
            self.config.binary_ratio,
            self.config.binary_min_length,
        ):
            return ""
        return self.scanner.redact(text)


def install_body_logging(app: Any, config: BodyLogConfig | None = None, **kwargs: Any) -> None:
    """
    Register BodyLoggingMiddleware on a Starlette or FastAPI application.

    Args:
        app: Application exposing ``add_middleware``
        config: Logging settings
        **kwargs: Passed to BodyLoggingMiddleware (scanner, logger)
    """
    app.add_middleware(BodyLoggingMiddleware, config=config, **kwargs)


__all__ = [
    "BodyLoggingMiddleware",
    "client_ip",
    "install_body_logging",
]
