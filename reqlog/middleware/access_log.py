"""Structured access logging middleware.

Emits one ``INFO``-level record per HTTP request once the downstream app
returns, with the fields:

    ``requestId`` (from ``X-Request-Id``, when present), ``remoteAddr``,
    ``status``, ``took``

With ``LogOptions(enable_starting=True)`` an extra ``"started handling
request"`` record carrying ``request`` (the request URI) and ``method`` is
written before the request is delegated.

Wiring
------
Either wrap an ASGI app directly::

    request_logger = new_logger()
    app = request_logger.middleware(app)

or register the class with Starlette / FastAPI::

    app.add_middleware(AccessLogMiddleware, request_logger=new_logger())

Exceptions raised downstream are not caught; the completion record is only
written for requests whose handler returns.
"""

import logging
from dataclasses import dataclass
from typing import TextIO

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from reqlog.clock import Clock, RealClock
from reqlog.formatters import TextFormatter
from reqlog.middleware.response_capture import ResponseCapture

__all__ = [
    "AccessLogMiddleware",
    "LogOptions",
    "RequestLogger",
    "new_logger",
    "real_ip",
    "request_uri",
]


@dataclass(frozen=True)
class LogOptions:
    formatter: logging.Formatter | None = None
    enable_starting: bool = False
    # ``None`` writes to ``sys.stderr``.
    stream: TextIO | None = None


class RequestLogger:
    """Owns the log sink, clock and options shared by every wrapped request."""

    def __init__(self, options: LogOptions | None = None, *, clock: Clock | None = None) -> None:
        options = options or LogOptions()
        handler = logging.StreamHandler(options.stream)
        handler.setFormatter(options.formatter or TextFormatter())

        # Not registered with logging.getLogger(): each instance owns its handlers.
        self.logger = logging.Logger("reqlog.access", logging.INFO)
        self.logger.addHandler(handler)

        self.clock: Clock = clock or RealClock()
        self.enable_starting = options.enable_starting

    def middleware(self, app: ASGIApp) -> ASGIApp:
        """Wrap *app* so every HTTP request through it is logged."""
        return AccessLogMiddleware(app, request_logger=self)


def new_logger(options: LogOptions | None = None) -> RequestLogger:
    """Build a :class:`RequestLogger` with a fresh sink and the real clock."""
    return RequestLogger(options)


def real_ip(scope: Scope) -> str:
    """Return the caller's address for an HTTP *scope*.

    Precedence: first ``X-Forwarded-For`` entry, then ``X-Real-IP``, then the
    host part of the transport-level client.  Returns ``""`` when none of them
    yields an address.
    """
    headers = Headers(scope=scope)
    forwarded = headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real = headers.get("x-real-ip", "")
    if real:
        return real

    client = scope.get("client")
    if isinstance(client, (tuple, list)) and client and isinstance(client[0], str):
        return client[0]
    return ""


def request_uri(scope: Scope) -> str:
    """Rebuild the request target as sent by the client: raw path plus query."""
    raw_path: bytes | None = scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else scope.get("path", "")
    query: bytes = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


class AccessLogMiddleware:
    """Pure ASGI middleware writing access-log records through a :class:`RequestLogger`."""

    def __init__(self, app: ASGIApp, request_logger: RequestLogger | None = None) -> None:
        self.app = app
        self.request_logger = request_logger or new_logger()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        logger = self.request_logger.logger
        clock = self.request_logger.clock

        fields: dict[str, object] = {}
        request_id = Headers(scope=scope).get("x-request-id", "")
        if request_id:
            fields["requestId"] = request_id
        remote_addr = real_ip(scope)
        if remote_addr:
            fields["remoteAddr"] = remote_addr

        if self.request_logger.enable_starting:
            logger.info(
                "started handling request",
                extra={
                    "fields": {
                        **fields,
                        "request": request_uri(scope),
                        "method": scope["method"],
                    }
                },
            )

        start = clock.now()
        capture = ResponseCapture(send)
        await self.app(scope, receive, capture)
        took = clock.since(start)

        logger.info(
            "completed handling request",
            extra={"fields": {**fields, "status": capture.status_code, "took": took}},
        )
