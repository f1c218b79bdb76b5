# ratelimiter/shared/middleware.py
from __future__ import annotations

import time
import uuid

from fastapi import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ratelimiter.shared.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    set_correlation_id,
)

logger = get_logger("http")


class CorrelationIdMiddleware:
    """
    Ensures every request has a correlation id.
    - Reads from X-Correlation-ID if provided, otherwise generates one.
    - Exposes request.state.correlation_id and binds it into the log context.
    - Echoes X-Correlation-ID in response headers.
    """
    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        corr = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.correlation_id = corr
        set_correlation_id(corr)

        async def send_wrapper(message: Message):
            if message.get("type") == "http.response.start":
                headers = list(message.get("headers") or [])
                headers.append((self.header_name.encode(), corr.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            clear_request_context()


class RequestLoggingMiddleware:
    """
    Lightweight request timing + structured logging.
    Logs completion with method, path, status, duration_ms.
    """
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        bind_request_context(method=scope.get("method"), path=scope.get("path"))

        async def send_wrapper(message: Message):
            if message.get("type") == "http.response.start":
                logger.info(
                    "HttpRequestCompleted",
                    status=message.get("status"),
                    duration_ms=int((time.perf_counter() - start) * 1000),
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)
