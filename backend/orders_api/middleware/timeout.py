"""
Customer Orders API - Request Timeout Middleware
=================================================

What:  Bounds every request by REQUEST_TIMEOUT_SECONDS.
How:   Pure ASGI middleware running the downstream app under
       asyncio.wait_for(). On expiry the handler task is cancelled, which
       unwinds its dependencies (the database session is closed and its
       transaction discarded), and the client receives a 500 with the
       standard single-violation error body.

Excluded paths:
    /health, /docs, /redoc, /openapi.json

If the response had already started when the deadline passed, nothing more
can be sent; the timeout is only logged.
"""

import asyncio
import logging
from typing import Optional

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from orders_api.config import settings
from orders_api.exceptions import RequestTimeoutError, violation
from orders_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:
    """Cancel requests that run longer than the configured deadline."""

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app: ASGIApp, timeout: Optional[float] = None) -> None:
        self.app = app
        self.timeout = settings.request_timeout_seconds if timeout is None else timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or not self.timeout
            or scope["path"] in self.EXCLUDED_PATHS
        ):
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_wrapper),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            exc = RequestTimeoutError(self.timeout, context={"path": scope["path"]})
            logger.error(
                "[%s] %s %s: %s",
                request_id_var.get(""),
                scope["method"],
                scope["path"],
                exc.message,
            )
            if response_started:
                return
            response = JSONResponse(
                status_code=500,
                content={"errors": [violation(exc.message)]},
            )
            await response(scope, receive, send)
