"""
Customer Orders API - Access Logging Middleware
================================================

What:  One access line per HTTP request on the `orders_api.access` logger.
How:   Logs the matched route template rather than the raw path, followed by
       the customer and order the request addressed, so every line for one
       order can be grepped by `order_num=`:

           PATCH /customers/{id}/orders/{order_num} id=C00001 order_num=200100 -> 204 (3.1ms) [a1b2c3d4]

       Unmatched requests fall back to the raw path. Level follows the
       status: 5xx ERROR, 4xx WARNING, else INFO.

Request bodies are never logged. /health is skipped.
"""

import logging
import time
from typing import Any, Mapping

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from orders_api.middleware.request_id import request_id_var

logger = logging.getLogger("orders_api.access")

# Path parameters worth putting on the access line, in display order.
LOGGED_PATH_PARAMS = ("id", "order_num")


def describe_target(scope: Mapping[str, Any]) -> str:
    """Route template plus the addressed resource ids, e.g. '/customers/{id} id=C00001'."""
    route = scope.get("route")
    target = getattr(route, "path", None) or scope.get("path", "")
    params = scope.get("path_params") or {}
    ids = [f"{name}={params[name]}" for name in LOGGED_PATH_PARAMS if name in params]
    return " ".join([target, *ids])


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its route, outcome and latency."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # The router fills in "route" and "path_params" on the shared scope.
        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d (%.1fms) [%s]",
            request.method,
            describe_target(request.scope),
            response.status_code,
            elapsed_ms,
            request_id_var.get(),
        )
        return response
