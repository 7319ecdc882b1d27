"""
Customer Orders API - Request ID Middleware
============================================

What:  Assigns an id to each request and returns it in X-Request-ID.
How:   A client-supplied X-Request-ID is reused when it is a short token of
       letters, digits, "." "_" or "-"; anything else (missing, too long,
       containing spaces or control characters) is replaced by a fresh
       8-character id. The id lives in a ContextVar for the duration of the
       request so loggers and exception handlers can read it.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids end up verbatim in log lines.
_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(supplied: Optional[str]) -> str:
    """Reuse a well-formed client id, otherwise mint a new one."""
    if supplied and _ACCEPTED_ID.match(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request and response with a correlation id."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token = request_id_var.set(resolve_request_id(request.headers.get(REQUEST_ID_HEADER)))
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id_var.get()
            return response
        finally:
            request_id_var.reset(token)
