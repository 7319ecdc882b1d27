"""
Customer Orders API - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the three failure kinds a request
       can end in, plus the request deadline.
How:   Each exception carries a message and an optional context dict.
       Global handlers registered in main.py turn them into HTTP responses;
       RequestTimeoutError is answered by the timeout middleware itself.
Who:   Raised by services, the validation layer and middleware.

Exception Hierarchy:
    OrdersApiError (base)
    ├── ValidationError       → 400 {"errors": [violations]}
    ├── NotFoundError         → 404, empty body
    ├── DatabaseError         → 500 {"errors": [single violation]}
    └── RequestTimeoutError   → 500 {"errors": [single violation]}

Violation shape:
    {"msg": str, "value": any | None, "param": str | None}
"""

from typing import Any, Dict, List, Optional


def violation(msg: str, value: Any = None, param: Optional[str] = None) -> Dict[str, Any]:
    """Build a single violation record."""
    return {"msg": msg, "value": value, "param": param}


class OrdersApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged, not returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(OrdersApiError):
    """
    Raised when one or more request inputs break their rules.

    HTTP: 400 Bad Request, body `{"errors": violations}`.

    Every violation is kept, so a client that sent five bad fields learns
    about all five in one round trip.
    """

    def __init__(
        self,
        violations: List[Dict[str, Any]],
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.violations = violations


class NotFoundError(OrdersApiError):
    """
    Raised when a customer or order a mutation depends on does not exist.

    HTTP: 404 Not Found with an empty body.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(OrdersApiError):
    """
    Raised when the data store fails: connection refused, timeout,
    constraint violation, malformed statement.

    HTTP: 500 Internal Server Error. The message is the backend's own error
    text; no distinction is made between transient and permanent failures.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RequestTimeoutError(OrdersApiError):
    """
    Raised when a request outlives REQUEST_TIMEOUT_SECONDS.

    HTTP: 500 Internal Server Error, same body shape as DatabaseError.
    """

    def __init__(
        self,
        timeout: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["timeout"] = timeout
        super().__init__(message=f"Request timed out after {timeout:g}s", context=ctx)
        self.timeout = timeout
