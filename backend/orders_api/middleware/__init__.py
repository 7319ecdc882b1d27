"""
Customer Orders API - Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Timeout] → [CORS] → Route Handler

    1. Request ID: correlation id stored in a ContextVar, echoed in X-Request-ID
    2. Logging: one access line per request, with status and duration
    3. Timeout: per-request deadline; a late handler is cancelled and the
       client gets a 500 in the standard error shape
"""
