"""Middleware for request ID generation and propagation.

This module provides middleware that:
1. Generates or extracts request IDs (X-Request-ID) for request tracking
2. Sets it in context for access by services and loggers
3. Echoes it in the response headers for client correlation
"""

import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from neighborguard.core.logging import set_request_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that generates and propagates request IDs.

    The ID is taken from the incoming X-Request-ID header when present and
    otherwise generated as an 8-character UUID prefix.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Generate request ID and set it in context."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            set_request_id(None)
