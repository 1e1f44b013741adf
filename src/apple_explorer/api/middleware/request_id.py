"""Request-ID middleware: ``X-Request-ID`` on every request and its log entries."""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from apple_explorer.logging import push_context


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request id to the request state, the log context and the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        token = push_context(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            token.restore()
        response.headers["X-Request-ID"] = request_id
        return response
