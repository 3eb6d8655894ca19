"""
Roadie User Service — Request ID Middleware
============================================

What:  Assigns a correlation id to each request and echoes it in the
       `X-Request-ID` response header.
How:   Reuses the client's `X-Request-ID` when sent, otherwise generates a
       short UUID. The id lives in a ContextVar so any log call made while
       serving the request can include it.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets `request_id_var` for the request and echoes it as X-Request-ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or new_request_id()
        request_id_var.set(rid)

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
