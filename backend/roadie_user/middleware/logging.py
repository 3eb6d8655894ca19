"""
Roadie User Service — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request on the local host:
       `PUT /users/u1 200 3.2ms [a1b2c3d4]`.
When:  Runs inside RequestIDMiddleware, so the request id is already set.
       The Lambda entry point logs the same line format through
       `level_for_status` without going through this middleware.

Privacy:
    Request bodies carry user profiles and are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from roadie_user.middleware.request_id import request_id_var

logger = logging.getLogger("roadie_user.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s]",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            extra={"client_ip": request.client.host if request.client else None},
        )
        return response
