"""
decoroute: Request Logging Middleware
=======================================

What:  One access log line per request: method, path, status, duration,
       request ID and client address.
How:   Measures from middleware entry to response return with
       time.perf_counter(), then logs at a level chosen from the status code.
Who:   Any chain; usually global, after request_id.

Level by status:
    5xx → ERROR
    4xx → WARNING
    else → INFO

Request bodies and headers are never logged.
"""

import logging
import time

from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from decoroute.middleware.request_id import request_id_var

logger = logging.getLogger("decoroute.access")


async def log_requests(request: Request, call_next: RequestResponseEndpoint) -> Response:
    start_time = time.perf_counter()

    # request.client is None under some test transports
    client_ip = request.client.host if request.client else "unknown"
    method = request.method
    path = request.url.path

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000
    rid = request_id_var.get("")

    status = response.status_code
    if status >= 500:
        log_level = logging.ERROR
    elif status >= 400:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    logger.log(
        log_level,
        "%s %s %d %.1fms [%s] from %s",
        method,
        path,
        status,
        duration_ms,
        rid,
        client_ip,
        extra={
            "request_id": rid,
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
            "client_ip": client_ip,
        },
    )

    return response
