"""
decoroute: Request ID Middleware
==================================

What:  Assigns an ID to each request and echoes it in the response.
How:   Reuses an inbound X-Request-ID header or generates a short UUID, stores
       it in a ContextVar and in request.state, then sets the response header.
Who:   Any chain: global, controller or route.

Usage:
    Server(8000, middlewares=[request_id, log_requests], controllers=[...])

Placed before log_requests, the access log lines carry the same ID.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


async def request_id(request: Request, call_next: RequestResponseEndpoint) -> Response:
    # 8 chars is enough for correlating log lines
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

    token = request_id_var.set(rid)
    request.state.request_id = rid
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)

    response.headers[REQUEST_ID_HEADER] = rid
    return response
