"""
decoroute: Middleware Package
===============================

What:  Middleware chain handling plus a few ready-made dispatch functions.

Every chain entry (global, controller or route) is either a dispatch function
`async (request, call_next) -> Response` or a starlette Middleware entry.

Chain order for one request:
    Request → [global ...] → [controller ...] → [route ...] → handler
    Response ← [global ...] ← [controller ...] ← [route ...] ← handler

Bundled dispatch functions:
    - request_id:    correlation ID in a ContextVar and X-Request-ID header
    - log_requests:  access log line per request
    - json_body:     JSON body parsed into request.state.body
"""

from decoroute.middleware.body import json_body
from decoroute.middleware.logging import log_requests
from decoroute.middleware.request_id import request_id, request_id_var

__all__ = ["json_body", "log_requests", "request_id", "request_id_var"]
