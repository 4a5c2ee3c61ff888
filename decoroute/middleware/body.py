"""
decoroute: JSON Body Middleware
=================================

What:  Parses JSON request bodies ahead of the handler.
How:   For application/json (or any +json media type) requests with a
       non-empty body, decodes it and stores the value in request.state.body.
       Every other request gets request.state.body = None.
Who:   Any chain. Handlers read request.state.body instead of awaiting
       request.json() themselves.

Malformed JSON short-circuits the chain with 400 {"detail": "Malformed JSON body"}.
"""

import json
import logging

from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def json_body(request: Request, call_next: RequestResponseEndpoint) -> Response:
    request.state.body = None

    if _is_json(request.headers.get("content-type", "")):
        raw = await request.body()
        if raw:
            try:
                request.state.body = json.loads(raw)
            except ValueError as e:
                logger.warning("Rejected malformed JSON body on %s %s: %s", request.method, request.url.path, e)
                return JSONResponse(status_code=400, content={"detail": "Malformed JSON body"})

    return await call_next(request)
