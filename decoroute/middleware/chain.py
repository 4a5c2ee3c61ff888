"""
decoroute: Middleware Chains
==============================

What:  Turns a declared middleware chain into Starlette Middleware entries and
       wraps ASGI apps with them.
How:   A chain entry is either a dispatch function
       `async (request, call_next) -> Response`, which becomes
       Middleware(BaseHTTPMiddleware, dispatch=fn), or a ready-made
       starlette.middleware.Middleware entry, used as is.
Who:   decoroute.server, for the global, controller and route chains.

Ordering:
    chain = [a, b, c]  →  a(b(c(app)))
    The first entry sees the request first and the response last, the same
    way Starlette builds its own middleware stack.
"""

from typing import Any, List, Sequence

from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


def as_middleware(entry: Any) -> Middleware:
    """Normalize one chain entry into a Starlette Middleware entry."""
    if isinstance(entry, Middleware):
        return entry
    if callable(entry):
        return Middleware(BaseHTTPMiddleware, dispatch=entry)
    raise TypeError(
        f"Middleware must be a dispatch function or a starlette Middleware entry, got {entry!r}"
    )


def build_chain(entries: Sequence[Any]) -> List[Middleware]:
    return [as_middleware(entry) for entry in entries]


def wrap(app: ASGIApp, entries: Sequence[Any]) -> ASGIApp:
    """Wrap `app` so that entries[0] is outermost."""
    for cls, args, kwargs in reversed(build_chain(entries)):
        app = cls(app, *args, **kwargs)
    return app
