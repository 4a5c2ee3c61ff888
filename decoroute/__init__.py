"""
decoroute: Package Initializer
================================

Class-and-decorator routing on top of FastAPI.

    ┌─────────────────────────────────────┐
    │   Annotation Registry               │  ← @controller, @get/@post/...
    │   (decoroute.annotations)           │     describe(cls)
    ├─────────────────────────────────────┤
    │   Server Assembler                  │  ← Server(port, middlewares,
    │   (decoroute.server)                │            controllers).listen()
    ├─────────────────────────────────────┤
    │   FastAPI / Starlette / uvicorn     │  ← routing, requests, binding
    └─────────────────────────────────────┘
"""

from decoroute.annotations import (
    ControllerDescriptor,
    HttpMethod,
    RouteDescriptor,
    controller,
    delete,
    describe,
    get,
    post,
    put,
    route,
)
from decoroute.config import Settings, settings
from decoroute.exceptions import DecorouteError, InvalidControllerError, ServerStateError
from decoroute.server import Server, ServerState, setup_logging

__version__ = "1.0.0"

__all__ = [
    "ControllerDescriptor",
    "DecorouteError",
    "HttpMethod",
    "InvalidControllerError",
    "RouteDescriptor",
    "Server",
    "ServerState",
    "ServerStateError",
    "Settings",
    "controller",
    "delete",
    "describe",
    "get",
    "post",
    "put",
    "route",
    "settings",
    "setup_logging",
]
