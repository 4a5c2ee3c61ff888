"""
decoroute: Exception Hierarchy
================================

What:  Errors owned by decoroute itself.
How:   Each exception carries a message and an optional context dict.
Who:   Raised by the server assembler.

Most failures are not ours to raise. Bad path syntax comes from Starlette at
assembly time, handler exceptions and 404/405 answers from FastAPI's default
handlers, and bind failures from uvicorn. Those propagate untouched.

Exception Hierarchy:
    DecorouteError (base)
    ├── InvalidControllerError   → controllers entry is not a class or descriptor
    └── ServerStateError         → listen() on a server that already listens
"""

from typing import Any, Dict, Optional


class DecorouteError(Exception):
    """
    Base exception for all decoroute errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidControllerError(DecorouteError):
    """
    Raised when an entry of ``controllers`` cannot be assembled.

    When:    The entry is neither a class nor a ControllerDescriptor.
    """

    def __init__(
        self,
        controller: Any,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Cannot mount {controller!r}: expected a controller class "
            f"or a ControllerDescriptor"
        )
        ctx = context or {}
        ctx["controller"] = repr(controller)
        super().__init__(message=message, context=ctx)
        self.controller = controller


class ServerStateError(DecorouteError):
    """
    Raised when a server is asked to listen a second time.

    State machine:
        Unconfigured → Configured (constructor) → Listening (listen/serve)
        There is no transition back and no restart.
    """

    def __init__(
        self,
        state: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Server cannot listen while in state '{state}'"
        ctx = context or {}
        ctx["state"] = state
        super().__init__(message=message, context=ctx)
        self.state = state
