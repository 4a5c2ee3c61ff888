"""
decoroute: Annotation Registry
================================

What:  Decorators that declare an HTTP resource on a class: a base path and
       middleware chain for the class, a verb + sub-path (and optional
       middleware chain) for each handler method.
How:   Method decorators only attach a marker to the function and return it
       unchanged. The per-class ControllerDescriptor is built lazily by
       describe(), which walks the class body in definition order and turns
       every marker into a RouteDescriptor. @controller fills in the base path
       and the controller middleware chain on that same descriptor.
Who:   Used by application code; read by decoroute.server.Server.
When:  Decorators run at class-definition time; describe() runs on first
       access (normally during assembly). Nothing here touches a live router.

Usage:
    @controller("/hello", middlewares=[require_token])
    class HelloController:
        @get("/")
        async def greet(self):
            return {"message": "Hello World!"}

        @post("/", middlewares=[json_body])
        async def echo(self, request: Request):
            return request.state.body

    describe(HelloController).routes
    # [RouteDescriptor(http_method=GET, sub_path='/', ...), RouteDescriptor(POST ...)]

Descriptor ownership:
    ┌──────────────────────┐        ┌───────────────────────────┐
    │ HelloController      │ owns   │ ControllerDescriptor      │
    │  __decoroute_        │───────▶│  base_path  = "/hello"    │
    │   controller__       │        │  middlewares = [...]      │
    └──────────────────────┘        │  routes = [Route, Route]  │
                                    └───────────────────────────┘
    The descriptor lives in the class's own __dict__ and is never inherited,
    so a subclass gets a descriptor built from its own body only.

Quirks kept on purpose:
    - Applying @controller twice overwrites base_path and middlewares; the last
      application wins. No diagnostic is produced.
    - The same verb + path declared twice yields two RouteDescriptors and both
      are registered. Starlette matches the first one registered.
    - Path syntax is not validated here. Starlette rejects bad patterns when
      the server is assembled.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)
F = TypeVar("F")

# Attribute names on decorated functions and on controller classes
ROUTES_ATTR = "__decoroute_routes__"
CONTROLLER_ATTR = "__decoroute_controller__"


class HttpMethod(str, enum.Enum):
    """HTTP verbs a route can be declared with."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: Union["HttpMethod", str]) -> "HttpMethod":
        """Accept an HttpMethod or a verb name in any case ("get", "Post")."""
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


@dataclass(frozen=True)
class RouteDescriptor:
    """
    One declared route.

    Attributes:
        http_method:  Verb the route answers to
        sub_path:     Starlette path pattern, relative to the controller base path
        handler:      The function from the class body (or any callable when
                      built by hand); bound to an instance at assembly
        middlewares:  Route-level chain, applied before the handler
    """

    http_method: HttpMethod
    sub_path: str
    handler: Callable[..., Any]
    middlewares: Tuple[Any, ...] = ()


@dataclass
class ControllerDescriptor:
    """
    Routing metadata for one controller.

    Built by describe() for decorated classes, or by hand as an explicit
    builder and passed to Server directly:

        hello = ControllerDescriptor(base_path="/hello")
        hello.add_route("GET", "/", greet)
        Server(3000, controllers=[hello])

    Attributes:
        base_path:    Mount prefix; empty until @controller sets it
        routes:       RouteDescriptors in declaration order
        middlewares:  Controller-level chain, applied before the sub-router
    """

    base_path: str = ""
    routes: List[RouteDescriptor] = field(default_factory=list)
    middlewares: List[Any] = field(default_factory=list)

    def add_route(
        self,
        http_method: Union[HttpMethod, str],
        sub_path: str,
        handler: Callable[..., Any],
        *,
        middlewares: Optional[Sequence[Any]] = None,
    ) -> RouteDescriptor:
        """Append a route and return its descriptor. Duplicates are kept."""
        descriptor = RouteDescriptor(
            http_method=HttpMethod.parse(http_method),
            sub_path=sub_path,
            handler=handler,
            middlewares=tuple(middlewares or ()),
        )
        self.routes.append(descriptor)
        return descriptor


class _RouteMarker(NamedTuple):
    http_method: HttpMethod
    sub_path: str
    middlewares: Tuple[Any, ...]


def describe(cls: type) -> ControllerDescriptor:
    """
    Return the ControllerDescriptor owned by `cls`, creating it on first use.

    What:    Class-level accessor for a controller's routing metadata.
    How:     Looks only in cls.__dict__, so a base class's descriptor is never
             picked up. On first use every class-body member carrying route
             markers contributes one RouteDescriptor per marker, in definition
             order.

    No instance of `cls` is created.
    """
    descriptor = cls.__dict__.get(CONTROLLER_ATTR)
    if descriptor is None:
        descriptor = ControllerDescriptor()
        for member in list(cls.__dict__.values()):
            for marker in getattr(member, ROUTES_ATTR, ()):
                descriptor.add_route(
                    marker.http_method,
                    marker.sub_path,
                    member,
                    middlewares=marker.middlewares,
                )
        setattr(cls, CONTROLLER_ATTR, descriptor)
        logger.debug(
            "Collected %d route(s) from %s", len(descriptor.routes), cls.__qualname__
        )
    return descriptor


def controller(
    base_path: str, *, middlewares: Optional[Sequence[Any]] = None
) -> Callable[[T], T]:
    """
    Class decorator declaring a controller's base path and middleware chain.

    Args:
        base_path:    Mount prefix, e.g. "/hello" (no trailing slash)
        middlewares:  Applied to every request under base_path, before the
                      route-level chain. Defaults to an empty chain.

    Re-applying overwrites both values.
    """

    def decorator(cls: T) -> T:
        descriptor = describe(cls)
        descriptor.base_path = base_path
        descriptor.middlewares = list(middlewares or ())
        return cls

    return decorator


def route(
    http_method: Union[HttpMethod, str],
    sub_path: str,
    *,
    middlewares: Optional[Sequence[Any]] = None,
) -> Callable[[F], F]:
    """
    Method decorator declaring one route.

    Args:
        http_method:  HttpMethod or verb name
        sub_path:     Starlette path pattern, e.g. "/", "/{name}", "/{rest:path}"
        middlewares:  Route-level chain, applied before the handler

    The decorated function is returned unchanged apart from the marker, so
    stacking several route decorators on one method declares several routes.
    """
    marker = _RouteMarker(
        http_method=HttpMethod.parse(http_method),
        sub_path=sub_path,
        middlewares=tuple(middlewares or ()),
    )

    def decorator(func: F) -> F:
        markers = list(getattr(func, ROUTES_ATTR, []))
        markers.append(marker)
        setattr(func, ROUTES_ATTR, markers)
        return func

    return decorator


def _verb(http_method: HttpMethod) -> Callable[..., Callable[[F], F]]:
    def alias(sub_path: str, *, middlewares: Optional[Sequence[Any]] = None) -> Callable[[F], F]:
        return route(http_method, sub_path, middlewares=middlewares)

    alias.__name__ = alias.__qualname__ = http_method.value.lower()
    alias.__doc__ = f"Declare a {http_method.value} route. Alias of route({http_method.value!r}, ...)."
    return alias


get = _verb(HttpMethod.GET)
post = _verb(HttpMethod.POST)
put = _verb(HttpMethod.PUT)
delete = _verb(HttpMethod.DELETE)
