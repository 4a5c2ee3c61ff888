"""
decoroute: Server Assembler
=============================

What:  Builds a FastAPI application from a port, a global middleware chain and
       a list of controllers, then binds it with uvicorn.
How:   Global middleware goes on the app. Each controller becomes an APIRouter
       (one route per RouteDescriptor, wrapped in the route's chain) mounted
       under the controller's base path, wrapped in the controller's chain.
       A mount only claims requests one of its routes matches, so the route
       table is the union of all controllers.
Who:   Application entry points: Server(...).listen(on_ready).
When:  Construction assembles everything once; listen() binds once.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Global chain:   [mw1] → [mw2] → ...                    │
    │                                                         │
    │  Mounts (list order; a miss falls through to the next): │
    │  ┌──────────────────────────┐ ┌──────────────────────┐  │
    │  │ Mount("/hello")          │ │ Mount("/users")      │  │
    │  │  controller chain        │ │  controller chain    │  │
    │  │  └─ APIRouter            │ │  └─ APIRouter        │  │
    │  │     GET /      [chain]   │ │     GET /{id} [..]   │  │
    │  │     POST /     [chain]   │ │     ...              │  │
    │  └──────────────────────────┘ └──────────────────────┘  │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Unconfigured → Configured (constructor) → Starting (listen/serve called)
                 → Listening (bind succeeded)
    A run that ends without binding drops back from Starting to Configured.
    There is no stop or restart. Bind failures come from uvicorn, which logs
    them and exits with SystemExit; nothing here catches them.
"""

import enum
import logging
import sys
from typing import Any, Callable, Optional, Sequence, Tuple

import uvicorn
from fastapi import APIRouter, FastAPI
from starlette.routing import Match, Mount
from starlette.types import Scope

from decoroute.annotations import ControllerDescriptor, describe
from decoroute.config import Settings
from decoroute.config import settings as default_settings
from decoroute.exceptions import InvalidControllerError, ServerStateError
from decoroute.middleware.chain import build_chain, wrap

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO", access_log: bool = True) -> None:
    """
    Configure root logging for a listening server.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called by Server.listen()/serve() before binding; uvicorn is started with
    log_config=None so its loggers propagate here.

    HTTP client libraries are held at WARNING. uvicorn.access is too, unless
    access_log asks for uvicorn's per-request lines.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if not access_log:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# uvicorn Integration
# ══════════════════════════════════════════════════════════════════════════

class ServerState(str, enum.Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    # listen()/serve() called, bind not finished yet
    STARTING = "starting"
    LISTENING = "listening"


class _ReadyServer(uvicorn.Server):
    """uvicorn.Server that fires a callback once its sockets are bound."""

    def __init__(self, config: uvicorn.Config, on_bound: Callable[[], None]):
        super().__init__(config)
        self._on_bound: Optional[Callable[[], None]] = on_bound

    async def startup(self, sockets: Optional[list] = None) -> None:
        await super().startup(sockets=sockets)
        # started stays False when lifespan startup fails
        if self.started and self._on_bound is not None:
            on_bound, self._on_bound = self._on_bound, None
            on_bound()


class ControllerMount(Mount):
    """
    Mount that only claims a request one of its own routes matches.

    A plain Mount matches every path under its prefix, so an earlier
    controller would hide later ones sharing (or nesting under) the prefix.
    Here a miss returns Match.NONE and the parent router moves on to the next
    controller. A verb mismatch returns Match.PARTIAL, which the parent uses
    (405) only when no other route matches fully.
    """

    def matches(self, scope: Scope) -> Tuple[Match, Scope]:
        match, child_scope = super().matches(scope)
        if match is Match.NONE:
            return match, child_scope

        inner_scope = {**scope, **child_scope}
        best = Match.NONE
        for route in self.routes:
            route_match, _ = route.matches(inner_scope)
            if route_match is Match.FULL:
                return Match.FULL, child_scope
            if route_match is Match.PARTIAL:
                best = Match.PARTIAL
        return best, child_scope


def _bind(handler: Any, instance: Any) -> Any:
    """Bind a class-body member to the controller instance, like attribute access does."""
    binder = getattr(type(handler), "__get__", None)
    if binder is None:
        return handler
    return binder(handler, instance, type(instance))


# ══════════════════════════════════════════════════════════════════════════
# Server
# ══════════════════════════════════════════════════════════════════════════

class Server:
    """
    Assembles annotated controllers into a FastAPI application.

    Args:
        port:         TCP port listen() binds
        middlewares:  Global chain; the first entry sees every request first
        controllers:  Controller classes (decorated) or ControllerDescriptors,
                      mounted in list order
        settings:     decoroute.config.Settings; the module singleton by default

    Attributes:
        app:          The assembled FastAPI application (an ASGI app)
        state:        ServerState
        http_server:  The uvicorn.Server, once listen()/serve() was called

    Usage:
        server = Server(3000, middlewares=[json_body], controllers=[HelloController])
        server.listen(lambda: print("Server listening on port 3000"))
    """

    def __init__(
        self,
        port: int,
        *,
        middlewares: Optional[Sequence[Any]] = None,
        controllers: Optional[Sequence[Any]] = None,
        settings: Optional[Settings] = None,
    ):
        self.state = ServerState.UNCONFIGURED
        self.port = port
        self.settings = settings or default_settings
        self.http_server: Optional[uvicorn.Server] = None

        docs = self.settings.docs_enabled
        self.app = FastAPI(
            title=self.settings.app_title,
            docs_url="/docs" if docs else None,
            redoc_url="/redoc" if docs else None,
            openapi_url="/openapi.json" if docs else None,
        )

        self._assign_middlewares(middlewares or [])
        self._assign_controllers(controllers or [])
        self.state = ServerState.CONFIGURED

    # ── Assembly ──────────────────────────────────────────────────────────

    def _assign_middlewares(self, middlewares: Sequence[Any]) -> None:
        # add_middleware() makes the latest addition outermost, so add in
        # reverse to keep middlewares[0] first in line
        for cls, args, kwargs in reversed(build_chain(middlewares)):
            self.app.add_middleware(cls, *args, **kwargs)

    def _assign_controllers(self, controllers: Sequence[Any]) -> None:
        route_count = 0
        for entry in controllers:
            descriptor, instance = self._resolve(entry)
            router = APIRouter()

            for route in descriptor.routes:
                endpoint = route.handler if instance is None else _bind(route.handler, instance)
                router.add_api_route(
                    route.sub_path,
                    endpoint,
                    methods=[route.http_method.value],
                )
                registered = router.routes[-1]
                registered.app = wrap(registered.app, route.middlewares)
                logger.debug(
                    "Registered %s %s%s -> %s",
                    route.http_method.value,
                    descriptor.base_path,
                    route.sub_path,
                    getattr(route.handler, "__qualname__", repr(route.handler)),
                )

            self.app.router.routes.append(
                ControllerMount(
                    descriptor.base_path,
                    app=router,
                    middleware=build_chain(descriptor.middlewares),
                )
            )
            route_count += len(descriptor.routes)
            logger.debug(
                "Mounted %s at %r (%d routes, %d controller middleware)",
                type(instance).__qualname__ if instance is not None else "ControllerDescriptor",
                descriptor.base_path,
                len(descriptor.routes),
                len(descriptor.middlewares),
            )

        logger.info(
            "Assembled %d controller(s) with %d route(s)", len(controllers), route_count
        )

    @staticmethod
    def _resolve(entry: Any) -> Tuple[ControllerDescriptor, Any]:
        """Return (descriptor, instance) for one controllers entry."""
        if isinstance(entry, ControllerDescriptor):
            return entry, None
        if isinstance(entry, type):
            # Metadata comes from the class; the instance only binds handlers
            return describe(entry), entry()
        raise InvalidControllerError(entry)

    # ── Listening ─────────────────────────────────────────────────────────

    def listen(self, on_ready: Callable[[], Any]) -> None:
        """
        Bind to settings.host:port and serve until uvicorn exits.

        on_ready is called exactly once, after the socket is bound. If the
        port cannot be bound, uvicorn logs the error and raises SystemExit.
        """
        server = self._http_server(on_ready)
        try:
            server.run()
        finally:
            self._release()

    async def serve(self, on_ready: Callable[[], Any]) -> None:
        """Like listen(), for callers already running an event loop."""
        server = self._http_server(on_ready)
        try:
            await server.serve()
        finally:
            self._release()

    def _release(self) -> None:
        # A run that never bound leaves the server Configured, so it may retry
        if self.state is ServerState.STARTING:
            self.state = ServerState.CONFIGURED

    def _http_server(self, on_ready: Callable[[], Any]) -> uvicorn.Server:
        if self.state is not ServerState.CONFIGURED:
            raise ServerStateError(self.state.value, context={"port": self.port})
        self.state = ServerState.STARTING

        setup_logging(self.settings.log_level, self.settings.access_log)

        def on_bound() -> None:
            self.state = ServerState.LISTENING
            logger.info("Listening on %s:%d", self.settings.host, self.port)
            on_ready()

        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.port,
            log_level=self.settings.log_level.lower(),
            access_log=self.settings.access_log,
            log_config=None,
        )
        self.http_server = _ReadyServer(config, on_bound)
        return self.http_server
