"""
decoroute: Annotation Registry Tests
======================================

What:  Tests for @controller, @route and its verb aliases, and describe().
How:   Declares small controller classes and inspects their descriptors.
       Nothing here builds a server.
"""

import pytest

from decoroute.annotations import (
    CONTROLLER_ATTR,
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


async def auth(request, call_next):
    return await call_next(request)


async def audit(request, call_next):
    return await call_next(request)


class TestControllerDecorator:
    """Class-level annotation."""

    def test_sets_base_path_and_middlewares(self):
        @controller("/users", middlewares=[auth, audit])
        class Users:
            pass

        descriptor = describe(Users)
        assert descriptor.base_path == "/users"
        assert descriptor.middlewares == [auth, audit]

    def test_middlewares_default_to_empty(self):
        @controller("/users")
        class Users:
            pass

        assert describe(Users).middlewares == []

    def test_returns_the_class_unchanged(self):
        class Users:
            pass

        assert controller("/users")(Users) is Users

    def test_reapplying_last_write_wins(self):
        class Users:
            @get("/")
            def index(self):
                return []

        controller("/a", middlewares=[auth])(Users)
        controller("/b")(Users)

        descriptor = describe(Users)
        assert descriptor.base_path == "/b"
        assert descriptor.middlewares == []
        # routes are untouched by re-application
        assert [r.sub_path for r in descriptor.routes] == ["/"]


class TestRouteDecorators:
    """Method-level annotations."""

    def test_routes_recorded_in_declaration_order(self):
        @controller("/things")
        class Things:
            @get("/")
            def index(self):
                pass

            @post("/")
            def create(self):
                pass

            @put("/{thing_id}")
            def replace(self, thing_id: int):
                pass

            @delete("/{thing_id}")
            def remove(self, thing_id: int):
                pass

        routes = describe(Things).routes
        assert [(r.http_method, r.sub_path) for r in routes] == [
            (HttpMethod.GET, "/"),
            (HttpMethod.POST, "/"),
            (HttpMethod.PUT, "/{thing_id}"),
            (HttpMethod.DELETE, "/{thing_id}"),
        ]
        assert [r.handler for r in routes] == [
            Things.__dict__["index"],
            Things.__dict__["create"],
            Things.__dict__["replace"],
            Things.__dict__["remove"],
        ]

    def test_decorated_method_stays_callable(self):
        class Things:
            @get("/")
            def index(self):
                return "index"

        assert Things().index() == "index"

    def test_route_middlewares_recorded(self):
        class Things:
            @get("/", middlewares=[auth])
            def index(self):
                pass

            @get("/open")
            def public(self):
                pass

        first, second = describe(Things).routes
        assert first.middlewares == (auth,)
        assert second.middlewares == ()

    def test_route_accepts_verb_strings(self):
        class Things:
            @route("post", "/")
            def create(self):
                pass

        assert describe(Things).routes[0].http_method is HttpMethod.POST

    def test_unknown_verb_rejected(self):
        with pytest.raises(ValueError):
            route("PATCH", "/")

    def test_aliases_fix_the_verb(self):
        assert get.__name__ == "get"
        assert delete.__name__ == "delete"

        class Things:
            @delete("/{thing_id}")
            def remove(self, thing_id: int):
                pass

        assert describe(Things).routes[0].http_method is HttpMethod.DELETE

    def test_duplicate_routes_are_both_kept(self):
        class Things:
            @get("/dup")
            def first(self):
                pass

            @get("/dup")
            def second(self):
                pass

        routes = describe(Things).routes
        assert len(routes) == 2
        assert routes[0].handler is Things.__dict__["first"]
        assert routes[1].handler is Things.__dict__["second"]

    def test_stacked_decorators_declare_several_routes(self):
        class Things:
            @get("/a")
            @get("/b")
            def both(self):
                pass

        # decorators apply bottom-up
        assert [r.sub_path for r in describe(Things).routes] == ["/b", "/a"]

    def test_staticmethod_can_be_routed(self):
        class Things:
            @get("/static")
            @staticmethod
            def static():
                return "static"

        route_descriptor = describe(Things).routes[0]
        assert isinstance(route_descriptor.handler, staticmethod)


class TestDescribe:
    """The class-level accessor."""

    def test_routes_exist_without_controller_decorator(self):
        class Bare:
            @get("/ping")
            def ping(self):
                pass

        descriptor = describe(Bare)
        assert descriptor.base_path == ""
        assert descriptor.middlewares == []
        assert len(descriptor.routes) == 1

    def test_does_not_instantiate(self):
        @controller("/x")
        class Exploding:
            def __init__(self):
                raise AssertionError("describe() must not instantiate")

            @get("/")
            def index(self):
                pass

        assert len(describe(Exploding).routes) == 1

    def test_descriptor_is_created_once_and_owned_by_the_class(self):
        class Things:
            @get("/")
            def index(self):
                pass

        descriptor = describe(Things)
        assert describe(Things) is descriptor
        assert Things.__dict__[CONTROLLER_ATTR] is descriptor

    def test_subclass_does_not_share_descriptor(self):
        @controller("/base")
        class Base:
            @get("/")
            def index(self):
                pass

        class Child(Base):
            @post("/")
            def create(self):
                pass

        child = describe(Child)
        assert child is not describe(Base)
        assert child.base_path == ""
        assert [r.http_method for r in child.routes] == [HttpMethod.POST]

    def test_class_without_routes(self):
        class Empty:
            pass

        assert describe(Empty).routes == []


class TestControllerDescriptorBuilder:
    """Explicit builder usage."""

    def test_add_route_appends_immutable_descriptor(self):
        def handler():
            pass

        descriptor = ControllerDescriptor(base_path="/api")
        added = descriptor.add_route("GET", "/", handler, middlewares=[auth])

        assert descriptor.routes == [added]
        assert added == RouteDescriptor(HttpMethod.GET, "/", handler, (auth,))
        with pytest.raises(AttributeError):
            added.sub_path = "/other"

    def test_add_route_keeps_duplicates(self):
        def handler():
            pass

        descriptor = ControllerDescriptor()
        descriptor.add_route(HttpMethod.PUT, "/x", handler)
        descriptor.add_route(HttpMethod.PUT, "/x", handler)
        assert len(descriptor.routes) == 2
