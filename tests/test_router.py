import pytest

from tests.helpers import list_users, show_user
from waypoint.exceptions import InvalidRoute
from waypoint.methods import ALLOWED_HTTP_METHODS
from waypoint.routing import Route, RouteMatch, Router


def handler():
    return "ok"


class TestAddRoute:
    def test_returns_route_with_trimmed_pattern(self, router: Router):
        route = router.add_route("GET", " /users/{id}/ ", show_user)

        assert isinstance(route, Route)
        assert route.pattern == "users/{id}"
        assert route.handler is show_user

    def test_method_is_case_insensitive(self, router: Router):
        router.add_route(" get ", "/users", list_users)

        assert router.routes == [("GET", router.match("GET", "/users")[0].route)]

    def test_list_of_methods_shares_one_route(self, router: Router):
        route = router.add_route(["GET", "post"], "/users", list_users)

        assert router.routes == [("GET", route), ("POST", route)]

    def test_wildcard_registers_every_method(self, router: Router):
        route = router.add_route("*", "/health", handler)

        assert [method for method, _ in router.routes] == list(ALLOWED_HTTP_METHODS)
        assert all(registered is route for _, registered in router.routes)

    @pytest.mark.parametrize("methods", ["FETCH", ["GET", "TRACE"], "", []])
    def test_unknown_or_empty_method(self, router: Router, methods):
        with pytest.raises(InvalidRoute, match="Unknown HTTP method"):
            router.add_route(methods, "/users", handler)

    @pytest.mark.parametrize("methods", [None, ["GET", 5], 5])
    def test_methods_must_be_strings(self, router: Router, methods):
        with pytest.raises(InvalidRoute, match="must be a string or a list of strings"):
            router.add_route(methods, "/users", handler)

        assert router.routes == []

    def test_failed_registration_stores_nothing(self, router: Router):
        with pytest.raises(InvalidRoute):
            router.add_route(["GET", "TRACE"], "/users", handler)

        assert router.routes == []

    def test_duplicate_pattern_for_same_method(self, router: Router):
        router.add_route("GET", "/users", handler)

        with pytest.raises(InvalidRoute, match="Route already defined: 'GET' 'users'"):
            router.add_route("GET", "users/", handler)

    def test_duplicate_check_is_per_method(self, router: Router):
        router.add_route("GET", "/users", handler)
        router.add_route("POST", "/users", handler)

        assert [method for method, _ in router.routes] == ["GET", "POST"]

    def test_duplicate_in_method_list_aborts_whole_registration(self, router: Router):
        router.add_route("POST", "/users", handler)

        with pytest.raises(InvalidRoute):
            router.add_route(["GET", "POST"], "/users", handler)

        assert router.match("GET", "/users") == []

    def test_equivalent_but_differently_spelled_patterns_do_not_conflict(self, router: Router):
        router.add_route("GET", "/users/{id}", handler)
        router.add_route("GET", "/users/{user_id}", handler)

        assert len(router.match("GET", "/users/1")) == 2

    def test_invalid_regex(self, router: Router):
        with pytest.raises(InvalidRoute, match="Invalid route pattern"):
            router.add_route("GET", r"/users/(\d+", handler)

    def test_non_callable_handler(self, router: Router):
        with pytest.raises(InvalidRoute, match="Handler must be a callable"):
            router.add_route("GET", "/users", 42)

    @pytest.mark.parametrize(
        "verb, method",
        [
            ("get", "GET"),
            ("head", "HEAD"),
            ("post", "POST"),
            ("put", "PUT"),
            ("patch", "PATCH"),
            ("delete", "DELETE"),
            ("options", "OPTIONS"),
        ],
    )
    def test_verb_shorthands(self, router: Router, verb, method):
        route = getattr(router, verb)("/users", handler)

        assert router.routes == [(method, route)]

    def test_any(self, router: Router):
        router.any("/ping", handler)

        for method in ALLOWED_HTTP_METHODS:
            assert len(router.match(method, "/ping")) == 1


class TestMatch:
    def test_static_route(self, router: Router):
        route = router.get("/about/team", handler)

        assert router.match("GET", "/about/team") == [RouteMatch(route, ())]
        assert router.match("GET", "/about") == []

    def test_placeholder_params(self, router: Router):
        route = router.get("/users/{id}", show_user)

        assert router.match("GET", "/users/42") == [RouteMatch(route, ("42",))]

    def test_query_and_fragment_are_ignored(self, router: Router):
        router.get("host/path/to/resource", handler)

        for uri in [
            "host/path/to/resource?query=1",
            "host/path/to/resource#fragment",
            "host/path/to/resource?query=1#fragment",
        ]:
            assert router.match("GET", uri) == router.match("GET", "host/path/to/resource")
            assert router.match("GET", uri) != []

    def test_method_is_case_insensitive(self, router: Router):
        router.get("/users", handler)

        assert len(router.match("get", "/users")) == 1

    def test_other_method_does_not_match(self, router: Router):
        router.get("/users", handler)

        assert router.match("POST", "/users") == []

    def test_unknown_method_gives_empty_result(self, router: Router):
        router.get("/users", handler)

        assert router.match("TRACE", "/users") == []

    def test_all_matches_in_registration_order(self, router: Router):
        specific = router.get("/users/me", handler)
        general = router.get("/users/{id}", handler)
        raw = router.get(r"/users/(\w+)", handler)

        assert router.match("GET", "/users/me") == [
            RouteMatch(specific, ()),
            RouteMatch(general, ("me",)),
            RouteMatch(raw, ("me",)),
        ]

    def test_registration_order_beats_specificity(self, router: Router):
        general = router.get("/users/{id}", handler)
        router.get("/users/me", handler)

        assert router.match("GET", "/users/me")[0].route is general

    def test_optional_placeholder(self, router: Router):
        route = router.get("/albums/{year}?", handler)

        assert router.match("GET", "/albums/2023") == [RouteMatch(route, ("2023",))]
        assert router.match("GET", "/albums") == [RouteMatch(route, ())]
        assert router.match("GET", "/albums/") == [RouteMatch(route, ())]

    def test_root_route(self, router: Router):
        route = router.get("/", handler)

        assert router.match("GET", "/") == [RouteMatch(route, ())]
        assert router.match("GET", "") == [RouteMatch(route, ())]
        assert router.match("GET", "/?utm=1") == [RouteMatch(route, ())]

    @pytest.mark.parametrize(
        "pattern, uris",
        [
            (r"users/(\d+)", ["users/1/a", "users/90876/1", "users/adam"]),
            (r"users/(\w+)", ["users/a/1", "users/apple/a", "users/"]),
            ("users/{id}", ["users/"]),
            ("users/{id}/profile", ["users/profile", "users/123/profile/settings"]),
        ],
    )
    def test_non_matching_uris(self, router: Router, pattern, uris):
        router.get(pattern, handler)

        for uri in uris:
            assert router.match("GET", uri) == []

    def test_match_does_not_invoke_handlers(self, router: Router, recorder):
        router.get("/users", recorder.handler("users"))

        router.match("GET", "/users")

        assert recorder.calls == []


class TestRouteNotFoundHandler:
    def test_default_is_none(self, router: Router):
        assert router.get_route_not_found_handler() is None

    def test_set_and_get(self, router: Router):
        router.set_route_not_found_handler(handler)

        assert router.get_route_not_found_handler() is handler

    def test_new_handler_overwrites(self, router: Router):
        def other():
            return "other"

        router.set_route_not_found_handler(handler)
        router.set_route_not_found_handler(other)

        assert router.get_route_not_found_handler() is other

    def test_invalid_handler(self, router: Router):
        with pytest.raises(InvalidRoute):
            router.set_route_not_found_handler("not a reference")
