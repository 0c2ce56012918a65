import logging

from waypoint import Dispatcher, RouteNotFound, RouteRegistrar, Router

# Define handlers. Captured params arrive positionally, as strings.


def homepage():
    return "Hello from Waypoint! This is the basic demo."


def show_user(user_id):
    return f"User {user_id}"


def show_album(year="latest"):
    return f"Albums from {year}"


class ReportController:
    def __init__(self, title: str = "Reports"):
        self.title = title

    def daily(self, day):
        return f"{self.title}: {day}"

    @staticmethod
    def summary():
        return "Summary report"


def require_login():
    print("-> checking login")


def admin_routes(admin: RouteRegistrar):
    admin.before("*", "/.*", require_login)
    admin.get("/reports/summary", "ReportController@summary")
    admin.get("/reports/{day}", "ReportController@daily")


def build_router() -> Router:
    router = Router()
    router.resolver.register(ReportController)

    router.get("/", homepage)
    router.get("/users/{id}", show_user)
    router.get("/albums/{year}?", show_album)
    router.group("/admin", admin_routes)

    return router


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    dispatcher = Dispatcher(build_router())
    for method, uri in [
        ("GET", "/"),
        ("GET", "/users/42?tab=posts"),
        ("GET", "/albums"),
        ("GET", "/albums/1999"),
        ("GET", "/admin/reports/summary"),
        ("GET", "/admin/reports/monday"),
        ("POST", "/users/42"),
    ]:
        try:
            print(f"{method} {uri}: {dispatcher.dispatch(method, uri)}")
        except RouteNotFound as e:
            print(f"{method} {uri}: {e}")
