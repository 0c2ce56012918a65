import pytest

from tests.helpers import CallRecorder
from waypoint.dispatcher import Dispatcher
from waypoint.routing import Router


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def dispatcher(router: Router) -> Dispatcher:
    return Dispatcher(router)


@pytest.fixture
def recorder() -> CallRecorder:
    return CallRecorder()
