"""
Helper utilities for tests.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class CallRecorder:
    """Builds stub handlers that record their calls, in order, in one shared list."""

    def __init__(self):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def handler(self, name: str, result: Any = None) -> Callable[..., Any]:
        def handle(*args):
            self.calls.append((name, args))
            return name if result is None else result

        handle.__name__ = name
        return handle

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


class GreetingController:
    def __init__(self, greeting: str = "Hello"):
        self.greeting = greeting

    def greet(self, name: str) -> str:
        return f"{self.greeting} {name}!"

    @staticmethod
    def static_greet(name: str) -> str:
        return f"Hello {name}!"

    @classmethod
    def class_greet(cls, name: str) -> str:
        return f"{cls.__name__} greets {name}"

    @staticmethod
    def missing() -> str:
        return "No greeting here"

    @staticmethod
    def _hidden_greet(name: str) -> str:
        return f"Psst {name}"


class AbstractController(ABC):
    @abstractmethod
    def show(self, item_id: str) -> str: ...


class ConcreteController(AbstractController):
    def show(self, item_id: str) -> str:
        return f"Item {item_id}"


def show_user(user_id: str) -> str:
    return f"User {user_id}"


def list_users() -> str:
    return "All users"


def not_found() -> str:
    return "Nothing here"


AUDIT_LOG: list[str] = []


def audit() -> None:
    AUDIT_LOG.append("audit")
