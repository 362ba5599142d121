"""Integration tests for serving a populated object graph through FastAPI."""

from dataclasses import dataclass
from typing import Annotated, Optional, Protocol

import pytest

pytest.importorskip("fastapi")

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from tagwire import INJECT, Entry, ObjectGraph, named
from tagwire.infrastructure.fastapi_integration import (
    ObjectGraphMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)
from tagwire.infrastructure.testing import TestObjectGraph


class UserStore(Protocol):
    def all(self) -> list: ...


@dataclass
class MemoryUserStore:
    def all(self) -> list:
        return ["spock", "kirk"]


@dataclass
class UserService:
    store: Annotated[Optional[UserStore], INJECT] = None

    def list_users(self) -> list:
        return self.store.all()


@dataclass
class Greeting:
    text: str = "hello"


@dataclass
class GreetingService:
    greeting: Annotated[Optional[Greeting], named("greeting")] = None


def _populated_graph(graph=None):
    graph = graph or ObjectGraph()
    graph.provide(
        Entry(value=UserService()),
        Entry(value=MemoryUserStore()),
        Entry(value=Greeting(text="live long"), name="greeting"),
        Entry(value=GreetingService()),
    )
    graph.populate()
    return graph


class TestFastAPIGraphIntegration:
    """Test FastAPI apps backed by an object graph."""

    def test_endpoint_with_graph_dependency(self):
        """Test that a route receives a populated object from the graph."""
        graph = _populated_graph()
        app = FastAPI()
        get_user_service = create_fastapi_dependency(graph, UserService)

        @app.get("/users")
        def list_users(service: UserService = Depends(get_user_service)):
            return {"users": service.list_users()}

        response = TestClient(app).get("/users")

        assert response.status_code == 200
        assert response.json() == {"users": ["spock", "kirk"]}

    def test_named_dependency(self):
        """Test that routes can ask for named objects."""
        graph = _populated_graph()
        app = FastAPI()
        get_greeting = create_fastapi_dependency(graph, Greeting, "greeting")

        @app.get("/greeting")
        def greet(greeting: Greeting = Depends(get_greeting)):
            return {"text": greeting.text}

        assert TestClient(app).get("/greeting").json() == {"text": "live long"}

    def test_middleware_and_request_dependency(self):
        """Test resolving from the graph attached by the middleware."""
        graph = _populated_graph()
        app = FastAPI()
        app.add_middleware(ObjectGraphMiddleware, graph=graph)
        get_store = create_request_dependency(UserStore)

        @app.get("/store")
        def store(store: UserStore = Depends(get_store)):
            return {"same": store is graph.get(MemoryUserStore), "users": store.all()}

        response = TestClient(app).get("/store")

        assert response.json() == {"same": True, "users": ["spock", "kirk"]}

    def test_request_dependency_without_middleware(self):
        """Test that a missing middleware is reported."""
        app = FastAPI()
        get_store = create_request_dependency(UserStore)

        @app.get("/store")
        def store(store: UserStore = Depends(get_store)):
            return {}

        with pytest.raises(RuntimeError, match="ObjectGraphMiddleware"):
            TestClient(app).get("/store")

    def test_graph_with_mocks(self):
        """Test an app wired against a test graph with a fake store."""

        @dataclass
        class FakeStore:
            def all(self) -> list:
                return ["test user"]

        graph = TestObjectGraph()
        graph.mock(FakeStore())
        service = UserService()
        graph.provide(Entry(value=service))
        graph.populate()

        app = FastAPI()
        get_user_service = create_fastapi_dependency(graph, UserService)

        @app.get("/users")
        def list_users(service: UserService = Depends(get_user_service)):
            return {"users": service.list_users()}

        assert TestClient(app).get("/users").json() == {"users": ["test user"]}
