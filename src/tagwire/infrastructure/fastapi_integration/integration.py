from typing import Awaitable, Callable, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from tagwire.application import ObjectGraph

T = TypeVar("T")


def create_fastapi_dependency(graph: ObjectGraph, dependency_type: Type[T], name: str = "") -> Callable[[], T]:
    """Create a FastAPI Depends() callable that looks up an object in the graph.

    The graph is expected to be populated already; the dependency only hands
    out existing objects and never creates new ones.

    Args:
        graph: The populated object graph.
        dependency_type: The type (record or capability) to look up.
        name: Optional name the object was provided with.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> graph = ObjectGraph()
        >>> graph.provide(Entry(value=app_services))
        >>> graph.populate()
        >>>
        >>> get_user_repo = create_fastapi_dependency(graph, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        """Look the dependency up in the graph."""
        return graph.get(dependency_type, name)

    return dependency


def create_request_dependency(dependency_type: Type[T], name: str = "") -> Callable[[Request], T]:
    """Create a FastAPI dependency that looks up an object in the request's graph.

    Requires the ObjectGraphMiddleware to be installed.

    Args:
        dependency_type: The type to look up.
        name: Optional name the object was provided with.

    Returns:
        A callable resolving from ``request.state.object_graph``.

    Example:
        >>> app.add_middleware(ObjectGraphMiddleware, graph=graph)
        >>>
        >>> get_planet_api = create_request_dependency(PlanetAPI)
        >>>
        >>> @app.get("/planet")
        >>> async def planet(api: PlanetAPI = Depends(get_planet_api)):
        ...     return {"planet": api.planet(42)}
    """

    def request_dependency(request: Request) -> T:
        """Look the dependency up in the graph attached to the request."""
        if not hasattr(request.state, "object_graph"):
            raise RuntimeError(
                "Request does not have an object graph. Did you forget to add ObjectGraphMiddleware?"
            )
        graph: ObjectGraph = request.state.object_graph
        return graph.get(dependency_type, name)

    return request_dependency


class ObjectGraphMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes a populated object graph to every request.

    The graph is accessible via ``request.state.object_graph``.

    Attributes:
        graph: The populated object graph shared by all requests.

    Example:
        >>> graph = ObjectGraph()
        >>> graph.provide(Entry(value=AwesomeApp()), Entry(value=transport))
        >>> graph.populate()
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(ObjectGraphMiddleware, graph=graph)
    """

    def __init__(self, app: FastAPI, graph: ObjectGraph):
        """Initialize the middleware with the graph to expose.

        Args:
            app: The FastAPI/Starlette application.
            graph: The populated object graph.
        """
        super().__init__(app)
        self.graph = graph

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the graph to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.object_graph = self.graph
        return await call_next(request)
