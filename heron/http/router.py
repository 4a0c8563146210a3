"""
Router - verb and path-template routing with per-route middleware stacks.

Routes are registered during the synchronous startup phase and the router
is locked before requests are served. ``match`` answers both request
dispatch and registration-time conflict checks.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
import logging

from .context import HTTPContext
from .middleware import Middleware, compose
from .path import PathMatcher, compile_path
from ..faults import MethodNotAllowedFault, RouteNotFoundFault, RouterLockedFault


logger = logging.getLogger("heron.http.router")


@dataclass
class Route:
    """One registered route."""
    name: str
    path: str
    methods: List[str]
    stack: List[Middleware]
    matcher: PathMatcher
    handler: Callable[[HTTPContext], Awaitable[None]] = field(repr=False, default=None)

    def __post_init__(self):
        if self.handler is None:
            self.handler = compose(self.stack)


@dataclass
class RouteMatch:
    """
    Result of matching a path and method.

    Attributes:
        path: Routes whose template matches the path, any method
        path_and_method: Routes matching both path and method, in registration order
    """
    path: List[Route] = field(default_factory=list)
    path_and_method: List[Route] = field(default_factory=list)

    @property
    def route(self) -> Optional[Route]:
        """First route matching path and method, if any."""
        return self.path_and_method[0] if self.path_and_method else None

    @property
    def allowed_methods(self) -> List[str]:
        allowed: List[str] = []
        for route in self.path:
            allowed.extend(m for m in route.methods if m not in allowed)
        return allowed


class Router:
    """
    Routes requests by method and path template.

    Verb helpers (``get``, ``post``, ...) take ``(name, path, *stack)``
    where the stack is middlewares followed by the handler.
    """

    def __init__(self, case_sensitive: bool = True, strict: bool = False):
        self.case_sensitive = case_sensitive
        self.strict = strict
        self._routes: List[Route] = []
        self._locked = False

    def register(
        self,
        name: str,
        path: str,
        methods: Sequence[str],
        *stack: Middleware,
    ) -> Route:
        if self._locked:
            raise RouterLockedFault(name, path)
        route = Route(
            name=name,
            path=path,
            methods=[m.upper() for m in methods],
            stack=list(stack),
            matcher=compile_path(path, case_sensitive=self.case_sensitive, strict=self.strict),
        )
        self._routes.append(route)
        logger.debug("Route %s %s -> %s (%d stack entries)", "/".join(route.methods), path, name, len(stack))
        return route

    def get(self, name: str, path: str, *stack: Middleware) -> Route:
        return self.register(name, path, ["GET"], *stack)

    def post(self, name: str, path: str, *stack: Middleware) -> Route:
        return self.register(name, path, ["POST"], *stack)

    def put(self, name: str, path: str, *stack: Middleware) -> Route:
        return self.register(name, path, ["PUT"], *stack)

    def patch(self, name: str, path: str, *stack: Middleware) -> Route:
        return self.register(name, path, ["PATCH"], *stack)

    def delete(self, name: str, path: str, *stack: Middleware) -> Route:
        return self.register(name, path, ["DELETE"], *stack)

    def head(self, name: str, path: str, *stack: Middleware) -> Route:
        return self.register(name, path, ["HEAD"], *stack)

    def options(self, name: str, path: str, *stack: Middleware) -> Route:
        return self.register(name, path, ["OPTIONS"], *stack)

    def match(self, path: str, method: str) -> RouteMatch:
        """
        Match ``path`` and ``method`` against the registered routes.

        HEAD requests fall back to GET routes when no route declares HEAD.
        """
        method = method.upper()
        result = RouteMatch()
        head_fallback: List[Route] = []
        for route in self._routes:
            if not route.matcher.test(path):
                continue
            result.path.append(route)
            if method in route.methods:
                result.path_and_method.append(route)
            elif method == "HEAD" and "GET" in route.methods:
                head_fallback.append(route)
        if not result.path_and_method:
            result.path_and_method = head_fallback
        return result

    def lock(self) -> None:
        self._locked = True

    @property
    def locked(self) -> bool:
        return self._locked

    def routes(self) -> List[Route]:
        return list(self._routes)

    def table(self) -> List[Dict[str, Any]]:
        """Route summary rows, in registration order."""
        return [
            {
                "method": ",".join(route.methods),
                "path": route.path,
                "name": route.name,
                "middlewares": max(len(route.stack) - 1, 0),
            }
            for route in self._routes
        ]

    async def dispatch(self, ctx: HTTPContext) -> None:
        """
        Route ``ctx`` and run the matched stack.

        Raises:
            RouteNotFoundFault: No route template matches the path
            MethodNotAllowedFault: Path matches but the method does not
        """
        matched = self.match(ctx.path, ctx.method)
        route = matched.route
        if route is None:
            if matched.path:
                raise MethodNotAllowedFault(ctx.method, ctx.path, matched.allowed_methods)
            raise RouteNotFoundFault(ctx.method, ctx.path)

        ctx.params = route.matcher.match(ctx.path) or {}
        ctx.state["route_name"] = route.name
        await route.handler(ctx)
