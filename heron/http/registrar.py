"""
Route registrar - installs one controller method as a live route.

Registration happens at startup, synchronously:
1. resolve the method's full path
2. refuse a (verb, path) pair some earlier route already claims
3. assemble declared middlewares plus the ACL middleware, if any
4. append the dispatcher's handler and install the route
5. record a root-proto lookup for the route's verb
"""

from typing import Callable, Optional
import logging

from .acl import acl_middleware_factory
from .dispatcher import MethodDispatcher
from .meta import HTTPControllerMeta, HTTPMethodMeta
from .middleware import Middleware
from .path import compile_path
from .root_proto import RootProtoManager
from .router import Router
from ..faults import RouteConflictFault
from ..metadata import PrototypeEntry
from ..runtime import ObjectContainer


logger = logging.getLogger("heron.http.registrar")

AclFactory = Callable[[HTTPControllerMeta, HTTPMethodMeta], Optional[Middleware]]


class HTTPMethodRegister:
    """Registers one controller method on a router."""

    def __init__(
        self,
        proto: PrototypeEntry,
        controller_meta: HTTPControllerMeta,
        method_meta: HTTPMethodMeta,
        router: Router,
        container: ObjectContainer,
        acl_factory: AclFactory = acl_middleware_factory,
    ):
        self.proto = proto
        self.controller_meta = controller_meta
        self.method_meta = method_meta
        self.router = router
        self.container = container
        self.acl_factory = acl_factory

    def _find_conflict(self, verb: str, path: str):
        """An earlier route of the same verb whose template is equivalent to ``path``."""
        matcher = compile_path(path, case_sensitive=self.router.case_sensitive, strict=self.router.strict)
        for route in self.router.match(path, verb).path_and_method:
            if verb in route.methods and matcher.test(route.path):
                return route
        # Constrained segments never match their own template text
        for route in self.router.routes():
            if route.path == path and verb in route.methods:
                return route
        return None

    def register(self, root_proto_manager: RootProtoManager) -> None:
        """
        Install the route.

        Raises:
            RouteConflictFault: The verb and path are already registered
        """
        verb = self.method_meta.method.value
        real_path = self.controller_meta.get_method_real_path(self.method_meta)
        method_name = self.controller_meta.get_method_name(self.method_meta)

        if self._find_conflict(verb, real_path) is not None:
            raise RouteConflictFault(method_name, verb, real_path)

        middlewares = self.controller_meta.get_method_middlewares(self.method_meta)
        acl_middleware = self.acl_factory(self.controller_meta, self.method_meta)
        if acl_middleware is not None:
            middlewares.append(acl_middleware)

        handler = MethodDispatcher(
            self.proto, self.controller_meta, self.method_meta, self.container,
        ).create_handler()
        register_route = getattr(self.router, verb.lower())
        register_route(method_name, real_path, *middlewares, handler)

        matcher = compile_path(real_path, case_sensitive=True, strict=self.router.strict)
        proto = self.proto

        def lookup(ctx):
            if matcher.test(ctx.path):
                return proto
            return None

        root_proto_manager.register_root_proto(verb, lookup)
        logger.debug("Registered %s %s -> %s", verb, real_path, method_name)
