"""
Application - owns the prototype registry, object container, router and
root-proto lookups, and drives startup, dispatch and shutdown.

Lifecycle:
1. ``load_unit()`` / ``register_prototype()`` while booting
2. ``startup()`` freezes the registry, registers every controller
   prototype as routes and locks the router
3. ``handle()`` serves requests
4. ``shutdown()`` disposes singletons
"""

from typing import Any, Dict, List, Optional
import logging

from .asgi import ASGIAdapter
from .config import HeronConfig
from .http import (
    HTTPContext,
    HTTPControllerRegister,
    RootProtoManager,
    Router,
    acl_middleware_factory,
    is_controller,
)
from .http.context import AclChecker
from .http.registrar import AclFactory
from .metadata import LoadUnit, PrototypeEntry, PrototypeRegistry
from .runtime import ObjectContainer, ObjectContext


class Application:
    """A Heron application instance."""

    def __init__(
        self,
        config: Optional[HeronConfig] = None,
        acl_checker: Optional[AclChecker] = None,
        acl_factory: AclFactory = acl_middleware_factory,
    ):
        self.config = config or HeronConfig()
        self.registry = PrototypeRegistry()
        self.container = ObjectContainer(self.registry)
        self.router = Router(
            case_sensitive=self.config.case_sensitive,
            strict=self.config.strict_paths,
        )
        self.root_protos = RootProtoManager()
        self.acl_checker = acl_checker
        self.acl_factory = acl_factory
        self.logger = logging.getLogger("heron.app")
        self._started = False
        self._asgi: Optional[ASGIAdapter] = None

    # ── Bootstrap ──────────────────────────────────────────────────────

    def load_unit(self, unit: LoadUnit) -> None:
        self.registry.register_load_unit(unit)

    def register_prototype(self, proto: PrototypeEntry) -> None:
        self.registry.register(proto)

    def startup(self) -> None:
        """
        Freeze the registry and install every controller route.

        Idempotent. Registration faults (duplicate routes) propagate and
        abort startup.
        """
        if self._started:
            return
        self.registry.freeze()

        controllers = 0
        routes = 0
        for proto in self.registry:
            if not is_controller(proto):
                continue
            routes += HTTPControllerRegister(
                proto, self.router, self.container, acl_factory=self.acl_factory,
            ).register(self.root_protos)
            controllers += 1

        self.router.lock()
        self._started = True
        self.logger.info(
            "%s started: %d prototypes, %d controllers, %d routes",
            self.config.app_name, len(self.registry), controllers, routes,
        )

    @property
    def started(self) -> bool:
        return self._started

    # ── Request handling ───────────────────────────────────────────────

    async def handle(self, ctx: HTTPContext) -> None:
        """
        Dispatch one request.

        Faults raised by routing, resolution or the controller method
        propagate to the caller.
        """
        if not self._started:
            self.startup()

        owns_scope = ctx.object_context is None
        if owns_scope:
            ctx.object_context = ObjectContext()
        if ctx.acl_checker is None:
            ctx.acl_checker = self.acl_checker

        ctx.state["root_proto"] = self.root_protos.get_root_proto(ctx)
        try:
            await self.router.dispatch(ctx)
        finally:
            if owns_scope:
                await ctx.object_context.close()

    async def shutdown(self) -> None:
        await self.container.shutdown()
        self.logger.info("%s stopped", self.config.app_name)

    def routes(self) -> List[Dict[str, Any]]:
        return self.router.table()

    async def __call__(self, scope, receive, send) -> None:
        if self._asgi is None:
            self._asgi = ASGIAdapter(self)
        await self._asgi(scope, receive, send)
