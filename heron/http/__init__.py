"""
HTTP dispatch: request context, controller metadata, routing, and the
registration of controller methods as live routes.
"""

from .context import (
    HTTPRequest,
    HTTPResponse,
    HTTPContext,
)

from .meta import (
    CONTROLLER_META_KEY,
    HTTPMethodType,
    HTTPParamType,
    BodyParamMeta,
    PathParamMeta,
    QueryParamMeta,
    QueriesParamMeta,
    ParamMeta,
    HTTPMethodMeta,
    HTTPControllerMeta,
    ControllerMetadataUtil,
    join_path,
)

from .path import PathMatcher, compile_path
from .middleware import Middleware, Next, Handler, compose
from .router import Route, RouteMatch, Router
from .acl import acl_middleware_factory
from .root_proto import RootProtoManager
from .dispatcher import MethodDispatcher
from .registrar import HTTPMethodRegister
from .controller import HTTPControllerRegister, is_controller

__all__ = [
    # Context
    "HTTPRequest",
    "HTTPResponse",
    "HTTPContext",

    # Metadata
    "CONTROLLER_META_KEY",
    "HTTPMethodType",
    "HTTPParamType",
    "BodyParamMeta",
    "PathParamMeta",
    "QueryParamMeta",
    "QueriesParamMeta",
    "ParamMeta",
    "HTTPMethodMeta",
    "HTTPControllerMeta",
    "ControllerMetadataUtil",
    "join_path",

    # Routing
    "PathMatcher",
    "compile_path",
    "Middleware",
    "Next",
    "Handler",
    "compose",
    "Route",
    "RouteMatch",
    "Router",

    # Registration & dispatch
    "acl_middleware_factory",
    "RootProtoManager",
    "MethodDispatcher",
    "HTTPMethodRegister",
    "HTTPControllerRegister",
    "is_controller",
]
