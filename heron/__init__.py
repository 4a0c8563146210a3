"""
Heron - prototype registry and HTTP dispatch for async Python services.

Integration of:
- Metadata: prototypes, qualifiers and the prototype registry
- Runtime: object container with singleton, context and always-new lifetimes
- HTTP: controller metadata, routing, ACL and method dispatch
- Faults: structured error handling with fault domains
"""

__version__ = "0.1.0"

# ============================================================================
# Core
# ============================================================================

from .app import Application
from .config import ConfigLoader, HeronConfig, setup_logging

# ============================================================================
# Faults
# ============================================================================

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    PrototypeNotFoundFault,
    AmbiguousPrototypeFault,
    RouteConflictFault,
    RouteNotFoundFault,
    MethodNotAllowedFault,
    AccessDeniedFault,
)

# ============================================================================
# Metadata & runtime
# ============================================================================

from .metadata import (
    QualifierInfo,
    InitType,
    AccessLevel,
    InjectObject,
    PrototypeEntry,
    MetadataUtil,
    LoadUnit,
    PrototypeRegistry,
)

from .runtime import ObjectContext, ObjectContainer

# ============================================================================
# HTTP
# ============================================================================

from .http import (
    HTTPRequest,
    HTTPResponse,
    HTTPContext,
    HTTPMethodType,
    BodyParamMeta,
    PathParamMeta,
    QueryParamMeta,
    QueriesParamMeta,
    HTTPMethodMeta,
    HTTPControllerMeta,
    ControllerMetadataUtil,
    Router,
    RootProtoManager,
    HTTPMethodRegister,
    HTTPControllerRegister,
)

__all__ = [
    "__version__",
    "Application",
    "ConfigLoader",
    "HeronConfig",
    "setup_logging",
    "Fault",
    "FaultDomain",
    "Severity",
    "PrototypeNotFoundFault",
    "AmbiguousPrototypeFault",
    "RouteConflictFault",
    "RouteNotFoundFault",
    "MethodNotAllowedFault",
    "AccessDeniedFault",
    "QualifierInfo",
    "InitType",
    "AccessLevel",
    "InjectObject",
    "PrototypeEntry",
    "MetadataUtil",
    "LoadUnit",
    "PrototypeRegistry",
    "ObjectContext",
    "ObjectContainer",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPContext",
    "HTTPMethodType",
    "BodyParamMeta",
    "PathParamMeta",
    "QueryParamMeta",
    "QueriesParamMeta",
    "HTTPMethodMeta",
    "HTTPControllerMeta",
    "ControllerMetadataUtil",
    "Router",
    "RootProtoManager",
    "HTTPMethodRegister",
    "HTTPControllerRegister",
]
