"""
Heron faults - structured fault handling.

Faults are typed exceptions carrying a stable code, a domain and a
severity. Startup-time faults (duplicate routes, duplicate prototypes)
are FATAL; request-time faults propagate to the transport, which maps
them to responses.
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    RegistryFault,
    DuplicatePrototypeFault,
    AmbiguousRegistrationFault,
    RegistryFrozenFault,
    ControllerMetadataMissingFault,
    DIFault,
    PrototypeNotFoundFault,
    AmbiguousPrototypeFault,
    DependencyCycleFault,
    ScopeViolationFault,
    ContextRequiredFault,
    RoutingFault,
    RouteConflictFault,
    RouterLockedFault,
    InvalidPathTemplateFault,
    RouteNotFoundFault,
    MethodNotAllowedFault,
    FlowFault,
    ParamContractFault,
    InvalidRequestBodyFault,
    MiddlewareChainFault,
    SecurityFault,
    AccessDeniedFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",

    # Registry
    "RegistryFault",
    "DuplicatePrototypeFault",
    "AmbiguousRegistrationFault",
    "RegistryFrozenFault",
    "ControllerMetadataMissingFault",

    # DI
    "DIFault",
    "PrototypeNotFoundFault",
    "AmbiguousPrototypeFault",
    "DependencyCycleFault",
    "ScopeViolationFault",
    "ContextRequiredFault",

    # Routing
    "RoutingFault",
    "RouteConflictFault",
    "RouterLockedFault",
    "InvalidPathTemplateFault",
    "RouteNotFoundFault",
    "MethodNotAllowedFault",

    # Flow
    "FlowFault",
    "ParamContractFault",
    "InvalidRequestBodyFault",
    "MiddlewareChainFault",

    # Security
    "SecurityFault",
    "AccessDeniedFault",
]
