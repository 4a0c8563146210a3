"""
Heron faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- REGISTRY faults
- DI faults
- ROUTING faults
- FLOW faults
- SECURITY faults
"""

from typing import Any, Optional, Sequence
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason},
        )


# ============================================================================
# REGISTRY Faults
# ============================================================================

class RegistryFault(Fault):
    """Base class for prototype registry faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.REGISTRY,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class DuplicatePrototypeFault(RegistryFault):
    """Two prototypes share one id."""

    def __init__(self, proto_id: str, existing: str, incoming: str):
        super().__init__(
            code="DUPLICATE_PROTOTYPE",
            message=(
                f"Prototype id '{proto_id}' is already registered "
                f"(existing: {existing}, incoming: {incoming})"
            ),
            metadata={"id": proto_id, "existing": existing, "incoming": incoming},
        )


class AmbiguousRegistrationFault(RegistryFault):
    """Two prototypes share a name and an identical qualifier set."""

    def __init__(self, name: str, qualifiers: Sequence[Any], ids: Sequence[str]):
        rendered = ", ".join(f"{q.attribute}={q.value}" for q in qualifiers) or "<none>"
        super().__init__(
            code="AMBIGUOUS_REGISTRATION",
            message=(
                f"Prototype '{name}' with qualifiers [{rendered}] is declared more than once: "
                f"{', '.join(ids)}"
            ),
            metadata={"name": name, "ids": list(ids)},
        )


class RegistryFrozenFault(RegistryFault):
    """Registration attempted after startup completed."""

    def __init__(self, proto_id: str):
        super().__init__(
            code="REGISTRY_FROZEN",
            message=f"Cannot register prototype '{proto_id}': registry is frozen after startup",
            metadata={"id": proto_id},
        )


class ControllerMetadataMissingFault(RegistryFault):
    """A prototype registered as controller carries no controller metadata."""

    def __init__(self, proto_id: str):
        super().__init__(
            code="CONTROLLER_METADATA_MISSING",
            message=f"Prototype '{proto_id}' has no HTTP controller metadata",
            metadata={"id": proto_id},
        )


# ============================================================================
# DI Faults
# ============================================================================

class DIFault(Fault):
    """Base class for object resolution faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.DI,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


def _render_qualifiers(qualifiers: Sequence[Any]) -> str:
    return ", ".join(f"{q.attribute}={q.value}" for q in qualifiers)


class PrototypeNotFoundFault(DIFault):
    """No admissible prototype for a name and qualifier request."""

    def __init__(
        self,
        name: str,
        qualifiers: Sequence[Any] = (),
        candidates: Optional[list[str]] = None,
    ):
        message = f"No prototype found for name={name}"
        if qualifiers:
            message += f" (qualifiers: {_render_qualifiers(qualifiers)})"
        if candidates:
            message += f"; rejected candidates: {', '.join(candidates)}"
        super().__init__(
            code="PROTOTYPE_NOT_FOUND",
            message=message,
            metadata={"name": name, "candidates": candidates or []},
        )


class AmbiguousPrototypeFault(DIFault):
    """Several prototypes satisfy a request equally well."""

    def __init__(self, name: str, qualifiers: Sequence[Any], ids: Sequence[str]):
        message = f"Ambiguous prototype for name={name}: {', '.join(ids)}"
        if qualifiers:
            message += f" (qualifiers: {_render_qualifiers(qualifiers)})"
        super().__init__(
            code="AMBIGUOUS_PROTOTYPE",
            message=message,
            metadata={"name": name, "ids": list(ids)},
        )


class DependencyCycleFault(DIFault):
    """Circular injection detected while building an object."""

    def __init__(self, cycle: list[str]):
        super().__init__(
            code="DEPENDENCY_CYCLE",
            message=f"Circular dependency detected: {' -> '.join(cycle)}",
            metadata={"cycle": cycle},
        )


class ScopeViolationFault(DIFault):
    """A longer-lived object requires a shorter-lived one."""

    def __init__(self, consumer: str, consumer_scope: str, provider: str, provider_scope: str):
        super().__init__(
            code="SCOPE_VIOLATION",
            message=(
                f"Scope violation: {provider_scope} object '{provider}' "
                f"injected into {consumer_scope} object '{consumer}'"
            ),
            metadata={
                "consumer": consumer,
                "consumer_scope": consumer_scope,
                "provider": provider,
                "provider_scope": provider_scope,
            },
        )


class ContextRequiredFault(DIFault):
    """A context-scoped object was requested outside of a request."""

    def __init__(self, proto_id: str, name: Optional[str] = None):
        looked_up = f" (looked up as '{name}')" if name else ""
        super().__init__(
            code="CONTEXT_REQUIRED",
            message=(
                f"Prototype '{proto_id}'{looked_up} is context scoped "
                "but no request context was given"
            ),
            metadata={"id": proto_id, "name": name},
        )


# ============================================================================
# ROUTING Faults
# ============================================================================

class RoutingFault(Fault):
    """Base class for routing faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.ROUTING,
            severity=severity,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class RouteConflictFault(RoutingFault):
    """A verb and path pair is registered twice."""

    def __init__(self, method_name: str, verb: str, path: str):
        super().__init__(
            code="ROUTE_CONFLICT",
            message=f"register http controller {method_name} failed, {verb} {path} has registered",
            severity=Severity.FATAL,
            metadata={"method_name": method_name, "verb": verb, "path": path},
        )


class RouterLockedFault(RoutingFault):
    """Route registration attempted after the router was locked."""

    def __init__(self, name: str, path: str):
        super().__init__(
            code="ROUTER_LOCKED",
            message=f"Cannot register route '{name}' ({path}): router is locked",
            severity=Severity.FATAL,
            metadata={"name": name, "path": path},
        )


class InvalidPathTemplateFault(RoutingFault):
    """Path template cannot be compiled."""

    def __init__(self, template: str, reason: str):
        super().__init__(
            code="INVALID_PATH_TEMPLATE",
            message=f"Invalid path template '{template}': {reason}",
            severity=Severity.FATAL,
            metadata={"template": template, "reason": reason},
        )


class RouteNotFoundFault(RoutingFault):
    """No route matches the request path."""

    def __init__(self, method: str, path: str):
        super().__init__(
            code="ROUTE_NOT_FOUND",
            message=f"Not Found: {method} {path}",
            severity=Severity.WARN,
            public=True,
            metadata={"method": method, "path": path},
        )


class MethodNotAllowedFault(RoutingFault):
    """Path matches but the HTTP method does not."""

    def __init__(self, method: str, path: str, allowed_methods: list[str]):
        super().__init__(
            code="METHOD_NOT_ALLOWED",
            message=f"Method {method} not allowed for {path}",
            severity=Severity.WARN,
            public=True,
            metadata={"method": method, "path": path, "allowed_methods": allowed_methods},
        )


# ============================================================================
# FLOW Faults
# ============================================================================

class FlowFault(Fault):
    """Base class for handler execution faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.FLOW,
            severity=severity,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class ParamContractFault(FlowFault):
    """Parameter metadata of an unknown kind reached the dispatcher."""

    def __init__(self, method_name: str, index: int, param: Any):
        super().__init__(
            code="PARAM_CONTRACT_VIOLATION",
            message=(
                f"Unsupported parameter metadata {param!r} at index {index} "
                f"of {method_name}"
            ),
            severity=Severity.FATAL,
            metadata={"method_name": method_name, "index": index},
        )


class InvalidRequestBodyFault(FlowFault):
    """The request body cannot be decoded."""

    def __init__(self, content_type: str, reason: str):
        super().__init__(
            code="INVALID_REQUEST_BODY",
            message=f"Cannot decode {content_type} request body: {reason}",
            severity=Severity.WARN,
            public=True,
            metadata={"content_type": content_type},
        )


class MiddlewareChainFault(FlowFault):
    """A middleware called next() more than once."""

    def __init__(self):
        super().__init__(
            code="NEXT_CALLED_TWICE",
            message="next() called multiple times",
        )


# ============================================================================
# SECURITY Faults
# ============================================================================

class SecurityFault(Fault):
    """Base class for access control faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        public: bool = True,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.SECURITY,
            severity=severity,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class AccessDeniedFault(SecurityFault):
    """The ACL checker refused the request."""

    def __init__(self, acl_code: str, method_name: str):
        super().__init__(
            code="ACCESS_DENIED",
            message=f"Access denied by acl '{acl_code}'",
            metadata={"acl": acl_code, "method_name": method_name},
        )
