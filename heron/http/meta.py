"""
HTTP controller metadata.

Declarative descriptors of controllers, their methods and the binding of
request data to method arguments. Parameter bindings form a closed set of
variants; the dispatcher rejects anything else.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from ..metadata import MetadataUtil


CONTROLLER_META_KEY = "heron:http_controller"


class HTTPMethodType(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class HTTPParamType(str, Enum):
    BODY = "body"        # Whole parsed request body
    PARAM = "param"      # Named path variable
    QUERY = "query"      # Single query value
    QUERIES = "queries"  # All values of a query key


@dataclass(frozen=True)
class BodyParamMeta:
    type: ClassVar[HTTPParamType] = HTTPParamType.BODY


@dataclass(frozen=True)
class PathParamMeta:
    name: str
    type: ClassVar[HTTPParamType] = HTTPParamType.PARAM


@dataclass(frozen=True)
class QueryParamMeta:
    name: str
    type: ClassVar[HTTPParamType] = HTTPParamType.QUERY


@dataclass(frozen=True)
class QueriesParamMeta:
    name: str
    type: ClassVar[HTTPParamType] = HTTPParamType.QUERIES


ParamMeta = Union[BodyParamMeta, PathParamMeta, QueryParamMeta, QueriesParamMeta]


@dataclass
class HTTPMethodMeta:
    """
    Metadata for one controller method.

    Attributes:
        name: Python method name on the controller
        method: HTTP verb
        path: Method path fragment, joined to the controller prefix
        param_map: Argument index -> parameter binding
        context_param_index: Argument index receiving the HTTPContext, if any
        middlewares: Method-level middlewares
        acl: ACL code guarding this method (overrides the controller's)
    """
    name: str
    method: HTTPMethodType
    path: str
    param_map: Dict[int, ParamMeta] = field(default_factory=dict)
    context_param_index: Optional[int] = None
    middlewares: List[Any] = field(default_factory=list)
    acl: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.method, HTTPMethodType):
            self.method = HTTPMethodType(self.method.upper())


def join_path(prefix: str, path: str) -> str:
    """Join a controller prefix and a method path into one absolute path."""
    joined = "/".join(part.strip("/") for part in (prefix, path) if part and part.strip("/"))
    return "/" + joined


@dataclass
class HTTPControllerMeta:
    """
    Metadata for one HTTP controller.

    Attributes:
        class_name: Controller class name, used in route names
        proto_name: Name of the prototype that builds the controller
        path: Path prefix shared by all methods
        methods: Method metadata
        middlewares: Controller-level middlewares, run before method-level ones
        acl: ACL code guarding every method without its own
    """
    class_name: str
    proto_name: str
    path: str = ""
    methods: List[HTTPMethodMeta] = field(default_factory=list)
    middlewares: List[Any] = field(default_factory=list)
    acl: Optional[str] = None

    def get_method_real_path(self, method: HTTPMethodMeta) -> str:
        return join_path(self.path, method.path)

    def get_method_name(self, method: HTTPMethodMeta) -> str:
        return f"{self.class_name}.{method.name}"

    def get_method_middlewares(self, method: HTTPMethodMeta) -> List[Any]:
        """Controller then method middlewares, as a fresh list."""
        return [*self.middlewares, *method.middlewares]


class ControllerMetadataUtil:
    """Attach and read HTTPControllerMeta on controller classes."""

    @staticmethod
    def set_controller_metadata(clazz: type, meta: HTTPControllerMeta) -> None:
        MetadataUtil.define_metadata(CONTROLLER_META_KEY, meta, clazz)

    @staticmethod
    def get_controller_metadata(clazz: type) -> Optional[HTTPControllerMeta]:
        return MetadataUtil.get_metadata(CONTROLLER_META_KEY, clazz)
