"""
HTTP request context.

HTTPRequest carries the parsed inbound request, HTTPResponse collects the
outbound status and body, and HTTPContext ties both to the per-request
object scope and the path variables filled in by the router.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import parse_qsl

from ..runtime import ObjectContext


# Statuses that never carry a body
EMPTY_STATUSES = frozenset((204, 205, 304))

AclChecker = Callable[["HTTPContext", str], Union[bool, Awaitable[bool]]]


class HTTPRequest:
    """
    Inbound HTTP request.

    Duplicate query keys: ``query`` keeps the last value, ``queries``
    keeps every value in order.
    """

    __slots__ = ("method", "path", "query_string", "headers", "body", "_queries")

    def __init__(
        self,
        method: str,
        path: str,
        query_string: str = "",
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
    ):
        self.method = method.upper()
        self.path = path
        self.query_string = query_string
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.body = body
        self._queries: Optional[Dict[str, List[str]]] = None

    @property
    def queries(self) -> Dict[str, List[str]]:
        """All values per query key, in order of appearance."""
        if self._queries is None:
            parsed: Dict[str, List[str]] = {}
            for key, value in parse_qsl(self.query_string, keep_blank_values=True):
                parsed.setdefault(key, []).append(value)
            self._queries = parsed
        return self._queries

    @property
    def query(self) -> Dict[str, str]:
        """Single value per query key; the last occurrence wins."""
        return {key: values[-1] for key, values in self.queries.items()}

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)


class HTTPResponse:
    """
    Outbound HTTP response.

    ``explicit_status`` records whether application code assigned a status.
    Assigning a body derives the status unless one was set explicitly:
    ``None`` means 204, anything else 200.
    """

    __slots__ = ("_status", "_body", "explicit_status", "headers")

    def __init__(self):
        self._status = 404
        self._body: Any = None
        self.explicit_status = False
        self.headers: Dict[str, str] = {}

    @property
    def status(self) -> int:
        return self._status

    @status.setter
    def status(self, code: int) -> None:
        self._status = int(code)
        self.explicit_status = True

    @property
    def body(self) -> Any:
        return self._body

    @body.setter
    def body(self, value: Any) -> None:
        self._body = value
        if value is None:
            if self._status not in EMPTY_STATUSES:
                self.status = 204
            return
        if not self.explicit_status:
            self.status = 200


class HTTPContext:
    """
    Per-request context handed to middleware and handlers.

    Attributes:
        request: The inbound request
        response: The outbound response
        object_context: Scope of context objects for this request
        params: Path variables of the matched route
        state: Free-form per-request state
        acl_checker: Callable deciding ACL codes, consulted by ACL middleware
    """

    __slots__ = ("request", "response", "object_context", "params", "state", "acl_checker")

    def __init__(
        self,
        request: HTTPRequest,
        response: Optional[HTTPResponse] = None,
        object_context: Optional[ObjectContext] = None,
        acl_checker: Optional[AclChecker] = None,
    ):
        self.request = request
        self.response = response or HTTPResponse()
        self.object_context = object_context
        self.params: Dict[str, str] = {}
        self.state: Dict[str, Any] = {}
        self.acl_checker = acl_checker

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def query(self) -> Dict[str, str]:
        return self.request.query

    @property
    def queries(self) -> Dict[str, List[str]]:
        return self.request.queries

    @property
    def status(self) -> int:
        return self.response.status

    @status.setter
    def status(self, code: int) -> None:
        self.response.status = code

    @property
    def body(self) -> Any:
        return self.response.body

    @body.setter
    def body(self, value: Any) -> None:
        self.response.body = value

    def __repr__(self) -> str:
        return f"HTTPContext({self.method} {self.path})"
