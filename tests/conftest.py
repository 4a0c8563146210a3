"""
Shared test fixtures and helpers for the Heron test suite.
"""

import pytest
from typing import Any, Dict, List, Optional, Sequence

from heron.http import (
    ControllerMetadataUtil,
    HTTPContext,
    HTTPControllerMeta,
    HTTPMethodMeta,
    HTTPRequest,
    RootProtoManager,
    Router,
)
from heron.metadata import (
    AccessLevel,
    InitType,
    PrototypeEntry,
    PrototypeRegistry,
    default_proto_name,
)
from heron.runtime import ObjectContainer, ObjectContext


# ============================================================================
# Request Helpers
# ============================================================================

def make_ctx(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    object_context: Optional[ObjectContext] = None,
) -> HTTPContext:
    """Build an HTTPContext for a request."""
    request = HTTPRequest(
        method=method,
        path=path,
        query_string=query_string,
        headers=headers,
        body=body,
    )
    return HTTPContext(request, object_context=object_context)


def make_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
) -> dict:
    """Build a minimal ASGI HTTP scope."""
    raw_headers = [
        (name.encode("latin-1"), value.encode("latin-1"))
        for name, value in headers or ()
    ]
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
    }


def make_receive(body: bytes = b"", *, chunks: Optional[List[bytes]] = None):
    """Create an ASGI receive callable from body bytes or chunked list."""
    if chunks:
        messages = [
            {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
            for i, chunk in enumerate(chunks)
        ]
    else:
        messages = [{"type": "http.request", "body": body, "more_body": False}]

    idx = 0

    async def receive():
        nonlocal idx
        if idx < len(messages):
            msg = messages[idx]
            idx += 1
            return msg
        return {"type": "http.disconnect"}

    return receive


# ============================================================================
# Controller Helpers
# ============================================================================

def make_controller(
    clazz: type,
    path: str = "",
    methods: Sequence[HTTPMethodMeta] = (),
    *,
    load_unit_id: str = "app",
    name: Optional[str] = None,
    middlewares: Sequence[Any] = (),
    acl: Optional[str] = None,
    init_type: InitType = InitType.CONTEXT,
    **kwargs,
) -> PrototypeEntry:
    """Attach controller metadata to ``clazz`` and return its prototype."""
    ControllerMetadataUtil.set_controller_metadata(
        clazz,
        HTTPControllerMeta(
            class_name=clazz.__name__,
            proto_name=name or default_proto_name(clazz),
            path=path,
            methods=list(methods),
            middlewares=list(middlewares),
            acl=acl,
        ),
    )
    return PrototypeEntry.create(
        clazz,
        load_unit_id=load_unit_id,
        name=name,
        init_type=init_type,
        access_level=AccessLevel.PUBLIC,
        **kwargs,
    )


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def registry():
    return PrototypeRegistry()


@pytest.fixture
def container(registry):
    return ObjectContainer(registry)


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def root_protos():
    return RootProtoManager()
