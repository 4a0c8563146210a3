"""
ASGI adapter - bridges the ASGI protocol to Heron's request context.

Handles ``lifespan`` (startup/shutdown) and ``http`` scopes. Faults that
escape request handling are mapped to error responses here; unexpected
exceptions are logged and answered with 500.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING
from urllib.parse import parse_qsl
import json
import logging

from .faults import Fault, FaultDomain, InvalidRequestBodyFault
from .http import HTTPContext, HTTPRequest
from .http.context import EMPTY_STATUSES

if TYPE_CHECKING:
    from .app import Application


_FAULT_STATUS = {
    "ROUTE_NOT_FOUND": 404,
    "METHOD_NOT_ALLOWED": 405,
    "INVALID_REQUEST_BODY": 400,
}


def status_for_fault(fault: Fault) -> int:
    """HTTP status for a fault that escaped request handling."""
    status = _FAULT_STATUS.get(fault.code)
    if status is not None:
        return status
    if fault.domain == FaultDomain.SECURITY:
        return 403
    return 500


def decode_body(raw: bytes, content_type: str) -> Any:
    """Decode a request body according to its content type."""
    if not raw:
        return None
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime == "application/json" or mime.endswith("+json"):
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidRequestBodyFault(mime, str(e)) from e
    if mime == "application/x-www-form-urlencoded":
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidRequestBodyFault(mime, str(e)) from e
        # Repeated fields: last value wins, as for query strings
        return dict(parse_qsl(text, keep_blank_values=True))
    if mime.startswith("text/"):
        return raw.decode("utf-8", errors="replace")
    return raw


def encode_body(body: Any) -> Tuple[bytes, Optional[str]]:
    """Serialize a response body; returns the bytes and a content type."""
    if body is None:
        return b"", None
    if isinstance(body, bytes):
        return body, "application/octet-stream"
    if isinstance(body, str):
        return body.encode("utf-8"), "text/plain; charset=utf-8"
    return json.dumps(body, default=str).encode("utf-8"), "application/json"


class ASGIAdapter:
    """
    ASGI application adapter.

    Converts ASGI events to HTTPContext and writes the response back.
    """

    __slots__ = ("app", "logger")

    def __init__(self, app: "Application"):
        self.app = app
        self.logger = logging.getLogger("heron.asgi")

    async def __call__(self, scope: Dict[str, Any], receive, send) -> None:
        scope_type = scope["type"]
        if scope_type == "lifespan":
            await self._lifespan(receive, send)
        elif scope_type == "http":
            await self._http(scope, receive, send)
        else:
            raise ValueError(f"Unsupported ASGI scope type: {scope_type}")

    async def _lifespan(self, receive, send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self.app.startup()
                except Exception as e:
                    self.logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.app.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _read_body(self, receive) -> bytes:
        chunks: List[bytes] = []
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        return b"".join(chunks)

    async def _http(self, scope: Dict[str, Any], receive, send) -> None:
        headers = {
            name.decode("latin-1"): value.decode("latin-1")
            for name, value in scope.get("headers", [])
        }
        method = scope["method"]
        path = scope["path"]
        raw_body = await self._read_body(receive)

        try:
            body = decode_body(raw_body, headers.get("content-type", ""))
            ctx = HTTPContext(
                HTTPRequest(
                    method=method,
                    path=path,
                    query_string=scope.get("query_string", b"").decode("latin-1"),
                    headers=headers,
                    body=body,
                )
            )
            await self.app.handle(ctx)
            status = ctx.response.status
            payload = ctx.response.body
            extra_headers = ctx.response.headers
        except Fault as fault:
            status = status_for_fault(fault)
            if status >= 500:
                self.logger.error("%s %s failed: %s", method, path, fault)
            else:
                self.logger.info("%s %s -> %d: %s", method, path, status, fault)
            message = fault.message if fault.public else "Internal Server Error"
            payload = {"error": {"code": fault.code, "message": message}}
            extra_headers = {}
        except Exception:
            self.logger.exception("Unhandled error in %s %s", method, path)
            status = 500
            payload = {"error": {"code": "INTERNAL_ERROR", "message": "Internal Server Error"}}
            extra_headers = {}

        content, content_type = encode_body(payload)
        content_length = len(content)
        if status in EMPTY_STATUSES:
            content = b""
            content_length = 0
        elif method == "HEAD":
            content = b""

        response_headers = [(k.lower().encode("latin-1"), str(v).encode("latin-1")) for k, v in extra_headers.items()]
        if content_type and "content-type" not in {k.lower() for k in extra_headers}:
            response_headers.append((b"content-type", content_type.encode("latin-1")))
        response_headers.append((b"content-length", str(content_length).encode("latin-1")))

        await send({"type": "http.response.start", "status": status, "headers": response_headers})
        await send({"type": "http.response.body", "body": content})
