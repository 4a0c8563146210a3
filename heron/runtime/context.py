"""
Per-request object scope.

Context-scoped objects live exactly as long as one request: they are
created on first lookup, shared for the rest of the request and shut
down, newest first, when the context closes.
"""

from typing import Any, Callable, Dict, List
import inspect
import logging


logger = logging.getLogger("heron.runtime.context")


async def call_hook(hook: Callable[[], Any]) -> None:
    """Run a sync or async lifecycle hook."""
    result = hook()
    if inspect.isawaitable(result):
        await result


class ObjectContext:
    """Holds the context-scoped objects of one request."""

    __slots__ = ("_objects", "_order", "_closed")

    def __init__(self):
        self._objects: Dict[str, Any] = {}
        self._order: List[str] = []
        self._closed = False

    def get(self, proto_id: str) -> Any:
        return self._objects.get(proto_id)

    def __contains__(self, proto_id: str) -> bool:
        return proto_id in self._objects

    def add(self, proto_id: str, obj: Any) -> None:
        self._objects[proto_id] = obj
        self._order.append(proto_id)

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Shut down context objects in reverse creation order."""
        if self._closed:
            return
        self._closed = True
        errors = []
        for proto_id in reversed(self._order):
            shutdown = getattr(self._objects[proto_id], "shutdown", None)
            if shutdown is None:
                continue
            try:
                await call_hook(shutdown)
            except Exception as e:
                logger.error("Error shutting down context object %s: %s", proto_id, e, exc_info=True)
                errors.append(e)
        self._objects.clear()
        self._order.clear()
        if errors:
            raise errors[0]
