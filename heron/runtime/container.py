"""
Object container - turns prototypes into live, injected instances.

Lifetimes follow ``PrototypeEntry.init_type``:
- singleton: built once per container; concurrent first lookups share one
  construction task
- context: built once per ObjectContext (request)
- always_new: built on every lookup

Construction is ``construct_object()`` followed by attribute injection of
every ``InjectObject`` and an optional ``async_init()`` hook.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import asyncio
import logging

from .context import ObjectContext, call_hook
from ..faults import ContextRequiredFault, DependencyCycleFault, ScopeViolationFault
from ..metadata import InitType, PrototypeEntry, PrototypeRegistry


logger = logging.getLogger("heron.runtime.container")


@dataclass(frozen=True)
class ObjectHandle:
    """A live object together with the prototype it was built from."""
    proto: PrototypeEntry
    obj: Any

    @property
    def name(self) -> str:
        return self.proto.name


class ObjectContainer:
    """
    Resolves prototypes into objects.

    Owns singleton instances; context instances are owned by the
    ObjectContext passed in at lookup time.
    """

    __slots__ = ("registry", "_singletons", "_pending", "_order")

    def __init__(self, registry: PrototypeRegistry):
        self.registry = registry
        self._singletons: Dict[str, ObjectHandle] = {}
        self._pending: Dict[str, "asyncio.Future[ObjectHandle]"] = {}
        self._order: List[str] = []

    async def get_object(
        self,
        proto: PrototypeEntry,
        name: Optional[str] = None,
        ctx: Optional[ObjectContext] = None,
    ) -> ObjectHandle:
        """
        Get the live object for ``proto``.

        Args:
            proto: Prototype to materialise
            name: Name the object was looked up by (defaults to ``proto.name``);
                reported in logs and faults
            ctx: Request scope; required for context prototypes

        Raises:
            ContextRequiredFault: Context prototype without a request scope
            PrototypeNotFoundFault: An injected dependency cannot be resolved
            DependencyCycleFault: Injection graph has a cycle
        """
        lookup_name = name or proto.name
        logger.debug("Getting %s as %r", proto.id, lookup_name)
        return await self._get(proto, ctx, (), lookup_name)

    async def _get(
        self,
        proto: PrototypeEntry,
        ctx: Optional[ObjectContext],
        stack: Tuple[str, ...],
        name: Optional[str] = None,
    ) -> ObjectHandle:
        # Fast path: cached singleton
        handle = self._singletons.get(proto.id)
        if handle is not None:
            return handle

        if proto.id in stack:
            raise DependencyCycleFault([*stack, proto.id])

        if proto.init_type == InitType.SINGLETON:
            return await self._get_singleton(proto, stack)

        if proto.init_type == InitType.CONTEXT:
            if ctx is None:
                raise ContextRequiredFault(proto.id, name=name or proto.name)
            if proto.id in ctx:
                return ObjectHandle(proto, ctx.get(proto.id))
            obj = await self._build(proto, ctx, stack)
            ctx.add(proto.id, obj)
            return ObjectHandle(proto, obj)

        return ObjectHandle(proto, await self._build(proto, ctx, stack))

    async def _get_singleton(self, proto: PrototypeEntry, stack: Tuple[str, ...]) -> ObjectHandle:
        pending = self._pending.get(proto.id)
        if pending is not None:
            return await pending

        future: "asyncio.Future[ObjectHandle]" = asyncio.get_running_loop().create_future()
        self._pending[proto.id] = future
        try:
            obj = await self._build(proto, None, stack)
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unawaited future does not log a warning
            future.exception()
            raise
        else:
            handle = ObjectHandle(proto, obj)
            self._singletons[proto.id] = handle
            self._order.append(proto.id)
            future.set_result(handle)
            return handle
        finally:
            if not future.done():
                future.cancel()
            self._pending.pop(proto.id, None)

    async def _build(
        self,
        proto: PrototypeEntry,
        ctx: Optional[ObjectContext],
        stack: Tuple[str, ...],
    ) -> Any:
        stack = (*stack, proto.id)
        obj = proto.construct_object()

        for inject in proto.inject_objects:
            dep = self.registry.resolve(inject.obj_name, inject.qualifiers, proto.load_unit_id)
            if proto.init_type == InitType.SINGLETON and dep.init_type == InitType.CONTEXT:
                raise ScopeViolationFault(
                    proto.id, proto.init_type.value, dep.id, dep.init_type.value,
                )
            dep_handle = await self._get(dep, ctx, stack, inject.obj_name)
            setattr(obj, inject.ref_name, dep_handle.obj)

        async_init = getattr(obj, "async_init", None)
        if async_init is not None:
            await call_hook(async_init)

        logger.debug("Constructed %s (%s)", proto.id, proto.init_type.value)
        return obj

    async def shutdown(self) -> None:
        """Run singleton ``shutdown`` hooks in reverse creation order."""
        for proto_id in reversed(self._order):
            obj = self._singletons[proto_id].obj
            shutdown = getattr(obj, "shutdown", None)
            if shutdown is None:
                continue
            try:
                await call_hook(shutdown)
            except Exception as e:
                logger.error("Error shutting down %s: %s", proto_id, e, exc_info=True)
        self._singletons.clear()
        self._order.clear()
