"""
Object container: lifetimes, injection, lifecycle hooks and resolution faults.
"""

import asyncio
import pytest

from heron.faults import (
    ContextRequiredFault,
    DependencyCycleFault,
    PrototypeNotFoundFault,
    ScopeViolationFault,
)
from heron.metadata import AccessLevel, InitType, InjectObject, PrototypeEntry, QualifierInfo
from heron.runtime import ObjectContext


def register(registry, clazz, init_type=InitType.SINGLETON, **kwargs):
    kwargs.setdefault("access_level", AccessLevel.PUBLIC)
    proto = PrototypeEntry.create(clazz, load_unit_id="app", init_type=init_type, **kwargs)
    registry.register(proto)
    return proto


# ============================================================================
# Lifetimes
# ============================================================================

class TestLifetimes:

    @pytest.mark.asyncio
    async def test_singleton_shared(self, registry, container):
        class Cache:
            pass

        proto = register(registry, Cache)
        first = await container.get_object(proto)
        second = await container.get_object(proto)
        assert first.obj is second.obj
        assert first.name == "cache"

    @pytest.mark.asyncio
    async def test_concurrent_singleton_lookups_build_once(self, registry, container):
        built = []

        class Slow:
            async def async_init(self):
                built.append(self)
                await asyncio.sleep(0)

        proto = register(registry, Slow)
        handles = await asyncio.gather(*(container.get_object(proto) for _ in range(5)))
        assert len(built) == 1
        assert all(h.obj is handles[0].obj for h in handles)

    @pytest.mark.asyncio
    async def test_context_object_per_request(self, registry, container):
        class RequestState:
            pass

        proto = register(registry, RequestState, InitType.CONTEXT)
        ctx_a = ObjectContext()
        ctx_b = ObjectContext()
        a1 = await container.get_object(proto, ctx=ctx_a)
        a2 = await container.get_object(proto, ctx=ctx_a)
        b1 = await container.get_object(proto, ctx=ctx_b)
        assert a1.obj is a2.obj
        assert a1.obj is not b1.obj

    @pytest.mark.asyncio
    async def test_context_object_requires_context(self, registry, container):
        class RequestState:
            pass

        proto = register(registry, RequestState, InitType.CONTEXT)
        with pytest.raises(ContextRequiredFault):
            await container.get_object(proto)

    @pytest.mark.asyncio
    async def test_context_fault_reports_lookup_name(self, registry, container):
        class RequestState:
            pass

        class Builder:
            pass

        proto = register(registry, RequestState, InitType.CONTEXT, name="state")
        builder = register(
            registry, Builder, InitType.ALWAYS_NEW, inject_objects=[InjectObject("state", "state")],
        )
        with pytest.raises(ContextRequiredFault) as exc_info:
            await container.get_object(proto, "currentState")
        assert exc_info.value.metadata["name"] == "currentState"
        assert "looked up as 'currentState'" in str(exc_info.value)

        with pytest.raises(ContextRequiredFault) as exc_info:
            await container.get_object(builder)
        assert exc_info.value.metadata == {"id": proto.id, "name": "state"}

    @pytest.mark.asyncio
    async def test_always_new(self, registry, container):
        class Builder:
            pass

        proto = register(registry, Builder, InitType.ALWAYS_NEW)
        first = await container.get_object(proto)
        second = await container.get_object(proto)
        assert first.obj is not second.obj


# ============================================================================
# Injection
# ============================================================================

class TestInjection:

    @pytest.mark.asyncio
    async def test_inject_dependency(self, registry, container):
        class Repo:
            pass

        class Service:
            pass

        register(registry, Repo)
        service = register(registry, Service, inject_objects=[InjectObject("repo", "repo")])
        handle = await container.get_object(service)
        assert isinstance(handle.obj.repo, Repo)

    @pytest.mark.asyncio
    async def test_inject_by_qualifier(self, registry, container):
        class PgStore:
            pass

        class MemStore:
            pass

        class Service:
            pass

        register(registry, PgStore, name="store", qualifiers=[QualifierInfo("kind", "pg")])
        register(registry, MemStore, name="store", qualifiers=[QualifierInfo("kind", "mem")])
        service = register(
            registry,
            Service,
            inject_objects=[InjectObject("store", "store", (QualifierInfo("kind", "mem"),))],
        )
        handle = await container.get_object(service)
        assert isinstance(handle.obj.store, MemStore)

    @pytest.mark.asyncio
    async def test_missing_dependency(self, registry, container):
        class Service:
            pass

        service = register(registry, Service, inject_objects=[InjectObject("repo", "repo")])
        with pytest.raises(PrototypeNotFoundFault):
            await container.get_object(service)

    @pytest.mark.asyncio
    async def test_context_object_shares_singleton(self, registry, container):
        class Config:
            pass

        class Handler:
            pass

        config = register(registry, Config)
        handler = register(
            registry, Handler, InitType.CONTEXT, inject_objects=[InjectObject("config", "config")],
        )
        singleton = await container.get_object(config)
        handle = await container.get_object(handler, ctx=ObjectContext())
        assert handle.obj.config is singleton.obj

    @pytest.mark.asyncio
    async def test_cycle_detected(self, registry, container):
        class A:
            pass

        class B:
            pass

        a = register(registry, A, inject_objects=[InjectObject("b", "b")])
        register(registry, B, inject_objects=[InjectObject("a", "a")])
        with pytest.raises(DependencyCycleFault) as exc_info:
            await container.get_object(a)
        assert exc_info.value.metadata["cycle"][0] == exc_info.value.metadata["cycle"][-1]

    @pytest.mark.asyncio
    async def test_singleton_cannot_depend_on_context_object(self, registry, container):
        class RequestState:
            pass

        class Cache:
            pass

        register(registry, RequestState, InitType.CONTEXT)
        cache = register(registry, Cache, inject_objects=[InjectObject("state", "requestState")])
        with pytest.raises(ScopeViolationFault):
            await container.get_object(cache)

    @pytest.mark.asyncio
    async def test_failed_singleton_is_retried(self, registry, container):
        attempts = []

        class Flaky:
            def async_init(self):
                attempts.append(1)
                if len(attempts) == 1:
                    raise RuntimeError("boom")

        proto = register(registry, Flaky)
        with pytest.raises(RuntimeError):
            await container.get_object(proto)
        handle = await container.get_object(proto)
        assert isinstance(handle.obj, Flaky)
        assert len(attempts) == 2


# ============================================================================
# Lifecycle Hooks
# ============================================================================

class TestLifecycle:

    @pytest.mark.asyncio
    async def test_async_init_runs_after_injection(self, registry, container):
        class Repo:
            pass

        class Service:
            async def async_init(self):
                self.ready = isinstance(self.repo, Repo)

        register(registry, Repo)
        service = register(registry, Service, inject_objects=[InjectObject("repo", "repo")])
        handle = await container.get_object(service)
        assert handle.obj.ready is True

    @pytest.mark.asyncio
    async def test_singleton_shutdown_reverse_order(self, registry, container):
        order = []

        class First:
            def shutdown(self):
                order.append("first")

        class Second:
            async def shutdown(self):
                order.append("second")

        await container.get_object(register(registry, First))
        await container.get_object(register(registry, Second))
        await container.shutdown()
        assert order == ["second", "first"]

    @pytest.mark.asyncio
    async def test_context_close_runs_shutdown(self, registry, container):
        closed = []

        class Session:
            def shutdown(self):
                closed.append(self)

        proto = register(registry, Session, InitType.CONTEXT)
        ctx = ObjectContext()
        handle = await container.get_object(proto, ctx=ctx)
        await ctx.close()
        assert closed == [handle.obj]
        assert ctx.closed is True
        assert proto.id not in ctx

    @pytest.mark.asyncio
    async def test_context_close_reraises_first_error(self, registry, container):
        class Broken:
            def shutdown(self):
                raise ValueError("close failed")

        proto = register(registry, Broken, InitType.CONTEXT)
        ctx = ObjectContext()
        await container.get_object(proto, ctx=ctx)
        with pytest.raises(ValueError):
            await ctx.close()
