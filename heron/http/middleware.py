"""
Middleware chain composition.

A middleware is ``async (ctx, next) -> None``; it runs code before and
after ``await next()``. The last element of a route stack is the request
handler, which never calls ``next``.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Sequence, TYPE_CHECKING

from ..faults import MiddlewareChainFault

if TYPE_CHECKING:
    from .context import HTTPContext

Next = Callable[[], Awaitable[None]]
Middleware = Callable[["HTTPContext", Next], Awaitable[None]]
Handler = Callable[["HTTPContext", Optional[Next]], Awaitable[None]]


def compose(middlewares: Sequence[Middleware]) -> Callable[["HTTPContext"], Awaitable[None]]:
    """Compose ``middlewares`` into one callable; the first is outermost."""
    stack = list(middlewares)

    async def run(ctx: HTTPContext) -> None:
        last_called = -1

        async def dispatch(i: int) -> None:
            nonlocal last_called
            if i <= last_called:
                raise MiddlewareChainFault()
            last_called = i
            if i == len(stack):
                return
            await stack[i](ctx, lambda: dispatch(i + 1))

        await dispatch(0)

    return run
