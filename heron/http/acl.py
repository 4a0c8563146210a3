"""
Access-control middleware factory.

A method's ACL code overrides its controller's. The produced middleware
asks the context's ``acl_checker`` and refuses the request unless the
checker approves; a missing checker refuses too.
"""

from typing import Optional
import inspect
import logging

from .context import HTTPContext
from .meta import HTTPControllerMeta, HTTPMethodMeta
from .middleware import Middleware, Next
from ..faults import AccessDeniedFault


logger = logging.getLogger("heron.http.acl")


def acl_middleware_factory(
    controller_meta: HTTPControllerMeta,
    method_meta: HTTPMethodMeta,
) -> Optional[Middleware]:
    """Build the ACL middleware for a controller method, or None without a policy."""
    code = method_meta.acl or controller_meta.acl
    if not code:
        return None
    method_name = controller_meta.get_method_name(method_meta)

    async def acl_middleware(ctx: HTTPContext, next: Next) -> None:
        checker = ctx.acl_checker
        allowed = False
        if checker is not None:
            allowed = checker(ctx, code)
            if inspect.isawaitable(allowed):
                allowed = await allowed
        if not allowed:
            logger.info("ACL %s refused %s %s (%s)", code, ctx.method, ctx.path, method_name)
            raise AccessDeniedFault(code, method_name)
        await next()

    acl_middleware.__name__ = f"acl[{code}]"
    return acl_middleware
