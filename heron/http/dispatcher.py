"""
Method dispatcher - builds the request handler of one controller method.

Per request the handler:
1. resolves the controller object through the container, scoped to the
   request's object context
2. assembles the argument list from the method's parameter bindings
3. invokes the method (sync or async)
4. writes the return value as the response body, unless the method
   returned nothing after explicitly setting a status

Resolution and invocation failures propagate unchanged.
"""

from typing import Any, List, Optional
import inspect

from .context import HTTPContext
from .meta import (
    BodyParamMeta,
    HTTPControllerMeta,
    HTTPMethodMeta,
    PathParamMeta,
    QueriesParamMeta,
    QueryParamMeta,
)
from .middleware import Handler, Next
from ..faults import ParamContractFault
from ..metadata import PrototypeEntry
from ..runtime import ObjectContainer


class MethodDispatcher:
    """Turns one controller method's metadata into a request handler."""

    def __init__(
        self,
        proto: PrototypeEntry,
        controller_meta: HTTPControllerMeta,
        method_meta: HTTPMethodMeta,
        container: ObjectContainer,
    ):
        self.proto = proto
        self.controller_meta = controller_meta
        self.method_meta = method_meta
        self.container = container
        self.method_name = controller_meta.get_method_name(method_meta)

    def build_args(self, ctx: HTTPContext) -> List[Any]:
        """Assemble call arguments; positions follow the declared indexes."""
        method_meta = self.method_meta
        context_index = method_meta.context_param_index
        args_length = len(method_meta.param_map) + (1 if context_index is not None else 0)
        args: List[Any] = [None] * args_length

        if context_index is not None:
            args[context_index] = ctx

        for index, param in method_meta.param_map.items():
            if isinstance(param, BodyParamMeta):
                args[index] = ctx.request.body
            elif isinstance(param, PathParamMeta):
                args[index] = ctx.params.get(param.name)
            elif isinstance(param, QueryParamMeta):
                args[index] = ctx.query.get(param.name)
            elif isinstance(param, QueriesParamMeta):
                values = ctx.queries.get(param.name)
                args[index] = list(values) if values is not None else None
            else:
                raise ParamContractFault(self.method_name, index, param)

        return args

    def create_handler(self) -> Handler:
        dispatcher = self
        proto = self.proto
        handler_name = self.method_meta.name

        async def handler(ctx: HTTPContext, next: Optional[Next] = None) -> None:
            handle = await dispatcher.container.get_object(proto, proto.name, ctx.object_context)
            real_method = getattr(handle.obj, handler_name)
            args = dispatcher.build_args(ctx)

            body = real_method(*args)
            if inspect.isawaitable(body):
                body = await body

            # A method that set a status itself and returned nothing keeps
            # its response untouched.
            if body is not None or not ctx.response.explicit_status:
                ctx.response.body = body

        handler.__name__ = self.method_name
        return handler
