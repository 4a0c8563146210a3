"""
Root prototype lookup.

Answers "which controller prototype owns this inbound request" without
running the router: each registered route contributes a lookup function
for its verb.
"""

from typing import Callable, Dict, List, Optional

from .context import HTTPContext
from ..metadata import PrototypeEntry


RootProtoLookup = Callable[[HTTPContext], Optional[PrototypeEntry]]


class RootProtoManager:
    """Per-verb lookup functions from request context to owning prototype."""

    def __init__(self):
        self._lookups: Dict[str, List[RootProtoLookup]] = {}

    def register_root_proto(self, method: str, lookup: RootProtoLookup) -> None:
        self._lookups.setdefault(method.upper(), []).append(lookup)

    def get_root_proto(self, ctx: HTTPContext) -> Optional[PrototypeEntry]:
        for lookup in self._lookups.get(ctx.method, ()):
            proto = lookup(ctx)
            if proto is not None:
                return proto
        return None
