"""
Controller registration - installs every method of a controller prototype.
"""

from typing import Optional
import logging

from .meta import CONTROLLER_META_KEY, HTTPControllerMeta
from .registrar import AclFactory, HTTPMethodRegister
from .acl import acl_middleware_factory
from .root_proto import RootProtoManager
from .router import Router
from ..faults import ControllerMetadataMissingFault
from ..metadata import PrototypeEntry
from ..runtime import ObjectContainer


logger = logging.getLogger("heron.http.controller")


def is_controller(proto: PrototypeEntry) -> bool:
    return proto.get_metadata(CONTROLLER_META_KEY) is not None


class HTTPControllerRegister:
    """Registers all methods of one controller prototype."""

    def __init__(
        self,
        proto: PrototypeEntry,
        router: Router,
        container: ObjectContainer,
        acl_factory: AclFactory = acl_middleware_factory,
    ):
        self.proto = proto
        self.router = router
        self.container = container
        self.acl_factory = acl_factory

    @property
    def controller_meta(self) -> Optional[HTTPControllerMeta]:
        return self.proto.get_metadata(CONTROLLER_META_KEY)

    def register(self, root_proto_manager: RootProtoManager) -> int:
        """Register every method; returns the number of routes installed."""
        controller_meta = self.controller_meta
        if controller_meta is None:
            raise ControllerMetadataMissingFault(self.proto.id)

        for method_meta in controller_meta.methods:
            HTTPMethodRegister(
                self.proto,
                controller_meta,
                method_meta,
                self.router,
                self.container,
                acl_factory=self.acl_factory,
            ).register(root_proto_manager)

        logger.debug(
            "Controller %s registered %d routes", controller_meta.class_name, len(controller_meta.methods),
        )
        return len(controller_meta.methods)
