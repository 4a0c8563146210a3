"""
Prototype metadata model: qualifiers, prototype entries, the metadata
side table and the prototype registry.
"""

from .qualifier import (
    QualifierInfo,
    find_qualifier,
    matches_one,
    matches_all,
)

from .prototype import (
    InitType,
    AccessLevel,
    InjectObject,
    PrototypeEntry,
    default_proto_name,
)

from .util import MetadataUtil

from .registry import (
    LoadUnit,
    PrototypeRegistry,
)

__all__ = [
    "QualifierInfo",
    "find_qualifier",
    "matches_one",
    "matches_all",
    "InitType",
    "AccessLevel",
    "InjectObject",
    "PrototypeEntry",
    "default_proto_name",
    "MetadataUtil",
    "LoadUnit",
    "PrototypeRegistry",
]
