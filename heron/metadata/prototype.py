"""
Prototype entries - immutable descriptions of constructible objects.

A prototype is the registered, not-yet-instantiated definition of a
server-side object: how to build it, under which name it is found, which
qualifiers disambiguate it and which objects must be injected into it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Hashable, Optional, Sequence, Tuple
import inspect

from .qualifier import QualifierInfo, matches_all, matches_one
from .util import MetadataUtil


class InitType(str, Enum):
    """Object lifetime strategies, interpreted by the object container."""

    SINGLETON = "singleton"    # One instance per container
    CONTEXT = "context"        # One instance per request context
    ALWAYS_NEW = "always_new"  # New instance on every lookup


class AccessLevel(str, Enum):
    """Visibility of a prototype outside its load unit."""

    PUBLIC = "public"
    PRIVATE = "private"


@dataclass(frozen=True, slots=True)
class InjectObject:
    """
    One dependency a prototype requires.

    Attributes:
        ref_name: Attribute name the resolved object is assigned to
        obj_name: Prototype name to look up
        qualifiers: Qualifiers the resolved prototype must declare
    """
    ref_name: str
    obj_name: str
    qualifiers: Tuple[QualifierInfo, ...] = ()


def default_proto_name(clazz: type) -> str:
    """``UserService`` -> ``userService``."""
    name = clazz.__name__
    return name[:1].lower() + name[1:]


@dataclass(frozen=True, slots=True)
class PrototypeEntry:
    """
    Immutable description of one constructible object definition.

    Attributes:
        id: Globally unique identifier
        name: Logical lookup name (shared names are disambiguated by qualifiers)
        clazz: Zero-argument constructor
        filepath: Origin path, diagnostics only
        init_type: Lifetime strategy
        access_level: Visibility outside the load unit
        inject_objects: Ordered dependencies
        load_unit_id: Owning load unit
        qualifiers: Qualifiers declared on this definition
    """
    id: str
    name: str
    clazz: Callable[[], Any]
    filepath: str
    init_type: InitType
    access_level: AccessLevel
    inject_objects: Tuple[InjectObject, ...]
    load_unit_id: str
    qualifiers: Tuple[QualifierInfo, ...] = field(default_factory=tuple)

    @classmethod
    def create(
        cls,
        clazz: type,
        *,
        load_unit_id: str,
        name: Optional[str] = None,
        init_type: InitType = InitType.CONTEXT,
        access_level: AccessLevel = AccessLevel.PRIVATE,
        inject_objects: Sequence[InjectObject] = (),
        qualifiers: Sequence[QualifierInfo] = (),
        proto_id: Optional[str] = None,
    ) -> "PrototypeEntry":
        """Build an entry for a class, deriving name, filepath and id."""
        try:
            filepath = inspect.getsourcefile(clazz) or clazz.__module__
        except (TypeError, OSError):
            filepath = clazz.__module__

        return cls(
            id=proto_id or f"{load_unit_id}:{clazz.__module__}.{clazz.__qualname__}",
            name=name or default_proto_name(clazz),
            clazz=clazz,
            filepath=filepath,
            init_type=InitType(init_type),
            access_level=AccessLevel(access_level),
            inject_objects=tuple(inject_objects),
            load_unit_id=load_unit_id,
            qualifiers=tuple(qualifiers),
        )

    def verify_qualifiers(self, qualifiers: Sequence[QualifierInfo]) -> bool:
        return matches_all(self.qualifiers, qualifiers)

    def verify_qualifier(self, qualifier: QualifierInfo) -> bool:
        return matches_one(self.qualifiers, qualifier.attribute, qualifier.value)

    def construct_object(self) -> Any:
        """Build a bare instance; injection happens in the container."""
        return self.clazz()

    def get_metadata(self, key: Hashable) -> Optional[Any]:
        """Read metadata attached to the prototype's class, or None."""
        if not isinstance(self.clazz, type):
            return None
        return MetadataUtil.get_metadata(key, self.clazz)

    def __repr__(self) -> str:
        return f"PrototypeEntry(id={self.id!r}, name={self.name!r})"
