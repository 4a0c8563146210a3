"""
Metadata side table.

Each class owns a keyed bag of metadata, attached by whatever declares it
(controller metadata, route descriptors, ...). The bag lives in the class's
own ``__dict__`` so that defining metadata on a subclass never touches the
parent's bag.
"""

from typing import Any, Dict, Hashable, Optional


_BAG_ATTR = "__heron_metadata__"


class MetadataUtil:
    """Read and write per-class metadata."""

    @staticmethod
    def _own_bag(clazz: type) -> Optional[Dict[Hashable, Any]]:
        return clazz.__dict__.get(_BAG_ATTR)

    @classmethod
    def define_metadata(cls, key: Hashable, value: Any, clazz: type) -> None:
        bag = cls._own_bag(clazz)
        if bag is None:
            bag = {}
            setattr(clazz, _BAG_ATTR, bag)
        bag[key] = value

    @classmethod
    def get_own_metadata(cls, key: Hashable, clazz: type) -> Optional[Any]:
        bag = cls._own_bag(clazz)
        if bag is None:
            return None
        return bag.get(key)

    @classmethod
    def get_metadata(cls, key: Hashable, clazz: type) -> Optional[Any]:
        """Look up ``key`` on ``clazz`` and then on its bases, in MRO order."""
        for klass in clazz.__mro__:
            bag = klass.__dict__.get(_BAG_ATTR)
            if bag is not None and key in bag:
                return bag[key]
        return None

    @classmethod
    def has_metadata(cls, key: Hashable, clazz: type) -> bool:
        return any(
            key in klass.__dict__.get(_BAG_ATTR, ())
            for klass in clazz.__mro__
        )
