"""
Prototype registry.

Write-once at startup, read-many at request time. Registration enforces
id uniqueness and rejects two definitions sharing a name and an identical
qualifier set; lookup filters candidates by qualifiers and visibility.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence
import logging

from .prototype import AccessLevel, PrototypeEntry
from .qualifier import QualifierInfo
from ..faults import (
    AmbiguousPrototypeFault,
    AmbiguousRegistrationFault,
    DuplicatePrototypeFault,
    PrototypeNotFoundFault,
    RegistryFrozenFault,
)


logger = logging.getLogger("heron.metadata.registry")


@dataclass
class LoadUnit:
    """
    A module-like group of prototypes.

    Attributes:
        id: Unique load unit id, referenced by ``PrototypeEntry.load_unit_id``
        name: Display name
        path: Origin directory or package, diagnostics only
        prototypes: Prototypes owned by this unit
    """
    id: str
    name: str
    path: str = ""
    prototypes: List[PrototypeEntry] = field(default_factory=list)


class PrototypeRegistry:
    """Registry of prototype entries indexed by id and by name."""

    def __init__(self):
        self._by_id: Dict[str, PrototypeEntry] = {}
        self._by_name: Dict[str, List[PrototypeEntry]] = defaultdict(list)
        self._load_units: Dict[str, LoadUnit] = {}
        self._frozen = False

    # ── Registration ───────────────────────────────────────────────────

    def _check(self, proto: PrototypeEntry) -> None:
        if self._frozen:
            raise RegistryFrozenFault(proto.id)

        existing = self._by_id.get(proto.id)
        if existing is not None:
            raise DuplicatePrototypeFault(proto.id, existing.filepath, proto.filepath)

        qualifier_set = frozenset(proto.qualifiers)
        for other in self._by_name.get(proto.name, ()):
            if frozenset(other.qualifiers) == qualifier_set:
                raise AmbiguousRegistrationFault(
                    proto.name, proto.qualifiers, [other.id, proto.id],
                )

    def _insert(self, proto: PrototypeEntry) -> None:
        self._by_id[proto.id] = proto
        self._by_name[proto.name].append(proto)

    def register(self, proto: PrototypeEntry) -> None:
        self._check(proto)
        self._insert(proto)
        logger.debug("Registered prototype %s as %r", proto.id, proto.name)

    def register_load_unit(self, unit: LoadUnit) -> None:
        """
        Register a load unit and every prototype it owns.

        The unit is registered whole or not at all.
        """
        if self._frozen:
            raise RegistryFrozenFault(unit.id)
        if unit.id in self._load_units:
            raise DuplicatePrototypeFault(unit.id, self._load_units[unit.id].path, unit.path)

        # Clashes inside the unit itself
        staged = PrototypeRegistry()
        for proto in unit.prototypes:
            self._check(proto)
            staged._check(proto)
            staged._insert(proto)

        for proto in unit.prototypes:
            self._insert(proto)
            logger.debug("Registered prototype %s as %r", proto.id, proto.name)
        self._load_units[unit.id] = unit
        logger.debug("Loaded unit %s with %d prototypes", unit.id, len(unit.prototypes))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ── Lookup ─────────────────────────────────────────────────────────

    def get(self, proto_id: str) -> Optional[PrototypeEntry]:
        return self._by_id.get(proto_id)

    def get_load_unit(self, unit_id: str) -> Optional[LoadUnit]:
        return self._load_units.get(unit_id)

    def candidates(self, name: str) -> List[PrototypeEntry]:
        """Every prototype registered under ``name``, in registration order."""
        return list(self._by_name.get(name, ()))

    @staticmethod
    def is_visible(proto: PrototypeEntry, load_unit_id: Optional[str]) -> bool:
        """Private prototypes are only visible from their own load unit."""
        if proto.access_level == AccessLevel.PUBLIC:
            return True
        return load_unit_id is not None and proto.load_unit_id == load_unit_id

    def find(
        self,
        name: str,
        qualifiers: Sequence[QualifierInfo] = (),
        load_unit_id: Optional[str] = None,
    ) -> List[PrototypeEntry]:
        """Admissible candidates: visible and declaring every requested qualifier."""
        return [
            proto
            for proto in self._by_name.get(name, ())
            if self.is_visible(proto, load_unit_id) and proto.verify_qualifiers(qualifiers)
        ]

    def resolve(
        self,
        name: str,
        qualifiers: Sequence[QualifierInfo] = (),
        load_unit_id: Optional[str] = None,
    ) -> PrototypeEntry:
        """
        Resolve exactly one prototype.

        Several admissible candidates are ranked by how few qualifiers they
        declare beyond the request; candidates from the requester's own load
        unit win a tie. A remaining tie is ambiguous.

        Raises:
            PrototypeNotFoundFault: No admissible candidate
            AmbiguousPrototypeFault: Candidates cannot be told apart
        """
        found = self.find(name, qualifiers, load_unit_id)
        if not found:
            raise PrototypeNotFoundFault(
                name,
                qualifiers,
                candidates=[proto.id for proto in self._by_name.get(name, ())],
            )
        if len(found) == 1:
            return found[0]

        requested = frozenset(qualifiers)

        def rank(proto: PrototypeEntry):
            extra = len(frozenset(proto.qualifiers) - requested)
            foreign = 0 if proto.load_unit_id == load_unit_id else 1
            return (extra, foreign)

        ranked = sorted(found, key=rank)
        best = rank(ranked[0])
        tied = [proto for proto in ranked if rank(proto) == best]
        if len(tied) > 1:
            raise AmbiguousPrototypeFault(name, qualifiers, [proto.id for proto in tied])
        return ranked[0]

    def __contains__(self, proto_id: object) -> bool:
        return proto_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[PrototypeEntry]:
        return iter(self._by_id.values())
