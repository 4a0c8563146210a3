"""
Qualifiers - attribute/value tags that disambiguate same-named prototypes.

Matching is exact and total: a request is satisfied only when every
requested pair is declared verbatim on the candidate.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True, slots=True)
class QualifierInfo:
    """One (attribute, value) qualifier pair."""
    attribute: str
    value: str

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> Tuple["QualifierInfo", ...]:
        """Build a qualifier tuple from ``{"env": "prod"}`` style mappings."""
        return tuple(cls(attribute, value) for attribute, value in mapping.items())

    def __str__(self) -> str:
        return f"{self.attribute}={self.value}"


def find_qualifier(
    qualifiers: Sequence[QualifierInfo],
    attribute: str,
) -> Optional[QualifierInfo]:
    """Return the first qualifier declaring ``attribute``, if any."""
    for qualifier in qualifiers:
        if qualifier.attribute == attribute:
            return qualifier
    return None


def matches_one(
    candidate: Sequence[QualifierInfo],
    attribute: str,
    value: str,
) -> bool:
    """Check a single requested pair against a candidate's qualifiers."""
    declared = find_qualifier(candidate, attribute)
    return declared is not None and declared.value == value


def matches_all(
    candidate: Sequence[QualifierInfo],
    requested: Iterable[QualifierInfo],
) -> bool:
    """
    Check every requested pair against a candidate's qualifiers.

    An empty request always matches.
    """
    for qualifier in requested:
        if not matches_one(candidate, qualifier.attribute, qualifier.value):
            return False
    return True
