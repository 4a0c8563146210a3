"""
Object runtime: per-request scopes and the object container.
"""

from .context import ObjectContext
from .container import ObjectContainer, ObjectHandle

__all__ = [
    "ObjectContext",
    "ObjectContainer",
    "ObjectHandle",
]
