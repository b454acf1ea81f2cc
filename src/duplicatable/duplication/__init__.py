from duplicatable.duplication.duplicator import Duplicator, duplicate, duplicate_entity
from duplicatable.duplication.engine import TransformEngine, strip
from duplicatable.duplication.finder import ContainEntry, EagerLoadSpec, FinderResolver

__all__ = [
    "ContainEntry",
    "Duplicator",
    "EagerLoadSpec",
    "FinderResolver",
    "TransformEngine",
    "duplicate",
    "duplicate_entity",
    "strip",
]
