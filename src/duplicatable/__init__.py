__all__ = [
    "Cardinality",
    "ContainEntry",
    "DuplicatableException",
    "DuplicatableConfigurationError",
    "DuplicatableNotFoundError",
    "DuplicatableSchemaError",
    "DuplicationConfig",
    "DuplicationResult",
    "Duplicator",
    "EagerLoadSpec",
    "GeneratorValue",
    "InMemoryRepository",
    "LiteralValue",
    "MemoryStore",
    "Record",
    "RelationshipSpec",
    "Repository",
    "SQLAlchemyRepository",
    "TableSchema",
    "ValidationFailure",
    "configure_logging",
    "duplicate",
    "duplicate_entity",
]

from importlib.metadata import PackageNotFoundError, version

from duplicatable.core import (
    Cardinality,
    DuplicatableConfigurationError,
    DuplicatableException,
    DuplicatableNotFoundError,
    DuplicatableSchemaError,
    DuplicationConfig,
)
from duplicatable.core.logging_config import configure_logging
from duplicatable.duplication import ContainEntry, Duplicator, EagerLoadSpec, duplicate, duplicate_entity
from duplicatable.interfaces import Repository
from duplicatable.model import (
    DuplicationResult,
    GeneratorValue,
    LiteralValue,
    Record,
    RelationshipSpec,
    TableSchema,
    ValidationFailure,
)
from duplicatable.repository import InMemoryRepository, MemoryStore, SQLAlchemyRepository

try:
    __version__ = version("duplicatable")
except PackageNotFoundError:
    # package is not installed
    pass
