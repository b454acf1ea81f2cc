"""A module defining the Repository protocol used by the duplicator.

The duplicator never talks to storage directly. Anything that can load a
record graph by primary key and save one with cascading associations can be
duplicated from; this package ships an in-memory and a SQLAlchemy
implementation.

Classes:
    Repository: A protocol that specifies the storage operations the
    duplicator needs.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from duplicatable.duplication.finder import EagerLoadSpec
from duplicatable.model.record import Record
from duplicatable.model.results import ValidationFailure
from duplicatable.model.schema import TableSchema


@runtime_checkable
class Repository(Protocol):
    schema: TableSchema

    def get(self, record_id: Any, contain: EagerLoadSpec | None = None, finder: str = "all") -> Record:
        """Load a record and its contained relationships.

        Raises:
            DuplicatableNotFoundError: If no record has the given primary key.
        """
        ...

    def save(self, record: Record, associated: list[str] | None = None, **options: Any) -> Record | ValidationFailure:
        """Persist a record graph, cascading to the ``associated`` relationship paths."""
        ...

    def has_finder(self, path: str | None, name: str) -> bool:
        """Report whether the table at ``path`` (None for the root) supports a named finder."""
        ...
