"""Duplicate a record, and a chosen part of its relationship graph, from a repository.

Example:
    >>> duplicator = Duplicator(
    ...     orders,
    ...     DuplicationConfig(
    ...         contain=["Items"],
    ...         set={"code": lambda record: record["code"] + "-dup"},
    ...     ),
    ... )
    >>> copy = duplicator.duplicate_entity(1)        # in memory only
    >>> result = duplicator.duplicate(1)             # saved
    >>> result.ok, result.record["id"]
    (True, 7)
"""

from __future__ import annotations

from typing import Any

from pydantic import validate_call

from duplicatable.core.config import DuplicationConfig
from duplicatable.core.logging_config import LoggerMixin
from duplicatable.core.validation import VALIDATION_CONFIG
from duplicatable.duplication.engine import TransformEngine
from duplicatable.duplication.finder import FinderResolver
from duplicatable.interfaces import Repository
from duplicatable.model.record import Record
from duplicatable.model.results import DuplicationResult, ValidationFailure


class Duplicator(LoggerMixin):
    """Fetches, transforms and optionally saves duplicates.

    All configured paths are compiled on construction; an unknown
    relationship raises before any record is fetched.

    Args:
        repository: Repository of the root table.
        config: Duplication configuration. Defaults to duplicating the root record only.

    Raises:
        DuplicatableSchemaError: If a configured path names an unknown relationship.
    """

    @validate_call(config=VALIDATION_CONFIG)
    def __init__(self, repository: Repository, config: DuplicationConfig | None = None):
        self.repository = repository
        self.config = config or DuplicationConfig()
        self.engine = TransformEngine(repository.schema, self.config)
        self.resolver = FinderResolver(repository.schema, self.config, has_finder=repository.has_finder)

    @classmethod
    def from_config(cls, repository: Repository, **options: Any) -> Duplicator:
        """Create a duplicator from keyword configuration options.

        Example:
            >>> Duplicator.from_config(orders, contain=["Items"], saveOptions={"validate": False})
        """
        return cls(repository, DuplicationConfig(**options))

    def duplicate_entity(self, record_id: Any) -> Record:
        """Create a duplicate of a record without saving it.

        Args:
            record_id: Primary key of the record to duplicate.

        Returns:
            Record: A new, unsaved record graph.

        Raises:
            DuplicatableNotFoundError: If the record does not exist.
        """
        contain = self.resolver.resolve_eager_load()
        finder = self.resolver.resolve_finder()
        self._logger.info(
            "Fetching %s %r with finder '%s' containing %s", self.repository.schema.name, record_id, finder, contain.paths
        )
        record = self.repository.get(record_id, contain=contain, finder=finder)
        return self.engine.process(record)

    def duplicate(self, record_id: Any) -> DuplicationResult:
        """Duplicate a record and save the copy.

        The save cascades to the ``contain`` paths unless ``save_options``
        already names the associations to save.

        Args:
            record_id: Primary key of the record to duplicate.

        Returns:
            DuplicationResult: The saved copy, or the unsaved copy together with the
            validation errors that prevented the save.

        Raises:
            DuplicatableNotFoundError: If the record does not exist.
        """
        entity = self.duplicate_entity(record_id)
        options = {"associated": list(self.config.contain)} | dict(self.config.save_options)
        saved = self.repository.save(entity, **options)
        if isinstance(saved, ValidationFailure):
            self._logger.warning(
                "Duplicate of %s %r failed validation: %s", self.repository.schema.name, record_id, saved.errors
            )
            return DuplicationResult(saved.record, saved.errors)
        self._logger.info("Saved duplicate of %s %r", self.repository.schema.name, record_id)
        return DuplicationResult(saved)


def duplicate_entity(repository: Repository, record_id: Any, **options: Any) -> Record:
    """Create an unsaved duplicate of a record. See DuplicationConfig for options."""
    return Duplicator.from_config(repository, **options).duplicate_entity(record_id)


def duplicate(repository: Repository, record_id: Any, **options: Any) -> DuplicationResult:
    """Duplicate a record and save the copy. See DuplicationConfig for options."""
    return Duplicator.from_config(repository, **options).duplicate(record_id)
