"""Finder selection and eager-load specifications.

The FinderResolver decides which finder the repository applies at the root
and at each contained relationship, and turns the configured ``contain``
paths into an EagerLoadSpec. A finder that a relationship's table does not
support is silently replaced by the default ``all`` finder for that node.
"""

from __future__ import annotations

from dataclasses import dataclass

from duplicatable.core.config import DuplicationConfig
from duplicatable.core.constants import DEFAULT_FINDER
from duplicatable.core.logging_config import get_logger
from duplicatable.duplication.paths import compile_relationship_path
from duplicatable.model.schema import TableSchema

logger = get_logger("finder")


@dataclass(frozen=True)
class ContainEntry:
    """One eager-loaded relationship path.

    Attributes:
        path: Dotted relationship path from the root.
        finder: Finder to apply at the last node of the path only, or None for
            the default finder.
    """

    path: str
    finder: str | None = None


@dataclass(frozen=True)
class EagerLoadSpec:
    """Ordered eager-load instructions for a repository ``get``."""

    entries: tuple[ContainEntry, ...] = ()

    @property
    def paths(self) -> list[str]:
        return [entry.path for entry in self.entries]

    def finder_for(self, path: str) -> str:
        """Return the finder to use at a path, ``all`` if none was requested."""
        for entry in self.entries:
            if entry.path == path and entry.finder:
                return entry.finder
        return DEFAULT_FINDER

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class FinderResolver:
    """Resolves finders for a root table.

    Args:
        schema: Schema of the root table.
        config: The duplication configuration.
        has_finder: Optional callable ``(path, name) -> bool`` reporting whether the
            table at ``path`` (None for the root) supports a named finder. Defaults
            to checking the schema.
    """

    def __init__(self, schema: TableSchema, config: DuplicationConfig, has_finder=None):
        self.schema = schema
        self.config = config
        self._has_finder = has_finder

    def resolve_finder(self, path: str | None = None) -> str:
        """Return the finder to use for the root (``path`` None) or a contained path.

        Raises:
            DuplicatableSchemaError: If ``path`` names an unknown relationship.
        """
        finder = self.config.effective_finder
        if finder == DEFAULT_FINDER:
            return finder

        table = self.schema
        if path:
            table = compile_relationship_path(self.schema, path).target.target

        supported = self._has_finder(path, finder) if self._has_finder else table.has_finder(finder)
        if not supported:
            logger.debug("Finder '%s' not available on %s, using '%s'", finder, table.name, DEFAULT_FINDER)
            return DEFAULT_FINDER
        return finder

    def resolve_eager_load(self) -> EagerLoadSpec:
        """Build the eager-load specification for the configured ``contain`` paths."""
        entries = []
        for path in self.config.contain:
            finder = self.resolve_finder(path)
            entries.append(ContainEntry(path, None if finder == DEFAULT_FINDER else finder))
        return EagerLoadSpec(tuple(entries))
