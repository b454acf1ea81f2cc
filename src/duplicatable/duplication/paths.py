"""Compiled dotted paths.

A dotted path such as ``Items.Discounts.code`` is compiled once against the
root TableSchema into a tuple of relationship steps, plus a leaf field for
field paths. Compiling checks every relationship segment, so an unknown name
fails before anything is fetched or mutated. Walking a compiled path reads
the live record graph: absent relationships and empty collections simply
yield no records.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from duplicatable.core.constants import PATH_DELIMITER
from duplicatable.core.exceptions import DuplicatableSchemaError
from duplicatable.model.record import Record
from duplicatable.model.schema import RelationshipSpec, TableSchema


@dataclass(frozen=True)
class RelationshipPath:
    """A compiled ``contain`` path: every segment is a relationship."""

    path: str
    steps: tuple[RelationshipSpec, ...]

    @property
    def target(self) -> RelationshipSpec:
        return self.steps[-1]


@dataclass(frozen=True)
class FieldPath:
    """A compiled field path: relationship steps followed by a leaf field."""

    path: str
    steps: tuple[RelationshipSpec, ...]
    field: str

    def holders(self, record: Record) -> Iterator[Record]:
        """Yield every record that holds the leaf field."""
        yield from walk(record, self.steps)


def split_path(path: str) -> list[str]:
    return path.split(PATH_DELIMITER)


def compile_relationship_path(schema: TableSchema, path: str) -> RelationshipPath:
    """Compile a path whose segments are all relationship names.

    Raises:
        DuplicatableSchemaError: If a segment is not a relationship of the table it is looked up on.
    """
    steps = []
    table = schema
    for segment in split_path(path):
        spec = table.relationship(segment, path)
        steps.append(spec)
        table = spec.target
    return RelationshipPath(path, tuple(steps))


def compile_field_path(schema: TableSchema, path: str) -> FieldPath:
    """Compile a path of relationship segments ending in a field name.

    Intermediate segments may use either the relationship name or its
    property name. The leaf is not checked: records may carry fields the
    schema does not list.

    Raises:
        DuplicatableSchemaError: If an intermediate segment is not a relationship.
    """
    *segments, field = split_path(path)
    steps = []
    table = schema
    for segment in segments:
        spec = table.lookup(segment)
        if spec is None:
            raise DuplicatableSchemaError(path, segment, table.name)
        steps.append(spec)
        table = spec.target
    return FieldPath(path, tuple(steps), field)


def related(record: Record, spec: RelationshipSpec) -> list[Record]:
    """Return the records a relationship holds on a record, as a list."""
    value = record.get(spec.property)
    if value is None:
        return []
    if isinstance(value, Record):
        return [value]
    return list(value)


def walk(record: Record, steps: tuple[RelationshipSpec, ...]) -> Iterator[Record]:
    """Yield the records reached by following ``steps`` from ``record``."""
    if not steps:
        yield record
        return
    head, rest = steps[0], steps[1:]
    for child in related(record, head):
        yield from walk(child, rest)
