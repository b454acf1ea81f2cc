"""The transform engine: detaches a fetched record graph from its persisted identity.

Processing a record graph happens in four passes, in this order:

1. Every record reached through a configured ``contain`` path is stripped,
   deepest records first.
2. The root record is stripped.
3. Configured ``remove`` fields are unset.
4. Configured ``set``, then ``prepend``, then ``append`` actions are applied.

Stripping a record removes what makes a save treat it as an update: its
primary key and, when reached through a relationship, the foreign key that
points at its parent. Records reached through a many-to-many relationship
keep their primary key, so a save links the copy to the same rows, and lose
only their join data. Stripped records and their translations are marked new.

The engine mutates the graph in place and returns the same root record. It
owns the graph while processing; nothing else should hold references into it.
"""

from __future__ import annotations

from collections import Counter

from duplicatable.core.config import DuplicationConfig
from duplicatable.core.logging_config import LoggerMixin
from duplicatable.duplication.paths import (
    FieldPath,
    RelationshipPath,
    compile_field_path,
    compile_relationship_path,
    related,
)
from duplicatable.model.actions import FieldAction, Remove, apply_action
from duplicatable.model.record import Record
from duplicatable.model.schema import RelationshipSpec, TableSchema


class TransformEngine(LoggerMixin):
    """Strips identity from, and applies field actions to, a record graph.

    Paths are compiled when the engine is created, so configuration errors
    surface before any record is touched.

    Args:
        schema: Schema of the root table.
        config: The duplication configuration.

    Raises:
        DuplicatableSchemaError: If any configured path names an unknown relationship.

    Example:
        >>> engine = TransformEngine(orders_schema, DuplicationConfig(contain=["Items"]))
        >>> copy = engine.process(order)
        >>> copy.is_new
        True
    """

    def __init__(self, schema: TableSchema, config: DuplicationConfig):
        self.schema = schema
        self.config = config
        self.contain_paths: list[RelationshipPath] = [
            compile_relationship_path(schema, path) for path in config.contain
        ]
        self.actions: list[tuple[FieldPath, FieldAction]] = [
            (compile_field_path(schema, path), action) for path, action in config.field_actions()
        ]
        self._warn_overlapping_actions()

    def process(self, record: Record) -> Record:
        """Transform ``record`` and its contained relationships in place.

        Args:
            record: Root of a fetched record graph.

        Returns:
            Record: The same record, now detached from its persisted identity.
        """
        stripped: set[int] = set()
        for plan in self.contain_paths:
            self._logger.debug("Stripping %s along %s", self.schema.name, plan.path)
            self._strip_along(record, plan.steps, stripped)
        strip(record, self.schema)

        for plan, action in self.actions:
            count = 0
            for holder in plan.holders(record):
                apply_action(action, holder, plan.field)
                count += 1
            self._logger.debug("%s on %s applied to %d record(s)", type(action).__name__, plan.path, count)
        return record

    def _strip_along(self, record: Record, steps: tuple[RelationshipSpec, ...], stripped: set[int]) -> None:
        head, rest = steps[0], steps[1:]
        for child in related(record, head):
            if rest:
                self._strip_along(child, rest, stripped)
            if id(child) not in stripped:
                strip(child, head.target, head)
                stripped.add(id(child))

    def _warn_overlapping_actions(self) -> None:
        # Several non-remove actions on one field run as set, prepend, append.
        counts = Counter(plan.path for plan, action in self.actions if not isinstance(action, Remove))
        for path, count in counts.items():
            if count > 1:
                self._logger.debug("%d actions configured for %s; applying set, prepend, append in turn", count, path)


def strip(record: Record, table: TableSchema, via: RelationshipSpec | None = None) -> None:
    """Detach one record from its persisted identity.

    Args:
        record: The record to strip.
        table: Schema of the record's table.
        via: The relationship the record was reached through, None for the root.
    """
    if via is not None and via.is_many_to_many:
        record.unset(via.join_data_field)
    else:
        record.unset(*table.primary_key)
        if via is not None:
            record.unset(*via.foreign_key)

    for translation in record.translations:
        translation.is_new = True
    record.is_new = True
