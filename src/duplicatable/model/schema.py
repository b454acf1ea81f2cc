"""Schema metadata consumed by the duplication engine.

A TableSchema describes one table: its primary key, the named finders it
supports, the fields a save requires, and its outgoing relationships. Each
RelationshipSpec names the target TableSchema, so a schema is a graph that
may contain cycles (e.g. a self-referencing ``Parent`` relationship).

Repositories build these objects; the engine only reads them.

Example:
    >>> items = TableSchema("Items", primary_key=("id",))
    >>> orders = TableSchema("Orders", primary_key=("id",), finders={"active"})
    >>> orders.add_relationship("Items", items, Cardinality.many, foreign_key=("order_id",))
    >>> orders.relationship("Items").property
    'items'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from duplicatable.core.constants import DEFAULT_FINDER, JOIN_DATA_FIELD
from duplicatable.core.enums import Cardinality
from duplicatable.core.exceptions import DuplicatableSchemaError


def underscore(name: str) -> str:
    """Convert a relationship name such as ``OrderItems`` to ``order_items``."""
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


@dataclass(eq=False)
class RelationshipSpec:
    """One edge of the schema graph.

    Attributes:
        name: Name used for the relationship in dotted paths (e.g. ``Items``).
        target: Schema of the related table.
        cardinality: Whether the edge yields one record, a list, or a linked list.
        property: Field on the parent record holding the related record(s).
        foreign_key: Fields on the related record that point back at the parent.
        join_data_field: Field holding the join row on many-to-many targets.
    """

    name: str
    target: TableSchema = field(repr=False)
    cardinality: Cardinality
    property: str
    foreign_key: tuple[str, ...] = ()
    join_data_field: str = JOIN_DATA_FIELD

    @property
    def is_many_to_many(self) -> bool:
        return self.cardinality is Cardinality.many_to_many


@dataclass(eq=False)
class TableSchema:
    """Metadata for one table.

    Attributes:
        name: Table name.
        primary_key: Identity fields of the table.
        finders: Named finders the table supports in addition to ``all``.
        required: Fields that must be present and non-empty for a save to succeed.
        relationships: Outgoing relationships keyed by relationship name.
    """

    name: str
    primary_key: tuple[str, ...] = ("id",)
    finders: set[str] = field(default_factory=set)
    required: tuple[str, ...] = ()
    relationships: dict[str, RelationshipSpec] = field(default_factory=dict, repr=False)

    def add_relationship(
        self,
        name: str,
        target: TableSchema,
        cardinality: Cardinality,
        property: str | None = None,
        foreign_key: tuple[str, ...] | str = (),
        join_data_field: str = JOIN_DATA_FIELD,
    ) -> RelationshipSpec:
        """Register a relationship and return its spec.

        The property defaults to the underscored relationship name.
        """
        if isinstance(foreign_key, str):
            foreign_key = (foreign_key,)
        spec = RelationshipSpec(
            name=name,
            target=target,
            cardinality=Cardinality(cardinality),
            property=property or underscore(name),
            foreign_key=tuple(foreign_key),
            join_data_field=join_data_field,
        )
        self.relationships[name] = spec
        return spec

    def relationship(self, name: str, path: str | None = None) -> RelationshipSpec:
        """Return the relationship with the given name.

        Args:
            name: Relationship name.
            path: Dotted path being resolved, used for error reporting.

        Raises:
            DuplicatableSchemaError: If the table has no such relationship.
        """
        try:
            return self.relationships[name]
        except KeyError:
            raise DuplicatableSchemaError(path or name, name, self.name) from None

    def lookup(self, segment: str) -> RelationshipSpec | None:
        """Find a relationship by relationship name or by property name."""
        if segment in self.relationships:
            return self.relationships[segment]
        for spec in self.relationships.values():
            if spec.property == segment:
                return spec
        return None

    def has_finder(self, name: str) -> bool:
        return name == DEFAULT_FINDER or name in self.finders
