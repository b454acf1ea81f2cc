"""An in-memory repository.

MemoryStore keeps rows as plain dictionaries per table, the link rows of
many-to-many relationships, and per-record translations. Repositories for
individual tables are obtained from the store, so related tables share data:

    >>> store = MemoryStore()
    >>> orders = store.repository(orders_schema)
    >>> store.insert("Orders", {"id": 1, "code": "A"})
    >>> store.insert("Items", {"id": 10, "order_id": 1, "qty": 2})
    >>> orders.get(1, contain=EagerLoadSpec((ContainEntry("Items"),)))["items"]
    [Record('Items', {'id': 10, 'order_id': 1, 'qty': 2}, persisted)]

Relationships with cardinality ``one`` or ``many`` are resolved through the
foreign key fields on the related table. Many-to-many relationships are
resolved through link rows added with ``MemoryStore.link``.

Named finders are row predicates registered per table with
``MemoryStore.add_finder``. The ``translations`` finder additionally loads the
translations registered with ``MemoryStore.add_translation``.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable

from duplicatable.core.constants import DEFAULT_FINDER, TRANSLATIONS_FINDER
from duplicatable.core.exceptions import DuplicatableNotFoundError
from duplicatable.core.logging_config import LoggerMixin
from duplicatable.duplication.finder import EagerLoadSpec
from duplicatable.duplication.paths import related
from duplicatable.model.record import Record
from duplicatable.model.results import ValidationFailure
from duplicatable.model.schema import RelationshipSpec, TableSchema
from duplicatable.repository.base import Key, as_key, path_tree, table_at, validate_required

RowFilter = Callable[[dict[str, Any]], bool]

KEY_MESSAGE = "This key field cannot be generated"


@dataclass
class LinkRow:
    parent: Key
    target: Key
    data: dict[str, Any] = field(default_factory=dict)


class MemoryStore:
    """Shared storage for in-memory repositories."""

    def __init__(self):
        self.rows: dict[str, dict[Key, dict[str, Any]]] = defaultdict(dict)
        self.links: dict[tuple[str, str], list[LinkRow]] = defaultdict(list)
        self.translations: dict[str, dict[Key, list[dict[str, Any]]]] = defaultdict(dict)
        self.finders: dict[str, dict[str, RowFilter]] = defaultdict(dict)
        self._sequences: dict[str, count] = {}

    def repository(self, schema: TableSchema) -> InMemoryRepository:
        return InMemoryRepository(schema, self)

    def insert(self, table: str, row: dict[str, Any], primary_key: tuple[str, ...] = ("id",)) -> Key:
        key = tuple(row[k] for k in primary_key)
        self.rows[table][key] = dict(row)
        return key

    def link(self, table: str, relationship: str, parent_id: Any, target_id: Any, **data: Any) -> None:
        """Link two rows through a many-to-many relationship of ``table``."""
        self.links[(table, relationship)].append(LinkRow(as_key(parent_id), as_key(target_id), dict(data)))

    def add_finder(self, table: str, name: str, predicate: RowFilter) -> None:
        self.finders[table][name] = predicate

    def add_translation(self, table: str, record_id: Any, **fields: Any) -> None:
        self.translations[table].setdefault(as_key(record_id), []).append(dict(fields))

    def next_id(self, table: str) -> int:
        """Return an integer id not used by any row of ``table``, including rows inserted later."""
        if table not in self._sequences:
            existing = [key[0] for key in self.rows[table] if len(key) == 1 and isinstance(key[0], int)]
            self._sequences[table] = count(max(existing, default=0) + 1)
        rows = self.rows[table]
        for candidate in self._sequences[table]:
            if (candidate,) not in rows:
                return candidate

    def accepts(self, table: str, finder: str, row: dict[str, Any]) -> bool:
        predicate = self.finders[table].get(finder)
        return predicate is None or predicate(row)


class InMemoryRepository(LoggerMixin):
    """Repository for one table of a MemoryStore.

    Args:
        schema: Schema of the table.
        store: The store holding the rows. A new empty store is created if omitted.
    """

    def __init__(self, schema: TableSchema, store: MemoryStore | None = None):
        self.schema = schema
        self.store = store if store is not None else MemoryStore()

    def has_finder(self, path: str | None, name: str) -> bool:
        return table_at(self.schema, path).has_finder(name)

    def get(self, record_id: Any, contain: EagerLoadSpec | None = None, finder: str = DEFAULT_FINDER) -> Record:
        contain = contain or EagerLoadSpec()
        row = self.store.rows[self.schema.name].get(as_key(record_id))
        if row is None or not self.store.accepts(self.schema.name, finder, row):
            raise DuplicatableNotFoundError(self.schema.name, record_id)
        record = self._to_record(self.schema, row, finder)
        self._load(record, self.schema, path_tree(contain.paths), contain, "")
        return record

    def _to_record(self, table: TableSchema, row: dict[str, Any], finder: str) -> Record:
        record = Record(table.name, dict(row), is_new=False)
        if finder == TRANSLATIONS_FINDER:
            key = tuple(row[k] for k in table.primary_key)
            record.translations = [
                Record(f"{table.name}Translations", dict(t), is_new=False)
                for t in self.store.translations[table.name].get(key, [])
            ]
        return record

    def _load(self, record: Record, table: TableSchema, tree: dict[str, dict], contain: EagerLoadSpec, prefix: str):
        for name, subtree in tree.items():
            spec = table.relationship(name, prefix + name)
            path = prefix + name
            finder = contain.finder_for(path)
            children = []
            for row, join_data in self._related_rows(table, spec, record):
                if not self.store.accepts(spec.target.name, finder, row):
                    continue
                child = self._to_record(spec.target, row, finder)
                if spec.is_many_to_many:
                    child[spec.join_data_field] = Record(f"{table.name}{spec.name}", join_data, is_new=False)
                self._load(child, spec.target, subtree, contain, path + ".")
                children.append(child)
            if spec.cardinality.is_collection:
                record[spec.property] = children
            else:
                record[spec.property] = children[0] if children else None

    def _related_rows(self, table: TableSchema, spec: RelationshipSpec, record: Record):
        parent_key = tuple(record.get(k) for k in table.primary_key)
        target_rows = self.store.rows[spec.target.name]
        if spec.is_many_to_many:
            for link in self.store.links[(table.name, spec.name)]:
                if link.parent == parent_key and link.target in target_rows:
                    yield target_rows[link.target], dict(link.data)
            return
        for row in target_rows.values():
            if tuple(row.get(fk) for fk in spec.foreign_key) == parent_key:
                yield row, None

    def save(
        self, record: Record, associated: list[str] | None = None, validate: bool = True, **options: Any
    ) -> Record | ValidationFailure:
        """Save a record graph.

        Validation of required fields covers every record on the ``associated``
        paths and runs before anything is written, so a failed save leaves
        the store untouched. New records whose primary key cannot be generated
        (a composite key with fields left unset) fail the same way, even when
        ``validate`` is False.

        Args:
            record: Root record to save.
            associated: Relationship paths to cascade the save to.
            validate: Set False to skip required-field validation.
            **options: Accepted for compatibility with other repositories; ignored.

        Returns:
            The saved record, with primary and foreign keys assigned, or a ValidationFailure.
        """
        tree = path_tree(associated or [])
        failure = validate_required(record, self.schema, tree) if validate else ValidationFailure(record)
        self._check_keys(failure, record, self.schema, tree, (), "")
        if failure.errors:
            self._logger.debug("Validation failed for %s: %s", self.schema.name, failure.errors)
            return failure
        self._write(record, self.schema, tree)
        return record

    def _check_keys(
        self,
        failure: ValidationFailure,
        record: Record,
        table: TableSchema,
        tree: dict,
        inherited: tuple[str, ...],
        prefix: str,
    ) -> None:
        # Single integer keys are generated and foreign keys are filled from the
        # parent; any other unset key field of a record to insert is an error.
        key = tuple(record.get(k) for k in table.primary_key)
        if record.is_new and key not in self.store.rows[table.name] and len(table.primary_key) > 1:
            for name in table.primary_key:
                if name not in inherited and record.get(name) is None:
                    failure.add(prefix + name, KEY_MESSAGE)

        for name, subtree in tree.items():
            spec = table.relationship(name)
            inherited_fields = () if spec.is_many_to_many else spec.foreign_key
            value = record.get(spec.property)
            if isinstance(value, Record):
                self._check_keys(failure, value, spec.target, subtree, inherited_fields, f"{prefix}{spec.property}.")
            else:
                for index, child in enumerate(value or []):
                    child_prefix = f"{prefix}{spec.property}.{index}."
                    self._check_keys(failure, child, spec.target, subtree, inherited_fields, child_prefix)

    def _write(self, record: Record, table: TableSchema, tree: dict) -> Key:
        rows = self.store.rows[table.name]
        key = tuple(record.get(k) for k in table.primary_key)
        if record.is_new and key not in rows:
            if any(v is None for v in key):
                if len(table.primary_key) != 1:
                    raise ValueError(f"Cannot generate a composite primary key for {table.name}")
                record[table.primary_key[0]] = self.store.next_id(table.name)
                key = tuple(record.get(k) for k in table.primary_key)
            self._logger.debug("Inserting %s %s", table.name, key)

        rows[key] = {name: value for name, value in record.items() if not self._is_related(table, name, value)}
        if record.translations:
            self.store.translations[table.name][key] = [
                {name: value for name, value in translation.items()} for translation in record.translations
            ]
            for translation in record.translations:
                translation.is_new = False
        record.is_new = False

        for name, subtree in tree.items():
            spec = table.relationship(name)
            for child in related(record, spec):
                if spec.is_many_to_many:
                    target_key = self._write(child, spec.target, subtree)
                    join_data = child.get(spec.join_data_field)
                    self.store.links[(table.name, spec.name)].append(LinkRow(key, target_key, dict(join_data or {})))
                else:
                    for fk, value in zip(spec.foreign_key, key):
                        child[fk] = value
                    self._write(child, spec.target, subtree)
        return key

    @staticmethod
    def _is_related(table: TableSchema, name: str, value: Any) -> bool:
        # Related records and join data are stored separately from the row.
        if isinstance(value, Record) or (isinstance(value, list) and any(isinstance(v, Record) for v in value)):
            return True
        return any(spec.property == name for spec in table.relationships.values())
