"""A repository backed by SQLAlchemy declarative models.

The schema of a mapped class is derived from its mapper: primary key
attributes, relationships (with their direction and ``uselist``), and the
non-nullable columns that have no default, which a save requires.

Named finders are functions of the mapped class returning a SQL criterion.
They are applied to the root ``select`` or, through ``relationship.and_()``,
to the relationship loader of exactly the node they were requested for:

    >>> repository = SQLAlchemyRepository(
    ...     Order,
    ...     sessionmaker(engine),
    ...     finders={"Item": {"active": lambda cls: cls.active.is_(True)}},
    ...     translations={"Order": "i18n"},
    ... )
    >>> Duplicator(repository, DuplicationConfig(contain=["items"], finder="active")).duplicate(1)

``translations`` names, per mapped class, the relationship holding the rows
loaded into ``Record.translations`` by the ``translations`` finder. That
relationship is not exposed as a regular relationship of the schema.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from sqlalchemy import Column, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapper, Session, selectinload
from sqlalchemy.orm.interfaces import MANYTOMANY, ONETOMANY
from sqlalchemy.sql.elements import ColumnElement

from duplicatable.core.constants import DEFAULT_FINDER, TRANSLATIONS_FINDER
from duplicatable.core.enums import Cardinality
from duplicatable.core.exceptions import DuplicatableNotFoundError
from duplicatable.core.logging_config import LoggerMixin
from duplicatable.duplication.finder import EagerLoadSpec
from duplicatable.duplication.paths import related
from duplicatable.model.record import Record
from duplicatable.model.results import ValidationFailure
from duplicatable.model.schema import TableSchema
from duplicatable.repository.base import as_key, path_tree, table_at, validate_required

Finder = Callable[[type], ColumnElement]

# Messages raised by SQLite and PostgreSQL for NOT NULL violations.
NOT_NULL_PATTERNS = [
    re.compile(r"NOT NULL constraint failed: \w+\.(\w+)"),
    re.compile(r'null value in column "(\w+)"'),
]


def required_attributes(mapper: Mapper) -> tuple[str, ...]:
    """Return column attributes that must be given a value before insert.

    Primary keys, foreign keys (filled from relationships) and columns with a
    client or server default are not required.
    """
    required = []
    for attr in mapper.column_attrs:
        column = attr.columns[0]
        if not isinstance(column, Column) or column.nullable or column.primary_key or column.foreign_keys:
            continue
        if column.default is not None or column.server_default is not None:
            continue
        required.append(attr.key)
    return tuple(required)


def build_schema(
    model: type,
    finders: dict[str, dict[str, Finder]] | None = None,
    translations: dict[str, str] | None = None,
    _cache: dict[str, TableSchema] | None = None,
) -> TableSchema:
    """Derive a TableSchema graph from a mapped class.

    Schemas are keyed by class name. Relationships are named by their
    attribute name, so dotted paths read like attribute access
    (``items.discounts``).

    Args:
        model: Declarative mapped class.
        finders: Finder functions by class name and finder name.
        translations: Translation relationship attribute by class name.

    Returns:
        TableSchema: Schema of ``model`` with its related schemas attached.
    """
    finders = finders or {}
    translations = translations or {}
    cache = _cache if _cache is not None else {}

    mapper = inspect(model)
    name = mapper.class_.__name__
    if name in cache:
        return cache[name]

    table = TableSchema(
        name,
        primary_key=tuple(mapper.get_property_by_column(column).key for column in mapper.primary_key),
        finders=set(finders.get(name, {})) | ({TRANSLATIONS_FINDER} if name in translations else set()),
        required=required_attributes(mapper),
    )
    cache[name] = table

    for rel in mapper.relationships:
        if translations.get(name) == rel.key or rel.viewonly:
            continue
        target = build_schema(rel.mapper.class_, finders, translations, cache)
        if rel.direction is MANYTOMANY:
            cardinality, foreign_key = Cardinality.many_to_many, ()
        elif rel.direction is ONETOMANY:
            cardinality = Cardinality.many if rel.uselist else Cardinality.one
            foreign_key = tuple(rel.mapper.get_property_by_column(remote).key for _, remote in rel.local_remote_pairs)
        else:
            # Many-to-one: the foreign key lives on the parent row.
            cardinality, foreign_key = Cardinality.one, ()
        table.add_relationship(rel.key, target, cardinality, property=rel.key, foreign_key=foreign_key)
    return table


def _column_keys(mapper: Mapper) -> list[str]:
    return [attr.key for attr in mapper.column_attrs]


class SQLAlchemyRepository(LoggerMixin):
    """Repository for one SQLAlchemy mapped class.

    Args:
        model: Declarative mapped class of the root table.
        session_factory: Callable returning a new Session, e.g. a ``sessionmaker``.
        finders: Finder functions by class name and finder name.
        translations: Translation relationship attribute by class name.
    """

    def __init__(
        self,
        model: type,
        session_factory: Callable[[], Session],
        finders: dict[str, dict[str, Finder]] | None = None,
        translations: dict[str, str] | None = None,
    ):
        self.model = model
        self.session_factory = session_factory
        self.finders = finders or {}
        self.translations = translations or {}
        self.schema = build_schema(model, self.finders, self.translations)
        self._classes = self._collect_classes(inspect(model))

    @staticmethod
    def _collect_classes(mapper: Mapper) -> dict[str, type]:
        classes: dict[str, type] = {}
        pending = [mapper]
        while pending:
            current = pending.pop()
            if current.class_.__name__ in classes:
                continue
            classes[current.class_.__name__] = current.class_
            pending.extend(rel.mapper for rel in current.relationships)
        return classes

    def has_finder(self, path: str | None, name: str) -> bool:
        return table_at(self.schema, path).has_finder(name)

    def _criterion(self, table: str, finder: str) -> ColumnElement | None:
        factory = self.finders.get(table, {}).get(finder)
        return factory(self._classes[table]) if factory else None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _loader_options(self, contain: EagerLoadSpec, root_finder: str) -> list:
        options = []
        # One loader attribute per path, so chains sharing a prefix share its criterion.
        attributes: dict[str, Any] = {}
        if root_finder == TRANSLATIONS_FINDER and self.schema.name in self.translations:
            options.append(selectinload(getattr(self.model, self.translations[self.schema.name])))

        for entry in contain:
            loader = None
            table = self.schema
            prefix = ""
            for segment in entry.path.split("."):
                spec = table.relationship(segment, entry.path)
                path = prefix + segment
                if path not in attributes:
                    attribute = getattr(self._classes[table.name], spec.property)
                    criterion = self._criterion(spec.target.name, contain.finder_for(path))
                    attributes[path] = attribute if criterion is None else attribute.and_(criterion)
                attribute = attributes[path]
                loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
                table, prefix = spec.target, path + "."
            options.append(loader)

            translation_attr = self.translations.get(table.name)
            if entry.finder == TRANSLATIONS_FINDER and translation_attr:
                options.append(loader.selectinload(getattr(self._classes[table.name], translation_attr)))
        return options

    def get(self, record_id: Any, contain: EagerLoadSpec | None = None, finder: str = DEFAULT_FINDER) -> Record:
        contain = contain or EagerLoadSpec()
        mapper = inspect(self.model)
        stmt = select(self.model).where(
            *[column == value for column, value in zip(mapper.primary_key, as_key(record_id))]
        )
        criterion = self._criterion(self.schema.name, finder)
        if criterion is not None:
            stmt = stmt.where(criterion)
        stmt = stmt.options(*self._loader_options(contain, finder))

        with self.session_factory() as session:
            instance = session.scalars(stmt).first()
            if instance is None:
                raise DuplicatableNotFoundError(self.schema.name, record_id)
            self._logger.debug("Loaded %s %r", self.schema.name, record_id)
            return self._to_record(instance, self.schema, path_tree(contain.paths), contain, "", finder)

    def _to_record(
        self, instance: Any, table: TableSchema, tree: dict, contain: EagerLoadSpec, prefix: str, finder: str
    ) -> Record:
        mapper = inspect(instance).mapper
        record = Record(table.name, {key: getattr(instance, key) for key in _column_keys(mapper)}, is_new=False)

        translation_attr = self.translations.get(table.name)
        if finder == TRANSLATIONS_FINDER and translation_attr:
            record.translations = [
                Record(
                    type(translation).__name__,
                    {key: getattr(translation, key) for key in _column_keys(inspect(translation).mapper)},
                    is_new=False,
                )
                for translation in getattr(instance, translation_attr)
            ]

        for name, subtree in tree.items():
            spec = table.relationship(name)
            path = prefix + name
            child_finder = contain.finder_for(path)
            value = getattr(instance, spec.property)
            if spec.cardinality.is_collection:
                record[spec.property] = [
                    self._to_record(child, spec.target, subtree, contain, path + ".", child_finder) for child in value
                ]
            else:
                record[spec.property] = (
                    None
                    if value is None
                    else self._to_record(value, spec.target, subtree, contain, path + ".", child_finder)
                )
        return record

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def save(
        self, record: Record, associated: list[str] | None = None, validate: bool = True, **options: Any
    ) -> Record | ValidationFailure:
        """Save a record graph in one transaction.

        Args:
            record: Root record to save.
            associated: Relationship paths to cascade the save to.
            validate: Set False to skip required-field validation. Database
                constraint violations are still reported as a ValidationFailure.
            **options: Accepted for compatibility with other repositories; ignored.

        Returns:
            The saved record, updated with the keys the database assigned, or a ValidationFailure.
        """
        tree = path_tree(associated or [])
        if validate:
            failure = validate_required(record, self.schema, tree)
            if failure.errors:
                self._logger.debug("Validation failed for %s: %s", self.schema.name, failure.errors)
                return failure

        try:
            with self.session_factory() as session, session.begin():
                instance = self._to_instance(session, record, self.schema, tree)
                session.add(instance)
                session.flush()
                self._sync(record, instance, self.schema, tree)
        except IntegrityError as error:
            self._logger.debug("Save of %s rejected by the database: %s", self.schema.name, error.orig)
            return self._integrity_failure(record, error)
        return record

    def _to_instance(self, session: Session, record: Record, table: TableSchema, tree: dict) -> Any:
        cls = self._classes[table.name]
        mapper = inspect(cls)
        key = tuple(record.get(k) for k in table.primary_key)

        instance = None
        if all(value is not None for value in key):
            # Records keeping their key (many-to-many targets, updates) reuse the stored row.
            instance = session.get(cls, key if len(key) > 1 else key[0])
        if instance is None:
            instance = cls()
        for column in _column_keys(mapper):
            if column in record:
                setattr(instance, column, record[column])

        translation_attr = self.translations.get(table.name)
        if translation_attr and record.translations:
            translation_mapper = mapper.relationships[translation_attr].mapper
            setattr(
                instance,
                translation_attr,
                [self._translation_instance(translation_mapper, t) for t in record.translations],
            )

        for name, subtree in tree.items():
            spec = table.relationship(name)
            children = [self._to_instance(session, child, spec.target, subtree) for child in related(record, spec)]
            if spec.cardinality.is_collection:
                setattr(instance, spec.property, children)
            elif spec.property in record:
                setattr(instance, spec.property, children[0] if children else None)
        return instance

    @staticmethod
    def _translation_instance(mapper: Mapper, translation: Record) -> Any:
        # The owning record's key is filled in by the relationship on flush; a
        # surrogate primary key is left for the database to assign.
        values = {}
        single_key = len(mapper.primary_key) == 1
        for attr in mapper.column_attrs:
            column = attr.columns[0]
            if not isinstance(column, Column) or column.foreign_keys or (column.primary_key and single_key):
                continue
            if attr.key in translation:
                values[attr.key] = translation[attr.key]
        return mapper.class_(**values)

    def _sync(self, record: Record, instance: Any, table: TableSchema, tree: dict) -> None:
        """Copy database-assigned values back onto the saved record graph."""
        for key in _column_keys(inspect(instance).mapper):
            record[key] = getattr(instance, key)
        record.is_new = False

        translation_attr = self.translations.get(table.name)
        if translation_attr and record.translations:
            for translation, saved in zip(record.translations, getattr(instance, translation_attr)):
                for key in _column_keys(inspect(saved).mapper):
                    translation[key] = getattr(saved, key)
                translation.is_new = False

        for name, subtree in tree.items():
            spec = table.relationship(name)
            value = getattr(instance, spec.property)
            saved = value if spec.cardinality.is_collection else ([] if value is None else [value])
            for child, child_instance in zip(related(record, spec), saved):
                self._sync(child, child_instance, spec.target, subtree)

    @staticmethod
    def _integrity_failure(record: Record, error: IntegrityError) -> ValidationFailure:
        failure = ValidationFailure(record)
        message = str(error.orig)
        for pattern in NOT_NULL_PATTERNS:
            match = pattern.search(message)
            if match:
                failure.add(match.group(1), "This field is required")
                return failure
        failure.add("_database", message)
        return failure
