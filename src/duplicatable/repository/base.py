"""Helpers shared by the bundled repositories."""

from __future__ import annotations

from typing import Any

from duplicatable.duplication.paths import compile_relationship_path, split_path
from duplicatable.model.record import Record
from duplicatable.model.results import ValidationFailure
from duplicatable.model.schema import TableSchema

REQUIRED_MESSAGE = "This field is required"

Key = tuple[Any, ...]


def as_key(record_id: Any) -> Key:
    return record_id if isinstance(record_id, tuple) else (record_id,)


def path_tree(paths: list[str]) -> dict[str, dict]:
    """Nest dotted paths: ``["A", "A.B"]`` becomes ``{"A": {"B": {}}}``."""
    tree: dict[str, dict] = {}
    for path in paths:
        node = tree
        for segment in split_path(path):
            node = node.setdefault(segment, {})
    return tree


def table_at(schema: TableSchema, path: str | None) -> TableSchema:
    """Return the schema of the table a relationship path leads to."""
    return compile_relationship_path(schema, path).target.target if path else schema


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_required(record: Record, schema: TableSchema, tree: dict[str, dict]) -> ValidationFailure:
    """Check required fields on a record and the related records named by ``tree``.

    Returns:
        ValidationFailure: Errors keyed by dotted field path, e.g. ``items.0.qty``.
        Its ``errors`` are empty when the graph is valid.
    """
    failure = ValidationFailure(record)

    def check(current: Record, table: TableSchema, subtree: dict[str, dict], prefix: str) -> None:
        for name in table.required:
            if is_blank(current.get(name)):
                failure.add(prefix + name, REQUIRED_MESSAGE)
        for name, children in subtree.items():
            spec = table.relationship(name)
            value = current.get(spec.property)
            if isinstance(value, Record):
                check(value, spec.target, children, f"{prefix}{spec.property}.")
            else:
                for index, child in enumerate(value or []):
                    check(child, spec.target, children, f"{prefix}{spec.property}.{index}.")

    check(record, schema, tree, "")
    return failure
