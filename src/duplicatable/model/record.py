"""The Record class: a mutable, schema-tagged row with nested related records.

A Record is what repositories hand out from ``get`` and accept in ``save``.
Related records are stored in ordinary fields named after the relationship's
property: a single Record for a to-one relationship, a list of Records for a
to-many relationship.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from typing import Any


class Record(MutableMapping):
    """A mutable key/value row.

    Attributes:
        source: Name of the table the record belongs to.
        is_new: True when a save must insert the record rather than update it.
        translations: Locale variants of the record, loaded by the translations finder.

    Example:
        >>> item = Record("Items", {"id": 10, "qty": 2}, is_new=False)
        >>> order = Record("Orders", {"id": 1, "items": [item]}, is_new=False)
        >>> order.unset("id")
        >>> order.to_dict()
        {'items': [{'id': 10, 'qty': 2}]}
    """

    def __init__(
        self,
        source: str,
        fields: dict[str, Any] | None = None,
        is_new: bool = True,
        translations: list[Record] | None = None,
    ):
        self.source = source
        self.is_new = is_new
        self.translations: list[Record] = list(translations or [])
        self._fields: dict[str, Any] = dict(fields or {})

    def __getitem__(self, field: str) -> Any:
        return self._fields[field]

    def __setitem__(self, field: str, value: Any) -> None:
        self._fields[field] = value

    def __delitem__(self, field: str) -> None:
        del self._fields[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        state = "new" if self.is_new else "persisted"
        return f"Record({self.source!r}, {self._fields!r}, {state})"

    def set(self, field: str, value: Any) -> None:
        self._fields[field] = value

    def has(self, field: str) -> bool:
        """Return True if the field is present and not None."""
        return self._fields.get(field) is not None

    def unset(self, *fields: str) -> None:
        """Remove fields from the record. Absent fields are ignored."""
        for field in fields:
            self._fields.pop(field, None)

    def to_dict(self) -> dict[str, Any]:
        """Return the record's fields as plain nested dictionaries."""

        def plain(value: Any) -> Any:
            if isinstance(value, Record):
                return value.to_dict()
            if isinstance(value, list):
                return [plain(v) for v in value]
            return value

        return {field: plain(value) for field, value in self._fields.items()}
