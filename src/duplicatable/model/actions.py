"""Field actions applied to duplicated records.

The engine knows exactly four actions: Remove, Set, Prepend and Append. A Set
carries either a LiteralValue, assigned as is, or a GeneratorValue, called
with each target record to compute that record's value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from duplicatable.model.record import Record


@dataclass(frozen=True)
class LiteralValue:
    value: Any

    def resolve(self, record: Record) -> Any:
        return self.value


@dataclass(frozen=True)
class GeneratorValue:
    func: Callable[[Record], Any]

    def resolve(self, record: Record) -> Any:
        return self.func(record)


SetValue = LiteralValue | GeneratorValue


def as_set_value(value: Any) -> SetValue:
    """Wrap a configured ``set`` value in its tagged form.

    Values already wrapped are returned unchanged; callables become
    GeneratorValue and everything else becomes LiteralValue. Use LiteralValue
    explicitly to assign a callable as a literal.
    """
    if isinstance(value, (LiteralValue, GeneratorValue)):
        return value
    if callable(value):
        return GeneratorValue(value)
    return LiteralValue(value)


@dataclass(frozen=True)
class Remove:
    pass


@dataclass(frozen=True)
class Set:
    value: SetValue


@dataclass(frozen=True)
class Prepend:
    value: str


@dataclass(frozen=True)
class Append:
    value: str


FieldAction = Remove | Set | Prepend | Append


def apply_action(action: FieldAction, record: Record, field: str) -> None:
    """Apply one action to one field of one record."""
    match action:
        case Remove():
            record.unset(field)
        case Set(value=value):
            record.set(field, value.resolve(record))
        case Prepend(value=value):
            record.set(field, value + _text(record.get(field)))
        case Append(value=value):
            record.set(field, _text(record.get(field)) + value)


def _text(current: Any) -> str:
    # Missing and null fields concatenate as the empty string.
    return "" if current is None else str(current)
