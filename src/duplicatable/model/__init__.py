from duplicatable.model.actions import (
    Append,
    FieldAction,
    GeneratorValue,
    LiteralValue,
    Prepend,
    Remove,
    Set,
    as_set_value,
)
from duplicatable.model.record import Record
from duplicatable.model.results import DuplicationResult, ValidationFailure
from duplicatable.model.schema import RelationshipSpec, TableSchema

__all__ = [
    "Append",
    "DuplicationResult",
    "FieldAction",
    "GeneratorValue",
    "LiteralValue",
    "Prepend",
    "Record",
    "RelationshipSpec",
    "Remove",
    "Set",
    "TableSchema",
    "ValidationFailure",
    "as_set_value",
]
