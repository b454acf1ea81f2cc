"""Centralized validation configuration for Duplicatable.

This module provides the shared Pydantic configuration used by the package's
models and ``validate_call`` decorators, so every configuration surface
validates the same way.

Example:
    >>> from duplicatable.core.validation import VALIDATION_CONFIG
    >>> from pydantic import validate_call
    >>>
    >>> @validate_call(config=VALIDATION_CONFIG)
    ... def describe(schema: TableSchema) -> str:
    ...     return schema.name
"""

from pydantic import ConfigDict

# Allows arbitrary types (TableSchema, Record, SQLAlchemy classes) to be
# passed through Pydantic validation without explicit type adapters.
VALIDATION_CONFIG = ConfigDict(
    arbitrary_types_allowed=True,
    validate_default=True,
    use_enum_values=False,
)

# Configuration objects are immutable once built and reject unknown keys so
# that typos such as ``prepnd`` fail loudly.
STRICT_VALIDATION_CONFIG = ConfigDict(
    arbitrary_types_allowed=True,
    validate_default=True,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)

__all__ = [
    "VALIDATION_CONFIG",
    "STRICT_VALIDATION_CONFIG",
]
