"""
Result objects returned by repository saves and by Duplicator.duplicate.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from duplicatable.model.record import Record


@dataclass
class ValidationFailure:
    """A save rejected by validation.

    Attributes:
        record: The record graph that failed to save. Nothing was persisted.
        errors: Dotted field path to the messages for that field, e.g.
            ``{"items.0.qty": ["This field is required"]}``.
    """

    record: Record
    errors: dict[str, list[str]] = field(default_factory=dict)

    def add(self, path: str, message: str) -> None:
        self.errors.setdefault(path, []).append(message)

    def __bool__(self) -> bool:
        return False


@dataclass
class DuplicationResult:
    """Outcome of a saving duplication.

    Attributes:
        record: The saved copy on success, otherwise the unsaved copy.
        errors: Validation messages keyed by dotted field path. Empty on success.
    """

    record: Record
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def failed_fields(self) -> list[str]:
        return sorted(self.errors)

    def __bool__(self) -> bool:
        return self.ok
