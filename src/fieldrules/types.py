"""Core types for the fieldrules validation engine.

This module defines the values that flow out of a validation run:
- Rule: one parsed (name, param) pair from an annotation
- ValidationError: a single field-level failure
- ValidationErrors: the ordered set of failures for one record
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterator


RulePredicate = Callable[[Any, str], bool]
"""Signature of every rule: ``(field_value, param) -> satisfied``."""


class NotARecordError(TypeError):
    """Raised when validate() is handed something that has no fields to walk."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"fieldrules: expected a dataclass or pydantic model, got {type(value).__name__}"
        )


@dataclass(frozen=True)
class Rule:
    """A single rule parsed from an annotation.

    Attributes:
        name: Rule name used for dispatch (e.g. "min", "email")
        param: Raw parameter text after the first '=', or "" when absent
    """

    name: str
    param: str = ""

    def __str__(self) -> str:
        return f"{self.name}={self.param}" if self.param else self.name


@dataclass(frozen=True)
class ValidationError:
    """A single field that failed validation.

    Attributes:
        field: Declared attribute name of the field
        rule: Name of the first rule that failed
        value: The field's raw value, kept for diagnostics; not hashed
        message: Rendered human-readable message
    """

    field: str
    rule: str
    value: Any = dataclasses.field(hash=False)
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "rule": self.rule,
            "value": self.value,
            "message": self.message,
        }


class ValidationErrors:
    """Ordered failures for one record, at most one per field.

    Instances are only ever returned non-empty; a record that passes yields
    ``None`` from ``Validator.validate``.
    """

    __slots__ = ("_errors",)

    def __init__(self, errors: list[ValidationError]):
        self._errors = tuple(errors)

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __getitem__(self, index: int) -> ValidationError:
        return self._errors[index]

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationErrors):
            return NotImplemented
        return self._errors == other._errors

    def __hash__(self) -> int:
        return hash(self._errors)

    def __str__(self) -> str:
        # Mirrors the first error so callers can surface a single line
        return self._errors[0].message if self._errors else ""

    def __repr__(self) -> str:
        return f"ValidationErrors({list(self._errors)!r})"

    def first(self) -> ValidationError | None:
        return self._errors[0] if self._errors else None

    def messages(self) -> list[str]:
        """All rendered messages, in field order."""
        return [e.message for e in self._errors]

    def fields(self) -> list[str]:
        return [e.field for e in self._errors]

    def by_field(self) -> dict[str, ValidationError]:
        return {e.field: e for e in self._errors}

    def to_dict(self) -> dict[str, Any]:
        return {"errors": [e.to_dict() for e in self._errors]}
