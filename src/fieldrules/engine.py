"""Validation facade.

A Validator owns one RuleRegistry and one MessageCatalog. Build one at
startup, register custom rules and messages, then share it:

    validator = Validator()
    validator.register_rule("even", lambda value, param: value % 2 == 0)
    errors = validator.validate(record)
    if errors:
        return errors.to_dict()

Field failures come back as data; only a non-record input raises.
"""

import dataclasses
import threading
from typing import Any, Mapping

from fieldrules.catalog import MessageCatalog
from fieldrules.config import ValidatorConfig
from fieldrules.registry import RuleRegistry
from fieldrules.schema import RecordSchema
from fieldrules.types import (
    NotARecordError,
    RulePredicate,
    ValidationError,
    ValidationErrors,
)
from fieldrules.walker import mapping_fields, walk, walk_fields


class Validator:
    """Validates records against their field rule annotations."""

    def __init__(
        self,
        config: ValidatorConfig | None = None,
        registry: RuleRegistry | None = None,
        catalog: MessageCatalog | None = None,
    ):
        self.config = config or ValidatorConfig()
        self.registry = registry or RuleRegistry()
        if catalog is None:
            catalog = MessageCatalog.for_locale(self.config.locale)
            if self.config.messages_path is not None:
                catalog.update_from_file(self.config.messages_path)
        self.catalog = catalog

    @classmethod
    def from_env(cls) -> "Validator":
        return cls(ValidatorConfig.from_env())

    def validate(self, record: Any) -> ValidationErrors | None:
        """Validate a dataclass or pydantic model instance.

        Args:
            record: The record to check; never modified

        Returns:
            None when every field passes, otherwise the failures in field order

        Raises:
            NotARecordError: If record has no fields to walk
        """
        errors = walk(record, self.registry, self.catalog, self.config)
        return ValidationErrors(errors) if errors else None

    def validate_mapping(
        self,
        data: Mapping[str, Any],
        schema: RecordSchema,
    ) -> ValidationErrors | None:
        """Validate a plain mapping against an explicit schema.

        Missing keys are checked as None.

        Raises:
            NotARecordError: If data is not a mapping
        """
        if not isinstance(data, Mapping):
            raise NotARecordError(data)
        errors: list[ValidationError] = []
        walk_fields(
            mapping_fields(data, schema.fields),
            self.registry,
            self.catalog,
            self.config,
            errors,
        )
        return ValidationErrors(errors) if errors else None

    def is_valid(self, record: Any) -> bool:
        return self.validate(record) is None

    def register_rule(self, name: str, predicate: RulePredicate) -> None:
        """Install or replace a custom rule; it shadows any built-in of that name."""
        self.registry.register(name, predicate)

    def set_message(self, rule: str, template: str) -> None:
        """Install or replace the message template for a rule."""
        self.catalog.set(rule, template)


def rule(
    rules: str,
    *,
    label: str | None = None,
    json: str | None = None,
    embedded: bool = False,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field carrying rule annotations.

    Example:
        @dataclass
        class Signup:
            username: str = rule("required,min=3,max=50", label="Username")
            email: str = rule("email", json="email_address", default="")

    Extra keyword arguments go to ``dataclasses.field``. The metadata keys
    are the defaults of ValidatorConfig.
    """
    defaults = ValidatorConfig()
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[defaults.rule_key] = rules
    if label is not None:
        metadata[defaults.label_key] = label
    if json is not None:
        metadata[defaults.name_key] = json
    if embedded:
        metadata[defaults.embed_key] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def embed(**kwargs: Any) -> Any:
    """Declare a dataclass field whose record value is validated in place."""
    return rule("", embedded=True, **kwargs)


_default_validator: Validator | None = None
_default_lock = threading.Lock()


def default_validator() -> Validator:
    """The process-wide Validator, configured from the environment on first use."""
    global _default_validator
    if _default_validator is None:
        with _default_lock:
            if _default_validator is None:
                _default_validator = Validator.from_env()
    return _default_validator


def validate(record: Any) -> ValidationErrors | None:
    """Validate a record with the default Validator."""
    return default_validator().validate(record)


def register_rule(name: str, predicate: RulePredicate) -> None:
    """Register a custom rule on the default Validator."""
    default_validator().register_rule(name, predicate)


def set_message(rule: str, template: str) -> None:
    """Set a message template on the default Validator."""
    default_validator().set_message(rule, template)
