"""fieldrules: tag-driven validation for dataclasses, pydantic models and mappings.

Fields declare their rules as an annotation string:

    from dataclasses import dataclass
    from fieldrules import rule, validate

    @dataclass
    class Signup:
        username: str = rule("required,min=3,max=50", label="Username")
        email: str = rule("required,email", default="")

    errors = validate(Signup(username="ab"))
    if errors:
        print(errors.messages())

Usage with an explicit instance:
    from fieldrules import Validator, ValidatorConfig

    # At application startup
    validator = Validator(ValidatorConfig(locale="zh"))
    validator.register_rule("even", lambda value, param: value % 2 == 0)
    validator.set_message("even", "{field} must be even")
"""

from fieldrules.catalog import (
    DEFAULT_MESSAGES,
    CatalogError,
    MessageCatalog,
    available_locales,
)
from fieldrules.config import ValidatorConfig
from fieldrules.engine import (
    Validator,
    default_validator,
    embed,
    register_rule,
    rule,
    set_message,
    validate,
)
from fieldrules.grammar import parse_rules
from fieldrules.registry import RuleRegistry
from fieldrules.rules import BUILTIN_RULES
from fieldrules.schema import FieldSpec, RecordSchema, SchemaError, load_schema
from fieldrules.types import (
    NotARecordError,
    Rule,
    RulePredicate,
    ValidationError,
    ValidationErrors,
)

__all__ = [
    # Types
    "NotARecordError",
    "Rule",
    "RulePredicate",
    "ValidationError",
    "ValidationErrors",
    # Engine
    "Validator",
    "ValidatorConfig",
    "default_validator",
    "embed",
    "register_rule",
    "rule",
    "set_message",
    "validate",
    # Rules
    "BUILTIN_RULES",
    "RuleRegistry",
    "parse_rules",
    # Messages
    "CatalogError",
    "DEFAULT_MESSAGES",
    "MessageCatalog",
    "available_locales",
    # Schemas
    "FieldSpec",
    "RecordSchema",
    "SchemaError",
    "load_schema",
]
