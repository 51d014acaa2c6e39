"""Tests for the Validator facade and record traversal.

Covers:
- dataclass and pydantic records
- first-failure-per-field and declaration order
- label resolution
- private fields and embedded records
- custom rules, messages and the default instance
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, Field

from fieldrules import engine
from fieldrules.config import ValidatorConfig
from fieldrules.engine import Validator, embed, rule
from fieldrules.types import NotARecordError, ValidationErrors


@pytest.fixture
def validator():
    return Validator()


@pytest.fixture
def fresh_default(monkeypatch):
    """Give each test its own module-level default Validator."""
    monkeypatch.delenv("FIELDRULES_LOCALE", raising=False)
    monkeypatch.delenv("FIELDRULES_MESSAGES", raising=False)
    monkeypatch.setattr(engine, "_default_validator", None)


# =============================================================================
# Records used across tests
# =============================================================================


@dataclass
class Signup:
    Username: str = rule("required,min=3,max=50", default="")
    Password: str = rule("required,min=6,max=20", default="")
    Email: str = rule("email", default="")


@dataclass
class Plain:
    name: str = ""
    age: int = 0


@dataclass
class Audit:
    CreatedBy: str = rule("required", default="")


@dataclass
class Order:
    Id: int = rule("required,gt=0", default=0)
    audit: Audit = embed(default_factory=Audit)
    Note: str = rule("max=5", default="")


@dataclass
class Envelope:
    meta: Audit = rule("required", default_factory=Audit)


class AuditModel(BaseModel):
    created_by: str = Field("", json_schema_extra={"validate": "required"})


class SignupModel(BaseModel):
    username: str = Field("", json_schema_extra={"validate": "required,min=3", "label": "Username"})
    email: str = Field("", alias="emailAddress", json_schema_extra={"validate": "email"})
    audit: AuditModel = Field(default_factory=AuditModel, json_schema_extra={"embedded": True})


# =============================================================================
# Basic outcomes
# =============================================================================


class TestValidate:
    def test_record_without_annotations_is_valid(self, validator):
        assert validator.validate(Plain()) is None

    def test_valid_record_returns_none(self, validator):
        record = Signup(Username="alice", Password="abcdef1", Email="alice@example.com")
        assert validator.validate(record) is None
        assert validator.is_valid(record)

    def test_end_to_end_signup(self, validator):
        record = Signup(Username="ab", Password="abcdef1", Email="not-an-email")

        errors = validator.validate(record)

        assert isinstance(errors, ValidationErrors)
        assert [(e.field, e.rule) for e in errors] == [("Username", "min"), ("Email", "email")]
        assert errors[0].message == "Username must be at least 3"
        assert errors[0].value == "ab"
        assert str(errors) == "Username must be at least 3"

    def test_stops_at_first_failing_rule(self, validator):
        errors = validator.validate(Signup(Username="", Password="abcdef1"))
        assert errors.by_field()["Username"].rule == "required"
        assert len(errors) == 1

    def test_format_rule_defers_blank_to_required(self, validator):
        @dataclass
        class Contact:
            email: str = rule("email,required", default="")

        errors = validator.validate(Contact())
        assert errors.first().rule == "required"

    def test_required_zero_values(self, validator):
        @dataclass
        class Zeroes:
            name: str = rule("required", default="")
            count: int = rule("required", default=0)
            ratio: float = rule("required", default=0.0)
            tags: list = rule("required", default_factory=list)
            parent: object = rule("required", default=None)
            active: bool = rule("required", default=False)

        errors = validator.validate(Zeroes())
        assert errors.fields() == ["name", "count", "ratio", "tags", "parent"]

    def test_range_equivalent_to_min_max(self, validator):
        @dataclass
        class Pair:
            a: str = rule("range=3-5", default="")
            b: str = rule("min=3,max=5", default="")

        for value in ["ab", "abc", "abcde", "abcdef", "日本語だ"]:
            result = validator.validate(Pair(a=value, b=value))
            failed = set(result.fields()) if result else set()
            assert failed in (set(), {"a", "b"}), value

    def test_range_with_unparsable_bound(self, validator):
        @dataclass
        class Count:
            n: int = rule("range=1-bad", default=5)

        errors = validator.validate(Count())
        assert errors.first().rule == "range"
        assert errors.first().message == "n must be between 1 and bad"

    def test_oneof(self, validator):
        @dataclass
        class Person:
            gender: str = rule("oneof=male female", default="")

        assert validator.validate(Person("male")) is None
        assert validator.validate(Person("female")) is None
        assert validator.validate(Person("")) is None
        assert validator.validate(Person("other")).first().rule == "oneof"

    def test_unknown_rule_always_passes(self, validator):
        @dataclass
        class Loose:
            value: str = rule("nosuchrule=1,alsounknown", default="")

        assert validator.validate(Loose()) is None

    def test_malformed_param_fails_the_rule(self, validator):
        @dataclass
        class Bad:
            name: str = rule("min=abc", default="whatever")

        assert validator.validate(Bad()).first().rule == "min"

    def test_validation_is_idempotent(self, validator):
        record = Signup(Username="ab", Password="x", Email="nope")
        first = validator.validate(record)
        second = validator.validate(record)
        assert first == second
        assert first.messages() == second.messages()

    def test_record_is_not_mutated(self, validator):
        record = Signup(Username="  ab ", Password="abcdef1", Email="x")
        validator.validate(record)
        assert record == Signup(Username="  ab ", Password="abcdef1", Email="x")

    def test_errors_hashable_with_unhashable_values(self, validator):
        @dataclass
        class Tagged:
            tags: list = rule("min=2", default_factory=list)
            meta: dict = rule("required", default_factory=dict)

        errors = validator.validate(Tagged(tags=["a"]))
        again = validator.validate(Tagged(tags=["a"]))

        assert errors.fields() == ["tags", "meta"]
        assert hash(errors) == hash(again)
        assert len({errors, again}) == 1

    def test_to_dict(self, validator):
        errors = validator.validate(Signup(Username="ab", Password="abcdef1", Email=""))
        assert errors.to_dict() == {
            "errors": [
                {
                    "field": "Username",
                    "rule": "min",
                    "value": "ab",
                    "message": "Username must be at least 3",
                }
            ]
        }


class TestNotARecord:
    @pytest.mark.parametrize("value", [{"Username": "ab"}, "text", 42, None, [Signup()]])
    def test_non_records_raise(self, validator, value):
        with pytest.raises(NotARecordError):
            validator.validate(value)

    def test_record_class_is_not_a_record(self, validator):
        with pytest.raises(NotARecordError):
            validator.validate(Signup)

    def test_error_is_a_type_error(self, validator):
        with pytest.raises(TypeError, match="expected a dataclass or pydantic model"):
            validator.validate(42)


# =============================================================================
# Labels
# =============================================================================


class TestLabels:
    def test_explicit_label(self, validator):
        @dataclass
        class Form:
            user_name: str = rule("required", label="User name", json="user", default="")

        assert validator.validate(Form()).first().message == "User name is required"

    def test_serialization_name_up_to_comma(self, validator):
        @dataclass
        class Form:
            user_email: str = rule("required", json="email,omitempty", default="")

        error = validator.validate(Form()).first()
        assert error.message == "email is required"
        assert error.field == "user_email"

    def test_dash_serialization_name_ignored(self, validator):
        @dataclass
        class Form:
            token: str = rule("required", json="-", default="")

        assert validator.validate(Form()).first().message == "token is required"

    def test_declared_name_fallback(self, validator):
        @dataclass
        class Form:
            token: str = rule("required", default="")

        assert validator.validate(Form()).first().message == "token is required"


# =============================================================================
# Traversal
# =============================================================================


class TestTraversal:
    def test_private_fields_skipped(self, validator):
        @dataclass
        class WithSecret:
            _secret: str = rule("required", default="")
            name: str = rule("required", default="x")

        assert validator.validate(WithSecret()) is None

    def test_embedded_fields_flattened_in_order(self, validator):
        errors = validator.validate(Order(Id=0, Note="too long"))

        assert [(e.field, e.rule) for e in errors] == [
            ("Id", "required"),
            ("CreatedBy", "required"),
            ("Note", "max"),
        ]

    def test_embedded_valid(self, validator):
        assert validator.validate(Order(Id=1, audit=Audit("bob"), Note="ok")) is None

    def test_named_nested_record_is_opaque(self, validator):
        errors = validator.validate(Envelope())
        assert [(e.field, e.rule) for e in errors] == [("meta", "required")]

        # The nested record's own rules are not applied
        assert validator.validate(Envelope(meta=Audit(CreatedBy="x"))) is None

    def test_required_on_self_referencing_record(self, validator):
        @dataclass
        class TreeNode:
            name: str = ""
            parent: object = None

        @dataclass
        class Holder:
            node: TreeNode = rule("required", default_factory=TreeNode)

        node = TreeNode()
        node.parent = node

        assert validator.validate(Holder(node=node)) is None
        assert validator.validate(Holder()).first().rule == "required"

    def test_inherited_fields_follow_base_order(self, validator):
        @dataclass
        class Base:
            id: int = rule("gt=0", default=0)

        @dataclass
        class Child(Base):
            name: str = rule("required", default="")

        assert validator.validate(Child()).fields() == ["id", "name"]

    def test_untagged_metadata_is_ignored(self, validator):
        @dataclass
        class Other:
            name: str = field(default="", metadata={"doc": "not a rule"})

        assert validator.validate(Other()) is None


class TestPydantic:
    def test_model_fields_validated(self, validator):
        record = SignupModel(username="ab", emailAddress="bad")

        errors = validator.validate(record)

        assert [(e.field, e.rule) for e in errors] == [
            ("username", "min"),
            ("email", "email"),
            ("created_by", "required"),
        ]
        assert errors[0].message == "Username must be at least 3"
        assert errors[1].message == "emailAddress must be a valid email address"

    def test_valid_model(self, validator):
        record = SignupModel(
            username="alice",
            emailAddress="alice@example.com",
            audit=AuditModel(created_by="system"),
        )
        assert validator.validate(record) is None

    def test_title_used_as_label(self, validator):
        class Titled(BaseModel):
            code: str = Field("", title="Product code", json_schema_extra={"validate": "required"})

        assert validator.validate(Titled()).first().message == "Product code is required"


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    def test_custom_rule(self, validator):
        validator.register_rule("even", lambda value, param: value % 2 == 0)

        @dataclass
        class Numbered:
            n: int = rule("even", default=3)

        errors = validator.validate(Numbered())
        assert errors.first().rule == "even"
        assert errors.first().message == "n failed validation"

    def test_custom_rule_overrides_builtin(self, validator):
        validator.register_rule("email", lambda value, param: value.endswith("@corp.example"))

        @dataclass
        class Staff:
            email: str = rule("email", default="")

        assert validator.validate(Staff("dev@corp.example")) is None
        assert validator.validate(Staff("dev@gmail.com")).first().rule == "email"
        # The built-in vacuous pass on "" no longer applies
        assert validator.validate(Staff("")).first().rule == "email"

    def test_registration_not_retroactive(self, validator):
        @dataclass
        class Numbered:
            n: int = rule("even", default=3)

        before = validator.validate(Numbered())
        validator.register_rule("even", lambda value, param: value % 2 == 0)

        assert before is None
        assert validator.validate(Numbered()) is not None

    def test_set_message(self, validator):
        validator.set_message("min", "{field} needs {param}+ characters")
        errors = validator.validate(Signup(Username="ab", Password="abcdef1"))
        assert errors.first().message == "Username needs 3+ characters"

    def test_concurrent_validation(self, validator):
        record = Signup(Username="ab", Password="abcdef1", Email="nope")
        expected = validator.validate(record)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: validator.validate(record), range(64)))

        assert all(result == expected for result in results)


class TestConfig:
    def test_locale(self):
        validator = Validator(ValidatorConfig(locale="zh"))
        errors = validator.validate(Signup(Username="", Password="abcdef1"))
        assert errors.first().message == "Username不能为空"

    def test_messages_path(self, tmp_path):
        path = tmp_path / "messages.yaml"
        path.write_text('required: "{field}?"\n')
        validator = Validator(ValidatorConfig(messages_path=path))
        errors = validator.validate(Signup(Username="", Password="abcdef1"))
        assert errors.first().message == "Username?"

    def test_custom_metadata_keys(self):
        @dataclass
        class Tagged:
            name: str = field(default="", metadata={"rules": "required", "title": "Name"})

        validator = Validator(ValidatorConfig(rule_key="rules", label_key="title"))
        assert validator.validate(Tagged()).first().message == "Name is required"

    def test_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "messages.yaml"
        path.write_text('min: "{field} too short"\n')
        monkeypatch.setenv("FIELDRULES_LOCALE", "zh")
        monkeypatch.setenv("FIELDRULES_MESSAGES", str(path))

        config = ValidatorConfig.from_env()
        assert config.locale == "zh"
        assert config.messages_path == path

        validator = Validator.from_env()
        assert validator.catalog.get("required") == "{field}不能为空"
        assert validator.catalog.get("min") == "{field} too short"

    def test_from_env_defaults(self, monkeypatch):
        monkeypatch.delenv("FIELDRULES_LOCALE", raising=False)
        monkeypatch.delenv("FIELDRULES_MESSAGES", raising=False)
        config = ValidatorConfig.from_env()
        assert config.locale == "en"
        assert config.messages_path is None


class TestDefaultValidator:
    def test_module_level_functions(self, fresh_default):
        engine.register_rule("even", lambda value, param: value % 2 == 0)
        engine.set_message("even", "{field} must be even")

        @dataclass
        class Numbered:
            n: int = rule("even", default=3)

        errors = engine.validate(Numbered())
        assert errors.first().message == "n must be even"

    def test_default_is_shared(self, fresh_default):
        assert engine.default_validator() is engine.default_validator()

    def test_package_exports(self, fresh_default):
        import fieldrules

        assert fieldrules.validate(Plain()) is None
