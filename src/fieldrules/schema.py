"""Explicit record schemas for untyped mappings.

Decoded JSON or YAML has no declared fields to carry annotations, so a
RecordSchema supplies them: an ordered list of field specs, each with the
same annotation grammar used on dataclass and pydantic fields.

Schema YAML format:

    name: SignupRequest
    fields:
      - name: username
        rules: required,min=3,max=50
        label: Username
      - name: email
        rules: email
        alias: email_address
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from fieldrules.grammar import parse_rules
from fieldrules.types import Rule


class SchemaError(ValueError):
    """A schema definition is malformed."""
    pass


@dataclass(frozen=True)
class FieldSpec:
    """Annotations for one mapping key.

    Attributes:
        name: Key looked up in the mapping; also the error's field name
        rules: Rule annotation string
        label: Optional display label
        alias: Optional serialization name, used as the label fallback
    """

    name: str
    rules: str = ""
    label: str | None = None
    alias: str | None = None

    @property
    def parsed_rules(self) -> list[Rule]:
        return parse_rules(self.rules)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldSpec":
        if not isinstance(data, dict) or not data.get("name"):
            raise SchemaError(f"Field spec must be a mapping with a 'name': {data!r}")
        rules = data.get("rules", "")
        if isinstance(rules, list):
            rules = ",".join(str(r) for r in rules)
        if not isinstance(rules, str):
            raise SchemaError(f"Rules for field '{data['name']}' must be a string or list")
        return cls(
            name=str(data["name"]),
            rules=rules,
            label=data.get("label"),
            alias=data.get("alias"),
        )


@dataclass
class RecordSchema:
    """Ordered field specs describing one kind of mapping record."""

    name: str
    fields: list[FieldSpec] = field(default_factory=list)

    def add(self, name: str, rules: str = "", label: str | None = None, alias: str | None = None) -> "RecordSchema":
        """Append a field spec. Returns self for chaining."""
        if any(spec.name == name for spec in self.fields):
            raise SchemaError(f"Schema '{self.name}' already has a field named '{name}'")
        self.fields.append(FieldSpec(name=name, rules=rules, label=label, alias=alias))
        return self

    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordSchema":
        """Create a RecordSchema from a YAML/JSON dict."""
        if not isinstance(data, dict):
            raise SchemaError("Schema must be a mapping with 'name' and 'fields'")
        raw_fields = data.get("fields", [])
        if not isinstance(raw_fields, list):
            raise SchemaError("Schema 'fields' must be a list")

        schema = cls(name=str(data.get("name", "record")))
        for raw in raw_fields:
            spec = FieldSpec.from_dict(raw)
            schema.add(spec.name, spec.rules, spec.label, spec.alias)
        return schema


def load_schema(path: Path | str) -> RecordSchema:
    """Load a RecordSchema from a YAML file.

    Raises:
        SchemaError: If the file can't be read or doesn't describe a schema
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SchemaError(f"Cannot read schema {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SchemaError(f"Invalid YAML in schema {path}: {e}") from e
    return RecordSchema.from_dict(data)
