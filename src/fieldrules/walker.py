"""Record traversal.

Exposes the fields of a record uniformly, whatever its concrete type:
- dataclasses: annotations live in ``field(metadata=...)``
- pydantic models: annotations live in ``Field(json_schema_extra=...)``

and walks them, applying each field's rules in annotation order.

Traversal rules:
- Fields are visited in declaration order.
- Fields whose name starts with "_" are private and never visited.
- A field marked embedded whose value is a record is walked in place; its
  fields report errors as if declared on the outer record.
- Any other record-valued field is an opaque value.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from fieldrules.catalog import MessageCatalog
from fieldrules.config import ValidatorConfig
from fieldrules.grammar import parse_rules
from fieldrules.registry import RuleRegistry
from fieldrules.rules import is_record
from fieldrules.schema import FieldSpec
from fieldrules.types import NotARecordError, ValidationError


@dataclass(frozen=True)
class FieldInfo:
    """One visible field of a record.

    Attributes:
        name: Declared attribute name
        value: Current value
        annotation: Raw rule annotation, or None
        label: Resolved display label
        embedded: Whether the field is marked as an embedded record
    """

    name: str
    value: Any
    annotation: str | None
    label: str
    embedded: bool = False


def is_private(name: str) -> bool:
    return name.startswith("_")


def resolve_label(
    name: str,
    label: str | None = None,
    serialized_name: str | None = None,
) -> str:
    """Pick a display label: explicit label, serialization name, declared name.

    The serialization name is cut at its first ',' (so "email,omitempty"
    yields "email") and ignored when it is "-".
    """
    if label:
        return label
    if serialized_name and serialized_name != "-":
        serialized = serialized_name.split(",", 1)[0]
        if serialized:
            return serialized
    return name


def _dataclass_fields(record: Any, config: ValidatorConfig) -> Iterator[FieldInfo]:
    for f in dataclasses.fields(record):
        if is_private(f.name):
            continue
        meta = f.metadata
        yield FieldInfo(
            name=f.name,
            value=getattr(record, f.name),
            annotation=meta.get(config.rule_key),
            label=resolve_label(f.name, meta.get(config.label_key), meta.get(config.name_key)),
            embedded=bool(meta.get(config.embed_key, False)),
        )


def _model_fields(record: Any, config: ValidatorConfig) -> Iterator[FieldInfo]:
    for name, info in type(record).model_fields.items():
        if is_private(name):
            continue
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        label = extra.get(config.label_key) or info.title
        serialized = info.serialization_alias or info.alias
        yield FieldInfo(
            name=name,
            value=getattr(record, name),
            annotation=extra.get(config.rule_key),
            label=resolve_label(name, label, serialized),
            embedded=bool(extra.get(config.embed_key, False)),
        )


def iter_fields(record: Any, config: ValidatorConfig) -> Iterator[FieldInfo]:
    """Yield the visible fields of a record in declaration order.

    Raises:
        NotARecordError: If record is neither a dataclass nor a pydantic model
    """
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return _dataclass_fields(record, config)
    if is_record(record):
        return _model_fields(record, config)
    raise NotARecordError(record)


def check_field(
    info: FieldInfo,
    registry: RuleRegistry,
    catalog: MessageCatalog,
) -> ValidationError | None:
    """Apply a field's rules in order and report the first failure."""
    for rule in parse_rules(info.annotation):
        if not registry.evaluate(info.value, rule.name, rule.param):
            return ValidationError(
                field=info.name,
                rule=rule.name,
                value=info.value,
                message=catalog.render(rule.name, info.label, rule.param),
            )
    return None


def walk_fields(
    fields: Iterator[FieldInfo],
    registry: RuleRegistry,
    catalog: MessageCatalog,
    config: ValidatorConfig,
    errors: list[ValidationError],
) -> None:
    """Check each field, descending into embedded records."""
    for info in fields:
        if info.embedded and is_record(info.value):
            walk_fields(iter_fields(info.value, config), registry, catalog, config, errors)
            continue

        error = check_field(info, registry, catalog)
        if error is not None:
            errors.append(error)


def walk(
    record: Any,
    registry: RuleRegistry,
    catalog: MessageCatalog,
    config: ValidatorConfig,
) -> list[ValidationError]:
    """Validate every visible field of a record.

    Returns:
        One error per failing field, in traversal order
    """
    errors: list[ValidationError] = []
    walk_fields(iter_fields(record, config), registry, catalog, config, errors)
    return errors


def mapping_fields(
    data: Mapping[str, Any],
    specs: list[FieldSpec],
) -> Iterator[FieldInfo]:
    """Yield FieldInfo for a mapping described by schema field specs."""
    for spec in specs:
        if is_private(spec.name):
            continue
        yield FieldInfo(
            name=spec.name,
            value=data.get(spec.name),
            annotation=spec.rules,
            label=resolve_label(spec.name, spec.label, spec.alias),
        )
