"""Check CLI commands: validate documents and list rules."""

import json
from pathlib import Path
from typing import Any

import click
import yaml

from fieldrules.catalog import DEFAULT_LOCALE, CatalogError, available_locales
from fieldrules.config import ValidatorConfig
from fieldrules.engine import Validator
from fieldrules.schema import SchemaError, load_schema


def _load_records(path: Path) -> list[dict[str, Any]]:
    """Read one mapping or a list of mappings from a YAML/JSON file."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if isinstance(data, dict):
        return [data]
    if isinstance(data, list) and all(isinstance(item, dict) for item in data):
        return data
    raise click.ClickException(
        f"{path} must contain a mapping or a list of mappings"
    )


def _build_validator(locale: str, messages: Path | None) -> Validator:
    config = ValidatorConfig(locale=locale, messages_path=messages)
    try:
        return Validator(config)
    except CatalogError as e:
        raise click.ClickException(str(e)) from e


@click.command()
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("data_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--locale", default=DEFAULT_LOCALE, show_default=True, help="Message locale.")
@click.option(
    "--messages",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file of message template overrides.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print results as JSON.")
def check(schema_path: Path, data_path: Path, locale: str, messages: Path | None, as_json: bool):
    """Validate the records in DATA_PATH against the schema in SCHEMA_PATH."""
    try:
        schema = load_schema(schema_path)
    except SchemaError as e:
        raise click.ClickException(str(e)) from e

    validator = _build_validator(locale, messages)
    try:
        records = _load_records(data_path)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML/JSON in {data_path}: {e}") from e

    results = []
    for index, record in enumerate(records):
        errors = validator.validate_mapping(record, schema)
        results.append((index, errors))

    failed = [(index, errors) for index, errors in results if errors]

    if as_json:
        payload = [
            {
                "record": index,
                "valid": errors is None,
                "errors": errors.to_dict()["errors"] if errors else [],
            }
            for index, errors in results
        ]
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
    else:
        for index, errors in results:
            if errors is None:
                click.echo(click.style(f"✓ record {index}", fg="green"))
                continue
            click.echo(click.style(f"✗ record {index}", fg="red"))
            for error in errors:
                click.echo(f"    {error.field} ({error.rule}): {error.message}")

        summary = f"\n{len(records)} record(s) checked against '{schema.name}'"
        if failed:
            click.echo(click.style(f"{summary}, {len(failed)} invalid", fg="red", bold=True))
        else:
            click.echo(click.style(f"{summary}, all valid.", fg="green", bold=True))

    if failed:
        raise SystemExit(1)


@click.command()
@click.option("--locale", default=DEFAULT_LOCALE, show_default=True, help="Message locale.")
def rules(locale: str):
    """List built-in rules and their message templates."""
    if locale not in available_locales():
        raise click.ClickException(
            f"Unknown locale '{locale}'. Available: " + ", ".join(available_locales())
        )
    validator = _build_validator(locale, None)
    for name in validator.registry.list_builtins():
        click.echo(f"  {name:<11} {validator.catalog.get(name)}")
