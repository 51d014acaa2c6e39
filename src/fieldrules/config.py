"""Validator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from fieldrules.catalog import DEFAULT_LOCALE


@dataclass
class ValidatorConfig:
    """Settings for a Validator instance.

    Attributes:
        rule_key: Field metadata key holding the rule annotation
        label_key: Field metadata key holding the display label
        name_key: Field metadata key holding the serialization name
        embed_key: Field metadata key marking an embedded record
        locale: Bundled locale used to seed the message catalog
        messages_path: Optional YAML file overlaid on the locale's templates
    """

    rule_key: str = "validate"
    label_key: str = "label"
    name_key: str = "json"
    embed_key: str = "embedded"
    locale: str = DEFAULT_LOCALE
    messages_path: Path | None = None

    @classmethod
    def from_env(cls) -> ValidatorConfig:
        """Create config from environment variables.

        Resolution order for each setting:
        1. FIELDRULES_LOCALE / FIELDRULES_MESSAGES env vars
        2. Defaults ("en", no override file)
        """
        locale = os.environ.get("FIELDRULES_LOCALE") or DEFAULT_LOCALE
        messages = os.environ.get("FIELDRULES_MESSAGES")
        return cls(
            locale=locale,
            messages_path=Path(messages) if messages else None,
        )
