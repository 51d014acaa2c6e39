"""Message catalog for rendering validation failures.

Templates use literal placeholders, substituted with ``str.replace``:
- {field}: the field's display label
- {param}: the raw rule parameter; a bare ``password`` renders its default length
- {min} / {max}: the two halves of a ``range`` parameter such as "3-5"

Catalog files are YAML mappings of rule name -> template. The key
``default`` replaces the fallback used for rules without a template.
"""

import logging
import threading
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

import yaml

from fieldrules.rules import DEFAULT_PASSWORD_LENGTH

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"
FALLBACK_KEY = "default"
FALLBACK_MESSAGE = "{field} failed validation"

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "{field} is required",
    "min": "{field} must be at least {param}",
    "max": "{field} must be at most {param}",
    "len": "{field} must have a length of {param}",
    "range": "{field} must be between {min} and {max}",
    "email": "{field} must be a valid email address",
    "phone": "{field} must be a valid phone number",
    "url": "{field} must be a valid URL",
    "ip": "{field} must be a valid IP address",
    "alpha": "{field} may only contain letters",
    "alphanum": "{field} may only contain letters and digits",
    "numeric": "{field} may only contain digits",
    "number": "{field} must be a number",
    "lowercase": "{field} must be lowercase",
    "uppercase": "{field} must be uppercase",
    "contains": "{field} must contain {param}",
    "startswith": "{field} must start with {param}",
    "endswith": "{field} must end with {param}",
    "regex": "{field} has an invalid format",
    "eq": "{field} must equal {param}",
    "ne": "{field} must not equal {param}",
    "gt": "{field} must be greater than {param}",
    "gte": "{field} must be greater than or equal to {param}",
    "lt": "{field} must be less than {param}",
    "lte": "{field} must be less than or equal to {param}",
    "oneof": "{field} must be one of: {param}",
    "username": "{field} may only contain letters, digits and underscores",
    "password": "{field} must contain letters and digits and be at least {param} characters",
    "idcard": "{field} must be a valid ID card number",
}


class CatalogError(ValueError):
    """A catalog file or locale could not be loaded."""
    pass


def _read_yaml(text: str, source: str) -> dict[str, str]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in message catalog {source}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CatalogError(f"Message catalog {source} must be a mapping of rule -> template")

    messages = {}
    for rule, template in data.items():
        if not isinstance(template, str):
            raise CatalogError(
                f"Message catalog {source}: template for '{rule}' must be a string"
            )
        messages[str(rule)] = template
    return messages


def available_locales() -> list[str]:
    """Locales bundled with the package."""
    bundled = resources.files("fieldrules") / "locales"
    names = {DEFAULT_LOCALE}
    for entry in bundled.iterdir():
        if entry.name.endswith(".yaml"):
            names.add(entry.name[: -len(".yaml")])
    return sorted(names)


def load_locale(locale: str) -> dict[str, str]:
    """Load a bundled locale's templates.

    Raises:
        CatalogError: If no such locale is bundled
    """
    if locale == DEFAULT_LOCALE:
        return dict(DEFAULT_MESSAGES)
    entry = resources.files("fieldrules") / "locales" / f"{locale}.yaml"
    if not entry.is_file():
        raise CatalogError(
            f"Unknown locale '{locale}'. Available: " + ", ".join(available_locales())
        )
    return _read_yaml(entry.read_text(encoding="utf-8"), f"locale '{locale}'")


class MessageCatalog:
    """Rule name -> message template, with a generic fallback."""

    def __init__(self, messages: Mapping[str, str] | None = None):
        templates = dict(DEFAULT_MESSAGES if messages is None else messages)
        self._fallback = templates.pop(FALLBACK_KEY, FALLBACK_MESSAGE)
        self._messages = templates
        self._lock = threading.Lock()

    @classmethod
    def for_locale(cls, locale: str = DEFAULT_LOCALE) -> "MessageCatalog":
        """Create a catalog seeded from a bundled locale.

        Rules the locale file leaves out keep their English template.
        """
        messages = dict(DEFAULT_MESSAGES)
        messages.update(load_locale(locale))
        return cls(messages)

    @classmethod
    def load(cls, path: Path | str) -> "MessageCatalog":
        """Create a catalog from the defaults overlaid with a YAML file."""
        catalog = cls()
        catalog.update_from_file(path)
        return catalog

    def set(self, rule: str, template: str) -> None:
        """Install or replace the template for a rule."""
        with self._lock:
            if rule == FALLBACK_KEY:
                self._fallback = template
            else:
                messages = dict(self._messages)
                messages[rule] = template
                self._messages = messages
        logger.debug("Set message template for rule '%s'", rule)

    def update(self, templates: Mapping[str, str]) -> None:
        for rule, template in templates.items():
            self.set(rule, template)

    def update_from_file(self, path: Path | str) -> None:
        """Overlay templates read from a YAML file.

        Raises:
            CatalogError: If the file is missing or malformed
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Cannot read message catalog {path}: {e}") from e
        templates = _read_yaml(text, str(path))
        self.update(templates)
        logger.info("Loaded %d message template(s) from %s", len(templates), path)

    def get(self, rule: str) -> str:
        """Template for a rule, or the fallback."""
        return self._messages.get(rule, self._fallback)

    def has(self, rule: str) -> bool:
        return rule in self._messages

    def render(self, rule: str, label: str, param: str) -> str:
        """Render the failure message for one rule on one field."""
        if rule == "password" and not param:
            param = str(DEFAULT_PASSWORD_LENGTH)

        message = self.get(rule)
        message = message.replace("{field}", label)
        message = message.replace("{param}", param)

        if rule == "range" and "-" in param:
            parts = param.split("-")
            if len(parts) == 2:
                message = message.replace("{min}", parts[0])
                message = message.replace("{max}", parts[1])

        return message

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = dict(self._messages)
        result[FALLBACK_KEY] = self._fallback
        return result
