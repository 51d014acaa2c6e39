"""Rule dispatch table.

Resolves a rule name to a predicate and evaluates it. Custom rules are
registered per registry and always win over a built-in of the same name.
A name that resolves to nothing passes.

Registration is copy-on-write. A writer builds a new dict under a lock and
swaps it in; readers use whichever dict they picked up, so validation never
takes the lock. Registration is still meant to happen at startup.
"""

import logging
import threading
from typing import Any

from fieldrules.rules import BUILTIN_RULES
from fieldrules.types import RulePredicate

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Built-in plus caller-registered rule predicates.

    Example:
        registry = RuleRegistry()
        registry.register("even", lambda value, param: value % 2 == 0)
        registry.evaluate(4, "even", "")  # True
    """

    def __init__(self, builtins: dict[str, RulePredicate] | None = None):
        self._builtins = dict(BUILTIN_RULES if builtins is None else builtins)
        self._custom: dict[str, RulePredicate] = {}
        self._lock = threading.Lock()

    def register(self, name: str, predicate: RulePredicate) -> None:
        """Install or replace a custom rule.

        Takes effect for every later evaluation; results already returned
        are not revisited.

        Args:
            name: Rule name as written in annotations
            predicate: Callable ``(value, param) -> bool``

        Raises:
            ValueError: If name is empty or contains grammar separators
            TypeError: If predicate is not callable
        """
        if not name or any(sep in name for sep in ",=") or name != name.strip():
            raise ValueError(f"Invalid rule name: {name!r}")
        if not callable(predicate):
            raise TypeError(f"Rule '{name}' predicate must be callable")

        if name in self._builtins:
            logger.warning("Custom rule '%s' shadows the built-in rule", name)
        else:
            logger.debug("Registered custom rule '%s'", name)

        with self._lock:
            custom = dict(self._custom)
            custom[name] = predicate
            self._custom = custom

    def resolve(self, name: str) -> RulePredicate | None:
        """Return the predicate a name dispatches to, or None if unknown."""
        predicate = self._custom.get(name)
        if predicate is not None:
            return predicate
        return self._builtins.get(name)

    def evaluate(self, value: Any, name: str, param: str) -> bool:
        """Evaluate one rule against a field value.

        Returns:
            True when the rule is satisfied or the name is unknown
        """
        predicate = self.resolve(name)
        if predicate is None:
            return True
        return bool(predicate(value, param))

    def is_registered(self, name: str) -> bool:
        return name in self._custom or name in self._builtins

    def is_custom(self, name: str) -> bool:
        return name in self._custom

    def list_registered(self) -> list[str]:
        """List all rule names, built-in and custom."""
        return sorted(set(self._builtins) | set(self._custom))

    def list_builtins(self) -> list[str]:
        return sorted(self._builtins)
