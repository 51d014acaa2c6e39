"""Built-in rule predicates.

Every predicate takes ``(value, param)`` and returns True when the value
satisfies the rule. Predicates never raise: a parameter that cannot be
parsed makes the rule fail.

Value kinds are decided from the runtime value:
- string: str
- boolean: bool (checked before numbers, since bool subclasses int)
- number: int, float, Decimal
- collection: any sized container other than str (list, tuple, set, dict, bytes)
- None: an absent optional value
"""

import dataclasses
import functools
import re
from collections.abc import Mapping, Sequence, Set
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from fieldrules.patterns import (
    ALPHA_PATTERN,
    ALPHANUM_PATTERN,
    EMAIL_PATTERN,
    IDCARD_PATTERN,
    IP_PATTERN,
    NUMBER_PATTERN,
    NUMERIC_PATTERN,
    PHONE_PATTERN,
    URL_PATTERN,
    USERNAME_PATTERN,
)
from fieldrules.types import RulePredicate


DEFAULT_PASSWORD_LENGTH = 6


# =============================================================================
# Kind helpers
# =============================================================================


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_collection(value: Any) -> bool:
    if isinstance(value, str):
        return False
    return isinstance(value, (Sequence, Mapping, Set))


def is_record(value: Any) -> bool:
    """True for dataclass instances and pydantic models."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    return hasattr(type(value), "model_fields") and not isinstance(value, type)


def is_zero(value: Any, seen: set[int] | None = None) -> bool:
    """Whether a value is the zero value of its type.

    Records are zero when every field is zero. A record already being
    inspected further up the graph counts as non-zero, so self-referencing
    records terminate.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return value is False
    if is_number(value):
        return value == 0
    if isinstance(value, str) or is_collection(value):
        return len(value) == 0
    if is_record(value):
        seen = set() if seen is None else seen
        if id(value) in seen:
            return False
        seen.add(id(value))
        if dataclasses.is_dataclass(value):
            names = [f.name for f in dataclasses.fields(value)]
        else:
            names = list(type(value).model_fields)
        return all(is_zero(getattr(value, name), seen) for name in names)
    return not value


_INT_PARAM = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PARAM = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _parse_int(param: str) -> int | None:
    # int() would also take whitespace, "_" separators and non-ASCII digits
    if _INT_PARAM.fullmatch(param) is None:
        return None
    return int(param)


def _parse_decimal(param: str) -> Decimal | None:
    if _DECIMAL_PARAM.fullmatch(param) is None:
        return None
    try:
        return Decimal(param)
    except InvalidOperation:
        return None


def _compare_number(value: Any, param: str, op: Callable[[Decimal, Decimal], bool]) -> bool:
    """Compare a numeric value against a parsed parameter.

    Floats compare against the bound as a float; ints and decimals compare
    exactly as Decimal. A Decimal NaN never satisfies a comparison.
    """
    bound = _parse_decimal(param)
    if bound is None:
        return False
    if isinstance(value, float):
        return op(value, float(bound))
    number = Decimal(value)
    if number.is_nan():
        return False
    return op(number, bound)


def _size(value: Any) -> int | None:
    """Character count for strings, element count for collections."""
    if isinstance(value, str) or is_collection(value):
        return len(value)
    return None


def _bound(value: Any, param: str, op: Callable[[Any, Any], bool]) -> bool:
    """Shared body of min and max."""
    if value is None:
        return True
    size = _size(value)
    if size is not None:
        limit = _parse_int(param)
        return limit is not None and op(size, limit)
    if is_number(value):
        return _compare_number(value, param, op)
    return False


def _format(pattern: re.Pattern[str]) -> RulePredicate:
    """Build a string-only pattern rule where the empty string passes."""

    def check(value: Any, param: str) -> bool:
        if value is None:
            return True
        if not isinstance(value, str):
            return False
        if value == "":
            return True
        return pattern.fullmatch(value) is not None

    return check


@functools.lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        return None


# =============================================================================
# Presence and size
# =============================================================================


def validate_required(value: Any, param: str = "") -> bool:
    if isinstance(value, bool):
        # A boolean can't be "missing"; False is a real answer
        return True
    if isinstance(value, str):
        return value.strip() != ""
    return not is_zero(value)


def validate_min(value: Any, param: str) -> bool:
    return _bound(value, param, lambda actual, limit: actual >= limit)


def validate_max(value: Any, param: str) -> bool:
    return _bound(value, param, lambda actual, limit: actual <= limit)


def validate_len(value: Any, param: str) -> bool:
    if value is None:
        return True
    size = _size(value)
    length = _parse_int(param)
    if size is None or length is None:
        return False
    return size == length


def validate_range(value: Any, param: str) -> bool:
    if value is None:
        return True
    parts = param.split("-")
    if len(parts) != 2:
        return False
    low, high = parts
    return validate_min(value, low) and validate_max(value, high)


# =============================================================================
# Comparison
# =============================================================================


def validate_eq(value: Any, param: str) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == param
    if is_number(value):
        return _compare_number(value, param, lambda a, b: a == b)
    return False


def validate_ne(value: Any, param: str) -> bool:
    if isinstance(value, str):
        return value != param
    if is_number(value):
        return _compare_number(value, param, lambda a, b: a != b)
    return True


def validate_gt(value: Any, param: str) -> bool:
    if value is None:
        return True
    return is_number(value) and _compare_number(value, param, lambda a, b: a > b)


def validate_gte(value: Any, param: str) -> bool:
    if value is None:
        return True
    return is_number(value) and _compare_number(value, param, lambda a, b: a >= b)


def validate_lt(value: Any, param: str) -> bool:
    if value is None:
        return True
    return is_number(value) and _compare_number(value, param, lambda a, b: a < b)


def validate_lte(value: Any, param: str) -> bool:
    if value is None:
        return True
    return is_number(value) and _compare_number(value, param, lambda a, b: a <= b)


# =============================================================================
# Formats
# =============================================================================


validate_email = _format(EMAIL_PATTERN)
validate_phone = _format(PHONE_PATTERN)
validate_url = _format(URL_PATTERN)
validate_alpha = _format(ALPHA_PATTERN)
validate_alphanum = _format(ALPHANUM_PATTERN)
validate_numeric = _format(NUMERIC_PATTERN)
validate_number = _format(NUMBER_PATTERN)
validate_username = _format(USERNAME_PATTERN)
validate_idcard = _format(IDCARD_PATTERN)

_ip_shape = _format(IP_PATTERN)


def validate_ip(value: Any, param: str = "") -> bool:
    if not _ip_shape(value, param):
        return False
    if not value:
        return True
    return all(int(segment) <= 255 for segment in value.split("."))


# =============================================================================
# String content
# =============================================================================


def validate_lowercase(value: Any, param: str = "") -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    return value == "" or value == value.lower()


def validate_uppercase(value: Any, param: str = "") -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    return value == "" or value == value.upper()


def validate_contains(value: Any, param: str) -> bool:
    # No empty-string shortcut: "" only contains ""
    if value is None:
        return True
    return isinstance(value, str) and param in value


def validate_startswith(value: Any, param: str) -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    return value == "" or value.startswith(param)


def validate_endswith(value: Any, param: str) -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    return value == "" or value.endswith(param)


def validate_regex(value: Any, param: str) -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    if value == "":
        return True
    pattern = _compile(param)
    if pattern is None:
        return False
    return pattern.search(value) is not None


def validate_oneof(value: Any, param: str) -> bool:
    allowed = param.split(" ")
    if value is None:
        return True
    if is_integer(value):
        return str(value) in allowed
    if not isinstance(value, str):
        return False
    return value == "" or value in allowed


def validate_password(value: Any, param: str) -> bool:
    """At least ``param`` bytes of UTF-8 with one ASCII letter and one digit.

    Length is measured in encoded bytes, unlike min/max/len which count
    characters, so "ab中1" is six long.
    """
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    if value == "":
        return True

    min_length = DEFAULT_PASSWORD_LENGTH
    if param:
        min_length = _parse_int(param)
        if min_length is None:
            return False

    if len(value.encode("utf-8")) < min_length:
        return False

    has_letter = any("a" <= c <= "z" or "A" <= c <= "Z" for c in value)
    has_digit = any("0" <= c <= "9" for c in value)
    return has_letter and has_digit


# =============================================================================
# Dispatch table
# =============================================================================


BUILTIN_RULES: dict[str, RulePredicate] = {
    "required": validate_required,
    "min": validate_min,
    "max": validate_max,
    "len": validate_len,
    "range": validate_range,
    "email": validate_email,
    "phone": validate_phone,
    "url": validate_url,
    "ip": validate_ip,
    "alpha": validate_alpha,
    "alphanum": validate_alphanum,
    "numeric": validate_numeric,
    "number": validate_number,
    "lowercase": validate_lowercase,
    "uppercase": validate_uppercase,
    "contains": validate_contains,
    "startswith": validate_startswith,
    "endswith": validate_endswith,
    "regex": validate_regex,
    "eq": validate_eq,
    "ne": validate_ne,
    "gt": validate_gt,
    "gte": validate_gte,
    "lt": validate_lt,
    "lte": validate_lte,
    "oneof": validate_oneof,
    "username": validate_username,
    "password": validate_password,
    "idcard": validate_idcard,
}
