"""Annotation grammar for field rules.

    <rules> ::= <rule> (',' <rule>)*
    <rule>  ::= <name> ['=' <parameter>]

Only the first '=' separates name from parameter, so parameters may contain
'='. Whitespace around each rule is insignificant and empty rules are
dropped. The annotations "" and "-" mean "no rules".
"""

from fieldrules.types import Rule

RULE_SEPARATOR = ","
PARAM_SEPARATOR = "="
SKIP_ANNOTATIONS = frozenset({"", "-"})


def parse_rule(token: str) -> Rule:
    """Split one trimmed token into its name and parameter."""
    name, _, param = token.partition(PARAM_SEPARATOR)
    return Rule(name=name, param=param)


def parse_rules(annotation: str | None) -> list[Rule]:
    """Parse an annotation string into an ordered list of rules.

    Args:
        annotation: Raw annotation, e.g. "required,min=3,regex=^a=b$"

    Returns:
        Rules in annotation order. Empty for "", "-" or None.
    """
    if annotation is None or annotation in SKIP_ANNOTATIONS:
        return []

    rules = []
    for token in annotation.split(RULE_SEPARATOR):
        token = token.strip()
        if not token:
            continue
        rules.append(parse_rule(token))
    return rules
