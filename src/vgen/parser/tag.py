"""Annotation tag parsing.

A tag is a comma-separated list of rules, each either a flag (``required``)
or a key/value pair (``min=2``). The ``in`` rule carries a comma-separated
value of its own, so an ``in=`` segment takes the rest of the tag.
"""

import logging
import re

from ..errors import RuleValueError, TagSyntaxError
from ..models import Rule

logger = logging.getLogger(__name__)

RULE_SEPARATOR = ","
VALUE_SEPARATOR = "="
LIST_RULE = "in"

_INT_LITERAL = re.compile(r"[+-]?[0-9]+")


def parse_tag(raw: str) -> list[Rule]:
    """Parse an annotation string into its ordered rule list.

    Empty segments from stray separators are dropped. Order is preserved and
    duplicates are kept.

    Args:
        raw: Annotation text, e.g. ``"required,min=2,max=50"``

    Returns:
        Rules in the order they were declared

    Raises:
        TagSyntaxError: If a non-empty segment has no rule name
    """
    rules: list[Rule] = []
    segments = raw.split(RULE_SEPARATOR)

    for index, segment in enumerate(segments):
        segment = segment.strip()
        if not segment:
            continue

        name, sep, value = segment.partition(VALUE_SEPARATOR)
        name = name.strip()
        if not name:
            raise TagSyntaxError(segment)

        if sep and name == LIST_RULE:
            # The allowed-value list runs to the end of the tag
            value = RULE_SEPARATOR.join([value, *segments[index + 1:]])
            rules.append(Rule(name, value.strip()))
            break

        rules.append(Rule(name, value.strip()))

    logger.debug(f"Parsed tag {raw!r} into {len(rules)} rules")
    return rules


def format_rules(rules: list[Rule]) -> str:
    """Serialize rules back into tag syntax."""
    return RULE_SEPARATOR.join(str(rule) for rule in rules)


def as_int(rule: Rule) -> int:
    """Read a rule value as a base-10 integer.

    Only an optional sign followed by digits is accepted; floats, digit
    separators and surrounding text are rejected.

    Raises:
        RuleValueError: If the value is empty or not an integer literal
    """
    if rule.value == "":
        raise RuleValueError(f"rule {rule.name} has no value", rule=rule.name)
    if not _INT_LITERAL.fullmatch(rule.value):
        raise RuleValueError(
            f"rule {rule.name}: invalid integer value '{rule.value}'", rule=rule.name
        )
    return int(rule.value)


def as_list(rule: Rule) -> list[str]:
    """Read the value of an ``in`` rule as its list of allowed values.

    Elements are trimmed and empty ones dropped; order and duplicates are
    kept as declared.

    Raises:
        RuleValueError: If the rule is not an ``in`` rule
    """
    if rule.name != LIST_RULE:
        raise RuleValueError(
            f"rule {rule.name} does not carry a value list", rule=rule.name
        )
    return [item.strip() for item in rule.value.split(RULE_SEPARATOR) if item.strip()]
