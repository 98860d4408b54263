"""Exclusion rules for dropping noisy log records before notification."""

import re
from collections.abc import Iterable, Mapping

from .models import LogRecord


def rule_matches(record: LogRecord, rule: Mapping[str, str]) -> bool:
    """True when every field/pattern pair of the rule matches the record.

    Patterns are searched anywhere in the field text. A field the record
    does not carry makes the whole rule fail, and an empty rule matches
    nothing.
    """
    if not rule:
        return False
    for field_name, pattern in rule.items():
        value = record.field_text(field_name)
        if value is None or re.search(pattern, value) is None:
            return False
    return True


def is_included(record: LogRecord, exclusion_rules: Iterable[Mapping[str, str]]) -> bool:
    """A record is kept unless at least one exclusion rule fully matches it."""
    return not any(rule_matches(record, rule) for rule in exclusion_rules)
