"""
Financial identifier redaction applied to any text before it is sent to
speech synthesis.
"""

import regex
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

SSN_MASK = "XXX-XX-XXXX"
ROUTING_MASK = "XXXX-XXXX-X"


@dataclass(frozen=True)
class RedactionRule:
    name: str
    pattern: "regex.Pattern"
    replace: Callable[["regex.Match"], str]

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replace, text)


def _mask_card(match) -> str:
    return f"XXXX-XXXX-XXXX-{match.group(0)[-4:]}"


# Order matters: the 16-digit rule must consume card/account numbers before
# the 9-digit rule could see any run inside them.
RULES: Tuple[RedactionRule, ...] = (
    RedactionRule("ssn", regex.compile(r"\b\d{3}-\d{2}-\d{4}\b"), lambda m: SSN_MASK),
    RedactionRule("card", regex.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b"), _mask_card),
    RedactionRule("routing", regex.compile(r"\b\d{9}\b"), lambda m: ROUTING_MASK),
)


def _apply_rules(text: str) -> str:
    for rule in RULES:
        text = rule.apply(text)
    return text


def redact(text: str) -> str:
    """
    Mask SSNs, 16-digit card/account numbers and 9-digit routing numbers.

    Rules run in a fixed order, each feeding the next. The pass is repeated
    until the text stops changing, so the result is always a fixed point:
    a kept card suffix can never combine with neighbouring digit groups into
    a fresh match on a later call.
    """
    current = text
    while True:
        redacted = _apply_rules(current)
        if redacted == current:
            return redacted
        current = redacted


def count_redactions(text: str) -> Dict[str, int]:
    """Number of matches per rule on a single ordered pass (for audit records)."""
    counts: Dict[str, int] = {}
    for rule in RULES:
        n = len(rule.pattern.findall(text))
        if n:
            counts[rule.name] = n
        text = rule.apply(text)
    return counts
