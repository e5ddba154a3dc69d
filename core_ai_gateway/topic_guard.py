"""
Topic scope guard.
Decides whether a user message is inside the retirement-plan scope before
any paid model call is made.
"""

import re
from typing import List, Optional

from .models import ClassificationOutcome
from .policy import ScopePolicy


class TopicGuard:
    """
    Substring/prefix matcher over a static allow-list.

    Matching is deliberately untokenized: an unrelated message that happens
    to contain an allowed substring is accepted, a legitimate question is
    never rejected for a near-miss spelling of a keyword.
    """

    def __init__(self, allowed_topics: List[str], greeting_patterns: List[str]):
        self.allowed_topics = tuple(t.lower() for t in allowed_topics)
        self.greeting_patterns = tuple(re.compile(p, re.IGNORECASE) for p in greeting_patterns)

    @classmethod
    def from_policy(cls, policy: ScopePolicy) -> "TopicGuard":
        return cls(policy.allowed_topics, policy.greeting_patterns)

    def classify(self, message: str) -> ClassificationOutcome:
        lower = message.lower()

        # Salutations and acknowledgements carry no topic
        if any(p.search(lower) for p in self.greeting_patterns):
            return ClassificationOutcome.GREETING

        if any(topic in lower for topic in self.allowed_topics):
            return ClassificationOutcome.ALLOWED

        return ClassificationOutcome.OUT_OF_SCOPE

    def is_allowed_topic(self, message: str) -> bool:
        return self.classify(message).allowed


_default_guard: Optional[TopicGuard] = None

def get_topic_guard() -> TopicGuard:
    """Get or create the guard built from the packaged default policy."""
    global _default_guard
    if _default_guard is None:
        _default_guard = TopicGuard.from_policy(ScopePolicy())
    return _default_guard


def classify(message: str) -> ClassificationOutcome:
    return get_topic_guard().classify(message)


def is_allowed_topic(message: str) -> bool:
    return get_topic_guard().is_allowed_topic(message)
