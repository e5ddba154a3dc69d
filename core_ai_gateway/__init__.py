"""Scoped retirement assistant gateway: topic guard, model proxy and voice proxy."""

from .gateway import AssistantGateway
from .redactor import redact
from .topic_guard import TopicGuard

__version__ = "1.0.0"
__all__ = ["AssistantGateway", "TopicGuard", "redact"]
