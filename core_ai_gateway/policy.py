import yaml, os
from typing import Dict, Any, List, Optional

DEFAULT_POLICY_PATH = os.path.join(os.path.dirname(__file__), "policies", "default.yaml")

class ScopePolicy:
    """
    Static scope configuration: the model preamble, the topic allow-list,
    greeting patterns and the fixed user-facing responses.

    Loaded once at startup and treated as read-only afterwards.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or DEFAULT_POLICY_PATH
        self.doc = self._load()

    def _load(self) -> Dict[str, Any]:
        with open(self.path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f) or {}
        for key in ("preamble", "allowed_topics", "greeting_patterns", "responses"):
            if key not in doc:
                raise ValueError(f"Scope policy {self.path} is missing '{key}'")
        return doc

    @property
    def version(self) -> str:
        return str(self.doc.get("version", "1"))

    @property
    def preamble(self) -> str:
        return self.doc["preamble"]

    @property
    def allowed_topics(self) -> List[str]:
        return [str(t).lower() for t in self.doc["allowed_topics"]]

    @property
    def greeting_patterns(self) -> List[str]:
        return list(self.doc["greeting_patterns"])

    def response(self, name: str) -> str:
        """Fixed user-facing text for an outcome (out_of_scope, rate_limited, ...)."""
        return self.doc["responses"][name]
