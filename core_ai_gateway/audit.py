import os, json, logging
from typing import Dict, Any, Optional
from threading import Lock

logger = logging.getLogger(__name__)

# Only these keys reach the audit file; message text, context, transcripts
# and audio never do.
AUDIT_FIELDS = (
    "ts", "action", "outcome", "status_code", "model",
    "policy_version", "redaction_counts", "bytes",
)


class AuditLogger:
    """Append-only JSONL log of request outcomes (metadata only)."""

    def __init__(self, path: str):
        self.path = path
        self.lock = Lock()
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def write(self, record: Dict[str, Any]):
        entry = {k: record[k] for k in AUDIT_FIELDS if k in record}
        line = json.dumps(entry, separators=(",", ":"), ensure_ascii=False)
        try:
            with self.lock:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except OSError as e:
            logger.error(f"Audit write failed: {e}")


def create_audit_logger(path: Optional[str]) -> Optional[AuditLogger]:
    if not path:
        return None
    return AuditLogger(path)
