"""
Scoped assistant gateway.

Runs every message through the topic guard, the prompt assembler and the
chat model, and turns each possible outcome into a ReplyEnvelope:

  Received -> Filtered          out-of-scope, model never called
           -> ModelUnavailable  no model credential at startup
           -> Invoking -> Completed | RateLimited | UpstreamFailure

There is no retry here; a rate-limited reply tells the caller to back off.
Message text and user context are never logged.
"""

import logging
import time
from typing import Any, Optional

from .audit import AuditLogger
from .errors import ErrorKind, is_rate_limited
from .model_client import ModelClient
from .models import ReplyEnvelope
from .policy import ScopePolicy
from .prompt import assemble
from .topic_guard import TopicGuard

logger = logging.getLogger(__name__)


class AssistantGateway:
    component = "core_ai"

    def __init__(
        self,
        model_client: ModelClient,
        policy: ScopePolicy,
        guard: Optional[TopicGuard] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self.model_client = model_client
        self.policy = policy
        self.guard = guard or TopicGuard.from_policy(policy)
        self.audit = audit

    @property
    def model_available(self) -> bool:
        return self.model_client.available

    def _record(self, outcome: str, status_code: Optional[int] = None):
        if self.audit is None:
            return
        self.audit.write({
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "action": self.component,
            "outcome": outcome,
            "status_code": status_code,
            "model": self.model_client.name,
            "policy_version": self.policy.version,
        })

    async def reply(self, message: str, context: Optional[Any] = None) -> ReplyEnvelope:
        outcome = self.guard.classify(message)
        if not outcome.allowed:
            self._record(ErrorKind.OUT_OF_SCOPE.value)
            return ReplyEnvelope(reply=self.policy.response("out_of_scope"), filtered=True)

        if not self.model_client.available:
            logger.warning("%s: chat model not configured", self.component)
            self._record(ErrorKind.SERVICE_UNCONFIGURED.value)
            return ReplyEnvelope(
                reply=self.policy.response("unconfigured"),
                filtered=False,
                error=ErrorKind.SERVICE_UNCONFIGURED.value,
                detail="chat model not initialized",
            )

        prompt = assemble(self.policy.preamble, context, message)
        try:
            text = await self.model_client.generate(prompt)
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            if is_rate_limited(e):
                logger.warning("%s: upstream rate limited (status=%s)", self.component, status_code)
                self._record(ErrorKind.RATE_LIMITED.value, status_code)
                return ReplyEnvelope(
                    reply=self.policy.response("rate_limited"),
                    filtered=False,
                    error=ErrorKind.RATE_LIMITED.value,
                    detail=str(e),
                )

            logger.error("%s: model call failed (%s, status=%s)", self.component, type(e).__name__, status_code)
            self._record(ErrorKind.UPSTREAM_FAILURE.value, status_code)
            return ReplyEnvelope(
                reply=self.policy.response("upstream_failure"),
                filtered=False,
                error=ErrorKind.UPSTREAM_FAILURE.value,
                detail=f"{type(e).__name__}: {e}",
            )

        self._record("completed", 200)
        return ReplyEnvelope(reply=text.strip(), filtered=False)
