"""
Tests for the assistant gateway: scope filtering, unconfigured model,
success and failure classification, and the privacy of audit records.
"""

import asyncio

import pytest

from core_ai_gateway.errors import ServiceUnconfigured, UpstreamError
from core_ai_gateway.gateway import AssistantGateway
from core_ai_gateway.model_client import UnconfiguredModelClient

DECLINE = (
    "I can help with your retirement plan, contributions, investments, or dashboard details. "
    "For other requests, please contact support."
)


def run(coro):
    return asyncio.run(coro)


class TestScopeFiltering:
    """Out-of-scope messages never reach the model."""

    def test_out_of_scope_filtered(self, gateway, fake_model):
        envelope = run(gateway.reply("What's the weather today?", None))
        assert envelope.filtered == True
        assert envelope.reply == DECLINE
        assert envelope.error is None
        assert fake_model.calls == []

    @pytest.mark.parametrize("message", ["Tell me a joke", "Who won the game last night?"])
    def test_zero_model_calls_for_unrelated_messages(self, gateway, fake_model, message):
        run(gateway.reply(message, {"balance": 100}))
        assert len(fake_model.calls) == 0

    def test_filtered_even_when_model_unconfigured(self, unconfigured_gateway):
        envelope = run(unconfigured_gateway.reply("What's the weather today?", None))
        assert envelope.filtered == True
        assert envelope.error is None

    def test_greeting_reaches_model(self, gateway, fake_model):
        envelope = run(gateway.reply("ok", None))
        assert envelope.filtered == False
        assert len(fake_model.calls) == 1


class TestModelUnavailable:
    """No model credential at startup."""

    def test_unconfigured_returns_fallback(self, unconfigured_gateway):
        envelope = run(unconfigured_gateway.reply("How much should I contribute?", None))
        assert envelope.filtered == False
        assert envelope.reply
        assert envelope.error == "service_unconfigured"

    def test_unconfigured_client_reports_absent(self):
        client = UnconfiguredModelClient()
        assert client.available == False
        with pytest.raises(ServiceUnconfigured):
            run(client.generate("prompt"))

    def test_model_available_flag(self, gateway, unconfigured_gateway):
        assert gateway.model_available == True
        assert unconfigured_gateway.model_available == False


class TestCompleted:
    """Successful model call."""

    def test_reply_is_trimmed(self, gateway):
        envelope = run(gateway.reply("Am I on track for retirement?", None))
        assert envelope.reply == "You are on track."
        assert envelope.filtered == False
        assert envelope.error is None

    def test_prompt_carries_context_and_message(self, gateway, fake_model):
        run(gateway.reply("What is my balance?", {"balance": 100}))
        prompt = fake_model.calls[0]
        assert prompt.startswith("You are Core AI")
        assert "User context:" in prompt
        assert prompt.endswith("User question:\nWhat is my balance?")

    def test_prompt_without_context(self, gateway, fake_model):
        run(gateway.reply("What is my balance?", None))
        assert "User context:" not in fake_model.calls[0]


class TestFailureClassification:
    """Upstream failures become typed, user-safe replies."""

    def test_rate_limited_by_status(self, policy, model_factory):
        model = model_factory(error=UpstreamError("Gemini API error: HTTP 429", status_code=429))
        envelope = run(AssistantGateway(model, policy).reply("my plan balance?", None))
        assert envelope.error == "rate_limited"
        assert envelope.reply == "I'm receiving a lot of questions right now. Please wait a moment and try again."
        assert envelope.filtered == False

    def test_rate_limited_by_message(self, policy, model_factory):
        model = model_factory(error=RuntimeError("[429 Too Many Requests] quota exceeded"))
        envelope = run(AssistantGateway(model, policy).reply("my plan balance?", None))
        assert envelope.error == "rate_limited"

    def test_resource_exhausted_is_rate_limited(self, policy, model_factory):
        model = model_factory(error=RuntimeError("RESOURCE_EXHAUSTED"))
        envelope = run(AssistantGateway(model, policy).reply("my plan balance?", None))
        assert envelope.error == "rate_limited"

    def test_other_failure_is_generic(self, policy, model_factory):
        model = model_factory(error=UpstreamError("Gemini API error: HTTP 500 secret-internal-detail", status_code=500))
        envelope = run(AssistantGateway(model, policy).reply("my plan balance?", None))
        assert envelope.error == "upstream_failure"
        assert envelope.reply == "I'm having trouble right now. Please try again in a moment."
        assert "secret-internal-detail" not in envelope.reply
        assert "secret-internal-detail" in envelope.detail

    def test_no_retry(self, policy, model_factory):
        model = model_factory(error=UpstreamError("boom", status_code=503))
        run(AssistantGateway(model, policy).reply("my plan balance?", None))
        assert len(model.calls) == 1

    def test_unexpected_exception_does_not_escape(self, policy, model_factory):
        model = model_factory(error=KeyError("candidates"))
        envelope = run(AssistantGateway(model, policy).reply("my plan balance?", None))
        assert envelope.error == "upstream_failure"


class TestAuditPrivacy:
    """Audit records hold outcomes, never message text or context."""

    def test_outcomes_recorded(self, gateway, audit_records):
        run(gateway.reply("What's the weather today?", None))
        run(gateway.reply("What is my balance?", {"balance": 98765}))
        records = audit_records()
        assert [r["outcome"] for r in records] == ["out_of_scope", "completed"]

    def test_no_message_or_context_in_audit(self, gateway, audit):
        run(gateway.reply("What is my balance? SSN 123-45-6789", {"balance": 98765}))
        with open(audit.path, "r", encoding="utf-8") as f:
            raw = f.read()
        assert "balance" not in raw
        assert "98765" not in raw
        assert "123-45-6789" not in raw

    def test_rate_limit_status_recorded(self, policy, audit, audit_records, model_factory):
        model = model_factory(error=UpstreamError("HTTP 429", status_code=429))
        run(AssistantGateway(model, policy, audit=audit).reply("my plan?", None))
        assert audit_records()[-1]["status_code"] == 429
