"""Shared fixtures: fake model client, mock Google transports, app factory."""

import base64
import json

import httpx
import pytest

from core_ai_gateway.audit import AuditLogger
from core_ai_gateway.config import Settings
from core_ai_gateway.gateway import AssistantGateway
from core_ai_gateway.model_client import ModelClient, UnconfiguredModelClient
from core_ai_gateway.policy import ScopePolicy
from core_ai_gateway.voice import ApiKeyAuth, SpeechToTextClient, TextToSpeechClient, VoiceProxy


class FakeModelClient(ModelClient):
    """Records every prompt; replies with fixed text or raises a given error."""

    name = "fake"

    def __init__(self, reply: str = "  You are on track.  ", error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate(self, prompt: str) -> str:
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class GoogleSpeechStub:
    """httpx.MockTransport handler standing in for the Google speech REST APIs."""

    def __init__(self, stt_body=None, tts_body=None, status_code: int = 200):
        self.stt_body = stt_body if stt_body is not None else {}
        self.tts_body = tts_body if tts_body is not None else {
            "audioContent": base64.b64encode(b"ID3-fake-mp3").decode("ascii")
        }
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append((request, body))
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "boom"}})
        if request.url.path.endswith("speech:recognize"):
            return httpx.Response(200, json=self.stt_body)
        return httpx.Response(200, json=self.tts_body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def make_voice(stub: GoogleSpeechStub, stt: bool = True, tts: bool = True, audit=None) -> VoiceProxy:
    http_client = stub.client()
    auth = ApiKeyAuth("test-speech-key")
    return VoiceProxy(
        stt=SpeechToTextClient(auth, "https://speech.test/v1/speech:recognize", http_client) if stt else None,
        tts=TextToSpeechClient(auth, "https://tts.test/v1/text:synthesize", http_client) if tts else None,
        audit=audit,
    )


@pytest.fixture
def policy():
    return ScopePolicy()


@pytest.fixture
def fake_model():
    return FakeModelClient()


@pytest.fixture
def model_factory():
    return FakeModelClient


@pytest.fixture
def speech_stub():
    return GoogleSpeechStub


@pytest.fixture
def voice_factory():
    return make_voice


@pytest.fixture
def audit(tmp_path):
    return AuditLogger(str(tmp_path / "audit" / "audit.jsonl"))


@pytest.fixture
def audit_records(audit):
    """Reads back the audit file, oldest record first."""
    def read():
        with open(audit.path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f]
    return read


@pytest.fixture
def gateway(fake_model, policy, audit):
    return AssistantGateway(fake_model, policy, audit=audit)


@pytest.fixture
def unconfigured_gateway(policy):
    return AssistantGateway(UnconfiguredModelClient(), policy)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        audit_path=str(tmp_path / "audit.jsonl"),
        gemini_api_key=None,
        google_cloud_credentials=None,
        google_speech_api_key=None,
        max_upload_mb=1,
    )
