"""
Voice proxy for Google Cloud Speech-to-Text and Text-to-Speech.

Each capability is optional. When its credential was not supplied at
startup the capability is reported unavailable and calling it raises
ServiceUnconfigured instead of attempting the upstream request.
Text always passes through redact() before it reaches synthesis.
"""

import asyncio
import base64
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from .audit import AuditLogger
from .config import Settings
from .errors import ServiceUnconfigured, UpstreamError
from .models import TranscriptResult
from .redactor import count_redactions, redact

logger = logging.getLogger(__name__)

LANGUAGE_CODE = "en-US"
DEFAULT_MIME_TYPE = "audio/webm"

# Recognition defaults
STT_SAMPLE_RATE_HZ = 48000
STT_MODEL = "latest_short"

# Neutral, calm voice at a slightly slower pace
TTS_VOICE = {
    "languageCode": LANGUAGE_CODE,
    "name": "en-US-Neural2-D",
    "ssmlGender": "NEUTRAL",
}
TTS_AUDIO_CONFIG = {
    "audioEncoding": "MP3",
    "speakingRate": 0.95,
    "pitch": 0,
    "volumeGainDb": 0,
}

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


# ============================================================================
# Credentials
# ============================================================================

class ApiKeyAuth:
    def __init__(self, api_key: str):
        self.api_key = api_key

    async def headers(self) -> Dict[str, str]:
        return {"x-goog-api-key": self.api_key}


class ServiceAccountAuth:
    """Bearer tokens minted from a service-account JSON bundle."""

    def __init__(self, info: Dict[str, Any]):
        from google.oauth2 import service_account

        self.credentials = service_account.Credentials.from_service_account_info(
            info, scopes=[CLOUD_PLATFORM_SCOPE]
        )

    def _refresh(self):
        import google.auth.transport.requests

        self.credentials.refresh(google.auth.transport.requests.Request())

    async def headers(self) -> Dict[str, str]:
        if not self.credentials.valid:
            await asyncio.to_thread(self._refresh)
        return {"Authorization": f"Bearer {self.credentials.token}"}


def load_speech_auth(settings: Settings):
    """
    Build speech credentials from settings, or None when absent or unusable.

    A malformed bundle disables voice features rather than failing startup.
    """
    if settings.google_cloud_credentials:
        try:
            info = json.loads(settings.google_cloud_credentials)
            return ServiceAccountAuth(info)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Error initializing Google Cloud credentials: {type(e).__name__}")
            return None
    if settings.google_speech_api_key:
        return ApiKeyAuth(settings.google_speech_api_key)
    logger.warning("Google Cloud credentials not found. Voice features will be disabled.")
    return None


# ============================================================================
# Request / response shaping
# ============================================================================

def encoding_for_mime(mime_type: Optional[str]) -> str:
    mime = (mime_type or DEFAULT_MIME_TYPE).lower()
    if "webm" in mime:
        return "WEBM_OPUS"
    if "wav" in mime:
        return "LINEAR16"
    return "WEBM_OPUS"


def build_recognize_request(audio: bytes, mime_type: Optional[str]) -> Dict[str, Any]:
    return {
        "audio": {"content": base64.b64encode(audio).decode("ascii")},
        "config": {
            "encoding": encoding_for_mime(mime_type),
            "sampleRateHertz": STT_SAMPLE_RATE_HZ,
            "languageCode": LANGUAGE_CODE,
            "model": STT_MODEL,
            "enableAutomaticPunctuation": True,
            "useEnhanced": True,
        },
    }


def parse_recognize_response(body: Dict[str, Any]) -> TranscriptResult:
    """First alternative of the first result; no results means no speech."""
    results = body.get("results") or []
    if not results:
        return TranscriptResult(transcript="", confidence=0.0)
    alternatives = results[0].get("alternatives") or [{}]
    alternative = alternatives[0]
    return TranscriptResult(
        transcript=alternative.get("transcript") or "",
        confidence=alternative.get("confidence") or 0.0,
    )


def build_synthesize_request(sanitized_text: str) -> Dict[str, Any]:
    return {
        "input": {"text": sanitized_text},
        "voice": dict(TTS_VOICE),
        "audioConfig": dict(TTS_AUDIO_CONFIG),
    }


# ============================================================================
# Upstream clients
# ============================================================================

class GoogleSpeechClient:
    """POSTs a JSON body to a Google speech REST endpoint."""

    def __init__(self, auth, url: str, http_client: httpx.AsyncClient):
        self.auth = auth
        self.url = url
        self.http_client = http_client

    async def post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        headers.update(await self.auth.headers())
        response = await self.http_client.post(self.url, headers=headers, json=body)
        if response.status_code != 200:
            raise UpstreamError(
                f"Google speech API error: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()


class SpeechToTextClient(GoogleSpeechClient):
    async def recognize(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.post(body)


class TextToSpeechClient(GoogleSpeechClient):
    async def synthesize(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.post(body)


# ============================================================================
# Proxy
# ============================================================================

class VoiceProxy:
    def __init__(
        self,
        stt: Optional[SpeechToTextClient] = None,
        tts: Optional[TextToSpeechClient] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self.stt = stt
        self.tts = tts
        self.audit = audit

    @property
    def stt_available(self) -> bool:
        return self.stt is not None

    @property
    def tts_available(self) -> bool:
        return self.tts is not None

    def _record(self, action: str, outcome: str, **extra):
        if self.audit is None:
            return
        record = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "action": action,
            "outcome": outcome,
        }
        record.update(extra)
        self.audit.write(record)

    async def transcribe(self, audio: bytes, mime_type: Optional[str] = None) -> TranscriptResult:
        if self.stt is None:
            raise ServiceUnconfigured("Speech-to-Text")

        body = await self.stt.recognize(build_recognize_request(audio, mime_type))
        result = parse_recognize_response(body)
        self._record(
            "stt",
            "completed" if result.speech_detected else "no_speech",
            bytes=len(audio),
        )
        return result

    async def synthesize(self, text: str) -> bytes:
        """Redact ``text`` and return MP3 audio for it."""
        if self.tts is None:
            raise ServiceUnconfigured("Text-to-Speech")

        sanitized = redact(text)
        body = await self.tts.synthesize(build_synthesize_request(sanitized))
        content = body.get("audioContent")
        if not content:
            raise UpstreamError("Text-to-Speech returned no audio")

        audio = base64.b64decode(content)
        self._record("tts", "completed", bytes=len(audio), redaction_counts=count_redactions(text))
        return audio

    async def aclose(self) -> None:
        clients = {id(c.http_client): c.http_client for c in (self.stt, self.tts) if c is not None}
        for client in clients.values():
            await client.aclose()


def create_voice_proxy(settings: Settings, audit: Optional[AuditLogger] = None) -> VoiceProxy:
    """Voice proxy with whichever capabilities are configured and enabled."""
    if not (settings.voice_stt_enabled or settings.voice_tts_enabled):
        return VoiceProxy(audit=audit)

    auth = load_speech_auth(settings)
    if auth is None:
        return VoiceProxy(audit=audit)

    http_client = httpx.AsyncClient(timeout=settings.upstream_timeout_s)
    stt = None
    tts = None
    if settings.voice_stt_enabled:
        stt = SpeechToTextClient(auth, f"{settings.stt_base_url.rstrip('/')}/speech:recognize", http_client)
    if settings.voice_tts_enabled:
        tts = TextToSpeechClient(auth, f"{settings.tts_base_url.rstrip('/')}/text:synthesize", http_client)
    return VoiceProxy(stt=stt, tts=tts, audit=audit)
