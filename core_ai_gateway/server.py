import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .audit import create_audit_logger
from .config import Settings, settings as default_settings
from .errors import ServiceUnconfigured
from .gateway import AssistantGateway
from .model_client import create_model_client
from .models import CoreAIRequest, CoreAIResponse, HealthResponse, ServiceStatus, TTSRequest
from .policy import ScopePolicy
from .voice import VoiceProxy, create_voice_proxy

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm having trouble right now. Please try again in a moment."
STT_RETRY_MESSAGE = "I couldn't hear that clearly. You can try again or type instead."


def create_gateway(settings: Settings, audit=None) -> AssistantGateway:
    policy = ScopePolicy(settings.scope_policy_path)
    model_client = create_model_client(
        settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.upstream_timeout_s,
    )
    return AssistantGateway(model_client, policy, audit=audit)


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[AssistantGateway] = None,
    voice: Optional[VoiceProxy] = None,
) -> FastAPI:
    """
    Build the HTTP surface.

    External clients are created once here and stay fixed for the life of
    the process; pass ``gateway``/``voice`` to substitute them in tests.
    """
    settings = settings or default_settings
    audit = create_audit_logger(settings.audit_path)
    gateway = gateway or create_gateway(settings, audit=audit)
    voice = voice or create_voice_proxy(settings, audit=audit)
    max_upload_bytes = settings.max_upload_mb * 1024 * 1024

    def _upload_too_large():
        return JSONResponse(status_code=413, content={
            "error": "Audio file too large",
            "message": f"Maximum upload size is {settings.max_upload_mb}MB",
        })

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Core AI (Gemini): {'enabled' if gateway.model_available else 'disabled (set GEMINI_API_KEY)'}")
        logger.info(f"STT available: {voice.stt_available}")
        logger.info(f"TTS available: {voice.tts_available}")
        yield
        await gateway.model_client.aclose()
        await voice.aclose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.gateway = gateway
    app.state.voice = voice

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Type"],
    )

    @app.post("/api/voice/stt")
    async def speech_to_text(audio: Optional[UploadFile] = File(None)):
        """Transcribe an uploaded audio clip. Transcripts are never logged."""
        if not voice.stt_available:
            return JSONResponse(status_code=503, content={
                "error": "Speech-to-Text service unavailable",
                "message": "Google Cloud credentials not configured",
            })
        if audio is None:
            return JSONResponse(status_code=400, content={"error": "No audio file provided"})

        if audio.size is not None and audio.size > max_upload_bytes:
            return _upload_too_large()
        # Never buffer more than one byte past the limit
        data = await audio.read(max_upload_bytes + 1)
        if len(data) > max_upload_bytes:
            return _upload_too_large()

        try:
            result = await voice.transcribe(data, audio.content_type or "audio/webm")
        except ServiceUnconfigured:
            return JSONResponse(status_code=503, content={"error": "Speech-to-Text service unavailable"})
        except Exception as e:
            logger.error(f"STT Error: {type(e).__name__} (status={getattr(e, 'status_code', None)})")
            return JSONResponse(status_code=500, content={
                "error": "Speech-to-Text failed",
                "message": STT_RETRY_MESSAGE,
            })

        if not result.speech_detected:
            return JSONResponse(content={"transcript": "", "confidence": 0, "error": "No speech detected"})
        return JSONResponse(content={"transcript": result.transcript, "confidence": result.confidence})

    @app.post("/api/voice/tts")
    async def text_to_speech(req: Optional[TTSRequest] = None):
        if not voice.tts_available:
            return JSONResponse(status_code=503, content={
                "error": "Text-to-Speech service unavailable",
                "message": "Google Cloud credentials not configured",
            })
        if req is None or not isinstance(req.text, str) or not req.text.strip():
            return JSONResponse(status_code=400, content={"error": "No text provided"})

        try:
            audio_content = await voice.synthesize(req.text)
        except ServiceUnconfigured:
            return JSONResponse(status_code=503, content={"error": "Text-to-Speech service unavailable"})
        except Exception as e:
            logger.error(f"TTS Error: {type(e).__name__} (status={getattr(e, 'status_code', None)})")
            return JSONResponse(status_code=500, content={
                "error": "Text-to-Speech failed",
                "message": "Could not generate speech audio",
            })

        return Response(content=audio_content, media_type="audio/mpeg")

    @app.post("/api/core-ai", response_model=CoreAIResponse)
    async def core_ai(req: Optional[CoreAIRequest] = None):
        """Scoped retirement assistant; topic scope is checked before the model is called."""
        if req is None or not isinstance(req.message, str) or not req.message.strip():
            return JSONResponse(status_code=400, content={"error": "No message provided"})

        try:
            result = await gateway.reply(req.message.strip(), req.context)
        except Exception as e:
            logger.error(f"Core AI Error: {type(e).__name__}")
            return JSONResponse(status_code=500, content={
                "error": "AI response failed",
                "reply": FALLBACK_REPLY,
            })

        return CoreAIResponse(reply=result.reply, filtered=result.filtered)

    @app.get("/api/health", response_model=HealthResponse)
    def health_check():
        """Reports which services are configured; calls no upstream service."""
        return HealthResponse(
            status="ok",
            services=ServiceStatus(
                stt=voice.stt_available,
                tts=voice.tts_available,
                coreAi=gateway.model_available,
            ),
        )

    return app


app = create_app()
