from enum import Enum
from pydantic import BaseModel
from typing import Optional, Any

class ClassificationOutcome(str, Enum):
    ALLOWED = "allowed"
    GREETING = "greeting"
    OUT_OF_SCOPE = "out_of_scope"

    @property
    def allowed(self) -> bool:
        return self is not ClassificationOutcome.OUT_OF_SCOPE

class ReplyEnvelope(BaseModel):
    reply: str
    filtered: bool = False
    error: Optional[str] = None
    # Diagnostic only; never copied into an HTTP response
    detail: Optional[str] = None

class TranscriptResult(BaseModel):
    transcript: str = ""
    confidence: float = 0.0

    @property
    def speech_detected(self) -> bool:
        return bool(self.transcript) or self.confidence > 0

class CoreAIRequest(BaseModel):
    message: Optional[Any] = None
    # Opaque to the gateway; serialized into the prompt as given
    context: Optional[Any] = None

class CoreAIResponse(BaseModel):
    reply: str
    filtered: bool = False

class TTSRequest(BaseModel):
    text: Optional[Any] = None

class ServiceStatus(BaseModel):
    stt: bool
    tts: bool
    coreAi: bool

class HealthResponse(BaseModel):
    status: str = "ok"
    services: ServiceStatus
