from pydantic import BaseModel
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv
import os

# Load .env before the class body below reads the environment.
# Variables already set in the process take precedence.
env_path = os.getenv("CORE_AI_ENV_FILE") or str(Path(__file__).parent.parent / '.env')
load_dotenv(dotenv_path=env_path)

def _flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")

class Settings(BaseModel):
    app_name: str = "Core AI Gateway"
    port: int = int(os.getenv("PORT", "3001"))
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Chat model
    gemini_api_key: Optional[str] = os.getenv("GEMINI_API_KEY") or None
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    gemini_base_url: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")

    # Speech services: service-account JSON bundle or a plain API key
    google_cloud_credentials: Optional[str] = os.getenv("GOOGLE_CLOUD_CREDENTIALS") or None
    google_speech_api_key: Optional[str] = os.getenv("GOOGLE_SPEECH_API_KEY") or None
    stt_base_url: str = os.getenv("GOOGLE_STT_BASE_URL", "https://speech.googleapis.com/v1")
    tts_base_url: str = os.getenv("GOOGLE_TTS_BASE_URL", "https://texttospeech.googleapis.com/v1")
    voice_stt_enabled: bool = _flag("VOICE_STT_ENABLED")
    voice_tts_enabled: bool = _flag("VOICE_TTS_ENABLED")

    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "10"))
    upstream_timeout_s: float = float(os.getenv("UPSTREAM_TIMEOUT_S", "120"))
    scope_policy_path: Optional[str] = os.getenv("SCOPE_POLICY_PATH") or None
    audit_path: str = os.getenv("AUDIT_PATH", "./audit/audit.jsonl")

settings = Settings()
