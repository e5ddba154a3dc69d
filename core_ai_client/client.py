"""Core AI Client SDK for the gateway's HTTP surface."""

import os
import requests
from typing import Dict, Any, Optional
from dataclasses import dataclass
from .exceptions import CoreAIError, CoreAIUnavailableError, CoreAIConnectionError, CoreAIValidationError


@dataclass
class ClientConfig:
    """Configuration for Core AI Client."""
    server_url: str
    timeout: int = 30
    verify_ssl: bool = True

    @classmethod
    def from_env(cls):
        """Create config from environment variables."""
        return cls(
            server_url=os.getenv("CORE_AI_SERVER_URL", "http://localhost:3001"),
            timeout=int(os.getenv("CORE_AI_TIMEOUT", "30")),
            verify_ssl=os.getenv("CORE_AI_VERIFY_SSL", "true").lower() == "true"
        )


class CoreAIClient:
    """
    Core AI Client - ask the scoped assistant and use its voice endpoints.

    Usage:
        from core_ai_client import CoreAIClient, ClientConfig

        client = CoreAIClient(ClientConfig(server_url="http://localhost:3001"))

        answer = client.ask("How much should I contribute?", context={"balance": 12000})
        if answer["filtered"]:
            ...  # out of scope, answer["reply"] is the fixed decline text

        audio = client.speak(answer["reply"])
    """

    def __init__(self, config: ClientConfig):
        """Initialize client with configuration."""
        self.config = config
        self.session = requests.Session()
        self.session.verify = config.verify_ssl

    def _url(self, endpoint: str) -> str:
        return f"{self.config.server_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Send a request and map gateway status codes to exceptions."""
        url = self._url(endpoint)

        try:
            response = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.exceptions.Timeout:
            raise CoreAIConnectionError(f"Request to {url} timed out after {self.config.timeout}s")
        except requests.exceptions.ConnectionError as e:
            raise CoreAIConnectionError(f"Failed to connect to Core AI gateway: {e}")

        if response.status_code == 503:
            raise CoreAIUnavailableError(self._error_text(response, "Service unavailable"))
        if response.status_code in (400, 413, 422):
            raise CoreAIValidationError(self._error_text(response, "Invalid request"))

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise CoreAIError(f"HTTP error from Core AI gateway: {e}")
        return response

    @staticmethod
    def _error_text(response: requests.Response, default: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict):
            return body.get("error") or body.get("detail") or default
        return default

    def ask(self, message: str, context: Optional[Any] = None) -> Dict[str, Any]:
        """
        Ask the scoped assistant a question.

        Args:
            message: User question (must not be blank)
            context: Optional account details to ground the answer

        Returns:
            Dict with ``reply`` and ``filtered``

        Raises:
            CoreAIValidationError: If the message is blank
            CoreAIError: On server error
        """
        payload: Dict[str, Any] = {"message": message}
        if context is not None:
            payload["context"] = context
        return self._request("POST", "/api/core-ai", json=payload).json()

    def transcribe(self, audio: bytes, mime_type: str = "audio/webm", filename: str = "audio.webm") -> Dict[str, Any]:
        """
        Transcribe an audio clip.

        Returns:
            Dict with ``transcript`` and ``confidence``; an empty transcript
            carries ``error: "No speech detected"``

        Raises:
            CoreAIUnavailableError: If speech-to-text is not configured
        """
        files = {"audio": (filename, audio, mime_type)}
        return self._request("POST", "/api/voice/stt", files=files).json()

    def speak(self, text: str) -> bytes:
        """
        Synthesize text to MP3 audio. The gateway redacts financial
        identifiers before synthesis.

        Raises:
            CoreAIUnavailableError: If text-to-speech is not configured
        """
        return self._request("POST", "/api/voice/tts", json={"text": text}).content

    def health(self) -> Dict[str, Any]:
        """
        Check which gateway capabilities are configured.

        Raises:
            CoreAIConnectionError: If server is unreachable
        """
        try:
            response = self.session.get(self._url("/api/health"), timeout=5)
            response.raise_for_status()
            return response.json()
        except Exception as e:
            raise CoreAIConnectionError(f"Health check failed: {e}")
