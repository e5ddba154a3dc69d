"""
Chat model clients.
The gateway receives one of these at construction; an unconfigured
deployment gets UnconfiguredModelClient instead of a null reference.
"""

import httpx
from typing import Any, Dict, Optional

from .errors import ServiceUnconfigured, UpstreamError


class ModelClient:
    """Base class for chat model clients."""

    name = "model"
    available = True

    async def generate(self, prompt: str) -> str:
        """Submit a prompt and return the model's text reply."""
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class UnconfiguredModelClient(ModelClient):
    """Capability-absent model client: no credential was supplied at startup."""

    name = "unconfigured"
    available = False

    async def generate(self, prompt: str) -> str:
        raise ServiceUnconfigured("chat model")


class GeminiModelClient(ModelClient):
    """Google Gemini generateContent over REST."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/v1beta/models/{model}:generateContent"
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    def build_request(self, prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    def extract_response_text(self, response_body: Dict[str, Any]) -> Optional[str]:
        """Concatenate the text parts of the first candidate."""
        try:
            parts = response_body["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return None
        texts = [p["text"] for p in parts if isinstance(p, dict) and "text" in p]
        return "".join(texts) if texts else None

    async def generate(self, prompt: str) -> str:
        response = await self.http_client.post(
            self.url,
            headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
            json=self.build_request(prompt),
        )

        if response.status_code != 200:
            raise UpstreamError(
                f"Gemini API error: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        text = self.extract_response_text(response.json())
        if text is None:
            raise UpstreamError("Gemini API returned no text", status_code=response.status_code)
        return text

    async def aclose(self) -> None:
        await self.http_client.aclose()


def create_model_client(api_key: Optional[str], model: str, base_url: str, timeout: float = 120.0) -> ModelClient:
    if not api_key:
        return UnconfiguredModelClient()
    return GeminiModelClient(api_key, model=model, base_url=base_url, timeout=timeout)
