"""
Text-generation client for release prompts.

Provides an async interface over Gemini, Ollama and OpenAI-compatible
generate APIs. Returns plain text; callers own parsing.
"""
import logging
import os
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the provider answers but yields no usable text."""


class LLMClient:
    """Async client for a single text-generation call."""

    def __init__(
        self,
        provider: str = "gemini",
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        temperature: float = 0.7,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.provider = (provider or "gemini").lower()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.temperature = temperature
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the generated text.

        Args:
            prompt: Full instruction text

        Returns:
            Generated free-form text

        Raises:
            httpx.HTTPError: transport or status failure
            GenerationError: unknown provider or empty answer
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                if self.provider == "gemini":
                    text = await self._generate_gemini(client, prompt)
                elif self.provider == "ollama":
                    text = await self._generate_ollama(client, prompt)
                elif self.provider == "openai_compatible":
                    text = await self._generate_openai(client, prompt)
                else:
                    raise GenerationError(f"Unknown provider: {self.provider}")
            except httpx.TimeoutException as e:
                logger.error(f"[LLM] Request timeout for model {self.model}: {e}")
                raise
            except httpx.HTTPStatusError as e:
                logger.error(f"[LLM] HTTP error for model {self.model}: {e.response.status_code} - {e.response.text[:200]}")
                raise
            except httpx.HTTPError as e:
                logger.error(f"[LLM] Request failed for model {self.model}: {e}")
                raise

        if not text:
            raise GenerationError(f"Empty response from {self.provider} model {self.model}")
        return text

    async def _generate_gemini(self, client: httpx.AsyncClient, prompt: str) -> str:
        response = await client.post(
            f"{self.base_url}/v1beta/models/{self.model}:generateContent",
            params={"key": self.api_key} if self.api_key else None,
            json={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {"temperature": self.temperature},
            },
        )
        response.raise_for_status()
        data: Dict[str, Any] = response.json()
        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))

    async def _generate_ollama(self, client: httpx.AsyncClient, prompt: str) -> str:
        response = await client.post(
            f"{self.base_url}/api/generate",
            json={
                "model": self.model,
                "prompt": prompt,
                "options": {"temperature": self.temperature},
                "stream": False,
                "keep_alive": "24h",
            },
        )
        response.raise_for_status()
        return str(response.json().get("response", ""))

    async def _generate_openai(self, client: httpx.AsyncClient, prompt: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        response = await client.post(
            f"{self.base_url}/chat/completions",
            headers=headers,
            json={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": self.temperature,
            },
        )
        response.raise_for_status()
        data = response.json()
        return str(data.get("choices", [{}])[0].get("message", {}).get("content", "") or "")


# Global client instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the process-wide LLM client from settings."""
    global _llm_client

    if _llm_client is None:
        api_key = os.environ.get(settings.ott_llm_api_key_env) if settings.ott_llm_api_key_env else None
        _llm_client = LLMClient(
            provider=settings.ott_llm_provider,
            model=settings.ott_llm_model,
            base_url=settings.ott_llm_api_base,
            api_key=api_key,
            timeout=settings.ott_llm_timeout_seconds,
            temperature=settings.ott_llm_temperature,
        )

    return _llm_client
