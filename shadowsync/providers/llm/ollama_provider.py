"""Ollama LLM provider adapter.

Ollama serves an OpenAI-compatible ``/v1`` API, so this adapter reuses the
``openai`` async client pointed at the local server.  Reachability is
checked against Ollama's native ``/api/tags`` endpoint with httpx.

Setup: install Ollama, ``ollama pull llama3.1``, then set
``OLLAMA_BASE_URL=http://localhost:11434``.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from shadowsync.config.settings import Settings
from shadowsync.interfaces.llm_provider import ILLMProvider
from shadowsync.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaLLMProvider(ILLMProvider):
    """LLM provider backed by a local Ollama server (default ``llama3.1``)."""

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url or _DEFAULT_BASE_URL}/v1",
            # Ollama ignores the key but the SDK insists on one.
            api_key="ollama",
        )
        self._text_model = settings.ollama_model or "llama3.1"

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        request: dict = {
            "model": self._text_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**request)
        except openai.APIError as exc:
            raise LLMError(
                message=f"Ollama API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content
        if content is None:
            raise LLMError(
                message="Ollama returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info("ollama_completion", model=self._text_model)
        return content

    def is_available(self) -> bool:
        """Return ``True`` if an Ollama base URL is configured."""
        return bool(self._base_url)

    async def validate_credentials(self) -> bool:
        """Check that the Ollama server answers on ``/api/tags``."""
        if not self.is_available():
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self._base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

    def get_provider_name(self) -> str:
        return "ollama"
