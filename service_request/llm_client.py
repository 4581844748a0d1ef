"""
Text generation backends.

The pipeline only depends on the TextGenerator contract:
    await backend.generate(prompt, sampling) -> str

Two implementations, picked by AI_CONFIG["provider"]:
- claude: Anthropic Messages API (paid)
- ollama: local Ollama server (free)
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol

import anthropic
import requests

from config import AI_CONFIG
from .errors import GenerationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplingConfig:
    """Sampling knobs. High temperature so repeated runs don't converge on one record."""
    temperature: float = 0.85
    top_p: float = 0.9
    max_tokens: int = 1024


DEFAULT_SAMPLING = SamplingConfig()


class TextGenerator(Protocol):
    async def generate(self, prompt: str, sampling: SamplingConfig) -> str:
        ...

    async def aclose(self) -> None:
        ...


class ClaudeTextGenerator:
    """Claude via the async Anthropic client."""

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        self.model = model or AI_CONFIG["claude_model"]
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._client = None

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def generate(self, prompt: str, sampling: SamplingConfig) -> str:
        if not self.available:
            raise GenerationError("ANTHROPIC_API_KEY is not set")

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=sampling.max_tokens,
                temperature=sampling.temperature,
                top_p=sampling.top_p,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise GenerationError(f"Claude request failed: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        logger.debug(f"Claude returned {len(text)} chars (stop_reason={response.stop_reason})")
        return text

    async def aclose(self):
        if self._client is not None:
            await self._client.close()
            self._client = None


class OllamaTextGenerator:
    """Local Ollama server. requests is blocking, so calls run in a worker thread."""

    def __init__(self, model: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[int] = None):
        self.model = model or AI_CONFIG["ollama_model"]
        self.url = (base_url or AI_CONFIG["ollama_url"]).rstrip("/") + "/api/generate"
        self.timeout = timeout or AI_CONFIG["request_timeout"]

    def _request(self, prompt: str, sampling: SamplingConfig) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": sampling.temperature,
                "top_p": sampling.top_p,
                "num_predict": sampling.max_tokens,
            },
        }
        try:
            resp = requests.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json().get("response", "")
        except requests.RequestException as e:
            raise GenerationError(f"Ollama request failed: {e}") from e
        except ValueError as e:
            raise GenerationError(f"Ollama returned a non-JSON response: {e}") from e

    async def generate(self, prompt: str, sampling: SamplingConfig) -> str:
        return await asyncio.to_thread(self._request, prompt, sampling)

    async def aclose(self):
        # one-off requests.post calls, no pooled session
        pass


def get_text_generator(provider: Optional[str] = None) -> TextGenerator:
    """Backend for the configured (or given) provider."""
    provider = (provider or AI_CONFIG["provider"]).lower()
    if provider == "claude":
        return ClaudeTextGenerator()
    if provider == "ollama":
        return OllamaTextGenerator()
    raise ValueError(f"Unknown generation provider: {provider}")
