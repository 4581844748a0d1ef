"""
Tests for the text generation backends.

HTTP and the Anthropic client are mocked; nothing leaves the machine.
"""

import sys
import asyncio
import pytest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from service_request.errors import GenerationError
from service_request.llm_client import (
    ClaudeTextGenerator,
    OllamaTextGenerator,
    SamplingConfig,
    get_text_generator,
)

SAMPLING = SamplingConfig(temperature=0.85, top_p=0.9, max_tokens=512)


# ============ Claude ============

class TestClaudeTextGenerator:
    """Tests for ClaudeTextGenerator."""

    def _with_reply(self, *texts):
        gen = ClaudeTextGenerator(model="claude-test", api_key="sk-test")
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[SimpleNamespace(type="text", text=t) for t in texts],
            stop_reason="end_turn",
        ))
        gen._client = client
        return gen, client

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        gen = ClaudeTextGenerator(api_key=None)

        assert gen.available is False
        with pytest.raises(GenerationError):
            asyncio.run(gen.generate("prompt", SAMPLING))

    def test_passes_sampling(self):
        gen, client = self._with_reply('{"a": 1}')

        text = asyncio.run(gen.generate("make a record", SAMPLING))

        assert text == '{"a": 1}'
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["temperature"] == 0.85
        assert kwargs["top_p"] == 0.9
        assert kwargs["max_tokens"] == 512
        assert kwargs["messages"] == [{"role": "user", "content": "make a record"}]

    def test_joins_text_blocks(self):
        gen, _ = self._with_reply('{"a": ', "1}")

        assert asyncio.run(gen.generate("p", SAMPLING)) == '{"a": 1}'

    def test_api_error_wrapped(self):
        gen, client = self._with_reply()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client.messages.create.side_effect = anthropic.APIConnectionError(request=request)

        with pytest.raises(GenerationError):
            asyncio.run(gen.generate("p", SAMPLING))

    def test_client_reused_then_closed(self):
        gen, client = self._with_reply('{"a": 1}')
        client.close = AsyncMock()

        asyncio.run(gen.generate("p", SAMPLING))
        asyncio.run(gen.generate("p", SAMPLING))
        asyncio.run(gen.aclose())

        assert client.messages.create.await_count == 2
        client.close.assert_awaited_once()
        assert gen._client is None

    def test_close_before_use(self):
        gen = ClaudeTextGenerator(model="claude-test", api_key="sk-test")

        asyncio.run(gen.aclose())

        assert gen._client is None


# ============ Ollama ============

class TestOllamaTextGenerator:
    """Tests for OllamaTextGenerator."""

    def test_request_payload(self):
        gen = OllamaTextGenerator(model="llama3", base_url="http://ollama:11434/", timeout=5)

        with patch("service_request.llm_client.requests.post") as mock_post:
            mock_post.return_value.json.return_value = {"response": '{"a": 1}'}
            mock_post.return_value.raise_for_status = MagicMock()

            text = asyncio.run(gen.generate("prompt", SAMPLING))

        assert text == '{"a": 1}'
        url = mock_post.call_args.args[0]
        payload = mock_post.call_args.kwargs["json"]
        assert url == "http://ollama:11434/api/generate"
        assert payload["model"] == "llama3"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.85, "top_p": 0.9, "num_predict": 512}
        assert mock_post.call_args.kwargs["timeout"] == 5

    def test_connection_error_wrapped(self):
        gen = OllamaTextGenerator()

        with patch("service_request.llm_client.requests.post",
                   side_effect=requests.ConnectionError("refused")):
            with pytest.raises(GenerationError) as exc_info:
                asyncio.run(gen.generate("prompt", SAMPLING))

        assert "refused" in str(exc_info.value)

    def test_http_error_wrapped(self):
        gen = OllamaTextGenerator()

        with patch("service_request.llm_client.requests.post") as mock_post:
            mock_post.return_value.raise_for_status.side_effect = requests.HTTPError("500")
            with pytest.raises(GenerationError):
                asyncio.run(gen.generate("prompt", SAMPLING))


# ============ Factory ============

class TestGetTextGenerator:

    def test_claude(self):
        assert isinstance(get_text_generator("claude"), ClaudeTextGenerator)

    def test_ollama(self):
        assert isinstance(get_text_generator("Ollama"), OllamaTextGenerator)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_text_generator("gpt")
