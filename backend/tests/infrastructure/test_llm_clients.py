"""Language Model Clients — retry and error mapping for Gemini and Anthropic.

Tests:
    - Gemini: JSON config when a schema is given, 429 retried, 4xx fails fast
    - Anthropic: schema folded into the prompt, attachments sent as blocks,
      Retry-After honored, retries exhausted mapped to rate_limit
"""

from types import SimpleNamespace

import anthropic
import httpx
import pytest
from google.genai import errors as genai_errors

from artiquity.core.errors import ProviderAPIError
from artiquity.core.provider_protocols import Attachment
from artiquity.infrastructure.anthropic_client import ResilientAnthropicClient
from artiquity.infrastructure.gemini_client import ResilientGeminiClient


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr("asyncio.sleep", fake_sleep)
    return delays


class FakeModels:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _gemini(*outcomes) -> tuple[ResilientGeminiClient, FakeModels]:
    client = ResilientGeminiClient("test-key", max_retries=2, base_delay_ms=10)
    models = FakeModels(*outcomes)
    client.client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return client, models


def _gemini_reply(text):
    return SimpleNamespace(text=text, usage_metadata=None)


async def test_gemini_json_mode_and_strip():
    client, models = _gemini(_gemini_reply('  {"a": 1}\n'))
    text = await client.generate("hi", schema={"type": "object"}, temperature=0.5)
    assert text == '{"a": 1}'
    config = models.calls[0]["config"]
    assert config.response_mime_type == "application/json"
    assert config.temperature == 0.5
    assert models.calls[0]["contents"] == ["hi"]


async def test_gemini_empty_text_is_empty_string():
    client, _ = _gemini(_gemini_reply(None))
    assert await client.generate("hi") == ""


async def test_gemini_rate_limit_retried(no_sleep):
    client, models = _gemini(
        genai_errors.ClientError(429, {"error": {"message": "slow down"}}),
        _gemini_reply("ok"),
    )
    assert await client.generate("hi") == "ok"
    assert len(models.calls) == 2
    assert len(no_sleep) == 1


async def test_gemini_client_error_not_retried():
    client, models = _gemini(genai_errors.ClientError(400, {"error": {"message": "bad"}}))
    with pytest.raises(ProviderAPIError) as exc:
        await client.generate("hi")
    assert exc.value.api_error_type == "client_error"
    assert len(models.calls) == 1


async def test_gemini_server_errors_exhaust_retries():
    error = genai_errors.ServerError(503, {"error": {"message": "down"}})
    client, models = _gemini(error, error, error)
    with pytest.raises(ProviderAPIError) as exc:
        await client.generate("hi")
    assert exc.value.api_error_type == "connection_error"
    assert len(models.calls) == 3


class FakeMessages:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _anthropic(*outcomes) -> tuple[ResilientAnthropicClient, FakeMessages]:
    client = ResilientAnthropicClient("test-key", max_retries=1, base_delay_ms=10)
    messages = FakeMessages(*outcomes)
    client.client = SimpleNamespace(messages=messages)
    return client, messages


def _anthropic_reply(text):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=3, output_tokens=5),
    )


def _rate_limit(retry_after="2"):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(429, headers={"retry-after": retry_after}, request=request)
    return anthropic.RateLimitError("rate limited", response=response, body=None)


async def test_anthropic_schema_in_prompt_and_attachments():
    client, messages = _anthropic(_anthropic_reply(" done "))
    text = await client.generate(
        "describe",
        schema={"type": "object"},
        attachments=(Attachment(b"%PDF", "application/pdf"), Attachment(b"png", "image/png")),
    )
    assert text == "done"
    content = messages.calls[0]["messages"][0]["content"]
    assert [block["type"] for block in content] == ["document", "image", "text"]
    assert content[-1]["text"].startswith("describe")
    assert '{"type": "object"}' in content[-1]["text"]
    assert messages.calls[0]["max_tokens"] == 8192


async def test_anthropic_retry_after_header(no_sleep):
    client, messages = _anthropic(_rate_limit("2"), _anthropic_reply("ok"))
    assert await client.generate("hi") == "ok"
    assert no_sleep == [2.0]


async def test_anthropic_rate_limit_exhausted():
    client, _ = _anthropic(_rate_limit(), _rate_limit())
    with pytest.raises(ProviderAPIError) as exc:
        await client.generate("hi")
    assert exc.value.api_error_type == "rate_limit"
    assert exc.value.context.retry_after_ms == 2000
