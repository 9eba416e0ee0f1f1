"""Resilient Anthropic Client — wraps AsyncAnthropic with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, 529 overloaded, connection): max retries with exponential backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to ProviderAPIError (core/errors.py)

Design Decisions:
    - Alternative LanguageModel behind llm_provider=anthropic: same generate()
      signature as ResilientGeminiClient so services never branch on provider
    - No native response schema: the schema is appended to the prompt as a JSON
      instruction and callers parse with core/json_extraction
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
"""

import asyncio
import base64
import json
import logging
import random

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from artiquity.core.errors import ErrorContext, ProviderAPIError
from artiquity.core.provider_protocols import Attachment

logger = logging.getLogger(__name__)

PROVIDER = "anthropic"

# ADR: OverloadedError (HTTP 529) is not re-exported by every SDK release.
# Detect via status code on APIStatusError instead of relying on private import.
_OVERLOADED_STATUS = 529
_DEFAULT_MAX_TOKENS = 8192


def _is_overloaded(e: APIError) -> bool:
    return isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS


def _attachment_block(attachment: Attachment) -> dict:
    data = base64.standard_b64encode(attachment.data).decode("ascii")
    kind = "document" if attachment.mime_type == "application/pdf" else "image"
    return {
        "type": kind,
        "source": {"type": "base64", "media_type": attachment.mime_type, "data": data},
    }


def _schema_instruction(schema: dict) -> str:
    return (
        "\n\nRespond with JSON only, no prose and no code fences. "
        f"The JSON must match this schema:\n{json.dumps(schema)}"
    )


class ResilientAnthropicClient:
    """Wraps Anthropic client with retry logic, timeouts, and error mapping."""

    provider = PROVIDER

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5",
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 60_000,
        timeout_seconds: int = 120,
    ):
        self.client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds)
        self.model = model
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def generate(
        self,
        prompt: str,
        *,
        schema: dict | None = None,
        attachments: tuple[Attachment, ...] = (),
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        context: ErrorContext | None = None,
    ) -> str:
        text = prompt + (_schema_instruction(schema) if schema is not None else "")
        content = [_attachment_block(a) for a in attachments]
        content.append({"type": "text", "text": text})
        kwargs: dict = {
            "model": self.model,
            "max_tokens": max_output_tokens or _DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": content}],
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        response = await self.create_message(context=context, **kwargs)
        return "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        ).strip()

    async def create_message(self, *, context: ErrorContext | None = None, **kwargs):
        """Create message with automatic retry on transient failures."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.messages.create(**kwargs)
                self._log_success(response, attempt)
                return response

            except RateLimitError as e:
                await self._handle_rate_limit(e, attempt, context)

            except (APIConnectionError, InternalServerError) as e:
                if isinstance(e, APITimeoutError):
                    raise ProviderAPIError(
                        PROVIDER, "API timeout", "timeout", context=context,
                    )
                await self._handle_transient_error(e, attempt, context)

            except APIError as e:
                if _is_overloaded(e):
                    await self._handle_transient_error(e, attempt, context)
                    continue
                raise ProviderAPIError(
                    PROVIDER, str(e), "client_error", context=context,
                )

        raise ProviderAPIError(PROVIDER, "Retries exhausted", "unknown", context=context)

    def _log_success(self, response, attempt: int) -> None:
        usage = response.usage
        logger.info(
            "Anthropic API success",
            extra={
                "provider": PROVIDER,
                "attempt": attempt + 1,
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )

    async def _handle_rate_limit(
        self, e: RateLimitError, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle rate limit error with retry or raise."""
        retry_after_ms = self._extract_retry_after(e)
        if attempt >= self.max_retries:
            raise ProviderAPIError(
                PROVIDER,
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
            extra={"provider": PROVIDER, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise ProviderAPIError(
                PROVIDER,
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Transient error, retry after {delay}ms: {e}",
            extra={"provider": PROVIDER, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        value = response.headers.get("retry-after")
        try:
            return int(value) * 1000 if value else None
        except ValueError:
            return None
