"""Resilient Gemini Client — wraps google-genai with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter
    - Transient errors (5xx, connection): max llm_max_retries retries with exponential backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - Timeouts: immediate failure with api_error_type "timeout"
    - All failures mapped to ProviderAPIError (core/errors.py)
    - A response without text is returned as "" (callers apply their own fallback)

Design Decisions:
    - Same retry shape as ResilientAnthropicClient so both satisfy LanguageModel
      and fail identically from the caller's point of view
    - JSON mode when a schema is given: response_mime_type application/json plus
      response_schema, the model's native structured output
"""

import asyncio
import logging
import random

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from artiquity.core.errors import ErrorContext, ProviderAPIError
from artiquity.core.provider_protocols import Attachment

logger = logging.getLogger(__name__)

PROVIDER = "gemini"
_RATE_LIMIT_STATUS = 429


class ResilientGeminiClient:
    """Wraps the google-genai async client with retry logic and error mapping."""

    provider = PROVIDER

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 60_000,
        timeout_seconds: int = 120,
    ):
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout_seconds * 1000),
        )
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
        """Generate text (JSON text when schema is given) with automatic retry."""
        contents: list = [
            types.Part.from_bytes(data=a.data, mime_type=a.mime_type)
            for a in attachments
        ]
        contents.append(prompt)
        config = self._build_config(schema, temperature, max_output_tokens)

        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.aio.models.generate_content(
                    model=self.model, contents=contents, config=config,
                )
                self._log_success(response, attempt)
                return (response.text or "").strip()

            except genai_errors.APIError as e:
                if e.code == _RATE_LIMIT_STATUS:
                    await self._handle_rate_limit(attempt, context)
                elif isinstance(e, genai_errors.ServerError):
                    await self._handle_transient_error(e, attempt, context)
                else:
                    raise ProviderAPIError(
                        PROVIDER, str(e), "client_error", context=context,
                    )

            except httpx.TimeoutException:
                raise ProviderAPIError(
                    PROVIDER, "API timeout", "timeout", context=context,
                )

            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, context)

        # Unreachable: the handlers raise on the final attempt
        raise ProviderAPIError(PROVIDER, "Retries exhausted", "unknown", context=context)

    def _build_config(
        self,
        schema: dict | None,
        temperature: float | None,
        max_output_tokens: int | None,
    ) -> types.GenerateContentConfig:
        kwargs: dict = {}
        if schema is not None:
            kwargs["response_mime_type"] = "application/json"
            kwargs["response_schema"] = schema
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_output_tokens is not None:
            kwargs["max_output_tokens"] = max_output_tokens
        return types.GenerateContentConfig(**kwargs)

    def _log_success(self, response, attempt: int) -> None:
        usage = getattr(response, "usage_metadata", None)
        logger.info(
            "Gemini API success",
            extra={
                "provider": PROVIDER,
                "attempt": attempt + 1,
                "input_tokens": getattr(usage, "prompt_token_count", None),
                "output_tokens": getattr(usage, "candidates_token_count", None),
            },
        )

    async def _handle_rate_limit(self, attempt: int, context: ErrorContext | None) -> None:
        if attempt >= self.max_retries:
            raise ProviderAPIError(
                PROVIDER, "Rate limit exceeded after retries", "rate_limit",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Gemini rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
            extra={"provider": PROVIDER, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        if attempt >= self.max_retries:
            raise ProviderAPIError(
                PROVIDER,
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Gemini transient error, retry after {delay}ms: {e}",
            extra={"provider": PROVIDER, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
