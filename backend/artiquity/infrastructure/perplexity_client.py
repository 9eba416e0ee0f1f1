"""Perplexity Client — web-grounded chat completions over httpx.

Invariants:
    - Non-2xx answers and transport failures raise ProviderAPIError (never return None)
    - Citations and search results are passed through untouched; merging is core logic
    - One request per call, no retry: research answers are slow and the caller
      already has a canned fallback for unusable content
"""

import logging

import httpx

from artiquity.core.errors import ProviderAPIError
from artiquity.core.provider_protocols import ResearchResult

logger = logging.getLogger(__name__)

PROVIDER = "perplexity"

SEARCH_DOMAINS = (
    "reddit.com", "twitter.com", "tiktok.com", "instagram.com",
    "youtube.com", "artstation.com", "behance.net", "discord.com",
)


class PerplexityClient:
    def __init__(
        self,
        api_key: str,
        model: str = "sonar-pro",
        base_url: str = "https://api.perplexity.ai",
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _payload(self, system: str, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": 2000,
            "temperature": 0.7,
            "top_p": 0.9,
            "return_citations": True,
            "search_domain_filter": list(SEARCH_DOMAINS),
            "search_recency_filter": "month",
        }

    async def research(self, system: str, prompt: str) -> ResearchResult:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport,
            ) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=self._payload(system, prompt),
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            raise ProviderAPIError(PROVIDER, str(e) or "API timeout", "timeout") from e
        except httpx.HTTPError as e:
            raise ProviderAPIError(PROVIDER, str(e), "connection_error") from e

        if response.status_code >= 400:
            logger.error(
                f"Perplexity API error: {response.status_code} {response.text[:500]}",
                extra={"provider": PROVIDER, "status_code": response.status_code},
            )
            error_type = "rate_limit" if response.status_code == 429 else "client_error"
            if response.status_code >= 500:
                error_type = "server_error"
            raise ProviderAPIError(
                PROVIDER, f"HTTP {response.status_code}", error_type,
            )

        data = response.json()
        choices = data.get("choices") or [{}]
        content = ((choices[0] or {}).get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        logger.info(
            "Perplexity API success",
            extra={
                "provider": PROVIDER,
                "input_tokens": usage.get("prompt_tokens"),
                "output_tokens": usage.get("completion_tokens"),
            },
        )
        return ResearchResult(
            content=content,
            citations=list(data.get("citations") or []),
            search_results=list(data.get("search_results") or []),
        )
