"""Boundary Protocols — contracts between core services and external providers.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - Every network-bound provider is reached through one of these Protocols
    - Implementations provided by the API layer via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Schemas passed as plain dicts (OpenAPI subset with upper-case type names):
      both the Gemini and the Anthropic client can consume the same dict
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class Attachment:
    """Inline file handed to a multimodal model."""
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class ResearchResult:
    content: str
    citations: list[str] = field(default_factory=list)
    search_results: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class ChargeResult:
    success: bool
    transaction_id: str = ""
    amount: float = 0.0
    currency: str = "USD"
    error: str | None = None


@dataclass(frozen=True)
class RefundResult:
    success: bool
    refund_id: str = ""
    error: str | None = None


class LanguageModel(Protocol):
    """Text generation with optional JSON response schema."""
    provider: str

    async def generate(
        self,
        prompt: str,
        *,
        schema: dict | None = None,
        attachments: tuple[Attachment, ...] = (),
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str: ...


class ResearchClient(Protocol):
    """Web-grounded research (chat completion with citations)."""
    async def research(self, system: str, prompt: str) -> ResearchResult: ...


class ImageGenerator(Protocol):
    """Returns a URL (or data URL) of an image rendered from the prompt."""
    async def create_image(self, prompt: str) -> str: ...

    def preview_url(self, prompt: str) -> str: ...


class PaymentGateway(Protocol):
    async def charge(
        self, method: str, amount: float | None, currency: str | None,
    ) -> ChargeResult: ...
    async def refund(self, transaction_id: str) -> RefundResult: ...
