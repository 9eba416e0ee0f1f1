"""API Dependencies — providers, principals and rate limits injected into routes.

Invariants:
    - Provider clients are process singletons, created on first use from settings
    - A missing API key surfaces as ProviderNotConfiguredError (503) at request
      time, never at startup
    - JWT principal: 401 when the header is missing, 403 when the token is
      invalid, expired or names an unknown/inactive user
    - OAuth principal: 401 when the token is missing, unknown, expired or its
      client is inactive
    - Scopes are split on commas and whitespace

Design Decisions:
    - Every provider is a plain dependency function so tests swap it through
      app.dependency_overrides with flat fakes (no monkeypatching of modules)
    - Rate limits are slowapi shared limits on ip_rate_limit and
      user_rate_limit; the OAuth principal is left on request.state so the
      licensing budget is keyed by its owner
"""

import logging
import re
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.config import get_settings
from artiquity.core.errors import (
    AuthenticationError, PermissionDeniedError, ProviderNotConfiguredError,
)
from artiquity.core.provider_protocols import (
    ImageGenerator, LanguageModel, PaymentGateway, ResearchClient,
)
from artiquity.core.timestamps import is_expired
from artiquity.infrastructure.anthropic_client import ResilientAnthropicClient
from artiquity.infrastructure.database import get_db, get_db_manager
from artiquity.infrastructure.gemini_client import ResilientGeminiClient
from artiquity.infrastructure.image_client import ImageClient
from artiquity.infrastructure.payment_gateway import MockPaymentGateway
from artiquity.infrastructure.perplexity_client import PerplexityClient
from artiquity.infrastructure.rate_limiter import (
    AI_SCOPE, LICENSING_SCOPE, ai_limit, limiter, principal_key, user_limit,
)
from artiquity.infrastructure.security import decode_jwt
from artiquity.infrastructure.webhook_sender import WebhookSender
from artiquity.models.oauth_token import OAuthToken
from artiquity.models.user import User
from artiquity.services.webhook_dispatch import WebhookDispatcher

logger = logging.getLogger(__name__)

_SCOPE_SEPARATOR = re.compile(r"[,\s]+")


# ─── Principals ─────────────────────────────────────────────────

@dataclass(frozen=True)
class CurrentUser:
    """Caller authenticated with a user JWT."""
    id: str
    email: str
    user_type: str
    country_code: str | None = None


@dataclass(frozen=True)
class OAuthPrincipal:
    """Caller authenticated with an OAuth access token."""
    client_id: str
    client_row_id: str
    scope: str
    id: str | None = None
    email: str | None = None
    user_type: str | None = None
    country_code: str | None = None

    @property
    def owner_id(self) -> str:
        """Webhook owner: the token's user, or the client for client_credentials tokens."""
        return self.id or self.client_id


def split_scopes(scope: str | None) -> set[str]:
    return {s for s in _SCOPE_SEPARATOR.split(scope or "") if s}


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request, db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError()
    settings = get_settings()
    claims = decode_jwt(token, settings.jwt_secret, settings.jwt_algorithm)
    user = await db.get(User, claims.get("sub"))
    if user is None or not user.is_active:
        raise PermissionDeniedError("Invalid or expired token", code="FORBIDDEN")
    return CurrentUser(
        id=user.id, email=user.email,
        user_type=user.user_type, country_code=user.country_code,
    )


async def get_oauth_principal(
    request: Request, db: AsyncSession = Depends(get_db),
) -> OAuthPrincipal:
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError()
    row = await db.scalar(select(OAuthToken).where(OAuthToken.access_token == token))
    if row is None:
        raise AuthenticationError("Invalid access token", code="INVALID_TOKEN")
    if is_expired(row.expires_at):
        raise AuthenticationError("Access token has expired", code="TOKEN_EXPIRED")
    if not row.client.is_active:
        raise AuthenticationError("OAuth client is inactive", code="INVALID_CLIENT")

    user = await db.get(User, row.user_id) if row.user_id else None
    principal = OAuthPrincipal(
        client_id=row.client.client_id,
        client_row_id=row.client.id,
        scope=row.scope,
        id=user.id if user else None,
        email=user.email if user else None,
        user_type=user.user_type if user else None,
        country_code=user.country_code if user else None,
    )
    request.state.oauth_principal = principal
    return principal


def require_scope(scope: str):
    """Dependency factory: the OAuth token must carry `scope`."""

    async def check(
        principal: OAuthPrincipal = Depends(get_oauth_principal),
    ) -> OAuthPrincipal:
        if scope not in split_scopes(principal.scope):
            raise PermissionDeniedError(
                f"Scope '{scope}' required", code="INSUFFICIENT_SCOPE",
            )
        return principal

    return check


# ─── Rate limits ────────────────────────────────────────────────

@limiter.shared_limit(ai_limit, scope=AI_SCOPE)
async def ip_rate_limit(request: Request) -> None:
    """Counts the request against the caller IP's AI budget."""


@limiter.shared_limit(user_limit, scope=LICENSING_SCOPE, key_func=principal_key)
async def user_rate_limit(
    request: Request,
    principal: OAuthPrincipal = Depends(get_oauth_principal),
) -> None:
    """Counts the request against the OAuth owner's licensing budget."""


# ─── Providers ──────────────────────────────────────────────────

_language_models: dict[str, LanguageModel] = {}
_research_client: PerplexityClient | None = None
_image_client: ImageClient | None = None
_webhook_sender: WebhookSender | None = None


def _build_language_model() -> LanguageModel:
    settings = get_settings()
    retry = {
        "max_retries": settings.llm_max_retries,
        "base_delay_ms": settings.llm_base_delay_ms,
        "max_delay_ms": settings.llm_max_delay_ms,
        "timeout_seconds": settings.llm_timeout_seconds,
    }
    if settings.llm_provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ProviderNotConfiguredError("anthropic", "anthropic_api_key")
        return ResilientAnthropicClient(
            settings.anthropic_api_key, settings.anthropic_model, **retry,
        )
    if not settings.gemini_api_key:
        raise ProviderNotConfiguredError("gemini", "gemini_api_key")
    return ResilientGeminiClient(settings.gemini_api_key, settings.gemini_model, **retry)


def get_language_model() -> LanguageModel:
    """Configured language model; 503 when its API key is missing."""
    provider = get_settings().llm_provider
    if provider not in _language_models:
        _language_models[provider] = _build_language_model()
    return _language_models[provider]


def get_optional_language_model() -> LanguageModel | None:
    """Same as get_language_model, but None instead of 503 when unconfigured."""
    try:
        return get_language_model()
    except ProviderNotConfiguredError as e:
        logger.info(f"Language model unavailable: {e.message}")
        return None


def get_research_client() -> ResearchClient:
    global _research_client
    if _research_client is None:
        settings = get_settings()
        if not settings.perplexity_api_key:
            raise ProviderNotConfiguredError("perplexity", "perplexity_api_key")
        _research_client = PerplexityClient(
            settings.perplexity_api_key,
            settings.perplexity_model,
            settings.perplexity_base_url,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    return _research_client


def get_image_generator() -> ImageGenerator:
    """FAL when configured; the client itself falls back to Pollinations."""
    global _image_client
    if _image_client is None:
        settings = get_settings()
        _image_client = ImageClient(
            settings.fal_api_key,
            settings.fal_model,
            settings.fal_base_url,
            settings.pollinations_base_url,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    return _image_client


def get_payment_gateway() -> PaymentGateway:
    return MockPaymentGateway()


def get_webhook_sender() -> WebhookSender:
    global _webhook_sender
    if _webhook_sender is None:
        _webhook_sender = WebhookSender(get_settings().webhook_timeout_seconds)
    return _webhook_sender


def get_webhook_dispatcher(
    sender: WebhookSender = Depends(get_webhook_sender),
) -> WebhookDispatcher:
    return WebhookDispatcher(get_db_manager().session, sender)
