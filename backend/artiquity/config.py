"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded in routes)
    - get_settings() is cached (lru_cache) — single instance per process
    - Missing provider keys are allowed at startup; routes fail with
      ProviderNotConfiguredError when they need one

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - SQLite by default: the licensing schema boots with zero infrastructure;
      postgresql:// URLs still work for hosted deployments
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./artiquity.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    auto_create_schema: bool = True

    # Language models
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5"
    llm_max_retries: int = 3
    llm_timeout_seconds: int = 120
    llm_base_delay_ms: int = 1000
    llm_max_delay_ms: int = 60_000

    @field_validator("llm_provider")
    @classmethod
    def check_provider(cls, v: str) -> str:
        v = v.lower()
        if v not in ("gemini", "anthropic"):
            raise ValueError("llm_provider must be 'gemini' or 'anthropic'")
        return v

    # Research + images
    perplexity_api_key: str = ""
    perplexity_model: str = "sonar-pro"
    perplexity_base_url: str = "https://api.perplexity.ai"
    fal_api_key: str = ""
    fal_model: str = "fal-ai/nano-banana"
    fal_base_url: str = "https://fal.run"
    pollinations_base_url: str = "https://image.pollinations.ai/prompt"

    # Security
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24
    oauth_token_ttl_seconds: int = 3600
    default_client_id: str = "rsl-platform-client"
    default_client_secret: str = "rsl-platform-secret-key-change-in-production"

    # Rate limiting
    rate_limit_requests: int = 30
    rate_limit_window_seconds: int = 60
    user_rate_limit_requests: int = 100
    user_rate_limit_window_seconds: int = 900

    # Uploads
    max_upload_bytes: int = 100 * 1024 * 1024

    # Licensing
    license_server_url: str = "https://rslplatform.com/license"
    contact_email: str = "contact@rslplatform.com"
    public_base_url: str = "https://rslplatform.com"

    # Campaign deployment
    promote_base_url: str = "https://promote.fun"
    environment: str = "development"

    # Webhooks
    webhook_timeout_seconds: float = 10.0

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
