"""Root conftest — shared test configuration."""

import os

# Tests never reach real providers: every route that needs a key sees it unset
for key in ("GEMINI_API_KEY", "ANTHROPIC_API_KEY", "PERPLEXITY_API_KEY", "FAL_API_KEY"):
    os.environ[key] = ""
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
