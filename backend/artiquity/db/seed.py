"""Default Data — the platform OAuth client and the two built-in license templates.

Invariants:
    - seed_defaults is idempotent: existing rows (matched by id / client_id) are left untouched
    - The default client secret is stored bcrypt-hashed, never in plaintext
    - Exactly one template (template-free) is flagged as default
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.infrastructure.security import hash_secret
from artiquity.models.license_template import LicenseTemplate
from artiquity.models.oauth_client import OAuthClient

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ROW_ID = "default-client"

DEFAULT_TEMPLATES = (
    {
        "id": "template-free",
        "name": "Free License",
        "description": "Free use with attribution required",
        "permissions": [
            {"type": "search", "allowed": True, "conditions": ["attribution"]},
            {"type": "ai-summarize", "allowed": True, "conditions": ["attribution"]},
        ],
        "user_types": [
            {"type": "individual", "allowed": True},
            {"type": "education", "allowed": True},
            {"type": "nonprofit", "allowed": True},
        ],
        "payment_model": {"type": "attribution", "attributionText": "Attribution required"},
        "geographic_restrictions": [],
        "is_default": True,
    },
    {
        "id": "template-commercial",
        "name": "Commercial License",
        "description": "Commercial use with payment required",
        "permissions": [
            {"type": t, "allowed": True, "conditions": ["payment"]}
            for t in ("train-ai", "search", "ai-summarize", "archive", "analysis")
        ],
        "user_types": [{
            "type": "commercial",
            "allowed": True,
            "pricing": {
                "perCrawl": 0.01, "perInference": 0.001,
                "monthlySubscription": 10, "currency": "USD",
            },
        }],
        "payment_model": {"type": "per-crawl", "amount": 0.01, "currency": "USD"},
        "geographic_restrictions": [],
        "is_default": False,
    },
)


async def seed_defaults(
    session: AsyncSession, client_id: str, client_secret: str,
) -> None:
    """Insert the default OAuth client and license templates when missing."""
    existing = await session.scalar(
        select(OAuthClient).where(OAuthClient.client_id == client_id)
    )
    if existing is None:
        session.add(OAuthClient(
            id=DEFAULT_CLIENT_ROW_ID,
            client_id=client_id,
            client_secret=hash_secret(client_secret),
            name="RSL Platform Default Client",
            redirect_uris=["http://localhost:3000/callback"],
            grant_types=["authorization_code", "client_credentials", "rsl"],
            scope="read,write,license",
        ))
        logger.info("Seeded default OAuth client", extra={"client_id": client_id})

    for template in DEFAULT_TEMPLATES:
        if await session.get(LicenseTemplate, template["id"]) is None:
            session.add(LicenseTemplate(**template))

    await session.commit()
