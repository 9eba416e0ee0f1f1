"""Auth Routes — user accounts, OAuth 2.0 token issuance, introspection and JWKS.

Invariants:
    - Client secrets and passwords are compared against bcrypt hashes only
    - Every issued access token is rsl_<hex>, lives oauth_token_ttl_seconds
      and is persisted in oauth_tokens
    - A client may only use grant types it was registered with
    - The rsl grant is bound to the owner of an active license and always
      carries scope "license"
    - Introspection never errors on an unknown or expired token: {active: false}

Design Decisions:
    - Dynamic registration returns the plaintext secret once; only its hash is
      stored, so a lost secret means registering a new client
    - Users log in with a JWT for license management; OAuth tokens are for
      licensees and machine clients (ADR: two principals, two dependencies)
"""

import logging
import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from artiquity.config import get_settings
from artiquity.core.domain_types import GrantType
from artiquity.core.errors import (
    AuthenticationError, ConflictError, InvalidClientError, ValidationFailedError,
)
from artiquity.core.timestamps import as_utc, is_expired, utc_now
from artiquity.infrastructure.database import get_db
from artiquity.infrastructure.security import (
    create_jwt, hash_secret, new_access_token, new_client_secret,
    new_refresh_token, verify_secret,
)
from artiquity.models.jwk_key import JwkKey
from artiquity.models.oauth_client import OAuthClient
from artiquity.models.oauth_token import OAuthToken
from artiquity.models.rsl_license import RslLicense
from artiquity.models.user import User
from artiquity.schemas.auth import (
    ClientRegistration, ClientRegistrationResponse, IntrospectionRequest,
    LoginRequest, LoginResponse, TokenRequest, TokenResponse, UserCreate,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

TOKEN_ISSUER = "rsl-platform"
LICENSE_SCOPE = "license"


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id, email=user.email,
        user_type=user.user_type, country_code=user.country_code,
    )


# ─── Users ──────────────────────────────────────────────────────

@router.post(
    "/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def register_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create a licensor account."""
    existing = await db.scalar(select(User).where(User.email == body.email))
    if existing is not None:
        raise ConflictError("Email is already registered", code="EMAIL_TAKEN")
    user = User(
        email=body.email,
        password_hash=hash_secret(body.password),
        user_type=body.user_type.value,
        country_code=body.country_code,
    )
    db.add(user)
    await db.commit()
    logger.info("User registered", extra={"user_id": user.id})
    return _user_response(user)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await db.scalar(
        select(User).where(User.email == body.email.strip().lower()),
    )
    if user is None or not user.is_active or not verify_secret(body.password, user.password_hash):
        raise AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")
    settings = get_settings()
    token = create_jwt(
        {
            "sub": user.id,
            "email": user.email,
            "userType": user.user_type,
            "countryCode": user.country_code,
        },
        settings.jwt_secret,
        settings.jwt_algorithm,
        settings.jwt_expire_minutes,
    )
    return LoginResponse(
        access_token=token,
        expires_in=settings.jwt_expire_minutes * 60,
        user=_user_response(user),
    )


# ─── OAuth 2.0 ──────────────────────────────────────────────────

async def _authenticate_client(
    db: AsyncSession, client_id: str, client_secret: str,
) -> OAuthClient:
    client = await db.scalar(
        select(OAuthClient).where(
            OAuthClient.client_id == client_id,
            OAuthClient.is_active.is_(True),
        )
    )
    if client is None or not verify_secret(client_secret, client.client_secret):
        logger.warning("Client authentication failed", extra={"client_id": client_id})
        raise InvalidClientError()
    return client


async def _issue_token(
    db: AsyncSession,
    client: OAuthClient,
    scope: str,
    user_id: str | None = None,
    with_refresh: bool = False,
) -> OAuthToken:
    ttl = get_settings().oauth_token_ttl_seconds
    token = OAuthToken(
        access_token=new_access_token(),
        refresh_token=new_refresh_token() if with_refresh else None,
        client_id=client.id,
        user_id=user_id,
        scope=scope,
        expires_at=utc_now() + timedelta(seconds=ttl),
    )
    db.add(token)
    await db.commit()
    return token


@router.post("/token", response_model=TokenResponse, response_model_exclude_none=True)
async def issue_token(body: TokenRequest, db: AsyncSession = Depends(get_db)):
    """OAuth 2.0 token endpoint (client_credentials, authorization_code, rsl)."""
    client = await _authenticate_client(db, body.client_id, body.client_secret)
    if body.grant_type.value not in (client.grant_types or []):
        raise ValidationFailedError(
            f"Client is not allowed to use grant type '{body.grant_type.value}'",
            field="grant_type", code="UNAUTHORIZED_CLIENT",
        )

    license_id = None
    if body.grant_type == GrantType.RSL:
        license_row = await db.scalar(
            select(RslLicense).where(
                RslLicense.license_id == body.license_id,
                RslLicense.is_active.is_(True),
            )
        )
        if license_row is None:
            raise ValidationFailedError(
                "Invalid or inactive license", field="license_id", code="INVALID_REQUEST",
            )
        license_id = license_row.license_id
        token = await _issue_token(db, client, LICENSE_SCOPE, user_id=license_row.user_id)
    else:
        token = await _issue_token(
            db, client, body.scope or client.scope,
            with_refresh=body.grant_type == GrantType.AUTHORIZATION_CODE,
        )

    logger.info(
        f"Issued {body.grant_type.value} token",
        extra={"client_id": client.client_id, "license_id": license_id},
    )
    return TokenResponse(
        access_token=token.access_token,
        expires_in=get_settings().oauth_token_ttl_seconds,
        scope=token.scope,
        refresh_token=token.refresh_token,
        rsl_license_id=license_id,
    )


@router.post("/introspect")
async def introspect(body: IntrospectionRequest, db: AsyncSession = Depends(get_db)):
    """RFC 7662 token introspection."""
    token = await db.scalar(
        select(OAuthToken).where(OAuthToken.access_token == body.token),
    )
    if token is None or is_expired(token.expires_at):
        return {"active": False}
    user = await db.get(User, token.user_id) if token.user_id else None
    return {
        "active": True,
        "scope": token.scope,
        "client_id": token.client.client_id,
        "username": user.email if user else None,
        "exp": int(as_utc(token.expires_at).timestamp()),
        "iat": int(as_utc(token.created_at).timestamp()),
        "sub": token.user_id,
        "aud": token.client.client_id,
        "iss": TOKEN_ISSUER,
    }


@router.get("/key")
async def jwks(db: AsyncSession = Depends(get_db)):
    """Public signing keys (JWKS)."""
    rows = (await db.scalars(
        select(JwkKey).where(JwkKey.is_active.is_(True)),
    )).all()
    return {
        "keys": [
            {
                "kty": key.key_type,
                "use": key.use_type,
                "key_ops": ["verify"],
                "alg": key.algorithm,
                "kid": key.key_id,
                **(key.public_key or {}),
            }
            for key in rows
            if not is_expired(key.expires_at)
        ],
    }


@router.post(
    "/register",
    response_model=ClientRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_client(body: ClientRegistration, db: AsyncSession = Depends(get_db)):
    """RFC 7591 dynamic client registration."""
    client_id = f"rsl_{uuid.uuid4().hex}"
    secret = new_client_secret()
    issued = utc_now()
    db.add(OAuthClient(
        client_id=client_id,
        client_secret=hash_secret(secret),
        name=body.name,
        redirect_uris=body.redirect_uris,
        grant_types=[g.value for g in body.grant_types],
        scope=body.scope,
    ))
    await db.commit()
    logger.info(f"OAuth client '{body.name}' registered", extra={"client_id": client_id})
    return ClientRegistrationResponse(
        client_id=client_id,
        client_secret=secret,
        client_id_issued_at=int(issued.timestamp()),
    )
