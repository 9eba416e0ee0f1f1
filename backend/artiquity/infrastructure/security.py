"""Security Primitives — password hashing, JWT issue/verify, opaque token generation.

Invariants:
    - Passwords and client secrets are stored only as bcrypt hashes
    - JWTs carry sub (user id), email, userType, countryCode, iat, exp
    - decode_jwt raises PermissionDeniedError for any invalid or expired token
    - Opaque tokens: access rsl_<32 hex>, refresh rsl_refresh_<32 hex>, secrets 64 hex
"""

import secrets
import uuid
from datetime import datetime, timedelta

import bcrypt
import jwt

from artiquity.core.errors import PermissionDeniedError
from artiquity.core.timestamps import utc_now


def hash_secret(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_secret(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def new_access_token() -> str:
    return f"rsl_{uuid.uuid4().hex}"


def new_refresh_token() -> str:
    return f"rsl_refresh_{uuid.uuid4().hex}"


def new_client_secret() -> str:
    return secrets.token_hex(32)


def create_jwt(
    claims: dict,
    secret: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60,
    now: datetime | None = None,
) -> str:
    issued = now or utc_now()
    payload = {
        **claims,
        "iat": issued,
        "exp": issued + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_jwt(token: str, secret: str, algorithm: str = "HS256") -> dict:
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError as e:
        raise PermissionDeniedError("Invalid or expired token", code="FORBIDDEN") from e
