"""OAuth Token ORM — opaque bearer tokens issued by /auth/token and payments.

Invariants:
    - access_token unique, prefixed rsl_
    - user_id is null for client_credentials tokens
    - expires_at always set (TTL from settings)
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class OAuthToken(Base):
    """Issued access token with optional refresh token."""
    __tablename__ = "oauth_tokens"
    __table_args__ = (
        Index("idx_oauth_tokens_access_token", "access_token"),
        Index("idx_oauth_tokens_user_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    access_token: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    refresh_token: Mapped[str | None] = mapped_column(
        String(120), nullable=True, unique=True,
    )
    client_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("oauth_clients.id"), nullable=False,
    )
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True,
    )
    scope: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )

    client: Mapped["OAuthClient"] = relationship("OAuthClient", lazy="joined")
