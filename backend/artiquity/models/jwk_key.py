"""JWK Key ORM — public verification keys published at /auth/key."""

from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class JwkKey(Base):
    __tablename__ = "jwk_keys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    key_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    key_type: Mapped[str] = mapped_column(String(10), nullable=False)
    use_type: Mapped[str] = mapped_column(String(10), nullable=False, default="sig")
    algorithm: Mapped[str] = mapped_column(String(20), nullable=False)
    public_key: Mapped[dict] = mapped_column(JSON, nullable=False)
    private_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
