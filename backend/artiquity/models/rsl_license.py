"""RSL License ORM — persisted license documents and their rendered XML.

Invariants:
    - license_id is the public id (rsl_<hex>), unique; id is internal
    - content_id is the content hash the license covers
    - xml_content is always the XML rendered from the stored JSON columns
    - Deletion is soft: is_active=False

Design Decisions:
    - JSON columns for permissions/user_types/...: stored exactly as the camelCase
      document sections so GET returns what POST accepted (ADR: no per-section tables)
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer, Boolean, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class RslLicense(Base):
    """A license document owned by a user."""
    __tablename__ = "rsl_licenses"
    __table_args__ = (
        Index("idx_rsl_licenses_user_id", "user_id"),
        Index("idx_rsl_licenses_content_id", "content_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    license_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False,
    )
    content_id: Mapped[str] = mapped_column(String(200), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    file_hash: Mapped[str] = mapped_column(String(200), nullable=False)
    content_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    xml_content: Mapped[str] = mapped_column(Text, nullable=False)
    permissions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    user_types: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    geographic_restrictions: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    payment_model: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    warranty_declaration: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict,
    )
    disclaimer_config: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
