"""Audit Trail ORM — append-only log of license lifecycle actions.

Invariants:
    - Rows are never updated or deleted
    - action is a snake_case verb phrase (license_created, license_viewed, payment_refunded, ...)
    - license_id and user_id are nullable (some actions have no license or anonymous callers)
"""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class AuditEntry(Base):
    __tablename__ = "audit_trail"
    __table_args__ = (
        Index("idx_audit_trail_license_id", "license_id"),
        Index("idx_audit_trail_user_id", "user_id"),
        Index("idx_audit_trail_timestamp", "timestamp"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    license_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("rsl_licenses.id"), nullable=True,
    )
    user_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
