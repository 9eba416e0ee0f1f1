"""License Template ORM — reusable starting points for the license wizard."""

from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class LicenseTemplate(Base):
    __tablename__ = "license_templates"

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    user_types: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    payment_model: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    geographic_restrictions: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now,
    )
