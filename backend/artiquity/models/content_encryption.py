"""Content Encryption ORM — per-license content key references.

Schema only; no route reads or writes it yet.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class ContentEncryption(Base):
    __tablename__ = "content_encryption"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    license_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("rsl_licenses.id"), nullable=False,
    )
    key_id: Mapped[str] = mapped_column(String(100), nullable=False)
    algorithm: Mapped[str] = mapped_column(
        String(30), nullable=False, default="AES-128-CTR",
    )
    iv: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
