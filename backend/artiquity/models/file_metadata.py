"""File Metadata ORM — one row per embed operation.

Invariants:
    - metadata_type is one of: exif, xmp, id3, html, sidecar (the format actually
      written, which differs from the requested one after a sidecar fallback)
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class FileMetadata(Base):
    __tablename__ = "file_metadata"
    __table_args__ = (
        CheckConstraint(
            "metadata_type IN ('exif', 'xmp', 'id3', 'html', 'sidecar')",
            name="ck_file_metadata_type",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    license_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("rsl_licenses.id"), nullable=False,
    )
    file_path: Mapped[str] = mapped_column(String(1000), nullable=False)
    metadata_type: Mapped[str] = mapped_column(String(10), nullable=False)
    embedded_data: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
