"""Payment Transaction ORM — license access charges and refunds.

Invariants:
    - status is one of: pending, completed, failed, refunded
    - Only completed transactions count toward license revenue
    - provider_transaction_id holds the charge id, then the refund id once refunded
"""

from datetime import datetime

from sqlalchemy import String, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from artiquity.core.timestamps import utc_now
from artiquity.db.base import Base, new_id


class PaymentTransaction(Base):
    __tablename__ = "payment_transactions"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded')",
            name="ck_payment_transactions_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    license_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("rsl_licenses.id"), nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[float] = mapped_column(
        Numeric(12, 4, asdecimal=False), nullable=False,
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_provider: Mapped[str] = mapped_column(String(20), nullable=False)
    provider_transaction_id: Mapped[str | None] = mapped_column(
        String(200), nullable=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
