"""Payment Schemas — license access purchase, history and refunds.

Invariants:
    - countryCode is two letters, upper-cased; currency three letters
    - permissions is non-empty and limited to the five RSL permissions
"""

from datetime import datetime

from pydantic import Field, field_validator

from artiquity.core.domain_types import PaymentMethod, Permission, UserType
from artiquity.schemas.common import CamelModel, Pagination


class PaymentInfo(CamelModel):
    method: PaymentMethod
    token: str | None = None
    amount: float | None = Field(None, gt=0)
    currency: str | None = Field(None, min_length=3, max_length=3)


class AccessRequest(CamelModel):
    content_id: str = Field(min_length=1)
    user_id: str | None = None
    user_type: UserType
    country_code: str = Field(min_length=2, max_length=2)
    permissions: list[Permission] = Field(min_length=1)
    payment_info: PaymentInfo | None = None

    @field_validator("country_code")
    @classmethod
    def upper_country(cls, v: str) -> str:
        return v.upper()


class ChargeSummary(CamelModel):
    amount: float
    currency: str
    transaction_id: str


class AccessGranted(CamelModel):
    success: bool = True
    license_id: str
    access_token: str
    expires_at: datetime
    permissions: list[str]
    restrictions: list[str]
    payment_info: ChargeSummary | None = None


class TransactionOut(CamelModel):
    id: str
    license_id: str
    title: str | None = None
    amount: float
    currency: str
    payment_method: str
    status: str
    created_at: datetime
    completed_at: datetime | None = None


class TransactionHistory(CamelModel):
    transactions: list[TransactionOut]
    pagination: Pagination


class RefundResponse(CamelModel):
    success: bool = True
    refund_id: str
    amount: float
    currency: str
    message: str = "Refund processed successfully"
