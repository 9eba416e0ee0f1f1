"""License Schemas — RSL documents, wizard license options and license listings.

Invariants:
    - RslDocument mirrors the camelCase document core/rsl_xml renders; dumping it
      with by_alias=True yields exactly that mapping
    - createdAt / expiresAt / audit timestamps must be ISO 8601
    - Permission, user type, condition-free enums are validated against
      core/domain_types; free-text conditions and restrictions are not
    - LicenseUpdate fields are all optional; an empty update is rejected by the route

Design Decisions:
    - Timestamps stay strings: the document is re-rendered verbatim, so the
      caller's formatting survives a round trip through the database
"""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from artiquity.core.domain_types import (
    RSL_NAMESPACE, RSL_VERSION, PaymentModelType, Permission, UserType,
)
from artiquity.schemas.common import CamelModel, Pagination


def _check_iso(v: str | None) -> str | None:
    if v is None:
        return v
    try:
        datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("must be an ISO 8601 timestamp")
    return v


class ContentInfo(CamelModel):
    title: str = Field(min_length=1)
    description: str = ""
    file_type: str = Field(min_length=1)
    file_size: int = Field(gt=0)
    hash: str = Field(min_length=1)
    url: str | None = None
    content_type: str = Field(min_length=1)


class PermissionEntry(CamelModel):
    type: Permission
    allowed: bool
    conditions: list[str] = Field(default_factory=list)
    restrictions: list[str] = Field(default_factory=list)


class Pricing(CamelModel):
    per_crawl: float | None = Field(None, gt=0)
    per_inference: float | None = Field(None, gt=0)
    monthly_subscription: float | None = Field(None, gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)


class UserTypeEntry(CamelModel):
    type: UserType
    allowed: bool
    conditions: list[str] = Field(default_factory=list)
    pricing: Pricing | None = None


class CountryEntry(CamelModel):
    country_code: str = Field(min_length=2, max_length=2)
    allowed: bool
    conditions: list[str] = Field(default_factory=list)


class PaymentModel(CamelModel):
    type: PaymentModelType
    amount: float | None = Field(None, gt=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    attribution_text: str | None = None
    subscription_period: str | None = None


class Warranty(CamelModel):
    ownership: bool = False
    authority: bool = False
    non_infringement: bool = False
    text: str = "No warranty provided"


class Disclaimer(CamelModel):
    as_is: bool = True
    liability_limitations: list[str] = Field(default_factory=list)
    text: str = "Use at your own risk"


class AuditTrailEntry(CamelModel):
    timestamp: str
    action: str
    user_id: str
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp")
    @classmethod
    def check_timestamp(cls, v: str) -> str:
        return _check_iso(v)


class DocumentMetadata(CamelModel):
    creator: str = Field(min_length=1)
    provenance: str = ""
    warranty: Warranty = Field(default_factory=Warranty)
    disclaimer: Disclaimer = Field(default_factory=Disclaimer)
    audit_trail: list[AuditTrailEntry] = Field(default_factory=list)


class RslDocument(CamelModel):
    """Complete RSL license document as edited by the wizard."""
    namespace: str = RSL_NAMESPACE
    version: str = RSL_VERSION
    license_id: str = Field(min_length=1, max_length=100)
    created_at: str
    expires_at: str | None = None
    content: ContentInfo
    permissions: list[PermissionEntry]
    user_types: list[UserTypeEntry]
    geographic_restrictions: list[CountryEntry]
    payment_model: PaymentModel
    metadata: DocumentMetadata

    @field_validator("namespace")
    @classmethod
    def check_namespace(cls, v: str) -> str:
        if v != RSL_NAMESPACE:
            raise ValueError(f"namespace must be {RSL_NAMESPACE}")
        return v

    @field_validator("created_at", "expires_at")
    @classmethod
    def check_timestamps(cls, v: str | None) -> str | None:
        return _check_iso(v)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class LicenseUpdate(CamelModel):
    """Partial update: present sections replace the stored ones."""
    expires_at: str | None = None
    content: ContentInfo | None = None
    permissions: list[PermissionEntry] | None = None
    user_types: list[UserTypeEntry] | None = None
    geographic_restrictions: list[CountryEntry] | None = None
    payment_model: PaymentModel | None = None
    metadata: DocumentMetadata | None = None

    @field_validator("expires_at")
    @classmethod
    def check_expiry(cls, v: str | None) -> str | None:
        return _check_iso(v)

    def changes(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class LicenseOptions(CamelModel):
    """Answers collected by the wizard's license step."""
    allow_ai_models: bool = Field(False, alias="allowAIModels")
    allow_indexing: bool = False
    commercial_use: str = "no"
    payment_model: PaymentModelType = PaymentModelType.FREE
    payment_amount: float | None = None
    payment_currency: str | None = None
    attribution_text: str | None = None
    subscription_period: str | None = None
    provenance_info: str | None = None
    warranty: dict[str, Any] | None = None
    disclaimer: dict[str, Any] | None = None
    geographic_restrictions: list[CountryEntry] | None = None
    expires_at: str | None = None

    def to_options(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FileInfo(CamelModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    size: int = Field(ge=0)
    hash: str | None = None
    url: str | None = None


class DraftRequest(CamelModel):
    options: LicenseOptions = Field(default_factory=LicenseOptions)
    file_info: FileInfo


class LicenseCreated(CamelModel):
    success: bool = True
    license_id: str
    xml_content: str
    expires_at: str | None = None


class LicenseSummary(CamelModel):
    id: str
    title: str
    description: str | None = None
    file_type: str
    file_size: int
    created_at: datetime
    expires_at: datetime | None = None
    is_active: bool


class LicenseList(CamelModel):
    licenses: list[LicenseSummary]
    pagination: Pagination


class LicenseDetail(LicenseSummary):
    file_hash: str
    content_url: str | None = None
    xml_content: str
    permissions: list[dict]
    user_types: list[dict]
    geographic_restrictions: list[dict]
    payment_model: dict
    warranty_declaration: dict
    disclaimer_config: dict


class LicenseTemplateOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    permissions: list[dict]
    user_types: list[dict]
    payment_model: dict
    geographic_restrictions: list[dict]
    is_default: bool


class ActivityEntry(CamelModel):
    action: str
    timestamp: datetime
    ip_address: str | None = None
    details: dict = Field(default_factory=dict)


class LicenseStats(CamelModel):
    total_views: int
    total_downloads: int
    total_payments: int
    total_revenue: float
    recent_activity: list[ActivityEntry]
