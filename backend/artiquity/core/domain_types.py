"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - LicenseId values are public ids (rsl_<hex>), never the internal row id
    - All valid states encoded as Enums — no raw string matching
    - Enum values are the exact wire strings used in RSL XML and JSON payloads

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

LicenseId = NewType("LicenseId", str)
ContentHash = NewType("ContentHash", str)


# ─── Constants ───────────────────────────────────────────────────

RSL_NAMESPACE = "https://rslstandard.org/rsl"
RSL_VERSION = "1.0"
RSL_LICENSE_NAME = "RSL-1.0"
RSL_PLATFORM = "RSL Platform"

DEFAULT_ALLOWED_COUNTRIES = ("US", "CA", "GB", "DE", "FR", "JP", "AU")


# ─── Enums ───────────────────────────────────────────────────────

class Permission(str, Enum):
    """Usage permissions a license can grant."""
    TRAIN_AI = "train-ai"
    SEARCH = "search"
    AI_SUMMARIZE = "ai-summarize"
    ARCHIVE = "archive"
    ANALYSIS = "analysis"


class UserType(str, Enum):
    """Licensee categories."""
    COMMERCIAL = "commercial"
    EDUCATION = "education"
    GOVERNMENT = "government"
    NONPROFIT = "nonprofit"
    INDIVIDUAL = "individual"


class Condition(str, Enum):
    ATTRIBUTION = "attribution"
    PAYMENT = "payment"
    NON_COMMERCIAL = "non-commercial"
    SHARE_ALIKE = "share-alike"


class PaymentModelType(str, Enum):
    FREE = "free"
    PER_CRAWL = "per-crawl"
    PER_INFERENCE = "per-inference"
    SUBSCRIPTION = "subscription"
    ATTRIBUTION = "attribution"


class MetadataFormat(str, Enum):
    """Container mechanism used to carry the license payload."""
    EXIF = "exif"
    XMP = "xmp"
    ID3 = "id3"
    HTML = "html"
    SIDECAR = "sidecar"


class GrantType(str, Enum):
    AUTHORIZATION_CODE = "authorization_code"
    CLIENT_CREDENTIALS = "client_credentials"
    RSL = "rsl"


class LicenseStatus(str, Enum):
    """List filter for GET /licenses."""
    ALL = "all"
    ACTIVE = "active"
    EXPIRED = "expired"
    INACTIVE = "inactive"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    CRYPTO = "crypto"


class WebhookEventType(str, Enum):
    LICENSE_CREATED = "license.created"
    LICENSE_UPDATED = "license.updated"
    LICENSE_EXPIRED = "license.expired"
    PAYMENT_COMPLETED = "payment.completed"
    USAGE_DETECTED = "usage.detected"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class AuditAction(str, Enum):
    """Actions recorded in the audit trail."""
    LICENSE_CREATED = "license_created"
    LICENSE_UPDATED = "license_updated"
    LICENSE_DEACTIVATED = "license_deactivated"
    LICENSE_VIEWED = "license_viewed"
    LICENSE_DOWNLOADED = "license_downloaded"
    LICENSE_ACCESSED = "license_accessed"
    METADATA_EMBEDDED = "metadata_embedded"
    PAYMENT_REFUNDED = "payment_refunded"


class InsightType(str, Enum):
    """Search-insight query flavours."""
    TREND = "trend"
    AUDIENCE = "audience"
    FORMAT = "format"


class CreativeCategory(str, Enum):
    """Idea buckets produced by the creative-ideas route."""
    AUDIENCE_EXPANSION = "audience_expansion"
    PRODUCT_AND_FORMAT_TRANSPOSITION = "product_and_format_transposition"
    CAMPAIGN_AND_EXPERIENCE_INNOVATION = "campaign_and_experience_innovation"
    CATEGORY_EXPLORATION = "category_exploration"
    PARTNERSHIP_AND_COLLABORATION = "partnership_and_collaboration"
