"""ORM Models — SQLAlchemy declarative models for the licensing schema.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every table of the SQLite bootstrap is registered by importing this package

Design Decisions:
    - One file per entity for locality; webhook endpoint and its delivery log
      share a file because deliveries never exist without an endpoint
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from artiquity.models.user import User  # noqa: F401
from artiquity.models.oauth_client import OAuthClient  # noqa: F401
from artiquity.models.oauth_token import OAuthToken  # noqa: F401
from artiquity.models.jwk_key import JwkKey  # noqa: F401
from artiquity.models.rsl_license import RslLicense  # noqa: F401
from artiquity.models.file_metadata import FileMetadata  # noqa: F401
from artiquity.models.content_encryption import ContentEncryption  # noqa: F401
from artiquity.models.audit_entry import AuditEntry  # noqa: F401
from artiquity.models.payment_transaction import PaymentTransaction  # noqa: F401
from artiquity.models.license_template import LicenseTemplate  # noqa: F401
from artiquity.models.webhook_endpoint import WebhookEndpoint, WebhookDelivery  # noqa: F401
