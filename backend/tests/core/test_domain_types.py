"""Domain Types — enum values are the exact wire strings.

Tests:
    - Permission, UserType, WebhookEventType members and values
    - str Enums compare equal to their wire value
"""

from artiquity.core.domain_types import (
    DEFAULT_ALLOWED_COUNTRIES,
    LicenseId,
    MetadataFormat,
    Permission,
    UserType,
    WebhookEventType,
)


def test_license_id_wraps_str():
    assert LicenseId("rsl_abc") == "rsl_abc"


def test_permission_values():
    assert [p.value for p in Permission] == [
        "train-ai", "search", "ai-summarize", "archive", "analysis",
    ]


def test_user_type_has_five_members():
    assert len(UserType) == 5
    assert UserType("nonprofit") is UserType.NONPROFIT


def test_webhook_events_are_dotted():
    assert all("." in e.value for e in WebhookEventType)
    assert WebhookEventType.PAYMENT_COMPLETED.value == "payment.completed"


def test_metadata_formats():
    assert {f.value for f in MetadataFormat} == {"exif", "xmp", "id3", "html", "sidecar"}


def test_str_enum_equals_wire_value():
    assert Permission.TRAIN_AI == "train-ai"


def test_default_countries():
    assert DEFAULT_ALLOWED_COUNTRIES[0] == "US"
    assert len(DEFAULT_ALLOWED_COUNTRIES) == 7
