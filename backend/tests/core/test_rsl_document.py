"""RSL Document Builder — wizard options to full license documents.

Invariants:
    - All five permissions and all five user types are always present
    - Allowed permissions carry attribution; train-ai also carries payment
    - commercialUse "yes" adds commercial pricing and a per-crawl payment model
    - Empty geographic restrictions expand to the default allow-list
    - license_options_from_document inverts the builder's choices
"""

import re
from datetime import datetime, timezone

from artiquity.core.domain_types import DEFAULT_ALLOWED_COUNTRIES, Permission, UserType
from artiquity.core.rsl_document import (
    COMMERCIAL_PRICING,
    create_geographic_restrictions,
    create_payment_model,
    create_permissions,
    create_rsl_document,
    create_user_types,
    license_options_from_document,
    new_license_id,
)

FILE_INFO = {"name": "song.mp3", "type": "audio/mpeg", "size": 512}


def _by_type(entries):
    return {e["type"]: e for e in entries}


def test_new_license_id_format():
    assert re.fullmatch(r"rsl_[0-9a-f]{32}", new_license_id())


def test_permissions_all_present_and_split_by_ai_flag():
    perms = _by_type(create_permissions({"allowAIModels": True, "allowIndexing": False}))
    assert set(perms) == {p.value for p in Permission}
    assert perms["train-ai"] == {
        "type": "train-ai", "allowed": True, "conditions": ["attribution", "payment"],
    }
    assert perms["ai-summarize"]["conditions"] == ["attribution"]
    assert perms["analysis"]["allowed"] is True
    assert perms["search"] == {"type": "search", "allowed": False, "conditions": []}
    assert perms["archive"]["allowed"] is False


def test_user_types_commercial_only_when_requested():
    closed = _by_type(create_user_types({"commercialUse": "no"}))
    assert set(closed) == {u.value for u in UserType}
    assert closed["commercial"] == {"type": "commercial", "allowed": False, "conditions": []}
    assert all(closed[t]["allowed"] for t in ("education", "government", "nonprofit", "individual"))

    opened = _by_type(create_user_types({"commercialUse": "yes"}))
    assert opened["commercial"]["allowed"] is True
    assert opened["commercial"]["pricing"] == COMMERCIAL_PRICING


def test_geography_defaults_to_allow_list():
    restrictions = create_geographic_restrictions({})
    assert [r["countryCode"] for r in restrictions] == list(DEFAULT_ALLOWED_COUNTRIES)
    assert all(r["allowed"] for r in restrictions)

    custom = [{"countryCode": "BR", "allowed": False}]
    assert create_geographic_restrictions({"geographicRestrictions": custom}) == custom


def test_payment_model_by_options():
    assert create_payment_model({"commercialUse": "yes"}) == {
        "type": "per-crawl", "amount": 0.01, "currency": "USD",
    }
    assert create_payment_model({"allowIndexing": True})["type"] == "attribution"
    assert create_payment_model({}) == {"type": "free"}


def test_document_defaults_and_audit_entry():
    now = datetime(2026, 5, 4, 3, 2, 1, tzinfo=timezone.utc)
    doc = create_rsl_document(
        {}, FILE_INFO, {"id": "u1", "email": "me@example.com"}, now=now,
    )
    assert doc["createdAt"] == "2026-05-04T03:02:01.000Z"
    assert doc["content"]["description"] == "Digital content with RSL license"
    assert doc["content"]["hash"].startswith("sha256_")
    assert doc["metadata"]["creator"] == "me@example.com"
    assert doc["metadata"]["provenance"] == "No provenance information provided"
    assert doc["metadata"]["disclaimer"]["asIs"] is True
    assert "expiresAt" not in doc

    [entry] = doc["metadata"]["auditTrail"]
    assert entry["action"] == "license_created"
    assert entry["userId"] == "u1"
    assert entry["ipAddress"] == "unknown"
    assert entry["details"] == {
        "licenseId": doc["licenseId"], "fileType": "audio/mpeg", "fileSize": 512,
    }


def test_document_honours_explicit_as_is_false():
    doc = create_rsl_document({"disclaimer": {"asIs": False}}, FILE_INFO, {})
    assert doc["metadata"]["disclaimer"]["asIs"] is False
    assert doc["metadata"]["creator"] == "Unknown"


def test_options_round_trip_through_document():
    options = {
        "allowAIModels": True,
        "allowIndexing": True,
        "commercialUse": "yes",
        "provenanceInfo": "Original work",
    }
    recovered = license_options_from_document(create_rsl_document(options, FILE_INFO, {}))
    assert recovered["allowAIModels"] is True
    assert recovered["allowIndexing"] is True
    assert recovered["commercialUse"] == "yes"
    assert recovered["paymentModel"] == "per-crawl"
    assert recovered["paymentAmount"] == 0.01
    assert recovered["provenanceInfo"] == "Original work"
