"""License Access Policy — licensee checks run before any charge.

Tests:
    - User type must be listed and allowed
    - Only an explicit allowed=false country entry blocks access
    - Payment is needed iff a granted permission has the payment condition
"""

from artiquity.core.access_policy import (
    check_geography,
    check_user_type,
    collect_restrictions,
    evaluate_access,
    needs_payment,
    required_permissions,
)

TERMS = {
    "userTypes": [
        {"type": "commercial", "allowed": False},
        {"type": "education", "allowed": True},
    ],
    "geographicRestrictions": [
        {"countryCode": "US", "allowed": True},
        {"countryCode": "KP", "allowed": False},
    ],
}

PERMISSIONS = [
    {"type": "train-ai", "allowed": True, "conditions": ["attribution", "payment"]},
    {"type": "search", "allowed": True, "conditions": ["attribution"], "restrictions": ["no-cache"]},
    {"type": "archive", "allowed": False, "conditions": []},
]


def test_disallowed_user_type_is_rejected():
    error = check_user_type(TERMS["userTypes"], "commercial")
    assert error["error_code"] == "USER_TYPE_NOT_ALLOWED"


def test_unlisted_user_type_is_rejected():
    assert check_user_type(TERMS["userTypes"], "government") is not None


def test_allowed_user_type_passes():
    assert check_user_type(TERMS["userTypes"], "education") is None


def test_unlisted_country_is_allowed():
    assert check_geography(TERMS["geographicRestrictions"], "BR") is None


def test_blocked_country_is_rejected():
    error = check_geography(TERMS["geographicRestrictions"], "KP")
    assert error["error_code"] == "GEOGRAPHIC_RESTRICTION"


def test_evaluate_access_checks_user_type_first():
    error = evaluate_access(TERMS, "commercial", "KP")
    assert error["error_code"] == "USER_TYPE_NOT_ALLOWED"
    assert evaluate_access(TERMS, "education", "US") is None


def test_required_permissions_intersects_requested_and_allowed():
    granted = required_permissions(PERMISSIONS, ["search", "archive", "unknown"])
    assert [p["type"] for p in granted] == ["search"]


def test_payment_needed_only_for_paid_permissions():
    assert not needs_payment(required_permissions(PERMISSIONS, ["search"]))
    assert needs_payment(required_permissions(PERMISSIONS, ["search", "train-ai"]))


def test_collect_restrictions_flattens():
    assert collect_restrictions(PERMISSIONS) == ["no-cache"]
