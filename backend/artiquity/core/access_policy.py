"""License Access Policy — decides whether a licensee may use a license.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return error dict on violation, None on success
    - A country missing from the restriction list is allowed; only an explicit
      allowed=false entry blocks access
    - Required permissions are requested ∩ allowed; unknown permission names are ignored

Design Decisions:
    - Error dicts (not exceptions): the payment route maps error_code to the
      matching typed error, keeping the rules free of HTTP concerns
"""

from artiquity.core.domain_types import Condition


def check_user_type(user_types: list[dict], user_type: str) -> dict | None:
    """The licensee's category must be listed and allowed."""
    entry = next((u for u in user_types if u.get("type") == user_type), None)
    if entry is None or not entry.get("allowed"):
        return {
            "error_code": "USER_TYPE_NOT_ALLOWED",
            "message": f"User type '{user_type}' not allowed for this license",
        }
    return None


def check_geography(restrictions: list[dict], country_code: str) -> dict | None:
    entry = next((r for r in restrictions if r.get("countryCode") == country_code), None)
    if entry is not None and not entry.get("allowed"):
        return {
            "error_code": "GEOGRAPHIC_RESTRICTION",
            "message": f"Access not allowed from country '{country_code}'",
        }
    return None


def required_permissions(permissions: list[dict], requested: list[str]) -> list[dict]:
    """Permission entries that are both requested and allowed, in license order."""
    wanted = set(requested)
    return [p for p in permissions if p.get("type") in wanted and p.get("allowed")]


def needs_payment(permissions: list[dict]) -> bool:
    return any(
        Condition.PAYMENT.value in (p.get("conditions") or []) for p in permissions
    )


def collect_restrictions(permissions: list[dict]) -> list[str]:
    return [r for p in permissions for r in (p.get("restrictions") or [])]


def evaluate_access(
    license_terms: dict, user_type: str, country_code: str,
) -> dict | None:
    """Chain the licensee checks. Returns first error or None."""
    return (
        check_user_type(license_terms.get("userTypes") or [], user_type)
        or check_geography(license_terms.get("geographicRestrictions") or [], country_code)
    )
