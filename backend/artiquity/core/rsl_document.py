"""RSL Document Builder — turns wizard license options into a full RSL document.

Invariants:
    - Every document gets a fresh id rsl_<32 hex> and exactly one license_created audit entry
    - All five permissions and all five user types are always present (allowed or not)
    - Commercial use "yes" implies commercial pricing and a per-crawl payment model
    - Empty geographic restrictions expand to the default allow-list

Design Decisions:
    - Options are a camelCase dict (the wizard's LicenseOptions), output is the
      camelCase document consumed by rsl_xml.generate_rsl_xml
    - now/license_id injectable: deterministic tests without freezing time
"""

import uuid
from datetime import datetime
from typing import Any

from artiquity.core.domain_types import (
    DEFAULT_ALLOWED_COUNTRIES,
    RSL_NAMESPACE,
    RSL_VERSION,
    AuditAction,
    Condition,
    PaymentModelType,
    Permission,
    UserType,
)
from artiquity.core.timestamps import iso, utc_now

DEFAULT_LIABILITY_LIMITATIONS = (
    "Content provided as-is without warranty",
    "No liability for damages arising from use",
)

COMMERCIAL_PRICING = {
    "perCrawl": 0.01,
    "perInference": 0.001,
    "monthlySubscription": 10,
    "currency": "USD",
}

_AI_PERMISSIONS = (Permission.TRAIN_AI, Permission.AI_SUMMARIZE, Permission.ANALYSIS)


def new_license_id() -> str:
    return f"rsl_{uuid.uuid4().hex}"


def placeholder_hash() -> str:
    """Stand-in hash for content whose bytes were never uploaded."""
    return f"sha256_{uuid.uuid4().hex}"


def create_permissions(options: dict) -> list[dict]:
    allow_ai = bool(options.get("allowAIModels"))
    allow_indexing = bool(options.get("allowIndexing"))
    permissions = []
    for permission in Permission:
        if permission in _AI_PERMISSIONS:
            allowed = allow_ai
        else:
            allowed = allow_indexing
        conditions: list[str] = []
        if allowed:
            conditions.append(Condition.ATTRIBUTION.value)
            if permission is Permission.TRAIN_AI:
                conditions.append(Condition.PAYMENT.value)
        permissions.append({
            "type": permission.value, "allowed": allowed, "conditions": conditions,
        })
    return permissions


def create_user_types(options: dict) -> list[dict]:
    commercial = options.get("commercialUse") == "yes"
    user_types: list[dict[str, Any]] = [{
        "type": UserType.COMMERCIAL.value,
        "allowed": commercial,
        "conditions": [Condition.PAYMENT.value] if commercial else [],
    }]
    if commercial:
        user_types[0]["pricing"] = dict(COMMERCIAL_PRICING)
    for user_type in (
        UserType.EDUCATION, UserType.GOVERNMENT,
        UserType.NONPROFIT, UserType.INDIVIDUAL,
    ):
        user_types.append({
            "type": user_type.value,
            "allowed": True,
            "conditions": [Condition.ATTRIBUTION.value],
        })
    return user_types


def create_geographic_restrictions(options: dict) -> list[dict]:
    restrictions = options.get("geographicRestrictions") or []
    if restrictions:
        return [dict(r) for r in restrictions]
    return [{"countryCode": code, "allowed": True} for code in DEFAULT_ALLOWED_COUNTRIES]


def create_payment_model(options: dict) -> dict:
    if options.get("commercialUse") == "yes":
        return {"type": PaymentModelType.PER_CRAWL.value, "amount": 0.01, "currency": "USD"}
    if options.get("allowAIModels") or options.get("allowIndexing"):
        return {
            "type": PaymentModelType.ATTRIBUTION.value,
            "attributionText": "Attribution required for use",
        }
    return {"type": PaymentModelType.FREE.value}


def create_rsl_document(
    options: dict,
    file_info: dict,
    user_info: dict,
    *,
    now: datetime | None = None,
    license_id: str | None = None,
) -> dict:
    """Build a complete camelCase RSL document.

    file_info: name, type, size, optional hash and url.
    user_info: optional id, email, ipAddress, userAgent.
    """
    created = iso(now or utc_now())
    license_id = license_id or new_license_id()
    provenance = options.get("provenanceInfo")
    warranty = options.get("warranty") or {}
    disclaimer = options.get("disclaimer") or {}

    content = {
        "title": file_info.get("name", ""),
        "description": provenance or "Digital content with RSL license",
        "fileType": file_info.get("type", ""),
        "fileSize": file_info.get("size", 0),
        "hash": file_info.get("hash") or placeholder_hash(),
        "contentType": file_info.get("type", ""),
    }
    if file_info.get("url"):
        content["url"] = file_info["url"]

    document = {
        "namespace": RSL_NAMESPACE,
        "version": RSL_VERSION,
        "licenseId": license_id,
        "createdAt": created,
        "content": content,
        "permissions": create_permissions(options),
        "userTypes": create_user_types(options),
        "geographicRestrictions": create_geographic_restrictions(options),
        "paymentModel": create_payment_model(options),
        "metadata": {
            "creator": user_info.get("email") or "Unknown",
            "provenance": provenance or "No provenance information provided",
            "warranty": {
                "ownership": bool(warranty.get("ownership", False)),
                "authority": bool(warranty.get("authority", False)),
                "nonInfringement": bool(warranty.get("nonInfringement", False)),
                "text": warranty.get("text") or "No warranty provided",
            },
            "disclaimer": {
                "asIs": bool(disclaimer.get("asIs", True)),
                "liabilityLimitations": list(
                    disclaimer.get("liabilityLimitations")
                    or DEFAULT_LIABILITY_LIMITATIONS
                ),
                "text": disclaimer.get("text") or "Use at your own risk",
            },
            "auditTrail": [{
                "timestamp": created,
                "action": AuditAction.LICENSE_CREATED.value,
                "userId": user_info.get("id") or "anonymous",
                "ipAddress": user_info.get("ipAddress") or "unknown",
                "userAgent": user_info.get("userAgent") or "unknown",
                "details": {
                    "licenseId": license_id,
                    "fileType": content["fileType"],
                    "fileSize": content["fileSize"],
                },
            }],
        },
    }
    if options.get("expiresAt"):
        document["expiresAt"] = options["expiresAt"]
    return document


def license_options_from_document(document: dict) -> dict:
    """Recover the wizard options an existing document corresponds to.

    Used when embedding a stored license: the compact embedding payload is
    built from options, not from the full document.
    """
    allowed = {
        p["type"] for p in document.get("permissions") or [] if p.get("allowed")
    }
    commercial = any(
        u.get("type") == UserType.COMMERCIAL.value and u.get("allowed")
        for u in document.get("userTypes") or []
    )
    payment = document.get("paymentModel") or {}
    return {
        "allowAIModels": Permission.TRAIN_AI.value in allowed,
        "allowIndexing": Permission.SEARCH.value in allowed,
        "commercialUse": "yes" if commercial else "no",
        "paymentModel": payment.get("type", PaymentModelType.FREE.value),
        "paymentAmount": payment.get("amount"),
        "paymentCurrency": payment.get("currency"),
        "attributionText": payment.get("attributionText"),
        "subscriptionPeriod": payment.get("subscriptionPeriod"),
        "provenanceInfo": (document.get("metadata") or {}).get("provenance", ""),
    }
