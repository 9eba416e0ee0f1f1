"""RSL XML — renders license documents to RSL 1.0 XML and checks them back.

Invariants:
    - Output starts with the literal declaration <?xml version="1.0" encoding="UTF-8"?>
    - Root is rsl:license with xmlns:rsl="https://rslstandard.org/rsl" declared on it
    - Child order: content, permissions, user-types, geographic-restrictions,
      payment-model, metadata (empty sections still emit their element)
    - Booleans render lowercase; integral floats render without ".0"
    - Pricing and payment sub-elements only emitted for truthy values
    - parse_rsl_xml(generate_rsl_xml(doc)) reproduces the document's data

Design Decisions:
    - ElementTree over string templates: escaping and well-formedness are guaranteed
      by construction, no hand-written escape table
    - Documents are plain camelCase dicts (the wire shape): core stays free of
      pydantic and ORM imports
    - validate_rsl_xml reports every problem, not just the first
"""

import json
import xml.etree.ElementTree as ET
from typing import Any

from artiquity.core.domain_types import RSL_NAMESPACE, RSL_VERSION

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

REQUIRED_ELEMENTS = (
    "rsl:content",
    "rsl:permissions",
    "rsl:user-types",
    "rsl:geographic-restrictions",
    "rsl:payment-model",
    "rsl:metadata",
)

ET.register_namespace("rsl", RSL_NAMESPACE)
ET.register_namespace("xsi", XSI_NAMESPACE)


def _q(tag: str) -> str:
    return f"{{{RSL_NAMESPACE}}}{tag}"


def format_value(value: Any) -> str:
    """Render a scalar the way JSON would print it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return ""
    return str(value)


def _sub(parent: ET.Element, tag: str, text: Any = None, **attrib: Any) -> ET.Element:
    el = ET.SubElement(
        parent, _q(tag), {k.replace("_", "-"): format_value(v) for k, v in attrib.items()},
    )
    if text is not None:
        el.text = format_value(text)
    return el


# ─── Generation ──────────────────────────────────────────────────

def generate_rsl_xml(document: dict) -> str:
    """Render a camelCase RSL document dict to an RSL 1.0 XML string."""
    attrib = {
        f"{{{XSI_NAMESPACE}}}schemaLocation":
            f"{RSL_NAMESPACE} {RSL_NAMESPACE}/schema/rsl-1.0.xsd",
        "version": document.get("version") or RSL_VERSION,
        "id": document["licenseId"],
        "created": document["createdAt"],
    }
    if document.get("expiresAt"):
        attrib["expires"] = document["expiresAt"]
    root = ET.Element(_q("license"), attrib)

    _build_content(root, document["content"])
    _build_permissions(root, document.get("permissions") or [])
    _build_user_types(root, document.get("userTypes") or [])
    _build_geography(root, document.get("geographicRestrictions") or [])
    _build_payment_model(root, document.get("paymentModel") or {"type": "free"})
    _build_metadata(root, document["metadata"])

    ET.indent(root, space="  ")
    return f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}\n"


def _build_content(root: ET.Element, content: dict) -> None:
    el = _sub(root, "content")
    _sub(el, "title", content.get("title", ""))
    _sub(el, "description", content.get("description", ""))
    _sub(el, "type", content.get("fileType", ""))
    _sub(el, "size", content.get("fileSize", 0))
    _sub(el, "hash", content.get("hash", ""), algorithm="sha256")
    if content.get("url"):
        _sub(el, "url", content["url"])
    _sub(el, "content-type", content.get("contentType", ""))


def _add_conditions(parent: ET.Element, entry: dict) -> None:
    for condition in entry.get("conditions") or []:
        _sub(parent, "condition", condition)


def _build_permissions(root: ET.Element, permissions: list[dict]) -> None:
    el = _sub(root, "permissions")
    for permission in permissions:
        p = _sub(el, "permission", type=permission["type"], allowed=permission["allowed"])
        _add_conditions(p, permission)
        for restriction in permission.get("restrictions") or []:
            _sub(p, "restriction", restriction)


def _build_user_types(root: ET.Element, user_types: list[dict]) -> None:
    el = _sub(root, "user-types")
    for user_type in user_types:
        u = _sub(el, "user-type", type=user_type["type"], allowed=user_type["allowed"])
        _add_conditions(u, user_type)
        pricing = user_type.get("pricing")
        if pricing:
            p = _sub(u, "pricing")
            currency = pricing.get("currency", "USD")
            for key, tag in (
                ("perCrawl", "per-crawl"),
                ("perInference", "per-inference"),
                ("monthlySubscription", "monthly-subscription"),
            ):
                if pricing.get(key):
                    _sub(p, tag, amount=pricing[key], currency=currency)


def _build_geography(root: ET.Element, restrictions: list[dict]) -> None:
    el = _sub(root, "geographic-restrictions")
    for restriction in restrictions:
        c = _sub(
            el, "country",
            code=restriction["countryCode"], allowed=restriction["allowed"],
        )
        _add_conditions(c, restriction)


def _build_payment_model(root: ET.Element, payment: dict) -> None:
    el = _sub(root, "payment-model", type=payment.get("type", "free"))
    if payment.get("amount"):
        _sub(el, "amount", payment["amount"], currency=payment.get("currency") or "USD")
    if payment.get("attributionText"):
        _sub(el, "attribution-text", payment["attributionText"])
    if payment.get("subscriptionPeriod"):
        _sub(el, "subscription-period", payment["subscriptionPeriod"])


def _build_metadata(root: ET.Element, metadata: dict) -> None:
    el = _sub(root, "metadata")
    _sub(el, "creator", metadata.get("creator", ""))
    _sub(el, "provenance", metadata.get("provenance", ""))

    warranty = metadata.get("warranty") or {}
    w = _sub(el, "warranty")
    _sub(w, "ownership", bool(warranty.get("ownership")))
    _sub(w, "authority", bool(warranty.get("authority")))
    _sub(w, "non-infringement", bool(warranty.get("nonInfringement")))
    _sub(w, "text", warranty.get("text", ""))

    disclaimer = metadata.get("disclaimer") or {}
    d = _sub(el, "disclaimer")
    _sub(d, "as-is", bool(disclaimer.get("asIs", True)))
    for limitation in disclaimer.get("liabilityLimitations") or []:
        _sub(d, "liability-limitation", limitation)
    _sub(d, "text", disclaimer.get("text", ""))

    trail = _sub(el, "audit-trail")
    for entry in metadata.get("auditTrail") or []:
        e = _sub(
            trail, "entry",
            timestamp=entry.get("timestamp", ""),
            action=entry.get("action", ""),
            user_id=entry.get("userId", ""),
        )
        if entry.get("ipAddress"):
            _sub(e, "ip-address", entry["ipAddress"])
        if entry.get("userAgent"):
            _sub(e, "user-agent", entry["userAgent"])
        _sub(e, "details", json.dumps(entry.get("details") or {}, separators=(",", ":")))


# ─── Validation ──────────────────────────────────────────────────

def validate_rsl_xml(xml_content: str) -> dict:
    """Structural check. Returns {"valid": bool, "errors": [str, ...]}."""
    errors: list[str] = []
    if '<?xml version="1.0"' not in xml_content:
        errors.append("Invalid XML declaration")
    if f'xmlns:rsl="{RSL_NAMESPACE}"' not in xml_content:
        errors.append("Missing RSL namespace")
    if "<rsl:license" not in xml_content:
        errors.append("Missing RSL license root element")
    for element in REQUIRED_ELEMENTS:
        if f"<{element}" not in xml_content:
            errors.append(f"Missing required element: {element}")
    try:
        ET.fromstring(xml_content.encode("utf-8"))
    except ET.ParseError as e:
        errors.append(f"Malformed XML: {e}")
    return {"valid": not errors, "errors": errors}


# ─── Parsing ─────────────────────────────────────────────────────

def _bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _number(value: str | None) -> float | int:
    if not value:
        return 0
    number = float(value)
    return int(number) if number.is_integer() and "." not in value else number


def _text(parent: ET.Element | None, tag: str, default: str = "") -> str:
    if parent is None:
        return default
    el = parent.find(_q(tag))
    if el is None:
        return default
    return el.text or default


def _conditions(el: ET.Element) -> list[str]:
    return [c.text or "" for c in el.findall(_q("condition"))]


def parse_rsl_xml(xml_content: str) -> dict:
    """Read an RSL XML string back into the camelCase document dict.

    Raises ValueError when the XML is malformed or not an RSL license.
    """
    try:
        root = ET.fromstring(xml_content.encode("utf-8"))
    except ET.ParseError as e:
        raise ValueError(f"Malformed RSL XML: {e}") from e
    if root.tag != _q("license"):
        raise ValueError("Root element is not rsl:license")

    content_el = root.find(_q("content"))
    content = {
        "title": _text(content_el, "title"),
        "description": _text(content_el, "description"),
        "fileType": _text(content_el, "type"),
        "fileSize": int(_number(_text(content_el, "size", "0"))),
        "hash": _text(content_el, "hash"),
        "contentType": _text(content_el, "content-type"),
    }
    url = _text(content_el, "url")
    if url:
        content["url"] = url

    permissions = []
    for p in root.iterfind(f"{_q('permissions')}/{_q('permission')}"):
        entry: dict[str, Any] = {"type": p.get("type"), "allowed": _bool(p.get("allowed"))}
        if conditions := _conditions(p):
            entry["conditions"] = conditions
        if restrictions := [r.text or "" for r in p.findall(_q("restriction"))]:
            entry["restrictions"] = restrictions
        permissions.append(entry)

    user_types = []
    for u in root.iterfind(f"{_q('user-types')}/{_q('user-type')}"):
        entry = {"type": u.get("type"), "allowed": _bool(u.get("allowed"))}
        if conditions := _conditions(u):
            entry["conditions"] = conditions
        pricing_el = u.find(_q("pricing"))
        if pricing_el is not None:
            pricing: dict[str, Any] = {
                "perCrawl": 0, "perInference": 0, "monthlySubscription": 0,
                "currency": "USD",
            }
            for key, tag in (
                ("perCrawl", "per-crawl"),
                ("perInference", "per-inference"),
                ("monthlySubscription", "monthly-subscription"),
            ):
                price = pricing_el.find(_q(tag))
                if price is not None:
                    pricing[key] = _number(price.get("amount"))
                    pricing["currency"] = price.get("currency") or "USD"
            entry["pricing"] = pricing
        user_types.append(entry)

    geography = []
    for c in root.iterfind(f"{_q('geographic-restrictions')}/{_q('country')}"):
        entry = {"countryCode": c.get("code"), "allowed": _bool(c.get("allowed"))}
        if conditions := _conditions(c):
            entry["conditions"] = conditions
        geography.append(entry)

    payment_el = root.find(_q("payment-model"))
    payment: dict[str, Any] = {
        "type": payment_el.get("type", "free") if payment_el is not None else "free",
    }
    if payment_el is not None:
        amount = payment_el.find(_q("amount"))
        if amount is not None:
            payment["amount"] = _number(amount.text)
            payment["currency"] = amount.get("currency") or "USD"
        if text := _text(payment_el, "attribution-text"):
            payment["attributionText"] = text
        if period := _text(payment_el, "subscription-period"):
            payment["subscriptionPeriod"] = period

    document = {
        "namespace": RSL_NAMESPACE,
        "version": root.get("version", RSL_VERSION),
        "licenseId": root.get("id", ""),
        "createdAt": root.get("created", ""),
        "content": content,
        "permissions": permissions,
        "userTypes": user_types,
        "geographicRestrictions": geography,
        "paymentModel": payment,
        "metadata": _parse_metadata(root.find(_q("metadata"))),
    }
    if root.get("expires"):
        document["expiresAt"] = root.get("expires")
    return document


def _parse_metadata(el: ET.Element | None) -> dict:
    warranty_el = el.find(_q("warranty")) if el is not None else None
    disclaimer_el = el.find(_q("disclaimer")) if el is not None else None
    trail = []
    if el is not None:
        for entry in el.iterfind(f"{_q('audit-trail')}/{_q('entry')}"):
            details_text = _text(entry, "details", "{}")
            try:
                details = json.loads(details_text)
            except json.JSONDecodeError:
                details = {"raw": details_text}
            trail.append({
                "timestamp": entry.get("timestamp", ""),
                "action": entry.get("action", ""),
                "userId": entry.get("user-id", ""),
                "ipAddress": _text(entry, "ip-address"),
                "userAgent": _text(entry, "user-agent"),
                "details": details,
            })
    return {
        "creator": _text(el, "creator"),
        "provenance": _text(el, "provenance"),
        "warranty": {
            "ownership": _bool(_text(warranty_el, "ownership")),
            "authority": _bool(_text(warranty_el, "authority")),
            "nonInfringement": _bool(_text(warranty_el, "non-infringement")),
            "text": _text(warranty_el, "text"),
        },
        "disclaimer": {
            "asIs": _bool(_text(disclaimer_el, "as-is", "true")),
            "liabilityLimitations": [
                li.text or ""
                for li in (
                    disclaimer_el.findall(_q("liability-limitation"))
                    if disclaimer_el is not None else []
                )
            ],
            "text": _text(disclaimer_el, "text"),
        },
        "auditTrail": trail,
    }
