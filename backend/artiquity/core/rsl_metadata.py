"""RSL Metadata — compact license payloads for embedding inside media containers.

Invariants:
    - create_rsl_metadata always lists ai-summarize, archive, analysis; train-ai and
      search only when the options allow AI models / indexing
    - userTypes always lists all five user types
    - build_xmp_packet output parses back through parse_xmp_packet to the same fields
    - detect_format never raises: unknown MIME types map to sidecar

Design Decisions:
    - XMP packet built with ElementTree in the rsl namespace: the same element
      names as the RSL XML so one namespace covers both payloads
    - The full license XML rides inside the packet (rsl:document) so extraction
      recovers a validatable document, not just the summary fields
"""

import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Any

from artiquity.core.domain_types import (
    RSL_LICENSE_NAME,
    RSL_NAMESPACE,
    MetadataFormat,
    Permission,
    UserType,
)
from artiquity.core.timestamps import iso, utc_now

XMP_META_NS = "adobe:ns:meta/"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XMP_TOOLKIT = "Adobe XMP Core 5.6.0"
XMP_PACKET_ID = "W5M0MpCehiHzreSzNTczkc9d"

ET.register_namespace("x", XMP_META_NS)
ET.register_namespace("rdf", RDF_NS)
ET.register_namespace("rsl", RSL_NAMESPACE)

# Order in which fields are written into the packet
_FIELDS = (
    "license", "permissions", "userTypes", "paymentModel",
    "paymentAmount", "paymentCurrency", "attributionText", "subscriptionPeriod",
    "provenance", "dateIssued", "licenseServer", "contact",
)
_LIST_FIELDS = ("permissions", "userTypes")
_OPTIONAL_FIELDS = (
    "paymentAmount", "paymentCurrency", "attributionText", "subscriptionPeriod",
)


def create_rsl_metadata(
    options: dict,
    *,
    license_server: str,
    contact: str,
    now: datetime | None = None,
) -> dict:
    """Summary payload for a set of wizard license options."""
    permissions = []
    if options.get("allowAIModels"):
        permissions.append(Permission.TRAIN_AI.value)
    if options.get("allowIndexing"):
        permissions.append(Permission.SEARCH.value)
    permissions += [
        Permission.AI_SUMMARIZE.value, Permission.ARCHIVE.value, Permission.ANALYSIS.value,
    ]
    return {
        "license": RSL_LICENSE_NAME,
        "permissions": permissions,
        "userTypes": [u.value for u in UserType],
        "paymentModel": options.get("paymentModel") or "free",
        "paymentAmount": options.get("paymentAmount"),
        "paymentCurrency": options.get("paymentCurrency"),
        "attributionText": options.get("attributionText"),
        "subscriptionPeriod": options.get("subscriptionPeriod"),
        "provenance": options.get("provenanceInfo") or "",
        "dateIssued": iso(now or utc_now()),
        "licenseServer": license_server,
        "contact": contact,
    }


def _field_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_xmp_packet(metadata: dict, license_xml: str | None = None) -> str:
    """Serialize metadata (and optionally the full license XML) as an XMP packet."""
    root = ET.Element(
        f"{{{XMP_META_NS}}}xmpmeta", {f"{{{XMP_META_NS}}}xmptk": XMP_TOOLKIT},
    )
    rdf = ET.SubElement(root, f"{{{RDF_NS}}}RDF")
    desc = ET.SubElement(rdf, f"{{{RDF_NS}}}Description", {f"{{{RDF_NS}}}about": ""})
    for name in _FIELDS:
        value = metadata.get(name)
        if name in _OPTIONAL_FIELDS and value in (None, ""):
            continue
        el = ET.SubElement(desc, f"{{{RSL_NAMESPACE}}}{name}")
        el.text = _field_text(value if value is not None else "")
    if license_xml:
        ET.SubElement(desc, f"{{{RSL_NAMESPACE}}}document").text = license_xml
    ET.indent(root, space=" ")
    body = ET.tostring(root, encoding="unicode")
    return (
        f'<?xpacket begin="\ufeff" id="{XMP_PACKET_ID}"?>\n'
        f"{body}\n"
        '<?xpacket end="w"?>'
    )


def parse_xmp_packet(packet: str) -> tuple[dict, str | None]:
    """Inverse of build_xmp_packet. Returns (metadata, license_xml or None).

    Raises ValueError when the packet is not XML or carries no RSL description.
    """
    start = packet.find("<x:xmpmeta")
    end = packet.rfind("</x:xmpmeta>")
    if start == -1 or end == -1:
        raise ValueError("No xmpmeta element in packet")
    try:
        root = ET.fromstring(packet[start:end + len("</x:xmpmeta>")].encode("utf-8"))
    except ET.ParseError as e:
        raise ValueError(f"Malformed XMP packet: {e}") from e

    desc = root.find(f"{{{RDF_NS}}}RDF/{{{RDF_NS}}}Description")
    if desc is None or desc.find(f"{{{RSL_NAMESPACE}}}license") is None:
        raise ValueError("XMP packet has no RSL description")

    metadata: dict[str, Any] = {}
    for name in _FIELDS:
        el = desc.find(f"{{{RSL_NAMESPACE}}}{name}")
        if el is None:
            continue
        text = el.text or ""
        if name in _LIST_FIELDS:
            metadata[name] = [v for v in text.split(",") if v]
        elif name == "paymentAmount":
            metadata[name] = float(text) if text else None
        else:
            metadata[name] = text
    doc = desc.find(f"{{{RSL_NAMESPACE}}}document")
    return metadata, (doc.text if doc is not None else None)


def detect_format(mime_type: str | None) -> MetadataFormat:
    """Preferred carrier for a MIME type."""
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return MetadataFormat.EXIF
    if mime in ("audio/mpeg", "audio/mp3"):
        return MetadataFormat.ID3
    if mime == "application/pdf":
        return MetadataFormat.XMP
    if mime == "text/html":
        return MetadataFormat.HTML
    return MetadataFormat.SIDECAR


def sidecar_name(file_name: str) -> str:
    return f"{file_name}.rsl"


def build_sidecar(file_name: str, license_xml: str, now: datetime | None = None) -> str:
    return (
        "# RSL License File\n"
        f"# Generated for: {file_name}\n"
        f"# Created: {iso(now or utc_now())}\n"
        "\n"
        f"{license_xml}\n"
    )
