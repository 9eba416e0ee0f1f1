"""License Distribution — robots.txt, HTTP Link headers and RSS feeds pointing at licenses.

Invariants:
    - Every artifact points at the public license URL /rsl/<license_id>
    - RSS items carry permissions and payment model as compact JSON
    - All text in the feed is XML-escaped (ElementTree serialization)

Design Decisions:
    - Licenses passed as plain camelCase dicts: callers convert ORM rows once,
      these builders stay pure and testable without a database
"""

import json
import xml.etree.ElementTree as ET
from datetime import datetime
from email.utils import format_datetime

from artiquity.core.domain_types import RSL_NAMESPACE, RSL_PLATFORM, RSL_VERSION
from artiquity.core.timestamps import as_utc, iso, utc_now

DEFAULT_FEED_TITLE = "RSL Licensed Content"
DEFAULT_FEED_DESCRIPTION = "Content licensed under RSL standard"
DEFAULT_FEED_URL = "https://rslplatform.com"

ET.register_namespace("rsl", RSL_NAMESPACE)


def license_path(license_id: str) -> str:
    return f"/rsl/{license_id}"


def build_robots_txt(
    domain: str,
    license_id: str,
    created_at: datetime,
    expires_at: datetime | None = None,
    directives: list[str] | None = None,
) -> str:
    rsl_url = f"{domain.rstrip('/')}{license_path(license_id)}"
    lines = [
        "# Robots.txt with RSL License Information",
        "User-agent: *",
        "Allow: /",
        "",
        "# RSL License Information",
        f"# License: {rsl_url}",
        f"# License ID: {license_id}",
        f"# Created: {iso(created_at)}",
    ]
    if expires_at is not None:
        lines.append(f"# Expires: {iso(expires_at)}")
    lines += ["", "# RSL License Directive", f"License: {rsl_url}", ""]
    if directives:
        lines += ["", "# Additional Directives", *directives]
    return "\n".join(lines) + "\n"


def build_link_headers(license_id: str, content_type: str = "text/html") -> dict[str, str]:
    """HTTP headers advertising the license of a served resource.

    content_type is accepted for symmetry with the request body; the license
    links are the same for every resource type.
    """
    url = license_path(license_id)
    links = [
        f'<{url}>; rel="license"; type="application/rss+xml"',
        f'<{url}>; rel="alternate"; type="application/rss+xml"; title="RSL License"',
        f'<{url}>; rel="canonical"',
        f'<{url}>; rel="describedby"; type="application/rss+xml"',
    ]
    return {
        "Link": ", ".join(links),
        "X-RSL-License": license_id,
        "X-RSL-Version": RSL_VERSION,
    }


def _compact(value) -> str:
    return json.dumps(value, separators=(",", ":"))


def build_rss_feed(
    licenses: list[dict],
    title: str | None = None,
    description: str | None = None,
    feed_url: str | None = None,
    now: datetime | None = None,
) -> str:
    """RSS 2.0 feed with one rsl-annotated item per license."""
    link = (feed_url or DEFAULT_FEED_URL).rstrip("/")
    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = title or DEFAULT_FEED_TITLE
    ET.SubElement(channel, "description").text = description or DEFAULT_FEED_DESCRIPTION
    ET.SubElement(channel, "link").text = link
    ET.SubElement(channel, "lastBuildDate").text = iso(now or utc_now())
    ET.SubElement(channel, "generator").text = RSL_PLATFORM

    for lic in licenses:
        item = ET.SubElement(channel, "item")
        ET.SubElement(item, "title").text = lic.get("title") or ""
        ET.SubElement(item, "description").text = lic.get("description") or ""
        ET.SubElement(item, "link").text = f"{link}{license_path(lic['licenseId'])}"
        ET.SubElement(item, "guid").text = lic["licenseId"]
        created = as_utc(lic.get("createdAt"))
        if created is not None:
            ET.SubElement(item, "pubDate").text = format_datetime(created, usegmt=True)
        ET.SubElement(item, f"{{{RSL_NAMESPACE}}}license").text = lic["licenseId"]
        ET.SubElement(item, f"{{{RSL_NAMESPACE}}}file-type").text = lic.get("fileType") or ""
        ET.SubElement(item, f"{{{RSL_NAMESPACE}}}file-size").text = str(lic.get("fileSize") or 0)
        ET.SubElement(item, f"{{{RSL_NAMESPACE}}}permissions").text = _compact(
            lic.get("permissions") or [],
        )
        ET.SubElement(item, f"{{{RSL_NAMESPACE}}}payment-model").text = _compact(
            lic.get("paymentModel") or {},
        )

    ET.indent(rss, space="  ")
    body = ET.tostring(rss, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'
