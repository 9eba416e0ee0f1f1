"""License Distribution — robots.txt, Link headers and the RSS feed.

Invariants:
    - Every artifact points at /rsl/<license_id>
    - RSS items carry permissions and payment model as compact JSON
"""

import xml.etree.ElementTree as ET
from datetime import datetime, timezone

from artiquity.core.distribution import (
    build_link_headers, build_robots_txt, build_rss_feed, license_path,
)
from artiquity.core.domain_types import RSL_NAMESPACE

CREATED = datetime(2026, 2, 3, 4, 5, 6, tzinfo=timezone.utc)


def test_license_path():
    assert license_path("rsl_abc") == "/rsl/rsl_abc"


def test_robots_txt_contains_license_directive():
    text = build_robots_txt("https://example.com/", "rsl_abc", CREATED)
    assert "License: https://example.com/rsl/rsl_abc" in text
    assert "# License ID: rsl_abc" in text
    assert "# Created: 2026-02-03T04:05:06.000Z" in text
    assert "# Expires" not in text
    assert "Additional Directives" not in text


def test_robots_txt_with_expiry_and_directives():
    text = build_robots_txt(
        "https://example.com", "rsl_abc", CREATED,
        expires_at=datetime(2027, 1, 1, tzinfo=timezone.utc),
        directives=["Disallow: /private"],
    )
    assert "# Expires: 2027-01-01T00:00:00.000Z" in text
    assert text.rstrip().endswith("Disallow: /private")


def test_link_headers():
    headers = build_link_headers("rsl_abc")
    assert headers["X-RSL-License"] == "rsl_abc"
    assert headers["X-RSL-Version"] == "1.0"
    assert '</rsl/rsl_abc>; rel="license"' in headers["Link"]
    assert headers["Link"].count("</rsl/rsl_abc>") == 4


def test_rss_feed_items():
    feed = build_rss_feed(
        [{
            "licenseId": "rsl_abc",
            "title": "Tom & Jerry",
            "createdAt": CREATED,
            "fileType": "image/png",
            "fileSize": 10,
            "permissions": [{"type": "search", "allowed": True}],
            "paymentModel": {"type": "free"},
        }],
        title="My feed",
        feed_url="https://example.com/",
        now=CREATED,
    )
    assert feed.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    root = ET.fromstring(feed.encode("utf-8"))
    channel = root.find("channel")
    assert channel.findtext("title") == "My feed"
    assert channel.findtext("link") == "https://example.com"

    item = channel.find("item")
    assert item.findtext("title") == "Tom & Jerry"
    assert item.findtext("link") == "https://example.com/rsl/rsl_abc"
    assert item.findtext("pubDate") == "Tue, 03 Feb 2026 04:05:06 GMT"
    assert item.findtext(f"{{{RSL_NAMESPACE}}}permissions") == (
        '[{"type":"search","allowed":true}]'
    )
    assert item.findtext(f"{{{RSL_NAMESPACE}}}payment-model") == '{"type":"free"}'


def test_rss_feed_defaults():
    root = ET.fromstring(build_rss_feed([]).encode("utf-8"))
    channel = root.find("channel")
    assert channel.findtext("title") == "RSL Licensed Content"
    assert channel.find("item") is None
