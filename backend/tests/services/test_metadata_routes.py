"""Metadata Routes — embed/extract over multipart uploads and distribution helpers.

Invariants:
    - embed returns the file with the stored license XML inside, or a sidecar
    - extract is public and reports validation of what it found
    - robots.txt, Link headers and RSS only cover active licenses
"""

import io

from PIL import Image
from sqlalchemy import select

from artiquity.config import get_settings
from artiquity.models.audit_entry import AuditEntry
from artiquity.models.file_metadata import FileMetadata
from tests.services.factories import create_license


def _png() -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (4, 4), (0, 80, 160)).save(out, format="PNG")
    return out.getvalue()


async def _licensed(client, make_user) -> str:
    _, headers = await make_user()
    return (await create_license(client, headers, allowAIModels=True))["licenseId"]


async def test_embed_then_extract(client, make_user, oauth_headers, test_db):
    license_id = await _licensed(client, make_user)
    response = await client.post(
        "/api/v1/metadata/embed",
        files={"file": ("art.png", _png(), "image/png")},
        data={"licenseId": license_id},
        headers=oauth_headers,
    )
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="art.png"'

    rows = (await test_db.scalars(select(FileMetadata))).all()
    assert [(r.file_path, r.metadata_type) for r in rows] == [("art.png", "exif")]
    audit = (await test_db.scalars(
        select(AuditEntry).where(AuditEntry.action == "metadata_embedded")
    )).all()
    assert audit[0].details["format"] == "exif"

    extracted = await client.post(
        "/api/v1/metadata/extract",
        files={"file": ("art.png", response.content, "image/png")},
    )
    body = extracted.json()
    assert body["validation"]["valid"] is True
    assert body["document"]["licenseId"] == license_id
    assert body["fileInfo"]["name"] == "art.png"


async def test_embed_unsupported_type_returns_sidecar(client, make_user, oauth_headers):
    license_id = await _licensed(client, make_user)
    response = await client.post(
        "/api/v1/metadata/embed",
        files={"file": ("data.csv", b"a,b\n1,2\n", "text/csv")},
        data={"licenseId": license_id},
        headers=oauth_headers,
    )
    assert response.headers["content-disposition"] == 'attachment; filename="data.csv.rsl"'
    assert response.text.startswith("# RSL License File")


async def test_embed_errors(client, make_user, oauth_headers, monkeypatch):
    no_file = await client.post(
        "/api/v1/metadata/embed", data={"licenseId": "rsl_x"}, headers=oauth_headers,
    )
    assert no_file.json()["error"]["code"] == "NO_FILE"

    unknown = await client.post(
        "/api/v1/metadata/embed",
        files={"file": ("a.png", _png(), "image/png")},
        data={"licenseId": "rsl_missing"},
        headers=oauth_headers,
    )
    assert unknown.status_code == 404

    monkeypatch.setattr(get_settings(), "max_upload_bytes", 10)
    too_big = await client.post(
        "/api/v1/metadata/embed",
        files={"file": ("a.png", _png(), "image/png")},
        data={"licenseId": "rsl_missing"},
        headers=oauth_headers,
    )
    assert too_big.status_code == 413


async def test_extract_without_metadata(client):
    response = await client.post(
        "/api/v1/metadata/extract", files={"file": ("plain.png", _png(), "image/png")},
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NO_METADATA"


async def test_extract_rejects_oversized_upload(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "max_upload_bytes", 10)
    response = await client.post(
        "/api/v1/metadata/extract", files={"file": ("big.png", _png(), "image/png")},
    )
    assert response.status_code == 413


async def test_robots_txt(client, make_user, oauth_headers):
    license_id = await _licensed(client, make_user)
    response = await client.post("/api/v1/metadata/robots-txt", json={
        "licenseId": license_id, "domain": "https://art.example/",
        "additionalDirectives": ["Disallow: /private"],
    }, headers=oauth_headers)
    assert response.headers["content-type"].startswith("text/plain")
    assert f"License: https://art.example/rsl/{license_id}" in response.text
    assert response.text.rstrip().endswith("Disallow: /private")


async def test_link_headers(client, make_user, oauth_headers):
    license_id = await _licensed(client, make_user)
    body = (await client.post(
        "/api/v1/metadata/link-headers", json={"licenseId": license_id}, headers=oauth_headers,
    )).json()
    assert body["licenseId"] == license_id
    assert body["headers"]["X-RSL-License"] == license_id


async def test_rss_feed(client, make_user, oauth_headers):
    license_id = await _licensed(client, make_user)
    response = await client.post("/api/v1/metadata/rss-feed", json={
        "licenseIds": [license_id, "rsl_unknown"], "feedUrl": "https://art.example",
    }, headers=oauth_headers)
    assert response.headers["content-type"].startswith("application/rss+xml")
    assert f"<guid>{license_id}</guid>" in response.text
    assert f"https://art.example/rsl/{license_id}" in response.text

    missing = await client.post(
        "/api/v1/metadata/rss-feed", json={"licenseIds": ["rsl_unknown"]}, headers=oauth_headers,
    )
    assert missing.status_code == 404
