"""License Routes — owner-only management and the public XML endpoint.

Invariants:
    - Stored XML always validates
    - GET answers 403 to other users; PUT, DELETE and stats answer 404
    - Updates merge into the stored document
    - Views and downloads are audited and show up in stats
"""

from artiquity.core.rsl_xml import parse_rsl_xml, validate_rsl_xml
from artiquity.models.webhook_endpoint import WebhookEndpoint
from tests.services.factories import create_license, license_document


async def test_create_requires_user_jwt(client):
    response = await client.post("/api/v1/licenses", json=license_document())
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


async def test_invalid_jwt_is_forbidden(client):
    response = await client.get(
        "/api/v1/licenses", headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


async def test_create_and_get(client, make_user):
    _, headers = await make_user()
    document = license_document(allowAIModels=True, expiresAt="2030-01-01T00:00:00.000Z")
    response = await client.post("/api/v1/licenses", json=document, headers=headers)
    assert response.status_code == 201
    created = response.json()
    assert created["licenseId"] == document["licenseId"]
    assert created["expiresAt"] == "2030-01-01T00:00:00.000Z"
    assert validate_rsl_xml(created["xmlContent"])["valid"]

    detail = (await client.get(f"/api/v1/licenses/{document['licenseId']}", headers=headers)).json()
    assert detail["title"] == "harbor.jpg"
    assert detail["isActive"] is True
    assert detail["permissions"][0]["type"] == "train-ai"


async def test_duplicate_license_id_conflicts(client, make_user):
    _, headers = await make_user()
    document = await create_license(client, headers)
    again = await client.post("/api/v1/licenses", json=document, headers=headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "LICENSE_EXISTS"


async def test_wrong_namespace_rejected(client, make_user):
    _, headers = await make_user()
    document = {**license_document(), "namespace": "https://elsewhere.example"}
    response = await client.post("/api/v1/licenses", json=document, headers=headers)
    assert response.status_code == 400


async def test_other_users_are_kept_out(client, make_user):
    _, owner = await make_user(email="owner@example.com")
    _, stranger = await make_user(email="stranger@example.com")
    license_id = (await create_license(client, owner))["licenseId"]

    assert (await client.get(f"/api/v1/licenses/{license_id}", headers=stranger)).status_code == 403
    update = await client.put(
        f"/api/v1/licenses/{license_id}", json={"expiresAt": "2031-01-01T00:00:00Z"},
        headers=stranger,
    )
    assert update.status_code == 404
    assert (await client.delete(f"/api/v1/licenses/{license_id}", headers=stranger)).status_code == 404
    assert (await client.get(f"/api/v1/licenses/{license_id}/stats", headers=stranger)).status_code == 404


async def test_list_filters_by_status(client, make_user):
    _, headers = await make_user()
    kept = await create_license(client, headers)
    dropped = await create_license(client, headers)
    await client.delete(f"/api/v1/licenses/{dropped['licenseId']}", headers=headers)

    everything = (await client.get("/api/v1/licenses", headers=headers)).json()
    assert everything["pagination"] == {"page": 1, "limit": 20, "total": 2, "pages": 1}

    active = (await client.get("/api/v1/licenses?status=active", headers=headers)).json()
    assert [l["id"] for l in active["licenses"]] == [kept["licenseId"]]

    inactive = (await client.get("/api/v1/licenses?status=inactive", headers=headers)).json()
    assert [l["id"] for l in inactive["licenses"]] == [dropped["licenseId"]]


async def test_partial_update_merges(client, make_user):
    _, headers = await make_user()
    document = await create_license(client, headers)
    license_id = document["licenseId"]

    empty = await client.put(f"/api/v1/licenses/{license_id}", json={}, headers=headers)
    assert empty.status_code == 400
    assert empty.json()["error"]["code"] == "NO_UPDATES"

    response = await client.put(
        f"/api/v1/licenses/{license_id}",
        json={"paymentModel": {"type": "subscription", "amount": 5, "currency": "EUR",
                               "subscriptionPeriod": "monthly"}},
        headers=headers,
    )
    assert response.status_code == 200
    updated = parse_rsl_xml(response.json()["xmlContent"])
    assert updated["paymentModel"]["type"] == "subscription"
    assert updated["content"]["title"] == document["content"]["title"]


async def test_deactivated_license_is_gone(client, make_user):
    _, headers = await make_user()
    license_id = (await create_license(client, headers))["licenseId"]
    response = await client.delete(f"/api/v1/licenses/{license_id}", headers=headers)
    assert response.json() == {"success": True, "message": "License deactivated successfully"}
    assert (await client.get(f"/api/v1/licenses/{license_id}", headers=headers)).status_code == 404
    assert (await client.get(f"/rsl/{license_id}")).status_code == 404


async def test_public_xml_and_stats(client, make_user):
    _, headers = await make_user()
    license_id = (await create_license(client, headers))["licenseId"]

    view = await client.get(f"/rsl/{license_id}")
    assert view.status_code == 200
    assert view.headers["content-type"].startswith("application/xml")
    assert f"/rsl/{license_id}" in view.headers["link"]
    download = await client.get(f"/rsl/{license_id}?download=true")
    assert download.headers["content-disposition"] == f'attachment; filename="{license_id}.xml"'

    stats = (await client.get(f"/api/v1/licenses/{license_id}/stats", headers=headers)).json()
    assert stats["totalViews"] == 1
    assert stats["totalDownloads"] == 1
    assert stats["totalPayments"] == 0
    assert stats["recentActivity"][0]["action"] in ("license_viewed", "license_downloaded")


async def test_draft_does_not_store(client, make_user):
    _, headers = await make_user()
    response = await client.post("/api/v1/licenses/draft", json={
        "options": {"allowAIModels": True, "commercialUse": "yes"},
        "fileInfo": {"name": "a.png", "type": "image/png", "size": 10},
    }, headers=headers)
    body = response.json()
    assert body["validation"]["valid"] is True
    assert body["document"]["paymentModel"]["type"] == "per-crawl"
    listed = (await client.get("/api/v1/licenses", headers=headers)).json()
    assert listed["licenses"] == []


async def test_draft_keeps_geographic_restrictions(client, make_user):
    _, headers = await make_user()
    response = await client.post("/api/v1/licenses/draft", json={
        "options": {
            "allowAIModels": True,
            "geographicRestrictions": [
                {"countryCode": "US", "allowed": True},
                {"countryCode": "CN", "allowed": False, "conditions": ["non-commercial"]},
            ],
        },
        "fileInfo": {"name": "a.png", "type": "image/png", "size": 10},
    }, headers=headers)
    assert response.status_code == 200
    restrictions = response.json()["document"]["geographicRestrictions"]
    assert [(r["countryCode"], r["allowed"]) for r in restrictions] == [("US", True), ("CN", False)]
    assert restrictions[1]["conditions"] == ["non-commercial"]


async def test_templates_default_first(client):
    templates = (await client.get("/api/v1/licenses/templates")).json()
    assert [t["id"] for t in templates] == ["template-free", "template-commercial"]
    assert templates[0]["isDefault"] is True


async def test_create_dispatches_webhook(client, make_user, webhook_calls, test_db):
    user, headers = await make_user()
    test_db.add(WebhookEndpoint(
        owner_id=user.id, url="https://hooks.example/rsl",
        events=["license.created"], secret="s3cret",
    ))
    await test_db.commit()

    document = await create_license(client, headers)
    assert len(webhook_calls) == 1
    assert webhook_calls[0].headers["X-RSL-Event"] == "license.created"
    assert document["licenseId"].encode() in webhook_calls[0].content
