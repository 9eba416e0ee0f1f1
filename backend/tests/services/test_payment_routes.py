"""Payment Routes — license access checks, charges, history and refunds.

Invariants:
    - Checks run in order: 404, user type 403, geography 403, payment 402
    - A transaction row exists only for a successful charge
    - Only completed transactions can be refunded
"""

from datetime import timedelta

from artiquity.api.dependencies import get_payment_gateway
from artiquity.config import get_settings
from artiquity.core.provider_protocols import ChargeResult
from artiquity.main import app
from artiquity.models.webhook_endpoint import WebhookEndpoint
from tests.services.factories import create_license

PAID_OPTIONS = {"allowAIModels": True, "commercialUse": "yes"}


def _access(content_id: str, **overrides) -> dict:
    return {
        "contentId": content_id,
        "userType": "commercial",
        "countryCode": "us",
        "permissions": ["train-ai"],
        **overrides,
    }


async def test_requires_oauth_token(client):
    response = await client.post("/api/v1/payments/process", json=_access("x"))
    assert response.status_code == 401


async def test_expired_token_rejected(client, make_oauth_headers):
    headers = await make_oauth_headers(expires_in=timedelta(seconds=-5))
    response = await client.get("/api/v1/payments/history", headers=headers)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


async def test_unknown_content(client, oauth_headers):
    response = await client.post(
        "/api/v1/payments/process", json=_access("sha256_missing"), headers=oauth_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "LICENSE_NOT_FOUND"


async def test_user_type_not_allowed(client, make_user, oauth_headers):
    _, owner = await make_user()
    document = await create_license(client, owner, allowAIModels=True)
    response = await client.post(
        "/api/v1/payments/process",
        json=_access(document["content"]["hash"]), headers=oauth_headers,
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "USER_TYPE_NOT_ALLOWED"


async def test_geographic_restriction(client, make_user, oauth_headers):
    _, owner = await make_user()
    document = await create_license(
        client, owner, **PAID_OPTIONS,
        geographicRestrictions=[{"countryCode": "FR", "allowed": False}],
    )
    response = await client.post(
        "/api/v1/payments/process",
        json=_access(document["content"]["hash"], countryCode="fr"), headers=oauth_headers,
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "GEOGRAPHIC_RESTRICTION"


async def test_payment_required_lists_permissions(client, make_user, oauth_headers):
    _, owner = await make_user()
    document = await create_license(client, owner, **PAID_OPTIONS)
    response = await client.post(
        "/api/v1/payments/process",
        json=_access(document["content"]["hash"], permissions=["train-ai", "ai-summarize"]),
        headers=oauth_headers,
    )
    assert response.status_code == 402
    details = response.json()["error"]["details"]
    assert details["requiredPermissions"] == ["train-ai", "ai-summarize"]
    assert details["paymentModel"] == {"type": "per-crawl", "amount": 0.01, "currency": "USD"}


async def test_free_permission_needs_no_payment(client, make_user, oauth_headers):
    _, owner = await make_user()
    document = await create_license(client, owner, **PAID_OPTIONS)
    response = await client.post(
        "/api/v1/payments/process",
        json=_access(document["content"]["hash"], permissions=["analysis"]),
        headers=oauth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["permissions"] == ["analysis"]
    assert body["paymentInfo"] is None
    assert body["accessToken"].startswith("rsl_")


async def test_charge_history_and_refund(client, make_user, oauth_headers, webhook_calls, test_db):
    owner_user, owner = await make_user()
    test_db.add(WebhookEndpoint(
        owner_id=owner_user.id, url="https://hooks.example/pay",
        events=["payment.completed"], secret="s3cret",
    ))
    await test_db.commit()
    document = await create_license(client, owner, **PAID_OPTIONS)

    paid = await client.post(
        "/api/v1/payments/process",
        json=_access(document["content"]["hash"], paymentInfo={"method": "stripe"}),
        headers=oauth_headers,
    )
    assert paid.status_code == 200
    charge = paid.json()["paymentInfo"]
    assert charge["amount"] == 0.01
    assert charge["transactionId"].startswith("stripe_")
    assert [c.headers["X-RSL-Event"] for c in webhook_calls] == ["payment.completed"]

    history = (await client.get("/api/v1/payments/history", headers=oauth_headers)).json()
    assert history["pagination"]["total"] == 1
    tx = history["transactions"][0]
    assert tx["licenseId"] == document["licenseId"]
    assert tx["status"] == "completed"

    refund = await client.post(f"/api/v1/payments/refund/{tx['id']}", headers=oauth_headers)
    assert refund.status_code == 200
    assert refund.json()["refundId"].startswith("refund_")

    again = await client.post(f"/api/v1/payments/refund/{tx['id']}", headers=oauth_headers)
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "INVALID_TRANSACTION_STATUS"


async def test_refund_of_someone_elses_transaction(client, oauth_headers):
    response = await client.post("/api/v1/payments/refund/missing", headers=oauth_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TRANSACTION_NOT_FOUND"


async def test_declined_charge_records_nothing(client, make_user, oauth_headers):
    class DecliningGateway:
        async def charge(self, method, amount, currency):
            return ChargeResult(success=False, error="Card declined")

        async def refund(self, transaction_id):
            raise AssertionError("not reached")

    app.dependency_overrides[get_payment_gateway] = DecliningGateway
    _, owner = await make_user()
    document = await create_license(client, owner, **PAID_OPTIONS)
    response = await client.post(
        "/api/v1/payments/process",
        json=_access(document["content"]["hash"], paymentInfo={"method": "paypal"}),
        headers=oauth_headers,
    )
    assert response.status_code == 402
    assert response.json()["error"]["code"] == "PAYMENT_FAILED"
    history = (await client.get("/api/v1/payments/history", headers=oauth_headers)).json()
    assert history["transactions"] == []


async def test_user_rate_limit(client, oauth_headers, monkeypatch):
    monkeypatch.setattr(get_settings(), "user_rate_limit_requests", 1)
    assert (await client.get("/api/v1/payments/history", headers=oauth_headers)).status_code == 200
    limited = await client.get("/api/v1/payments/history", headers=oauth_headers)
    assert limited.status_code == 429
    assert limited.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
    assert int(limited.headers["retry-after"]) > 0


async def test_user_budget_keyed_by_owner(client, make_user, make_oauth_headers, monkeypatch):
    monkeypatch.setattr(get_settings(), "user_rate_limit_requests", 1)
    first, _ = await make_user("first@example.com")
    second, _ = await make_user("second@example.com")
    first_headers = await make_oauth_headers(user_id=first.id)
    second_headers = await make_oauth_headers(user_id=second.id)

    assert (await client.get("/api/v1/payments/history", headers=first_headers)).status_code == 200
    assert (await client.get("/api/v1/webhooks/list", headers=first_headers)).status_code == 429
    assert (await client.get("/api/v1/payments/history", headers=second_headers)).status_code == 200
