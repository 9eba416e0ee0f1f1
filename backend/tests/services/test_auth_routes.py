"""Auth Routes — accounts, OAuth token grants, introspection and client registration.

Invariants:
    - Client secrets are checked against bcrypt hashes
    - Clients can only use their registered grant types
    - Introspection answers {active: false} for unknown tokens
"""

from artiquity.config import get_settings

DEFAULT_CLIENT_ID = get_settings().default_client_id
DEFAULT_CLIENT_SECRET = get_settings().default_client_secret


async def test_register_and_login(client):
    response = await client.post("/api/v1/auth/users", json={
        "email": " Painter@Example.com ", "password": "long-enough", "userType": "commercial",
        "countryCode": "de",
    })
    assert response.status_code == 201
    assert response.json()["email"] == "painter@example.com"
    assert response.json()["countryCode"] == "DE"

    login = await client.post("/api/v1/auth/login", json={
        "email": "painter@example.com", "password": "long-enough",
    })
    assert login.status_code == 200
    body = login.json()
    assert body["tokenType"] == "Bearer"
    assert body["user"]["userType"] == "commercial"


async def test_duplicate_email_conflicts(client, make_user):
    await make_user(email="dup@example.com")
    response = await client.post("/api/v1/auth/users", json={
        "email": "dup@example.com", "password": "long-enough",
    })
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_TAKEN"


async def test_login_wrong_password(client, make_user):
    await make_user(email="a@example.com")
    response = await client.post("/api/v1/auth/login", json={
        "email": "a@example.com", "password": "nope-nope",
    })
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


async def test_client_credentials_token_and_introspection(client):
    response = await client.post("/api/v1/auth/token", json={
        "grant_type": "client_credentials",
        "client_id": DEFAULT_CLIENT_ID,
        "client_secret": DEFAULT_CLIENT_SECRET,
    })
    assert response.status_code == 200
    token = response.json()
    assert token["access_token"].startswith("rsl_")
    assert token["scope"] == "read,write,license"
    assert "refresh_token" not in token

    info = (await client.post("/api/v1/auth/introspect", json={"token": token["access_token"]})).json()
    assert info["active"] is True
    assert info["client_id"] == DEFAULT_CLIENT_ID
    assert info["iss"] == "rsl-platform"


async def test_authorization_code_issues_refresh_token(client):
    response = await client.post("/api/v1/auth/token", json={
        "grant_type": "authorization_code",
        "client_id": DEFAULT_CLIENT_ID,
        "client_secret": DEFAULT_CLIENT_SECRET,
        "code": "abc",
        "redirect_uri": "http://localhost:3000/callback",
    })
    assert response.json()["refresh_token"].startswith("rsl_refresh_")


async def test_wrong_secret_rejected(client):
    response = await client.post("/api/v1/auth/token", json={
        "grant_type": "client_credentials",
        "client_id": DEFAULT_CLIENT_ID,
        "client_secret": "wrong",
    })
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CLIENT"


async def test_rsl_grant_requires_license_id(client):
    response = await client.post("/api/v1/auth/token", json={
        "grant_type": "rsl",
        "client_id": DEFAULT_CLIENT_ID,
        "client_secret": DEFAULT_CLIENT_SECRET,
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_rsl_grant_unknown_license(client):
    response = await client.post("/api/v1/auth/token", json={
        "grant_type": "rsl",
        "client_id": DEFAULT_CLIENT_ID,
        "client_secret": DEFAULT_CLIENT_SECRET,
        "license_id": "rsl_missing",
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


async def test_introspect_unknown_token(client):
    response = await client.post("/api/v1/auth/introspect", json={"token": "rsl_nope"})
    assert response.json() == {"active": False}


async def test_registered_client_limited_to_its_grants(client):
    registered = await client.post("/api/v1/auth/register", json={"name": "Crawler"})
    assert registered.status_code == 201
    creds = registered.json()
    assert creds["client_id"].startswith("rsl_")
    assert creds["client_secret_expires_at"] == 0

    ok = await client.post("/api/v1/auth/token", json={
        "grant_type": "client_credentials", **{
            k: creds[k] for k in ("client_id", "client_secret")
        },
    })
    assert ok.status_code == 200
    assert ok.json()["scope"] == "read"

    denied = await client.post("/api/v1/auth/token", json={
        "grant_type": "authorization_code", "code": "c", "redirect_uri": "http://x",
        **{k: creds[k] for k in ("client_id", "client_secret")},
    })
    assert denied.status_code == 400
    assert denied.json()["error"]["code"] == "UNAUTHORIZED_CLIENT"


async def test_jwks_empty_by_default(client):
    assert (await client.get("/api/v1/auth/key")).json() == {"keys": []}


async def test_validation_error_envelope(client):
    response = await client.post("/api/v1/auth/users", json={"email": "nope", "password": "x"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["context"]["field"] == "email"
    assert {d["field"] for d in error["details"]} == {"email", "password"}
    assert "timestamp" in error
