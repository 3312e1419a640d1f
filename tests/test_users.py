from datetime import timedelta

from app.config import settings
from app.core.security import create_access_token

API = "/api/v1"


def identity_user(external_id, email, **fields):
    return {
        "id": external_id,
        "email_addresses": [{"id": "addr_1", "email_address": email}],
        "primary_email_address_id": "addr_1",
        **fields,
    }


async def test_first_request_creates_user(client, auth_headers):
    headers = auth_headers("user_new", "new@example.com", given_name="Ada", family_name="Lovelace")

    first = await client.get(f"{API}/users/me", headers=headers)
    second = await client.get(f"{API}/users/me", headers=headers)

    assert first.status_code == 200
    user = first.json()["user"]
    assert user["externalId"] == "user_new"
    assert user["email"] == "new@example.com"
    assert user["displayName"] == "Ada Lovelace"
    assert second.json()["user"]["id"] == user["id"]


async def test_missing_or_bad_token(client):
    missing = await client.get(f"{API}/files")
    assert missing.status_code == 401
    assert missing.headers["WWW-Authenticate"] == "Bearer"

    bad = await client.get(f"{API}/files", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401

    expired_token = create_access_token({"sub": "user_old"}, expires_delta=timedelta(minutes=-5))
    expired = await client.get(f"{API}/files", headers={"Authorization": f"Bearer {expired_token}"})
    assert expired.status_code == 401


async def test_list_users(client, sign_in):
    headers, _ = await sign_in("one")
    await sign_in("two")

    response = await client.get(f"{API}/users", headers=headers)
    assert response.json()["count"] == 2


async def test_user_search_excludes_caller(client, sign_in):
    headers, _ = await sign_in("me", email="me@acme.io")
    _, colleague_id = await sign_in("colleague", email="colleague@acme.io")

    response = await client.get(f"{API}/users/search", headers=headers, params={"q": "acme"})
    assert [u["id"] for u in response.json()["users"]] == [colleague_id]

    short = await client.get(f"{API}/users/search", headers=headers, params={"q": "ac"})
    assert short.json()["users"] == []


async def test_webhook_lifecycle(client, auth_headers):
    created = await client.post(
        f"{API}/webhooks/identity",
        json={"type": "user.created", "data": identity_user("user_hook", "hook@example.com", first_name="Hook")},
    )
    assert created.status_code == 200

    headers = auth_headers("user_hook", "ignored@example.com")
    me = (await client.get(f"{API}/users/me", headers=headers)).json()["user"]
    assert me["email"] == "hook@example.com"
    assert me["firstName"] == "Hook"

    await client.post(
        f"{API}/webhooks/identity",
        json={"type": "user.updated", "data": identity_user("user_hook", "new@example.com")},
    )
    me = (await client.get(f"{API}/users/me", headers=headers)).json()["user"]
    assert me["email"] == "new@example.com"

    deleted = await client.post(f"{API}/webhooks/identity", json={"type": "user.deleted", "data": {"id": "user_hook"}})
    assert deleted.status_code == 200

    users = (await client.get(f"{API}/users", headers=auth_headers("someone_else"))).json()
    assert "new@example.com" not in [u["email"] for u in users["users"]]
    assert users["count"] == 1


async def test_webhook_ignores_unknown_events(client):
    response = await client.post(f"{API}/webhooks/identity", json={"type": "session.created", "data": {}})
    assert response.status_code == 200


async def test_webhook_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "IDENTITY_WEBHOOK_SECRET", "s3cret")
    event = {"type": "user.created", "data": identity_user("user_x", "x@example.com")}

    rejected = await client.post(f"{API}/webhooks/identity", json=event, headers={"X-Webhook-Secret": "wrong"})
    assert rejected.status_code == 401

    accepted = await client.post(f"{API}/webhooks/identity", json=event, headers={"X-Webhook-Secret": "s3cret"})
    assert accepted.status_code == 200


async def test_health(client):
    response = await client.get("/health")
    assert response.json()["status"] == "healthy"


async def test_webhook_without_secret_rejected_in_production(client, sign_in, monkeypatch):
    await sign_in("victim")
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    monkeypatch.setattr(settings, "IDENTITY_WEBHOOK_SECRET", "")

    response = await client.post(f"{API}/webhooks/identity", json={"type": "user.deleted", "data": {"id": "victim"}})
    assert response.status_code == 401

    monkeypatch.setattr(settings, "ENVIRONMENT", "test")
    headers, _ = await sign_in("victim")
    users = (await client.get(f"{API}/users", headers=headers)).json()
    assert users["count"] == 1
