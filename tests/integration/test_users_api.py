import asyncio
import time

import pytest

from app.utils import security

PASSWORD = "0123456789"

pytestmark = pytest.mark.asyncio


async def test_register_creates_user_without_password(client):
    resp = await client.post(
        "/users/register",
        json={"username": "newbie", "email": "newbie@example.org", "password": PASSWORD},
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["username"] == "newbie"
    assert body["email"] == "newbie@example.org"
    assert body["admin"] is False
    assert "password" not in body


async def test_register_reports_every_invalid_field(client):
    resp = await client.post("/users/register", json={})

    assert resp.status_code == 400
    assert resp.json() == {
        "errors": [
            {"field": "username", "message": "username is required, max 256 characters"},
            {"field": "email", "message": "email is required, max 256 characters"},
            {"field": "password", "message": "password is required, min 10 characters, max 256 characters"},
        ]
    }


async def test_register_rejects_taken_username_and_email(client, user):
    resp = await client.post(
        "/users/register",
        json={"username": "viewer", "email": "viewer@example.org", "password": PASSWORD},
    )

    assert resp.status_code == 400
    assert resp.json()["errors"] == [
        {"field": "username", "message": "username already exists"},
        {"field": "email", "message": "email already exists"},
    ]


async def test_register_accepts_form_data(client):
    resp = await client.post(
        "/users/register",
        data={"username": "formuser", "email": "form@example.org", "password": PASSWORD},
    )

    assert resp.status_code == 201, resp.text
    assert resp.json()["username"] == "formuser"


async def test_login_returns_token_usable_on_me(client, user):
    resp = await client.post("/users/login", json={"username": "viewer", "password": PASSWORD})

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["user"]["username"] == "viewer"
    assert body["expiresIn"] == 3600

    me = await client.get("/users/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == user.id


async def test_login_wrong_password_is_unauthorized(client, user):
    resp = await client.post("/users/login", json={"username": "viewer", "password": "not-the-password"})

    assert resp.status_code == 401
    assert resp.json() == {"errors": [{"field": "username", "message": "username or password incorrect"}]}


async def test_login_missing_password_reports_shape_only(client, user):
    resp = await client.post("/users/login", json={"username": "viewer"})

    assert resp.status_code == 400
    assert resp.json() == {
        "errors": [
            {"field": "password", "message": "password is required, min 10 characters, max 256 characters"}
        ]
    }


async def test_me_requires_token(client):
    resp = await client.get("/users/me")

    assert resp.status_code == 401
    assert resp.json() == {"error": "invalid token"}


async def test_me_rejects_garbage_token(client):
    resp = await client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "invalid token"}


async def test_patch_me_updates_email_and_password(client, user, user_headers):
    resp = await client.patch(
        "/users/me",
        json={"email": "moved@example.org", "password": "a-brand-new-password"},
        headers=user_headers,
    )

    assert resp.status_code == 200, resp.text
    assert resp.json()["email"] == "moved@example.org"

    login = await client.post(
        "/users/login", json={"username": "viewer", "password": "a-brand-new-password"}
    )
    assert login.status_code == 200


async def test_patch_me_needs_a_value(client, user_headers):
    resp = await client.patch("/users/me", json={}, headers=user_headers)

    assert resp.status_code == 400
    assert resp.json() == {
        "errors": [{"field": "body", "message": "require at least one value of: email, password"}]
    }


async def test_patch_me_rejects_email_in_use(client, user_headers, admin):
    resp = await client.patch("/users/me", json={"email": "admin@example.org"}, headers=user_headers)

    assert resp.status_code == 400
    assert resp.json()["errors"] == [{"field": "email", "message": "email already exists"}]


async def test_list_users_admin_only(client, user_headers):
    resp = await client.get("/users", headers=user_headers)

    assert resp.status_code == 401
    assert resp.json() == {"error": "insufficient authorization"}


async def test_list_users_as_admin(client, user, admin_headers):
    resp = await client.get("/users", headers=admin_headers)

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert (body["offset"], body["limit"]) == (0, 10)
    assert [u["username"] for u in body["items"]] == ["viewer", "admin"]
    assert body["_links"] == {"self": {"href": "http://test/users?offset=0&limit=10"}}


async def test_get_user_as_admin(client, user, admin_headers):
    resp = await client.get(f"/users/{user.id}", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["username"] == "viewer"


@pytest.mark.parametrize(
    "path, status, error",
    [
        ("/users/9999", 404, {"field": "id", "message": "not found"}),
        ("/users/abc", 400, {"field": "id", "message": "id must be an integer larger than 0"}),
        ("/users/0", 400, {"field": "id", "message": "id must be an integer larger than 0"}),
    ],
)
async def test_get_user_bad_ids(client, admin_headers, path, status, error):
    resp = await client.get(path, headers=admin_headers)

    assert resp.status_code == status
    assert resp.json() == {"errors": [error]}


async def test_admin_can_promote_user(client, user, admin_headers):
    resp = await client.patch(f"/users/{user.id}", json={"admin": True}, headers=admin_headers)

    assert resp.status_code == 200, resp.text
    assert resp.json()["admin"] is True


async def test_admin_cannot_change_own_flag(client, admin, admin_headers):
    resp = await client.patch(f"/users/{admin.id}", json={"admin": False}, headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json() == {"errors": [{"field": "admin", "message": "admin cannot change self"}]}


async def test_admin_flag_must_be_boolean(client, user, admin_headers):
    resp = await client.patch(f"/users/{user.id}", json={"admin": "yes"}, headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json() == {"errors": [{"field": "admin", "message": "admin must be a boolean"}]}


async def test_login_keeps_event_loop_responsive(client, user, monkeypatch):
    real_verify = security.verify_password

    def slow_verify(password, hashed):
        time.sleep(0.3)
        return real_verify(password, hashed)

    monkeypatch.setattr(security, "verify_password", slow_verify)

    gaps: list[float] = []
    done = asyncio.Event()

    async def ticker():
        last = time.perf_counter()
        while not done.is_set():
            await asyncio.sleep(0.005)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    task = asyncio.create_task(ticker())
    try:
        resp = await client.post("/users/login", json={"username": "viewer", "password": PASSWORD})
    finally:
        done.set()
        await task

    assert resp.status_code == 200, resp.text
    assert len(gaps) > 10
    assert max(gaps) < 0.2
