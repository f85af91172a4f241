from __future__ import annotations

from fastapi.testclient import TestClient

from contentvault.app import app

client = TestClient(app)


def _login_viewer(c):
    c.post("/auth/login", json={"address": "0xa11ce", "password": "viewer123"})


def _login_admin(c):
    c.post("/auth/login", json={"address": "0xad00", "password": "admin123"})


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_success_viewer():
    resp = client.post("/auth/login", json={"address": "0xa11ce", "password": "viewer123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"]["address"] == "0xa11ce"
    assert body["user"]["role"] == "viewer"


def test_login_address_is_case_insensitive():
    resp = client.post("/auth/login", json={"address": "0xA11CE", "password": "viewer123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["address"] == "0xa11ce"


def test_login_success_creator():
    resp = client.post("/auth/login", json={"address": "0x1234", "password": "creator123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "creator"


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"address": "0xa11ce", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_wallet():
    resp = client.post("/auth/login", json={"address": "0xdead", "password": "x"})
    assert resp.status_code == 401


def test_auth_me_when_logged_in():
    _login_viewer(client)
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["username"] == "alice"


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401


def test_logout():
    _login_viewer(client)
    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "logged_out"
    resp = client.get("/auth/me")
    assert resp.status_code == 401


# ── Route protection ─────────────────────────────────────────────────────


def test_interactions_require_login():
    c = TestClient(app)
    resp = c.post("/interactions", json={"content_id": "1", "type": "view"})
    assert resp.status_code == 401


def test_access_requires_login():
    c = TestClient(app)
    assert c.get("/content/1/access").status_code == 401


def test_register_content_requires_login():
    c = TestClient(app)
    resp = c.post("/content", json={
        "title": "t", "description": "d", "type": "image", "walrus_blob_id": "b",
    })
    assert resp.status_code == 401


def test_analytics_requires_admin():
    _login_viewer(client)
    resp = client.get("/analytics")
    assert resp.status_code == 403


def test_analytics_allowed_for_admin():
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200


def test_cache_stats_requires_admin():
    c = TestClient(app)
    _login_viewer(c)
    resp = c.get("/cache/stats")
    assert resp.status_code == 403


# ── Public endpoints stay public ─────────────────────────────────────────


def test_health_is_public():
    c = TestClient(app)
    assert c.get("/health").status_code == 200


def test_content_listing_is_public():
    c = TestClient(app)
    assert c.get("/content").status_code == 200
    assert c.get("/content/featured").status_code == 200
