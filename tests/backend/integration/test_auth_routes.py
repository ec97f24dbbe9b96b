import pytest
from httpx import ASGITransport, AsyncClient


pytestmark = pytest.mark.asyncio

USER_FILE = "users-data/hoc_sinh1.json"


async def signup_user(client, payload: dict):
    return await client.post("/api/v1/auth/signup", json=payload)


async def login_user(client, username: str, password: str):
    return await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password},
    )


async def test_signup_login_logout_flow(client, fake_github, signup_payload):
    resp = await signup_user(client, signup_payload())
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["user"]["username"] == "hoc_sinh1"
    assert body["data"]["passwordStrength"] == "medium"
    assert "passwordHash" not in body["data"]["user"]
    assert USER_FILE in fake_github.files

    # Signed in right after signup
    state = (await client.get("/api/v1/auth/state")).json()["data"]
    assert state["status"] == "authenticated"
    assert state["user"]["username"] == "hoc_sinh1"

    logout_resp = await client.post("/api/v1/auth/logout")
    assert logout_resp.json() == {"success": True}
    assert (await client.get("/api/v1/auth/me")).status_code == 401

    login_resp = await login_user(client, "hoc_sinh1", "abcdef")
    login_body = login_resp.json()
    assert login_resp.status_code == 200
    assert login_body["success"] is True
    assert login_body["data"]["user"]["id"] == body["data"]["user"]["id"]


async def test_duplicate_signup(client, signup_payload):
    await signup_user(client, signup_payload())
    await client.post("/api/v1/auth/logout")

    resp = await signup_user(client, signup_payload())

    assert resp.status_code == 200
    assert resp.json() == {"success": False, "error": "Tên đăng nhập đã tồn tại"}


async def test_login_errors_are_distinguished(client, signup_payload):
    await signup_user(client, signup_payload())
    await client.post("/api/v1/auth/logout")

    wrong = (await login_user(client, "hoc_sinh1", "wrong")).json()
    missing = (await login_user(client, "nobody", "abcdef")).json()

    assert wrong == {"success": False, "error": "Mật khẩu không đúng"}
    assert missing == {"success": False, "error": "Tên đăng nhập không tồn tại"}

    state = (await client.get("/api/v1/auth/state")).json()["data"]
    assert state["status"] == "unauthenticated"
    assert state["error"] == "Tên đăng nhập không tồn tại"


async def test_signup_validation_makes_no_requests(client, fake_github, signup_payload):
    resp = await signup_user(client, signup_payload(password="abc"))

    assert resp.json() == {"success": False, "error": "Mật khẩu phải có ít nhất 6 ký tự"}
    assert fake_github.requests == []


async def test_signup_requires_confirmation(client, fake_github, signup_payload):
    payload = signup_payload()
    del payload["confirmPassword"]

    resp = await signup_user(client, payload)

    assert resp.json() == {"success": False, "error": "Mật khẩu xác nhận không khớp"}
    assert fake_github.requests == []


async def test_login_while_signed_in_is_rejected(client, signup_payload):
    await signup_user(client, signup_payload())

    resp = await login_user(client, "hoc_sinh1", "abcdef")

    assert resp.json() == {"success": False, "error": "Bạn đã đăng nhập"}


async def test_protected_routes_require_login(client):
    for method, url in [
        ("GET", "/api/v1/auth/me"),
        ("PUT", "/api/v1/auth/profile"),
        ("GET", "/api/v1/auth/history"),
        ("PUT", "/api/v1/auth/history"),
    ]:
        resp = await client.request(method, url, json={"profile": {}})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "AUTH_REQUIRED"


async def test_profile_update(client, fake_github, signup_payload):
    await signup_user(client, signup_payload())

    resp = await client.put("/api/v1/auth/profile", json={"profile": {"grade": 10, "level": "khá"}})

    body = resp.json()
    assert body["success"] is True
    assert body["data"]["profile"] == {"grade": 10, "level": "khá"}
    assert fake_github.json_file(USER_FILE)["profile"] == {"grade": 10, "level": "khá"}
    me = (await client.get("/api/v1/auth/me")).json()["data"]
    assert me["profile"] == {"grade": 10, "level": "khá"}


async def test_profile_update_failure(client, fake_github, signup_payload):
    await signup_user(client, signup_payload())
    fake_github.fail_writes = True

    resp = await client.put("/api/v1/auth/profile", json={"profile": {"grade": 10}})

    assert resp.json() == {"success": False, "error": "Không thể cập nhật hồ sơ"}


async def test_history(client, fake_github, signup_payload):
    await signup_user(client, signup_payload())

    empty = (await client.get("/api/v1/auth/history")).json()
    assert empty == {"success": True, "data": {"chatHistory": [], "examHistory": []}}

    save = await client.put("/api/v1/auth/history", json={"chatHistory": [{"q": "Thơ là gì?"}]})
    assert save.json()["success"] is True
    assert fake_github.commits[-1] == "Update chat history: hoc_sinh1"

    loaded = (await client.get("/api/v1/auth/history")).json()["data"]
    assert loaded["chatHistory"] == [{"q": "Thơ là gì?"}]
    assert loaded["examHistory"] == []


async def test_history_requires_a_collection(client, fake_github, signup_payload):
    await signup_user(client, signup_payload())
    writes = len(fake_github.writes)

    resp = await client.put("/api/v1/auth/history", json={})

    assert resp.json() == {"success": False, "error": "Không có dữ liệu lịch sử"}
    assert len(fake_github.writes) == writes


async def test_healthz(client):
    resp = await client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


async def test_sessions_are_isolated_between_clients(client, other_client, fake_github, signup_payload):
    await signup_user(client, signup_payload())

    # Another client sees nobody signed in and cannot touch the first user's data
    assert (await other_client.get("/api/v1/auth/me")).status_code == 401
    state = (await other_client.get("/api/v1/auth/state")).json()["data"]
    assert state["status"] == "unauthenticated"
    assert state["user"] is None
    edit = await other_client.put("/api/v1/auth/profile", json={"profile": {"hacked": True}})
    assert edit.status_code == 401
    assert "profile" not in fake_github.json_file(USER_FILE)

    # ...and can sign up for itself
    own = await signup_user(other_client, signup_payload(username="ban_khac"))
    assert own.json()["success"] is True

    # Logging out one client leaves the other signed in
    await other_client.post("/api/v1/auth/logout")
    me = (await client.get("/api/v1/auth/me")).json()["data"]
    assert me["username"] == "hoc_sinh1"


async def test_bearer_session_token(app, client, signup_payload):
    resp = await client.get("/api/v1/auth/state")
    token = resp.headers["X-Session-Token"]
    assert resp.cookies.get("sessionToken") == token
    await signup_user(client, signup_payload())

    # Same session presented as a Bearer token by a cookie-less client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as bare:
        me = await bare.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert me.status_code == 200
    assert me.json()["data"]["username"] == "hoc_sinh1"


async def test_forged_token_gets_a_fresh_session(app, client, signup_payload):
    resp = await client.get("/api/v1/auth/state")
    token = resp.headers["X-Session-Token"]
    await signup_user(client, signup_payload())

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as bare:
        me = await bare.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}x"})

    assert me.status_code == 401
