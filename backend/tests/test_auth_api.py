"""Auth API: sign up, sign in with bearer tokens, password change."""
from ibuddy.models.user import Role

SIGNUP = {"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com", "password": "Secret#123"}


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_signup_creates_buddy_and_returns_token(client, users):
    r = client.post("/auth/signup", json=SIGNUP)
    assert r.status_code == 201
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == "User#jane@example.com"
    assert body["user"]["role"] == "BUDDY"
    me = client.get("/auth/me", headers=_bearer(body["access_token"]))
    assert me.status_code == 200
    assert me.json()["full_name"] == "Jane Doe"
    assert users.get_by_email("jane@example.com").role == Role.BUDDY


def test_signup_duplicate_email(client, make_user):
    make_user(email="JANE@example.com")
    r = client.post("/auth/signup", json=SIGNUP)
    assert r.status_code == 400
    assert r.json() == {"errors": {"email": "A user with this email already exists"}}


def test_signup_validation_errors_are_a_field_map(client):
    r = client.post("/auth/signup", json={**SIGNUP, "first_name": "J4ne", "password": "password"})
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert errors["first_name"] == "First name must contain only English letters and spaces"
    assert errors["password"].startswith("Password is too weak")


def test_signin(client, make_user):
    make_user(email="sam@example.com", password="Secret#123")
    r = client.post("/auth/signin", json={"email": "SAM@example.com", "password": "Secret#123"})
    assert r.status_code == 200
    assert client.get("/auth/me", headers=_bearer(r.json()["access_token"])).json()["email"] == "sam@example.com"


def test_signin_wrong_password_and_unknown_user_look_the_same(client, make_user):
    make_user(email="sam@example.com")
    wrong = client.post("/auth/signin", json={"email": "sam@example.com", "password": "nope"})
    unknown = client.post("/auth/signin", json={"email": "who@example.com", "password": "nope"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers=_bearer("garbage")).status_code == 401


def test_token_of_deleted_user_rejected(client, users):
    token = client.post("/auth/signup", json=SIGNUP).json()["access_token"]
    users.delete_by_email(SIGNUP["email"])
    assert client.get("/auth/me", headers=_bearer(token)).status_code == 401


def test_change_password(client, users):
    token = client.post("/auth/signup", json=SIGNUP).json()["access_token"]
    bad = client.post(
        "/auth/password",
        json={"current_password": "wrong", "new_password": "Better#456"},
        headers=_bearer(token),
    )
    assert bad.status_code == 400
    assert "current_password" in bad.json()["errors"]
    ok = client.post(
        "/auth/password",
        json={"current_password": SIGNUP["password"], "new_password": "Better#456"},
        headers=_bearer(token),
    )
    assert ok.status_code == 204
    assert users.verify_login(SIGNUP["email"], "Better#456") is not None
