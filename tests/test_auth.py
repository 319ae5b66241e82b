from pkg.auth_token_client.client import TokenClient, TokenPayload


def _signup(client, email="grace@example.com", password="hopper-1906", name="Grace"):
    return client.post("/auth/signup", json={"name": name, "email": email, "password": password})


def test_signup_returns_session(client):
    resp = _signup(client)

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["refresh_token"]
    assert body["user"]["email"] == "grace@example.com"
    assert body["user"]["name"] == "Grace"
    assert body["user"]["role"] == "user"
    assert "password_hash" not in body["user"]


def test_signup_duplicate_email_is_409(client):
    _signup(client)

    resp = _signup(client, email="GRACE@example.com")

    assert resp.status_code == 409
    assert resp.json() == {"status": False, "message": "Email already exists"}


def test_signup_validates_input(client):
    assert _signup(client, email="not-an-email").status_code == 422
    assert _signup(client, password="short").status_code == 422


def test_login(client):
    _signup(client)

    resp = client.post("/auth/login", json={"email": "grace@example.com", "password": "hopper-1906"})

    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "grace@example.com"


def test_login_bad_credentials_is_401(client):
    _signup(client)

    wrong_password = client.post("/auth/login", json={"email": "grace@example.com", "password": "nope-nope"})
    unknown_user = client.post("/auth/login", json={"email": "nobody@example.com", "password": "hopper-1906"})

    assert wrong_password.status_code == 401
    assert wrong_password.json()["message"] == "Invalid credentials"
    assert unknown_user.status_code == 401


def test_profile(client, auth_headers):
    resp = client.get("/auth/profile", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] is True
    assert body["data"]["email"] == "ada@example.com"


def test_profile_rejects_missing_and_foreign_tokens(client):
    assert client.get("/auth/profile").status_code == 401

    foreign = TokenClient("some-other-secret", "x").create_tokens(TokenPayload(user_id="u-1", role="user"))
    resp = client.get("/auth/profile", headers={"Authorization": f"Bearer {foreign['access_token']}"})

    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_token_for_deleted_user_is_401(client, auth_service):
    tokens = auth_service.token_client.create_tokens(TokenPayload(user_id="ghost", role="user"))

    resp = client.get("/auth/profile", headers={"Authorization": f"Bearer {tokens['access_token']}"})

    assert resp.status_code == 401
    assert resp.json()["message"] == "User not found"
