from conftest import TEST_EMAIL, TEST_PASSWORD


def test_register_creates_user_and_sets_cookies(client):
    response = client.post("/api/auth/register", json={"email": "New@Example.com", "password": TEST_PASSWORD})

    assert response.status_code == 201
    user = response.json()["data"]["user"]
    assert user["email"] == "new@example.com"
    assert "access_token" in response.cookies


def test_register_duplicate_email(auth_client):
    response = auth_client.post("/api/auth/register", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "email_already_in_use"


def test_register_short_password_is_invalid_payload(client):
    response = client.post("/api/auth/register", json={"email": "a@example.com", "password": "short"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "invalid_payload"
    assert error["details"][0]["field"] == "password"
    assert error["details"][0]["message"] == "Password must be at least 8 characters."


def test_register_malformed_json(client):
    response = client.post(
        "/api/auth/register",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_json"


def test_login_returns_tokens(auth_client, client):
    response = client.post("/api/auth/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["user"]["email"] == TEST_EMAIL
    assert "refresh_token" in response.cookies


def test_login_wrong_password(auth_client, client):
    response = client.post("/api/auth/login", json={"email": TEST_EMAIL, "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "invalid_credentials"


def test_me_requires_authentication(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "not_authenticated"


def test_me_accepts_bearer_token(auth_client, client):
    token = client.post("/api/auth/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD}).json()["data"]["access_token"]
    client.cookies.clear()

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == TEST_EMAIL


def test_refresh_token_is_not_an_access_token(auth_client, client):
    refresh_token = client.post("/api/auth/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD}).json()["data"]["refresh_token"]
    client.cookies.clear()

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {refresh_token}"})

    assert response.status_code == 401


def test_logout_clears_session(auth_client):
    response = auth_client.post("/api/auth/logout")
    assert response.status_code == 204

    assert auth_client.get("/api/auth/me").status_code == 401


def test_polish_messages_from_accept_language(client):
    response = client.get("/api/auth/me", headers={"Accept-Language": "pl-PL,pl;q=0.9,en;q=0.8"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Wymagane uwierzytelnienie"
