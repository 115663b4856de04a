from conftest import DEFAULT_PASSWORD
from utils.jwt import create_jwt, verify_jwt

REGISTRATION = {
    "username": "newbie",
    "email": "Newbie@Example.com",
    "password": "Secret123",
    "firstName": "New",
    "lastName": "Bie",
}


def test_register_returns_token_and_user(client):
    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == "newbie@example.com"
    assert data["user"]["role"] == "user"
    assert data["user"]["isActive"] is True
    assert "passwordHash" not in data["user"]
    assert verify_jwt(data["token"])["sub"] == data["user"]["id"]


def test_register_cannot_choose_admin_role(client):
    response = client.post("/api/auth/register", json={**REGISTRATION, "role": "admin"})

    assert response.json()["data"]["user"]["role"] == "user"


def test_register_rejects_duplicates(client, alice):
    response = client.post(
        "/api/auth/register", json={**REGISTRATION, "email": "alice@example.com"}
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "User with this email or username already exists"

    response = client.post("/api/auth/register", json={**REGISTRATION, "username": "alice"})
    assert response.status_code == 400


def test_register_validates_fields(client):
    response = client.post(
        "/api/auth/register",
        json={**REGISTRATION, "username": "no spaces", "email": "nope", "password": "weakpass"},
    )

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["error"]["errors"]}
    assert fields == {"username", "email", "password"}


def test_login(client, alice):
    response = client.post(
        "/api/auth/login", json={"email": "ALICE@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == alice.id
    assert verify_jwt(data["token"])["role"] == "user"


def test_login_wrong_password(client, alice):
    response = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "Wrong1234"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


def test_login_unknown_email_matches_wrong_password(client):
    response = client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


def test_login_deactivated_account(client, make_user):
    make_user("sleepy", is_active=False)

    response = client.post(
        "/api/auth/login", json={"email": "sleepy@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Account is deactivated"


def test_expired_token_is_rejected(client, alice):
    token = create_jwt(alice.id, "user", expires_minutes=-1)

    response = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_for_deleted_user_is_rejected(client):
    token = create_jwt("gone", "admin")

    response = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "User not found"


def test_profile(client, alice, headers_for):
    response = client.get("/api/auth/profile", headers=headers_for(alice))

    assert response.status_code == 200
    assert response.json()["data"]["user"]["username"] == "alice"


def test_role_comes_from_database_not_token(client, alice):
    # A token claiming admin does not grant admin access
    token = create_jwt(alice.id, "admin")

    response = client.get("/api/admin/dashboard", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403


def test_update_profile(client, alice, bob, headers_for):
    response = client.put(
        "/api/auth/profile",
        json={"firstName": "Al", "role": "admin"},
        headers=headers_for(alice),
    )

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["firstName"] == "Al"
    assert user["role"] == "user"

    response = client.put(
        "/api/auth/profile", json={"email": "bob@example.com"}, headers=headers_for(alice)
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Email already in use"


def test_update_profile_validates_email(client, alice, headers_for):
    for email in ("alice@@example.com", "alice at example.com", "alice@"):
        response = client.put(
            "/api/auth/profile", json={"email": email}, headers=headers_for(alice)
        )

        assert response.status_code == 400, email
        assert response.json()["error"]["errors"][0]["field"] == "email"

    response = client.put(
        "/api/auth/profile", json={"email": "Alice.New@Example.COM"}, headers=headers_for(alice)
    )
    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "alice.new@example.com"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
