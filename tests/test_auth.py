"""Authentication API tests."""


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_user(client):
    """Test user registration."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "newuser@example.com", "password": "password123", "name": "New User"},
    )
    assert response.status_code == 201
    data = response.json()
    assert "access_token" in data
    assert data["user"]["email"] == "newuser@example.com"
    assert data["user"]["notifications_enabled"] is True


def test_register_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails, whatever the case."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "Test@Example.com", "password": "password123", "name": "Duplicate"},
    )
    assert response.status_code == 400
    assert "already registered" in response.json()["detail"]


def test_register_short_password(client):
    response = client.post(
        "/api/v1/auth/register", json={"email": "short@example.com", "password": "abc"}
    )
    assert response.status_code == 422


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200
    assert "access_token" in response.json()


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password fails."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "wrongpassword"}
    )
    assert response.status_code == 401


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


def test_update_preferences(client, auth_headers):
    response = client.put(
        "/api/v1/auth/me",
        headers=auth_headers,
        json={"notifications_enabled": False, "name": "Renamed"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["notifications_enabled"] is False
    assert data["name"] == "Renamed"


def test_invalid_token(client):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_inactive_user_rejected(client, auth_headers, db):
    from freshtrack.models.user import User

    user = db.query(User).filter(User.id == auth_headers.user_id).one()
    user.is_active = False
    db.commit()

    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 401

    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 401


def test_logout(client, auth_headers):
    response = client.post("/api/v1/auth/logout", headers=auth_headers)
    assert response.status_code == 200


def test_update_password(client, auth_headers):
    response = client.put(
        "/api/v1/auth/update-password",
        headers=auth_headers,
        json={"current_password": "testpass123", "new_password": "newpass456"},
    )
    assert response.status_code == 200

    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 401
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "newpass456"}
    )
    assert response.status_code == 200


def test_update_password_wrong_current(client, auth_headers):
    response = client.put(
        "/api/v1/auth/update-password",
        headers=auth_headers,
        json={"current_password": "wrongpassword", "new_password": "newpass456"},
    )
    assert response.status_code == 401

    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200


def test_update_password_too_short(client, auth_headers):
    response = client.put(
        "/api/v1/auth/update-password",
        headers=auth_headers,
        json={"current_password": "testpass123", "new_password": "abc"},
    )
    assert response.status_code == 422


def test_delete_account(client, auth_headers):
    """Test a deleted account can no longer log in or use its token."""
    response = client.request(
        "DELETE", "/api/v1/auth/account", headers=auth_headers, json={"password": "testpass123"}
    )
    assert response.status_code == 200

    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 401
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 401


def test_delete_account_wrong_password(client, auth_headers):
    response = client.request(
        "DELETE", "/api/v1/auth/account", headers=auth_headers, json={"password": "wrongpassword"}
    )
    assert response.status_code == 401

    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
