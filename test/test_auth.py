from datetime import timedelta

import jwt
from fastapi.testclient import TestClient

from app import app
from auth import create_access_token, verify_password, verify_token
from config import settings
from factories import TEST_PASSWORD, create_test_user
from models import *
from services.auth_service import AuthService
from timeutil import utcnow

client = TestClient(app)


def _register(username="maria", password=TEST_PASSWORD, email=None):
    payload = {
        "username": username,
        "email": email or f"{username}@mail.com",
        "password": password,
        "full_name": "Maria Perez",
    }
    return client.post("/auth/register", json=payload)


# =========================================================
# TEST: POST /auth/register
# =========================================================
def test_register_returns_token_pair(db):
    response = _register()
    assert response.status_code == 200

    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["refresh_token"]

    claims = verify_token(data["access_token"])
    assert claims["unique_name"] == "maria"
    assert claims["roles"] == ["User"]
    assert claims["full_name"] == "Maria Perez"

    user = db.query(UserDB).filter(UserDB.username == "maria").one()
    assert verify_password(TEST_PASSWORD, user.hashed_password)


def test_register_duplicate_username(db):
    _register()

    response = _register(email="other@mail.com")
    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_USERNAME"


def test_register_duplicate_email(db):
    _register()

    response = _register(username="maria2", email="maria@mail.com")
    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_EMAIL"


def test_register_weak_password():
    response = _register(password="password")
    assert response.status_code == 422


# =========================================================
# TEST: POST /auth/login und /auth/token
# =========================================================
def test_login(db):
    create_test_user(db, "john")

    response = client.post("/auth/login", json={"username": "john", "password": TEST_PASSWORD})
    assert response.status_code == 200
    assert verify_token(response.json()["access_token"])["unique_name"] == "john"


def test_login_form_token(db):
    create_test_user(db, "john")

    response = client.post("/auth/token", data={"username": "john", "password": TEST_PASSWORD})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_login_wrong_password(db):
    create_test_user(db, "john")

    response = client.post("/auth/login", json={"username": "john", "password": "Wrong123!"})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_unknown_user():
    response = client.post("/auth/login", json={"username": "ghost", "password": TEST_PASSWORD})
    assert response.status_code == 401


def test_login_lockout_after_failures(db):
    create_test_user(db, "john")

    for _ in range(settings.max_failed_logins):
        response = client.post("/auth/login", json={"username": "john", "password": "Wrong123!"})
        assert response.status_code == 401

    response = client.post("/auth/login", json={"username": "john", "password": TEST_PASSWORD})
    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_LOCKED"


def test_login_after_lockout_expired(db):
    user = create_test_user(db, "john")
    user.lockout_until = utcnow() - timedelta(minutes=1)
    user.failed_login_attempts = 3
    db.commit()

    response = client.post("/auth/login", json={"username": "john", "password": TEST_PASSWORD})
    assert response.status_code == 200

    db.refresh(user)
    assert user.failed_login_attempts == 0
    assert user.lockout_until is None


# =========================================================
# TEST: POST /auth/refresh und /auth/logout
# =========================================================
def test_refresh_rotates_token(db):
    tokens = _register().json()

    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    rotated = response.json()
    assert rotated["refresh_token"] != tokens["refresh_token"]

    # alter Token ist verbraucht
    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_REFRESH_TOKEN"


def test_refresh_expired_token(db):
    tokens = _register().json()
    stored = db.query(RefreshTokenDB).filter(RefreshTokenDB.token == tokens["refresh_token"]).one()
    stored.expires_at = utcnow() - timedelta(seconds=1)
    db.commit()

    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401


def test_logout_revokes_refresh_token(db):
    tokens = _register().json()

    response = client.post("/auth/logout", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200

    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401


def test_logout_unknown_token():
    response = client.post("/auth/logout", json={"refresh_token": "unknown"})
    assert response.status_code == 200
    assert response.json() == {"success": True}


# =========================================================
# TEST: GET /auth/me
# =========================================================
def test_read_users_me(db):
    user = create_test_user(db, "john")
    token, _ = create_access_token(user)

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["username"] == "john"
    assert response.json()["role"] == "User"


def test_read_users_me_expired_token(db):
    user = create_test_user(db, "john")
    token, _ = create_access_token(user, expires_delta=timedelta(minutes=-1))

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_read_users_me_wrong_audience(db):
    user = create_test_user(db, "john")
    payload = {"sub": str(user.id), "aud": "someone-else", "iss": settings.jwt_issuer, "exp": utcnow() + timedelta(minutes=5)}
    token = jwt.encode(payload, settings.jwt_key, algorithm=settings.jwt_algorithm)

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


# =========================================================
# TEST: Admin-Bootstrap
# =========================================================
def test_ensure_admin_is_idempotent(db):
    service = AuthService(db)
    first = service.ensure_admin("root", TEST_PASSWORD, "root@mail.com")
    second = service.ensure_admin("root", TEST_PASSWORD, "root@mail.com")

    assert first.id == second.id
    assert second.role == "Admin"
    assert db.query(UserDB).count() == 1
