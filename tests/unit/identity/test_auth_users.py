"""
Name: User Authentication Tests

Responsibilities:
  - Validate login success/failure (wrong password, inactive user)
  - Ensure /auth/me requires a token (header or cookie)
  - Validate self-service password change (current password check, rehash)
  - Validate JWT claims, expiry and token type checks
  - Verify role-based dependency behavior
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest
from app.api.auth_routes import router as auth_router
from app.api.exception_handlers import register_exception_handlers
from app.crosscutting.error_responses import AppHTTPException
from app.domain.workspace_policy import Principal
from app.domain.workspaces import WorkspaceType
from app.identity.auth_users import (
    JWT_ALGORITHM,
    AuthSettings,
    create_access_token,
    decode_access_token,
    hash_password,
    require_principal,
    require_roles,
    verify_password,
)
from app.identity.users import UserRole
from app.infrastructure.repositories import InMemoryUserRepository
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

pytestmark = pytest.mark.unit

SETTINGS = AuthSettings(
    jwt_secret="test-secret",
    jwt_access_ttl_minutes=30,
    jwt_cookie_name="access_token",
    jwt_cookie_secure=False,
)


def _build_auth_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(auth_router)
    return app


@pytest.fixture
def users():
    repo = InMemoryUserRepository()
    with patch("app.identity.auth_users._user_repository", return_value=repo):
        yield repo


def _create(repo, *, password="secreto-123", is_active=True, role=UserRole.SECRETARIO_CAM):
    return repo.create_user(
        email="user@example.com",
        full_name="Usuario",
        password_hash=hash_password(password),
        role=role,
        workspace=WorkspaceType.CAM,
        is_active=is_active,
    )


class TestLogin:
    def test_login_ok_sets_cookie_and_records_login(self, users):
        user = _create(users)
        client = TestClient(_build_auth_app())

        response = client.post(
            "/auth/login",
            json={"email": "USER@example.com", "password": "secreto-123"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"]
        assert body["token_type"] == "bearer"
        assert body["user"]["role"] == "secretario_cam"
        assert body["user"]["workspace"] == "cam"
        assert "access_token" in response.cookies
        assert users.get_user_by_id(user.id).last_login_at is not None

    def test_login_fail_wrong_password(self, users):
        _create(users)
        client = TestClient(_build_auth_app())

        response = client.post(
            "/auth/login", json={"email": "user@example.com", "password": "wrong"}
        )

        assert response.status_code == 401
        assert "Credenciales" in response.json()["detail"]

    def test_inactive_user_is_forbidden(self, users):
        _create(users, is_active=False)
        client = TestClient(_build_auth_app())

        response = client.post(
            "/auth/login",
            json={"email": "user@example.com", "password": "secreto-123"},
        )

        assert response.status_code == 403


class TestMe:
    def test_me_requires_token(self, users):
        response = TestClient(_build_auth_app()).get("/auth/me")

        assert response.status_code == 401
        assert "token" in response.json()["detail"].lower()

    def test_me_with_bearer_token(self, users):
        user = _create(users)
        token, _ = create_access_token(user)

        response = TestClient(_build_auth_app()).get(
            "/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json()["email"] == "user@example.com"

    def test_me_with_cookie(self, users):
        user = _create(users)
        token, _ = create_access_token(user)
        client = TestClient(_build_auth_app())
        client.cookies.set("access_token", token)

        assert client.get("/auth/me").status_code == 200

    def test_role_change_applies_on_next_request(self, users):
        user = _create(users)
        token, _ = create_access_token(user)
        users.update_user(user.id, role=UserRole.PRESIDENTE, workspace=WorkspaceType.PRESIDENCIA)

        response = TestClient(_build_auth_app()).get(
            "/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.json()["role"] == "presidente"

    def test_logout_is_idempotent(self, users):
        response = TestClient(_build_auth_app()).post("/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"ok": True}


class TestChangePassword:
    def _client_for(self, user):
        token, _ = create_access_token(user)
        client = TestClient(_build_auth_app())
        client.headers.update({"Authorization": f"Bearer {token}"})
        return client

    def test_change_password_rehashes_and_allows_new_login(self, users):
        user = _create(users)
        client = self._client_for(user)

        response = client.post(
            "/auth/change-password",
            json={"current_password": "secreto-123", "new_password": "nuevo-secreto-456"},
        )

        assert response.status_code == 200
        stored = users.get_user_by_id(user.id).password_hash
        assert verify_password("nuevo-secreto-456", stored)
        assert not verify_password("secreto-123", stored)
        login = client.post(
            "/auth/login",
            json={"email": "user@example.com", "password": "nuevo-secreto-456"},
        )
        assert login.status_code == 200

    def test_wrong_current_password_is_422(self, users):
        user = _create(users)

        response = self._client_for(user).post(
            "/auth/change-password",
            json={"current_password": "incorrecta", "new_password": "nuevo-secreto-456"},
        )

        assert response.status_code == 422
        assert verify_password("secreto-123", users.get_user_by_id(user.id).password_hash)

    def test_short_new_password_is_422(self, users):
        user = _create(users)

        response = self._client_for(user).post(
            "/auth/change-password",
            json={"current_password": "secreto-123", "new_password": "corta"},
        )

        assert response.status_code == 422

    def test_same_password_is_rejected(self, users):
        user = _create(users)

        response = self._client_for(user).post(
            "/auth/change-password",
            json={"current_password": "secreto-123", "new_password": "secreto-123"},
        )

        assert response.status_code == 422

    def test_requires_authentication(self, users):
        response = TestClient(_build_auth_app()).post(
            "/auth/change-password",
            json={"current_password": "secreto-123", "new_password": "nuevo-secreto-456"},
        )

        assert response.status_code == 401


class TestTokens:
    def test_claims_roundtrip(self, user_factory):
        user = user_factory.create(role=UserRole.CF_MEMBER, workspace=WorkspaceType.COMISIONES_CF)

        token, expires_in = create_access_token(user, SETTINGS)
        payload = decode_access_token(token, SETTINGS)

        assert expires_in == 30 * 60
        assert payload.user_id == str(user.id)
        assert payload.role == UserRole.CF_MEMBER
        assert payload.workspace == WorkspaceType.COMISIONES_CF

    def test_expired_token_is_rejected(self, user_factory):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {
                "sub": str(user_factory.create().id),
                "email": "x@example.com",
                "role": "presidente",
                "exp": int(past.timestamp()),
            },
            SETTINGS.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )

        with pytest.raises(AppHTTPException) as exc_info:
            decode_access_token(token, SETTINGS)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token expired."

    def test_wrong_secret_is_rejected(self, user_factory):
        token, _ = create_access_token(user_factory.create(), SETTINGS)
        other = AuthSettings(
            jwt_secret="another-secret",
            jwt_access_ttl_minutes=30,
            jwt_cookie_name="access_token",
            jwt_cookie_secure=False,
        )

        with pytest.raises(AppHTTPException):
            decode_access_token(token, other)

    def test_non_access_token_type_is_rejected(self, user_factory):
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode(
            {
                "sub": str(user_factory.create().id),
                "email": "x@example.com",
                "role": "presidente",
                "exp": int(future.timestamp()),
                "typ": "refresh",
            },
            SETTINGS.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )

        with pytest.raises(AppHTTPException) as exc_info:
            decode_access_token(token, SETTINGS)

        assert exc_info.value.detail == "Invalid token type."


def test_password_hashing():
    hashed = hash_password("secreto-123")

    assert hashed != "secreto-123"
    assert verify_password("secreto-123", hashed) is True
    assert verify_password("otro", hashed) is False
    assert verify_password("secreto-123", "not-an-argon2-hash") is False


def test_require_roles_checks(secretario_cam, presidente):
    app = FastAPI()
    register_exception_handlers(app)
    holder = {"principal": presidente}

    @app.get("/executive")
    def executive_only(
        _: Principal = Depends(require_roles(UserRole.PRESIDENTE, "vicepresidente")),
    ):
        return {"ok": True}

    app.dependency_overrides[require_principal] = lambda: holder["principal"]
    client = TestClient(app)

    assert client.get("/executive").status_code == 200
    holder["principal"] = secretario_cam
    assert client.get("/executive").status_code == 403
