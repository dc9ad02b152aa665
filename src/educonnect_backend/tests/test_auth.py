"""
Authentication tests: registration, login and the supported credential schemes.
"""

import jwt
import pytest

from educonnect_backend.interface.tokens import (
    TokenError, create_access_token, decode_access_token, hash_password, verify_password
)
from educonnect_backend.settings import settings
from educonnect_backend.tests.fixtures import PASSWORD, add_user, basic, bearer


REGISTRATION = {
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "Jane.Doe@Example.com",
    "password": "secret123",
    "role": "parent",
}


class TestTokens:

    def test_password_hash_roundtrip(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("secret123", "not-a-hash") is False

    def test_token_carries_subject_and_role(self):
        payload = decode_access_token(create_access_token("u1", "teacher"))
        assert payload["sub"] == "u1"
        assert payload["role"] == "teacher"

    def test_foreign_signature_is_rejected(self):
        token = jwt.encode({"sub": "u1", "role": "admin"}, "some-other-secret", algorithm="HS256")
        with pytest.raises(TokenError):
            decode_access_token(token)

    def test_expired_token_is_rejected(self):
        token = jwt.encode({"sub": "u1", "role": "parent", "exp": 1}, settings.TOKEN_SECRET, algorithm=settings.TOKEN_ALGORITHM)
        with pytest.raises(TokenError):
            decode_access_token(token)

    def test_token_without_role_is_rejected(self):
        token = jwt.encode({"sub": "u1"}, settings.TOKEN_SECRET, algorithm=settings.TOKEN_ALGORITHM)
        with pytest.raises(TokenError):
            decode_access_token(token)


@pytest.mark.integration
class TestRegisterAndLogin:

    def test_register_returns_token_and_user(self, client):
        response = client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"]["email"] == "jane.doe@example.com"
        assert body["user"]["role"] == "parent"
        assert "password" not in body["user"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.json()["id"] == body["user"]["id"]

    def test_duplicate_email(self, client, school):
        payload = dict(REGISTRATION, email="parent@example.com")
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json() == {"message": "User already exists"}

    def test_short_password(self, client):
        response = client.post("/api/auth/register", json=dict(REGISTRATION, password="abc"))
        assert response.status_code == 400
        assert "message" in response.json()

    def test_admin_cannot_self_register(self, client):
        response = client.post("/api/auth/register", json=dict(REGISTRATION, role="admin"))
        assert response.status_code == 400

    def test_invalid_email(self, client):
        response = client.post("/api/auth/register", json=dict(REGISTRATION, email="nope"))
        assert response.status_code == 400

    def test_login(self, client, school):
        response = client.post("/api/auth/login", json={"email": "Teacher@Example.com", "password": PASSWORD})
        assert response.status_code == 200
        assert response.json()["user"]["id"] == school.ids["teacher"]

    def test_login_wrong_password(self, client, school):
        response = client.post("/api/auth/login", json={"email": "teacher@example.com", "password": "nope123"})
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid credentials"}

    def test_login_unknown_email(self, client, school):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
        assert response.status_code == 401

    def test_login_deactivated(self, client, session):
        add_user(session, "parent", "gone@example.com", is_active=False)
        session.commit()
        response = client.post("/api/auth/login", json={"email": "gone@example.com", "password": PASSWORD})
        assert response.status_code == 401


@pytest.mark.integration
class TestCredentials:

    def test_missing_header(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"message": "No token, authorization denied"}

    def test_invalid_token(self, client, school):
        response = client.get("/api/students", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_token_for_missing_user(self, client, school):
        response = client.get("/api/students", headers=bearer("no-such-user", "admin"))
        assert response.status_code == 401

    def test_unsupported_scheme(self, client, school):
        response = client.get("/api/students", headers={"Authorization": "Digest abc"})
        assert response.status_code == 401

    def test_basic_auth(self, client, school):
        response = client.get("/api/auth/me", headers=basic("teacher@example.com"))
        assert response.status_code == 200
        assert response.json()["email"] == "teacher@example.com"

    def test_basic_auth_wrong_password(self, client, school):
        response = client.get("/api/auth/me", headers=basic("teacher@example.com", "wrong"))
        assert response.status_code == 401

    def test_role_comes_from_stored_user(self, client, school):
        # a token claiming admin does not elevate a parent
        response = client.get("/api/grades", headers=bearer(school.ids["parent"], "admin"))
        assert response.status_code == 200
        response = client.post(
            "/api/announcements",
            json={"title": "x", "content": "y"},
            headers=bearer(school.ids["parent"], "admin"),
        )
        assert response.status_code == 403

    def test_deactivated_user_token(self, client, session):
        user = add_user(session, "teacher", "retired@example.com", is_active=False)
        session.commit()
        response = client.get("/api/students", headers=bearer(user.id, "teacher"))
        assert response.status_code == 401
        assert response.json() == {"message": "Account is deactivated"}

    def test_head_status(self, client):
        assert client.head("/").status_code == 204
