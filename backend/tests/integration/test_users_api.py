"""Integration tests for the /api/v1/users endpoints."""

from __future__ import annotations

import io
from dataclasses import dataclass

import pytest
from sqlalchemy import select
from vidtube.core.extensions import MEDIA_STORE_KEY
from vidtube.models.user import User

from tests.factories.user import DEFAULT_PASSWORD, UserFactory

BASE = "/api/v1/users"


@dataclass(frozen=True)
class Account:
    id: int
    username: str
    email: str
    password: str = DEFAULT_PASSWORD


@pytest.fixture()
def account(session) -> Account:
    """A committed user; requests close the session, so only plain values are kept."""
    user = UserFactory(username="walter", email="walter@example.com")
    session.commit()
    return Account(id=user.id, username=user.username, email=user.email)


def _stored_token(session, user_id: int) -> str | None:
    return session.execute(select(User.refresh_token).where(User.id == user_id)).scalar_one()


def _set_cookie_headers(resp, name: str) -> list[str]:
    return [h for h in resp.headers.getlist("Set-Cookie") if h.startswith(f"{name}=")]


def _login(client, account: Account):
    return client.post(
        f"{BASE}/login", json={"username": account.username, "password": account.password}
    )


# ------------------------------- Register --------------------------------- #
class TestRegisterEndpoint:
    def _form(self, **overrides):
        data = {
            "fullName": "Jesse Pinkman",
            "email": "jesse@example.com",
            "username": "CapnCook",
            "password": "yo-science!",
            "avatar": (io.BytesIO(b"avatar-bytes"), "avatar.png"),
        }
        data.update(overrides)
        return {k: v for k, v in data.items() if v is not None}

    def test_register_created(self, client, media_store):
        resp = client.post(
            f"{BASE}/register", data=self._form(), content_type="multipart/form-data"
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        assert body["statusCode"] == 201
        user = body["data"]
        assert user["username"] == "capncook"
        assert user["fullName"] == "Jesse Pinkman"
        assert user["avatar"].startswith("https://media.test/")
        assert user["coverImage"] == ""
        assert "password" not in user and "passwordHash" not in user
        assert "refreshToken" not in user
        assert len(media_store.uploaded) == 1

    def test_register_with_cover_image(self, client, media_store):
        form = self._form(coverImage=(io.BytesIO(b"cover"), "cover.jpg"))
        resp = client.post(f"{BASE}/register", data=form, content_type="multipart/form-data")

        assert resp.status_code == 201
        assert resp.get_json()["data"]["coverImage"].endswith("cover.jpg")

    def test_register_without_avatar(self, client, media_store):
        resp = client.post(
            f"{BASE}/register", data=self._form(avatar=None), content_type="multipart/form-data"
        )

        assert resp.status_code == 400
        body = resp.get_json()
        assert body == {
            "statusCode": 400,
            "data": None,
            "message": "Avatar file is required",
            "success": False,
            "errors": [],
        }

    def test_register_missing_field(self, client, media_store):
        resp = client.post(
            f"{BASE}/register", data=self._form(email="  "), content_type="multipart/form-data"
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "All fields are required"

    def test_register_conflict(self, client, media_store, account):
        form = self._form(username=account.username.upper())
        resp = client.post(f"{BASE}/register", data=form, content_type="multipart/form-data")

        assert resp.status_code == 409
        assert resp.get_json()["message"] == "User with email or username already exists"
        assert media_store.uploaded == []

    def test_failed_avatar_upload(self, client, media_store, session):
        # Stored uploads carry a unique prefix; fail_on matches the ending
        media_store.fail_on.add("avatar.png")
        resp = client.post(
            f"{BASE}/register", data=self._form(), content_type="multipart/form-data"
        )

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert body["message"] == "Avatar file is required"
        assert media_store.uploaded == []
        assert session.execute(select(User).where(User.username == "capncook")).first() is None

    def test_malformed_email_is_rejected(self, client, media_store):
        resp = client.post(
            f"{BASE}/register",
            data=self._form(email="not-an-email"),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 400
        assert resp.get_json() == {
            "statusCode": 400,
            "data": None,
            "message": "Email format looks invalid",
            "success": False,
            "errors": [],
        }
        assert media_store.uploaded == []

    def test_validation_runs_before_media_store_lookup(self, client, app, monkeypatch):
        monkeypatch.setitem(app.extensions, MEDIA_STORE_KEY, None)
        resp = client.post(
            f"{BASE}/register", data=self._form(fullName=""), content_type="multipart/form-data"
        )

        assert resp.status_code == 400
        assert resp.get_json()["message"] == "All fields are required"

    def test_unconfigured_media_store_is_server_error(self, client, app, monkeypatch):
        monkeypatch.setitem(app.extensions, MEDIA_STORE_KEY, None)
        resp = client.post(
            f"{BASE}/register", data=self._form(), content_type="multipart/form-data"
        )

        assert resp.status_code == 500
        assert resp.get_json()["message"] == "Media store is not configured"

    def test_temp_files_are_removed(self, client, media_store, app):
        from pathlib import Path

        form = self._form(avatar=None, coverImage=(io.BytesIO(b"c"), "c.jpg"))
        resp = client.post(f"{BASE}/register", data=form, content_type="multipart/form-data")

        assert resp.status_code == 400
        assert list(Path(app.config["UPLOAD_TEMP_DIR"]).iterdir()) == []


# -------------------------------- Login ----------------------------------- #
class TestLoginEndpoint:
    def test_login_returns_tokens_in_body_and_cookies(self, client, account, session):
        resp = _login(client, account)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        data = body["data"]
        assert data["user"]["id"] == account.id
        assert data["accessToken"] and data["refreshToken"]

        for name in ("accessToken", "refreshToken"):
            value = data[name]
            (header,) = _set_cookie_headers(resp, name)
            assert header.startswith(f"{name}={value}")
            assert "HttpOnly" in header
            assert "Secure" in header

        assert _stored_token(session, account.id) == data["refreshToken"]

    def test_login_by_email(self, client, account):
        resp = client.post(
            f"{BASE}/login", json={"email": account.email.upper(), "password": account.password}
        )
        assert resp.status_code == 200

    def test_login_requires_identifier(self, client):
        resp = client.post(f"{BASE}/login", json={"password": "x"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "username or email is required"

    def test_login_unknown_user(self, client):
        resp = client.post(f"{BASE}/login", json={"username": "ghost", "password": "x"})
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "User does not exist"

    def test_login_wrong_password(self, client, account, session):
        resp = client.post(f"{BASE}/login", json={"username": account.username, "password": "no"})

        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid user credentials"
        assert _set_cookie_headers(resp, "accessToken") == []
        assert _stored_token(session, account.id) is None


# ------------------------------- Refresh ---------------------------------- #
class TestRefreshEndpoint:
    def test_refresh_from_cookie_rotates(self, client, account, session):
        first = _login(client, account).get_json()["data"]

        resp = client.post(f"{BASE}/refresh-token")

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["refreshToken"] != first["refreshToken"]
        assert _set_cookie_headers(resp, "refreshToken")
        assert _stored_token(session, account.id) == data["refreshToken"]

    def test_refresh_from_body(self, account, session, app):
        login = _login(app.test_client(), account).get_json()["data"]

        fresh_client = app.test_client()  # no cookies
        resp = fresh_client.post(
            f"{BASE}/refresh-token", json={"refreshToken": login["refreshToken"]}
        )
        assert resp.status_code == 200

    def test_reused_token_is_rejected(self, account, app):
        login = _login(app.test_client(), account).get_json()["data"]
        other = app.test_client()
        other.post(f"{BASE}/refresh-token", json={"refreshToken": login["refreshToken"]})

        resp = app.test_client().post(
            f"{BASE}/refresh-token", json={"refreshToken": login["refreshToken"]}
        )
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Refresh token is expired or used"

    def test_missing_token(self, client):
        resp = client.post(f"{BASE}/refresh-token", json={})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Unauthorized request"

    def test_garbage_token(self, client):
        resp = client.post(f"{BASE}/refresh-token", json={"refreshToken": "garbage"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid refresh token"

    @pytest.mark.parametrize("value", [123, None, ["tok"], {"t": 1}])
    def test_non_string_token_is_unauthorized(self, client, value):
        resp = client.post(f"{BASE}/refresh-token", json={"refreshToken": value})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Unauthorized request"

    def test_non_object_body_is_unauthorized(self, client):
        resp = client.post(f"{BASE}/refresh-token", json=["refreshToken"])
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Unauthorized request"


# -------------------------------- Logout ---------------------------------- #
class TestLogoutEndpoint:
    def test_logout_clears_cookies_and_revokes_refresh(self, client, account, session, app):
        login = _login(client, account).get_json()["data"]

        resp = client.post(f"{BASE}/logout")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["data"] == {}
        assert body["success"] is True
        for name in ("accessToken", "refreshToken"):
            (header,) = _set_cookie_headers(resp, name)
            assert "Expires=Thu, 01 Jan 1970" in header
            assert "HttpOnly" in header and "Secure" in header
        assert _stored_token(session, account.id) is None

        retry = app.test_client().post(
            f"{BASE}/refresh-token", json={"refreshToken": login["refreshToken"]}
        )
        assert retry.status_code == 401

    def test_logout_with_bearer_header(self, account, app):
        login = _login(app.test_client(), account).get_json()["data"]

        resp = app.test_client().post(
            f"{BASE}/logout", headers={"Authorization": f"Bearer {login['accessToken']}"}
        )
        assert resp.status_code == 200

    def test_logout_requires_access_token(self, client):
        resp = client.post(f"{BASE}/logout")
        assert resp.status_code == 401
        body = resp.get_json()
        assert body["success"] is False
        assert body["message"] == "Unauthorized request"

    def test_logout_rejects_refresh_token_as_access(self, account, app):
        login = _login(app.test_client(), account).get_json()["data"]

        resp = app.test_client().post(
            f"{BASE}/logout", headers={"Authorization": f"Bearer {login['refreshToken']}"}
        )
        assert resp.status_code == 401
