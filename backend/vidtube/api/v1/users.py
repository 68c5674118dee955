"""Account and session endpoints: register, login, logout, refresh."""

from __future__ import annotations

from flask import Blueprint, request

from vidtube.api.deps import (
    REFRESH_COOKIE,
    api_response,
    build_auth_service,
    clear_auth_cookies,
    current_user_id,
    require_auth,
    set_auth_cookies,
    timing,
)
from vidtube.api.uploads import temp_uploads
from vidtube.schemas import (
    LoginResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from vidtube.services.auth.dto import LoginIn, RefreshIn, RegisterIn

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()


@bp.post("/register")
@timing
def register():
    """Create an account from a multipart form with avatar/cover files."""

    data = register_schema.load(request.form.to_dict())
    service = build_auth_service()
    with temp_uploads("avatar", "coverImage") as files:
        user = service.register(
            RegisterIn(
                full_name=data["full_name"],
                email=data["email"],
                username=data["username"],
                password=data["password"],
                avatar_path=files["avatar"],
                cover_image_path=files["coverImage"],
            )
        )
    return api_response(user_schema.dump(user), "User registered successfully", status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate by username or email and issue both tokens."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = build_auth_service().login(
        LoginIn(password=data["password"], username=data["username"], email=data["email"])
    )
    response = api_response(login_response_schema.dump(result), "User logged in successfully")
    return set_auth_cookies(
        response, access_token=result.access_token, refresh_token=result.refresh_token
    )


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the stored refresh token and clear both cookies."""

    build_auth_service().logout(current_user_id())
    return clear_auth_cookies(api_response({}, "User logged out"))


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token presented by cookie or JSON body."""

    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        body = request.get_json(silent=True)
        token = refresh_schema.load(body if isinstance(body, dict) else {})["refresh_token"]
    pair = build_auth_service().refresh(RefreshIn(refresh_token=token))
    response = api_response(token_pair_schema.dump(pair), "Access token refreshed")
    return set_auth_cookies(
        response, access_token=pair.access_token, refresh_token=pair.refresh_token
    )
