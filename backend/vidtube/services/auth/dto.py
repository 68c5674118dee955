# vidtube/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for self-registration.

    :param full_name: Display name.
    :param email: Login email.
    :param username: Public handle (stored lowercase).
    :param password: Raw password (hashed by the service).
    :param avatar_path: Local path of the uploaded avatar file.
    :param cover_image_path: Local path of the optional cover image.
    """

    full_name: str | None
    email: str | None
    username: str | None
    password: str | None
    avatar_path: str | None = None
    cover_image_path: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login. Either ``username`` or ``email`` identifies the user.

    :param password: Raw password (to be verified).
    :type password: str
    """

    password: str | None
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT as presented by the client.
    :type refresh_token: str | None
    """

    refresh_token: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Public user view: password hash and refresh token are never included."""

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    """Successful login: public user plus the freshly issued token pair."""

    user: UserPublicOut
    access_token: str
    refresh_token: str
