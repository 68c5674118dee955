# vidtube/services/auth/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from vidtube.models.user import User
from vidtube.repositories.user import UserRepository
from vidtube.services._shared.base import BaseService
from vidtube.services._shared.errors import (
    AuthError,
    ConflictError,
    InternalError,
    NotFoundError,
    TokenInvalidError,
    UploadError,
    ValidationError,
)
from vidtube.services._shared.ports import MediaStore, PasswordHasher, TokenService
from vidtube.services.auth.dto import (
    LoginIn,
    LoginOut,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserPublicOut,
)

logger = logging.getLogger(__name__)


def _blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _normalize_email(value: str) -> str:
    email = value.strip().lower()
    local, sep, domain = email.partition("@")
    if not sep or not local or not domain or any(c.isspace() for c in email):
        raise ValidationError("Email format looks invalid")
    return email


class AuthService(BaseService):
    """
    Account and session lifecycle service (register / login / refresh / logout).

    Session states
    --------------
    ``Anonymous`` -> login -> ``Authenticated`` -> refresh* -> ``Authenticated``
    -> logout -> ``Anonymous``.

    The token service is stateless. This service owns the single mutable
    piece of session state: the refresh token stored on the user row. A
    refresh token is accepted only when it verifies cryptographically AND
    equals that stored value; rotation replaces it through a conditional
    update so only one of several concurrent refreshes can win.
    """

    def __init__(
        self,
        *,
        token_service: TokenService,
        password_hasher: PasswordHasher,
        media_store: MediaStore | None = None,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param token_service: Issues/verifies access and refresh JWTs.
        :param password_hasher: One-way hash + verify for credentials.
        :param media_store: Upload target for avatars and cover images.
            Only ``register`` needs it; its absence surfaces there, after the
            input checks.
        """
        self.tokens = token_service
        self.hasher = password_hasher
        self.media = media_store

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserPublicOut:
        """
        Create an account after uniqueness and media checks.

        :param dto: Registration input with local paths of uploaded files.
        :returns: Public view of the created user.
        :raises ValidationError: Missing fields, malformed email or missing avatar.
        :raises ConflictError: Username or email already taken.
        :raises UploadError: The avatar upload yielded no URL.
        :raises InternalError: No media store, or the created row could not
            be read back.
        """
        if any(_blank(v) for v in (dto.full_name, dto.email, dto.username, dto.password)):
            raise ValidationError("All fields are required")
        email = _normalize_email(dto.email)

        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            if repo.exists_by_username_or_email(dto.username, email):
                raise ConflictError("User with email or username already exists")

        if _blank(dto.avatar_path):
            raise ValidationError("Avatar file is required")

        if self.media is None:
            raise InternalError("Media store is not configured")

        avatar_url = self.media.upload(dto.avatar_path)
        # Optional: a failed cover upload degrades to an empty URL.
        cover_url = self.media.upload(dto.cover_image_path) if dto.cover_image_path else None

        if not avatar_url:
            raise UploadError("Avatar file is required")

        try:
            with self.rw_uow() as uow:
                user = uow.users.create(
                    full_name=dto.full_name.strip(),
                    email=email,
                    username=dto.username.lower(),
                    password_hash=self.hasher.hash(dto.password),
                    avatar=avatar_url,
                    cover_image=cover_url or "",
                )
                user_id = user.id
        except IntegrityError as exc:
            # Lost a race against a concurrent registration.
            raise ConflictError("User with email or username already exists") from exc
        except ValueError as exc:
            # Model validators reject values the checks above let through.
            raise ValidationError(str(exc) or "Invalid user data") from exc

        with self.ro_uow() as uow:
            created = uow.users.get(user_id)
            if created is None:
                raise InternalError("Something went wrong while registering the user")
            out = self._to_user_public(created)

        logger.info("User registered", extra={"event": "auth.register", "user_id": user_id})
        return out

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials, then issue and persist a new token pair.

        Tokens are issued only after the password verified. The stored refresh
        token is overwritten, revoking any previous session.

        :raises ValidationError: Neither username nor email given.
        :raises NotFoundError: No user matches.
        :raises AuthError: Password mismatch (stored token untouched).
        """
        if _blank(dto.username) and _blank(dto.email):
            raise ValidationError("username or email is required")

        with self.ro_uow() as uow:
            user = uow.users.find_by_username_or_email(username=dto.username, email=dto.email)
            if user is None:
                raise NotFoundError("User does not exist")
            if not self.hasher.verify(dto.password or "", user.password_hash):
                logger.info(
                    "Login rejected", extra={"event": "auth.login_failed", "user_id": user.id}
                )
                raise AuthError("Invalid user credentials")
            public = self._to_user_public(user)

        pair = self._issue_pair(public.id)
        with self.rw_uow() as uow:
            uow.users.set_refresh_token(public.id, pair.refresh_token)

        logger.info("User logged in", extra={"event": "auth.login", "user_id": public.id})
        return LoginOut(
            user=public,
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        )

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate the refresh token and emit a new token pair.

        :raises AuthError: Missing, invalid, superseded or revoked token.
            Unexpected failures are reported as ``AuthError`` as well.
        """
        presented = dto.refresh_token
        if _blank(presented):
            raise AuthError("Unauthorized request")

        try:
            return self._rotate(presented)
        except AuthError as exc:
            logger.info(
                "Refresh rejected: %s",
                exc.message,
                extra={"event": "auth.refresh_rejected"},
            )
            raise
        except Exception as exc:
            logger.warning(
                "Refresh failed unexpectedly",
                exc_info=True,
                extra={"event": "auth.refresh_rejected"},
            )
            raise AuthError(str(exc) or "Invalid refresh token") from exc

    def _rotate(self, presented: str) -> TokenPairOut:
        try:
            subject = self.tokens.verify_refresh_token(presented)
        except TokenInvalidError as exc:
            raise AuthError("Invalid refresh token") from exc
        if not isinstance(subject, int):
            raise AuthError("Invalid refresh token")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(subject)
            if user is None:
                raise AuthError("Invalid refresh token")
            if user.refresh_token != presented:
                raise AuthError("Refresh token is expired or used")

            pair = self._issue_pair(user.id)
            if not repo.swap_refresh_token(user.id, expected=presented, new=pair.refresh_token):
                # Another refresh rotated the same token first.
                raise AuthError("Refresh token is expired or used")
            user_id = user.id

        logger.info("Tokens rotated", extra={"event": "auth.refresh", "user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: int) -> None:
        """Clear the stored refresh token. Idempotent, also for unknown ids."""
        with self.rw_uow() as uow:
            uow.users.unset_refresh_token(user_id)
        logger.info("User logged out", extra={"event": "auth.logout", "user_id": user_id})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user_id: int) -> TokenPairOut:
        return TokenPairOut(
            access_token=self.tokens.issue_access_token(user_id),
            refresh_token=self.tokens.issue_refresh_token(user_id),
        )

    @staticmethod
    def _to_user_public(user: User) -> UserPublicOut:
        """Map an ORM ``User`` to the public DTO (no hash, no refresh token)."""
        return UserPublicOut(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            cover_image=user.cover_image or "",
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
