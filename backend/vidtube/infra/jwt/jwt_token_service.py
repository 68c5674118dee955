# vidtube/infra/jwt/jwt_token_service.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from vidtube.core.config import parse_duration
from vidtube.services._shared.errors import TokenInvalidError
from vidtube.services._shared.ports import TokenService

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Token emission configuration.

    :param access_secret: HMAC key for access tokens.
    :param access_expires: Access token lifetime.
    :param refresh_secret: HMAC key for refresh tokens (independent of the access key).
    :param refresh_expires: Refresh token lifetime.
    :param algorithm: JWS algorithm.
    """

    access_secret: str
    access_expires: timedelta
    refresh_secret: str
    refresh_expires: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> TokenSettings:
        """Build settings from a Flask config mapping."""
        return cls(
            access_secret=config["ACCESS_TOKEN_SECRET"],
            access_expires=parse_duration(config["ACCESS_TOKEN_EXPIRY"]),
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            refresh_expires=parse_duration(config["REFRESH_TOKEN_EXPIRY"]),
            algorithm=config.get("TOKEN_ALGORITHM", "HS256"),
        )


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class JWTTokenService(TokenService):
    """
    PyJWT-backed token service.

    Access tokens carry the claims ``flask-jwt-extended`` expects
    (``sub``, ``type``, ``fresh``, ``jti``) so the request guard can decode
    them with the same access secret. Every token gets a random ``jti``:
    two tokens issued for the same user within the same second still differ.
    """

    settings: TokenSettings
    clock: Callable[[], datetime] = field(default=_utcnow)

    # -------------------------- issue ----------------------------

    def _encode(self, user_id: int | str, *, kind: str, secret: str, ttl: timedelta) -> str:
        now = self.clock()
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": now,
            "nbf": now,
            "exp": now + ttl,
            "jti": uuid4().hex,
            "type": kind,
        }
        if kind == ACCESS_TOKEN_TYPE:
            payload["fresh"] = False
        return jwt.encode(payload, secret, algorithm=self.settings.algorithm)

    def issue_access_token(self, user_id: int | str) -> str:
        return self._encode(
            user_id,
            kind=ACCESS_TOKEN_TYPE,
            secret=self.settings.access_secret,
            ttl=self.settings.access_expires,
        )

    def issue_refresh_token(self, user_id: int | str) -> str:
        return self._encode(
            user_id,
            kind=REFRESH_TOKEN_TYPE,
            secret=self.settings.refresh_secret,
            ttl=self.settings.refresh_expires,
        )

    # -------------------------- verify ---------------------------

    def _decode(self, token: str, *, kind: str, secret: str) -> int | str:
        if not token or not isinstance(token, str):
            raise TokenInvalidError("Token is missing")
        try:
            claims = cast(
                dict[str, Any],
                jwt.decode(
                    token,
                    secret,
                    algorithms=[self.settings.algorithm],
                    options={"require": ["exp", "iat", "sub"]},
                ),
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenInvalidError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError("Invalid token") from exc

        if claims.get("type") != kind:
            raise TokenInvalidError("Wrong token type")
        return self._coerce_subject(claims["sub"])

    def verify_access_token(self, token: str) -> int | str:
        return self._decode(token, kind=ACCESS_TOKEN_TYPE, secret=self.settings.access_secret)

    def verify_refresh_token(self, token: str) -> int | str:
        return self._decode(token, kind=REFRESH_TOKEN_TYPE, secret=self.settings.refresh_secret)

    @staticmethod
    def _coerce_subject(subject: Any) -> int | str:
        """Return digit-string subjects as ``int`` user ids."""
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        if isinstance(subject, str) and subject:
            return subject
        raise TokenInvalidError("Invalid token subject")
