from __future__ import annotations

from typing import Protocol


class TokenService(Protocol):
    """
    Port for issuing and verifying signed, expiring tokens.

    Implementations are stateless: they never consult the credential store.
    Whether a refresh token is still the *current* one is the session
    manager's check, not this port's.

    ``verify_*`` raise :class:`~vidtube.services._shared.errors.TokenInvalidError`
    on bad signature, expiry, malformed input or wrong token kind.
    """

    def issue_access_token(self, user_id: int | str) -> str: ...

    def issue_refresh_token(self, user_id: int | str) -> str: ...

    def verify_access_token(self, token: str) -> int | str: ...

    def verify_refresh_token(self, token: str) -> int | str: ...
