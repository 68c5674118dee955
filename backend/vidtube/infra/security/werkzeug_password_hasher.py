# vidtube/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from vidtube.services._shared.ports import PasswordHasher


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Adapter over :mod:`werkzeug.security`.

    Digests use Werkzeug's default method (scrypt on current releases) with a
    random per-call salt embedded in the output, e.g. ``scrypt:32768:8:1$salt$hash``.

    :param method: Optional Werkzeug method string (``"scrypt"``, ``"pbkdf2:sha256"``).
    :param salt_length: Salt length in characters.
    """

    method: str | None = None
    salt_length: int = 16

    def hash(self, plaintext: str) -> str:
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        if self.method:
            return generate_password_hash(
                plaintext, method=self.method, salt_length=self.salt_length
            )
        return generate_password_hash(plaintext, salt_length=self.salt_length)

    def verify(self, plaintext: str, digest: str) -> bool:
        if not digest or not isinstance(plaintext, str):
            return False
        try:
            # ``check_password_hash`` is untyped; coerce to bool for mypy.
            return bool(check_password_hash(digest, plaintext))
        except ValueError:
            # Unknown/malformed method prefix in the stored digest
            return False
