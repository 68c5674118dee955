from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    One-way credential hashing.

    ``hash`` embeds a fresh random salt in every digest, so hashing the same
    plaintext twice yields different digests. ``verify`` compares in
    constant time and returns ``False`` on mismatch instead of raising.
    """

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, digest: str) -> bool: ...
