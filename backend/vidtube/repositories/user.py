"""User repository: credential store persistence."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import or_, select

from vidtube.models.user import User
from vidtube.repositories.base import BaseRepository


def _norm(value: str | None) -> str | None:
    """Lowercase/trim a lookup key; blank values become ``None``."""
    if value is None:
        return None
    v = value.strip().lower()
    return v or None


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER issues tokens or verifies passwords; it only stores what the
    session manager hands it. Refresh-token writes are column-scoped
    ``UPDATE`` statements so a partial update never trips full-record
    validation.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def _username_or_email_clause(self, username: str | None, email: str | None) -> Any:
        clauses = []
        if (u := _norm(username)) is not None:
            clauses.append(User.username == u)
        if (e := _norm(email)) is not None:
            clauses.append(User.email == e)
        return or_(*clauses) if clauses else None

    def find_by_username_or_email(
        self, username: str | None = None, email: str | None = None
    ) -> User | None:
        """Fetch a user matching ``username`` OR ``email``.

        :param username: Optional username (case-insensitive).
        :type username: str | None
        :param email: Optional email (case-insensitive).
        :type email: str | None
        :returns: User instance or ``None`` when nothing matches or neither
            key was supplied.
        :rtype: User | None
        """
        clause = self._username_or_email_clause(username, email)
        if clause is None:
            return None
        stmt = self._default_eagerload(select(User).where(clause).order_by(User.id))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_username_or_email(self, username: str | None, email: str | None) -> bool:
        """Return ``True`` when either key is already taken."""
        clause = self._username_or_email_clause(username, email)
        if clause is None:
            return False
        return self.exists(clause)

    # ---------------------------- Writes ----------------------------

    def create(self, **fields: Any) -> User:
        """Stage a new user and flush to materialize its id.

        :param fields: Column values (``password_hash`` already hashed).
        :returns: Persisted instance.
        :rtype: User
        """
        return self.add(User(**fields))

    # ---------------------------- Refresh token ----------------------------

    def set_refresh_token(self, user_id: int, token: str) -> bool:
        """Overwrite the stored refresh token. :returns: True if the row existed."""
        return self.update_columns(user_id, {"refresh_token": token}) == 1

    def unset_refresh_token(self, user_id: int) -> bool:
        """Set the stored refresh token to ``NULL``. Idempotent."""
        return self.update_columns(user_id, {"refresh_token": None}) == 1

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        """
        Atomically replace ``expected`` with ``new``.

        Single conditional ``UPDATE ... WHERE id = ? AND refresh_token = ?``;
        of two concurrent rotations presenting the same token only one
        changes a row.

        :returns: ``True`` when this call won the swap.
        """
        changed = self.update_columns(
            user_id, {"refresh_token": new}, User.refresh_token == expected
        )
        return changed == 1
