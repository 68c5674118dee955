"""Unit tests for UserRepository."""

from __future__ import annotations

import pytest
from sqlalchemy import insert
from vidtube.models.user import User
from vidtube.repositories.user import UserRepository

from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    # ----------------------------- Lookups -----------------------------

    def test_find_by_username_or_email(self, repo):
        u = UserFactory(email="alice@example.com", username="alice")

        assert repo.find_by_username_or_email(username="alice").id == u.id
        assert repo.find_by_username_or_email(email="ALICE@example.com").id == u.id
        # OR semantics: a wrong username does not hide a matching email
        found = repo.find_by_username_or_email(username="nobody", email="alice@example.com")
        assert found.id == u.id

    def test_find_by_username_or_email_without_keys(self, repo):
        UserFactory()
        assert repo.find_by_username_or_email() is None
        assert repo.find_by_username_or_email(username="  ", email=None) is None

    def test_find_unknown_returns_none(self, repo):
        assert repo.find_by_username_or_email(username="ghost") is None

    def test_exists_by_username_or_email(self, repo):
        UserFactory(email="bob@example.com", username="bob")

        assert repo.exists_by_username_or_email("bob", "new@example.com")
        assert repo.exists_by_username_or_email("newbie", "bob@example.com")
        assert not repo.exists_by_username_or_email("newbie", "new@example.com")

    def test_get_by_id(self, repo):
        u = UserFactory()
        assert repo.get(u.id) is u
        assert repo.get(u.id + 1000) is None

    # ----------------------------- Writes -----------------------------

    def test_create_flushes_and_assigns_id(self, repo):
        u = repo.create(
            full_name="Carol",
            email="carol@example.com",
            username="carol",
            password_hash="digest",
            avatar="https://media.test/c.png",
        )
        assert u.id is not None
        assert repo.get(u.id).email == "carol@example.com"

    def test_save_flushes_changes(self, repo):
        u = UserFactory(full_name="Before")
        u.full_name = "After"
        repo.save(u)

        assert repo.get(u.id).full_name == "After"

    # -------------------------- Refresh token --------------------------

    def test_set_and_unset_refresh_token(self, repo, session):
        u = UserFactory()

        assert repo.set_refresh_token(u.id, "rt-1") is True
        assert u.refresh_token == "rt-1"

        assert repo.unset_refresh_token(u.id) is True
        session.expire_all()
        assert repo.get(u.id).refresh_token is None

    def test_unset_is_idempotent_and_tolerates_unknown_ids(self, repo):
        u = UserFactory()
        repo.unset_refresh_token(u.id)
        repo.unset_refresh_token(u.id)

        assert repo.unset_refresh_token(u.id + 1000) is False

    def test_partial_update_skips_full_record_validation(self, repo, session):
        """Clearing the token works on rows the model validators would reject."""
        result = session.execute(
            insert(User.__table__).values(
                username="legacy",
                email="legacy@example.com",
                full_name="Legacy",
                password_hash="",
                avatar="",
                refresh_token="rt",
            )
        )
        user_id = result.inserted_primary_key[0]

        assert repo.unset_refresh_token(user_id) is True
        assert repo.get(user_id).refresh_token is None

    def test_swap_refresh_token_is_conditional(self, repo, session):
        u = UserFactory(refresh_token="old")

        assert repo.swap_refresh_token(u.id, expected="stale", new="x") is False
        assert repo.swap_refresh_token(u.id, expected="old", new="new") is True
        # Second attempt presenting the same token loses
        assert repo.swap_refresh_token(u.id, expected="old", new="other") is False

        session.expire_all()
        assert repo.get(u.id).refresh_token == "new"
