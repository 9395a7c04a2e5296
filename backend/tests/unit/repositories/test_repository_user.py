"""Unit tests for UserRepository."""

import pytest

from tests.factories.subscription import SubscriptionFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from vidstream.repositories.user import UserRepository


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session, hasher):
        return UserRepository(session=session, hasher=hasher)

    def test_create_hashes_password(self, repo, session):
        """Create a user and check only a hash is stored."""
        u = repo.create(
            username="Alice",
            email="Alice@Example.com",
            full_name="Alice",
            password="strongpass",
            avatar_url="https://media.test/a.png",
        )
        session.commit()

        assert u.id is not None
        assert u.username == "alice"
        assert u.cover_image_url == ""
        assert u.password_hash != "strongpass"
        assert repo.verify_password(u, "strongpass")
        assert not repo.verify_password(u, "wrongpass")

    def test_lookups_are_case_insensitive(self, repo, session):
        u = UserFactory(email="bob@example.com", username="bob")
        session.commit()

        assert repo.get_by_email(" BOB@example.com ").id == u.id
        assert repo.get_by_username("Bob").id == u.id
        assert repo.get_by_email("nonexistent@example.com") is None

    def test_find_by_username_or_email(self, repo, session):
        u = UserFactory(email="carol@example.com", username="carol")
        session.commit()

        assert repo.find_by_username_or_email(username="carol").id == u.id
        assert repo.find_by_username_or_email(email="CAROL@example.com").id == u.id
        assert repo.find_by_username_or_email(username="nobody", email="carol@example.com").id == u.id
        assert repo.find_by_username_or_email(username=" ", email=None) is None

    def test_exists_by_username_or_email(self, repo, session):
        UserFactory(email="dave@example.com", username="dave")
        session.commit()

        assert repo.exists_by_username_or_email("DAVE", "x@example.com")
        assert repo.exists_by_username_or_email("x", "Dave@Example.com")
        assert not repo.exists_by_username_or_email("x", "y@example.com")
        assert not repo.exists_by_username_or_email(None, None)

    def test_set_password(self, repo, session):
        u = UserFactory()
        session.commit()
        old_hash = u.password_hash

        repo.set_password(u, "newpass123")
        session.commit()

        assert u.password_hash != old_hash
        assert repo.verify_password(u, "newpass123")
        assert not repo.verify_password(u, DEFAULT_PASSWORD)

    def test_repo_without_hasher_refuses_password_ops(self, session):
        u = UserFactory()

        with pytest.raises(RuntimeError):
            UserRepository(session=session).set_password(u, "x")

    def test_updatable_fields_exclude_secrets(self, repo, session):
        u = UserFactory(full_name="Before", refresh_token="keep")
        old_hash = u.password_hash

        with pytest.raises(ValueError):
            repo.assign_updates(u, {"full_name": "After", "password_hash": "x"})

        repo.assign_updates(
            u, {"full_name": "After", "password_hash": "x", "refresh_token": None}, strict=False
        )

        assert u.full_name == "After"
        assert u.password_hash == old_hash
        assert u.refresh_token == "keep"

    # ----------------------------- refresh slot -----------------------------

    def test_swap_refresh_token_requires_current_value(self, repo, session):
        u = UserFactory(refresh_token="t1")
        session.commit()

        assert repo.swap_refresh_token(u.id, "t1", "t2")
        assert not repo.swap_refresh_token(u.id, "t1", "t3")
        session.commit()

        session.refresh(u)
        assert u.refresh_token == "t2"

    def test_swap_refresh_token_with_empty_slot(self, repo, session):
        u = UserFactory(refresh_token=None)
        session.commit()

        assert not repo.swap_refresh_token(u.id, "anything", "new")

    def test_clear_refresh_token(self, repo, session):
        u = UserFactory(refresh_token="t1")
        session.commit()

        assert repo.clear_refresh_token(u.id)
        session.commit()
        session.refresh(u)
        assert u.refresh_token is None
        assert not repo.clear_refresh_token(987_654)

    # ----------------------------- channel profile -----------------------------

    def test_profile_with_counts(self, repo, session):
        channel = UserFactory(username="erin")
        viewer = UserFactory()
        SubscriptionFactory(subscriber=viewer, channel=channel)
        SubscriptionFactory(channel=channel)
        SubscriptionFactory(subscriber=channel)
        session.commit()

        row = repo.profile_with_counts("ERIN", viewer_id=viewer.id)

        assert row["id"] == channel.id
        assert row["subscribers_count"] == 2
        assert row["channels_subscribed_to_count"] == 1
        assert bool(row["is_subscribed"]) is True
        assert "password_hash" not in row
        assert "refresh_token" not in row

    def test_profile_for_anonymous_viewer(self, repo, session):
        UserFactory(username="frank")
        session.commit()

        row = repo.profile_with_counts("frank")

        assert bool(row["is_subscribed"]) is False
        assert row["subscribers_count"] == 0

    def test_profile_unknown_user(self, repo):
        assert repo.profile_with_counts("ghost") is None
