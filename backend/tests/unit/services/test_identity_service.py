import pytest

from tests.factories.user import UserFactory
from vidstream.models.user import User
from vidstream.services._shared.errors import ConflictError, NotFoundError, ValidationError
from vidstream.services._shared.ports import InMemoryMediaStore
from vidstream.services.identity.dto import UpdateAccountIn
from vidstream.services.identity.service import IdentityService


class TestIdentityService:
    """Validate IdentityService behaviours for a user's own account."""

    @pytest.fixture()
    def service(self, media_store) -> IdentityService:
        """Return a fresh service instance per test."""
        return IdentityService(media_store=media_store)

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def test_get_user_returns_public_projection(self, service, session):
        user = UserFactory(username="dana", refresh_token="secret-token")
        session.commit()

        out = service.get_user(user.id)

        assert out.id == user.id
        assert out.username == "dana"
        assert out.created_at is not None
        assert not hasattr(out, "refresh_token")

    def test_get_user_not_found(self, service):
        with pytest.raises(NotFoundError):
            service.get_user(999_999)

    # --------------------------------------------------------------------- #
    # Account details
    # --------------------------------------------------------------------- #

    def test_update_full_name_only(self, service, session):
        user = UserFactory(full_name="Old Name", email="keep@example.com")
        session.commit()

        out = service.update_account(user.id, UpdateAccountIn(full_name="New Name"))

        assert out.full_name == "New Name"
        assert out.email == "keep@example.com"

    def test_update_email_is_normalized(self, service, session):
        user = UserFactory()
        session.commit()

        out = service.update_account(user.id, UpdateAccountIn(email="  New@Example.COM "))

        assert out.email == "new@example.com"
        session.expire_all()
        assert session.get(User, user.id).email == "new@example.com"

    def test_update_to_own_email_is_allowed(self, service, session):
        user = UserFactory(email="same@example.com")
        session.commit()

        out = service.update_account(user.id, UpdateAccountIn(email="SAME@example.com"))

        assert out.email == "same@example.com"

    def test_update_requires_a_field(self, service, session):
        user = UserFactory()
        session.commit()

        with pytest.raises(ValidationError) as exc:
            service.update_account(user.id, UpdateAccountIn(full_name=" ", email=None))

        assert exc.value.errors == ["fullName", "email"]

    def test_update_email_taken_by_other_user(self, service, session):
        UserFactory(email="taken@example.com")
        user = UserFactory()
        session.commit()

        with pytest.raises(ConflictError) as exc:
            service.update_account(user.id, UpdateAccountIn(email="Taken@example.com"))

        assert exc.value.status_code == 409

    def test_update_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.update_account(123_456, UpdateAccountIn(full_name="X"))

    # --------------------------------------------------------------------- #
    # Images
    # --------------------------------------------------------------------- #

    def test_update_avatar(self, service, session, media_store):
        user = UserFactory()
        session.commit()

        out = service.update_avatar(user.id, "/tmp/new-avatar.png")

        assert out.avatar_url.endswith("new-avatar.png")
        assert media_store.uploads == ["/tmp/new-avatar.png"]

    def test_update_cover_image(self, service, session):
        user = UserFactory()
        session.commit()

        out = service.update_cover_image(user.id, "/tmp/banner.jpg")

        assert out.cover_image_url.endswith("banner.jpg")

    def test_update_avatar_missing_file(self, service, session, media_store):
        user = UserFactory()
        session.commit()

        with pytest.raises(ValidationError) as exc:
            service.update_avatar(user.id, None)

        assert exc.value.message == "Avatar file is missing."
        assert media_store.uploads == []

    def test_update_cover_image_failed_upload_keeps_old_url(self, session):
        service = IdentityService(media_store=InMemoryMediaStore(fail=True))
        user = UserFactory(cover_image_url="https://media.test/old.png")
        session.commit()

        with pytest.raises(ValidationError) as exc:
            service.update_cover_image(user.id, "/tmp/banner.jpg")

        assert exc.value.message == "Error while uploading cover image."
        session.expire_all()
        assert session.get(User, user.id).cover_image_url == "https://media.test/old.png"

    def test_update_avatar_unknown_user(self, service, media_store):
        with pytest.raises(NotFoundError):
            service.update_avatar(55_555, "/tmp/a.png")

        assert media_store.uploads == []
