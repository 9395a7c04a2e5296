import pytest
from sqlalchemy import text

from tests.factories.user import UserFactory
from vidstream.models.user import User
from vidstream.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from vidstream.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            # Add a transient object; any flush/autoflush must be blocked.
            user = UserFactory.build()  # not persisted
            uow.session.add(user)
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("UPDATE users SET refresh_token = NULL WHERE id = :id"), {"id": 1}
            )

    def test_allows_reads(self, session):
        """
        Read operations should work normally within RO UoW.
        """
        with RWuow() as uow:
            uow.users.add(UserFactory.build(username="reader"))

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1
            assert uow.users.get_by_username("reader") is not None

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, session):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        with RWuow() as uow:
            user = uow.users.add(UserFactory.build())
            uow.session.flush()
            user_id = user.id
            original_email = user.email

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        session.expire_all()
        assert session.get(User, user_id).email == original_email

    def test_guards_are_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())

    def test_attaches_to_open_transaction(self, session):
        """An RO scope inside a running transaction must not roll it back."""
        user = UserFactory()  # flushed, not committed

        with ROuow() as uow:
            assert uow.users.get(user.id) is not None

        assert session.get(User, user.id) is not None
        assert user in session
