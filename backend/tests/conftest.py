"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.

Services commit and roll back through their Units of Work; the session joins
the outer connection in ``create_savepoint`` mode, so a service commit only
releases its own SAVEPOINT and everything is discarded when the test ends.
Tests that expect a service to *fail* should ``session.commit()`` their
factory data first, otherwise the service's rollback discards it.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from vidstream.core.config import TestingConfig
from vidstream.core.extensions import db as _db  # Flask-SQLAlchemy instance
from vidstream.factory import create_app  # application factory under test
from vidstream.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from vidstream.services._shared.ports import InMemoryMediaStore

FAST_HASH_METHOD = "pbkdf2:sha256:1000"


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied, media and
        upload staging pointed at temporary directories.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    media_root = tmp_path_factory.mktemp("media")
    upload_tmp = tmp_path_factory.mktemp("uploads")

    class TestConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
        MEDIA_STORE = "local"
        MEDIA_ROOT = str(media_root)
        UPLOAD_TMP_DIR = str(upload_tmp)
        AUTH_COOKIE_SECURE = False
        LOG_LEVEL = "WARNING"

    app = create_app(TestConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        engine = _db.engine

        # pysqlite defers BEGIN; take over transaction control so SAVEPOINTs nest.
        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) SAVEPOINT per test; the session nests its own SAVEPOINTs inside it
    connection.begin_nested()

    # 3) Scoped session bound to the connection
    SessionFactory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
    )
    scoped = scoped_session(SessionFactory)

    # 4) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture(scope="session")
def hasher():
    """Cheap password hasher shared by factories and services."""
    return WerkzeugPasswordHasher(method=FAST_HASH_METHOD)


@pytest.fixture()
def media_store():
    return InMemoryMediaStore()


@pytest.fixture()
def token_provider(app):
    return app.extensions["vidstream"]["token_provider"]


@pytest.fixture()
def client(app, session):
    return app.test_client()


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
