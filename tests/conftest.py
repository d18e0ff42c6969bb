# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["CACHE_BACKEND"] = "memory"

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from forge_api.core.security import create_access_token  # noqa: E402
from forge_api.db.session import Base, json_serializer  # noqa: E402
from forge_api.db.session import get_db as app_get_session  # noqa: E402
from forge_api.db.time import utcnow  # noqa: E402
from forge_api.main import app as fastapi_app  # noqa: E402
from forge_api.models import Addon, Comment, Mod, ModVersion, User, UserRole  # noqa: E402
from forge_api.services.cache import MemoryCache, get_cache  # noqa: E402
from forge_api.services.tracking import RequestContext  # noqa: E402

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        json_serializer=json_serializer,
    )

    # pysqlite needs explicit BEGIN for SAVEPOINT to behave.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test starts from empty tables.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def memory_cache() -> Iterator[MemoryCache]:
    """The in-process cache, emptied around each test."""
    backend = get_cache()
    assert isinstance(backend, MemoryCache)
    backend.clear()
    yield backend
    backend.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def request_context() -> RequestContext:
    return RequestContext(
        url="/report-centre",
        useragent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        ip="203.0.113.7",
        languages=["en-GB"],
        country_code="GB",
        country_name="United Kingdom",
    )


def make_user(
    db: Session,
    name: str | None = None,
    role: UserRole = UserRole.USER,
    verified: bool = True,
) -> User:
    """Persist a user with a unique email."""
    number = next(_USER_COUNTER)
    user = User(
        name=name or f"user{number}",
        email=f"user{number}@forge.test",
        role=role,
        email_verified_at=utcnow() if verified else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def user_factory(db_session: Session) -> Callable[..., User]:
    """Create extra users: ``user_factory("Name", UserRole.MODERATOR)``."""
    def _make(name: str | None = None, role: UserRole = UserRole.USER, verified: bool = True) -> User:
        return make_user(db_session, name, role, verified)

    return _make


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    return auth_headers


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """A verified regular user who owns content."""
    return make_user(db_session, "Author")


@pytest.fixture()
def reporter(db_session: Session) -> User:
    """A verified regular user who files reports."""
    return make_user(db_session, "Reporter")


@pytest.fixture()
def moderator(db_session: Session) -> User:
    return make_user(db_session, "Moderator", UserRole.MODERATOR)


@pytest.fixture()
def admin(db_session: Session) -> User:
    return make_user(db_session, "Admin", UserRole.ADMINISTRATOR)


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Authorization headers for the content owner."""
    return auth_headers(test_user)


@pytest.fixture()
def reporter_token(reporter: User) -> dict[str, str]:
    return auth_headers(reporter)


@pytest.fixture()
def moderator_token(moderator: User) -> dict[str, str]:
    return auth_headers(moderator)


@pytest.fixture()
def admin_token(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture()
def mod(db_session: Session, test_user: User) -> Mod:
    mod = Mod(owner_id=test_user.id, name="Better Ores", slug="better-ores", published_at=utcnow())
    db_session.add(mod)
    db_session.commit()
    db_session.refresh(mod)
    return mod


@pytest.fixture()
def mod_version(db_session: Session, mod: Mod) -> ModVersion:
    version = ModVersion(mod_id=mod.id, version="1.2.0")
    db_session.add(version)
    db_session.commit()
    db_session.refresh(version)
    return version


@pytest.fixture()
def addon(db_session: Session, mod: Mod, test_user: User) -> Addon:
    addon = Addon(mod_id=mod.id, owner_id=test_user.id, name="Ore Textures", slug="ore-textures")
    db_session.add(addon)
    db_session.commit()
    db_session.refresh(addon)
    return addon


@pytest.fixture()
def comment(db_session: Session, mod: Mod, test_user: User) -> Comment:
    """A root comment written by the mod owner on their own mod."""
    comment = Comment(
        user_id=test_user.id,
        commentable_type=Mod.morph_type,
        commentable_id=mod.id,
        body="Buy cheap gold at example.test",
    )
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)
    return comment
