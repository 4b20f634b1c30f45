import os
import tempfile

_default_test_secret = "test-jwt-secret-for-pytest-only-0000000000000000"
if len(os.environ.get("JWT_SECRET", "")) < 32:
    os.environ["JWT_SECRET"] = _default_test_secret
os.environ.setdefault("ENV", "test")

import subprocess
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

_default_sqlite_url = "sqlite:///" + os.path.join(tempfile.gettempdir(), "worktime_test.db")
TEST_DATABASE_URL = os.getenv("DATABASE_URL", _default_sqlite_url)
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from worktime import database  # noqa: E402
from worktime import models  # noqa: E402,F401
from worktime.models.company import Company  # noqa: E402
from worktime.models.user import User  # noqa: E402


def _is_postgres() -> bool:
    return make_url(TEST_DATABASE_URL).drivername.startswith("postgresql")


def _ensure_database_exists(database_url: str) -> None:
    url = make_url(database_url)

    if not url.drivername.startswith("postgresql"):
        return

    db_name = url.database
    admin_url = url.set(database="postgres")
    admin_engine = create_engine(admin_url, isolation_level="AUTOCOMMIT")

    try:
        with admin_engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": db_name},
            ).scalar()
            if not exists:
                safe_db_name = db_name.replace('"', '""')
                conn.execute(text(f'CREATE DATABASE "{safe_db_name}"'))
    finally:
        admin_engine.dispose()


def _clear_tables() -> None:
    with database.engine.begin() as conn:
        if _is_postgres():
            names = [t.name for t in database.Base.metadata.sorted_tables]
            quoted = ", ".join([f'"public"."{name}"' for name in names])
            conn.execute(text(f"TRUNCATE TABLE {quoted} RESTART IDENTITY CASCADE"))
            return

        for table in reversed(database.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database() -> None:
    database.configure_database()

    if _is_postgres():
        _ensure_database_exists(TEST_DATABASE_URL)

        env = os.environ.copy()
        env["DATABASE_URL"] = TEST_DATABASE_URL

        subprocess.run(
            ["alembic", "upgrade", "head"],
            check=True,
            cwd=Path(__file__).resolve().parents[2],
            env=env,
        )
        return

    database.Base.metadata.drop_all(bind=database.engine)
    database.Base.metadata.create_all(bind=database.engine)


@pytest.fixture(scope="function", autouse=True)
def _clear_tables_between_tests():
    _clear_tables()
    yield
    _clear_tables()


@pytest.fixture
def db():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def company_factory():
    def create(name: str = "Acme") -> Company:
        with database.session_scope() as db:
            row = Company(name=name)
            db.add(row)
            db.flush()
        return row

    return create


@pytest.fixture
def user_factory():
    counter = {"n": 0}

    def create(company_id: int, role: str = "USER", email: str | None = None, **kwargs) -> User:
        counter["n"] += 1
        with database.session_scope() as db:
            row = User(
                company_id=int(company_id),
                email=email or f"user{counter['n']}-{company_id}@example.com",
                role=role,
                **kwargs,
            )
            db.add(row)
            db.flush()
        return row

    return create
