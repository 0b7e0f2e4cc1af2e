import os
import tempfile

# must be set before db.py is imported (engine is created at import time)
_DB_DIR = tempfile.mkdtemp(prefix="pickem-tests-")
os.environ["DB_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")

import pytest  # noqa: E402

from db import Base, SessionLocal, engine, init_db  # noqa: E402
from webapp import create_app  # noqa: E402


@pytest.fixture(scope="session")
def app():
    # Ensure Flask is in testing mode
    os.environ["FLASK_ENV"] = "testing"

    app = create_app()
    app.config.update(
        TESTING=True,
    )
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def clean_db():
    init_db()
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture()
def db_session(clean_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
