import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from core.config import Settings
from main import create_app
from models.base import Base
from tests.factories import make_repository


@pytest.fixture
def db_file(tmp_path):
    path = tmp_path / "sieges.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return path


@pytest.fixture
def db(db_file):
    """Sync session for seeding; the API reads through its own async engine."""
    engine = create_engine(f"sqlite:///{db_file}")
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def repo(db_file):
    return make_repository(db_file)


@pytest.fixture
def settings():
    return Settings(LOG_LEVEL="WARNING")


@pytest.fixture
def client(repo, settings):
    app = create_app(settings=settings, repository=repo)
    with TestClient(app) as c:
        yield c
