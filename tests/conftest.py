import pytest
from fastapi.testclient import TestClient

from students_api.core.config import Settings
from students_api.core.database import create_db_engine, init_db
from students_api.main import create_app
from students_api.services.student.student import StudentRepository


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Environment variables win over constructor values; keep the shell's out of tests."""
    for name in ("CONFIG_PATH", "ENV", "STORAGE_PATH", "HTTP_SERVER__ADDRESS", "API_PREFIX", "LOG_LEVEL", "DB_ECHO_SQL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fresh SQLite file for every test."""
    return Settings(storage_path=str(tmp_path / "students.db"), env="test")


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings.get_database_url())
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return StudentRepository(engine)


@pytest.fixture
def client(settings, repository):
    app = create_app(settings, repository)
    with TestClient(app) as client:
        yield client
