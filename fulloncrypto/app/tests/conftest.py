import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from ..core.db import create_engine_for_url, get_session, set_engine
from ..main import app

@pytest.fixture
def engine(tmp_path):
    test_db = tmp_path / "test.db"
    engine = create_engine_for_url(f"sqlite:///{test_db}")
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    set_engine(engine)
    yield engine
    set_engine(None)
    engine.dispose()

@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session

@pytest.fixture
def client(engine) -> TestClient:
    def _get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
