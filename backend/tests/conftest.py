import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from calendar_admin.database import Base
from calendar_admin.main import app
from calendar_admin.storage import SqlStorage, get_storage

TEST_DB_URL = "sqlite:///./test_calendar.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_storage():
    db = TestingSession()
    try:
        yield SqlStorage(db)
    finally:
        db.close()


app.dependency_overrides[get_storage] = override_get_storage


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def storage(db):
    return SqlStorage(db)


@pytest.fixture
def client():
    return TestClient(app)


def add_event(client, **fields):
    payload = {"start": "2025-09-01", "title_zh": "開學典禮", "type": "school-activity"}
    payload.update(fields)
    return client.post("/admin/add", data=payload)
