"""
Test fixtures for the results service.

Every test gets its own SQLite file. Service tests use `db` (an AsyncSession);
API tests use `client` / `admin_client` (FastAPI TestClient over create_app).
"""
import pytest
from fastapi.testclient import TestClient

from school_results.core.config import Settings
from school_results.core.database import Database
from school_results.main import create_app

ADMIN_EMAIL = "admin@school.test"
ADMIN_PASSWORD = "correct-horse"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'results.db'}"


@pytest.fixture
async def database(database_url):
    database = Database(database_url)
    await database.create_all()
    yield database
    await database.drop_all()
    await database.dispose()


@pytest.fixture
async def db(database):
    async with database.sessionmaker() as session:
        yield session


def make_settings(database_url: str, **overrides) -> Settings:
    values = {
        "DATABASE_URL": database_url,
        "SEED_DATABASE": True,
        "SEED_DEMO_DATA": False,
        "SEED_ADMIN_EMAIL": ADMIN_EMAIL,
        "SEED_ADMIN_PASSWORD": ADMIN_PASSWORD,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app_settings(database_url):
    return make_settings(database_url)


@pytest.fixture
def client(app_settings):
    """Unauthenticated client; the app is seeded with one admin and no data."""
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    response = client.post("/api/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def school(admin_client):
    """Session, class, two subjects and three students created through the API."""
    session = admin_client.post("/api/sessions", json={"name": "2025-26", "isActive": True}).json()
    school_class = admin_client.post("/api/classes", json={"name": "10th Grade", "sessionId": session["id"]}).json()

    students = [
        admin_client.post(
            "/api/students",
            json={"rollNo": roll, "name": name, "classId": school_class["id"]}
        ).json()
        for roll, name in [(1, "Aakash Yadav"), (2, "Aryan Kumar"), (3, "Rahul Kumar")]
    ]
    subjects = [
        admin_client.post(
            "/api/subjects",
            json={"name": name, "maxMarks": 80, "date": date, "classId": school_class["id"]}
        ).json()
        for name, date in [("Unit Test 1", "2025-08-10"), ("Half Yearly", "2025-10-01")]
    ]
    return {"session": session, "class": school_class, "students": students, "subjects": subjects}
