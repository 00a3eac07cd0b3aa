# tests/conftest.py

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DB_ENGINE", "sqlite")
os.environ.setdefault("SQLITE_PATH", ":memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import build_engine, get_db, init_db
from main import app
from models.subjects import Subject
from services import student_service, task_service

API = "/api"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==========================================================
# [Helpers]
# ==========================================================

def subject_id(db, class_id: int, name: str = "Matematika") -> int:
    return db.query(Subject.id).filter(Subject.class_id == class_id, Subject.name == name).scalar()


@pytest.fixture
def class1(db):
    """Class 1 with two students, Matematika and two tasks under it."""
    math_id = subject_id(db, 1)
    return {
        "class_id": 1,
        "math_id": math_id,
        "ipa_id": subject_id(db, 1, "IPA"),
        "s1": student_service.create_student(db, 1, "Andi", "1001"),
        "s2": student_service.create_student(db, 1, "Budi", "1002"),
        "t1": task_service.create_task(db, 1, "Tugas 1", math_id),
        "t2": task_service.create_task(db, 1, "Tugas 2", math_id),
    }


@pytest.fixture
def class2(db):
    """Class 2 with one student and one task."""
    math_id = subject_id(db, 2)
    return {
        "class_id": 2,
        "math_id": math_id,
        "s1": student_service.create_student(db, 2, "Citra", "2001"),
        "t1": task_service.create_task(db, 2, "Tugas Kelas 2", math_id),
    }


def register(client, username: str, class_id: int, password: str = "secret123", name: str = None):
    return client.post(f"{API}/auth/register", json={
        "username": username,
        "password": password,
        "name": name or username.title(),
        "class_id": class_id,
    })


def auth_headers(client, username: str, class_id: int, password: str = "secret123") -> dict:
    register(client, username, class_id, password)
    response = client.post(f"{API}/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def teacher1(client):
    return auth_headers(client, "guru1", 1)


@pytest.fixture
def teacher2(client):
    return auth_headers(client, "guru2", 2)
