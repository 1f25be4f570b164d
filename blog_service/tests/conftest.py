import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blog_service.database import Base, get_db, init_db
from blog_service.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    init_db(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def author(client):
    response = client.post(
        "/api/users",
        json={"name": "Ada Lovelace", "email": "ada@example.com", "password": "analytical"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def logged_in_client(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Grace Hopper", "email": "grace@example.com", "password": "cobol1959"},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def post(client, author):
    response = client.post(
        "/api/posts",
        json={"title": "First post", "content": "Hello world", "author_id": author["id"]},
    )
    assert response.status_code == 201
    return response.json()
