import os
import tempfile
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="fitness-media-")

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402

PASSWORD = "password123"

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def reset_database() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@dataclass
class Account:
    user: dict
    token: str

    @property
    def id(self) -> int:
        return self.user["id"]

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def register(client: TestClient, email: str, **profile) -> dict:
    response = client.post("/auth/register", json={"email": email, "password": PASSWORD, **profile})
    assert response.status_code == 201, response.text
    return response.json()


def login(client: TestClient, email: str) -> str:
    response = client.post("/auth/login", params={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture(autouse=True)
def _prepare_db():
    reset_database()


@pytest.fixture()
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client():
    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def admin(client: TestClient) -> Account:
    """First registered user, promoted through the one-time admin setup."""
    user = register(client, "admin@example.com", first_name="Ada")
    token = login(client, "admin@example.com")
    response = client.post(
        "/admin/setup",
        json={"user_id": user["id"]},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200, response.text
    return Account(user=response.json(), token=token)


@pytest.fixture()
def make_user(client: TestClient, admin: Account):
    def _make(email: str, role: str = "USER", **profile) -> Account:
        response = client.post(
            "/admin/invitations",
            json={"email": email, "role": role},
            headers=admin.headers,
        )
        assert response.status_code == 201, response.text
        user = register(client, email, **profile)
        return Account(user=user, token=login(client, email))

    return _make
