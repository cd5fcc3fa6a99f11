"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.main import app
from src.services.media import MediaUploadResult, get_media_service

TEST_PASSWORD = "testpass123"  # noqa: S105


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's details."""

    def __init__(
        self,
        *args,
        user_id: int | None = None,
        username: str | None = None,
        email: str | None = None,
        access_token: str | None = None,
        refresh_token: str | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.username = username
        self.email = email
        self.access_token = access_token
        self.refresh_token = refresh_token


class FakeMediaService:
    """Media service double returning deterministic URLs."""

    def __init__(self) -> None:
        self.fail = False
        self.uploaded: list[str] = []

    async def upload_file(self, upload):
        if upload is None or not upload.filename:
            return None
        if self.fail:
            return None
        self.uploaded.append(upload.filename)
        return MediaUploadResult(
            url=f"https://media.test/{upload.filename}", public_id=upload.filename
        )


# Use test database - PostgreSQL when configured, SQLite locally
if os.getenv("TEST_DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    from src import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def media():
    """Fake media storage shared with the app for one test."""
    return FakeMediaService()


@pytest.fixture(scope="function")
def client(db, media):
    """Create a test client with database and media overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_service] = lambda: media
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_user(
    client,
    username="alice",
    email="a@x.com",
    password=TEST_PASSWORD,
    fullname="Alice A",
    with_avatar=True,
    cover_image=False,
):
    """Submit the multipart registration form."""
    files = {}
    if with_avatar:
        files["avatar"] = ("avatar.png", b"avatar-bytes", "image/png")
    if cover_image:
        files["coverImage"] = ("cover.png", b"cover-bytes", "image/png")
    return client.post(
        "/api/v1/users/register",
        data={"username": username, "email": email, "password": password, "fullname": fullname},
        files=files or None,
    )


@pytest.fixture
def auth_headers(client):
    """Register and log in a user, returning auth headers with user info."""
    response = register_user(client)
    assert response.status_code == 201

    response = client.post(
        "/api/v1/users/login", json={"username": "alice", "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    data = response.json()["data"]

    return AuthHeaders(
        {"Authorization": f"Bearer {data['accessToken']}"},
        user_id=data["user"]["id"],
        username=data["user"]["username"],
        email=data["user"]["email"],
        access_token=data["accessToken"],
        refresh_token=data["refreshToken"],
    )


@pytest.fixture
def register(client):
    """Return a helper that registers a user through the API."""

    def _register(**kwargs):
        return register_user(client, **kwargs)

    return _register
