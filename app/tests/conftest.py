import os
import tempfile

# Settings are read once at import time; point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-unit-tests-only-min-32-chars"
os.environ["ENVIRONMENT"] = "test"
os.environ["BLOB_STORAGE_DIR"] = tempfile.mkdtemp(prefix="civic-media-")

import pytest
from fastapi.testclient import TestClient

# FORCE model registration
import app.models  # noqa

from app.core.security import hash_password
from app.db.base import Base
from app.db.session import build_engine, build_sessionmaker, get_db
from app.main import app
from app.models.enums import Role
from app.models.profile import Profile
from app.services import auth_service
from app.services.blob_store import LocalBlobStore, get_blob_store

PASSWORD = "secret123"

# in-memory, one shared connection (StaticPool)
engine = build_engine("sqlite://")
TestingSessionLocal = build_sessionmaker(engine)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "media", "/media")


@pytest.fixture
def client(db, blob_store):
    def _get_db():
        s = TestingSessionLocal()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role: Role = Role.CITIZEN, name: str = None, email: str = None) -> Profile:
        counter["n"] += 1
        n = counter["n"]
        p = Profile(
            email=email or f"{role.value.lower()}{n}@example.com",
            name=name or f"{role.value.title()} {n}",
            role=role.value,
            password_hash=hash_password(PASSWORD),
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


@pytest.fixture
def auth_headers(db):
    def _headers(profile: Profile) -> dict:
        session = auth_service.open_session(db, profile)
        return {"Authorization": f"Bearer {auth_service.issue_token(profile, session)}"}

    return _headers
