"""Pytest configuration and fixtures."""

import os
import tempfile
import threading
from typing import Generator

import pytest

# Must be set before any app module reads its config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "provider-directory-tests.log"))
os.environ.setdefault("ADMIN_JWT_SECRET", "test-secret")
os.environ.setdefault("EXPORT_DELAY_SECONDS", "0")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.auth import require_admin
from app.core.db import Base, get_db
from app.core.errors import StorageError
from app.models.provider import Provider
from app.schemas.enums import ProviderCategory
from app.services.cascade import ProviderCascade
from app.services.media_lifecycle import MediaLifecycleManager
from app.services.object_store import FetchedObject, get_object_store
from app.services.provider_store import ProviderStore

STORAGE = "https://storage.test/storage/v1/object/public/providers/"


def media_url(name: str) -> str:
    return f"{STORAGE}{name}"


class FakeObjectStore:
    """In-memory stand-in for the object store gateway."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fetched: list[str] = []
        self.fail_delete: set[str] = set()
        self.fail_fetch: set[str] = set()
        self._lock = threading.Lock()

    def owns(self, url: str) -> bool:
        return url.startswith(STORAGE)

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        url = media_url(path)
        self.objects[url] = data
        return url

    def delete(self, url: str) -> bool:
        with self._lock:
            self.deleted.append(url)
        if url in self.fail_delete:
            return False
        self.objects.pop(url, None)
        return True

    def fetch_bytes(self, url: str) -> FetchedObject:
        self.fetched.append(url)
        if url in self.fail_fetch:
            raise StorageError("Failed to fetch file: 500", url=url)
        return FetchedObject(content_type="image/jpeg", data=self.objects.get(url, b"bytes"))


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(db_session: Session) -> ProviderStore:
    return ProviderStore(db_session)


@pytest.fixture
def manager(store: ProviderStore, object_store: FakeObjectStore) -> MediaLifecycleManager:
    return MediaLifecycleManager(store, object_store, max_workers=4)


@pytest.fixture
def cascade(store: ProviderStore, manager: MediaLifecycleManager) -> ProviderCascade:
    return ProviderCascade(store, manager)


def provider_data(**overrides) -> dict:
    data = {
        "name": "Studio Anna",
        "email": "anna@example.com",
        "category": ProviderCategory.nails,
        "min_price": 5000,
        "max_price": 15000,
        "country": "Magyarország",
        "city": "Budapest",
        "postal_code": "1051",
        "street": "Váci utca",
        "house_number": "12",
        "phone_number": "+36301234567",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_provider(store: ProviderStore):
    def _make(images=(), videos=(), **overrides) -> Provider:
        data = provider_data(**overrides)
        data["media"] = {
            "images": [{"url": u, "isMain": i == 0} for i, u in enumerate(images)],
            "videos": [{"url": u, "isMain": False} for u in videos],
        }
        return store.create(data)

    return _make


@pytest.fixture
def client(db_session: Session, object_store: FakeObjectStore) -> Generator[TestClient, None, None]:
    from app.main import app

    def _db():
        yield db_session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[require_admin] = lambda: "admin-test"
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
