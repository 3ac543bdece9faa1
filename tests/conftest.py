import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from localauth.app import create_app
from localauth.auth.session import MemorySessionStore, SessionSerializer
from localauth.auth.users import MemoryUserStore, User, UserDraft
from localauth.config import Settings
from localauth.errors import StoreError


class SpyUserStore(MemoryUserStore):
    """MemoryUserStore that records create() calls."""

    def __init__(self) -> None:
        super().__init__()
        self.creates = 0

    def create(self, draft: UserDraft) -> User:
        self.creates += 1
        return super().create(draft)


class BrokenUserStore:
    """Every operation fails like an unreachable database."""

    def find_by_email(self, email: str) -> Optional[User]:
        raise StoreError("database unavailable")

    def find_by_id(self, user_id: str) -> Optional[User]:
        raise StoreError("database unavailable")

    def create(self, draft: UserDraft) -> User:
        raise StoreError("database unavailable")


@pytest.fixture()
def settings() -> Settings:
    return Settings(secret_key="test-secret", log_level="WARNING")


@pytest.fixture()
def users() -> SpyUserStore:
    return SpyUserStore()


@pytest.fixture()
def sessions() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture()
def serializer(sessions, users) -> SessionSerializer:
    return SessionSerializer(sessions, users)


@pytest.fixture()
def app(settings, users, sessions):
    return create_app(settings=settings, users=users, sessions=sessions)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)
