from typing import Any, Dict, List, Tuple

import pytest

from merchai.core.auth import SessionAuth, TokenData
from merchai.core.database_ops import DocumentStore
from merchai.core.rate_limit import RateLimiter
from merchai.core.secure_storage import MemorySecureStore
from merchai.services.guarded_writes import GuardedWriter

USER_ID = "user123"


class FakeClock:
    """Millisecond clock the tests advance by hand."""

    def __init__(self, start: float = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class RecordingDocumentStore(DocumentStore):
    def __init__(self):
        self.inserted: List[Tuple[str, Dict[str, Any]]] = []

    async def insert_document(self, collection: str, document: Dict[str, Any]) -> None:
        self.inserted.append((collection, document))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(clock=clock)


@pytest.fixture
def secure_store():
    return MemorySecureStore()


@pytest.fixture
def session_auth(secure_store, clock):
    return SessionAuth(secure_store, clock=clock)


@pytest.fixture
async def signed_in(session_auth):
    await session_auth.store_tokens(
        TokenData(
            access_token="access-abc",
            refresh_token="refresh-abc",
            expires_in=3600,
            user_id=USER_ID,
        )
    )
    return session_auth


@pytest.fixture
def document_store():
    return RecordingDocumentStore()


@pytest.fixture
def writer(rate_limiter, session_auth, document_store):
    return GuardedWriter(rate_limiter, session_auth, document_store)
