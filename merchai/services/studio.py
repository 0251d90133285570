"""Application session wiring: one set of governance components per app run."""

from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from merchai.config import logger
from merchai.core.auth import SessionAuth
from merchai.core.database_ops import DocumentStore, SupabaseDocumentStore
from merchai.core.gemini import GeminiMockupClient
from merchai.core.rate_limit import RateLimiter
from merchai.core.secure_storage import MemorySecureStore, SecureStore
from merchai.services.guarded_writes import GuardedWriter
from merchai.services.mockup_service import MockupSession

ONBOARDING_KEY = "onboarding_completed"


@dataclass
class Studio:
    rate_limiter: RateLimiter
    secure_store: SecureStore
    session_auth: SessionAuth
    document_store: DocumentStore
    writer: GuardedWriter
    gemini: GeminiMockupClient
    sessions: Dict[str, MockupSession] = field(default_factory=dict)

    def session_for(self, user_id: str) -> MockupSession:
        session = self.sessions.get(user_id)
        if session is None:
            session = MockupSession(self.gemini, self.writer, user_id)
            self.sessions[user_id] = session
        return session

    def end_session(self, user_id: str) -> None:
        self.sessions.pop(user_id, None)

    def close(self) -> None:
        self.sessions.clear()
        self.rate_limiter.clear()
        logger.info("Studio session closed")


def build_studio(
    document_store: Optional[DocumentStore] = None,
    secure_store: Optional[SecureStore] = None,
    rate_limiter: Optional[RateLimiter] = None,
    gemini_api_key: Optional[str] = None,
    gemini_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Studio:
    """Construct the components shared by every request during one app run."""
    rate_limiter = rate_limiter or RateLimiter()
    secure_store = secure_store or MemorySecureStore()
    session_auth = SessionAuth(secure_store)

    if document_store is None:
        document_store = SupabaseDocumentStore()
        document_store.log_status()

    writer = GuardedWriter(rate_limiter, session_auth, document_store)
    gemini = GeminiMockupClient(
        rate_limiter,
        api_key=gemini_api_key,
        transport=gemini_transport,
    )

    return Studio(
        rate_limiter=rate_limiter,
        secure_store=secure_store,
        session_auth=session_auth,
        document_store=document_store,
        writer=writer,
        gemini=gemini,
    )


__all__ = ["ONBOARDING_KEY", "Studio", "build_studio"]
