"""
Guarded telemetry writes.

Every event the app records goes through the same gates, in order: rate
limit, schema validation, session authorization. Only then is the
normalized payload handed to the document store. These writes are
best-effort: a failing gate or store is logged and the caller carries on.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Type, Union

from pydantic import BaseModel

from merchai.config import logger
from merchai.core.auth import SessionAuth
from merchai.core.database_ops import DocumentStore
from merchai.core.rate_limit import RATE_LIMITS, RateLimitConfig, RateLimiter
from merchai.core.validation import validate
from merchai.models import (
    EventPayload,
    LoginData,
    MockupEditData,
    MockupExportData,
    MockupGenerationData,
    OnboardingData,
)

Payload = Union[EventPayload, Mapping[str, Any]]

class WriteOutcome(str, enum.Enum):
    DISPATCHED = "dispatched"
    RATE_LIMITED = "rate_limited"
    INVALID = "invalid"
    UNAUTHORIZED = "unauthorized"
    STORE_FAILED = "store_failed"

@dataclass(frozen=True)
class WriteResult:
    outcome: WriteOutcome
    category: str
    detail: Optional[str] = None

    @property
    def dispatched(self) -> bool:
        return self.outcome is WriteOutcome.DISPATCHED

@dataclass(frozen=True)
class EventCategory:
    name: str
    rate_key_prefix: str
    rate_limit: RateLimitConfig
    schema: Type[EventPayload]
    collection: str

LOGIN = EventCategory(
    name="login",
    rate_key_prefix="login",
    rate_limit=RATE_LIMITS["login"],
    schema=LoginData,
    collection="logins",
)
ONBOARDING = EventCategory(
    name="onboarding",
    rate_key_prefix="onboarding",
    rate_limit=RATE_LIMITS["api_call"],
    schema=OnboardingData,
    collection="onboarding",
)
MOCKUP_GENERATION = EventCategory(
    name="mockup generation",
    rate_key_prefix="mockup_gen",
    rate_limit=RATE_LIMITS["mockup_generation"],
    schema=MockupGenerationData,
    collection="mockup_generations",
)
MOCKUP_EDIT = EventCategory(
    name="mockup edit",
    rate_key_prefix="mockup_edit",
    rate_limit=RATE_LIMITS["mockup_edit"],
    schema=MockupEditData,
    collection="mockup_edits",
)
MOCKUP_EXPORT = EventCategory(
    name="mockup export",
    rate_key_prefix="mockup_export",
    rate_limit=RATE_LIMITS["mockup_export"],
    schema=MockupExportData,
    collection="mockup_exports",
)

def _payload_user_id(payload: Payload) -> str:
    if isinstance(payload, BaseModel):
        value = getattr(payload, "user_id", "")
    elif isinstance(payload, Mapping):
        value = payload.get("user_id", "")
    else:
        value = ""
    return "" if value is None else str(value)

class GuardedWriter:
    """
    Record app events through the rate-limit, validation and authorization gates.

    Args:
        rate_limiter: Session rate limiter
        session_auth: Source of the signed-in identity
        document_store: Destination for accepted events
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        session_auth: SessionAuth,
        document_store: DocumentStore,
    ):
        self.rate_limiter = rate_limiter
        self.session_auth = session_auth
        self.document_store = document_store

    async def post_login_data(self, data: Payload) -> WriteResult:
        return await self._guarded_write(LOGIN, data)

    async def post_onboarding_data(self, data: Payload) -> WriteResult:
        return await self._guarded_write(ONBOARDING, data)

    async def post_mockup_generation(self, data: Payload) -> WriteResult:
        return await self._guarded_write(MOCKUP_GENERATION, data)

    async def post_mockup_edit(self, data: Payload) -> WriteResult:
        return await self._guarded_write(MOCKUP_EDIT, data)

    async def post_mockup_export(self, data: Payload) -> WriteResult:
        return await self._guarded_write(MOCKUP_EXPORT, data)

    async def _guarded_write(self, category: EventCategory, data: Payload) -> WriteResult:
        user_id = _payload_user_id(data)
        rate_key = f"{category.rate_key_prefix}_{user_id}"

        if not self.rate_limiter.is_allowed(rate_key, category.rate_limit):
            logger.warning(
                f"{category.name.capitalize()} rate limit exceeded",
                extra={"rate_key": rate_key},
            )
            return WriteResult(WriteOutcome.RATE_LIMITED, category.name)

        validation = validate(category.schema, data)
        if not validation.ok:
            logger.error(
                f"{category.name.capitalize()} data validation failed: {validation.error}"
            )
            return WriteResult(WriteOutcome.INVALID, category.name, validation.error)

        if not await self.session_auth.check_authorization(user_id):
            logger.error(
                f"Unauthorized {category.name} attempt", extra={"user_id": user_id}
            )
            return WriteResult(WriteOutcome.UNAUTHORIZED, category.name)

        try:
            await self.document_store.insert_document(
                category.collection, validation.data.model_dump(mode="json")
            )
        except Exception as exc:
            logger.error(
                f"Failed to store {category.name} event",
                extra={"collection": category.collection, "error": str(exc)},
            )
            return WriteResult(WriteOutcome.STORE_FAILED, category.name, str(exc))

        return WriteResult(WriteOutcome.DISPATCHED, category.name)


__all__ = [
    "WriteOutcome",
    "WriteResult",
    "EventCategory",
    "GuardedWriter",
]
