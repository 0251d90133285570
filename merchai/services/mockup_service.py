"""Per-user mockup session: generation, iterative edits and export records."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, List, Optional

from merchai.config import logger
from merchai.core.gemini import GeminiMockupClient
from merchai.core.products import ProductType
from merchai.models import MockupResult
from merchai.services.guarded_writes import GuardedWriter, WriteResult


def _log(level: int, message: str, **context: Any) -> None:
    """Helper to emit structured logs with contextual metadata."""
    logger.log(level, "%s | context=%s", message, context)


def _now_ms() -> int:
    return int(time.time() * 1000)


def new_mockup_id() -> str:
    return uuid.uuid4().hex[:7]


class MockupSession:
    """
    Results generated during one signed-in session, most recent first.

    AI failures propagate to the caller; event recording never does.

    Args:
        client: Gemini client used for generation and edits
        writer: Guarded writer recording telemetry events
        user_id: Identity the events are attributed to
        clock: Returns the current time in milliseconds
    """

    def __init__(
        self,
        client: GeminiMockupClient,
        writer: GuardedWriter,
        user_id: str,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.client = client
        self.writer = writer
        self.user_id = user_id
        self._clock = clock or _now_ms
        self._results: List[MockupResult] = []

    @property
    def results(self) -> List[MockupResult]:
        return list(self._results)

    def get(self, mockup_id: str) -> MockupResult:
        for result in self._results:
            if result.id == mockup_id:
                return result
        raise KeyError(f"Mockup not found: {mockup_id}")

    async def generate(self, logo_data: str, product: ProductType) -> MockupResult:
        """Generate a mockup of ``product`` carrying the uploaded logo."""
        _log(logging.INFO, "mockup_generation_started", product_id=product.id)

        image_reference = await self.client.generate(logo_data, product.prompt_hint)

        result = MockupResult(
            id=new_mockup_id(),
            image_reference=image_reference,
            created_at=self._clock(),
            prompt_used=product.prompt_hint,
            product_label=product.name,
            product_id=product.id,
        )
        self._results.insert(0, result)

        _log(logging.INFO, "mockup_generation_complete", mockup_id=result.id)

        await self.writer.post_mockup_generation(
            {
                "user_id": self.user_id,
                "mockup_id": result.id,
                "product_type": result.product_label,
                "product_id": product.id,
                "prompt_hint": result.prompt_used,
                "timestamp": result.created_at,
                "logo_uploaded": bool(logo_data),
            }
        )
        return result

    async def edit(
        self, mockup_id: str, edit_prompt: str, is_regeneration: bool = False
    ) -> MockupResult:
        """Apply an edit instruction to an existing mockup, replacing its image."""
        current = self.get(mockup_id)
        _log(logging.INFO, "mockup_edit_started", mockup_id=mockup_id)

        image_reference = await self.client.edit(current.image_reference, edit_prompt)

        updated = current.model_copy(
            update={"image_reference": image_reference, "created_at": self._clock()}
        )
        self._results = [
            updated if result.id == mockup_id else result for result in self._results
        ]

        _log(logging.INFO, "mockup_edit_complete", mockup_id=mockup_id)

        await self.writer.post_mockup_edit(
            {
                "user_id": self.user_id,
                "mockup_id": mockup_id,
                "edit_prompt": edit_prompt,
                "timestamp": self._clock(),
                "is_regeneration": is_regeneration,
            }
        )
        return updated

    async def record_export(
        self, mockup_id: str, export_path: Optional[str] = None
    ) -> WriteResult:
        """Record that a mockup was saved to the device."""
        self.get(mockup_id)

        document = {
            "user_id": self.user_id,
            "mockup_id": mockup_id,
            "export_timestamp": self._clock(),
        }
        if export_path is not None:
            document["export_path"] = export_path

        return await self.writer.post_mockup_export(document)


__all__ = ["MockupSession", "new_mockup_id"]
