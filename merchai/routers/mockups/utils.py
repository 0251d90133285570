"""Utility helpers for the mockup router."""

import math

from fastapi import HTTPException

from merchai.config import logger
from merchai.core.exceptions import (
    ConfigurationError,
    InvalidInputError,
    MockupError,
    NoImageInResponseError,
    PayloadTooLargeError,
    ProviderError,
    QuotaExceededError,
    RateLimitedError,
)
from merchai.core.gemini import split_image_data
from merchai.core.validation import validate
from merchai.models import ImageUpload


def to_http_exception(exc: MockupError) -> HTTPException:
    """Map a mockup failure to the HTTP error shown to the client."""
    if isinstance(exc, RateLimitedError):
        retry_after_seconds = max(1, math.ceil(exc.retry_after_ms / 1000))
        return HTTPException(
            status_code=429,
            detail=str(exc),
            headers={"Retry-After": str(retry_after_seconds)},
        )
    if isinstance(exc, QuotaExceededError):
        return HTTPException(status_code=429, detail=str(exc))
    if isinstance(exc, InvalidInputError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, PayloadTooLargeError):
        return HTTPException(status_code=413, detail=str(exc))
    if isinstance(exc, NoImageInResponseError):
        return HTTPException(
            status_code=502,
            detail={"message": str(exc), "raw_response": exc.raw_response},
        )
    if isinstance(exc, ProviderError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        logger.error("Mockup service misconfigured", extra={"error": str(exc)})
        return HTTPException(status_code=500, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def validate_logo_upload(logo: str) -> None:
    """Reject logos that are not a PNG/JPEG base64 payload of a sane size."""
    mime_type, data = split_image_data(logo)
    result = validate(ImageUpload, {"base64": data, "mime_type": mime_type})
    if not result.ok:
        logger.warning("Logo upload rejected", extra={"error": result.error})
        raise HTTPException(status_code=400, detail=f"Invalid logo: {result.error}")
