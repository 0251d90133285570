"""Error types raised by the mockup generation path."""

from typing import Optional

QUOTA_GUIDANCE = (
    "API quota exceeded. Please wait a few minutes and try again, or check your "
    "Google Cloud billing plan at https://console.cloud.google.com/"
)


class MockupError(Exception):
    """Base class for failures the caller is expected to surface to the user."""


class ConfigurationError(MockupError):
    """Required configuration (API key, endpoint) is missing."""


class RateLimitedError(MockupError):
    def __init__(
        self,
        message: str = "Rate limit exceeded. Please wait a moment and try again.",
        retry_after_ms: int = 0,
    ):
        super().__init__(message)
        self.retry_after_ms = retry_after_ms


class InvalidInputError(MockupError):
    """The prompt or image input was rejected before any network call."""


class PayloadTooLargeError(MockupError):
    def __init__(self, message: str = "Image too large. Maximum size is 10MB."):
        super().__init__(message)


class QuotaExceededError(MockupError):
    def __init__(self, provider_message: str, status_code: Optional[int] = None):
        super().__init__(QUOTA_GUIDANCE)
        self.provider_message = provider_message
        self.status_code = status_code


class ProviderError(MockupError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NoImageInResponseError(MockupError):
    """
    The provider answered successfully but no inline image could be found.

    The full response body is kept in ``raw_response`` so the caller can log
    it or show it to the user.
    """

    def __init__(self, raw_response: str, operation: str = "generate"):
        super().__init__(f"No image in {operation} response")
        self.raw_response = raw_response
        self.operation = operation


__all__ = [
    "QUOTA_GUIDANCE",
    "MockupError",
    "ConfigurationError",
    "RateLimitedError",
    "InvalidInputError",
    "PayloadTooLargeError",
    "QuotaExceededError",
    "ProviderError",
    "NoImageInResponseError",
]
