"""
Gemini client for generating and editing merchandise mockups.

Both operations place an inline image and a text instruction in a single
``generateContent`` request and expect an inline image back. Every
precondition is checked before the network call; failures raise the
``MockupError`` subclasses from ``merchai.core.exceptions``.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from merchai.config import GEMINI_API_URL, GEMINI_KEY, GEMINI_TIMEOUT_SECONDS, logger
from merchai.core.exceptions import (
    ConfigurationError,
    InvalidInputError,
    NoImageInResponseError,
    PayloadTooLargeError,
    ProviderError,
    QuotaExceededError,
    RateLimitedError,
)
from merchai.core.prompt_templates import (
    SYSTEM_PROMPT,
    build_edit_prompt,
    build_generation_prompt,
)
from merchai.core.rate_limit import RATE_LIMITS, RateLimitConfig, RateLimiter
from merchai.core.validation import sanitize_string
from merchai.models import MAX_IMAGE_BASE64_LENGTH, MAX_PROMPT_LENGTH

GENERATE_RATE_KEY = "gemini_generate"
EDIT_RATE_KEY = "gemini_edit"
DEFAULT_MIME_TYPE = "image/png"


# -------------------------
# Response extraction
# -------------------------
def _inline_data_from_parts(parts: Any) -> Optional[str]:
    if not isinstance(parts, list):
        return None

    for part in parts:
        if not isinstance(part, dict):
            continue
        # Check both camelCase and snake_case formats
        for key in ("inlineData", "inline_data"):
            inline = part.get(key)
            if isinstance(inline, dict) and inline.get("data"):
                return inline["data"]

    return None


def from_candidates(response: Dict[str, Any]) -> Optional[str]:
    """candidates[0].content.parts[]"""
    candidates = response.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return None

    content = candidate.get("content")
    if not isinstance(content, dict):
        return None

    return _inline_data_from_parts(content.get("parts"))


def from_top_level_parts(response: Dict[str, Any]) -> Optional[str]:
    """parts[]"""
    return _inline_data_from_parts(response.get("parts"))


def from_content_parts(response: Dict[str, Any]) -> Optional[str]:
    """content.parts[]"""
    content = response.get("content")
    if not isinstance(content, dict):
        return None
    return _inline_data_from_parts(content.get("parts"))


ImageExtractor = Callable[[Dict[str, Any]], Optional[str]]

# Tried in order; the first extractor that finds an image wins.
IMAGE_EXTRACTORS: List[ImageExtractor] = [
    from_candidates,
    from_top_level_parts,
    from_content_parts,
]


def extract_inline_image(response: Any) -> Optional[str]:
    """Return the base64 payload of the first inline image in ``response``."""
    if not isinstance(response, dict):
        return None

    for extractor in IMAGE_EXTRACTORS:
        image_data = extractor(response)
        if image_data:
            return image_data

    return None


# -------------------------
# Request helpers
# -------------------------
def split_image_data(image_data: str) -> Tuple[str, str]:
    """
    Split an image reference into (mime_type, raw base64).

    Accepts a ``data:<mime>;base64,<data>`` URI or a bare base64 string.
    """
    if "," not in image_data:
        return DEFAULT_MIME_TYPE, image_data

    prefix, data = image_data.split(",", 1)
    mime_type = DEFAULT_MIME_TYPE
    if prefix.startswith("data:"):
        declared = prefix[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared

    return mime_type, data


def _provider_error(response: httpx.Response) -> Exception:
    try:
        error_data = response.json()
    except ValueError:
        error_data = {}

    message = None
    if isinstance(error_data, dict) and isinstance(error_data.get("error"), dict):
        message = error_data["error"].get("message")
    message = message or f"API request failed with status {response.status_code}"

    lowered = message.lower()
    if "quota" in lowered or "exceeded" in lowered:
        return QuotaExceededError(message, status_code=response.status_code)

    return ProviderError(message, status_code=response.status_code)


class GeminiMockupClient:
    """
    Generate and edit product mockups with Gemini image models.

    Args:
        rate_limiter: Session rate limiter guarding provider usage
        api_key: Gemini API key (defaults to GEMINI_KEY)
        api_url: generateContent endpoint (defaults to GEMINI_API_URL)
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport, used to stub the provider
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rate_limiter = rate_limiter
        self.api_key = api_key if api_key is not None else GEMINI_KEY
        self.api_url = api_url or GEMINI_API_URL
        self.timeout = timeout if timeout is not None else GEMINI_TIMEOUT_SECONDS
        self.transport = transport
        self.last_raw_response: Optional[str] = None

        logger.info(f"Gemini mockup client initialized with API key: {bool(self.api_key)}")

    async def generate(self, logo_data: str, product_prompt: str) -> str:
        """
        Place a logo on a product and return the generated image.

        Args:
            logo_data: Logo as a data URI or bare base64 string
            product_prompt: Product description, e.g. a template's prompt hint

        Returns:
            A ``data:image/png;base64,...`` reference to the generated mockup

        Raises:
            RateLimitedError, InvalidInputError, ConfigurationError,
            PayloadTooLargeError, QuotaExceededError, ProviderError,
            NoImageInResponseError
        """
        self._check_rate_limit(GENERATE_RATE_KEY, RATE_LIMITS["mockup_generation"])

        sanitized_prompt = sanitize_string(product_prompt)
        if len(sanitized_prompt) < 1:
            raise InvalidInputError("Invalid product prompt")

        api_key = self._require_api_key()
        mime_type, image_b64 = self._prepare_image(logo_data)

        prompt = build_generation_prompt(sanitized_prompt)
        logger.debug("Mockup generation prompt", extra={"prompt": prompt})

        payload = {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [
                {
                    "parts": [
                        {"inlineData": {"mimeType": mime_type, "data": image_b64}},
                        {"text": prompt},
                    ]
                }
            ],
        }

        return await self._request_image(api_key, payload, operation="generate")

    async def edit(self, image_data: str, edit_prompt: str) -> str:
        """Apply a natural-language edit to an existing mockup image."""
        self._check_rate_limit(EDIT_RATE_KEY, RATE_LIMITS["mockup_edit"])

        sanitized_prompt = sanitize_string(edit_prompt)
        if len(sanitized_prompt) < 1 or len(sanitized_prompt) > MAX_PROMPT_LENGTH:
            raise InvalidInputError(
                "Invalid edit prompt. Must be between 1 and 500 characters."
            )

        api_key = self._require_api_key()
        mime_type, image_b64 = self._prepare_image(image_data)

        prompt = build_edit_prompt(sanitized_prompt)
        logger.debug("Mockup edit prompt", extra={"prompt": prompt})

        payload = {
            "contents": [
                {
                    "parts": [
                        {"inlineData": {"mimeType": mime_type, "data": image_b64}},
                        {"text": prompt},
                    ]
                }
            ],
        }

        return await self._request_image(api_key, payload, operation="edit")

    def _check_rate_limit(self, key: str, config: RateLimitConfig) -> None:
        if self.rate_limiter.is_allowed(key, config):
            return

        status = self.rate_limiter.get_status(key, config)
        logger.warning(
            "Gemini rate limit exceeded",
            extra={"rate_key": key, "retry_after_ms": status.retry_after_ms},
        )
        raise RateLimitedError(retry_after_ms=status.retry_after_ms)

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(
                "GEMINI_KEY is not set. Please set it in your environment variables."
            )
        return self.api_key

    def _prepare_image(self, image_data: str) -> Tuple[str, str]:
        mime_type, image_b64 = split_image_data(image_data)
        if len(image_b64) > MAX_IMAGE_BASE64_LENGTH:
            raise PayloadTooLargeError()
        return mime_type, image_b64

    async def _request_image(
        self, api_key: str, payload: Dict[str, Any], operation: str
    ) -> str:
        headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.RequestError as exc:
            logger.error(f"Network error calling Gemini API: {exc}")
            raise ProviderError(f"Network error calling Gemini API: {exc}") from exc

        if response.is_error:
            error = _provider_error(response)
            logger.error(
                f"Gemini {operation} request failed",
                extra={"status_code": response.status_code, "error": str(error)},
            )
            raise error

        raw_response = response.text
        self.last_raw_response = raw_response

        logger.debug("=" * 80)
        logger.debug(f"FULL GEMINI {operation.upper()} RESPONSE:")
        logger.debug(raw_response)
        logger.debug("=" * 80)

        try:
            api_result = response.json()
        except ValueError:
            api_result = None

        image_data = extract_inline_image(api_result)
        if not image_data:
            logger.error(
                f"No image found in Gemini {operation} response",
                extra={"response_length": len(raw_response)},
            )
            raise NoImageInResponseError(raw_response, operation=operation)

        return f"data:image/png;base64,{image_data}"


__all__ = [
    "GENERATE_RATE_KEY",
    "EDIT_RATE_KEY",
    "IMAGE_EXTRACTORS",
    "GeminiMockupClient",
    "extract_inline_image",
    "from_candidates",
    "from_content_parts",
    "from_top_level_parts",
    "split_image_data",
]
