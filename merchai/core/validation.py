"""Input sanitization and schema validation for outbound payloads."""

import re
from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

MAX_SANITIZED_LENGTH = 1000

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_string(value: str) -> str:
    """Strip markup and script fragments from free text and cap its length."""
    cleaned = value.strip()
    cleaned = _ANGLE_BRACKETS.sub("", cleaned)
    cleaned = _JAVASCRIPT_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned[:MAX_SANITIZED_LENGTH]


@dataclass(frozen=True)
class ValidationResult(Generic[ModelT]):
    ok: bool
    data: Optional[ModelT] = None
    error: Optional[str] = None


def _format_errors(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages)


def validate(schema: Type[ModelT], data: Any) -> ValidationResult[ModelT]:
    """
    Validate ``data`` against ``schema``.

    Args:
        schema: Pydantic model class describing the payload
        data: A mapping, or an instance of ``schema``

    Returns:
        ValidationResult with the normalized model when ``ok`` is True,
        otherwise with the joined error messages. Never raises.
    """
    if isinstance(data, schema):
        data = data.model_dump()

    try:
        return ValidationResult(ok=True, data=schema.model_validate(data))
    except ValidationError as exc:
        return ValidationResult(ok=False, error=_format_errors(exc))


__all__ = [
    "MAX_SANITIZED_LENGTH",
    "ValidationResult",
    "sanitize_string",
    "validate",
]
