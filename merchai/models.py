"""
Pydantic schemas for every payload that leaves the device.

Each event category has its own schema. Fields use strict types so that a
string never passes as a number and an integer never passes as a boolean.
Timestamps are integer milliseconds since the epoch.
"""

import re
from typing import Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)

MAX_PROMPT_LENGTH = 500
MAX_IMAGE_BASE64_LENGTH = 10 * 1024 * 1024

DANGEROUS_PROMPT_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"eval\(", re.IGNORECASE),
    re.compile(r"expression\(", re.IGNORECASE),
]


class EventPayload(BaseModel):
    """Common configuration for validated, immutable event payloads."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    user_id: StrictStr = Field(..., min_length=1, description="Acting user identity")


class DeviceInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    platform: StrictStr
    os_version: Optional[StrictStr] = None


class TrialInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    started: StrictBool
    start_date: Optional[StrictInt] = Field(None, gt=0)


class LoginData(EventPayload):
    email: EmailStr
    name: StrictStr = Field(..., min_length=1, max_length=100)
    provider: Literal["google", "apple"]
    login_timestamp: StrictInt = Field(..., gt=0)
    device_info: Optional[DeviceInfo] = None


class OnboardingData(EventPayload):
    selected_plan: Literal["free", "pro"]
    skipped: StrictBool
    timestamp: StrictInt = Field(..., gt=0)
    trial_info: Optional[TrialInfo] = None


class MockupGenerationData(EventPayload):
    mockup_id: StrictStr = Field(..., min_length=1)
    product_type: StrictStr = Field(..., min_length=1, max_length=100)
    product_id: StrictStr = Field(..., min_length=1)
    prompt_hint: StrictStr = Field(..., max_length=MAX_PROMPT_LENGTH)
    timestamp: StrictInt = Field(..., gt=0)
    logo_uploaded: StrictBool


class MockupEditData(EventPayload):
    mockup_id: StrictStr = Field(..., min_length=1)
    edit_prompt: StrictStr = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)
    timestamp: StrictInt = Field(..., gt=0)
    is_regeneration: StrictBool

    @field_validator("edit_prompt")
    @classmethod
    def reject_dangerous_patterns(cls, value: str) -> str:
        if any(pattern.search(value) for pattern in DANGEROUS_PROMPT_PATTERNS):
            raise ValueError("Edit prompt contains invalid characters")
        return value


class MockupExportData(EventPayload):
    mockup_id: StrictStr = Field(..., min_length=1)
    export_timestamp: StrictInt = Field(..., gt=0)
    export_path: Optional[StrictStr] = Field(None, max_length=500)


class ImageUpload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    base64: StrictStr = Field(..., min_length=100, max_length=MAX_IMAGE_BASE64_LENGTH)
    mime_type: Literal["image/png", "image/jpeg", "image/jpg"]


class MockupResult(BaseModel):
    """A generated mockup held in the session's result list."""

    id: str
    image_reference: str
    created_at: int = Field(..., description="Milliseconds since epoch")
    prompt_used: str
    product_label: str
    product_id: str


__all__ = [
    "MAX_PROMPT_LENGTH",
    "MAX_IMAGE_BASE64_LENGTH",
    "DANGEROUS_PROMPT_PATTERNS",
    "EventPayload",
    "DeviceInfo",
    "TrialInfo",
    "LoginData",
    "OnboardingData",
    "MockupGenerationData",
    "MockupEditData",
    "MockupExportData",
    "ImageUpload",
    "MockupResult",
]
