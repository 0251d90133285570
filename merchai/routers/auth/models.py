"""Pydantic models for session endpoints."""

from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class DeviceInfoPayload(BaseModel):
    platform: str
    os_version: Optional[str] = None


class SessionRequest(BaseModel):
    """Identity and tokens handed over by the identity provider after sign-in."""

    user_id: str = Field(..., min_length=1)
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    provider: Literal["google", "apple"]
    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    expires_in: int = Field(3600, gt=0, description="Access token lifetime in seconds")
    device_info: Optional[DeviceInfoPayload] = None


class SessionResponse(BaseModel):
    success: bool
    message: str
    user_id: str
    onboarding_required: bool


class OnboardingRequest(BaseModel):
    selected_plan: Literal["free", "pro"] = "free"
    skipped: bool = False


class MessageResponse(BaseModel):
    """Generic success response with message."""

    success: bool
    message: str


class UserResponse(BaseModel):
    """Response payload for current session information."""

    success: bool
    user_id: str
    token_expired: bool
