"""Pydantic models used by the mockup router."""

from typing import List, Optional

from pydantic import BaseModel, Field

from merchai.models import MockupResult


class ProductResponse(BaseModel):
    id: str
    name: str
    category: str
    icon: str
    prompt_hint: str


class GenerateMockupRequest(BaseModel):
    logo: str = Field(..., description="Logo as a data URI or bare base64 string")
    product_id: str = Field(..., min_length=1)


class EditMockupRequest(BaseModel):
    prompt: str = Field(..., description="Natural-language edit instruction")
    is_regeneration: bool = False


class ExportMockupRequest(BaseModel):
    export_path: Optional[str] = Field(None, description="Where the image was saved")


class MockupResponse(BaseModel):
    success: bool
    mockup: MockupResult


class MockupListResponse(BaseModel):
    success: bool
    results: List[MockupResult] = Field(default_factory=list)


class ExportResponse(BaseModel):
    success: bool
    recorded: bool
    message: str


class RateLimitBucket(BaseModel):
    allowed: bool
    remaining: int
    limit: int
    retry_after_ms: int


class RateLimitResponse(BaseModel):
    """Remaining generation and edit capacity for this session."""

    generation: RateLimitBucket
    edit: RateLimitBucket
    message: str
