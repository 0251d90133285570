"""FastAPI router for mockup generation, editing and export endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response

from merchai.config import logger
from merchai.core.exceptions import MockupError
from merchai.core.gemini import EDIT_RATE_KEY, GENERATE_RATE_KEY
from merchai.core.products import PRODUCTS, get_product
from merchai.core.rate_limit import RATE_LIMITS
from merchai.routers.auth.dependencies import get_current_user, get_studio
from merchai.services.mockup_service import MockupSession
from merchai.services.studio import Studio

from .dependencies import get_mockup_session
from .models import (
    EditMockupRequest,
    ExportMockupRequest,
    ExportResponse,
    GenerateMockupRequest,
    MockupListResponse,
    MockupResponse,
    ProductResponse,
    RateLimitBucket,
    RateLimitResponse,
)
from .utils import to_http_exception, validate_logo_upload

router = APIRouter(prefix="/api/v1", tags=["Mockups"])


@router.get("/products", response_model=list[ProductResponse])
async def list_products() -> list[ProductResponse]:
    """Product templates a logo can be placed on."""
    return [
        ProductResponse(
            id=product.id,
            name=product.name,
            category=product.category,
            icon=product.icon,
            prompt_hint=product.prompt_hint,
        )
        for product in PRODUCTS
    ]


@router.post("/mockups", response_model=MockupResponse)
async def generate_mockup(
    payload: GenerateMockupRequest,
    response: Response,
    session: MockupSession = Depends(get_mockup_session),
    studio: Studio = Depends(get_studio),
) -> MockupResponse:
    """Generate a mockup of the selected product carrying the uploaded logo."""
    try:
        logger.info(
            "Mockup generation request received",
            extra={"product_id": payload.product_id, "user_id": session.user_id},
        )

        try:
            product = get_product(payload.product_id)
        except KeyError:
            raise HTTPException(
                status_code=404, detail=f"Unknown product: {payload.product_id}"
            )

        validate_logo_upload(payload.logo)

        result = await session.generate(payload.logo, product)

        remaining = studio.rate_limiter.get_remaining(
            GENERATE_RATE_KEY, RATE_LIMITS["mockup_generation"]
        )
        response.headers["X-RateLimit-Remaining"] = str(remaining)

        return MockupResponse(success=True, mockup=result)

    except HTTPException:
        raise
    except MockupError as exc:
        logger.warning(
            "Mockup generation failed",
            extra={"error_type": type(exc).__name__, "error": str(exc)},
        )
        raise to_http_exception(exc)
    except Exception as exc:
        logger.error("Unexpected error in mockup generation", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"An unexpected error occurred: {exc}"
        )


@router.post("/mockups/{mockup_id}/edit", response_model=MockupResponse)
async def edit_mockup(
    mockup_id: str,
    payload: EditMockupRequest,
    session: MockupSession = Depends(get_mockup_session),
) -> MockupResponse:
    """Apply a natural-language edit to one of the session's mockups."""
    try:
        logger.info("Mockup edit request received", extra={"mockup_id": mockup_id})

        try:
            session.get(mockup_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Mockup not found: {mockup_id}")

        result = await session.edit(
            mockup_id, payload.prompt, is_regeneration=payload.is_regeneration
        )
        return MockupResponse(success=True, mockup=result)

    except HTTPException:
        raise
    except MockupError as exc:
        logger.warning(
            "Mockup edit failed",
            extra={"error_type": type(exc).__name__, "error": str(exc)},
        )
        raise to_http_exception(exc)
    except Exception as exc:
        logger.error("Unexpected error in mockup edit", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"An unexpected error occurred: {exc}"
        )


@router.post("/mockups/{mockup_id}/export", response_model=ExportResponse)
async def export_mockup(
    mockup_id: str,
    payload: ExportMockupRequest,
    session: MockupSession = Depends(get_mockup_session),
) -> ExportResponse:
    """Record that a mockup was saved on the device."""
    try:
        write = await session.record_export(mockup_id, payload.export_path)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Mockup not found: {mockup_id}")

    return ExportResponse(
        success=True,
        recorded=write.dispatched,
        message="Export recorded" if write.dispatched else "Export saved",
    )


@router.get("/mockups", response_model=MockupListResponse)
async def list_mockups(
    session: MockupSession = Depends(get_mockup_session),
) -> MockupListResponse:
    """Mockups generated in this session, most recent first."""
    return MockupListResponse(success=True, results=session.results)


@router.get("/ratelimit", response_model=RateLimitResponse)
async def check_rate_limit_status(
    user_id: str = Depends(get_current_user),
    studio: Studio = Depends(get_studio),
) -> RateLimitResponse:
    """Report the remaining generation and edit capacity."""
    generation = studio.rate_limiter.get_status(
        GENERATE_RATE_KEY, RATE_LIMITS["mockup_generation"]
    )
    edit = studio.rate_limiter.get_status(EDIT_RATE_KEY, RATE_LIMITS["mockup_edit"])

    logger.info(
        "Rate limit status check",
        extra={
            "user_id": user_id,
            "generation_remaining": generation.remaining,
            "edit_remaining": edit.remaining,
        },
    )

    return RateLimitResponse(
        generation=RateLimitBucket(
            allowed=generation.allowed,
            remaining=generation.remaining,
            limit=generation.limit,
            retry_after_ms=generation.retry_after_ms,
        ),
        edit=RateLimitBucket(
            allowed=edit.allowed,
            remaining=edit.remaining,
            limit=edit.limit,
            retry_after_ms=edit.retry_after_ms,
        ),
        message=f"You have {generation.remaining} generations left this minute",
    )


@router.get("/health")
async def health_check() -> dict:
    """Simple health check endpoint."""

    return {
        "status": "healthy",
        "service": "merchai-studio-api",
        "version": "1.0.0",
    }
