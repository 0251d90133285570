"""FastAPI router providing session endpoints."""

import time

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from merchai.config import logger
from merchai.core.auth import TokenData
from merchai.services.studio import ONBOARDING_KEY, Studio

from .dependencies import get_current_user, get_studio
from .models import (
    MessageResponse,
    OnboardingRequest,
    SessionRequest,
    SessionResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _now_ms() -> int:
    return int(time.time() * 1000)


@router.post("/session", response_model=SessionResponse)
async def start_session(
    payload: SessionRequest,
    background_tasks: BackgroundTasks,
    studio: Studio = Depends(get_studio),
) -> SessionResponse:
    """Store the identity provider's tokens and record the login event."""
    try:
        logger.info("Session start request", extra={"user_id": payload.user_id})

        await studio.session_auth.store_tokens(
            TokenData(
                access_token=payload.access_token,
                refresh_token=payload.refresh_token,
                expires_in=payload.expires_in,
                user_id=payload.user_id,
            )
        )

        login_event = {
            "user_id": payload.user_id,
            "email": payload.email,
            "name": payload.name,
            "provider": payload.provider,
            "login_timestamp": _now_ms(),
        }
        if payload.device_info:
            login_event["device_info"] = payload.device_info.model_dump()
        background_tasks.add_task(studio.writer.post_login_data, login_event)

        onboarding_completed = await studio.secure_store.get_item(ONBOARDING_KEY)

        return SessionResponse(
            success=True,
            message="Login successful",
            user_id=payload.user_id,
            onboarding_required=onboarding_completed is None,
        )

    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Session start failed", extra={"error": str(exc)})
        raise HTTPException(status_code=500, detail=f"Failed to save login information: {exc}")


@router.delete("/session", response_model=MessageResponse)
async def end_session(
    user_id: str = Depends(get_current_user),
    studio: Studio = Depends(get_studio),
) -> MessageResponse:
    """Clear stored credentials and drop the user's mockup session."""
    await studio.session_auth.clear_auth()
    studio.end_session(user_id)
    logger.info("User logged out", extra={"user_id": user_id})
    return MessageResponse(success=True, message="Logged out")


@router.get("/me", response_model=UserResponse)
async def get_me(
    user_id: str = Depends(get_current_user),
    studio: Studio = Depends(get_studio),
) -> UserResponse:
    """Return the signed-in user."""
    return UserResponse(
        success=True,
        user_id=user_id,
        token_expired=await studio.session_auth.is_token_expired(),
    )


@router.post("/onboarding", response_model=MessageResponse)
async def complete_onboarding(
    payload: OnboardingRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user),
    studio: Studio = Depends(get_studio),
) -> MessageResponse:
    """Mark onboarding done and record the plan choice (or the skip)."""
    try:
        await studio.secure_store.set_item(ONBOARDING_KEY, "true")
    except Exception as exc:
        logger.error("Failed to save onboarding status", extra={"error": str(exc)})
        raise HTTPException(status_code=500, detail=f"Failed to save onboarding status: {exc}")

    now = _now_ms()
    if payload.skipped:
        onboarding_event = {
            "user_id": user_id,
            "selected_plan": "free",
            "skipped": True,
            "timestamp": now,
        }
    else:
        started = payload.selected_plan == "pro"
        onboarding_event = {
            "user_id": user_id,
            "selected_plan": payload.selected_plan,
            "skipped": False,
            "timestamp": now,
            "trial_info": {"started": started, "start_date": now if started else None},
        }

    background_tasks.add_task(studio.writer.post_onboarding_data, onboarding_event)

    message = (
        "Welcome to MerchAI Pro! Your subscription is active."
        if onboarding_event["selected_plan"] == "pro"
        else "Onboarding complete"
    )
    return MessageResponse(success=True, message=message)
