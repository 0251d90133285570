"""Router package exposing all API routers."""

from fastapi import APIRouter

from .auth.router import router as auth_router
from .mockups.router import router as mockups_router

router = APIRouter()
router.include_router(mockups_router)
router.include_router(auth_router)

__all__ = ["router", "auth_router", "mockups_router"]
