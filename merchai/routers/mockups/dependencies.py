"""FastAPI dependencies shared across mockup endpoints."""

from fastapi import Depends

from merchai.routers.auth.dependencies import get_current_user, get_studio
from merchai.services.mockup_service import MockupSession
from merchai.services.studio import Studio


async def get_mockup_session(
    user_id: str = Depends(get_current_user),
    studio: Studio = Depends(get_studio),
) -> MockupSession:
    """Return the signed-in user's mockup session, creating it on first use."""
    return studio.session_for(user_id)
