"""Session-related FastAPI dependencies."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from merchai.services.studio import Studio


def get_studio(request: Request) -> Studio:
    return request.app.state.studio


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    studio: Studio = Depends(get_studio),
) -> str:
    """Return the signed-in user id if the Bearer token matches the stored session."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=401, detail="Invalid authorization header format"
        )

    session_auth = studio.session_auth
    access_token = await session_auth.get_access_token()
    user_id = await session_auth.get_current_user_id()

    if not access_token or not user_id or parts[1] != access_token:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if await session_auth.is_token_expired():
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return user_id
