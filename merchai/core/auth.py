"""
Session authentication module.
Stores the tokens handed over by the identity provider and answers the
identity-consistency check used before every guarded write.

Token exchange with Google / Apple happens outside this package; this module
only receives the resulting opaque tokens and user id.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

from merchai.config import logger
from merchai.core.secure_storage import SecureStore

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
TOKEN_EXPIRY_KEY = "token_expiry"
USER_ID_KEY = "user_id"


@dataclass(frozen=True)
class TokenData:
    access_token: str
    refresh_token: str
    expires_in: int  # seconds
    user_id: str


def _now_ms() -> float:
    return time.time() * 1000


class SessionAuth:
    """
    Token storage and authorization checks for the current session.

    Args:
        store: Secure storage holding the session credentials
        clock: Returns the current time in milliseconds
    """

    def __init__(self, store: SecureStore, clock: Optional[Callable[[], float]] = None):
        self.store = store
        self._clock = clock or _now_ms

    async def store_tokens(self, token_data: TokenData) -> None:
        expiry_time = int(self._clock() + token_data.expires_in * 1000)

        await asyncio.gather(
            self.store.set_item(ACCESS_TOKEN_KEY, token_data.access_token),
            self.store.set_item(REFRESH_TOKEN_KEY, token_data.refresh_token),
            self.store.set_item(TOKEN_EXPIRY_KEY, str(expiry_time)),
            self.store.set_item(USER_ID_KEY, token_data.user_id),
        )
        logger.info("Session tokens stored", extra={"user_id": token_data.user_id})

    async def get_access_token(self) -> Optional[str]:
        return await self.store.get_item(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> Optional[str]:
        return await self.store.get_item(REFRESH_TOKEN_KEY)

    async def get_current_user_id(self) -> Optional[str]:
        return await self.store.get_item(USER_ID_KEY)

    async def get_token_expiry(self) -> Optional[int]:
        expiry = await self.store.get_item(TOKEN_EXPIRY_KEY)
        if not expiry:
            return None
        try:
            return int(expiry)
        except ValueError:
            logger.warning("Stored token expiry is not a number", extra={"value": expiry})
            return None

    async def is_token_expired(self) -> bool:
        """Return True when no expiry is stored or the expiry has passed."""
        expiry = await self.get_token_expiry()
        if expiry is None:
            return True
        return self._clock() >= expiry

    async def rotate_refresh_token(
        self,
        new_access_token: str,
        new_refresh_token: str,
        expires_in: int,
    ) -> None:
        """Replace both tokens, keeping the current user id."""
        await self.store_tokens(
            TokenData(
                access_token=new_access_token,
                refresh_token=new_refresh_token,
                expires_in=expires_in,
                user_id=(await self.get_current_user_id()) or "",
            )
        )

    async def clear_auth(self) -> None:
        await asyncio.gather(
            self.store.remove_item(ACCESS_TOKEN_KEY),
            self.store.remove_item(REFRESH_TOKEN_KEY),
            self.store.remove_item(TOKEN_EXPIRY_KEY),
            self.store.remove_item(USER_ID_KEY),
        )
        logger.info("Session cleared")

    async def check_authorization(self, user_id: str) -> bool:
        """
        Check that ``user_id`` is the identity this session is signed in as.

        This is an identity-consistency check, not a role system: it stops a
        write from being attributed to a different user than the session's.
        """
        current_user_id = await self.get_current_user_id()
        if not current_user_id:
            return False

        return current_user_id == user_id


__all__ = [
    "ACCESS_TOKEN_KEY",
    "REFRESH_TOKEN_KEY",
    "TOKEN_EXPIRY_KEY",
    "USER_ID_KEY",
    "TokenData",
    "SessionAuth",
]
