"""
Secure key/value storage for session credentials.

Every logical key is scoped under a fixed service namespace. The device
keychain is an external collaborator; ``MemorySecureStore`` keeps the same
contract in process memory.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from merchai.config import logger

SERVICE_NAME = "com.merchaistudio.secure"


def scoped_key(key: str) -> str:
    return f"{SERVICE_NAME}.{key}"


class SecureStore(ABC):
    """
    Storage contract used by the session layer.

    ``set_item`` propagates failures after logging them; ``get_item`` and
    ``remove_item`` log failures and degrade to "not found" / no-op.
    """

    async def set_item(self, key: str, value: str) -> None:
        try:
            await self._write(scoped_key(key), value)
        except Exception as e:
            logger.error(f"Error storing secure item {key}: {e}")
            raise

    async def get_item(self, key: str) -> Optional[str]:
        try:
            return await self._read(scoped_key(key))
        except Exception as e:
            logger.error(f"Error getting secure item {key}: {e}")
            return None

    async def remove_item(self, key: str) -> None:
        try:
            await self._delete(scoped_key(key))
        except Exception as e:
            logger.error(f"Error removing secure item {key}: {e}")

    async def is_available(self) -> bool:
        return True

    @abstractmethod
    async def _write(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def _delete(self, key: str) -> None: ...


class MemorySecureStore(SecureStore):
    """Process-local store; contents are lost when the process exits."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    async def _write(self, key: str, value: str) -> None:
        self._items[key] = value

    async def _read(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def _delete(self, key: str) -> None:
        self._items.pop(key, None)


__all__ = ["SERVICE_NAME", "SecureStore", "MemorySecureStore", "scoped_key"]
