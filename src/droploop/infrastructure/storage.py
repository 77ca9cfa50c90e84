"""Storage abstractions and Redis implementation for repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from redis.exceptions import RedisError

from ..domain.errors import NetworkError
from .database import DatabaseClient


class KeyValueStore(ABC):
    """Abstract key-value store with minimal operations used by repositories."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> int:
        pass


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed implementation of KeyValueStore.

    Redis failures surface as ``NetworkError``.
    """

    def __init__(self, db_client: DatabaseClient):
        self._db_client = db_client

    async def get(self, key: str) -> Optional[str]:
        try:
            async with self._db_client.get_connection() as conn:
                return await conn.get(key)
        except RedisError as e:
            raise NetworkError(f"Record store read failed: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._db_client.get_connection() as conn:
                await conn.set(key, value)
        except RedisError as e:
            raise NetworkError(f"Record store write failed: {e}") from e

    async def delete(self, key: str) -> int:
        try:
            async with self._db_client.get_connection() as conn:
                return await conn.delete(key)
        except RedisError as e:
            raise NetworkError(f"Record store delete failed: {e}") from e
