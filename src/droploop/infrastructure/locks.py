"""Identity lock implementations."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis.exceptions import LockError, RedisError

from ..domain.errors import NetworkError
from ..domain.shared import IdentityLock
from .database import DatabaseClient

logger = logging.getLogger(__name__)


class LocalIdentityLock(IdentityLock):
    """One ``asyncio.Lock`` per identity, for a single process."""

    def __init__(self, acquire_timeout: float = 120.0) -> None:
        self.acquire_timeout = acquire_timeout
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, public_key: str) -> asyncio.Lock:
        lock = self._locks.get(public_key)
        if lock is None:
            lock = self._locks[public_key] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, public_key: str) -> AsyncIterator[None]:
        lock = self._lock_for(public_key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"Timed out waiting for another operation on {public_key}"
            ) from e
        try:
            yield
        finally:
            lock.release()


class RedisIdentityLock(IdentityLock):
    """Redis lock so every API worker and operator script serializes together."""

    def __init__(
        self,
        db_client: DatabaseClient,
        *,
        acquire_timeout: float = 120.0,
        lease_seconds: float = 300.0,
    ) -> None:
        self._db_client = db_client
        self.acquire_timeout = acquire_timeout
        self.lease_seconds = lease_seconds

    @staticmethod
    def _name(public_key: str) -> str:
        return f"droploop:lock:{public_key}"

    @asynccontextmanager
    async def hold(self, public_key: str) -> AsyncIterator[None]:
        async with self._db_client.get_connection() as conn:
            lock = conn.lock(
                self._name(public_key),
                timeout=self.lease_seconds,
                blocking_timeout=self.acquire_timeout,
            )
            try:
                acquired = await lock.acquire()
            except RedisError as e:
                raise NetworkError(f"Identity lock unavailable: {e}") from e
            if not acquired:
                raise NetworkError(
                    f"Timed out waiting for another operation on {public_key}"
                )
            try:
                yield
            finally:
                try:
                    await lock.release()
                except LockError:
                    logger.warning(
                        "Lease on %s expired before release; operation outlived %gs",
                        self._name(public_key),
                        self.lease_seconds,
                    )
