"""
Per-user mutual exclusion for character read-modify-write cycles.

Purpose
-------
Every mutation of a character (reward application, level-up, realm unlock)
runs while holding that user's lock, so two concurrent submissions for the
same learner can never interleave their reads and writes.

Providers
---------
- LocalUserLocks: one `asyncio.Lock` per user, for a single process.
- RedisUserLocks: distributed lock with Redis `SET NX EX` and a UUID token,
  released by a Lua compare-and-delete so a holder never frees a lock it no
  longer owns.

Both raise the builtin `TimeoutError` when the lock cannot be acquired within
the configured wait.

Usage
-----
>>> locks = LocalUserLocks(wait_timeout=5)
>>> async with locks.hold("user-1"):
...     ...
"""

from __future__ import annotations

import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from realmforge.core.logging.logger import get_logger

logger = get_logger(__name__)


class UserLockProvider(Protocol):
    def hold(self, user_id: str) -> "AsyncIterator[None]":
        ...


class LocalUserLocks:
    """In-process per-user locks. Idle locks are dropped on release."""

    def __init__(self, wait_timeout: Optional[float] = None) -> None:
        self._wait_timeout = wait_timeout
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._waiters[user_id] = self._waiters.get(user_id, 0) + 1

        try:
            try:
                if self._wait_timeout:
                    await asyncio.wait_for(lock.acquire(), timeout=self._wait_timeout)
                else:
                    await lock.acquire()
            except asyncio.TimeoutError:
                logger.warning(
                    "Failed to acquire user lock within timeout",
                    extra={"user_id": user_id, "wait_timeout_seconds": self._wait_timeout},
                )
                raise TimeoutError(
                    f"Failed to acquire lock for user '{user_id}' within {self._wait_timeout}s"
                ) from None

            try:
                yield
            finally:
                lock.release()
        finally:
            self._waiters[user_id] -= 1
            if self._waiters[user_id] == 0:
                del self._waiters[user_id]
                self._locks.pop(user_id, None)

    def held_count(self) -> int:
        return sum(1 for lock in self._locks.values() if lock.locked())


class RedisUserLocks:
    """
    Distributed per-user lock backed by Redis.

    Parameters
    ----------
    client:
        A `redis.asyncio.Redis` client.
    ttl_seconds:
        Lock expiry, so a crashed holder cannot block a user forever.
    wait_timeout:
        Maximum time to wait for acquisition.
    retry_interval:
        Sleep between acquisition attempts.
    """

    _LUA_UNLOCK_SCRIPT = """
    if redis.call("GET", KEYS[1]) == ARGV[1] then
        return redis.call("DEL", KEYS[1])
    else
        return 0
    end
    """

    KEY_PREFIX = "realmforge:lock:user:"

    def __init__(
        self,
        client: Redis,
        *,
        ttl_seconds: int = 10,
        wait_timeout: float = 10.0,
        retry_interval: float = 0.05,
    ) -> None:
        self._client = client
        self._ttl = ttl_seconds
        self._wait_timeout = wait_timeout
        self._retry_interval = retry_interval

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisUserLocks":
        return cls(Redis.from_url(url, decode_responses=True), **kwargs)

    async def close(self) -> None:
        await self._client.aclose()

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        key = f"{self.KEY_PREFIX}{user_id}"
        token = str(uuid.uuid4())
        deadline = time.monotonic() + max(0.0, self._wait_timeout)
        acquired = False

        try:
            while True:
                try:
                    acquired = bool(await self._client.set(name=key, value=token, nx=True, ex=self._ttl))
                except RedisError as exc:
                    logger.error(
                        "Redis lock acquisition error",
                        extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
                    )

                if acquired:
                    break

                if time.monotonic() >= deadline:
                    logger.warning(
                        "Failed to acquire Redis lock within timeout",
                        extra={"lock_key": key, "wait_timeout_seconds": self._wait_timeout},
                    )
                    raise TimeoutError(
                        f"Failed to acquire Redis lock '{key}' within {self._wait_timeout}s"
                    )

                await asyncio.sleep(self._retry_interval)

            yield

        finally:
            if acquired:
                try:
                    released = await self._client.eval(self._LUA_UNLOCK_SCRIPT, 1, key, token)
                    if not released:
                        logger.warning("Redis lock already expired or stolen", extra={"lock_key": key})
                except RedisError as exc:
                    logger.warning(
                        "Redis lock release failed; lock will expire",
                        extra={"lock_key": key, "error": str(exc)},
                    )
