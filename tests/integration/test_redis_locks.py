"""
Integration Tests for RedisUserLocks
====================================

Test Coverage
-------------
- Mutual exclusion for the same user across lock instances
- Independent users do not contend
- Acquisition timeout raises TimeoutError
- Keys are removed on release
"""

import asyncio

import pytest

from realmforge.core.locks import RedisUserLocks


@pytest.fixture
async def redis_locks(redis_url):
    locks = RedisUserLocks.from_url(redis_url, wait_timeout=2.0, retry_interval=0.01)
    yield locks
    await locks.close()


@pytest.mark.integration
@pytest.mark.redis
class TestRedisUserLocks:
    async def test_same_user_is_serialized_across_instances(self, redis_locks, redis_url):
        other = RedisUserLocks.from_url(redis_url, wait_timeout=2.0, retry_interval=0.01)
        trace = []

        async def critical_section(locks, tag):
            async with locks.hold("u1"):
                trace.append(f"{tag}-in")
                await asyncio.sleep(0.05)
                trace.append(f"{tag}-out")

        try:
            await asyncio.gather(critical_section(redis_locks, "a"), critical_section(other, "b"))
        finally:
            await other.close()

        assert trace in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])

    async def test_different_users_do_not_block(self, redis_locks):
        async with redis_locks.hold("u1"):
            async with redis_locks.hold("u2"):
                pass

    async def test_timeout(self, redis_locks, redis_url):
        impatient = RedisUserLocks.from_url(redis_url, wait_timeout=0.05, retry_interval=0.01)
        try:
            async with redis_locks.hold("u1"):
                with pytest.raises(TimeoutError):
                    async with impatient.hold("u1"):
                        pass
        finally:
            await impatient.close()

    async def test_key_removed_on_release(self, redis_locks):
        async with redis_locks.hold("u1"):
            assert await redis_locks._client.exists(f"{RedisUserLocks.KEY_PREFIX}u1") == 1

        assert await redis_locks._client.exists(f"{RedisUserLocks.KEY_PREFIX}u1") == 0
