"""Unit tests for the in-process per-user locks."""

import asyncio

import pytest

from realmforge.core.locks import LocalUserLocks
from realmforge.modules.shared.exceptions import is_transient_error


@pytest.mark.unit
class TestLocalUserLocks:
    async def test_same_user_is_serialized(self):
        locks = LocalUserLocks()
        trace = []

        async def critical_section(tag):
            async with locks.hold("u1"):
                trace.append(f"{tag}-in")
                await asyncio.sleep(0.01)
                trace.append(f"{tag}-out")

        await asyncio.gather(critical_section("a"), critical_section("b"))

        assert trace in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])

    async def test_different_users_do_not_block(self):
        locks = LocalUserLocks(wait_timeout=0.1)

        async with locks.hold("u1"):
            async with locks.hold("u2"):
                assert locks.held_count() == 2

    async def test_wait_timeout_raises_timeout_error(self):
        locks = LocalUserLocks(wait_timeout=0.05)

        async with locks.hold("u1"):
            with pytest.raises(TimeoutError) as exc_info:
                async with locks.hold("u1"):
                    pass

        assert is_transient_error(exc_info.value)

    async def test_idle_locks_are_released(self):
        locks = LocalUserLocks()

        async with locks.hold("u1"):
            pass

        assert locks.held_count() == 0
        assert locks._locks == {}

    async def test_lock_released_when_body_raises(self):
        locks = LocalUserLocks(wait_timeout=0.1)

        with pytest.raises(RuntimeError):
            async with locks.hold("u1"):
                raise RuntimeError("boom")

        async with locks.hold("u1"):
            assert locks.held_count() == 1
