"""
Unit tests for AttemptTracker.

Test Coverage:
- start/touch/end/abandon lifecycle and state transitions
- Exactly-once `end` under concurrent submissions
- Expiry on access and from the background sweeper
- Bounded statistics window

Testing Strategy:
- FakeClock drives attempt ages; no real waiting except for the sweeper
"""

import asyncio

import pytest

from realmforge.domain.models.base import DomainValidationError
from realmforge.modules.attempts.tracker import Attempt, AttemptState, AttemptTracker
from realmforge.modules.shared.exceptions import NoActiveAttemptError
from tests.conftest import FakeClock


@pytest.mark.unit
class TestLifecycle:
    async def test_start_creates_live_attempt(self, tracker):
        attempt = await tracker.start("u1", "c1")

        assert attempt.state is AttemptState.STARTED
        assert attempt.hints_used == 0
        assert tracker.active_count() == 1
        assert (await tracker.get("u1", "c1")).key == ("u1", "c1")

    async def test_restart_replaces_previous_attempt(self, tracker, clock):
        await tracker.start("u1", "c1")
        await tracker.touch("u1", "c1", 1)
        clock.advance(100)

        fresh = await tracker.start("u1", "c1")

        assert fresh.hints_used == 0
        assert tracker.elapsed(fresh) == 0
        assert tracker.active_count() == 1

    async def test_touch_is_monotonic(self, tracker):
        await tracker.start("u1", "c1")

        await tracker.touch("u1", "c1", 2)
        attempt = await tracker.touch("u1", "c1", 0)

        assert attempt.hints_used == 3

    async def test_touch_without_attempt_raises(self, tracker):
        with pytest.raises(NoActiveAttemptError):
            await tracker.touch("u1", "c1", 0)

    async def test_end_is_single_use(self, tracker):
        await tracker.start("u1", "c1")

        first = await tracker.end("u1", "c1")
        second = await tracker.end("u1", "c1")

        assert first.state is AttemptState.VALIDATED
        assert second is None
        assert tracker.active_count() == 0

    async def test_concurrent_end_lets_exactly_one_through(self, tracker):
        await tracker.start("u1", "c1")

        results = await asyncio.gather(*(tracker.end("u1", "c1") for _ in range(5)))

        assert sum(1 for result in results if result is not None) == 1

    async def test_abandon(self, tracker):
        await tracker.start("u1", "c1")

        attempt = await tracker.abandon("u1", "c1")

        assert attempt.state is AttemptState.ABANDONED
        assert await tracker.abandon("u1", "c1") is None
        assert await tracker.get("u1", "c1") is None

    async def test_restore_reinstates_ended_attempt(self, tracker, clock):
        await tracker.start("u1", "c1")
        await tracker.touch("u1", "c1", 1)
        clock.advance(40)
        ended = await tracker.end("u1", "c1")

        assert await tracker.restore(ended) is True

        attempt = await tracker.get("u1", "c1")
        assert attempt.state is AttemptState.STARTED
        assert attempt.hints_used == 2
        assert tracker.elapsed(attempt) == 40
        assert await tracker.end("u1", "c1") is not None

    async def test_restore_yields_to_newer_attempt(self, tracker, clock):
        await tracker.start("u1", "c1")
        ended = await tracker.end("u1", "c1")
        clock.advance(10)
        await tracker.start("u1", "c1")

        assert await tracker.restore(ended) is False
        assert tracker.elapsed(await tracker.get("u1", "c1")) == 0

    async def test_returned_attempts_are_copies(self, tracker):
        attempt = await tracker.start("u1", "c1")
        attempt.hints_used = 9

        assert (await tracker.get("u1", "c1")).hints_used == 0


@pytest.mark.unit
class TestStateMachine:
    def test_terminal_states_have_no_exits(self):
        attempt = Attempt(user_id="u1", challenge_id="c1", state=AttemptState.COMPLETED)

        with pytest.raises(DomainValidationError):
            attempt.transition(AttemptState.STARTED)

    def test_validated_only_moves_to_completed(self):
        attempt = Attempt(user_id="u1", challenge_id="c1", state=AttemptState.VALIDATED)

        with pytest.raises(DomainValidationError):
            attempt.transition(AttemptState.ABANDONED)
        attempt.transition(AttemptState.COMPLETED)

        assert attempt.state.is_terminal


@pytest.mark.unit
class TestExpiry:
    async def test_expired_attempt_dropped_on_access(self, tracker, clock):
        await tracker.start("u1", "c1")
        clock.advance(tracker.ttl_seconds + 1)

        assert await tracker.end("u1", "c1") is None
        assert tracker.active_count() == 0

    async def test_attempt_at_exact_ttl_is_still_live(self, tracker, clock):
        await tracker.start("u1", "c1")
        clock.advance(tracker.ttl_seconds)

        assert await tracker.end("u1", "c1") is not None

    async def test_sweep_counts_only_stale_attempts(self, tracker, clock):
        await tracker.start("u1", "old")
        clock.advance(3000)
        await tracker.start("u1", "new")
        clock.advance(700)

        assert await tracker.sweep_expired() == 1
        assert await tracker.get("u1", "new") is not None

    async def test_sweep_with_custom_max_age(self, tracker, clock):
        await tracker.start("u1", "c1")
        await tracker.start("u2", "c1")
        clock.advance(61)

        assert await tracker.sweep_expired(max_age=60) == 2

    async def test_background_sweeper(self):
        clock = FakeClock()
        tracker = AttemptTracker(ttl_seconds=10, clock=clock)
        await tracker.start("u1", "c1")
        clock.advance(11)

        tracker.start_sweeper(0.01)
        assert tracker.sweeper_running
        for _ in range(100):
            if tracker.active_count() == 0:
                break
            await asyncio.sleep(0.01)
        await tracker.stop_sweeper()

        assert tracker.active_count() == 0
        assert not tracker.sweeper_running

    async def test_stop_sweeper_without_start_is_noop(self, tracker):
        await tracker.stop_sweeper()

        assert not tracker.sweeper_running


@pytest.mark.unit
class TestStats:
    async def test_stats_aggregate_per_user_and_challenge(self, tracker):
        await tracker.record_outcome("u1", "c1", score=100, time_elapsed=10, is_correct=True)
        await tracker.record_outcome("u1", "c1", score=50, time_elapsed=30, is_correct=False)
        await tracker.record_outcome("u1", "c2", score=90, time_elapsed=20, is_correct=True)
        await tracker.record_outcome("u2", "c1", score=0, time_elapsed=5, is_correct=False)

        stats = tracker.get_stats("u1", "c1")

        assert stats.total_attempts == 2
        assert stats.average_score == 75
        assert stats.average_time == 20
        assert stats.success_rate == 0.5
        assert tracker.get_stats("u1").total_attempts == 3

    def test_empty_stats(self, tracker):
        stats = tracker.get_stats("nobody")

        assert stats.total_attempts == 0
        assert stats.success_rate == 0.0

    async def test_window_is_bounded(self, clock):
        tracker = AttemptTracker(stats_window=3, clock=clock)
        for score in (10, 20, 30, 40):
            await tracker.record_outcome("u1", "c1", score=score, time_elapsed=1, is_correct=True)

        stats = tracker.get_stats("u1")

        assert stats.total_attempts == 3
        assert stats.average_score == 30
