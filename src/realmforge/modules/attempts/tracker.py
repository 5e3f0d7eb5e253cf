"""
Attempt Tracker: ephemeral bookkeeping for in-flight challenges.

Purpose
-------
Remember when each learner started each challenge, how many hints they have
used, and close the attempt exactly once on submission.

Responsibilities
----------------
- Create or replace the live attempt for `(user_id, challenge_id)`
- Raise `hints_used` monotonically as hints are revealed
- Atomically check-and-remove on submission (`end`), so that of two
  concurrent submissions exactly one proceeds
- Expire stale attempts, on access and from a periodic background sweep
- Keep a bounded window of recently closed attempts for statistics

Non-Responsibilities
--------------------
- Persistence: attempts live only in memory and vanish on restart
- Scoring and rewards (GameEngine)

State Machine
-------------
NOT_STARTED -> STARTED -> VALIDATED -> COMPLETED
                       -> ABANDONED
                       -> EXPIRED
Terminal states have no outgoing transitions.

Design Notes
------------
- Every mutation runs under one `asyncio.Lock`.
- Ages are measured with `time.monotonic()` so wall-clock jumps cannot
  extend or shorten an attempt; `started_at` is kept for display.
- Returned attempts are copies; callers cannot mutate tracker state.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Deque, Dict, Optional, Tuple

from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.base import DomainValidationError, utcnow
from realmforge.modules.shared.exceptions import NoActiveAttemptError

logger = get_logger(__name__)

AttemptKey = Tuple[str, str]


class AttemptState(str, Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    VALIDATED = "validated"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (AttemptState.COMPLETED, AttemptState.ABANDONED, AttemptState.EXPIRED)


_TRANSITIONS = {
    AttemptState.NOT_STARTED: {AttemptState.STARTED},
    AttemptState.STARTED: {AttemptState.VALIDATED, AttemptState.ABANDONED, AttemptState.EXPIRED},
    AttemptState.VALIDATED: {AttemptState.COMPLETED},
}


@dataclass
class Attempt:
    user_id: str
    challenge_id: str
    started_at: datetime = field(default_factory=utcnow)
    started_monotonic: float = field(default_factory=time.monotonic)
    hints_used: int = 0
    state: AttemptState = AttemptState.NOT_STARTED

    @property
    def key(self) -> AttemptKey:
        return (self.user_id, self.challenge_id)

    def age(self, now: Optional[float] = None) -> float:
        """Seconds since the attempt started, on the monotonic clock."""
        return max(0.0, (time.monotonic() if now is None else now) - self.started_monotonic)

    def transition(self, target: AttemptState) -> None:
        if target not in _TRANSITIONS.get(self.state, set()):
            raise DomainValidationError(
                f"Illegal attempt transition {self.state.value} -> {target.value}",
                field="state",
            )
        self.state = target


@dataclass(frozen=True)
class AttemptOutcome:
    """A closed attempt as kept in the statistics window."""

    user_id: str
    challenge_id: str
    score: int
    time_elapsed: float
    is_correct: bool
    closed_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class AttemptStats:
    total_attempts: int = 0
    average_score: float = 0.0
    average_time: float = 0.0
    success_rate: float = 0.0


class AttemptTracker:
    """
    In-memory registry of live attempts.

    Parameters
    ----------
    ttl_seconds:
        Staleness window; older attempts count as expired.
    stats_window:
        Number of recently closed attempts kept for `get_stats`.
    clock:
        Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        stats_window: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._attempts: Dict[AttemptKey, Attempt] = {}
        self._outcomes: Deque[AttemptOutcome] = deque(maxlen=max(1, stats_window))

        self._sweeper: Optional[asyncio.Task[None]] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def start(self, user_id: str, challenge_id: str) -> Attempt:
        """Create the live attempt, replacing any previous one for the key."""
        attempt = Attempt(user_id=user_id, challenge_id=challenge_id, started_monotonic=self._clock())
        attempt.transition(AttemptState.STARTED)

        async with self._lock:
            replaced = self._attempts.get(attempt.key)
            self._attempts[attempt.key] = attempt

        logger.debug(
            "Attempt started",
            extra={"user_id": user_id, "challenge_id": challenge_id, "replaced": replaced is not None},
        )
        return replace(attempt)

    async def touch(self, user_id: str, challenge_id: str, hint_index: int) -> Attempt:
        """
        Record that hint `hint_index` was revealed.

        Idempotent and monotonic: hints_used = max(hints_used, hint_index + 1).

        Raises:
            NoActiveAttemptError: no live attempt for the key
        """
        async with self._lock:
            attempt = self._live(user_id, challenge_id)
            if attempt is None:
                raise NoActiveAttemptError(user_id, challenge_id)
            attempt.hints_used = max(attempt.hints_used, hint_index + 1)
            return replace(attempt)

    async def end(self, user_id: str, challenge_id: str) -> Optional[Attempt]:
        """
        Close the live attempt for validation.

        Atomic check-and-remove: returns the attempt in VALIDATED state, or
        None if there was no live attempt (including a concurrent `end` that
        won the race).
        """
        async with self._lock:
            attempt = self._live(user_id, challenge_id)
            if attempt is None:
                return None
            del self._attempts[attempt.key]
            attempt.transition(AttemptState.VALIDATED)
            return replace(attempt)

    async def abandon(self, user_id: str, challenge_id: str) -> Optional[Attempt]:
        async with self._lock:
            attempt = self._live(user_id, challenge_id)
            if attempt is None:
                return None
            del self._attempts[attempt.key]
            attempt.transition(AttemptState.ABANDONED)

        logger.info("Attempt abandoned", extra={"user_id": user_id, "challenge_id": challenge_id})
        return replace(attempt)

    async def restore(self, attempt: Attempt) -> bool:
        """
        Put back an attempt that `end` closed but whose submission failed.

        Start time and hints are kept. A newer live attempt for the key wins;
        returns whether the attempt was reinstated.
        """
        restored = replace(attempt, state=AttemptState.STARTED)
        async with self._lock:
            if self._live(attempt.user_id, attempt.challenge_id) is not None:
                return False
            self._attempts[restored.key] = restored

        logger.info(
            "Attempt restored",
            extra={"user_id": attempt.user_id, "challenge_id": attempt.challenge_id},
        )
        return True

    async def get(self, user_id: str, challenge_id: str) -> Optional[Attempt]:
        async with self._lock:
            attempt = self._live(user_id, challenge_id)
            return replace(attempt) if attempt else None

    def active_count(self) -> int:
        return len(self._attempts)

    def _live(self, user_id: str, challenge_id: str) -> Optional[Attempt]:
        """Live attempt for the key; an expired one is dropped. Caller holds the lock."""
        attempt = self._attempts.get((user_id, challenge_id))
        if attempt is None:
            return None
        if attempt.age(self._clock()) > self._ttl:
            attempt.transition(AttemptState.EXPIRED)
            del self._attempts[attempt.key]
            logger.info(
                "Attempt expired on access",
                extra={"user_id": user_id, "challenge_id": challenge_id},
            )
            return None
        return attempt

    def elapsed(self, attempt: Attempt) -> float:
        """Real seconds since `attempt` started, on the tracker's clock."""
        return attempt.age(self._clock())

    # ========================================================================
    # EXPIRY
    # ========================================================================

    async def sweep_expired(self, max_age: Optional[float] = None) -> int:
        """Drop attempts older than `max_age` (default: the TTL). Returns the count."""
        limit = self._ttl if max_age is None else float(max_age)
        now = self._clock()

        async with self._lock:
            stale = [key for key, attempt in self._attempts.items() if attempt.age(now) > limit]
            for key in stale:
                self._attempts.pop(key).transition(AttemptState.EXPIRED)

        if stale:
            logger.info(
                "Expired attempts swept",
                extra={"expired_count": len(stale), "active_count": len(self._attempts)},
            )
        return len(stale)

    def start_sweeper(self, interval_seconds: float) -> None:
        """Run `sweep_expired` every `interval_seconds` until `stop_sweeper`."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._stop_event = asyncio.Event()
        self._sweeper = asyncio.create_task(
            self._run_sweeper(interval_seconds, self._stop_event),
            name="attempt-sweeper",
        )

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        assert self._stop_event is not None
        self._stop_event.set()
        await self._sweeper
        self._sweeper = None
        self._stop_event = None

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    async def _run_sweeper(self, interval_seconds: float, stop_event: asyncio.Event) -> None:
        logger.info("Attempt sweeper started", extra={"interval_seconds": interval_seconds})
        try:
            while not stop_event.is_set():
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
                except asyncio.TimeoutError:
                    await self.sweep_expired()
        finally:
            logger.info("Attempt sweeper stopped")

    # ========================================================================
    # STATISTICS
    # ========================================================================

    async def record_outcome(
        self,
        user_id: str,
        challenge_id: str,
        *,
        score: int,
        time_elapsed: float,
        is_correct: bool,
    ) -> None:
        async with self._lock:
            self._outcomes.append(
                AttemptOutcome(
                    user_id=user_id,
                    challenge_id=challenge_id,
                    score=score,
                    time_elapsed=time_elapsed,
                    is_correct=is_correct,
                )
            )

    def get_stats(self, user_id: str, challenge_id: Optional[str] = None) -> AttemptStats:
        """Aggregate the closed attempts in the window for a user (and challenge)."""
        matching = [
            outcome for outcome in self._outcomes
            if outcome.user_id == user_id and (challenge_id is None or outcome.challenge_id == challenge_id)
        ]
        if not matching:
            return AttemptStats()

        total = len(matching)
        return AttemptStats(
            total_attempts=total,
            average_score=sum(o.score for o in matching) / total,
            average_time=sum(o.time_elapsed for o in matching) / total,
            success_rate=sum(1 for o in matching if o.is_correct) / total,
        )
