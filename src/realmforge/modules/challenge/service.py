"""
ChallengeService: caller-facing challenge API.

Purpose
-------
Compose GameEngine operations into the surface a game client talks to:
load or generate a challenge, reveal hints, submit, abandon, and read
attempt statistics.

Responsibilities
----------------
- Build `Answer` objects from raw client input
- Pick challenges for "give me something to do" requests
- Default the difficulty from the DifficultyAdvisor
- Expose attempt bookkeeping (active attempt, stats, expiry cleanup)

Non-Responsibilities
--------------------
- Eligibility, scoring, rewards and persistence (GameEngine)

Design Notes
------------
- Every engine exception propagates unchanged; callers match on the
  domain exception types, never on message text.
- An explicit difficulty filters exactly. Without one, the recommended
  difficulty picks the nearest available difficulty so a realm whose
  catalogue stops short of the recommendation still yields a challenge.
"""

from __future__ import annotations

import random
from typing import Any, List, Optional

from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.challenge import (
    Answer,
    BossResult,
    Challenge,
    ChallengeResult,
    ChallengeType,
    RealmInfo,
)
from realmforge.domain.models.character import Character
from realmforge.modules.attempts.tracker import Attempt, AttemptStats
from realmforge.modules.engine.service import GameEngine
from realmforge.modules.shared.exceptions import NoSuitableChallengeError

logger = get_logger(__name__)


class ChallengeService:
    def __init__(self, engine: GameEngine, rng: Optional[random.Random] = None) -> None:
        self._engine = engine
        self._rng = rng or random.Random()

    @property
    def engine(self) -> GameEngine:
        return self._engine

    # ========================================================================
    # CHARACTERS & REALMS
    # ========================================================================

    async def initialize_character(self, user_id: str) -> Character:
        return await self._engine.initialize_character(user_id)

    async def get_current_realm(self, user_id: str) -> RealmInfo:
        return await self._engine.get_current_realm(user_id)

    async def get_recommended_difficulty(self, user_id: str, challenge_type: Optional[ChallengeType] = None) -> int:
        return await self._engine.get_recommended_difficulty(user_id, challenge_type)

    async def process_boss_challenge(self, user_id: str, realm_id: str, boss_id: str) -> BossResult:
        return await self._engine.process_boss_challenge(user_id, realm_id, boss_id)

    # ========================================================================
    # CHALLENGE SELECTION
    # ========================================================================

    async def load_challenge(self, user_id: str, challenge_id: str) -> Challenge:
        """Start (or restart) an attempt at a specific challenge."""
        return await self._engine.start_challenge(user_id, challenge_id)

    async def generate_random_challenge(
        self,
        user_id: str,
        challenge_type: Optional[ChallengeType] = None,
        difficulty: Optional[int] = None,
    ) -> Challenge:
        """
        Pick a challenge from the learner's current realm.

        Does not start an attempt; pass the id to `load_challenge`.

        Raises:
            NoSuitableChallengeError: nothing in the current realm matches
        """
        realm = await self._engine.get_current_realm(user_id)
        candidates: List[Challenge] = [
            challenge
            for challenge in realm.challenges
            if challenge_type is None or challenge.type is challenge_type
        ]

        if difficulty is not None:
            candidates = [challenge for challenge in candidates if challenge.difficulty == difficulty]
        elif candidates:
            target = await self._engine.get_recommended_difficulty(user_id, challenge_type)
            nearest = min(abs(challenge.difficulty - target) for challenge in candidates)
            candidates = [challenge for challenge in candidates if abs(challenge.difficulty - target) == nearest]

        if not candidates:
            raise NoSuitableChallengeError(
                realm.id,
                challenge_type.value if challenge_type else None,
                difficulty,
            )

        challenge = self._rng.choice(candidates)
        logger.debug(
            "Random challenge selected",
            extra={"user_id": user_id, "realm_id": realm.id, "challenge_id": challenge.id},
        )
        return challenge

    async def start_realm_challenge(
        self,
        user_id: str,
        realm_id: str,
        challenge_type: Optional[ChallengeType] = None,
        difficulty: int = 1,
    ) -> Challenge:
        """
        Generate a challenge in `realm_id` and start an attempt at it.

        Raises:
            RealmNotFoundError: realm not registered
            plus the engine's eligibility errors
        """
        realm = self._engine.registry.get(realm_id)
        challenge = realm.generate_challenge(difficulty, challenge_type)
        return await self._engine.start_challenge(user_id, challenge.id)

    # ========================================================================
    # ATTEMPTS
    # ========================================================================

    async def get_hint(self, user_id: str, challenge_id: str, hint_index: int) -> str:
        return await self._engine.reveal_hint(user_id, challenge_id, hint_index)

    async def submit_answer(
        self,
        user_id: str,
        challenge_id: str,
        response: Any,
        hints_used: int = 0,
        time_elapsed: Optional[float] = None,
    ) -> ChallengeResult:
        """
        Submit a raw client response.

        Without a client-reported `time_elapsed` the attempt's tracked age is
        used; a reported value is capped at that age by the engine.
        """
        if time_elapsed is None:
            attempt = await self._engine.get_active_attempt(user_id, challenge_id)
            time_elapsed = self._engine.tracker.elapsed(attempt) if attempt is not None else 0.0

        answer = Answer(
            challenge_id=challenge_id,
            response=response,
            time_elapsed=time_elapsed,
            hints_used=hints_used,
            user_id=user_id,
        )
        return await self._engine.submit_answer(user_id, challenge_id, answer)

    async def abandon_challenge(self, user_id: str, challenge_id: str) -> bool:
        return await self._engine.abandon_challenge(user_id, challenge_id)

    async def get_active_attempt(self, user_id: str, challenge_id: str) -> Optional[Attempt]:
        return await self._engine.get_active_attempt(user_id, challenge_id)

    def get_challenge_stats(self, user_id: str, challenge_id: Optional[str] = None) -> AttemptStats:
        return self._engine.tracker.get_stats(user_id, challenge_id)

    async def cleanup_expired_attempts(self) -> int:
        """Drop attempts older than the TTL; returns how many were expired."""
        removed = await self._engine.tracker.sweep_expired()
        if removed:
            logger.info("Expired attempts cleaned up", extra={"expired_count": removed})
        return removed
