"""
Analytics and adaptive-difficulty collaborators.

The engine depends on these two narrow protocols only. Real implementations
(an analytics pipeline, a learning-model-driven advisor) live outside this
package; the defaults here log attempts and derive difficulty from level.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.challenge import (
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    Answer,
    Challenge,
    ChallengeResult,
    ChallengeType,
)
from realmforge.modules.character.store import CharacterStore

logger = get_logger(__name__)


@runtime_checkable
class AnalyticsRecorder(Protocol):
    async def record_attempt(
        self,
        user_id: str,
        challenge_id: str,
        challenge: Challenge,
        answer: Answer,
        result: ChallengeResult,
    ) -> None:
        ...


@runtime_checkable
class DifficultyAdvisor(Protocol):
    async def recommended_difficulty(self, user_id: str, challenge_type: Optional[ChallengeType]) -> int:
        ...


class LoggingAnalyticsRecorder:
    """Writes one structured log line per completed attempt."""

    async def record_attempt(
        self,
        user_id: str,
        challenge_id: str,
        challenge: Challenge,
        answer: Answer,
        result: ChallengeResult,
    ) -> None:
        logger.info(
            "Attempt recorded",
            extra={
                "user_id": user_id,
                "challenge_id": challenge_id,
                "realm_id": challenge.realm_id,
                "challenge_type": challenge.type.value,
                "difficulty": challenge.difficulty,
                "is_correct": result.is_correct,
                "score": result.score,
                "time_elapsed": answer.time_elapsed,
                "hints_used": answer.hints_used,
            },
        )


class StaticDifficultyAdvisor:
    """
    Level-based default: min(5, 1 + (level - 1) // 2).

    Unknown users get the minimum difficulty.
    """

    def __init__(self, store: CharacterStore) -> None:
        self._store = store

    @staticmethod
    def for_level(level: int) -> int:
        """
        >>> [StaticDifficultyAdvisor.for_level(n) for n in (1, 2, 3, 6, 20)]
        [1, 1, 2, 3, 5]
        """
        return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, 1 + (level - 1) // 2))

    async def recommended_difficulty(self, user_id: str, challenge_type: Optional[ChallengeType]) -> int:
        character = await self._store.get(user_id)
        if character is None:
            return MIN_DIFFICULTY
        return self.for_level(character.level)
