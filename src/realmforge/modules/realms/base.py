"""
Realm strategy contract.

Purpose
-------
A realm owns a catalogue of challenges, the validation rules for its
mini-games and its boss encounters. The engine only talks to realms through
this interface and never branches on a concrete realm type.

Responsibilities
----------------
- Build a static, deterministic catalogue (`get_challenges`)
- Pick a challenge near a requested difficulty (`generate_challenge`)
- Validate answers without ever raising for a malformed response
- Provide a synchronous score estimate for analytics (`calculate_score`)
- Resolve boss encounters or raise `BossNotFoundError`

Design Notes
------------
- Challenge ids are `{realm_id}:{type}:{slug}` and stable across restarts,
  so a generated challenge can always be resolved again by id.
- Raw scores returned from `validate_answer` are on a 0-100 scale; time,
  difficulty and hint adjustments are applied by the engine.
- Randomness comes from an injectable `random.Random`.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple

from realmforge.domain.models.challenge import (
    Answer,
    BossResult,
    Challenge,
    ChallengeContent,
    ChallengeType,
    RealmInfo,
    RealmMechanic,
    Reward,
    ValidationResult,
)
from realmforge.modules.shared import formulas
from realmforge.modules.shared.exceptions import BossNotFoundError

CURRICULUM_STANDARDS: Tuple[str, ...] = ("O-Level Chemistry", "A-Level Chemistry")


@dataclass(frozen=True)
class BossDefinition:
    boss_id: str
    score: int
    special_rewards: Tuple[Reward, ...]
    unlocked_content: Tuple[str, ...] = ()


class RealmStrategy(ABC):
    """
    Base class for every realm.

    Subclasses set the class attributes and implement `_build_catalogue`
    and `validate_answer`.
    """

    realm_id: ClassVar[str]
    name: ClassVar[str]
    description: ClassVar[str]
    required_level: ClassVar[int] = 1

    # Used by `calculate_score` when a challenge has no time limit.
    default_time_limit: ClassVar[Optional[int]] = None
    bosses: ClassVar[Tuple[BossDefinition, ...]] = ()

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._catalogue: Optional[Tuple[Challenge, ...]] = None
        self._index: Dict[str, Challenge] = {}

    # ========================================================================
    # CATALOGUE
    # ========================================================================

    @abstractmethod
    def _build_catalogue(self) -> List[Challenge]:
        """Create every challenge this realm offers."""

    def get_challenges(self) -> List[Challenge]:
        if self._catalogue is None:
            catalogue = tuple(self._build_catalogue())
            self._index = {challenge.id: challenge for challenge in catalogue}
            if len(self._index) != len(catalogue):
                raise ValueError(f"Duplicate challenge ids in realm {self.realm_id}")
            self._catalogue = catalogue
        return list(self._catalogue)

    def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        self.get_challenges()
        return self._index.get(challenge_id)

    def generate_challenge(
        self,
        difficulty: int,
        challenge_type: Optional[ChallengeType] = None,
    ) -> Challenge:
        """
        Pick a catalogue challenge at `difficulty`.

        Falls back to difficulty +/- 1, then to the first matching catalogue
        entry. Never fails for a non-empty catalogue.
        """
        catalogue = self.get_challenges()
        pool = [c for c in catalogue if challenge_type is None or c.type is challenge_type] or catalogue

        exact = [c for c in pool if c.difficulty == difficulty]
        if exact:
            return self._rng.choice(exact)

        near = [c for c in pool if abs(c.difficulty - difficulty) <= 1]
        if near:
            return self._rng.choice(near)

        return pool[0]

    def challenge_types(self) -> List[ChallengeType]:
        seen: Dict[ChallengeType, None] = {}
        for challenge in self.get_challenges():
            seen.setdefault(challenge.type, None)
        return list(seen)

    # ========================================================================
    # VALIDATION & SCORING
    # ========================================================================

    @abstractmethod
    async def validate_answer(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        """Realm-specific correctness; malformed responses score zero."""

    def calculate_score(self, challenge: Challenge, answer: Answer, time_elapsed: float) -> int:
        """
        Score estimate for leaderboards, assuming a fully correct answer.

        Pure and synchronous; applies the same speed, difficulty and hint
        adjustments as the engine.
        """
        return formulas.calculate_final_score(
            100,
            is_correct=True,
            difficulty=challenge.difficulty,
            hints_used=answer.hints_used,
            time_elapsed=time_elapsed,
            time_limit=challenge.time_limit or self.default_time_limit,
        )

    # ========================================================================
    # BOSSES, REWARDS, MECHANICS
    # ========================================================================

    async def process_boss_challenge(self, user_id: str, boss_id: str) -> BossResult:
        for boss in self.bosses:
            if boss.boss_id == boss_id:
                return BossResult(
                    boss_id=boss.boss_id,
                    realm_id=self.realm_id,
                    defeated=True,
                    score=boss.score,
                    special_rewards=boss.special_rewards,
                    unlocked_content=boss.unlocked_content,
                )
        raise BossNotFoundError(self.realm_id, boss_id)

    def get_special_rewards(self) -> List[Reward]:
        return [Reward.badge(f"{self.realm_id}_master", f"{self.name} Master Badge")]

    def get_special_mechanics(self) -> List[RealmMechanic]:
        return []

    def get_realm_info(self, is_unlocked: bool) -> RealmInfo:
        challenges = tuple(self.get_challenges())
        boss = next((c for c in challenges if c.is_boss), None)
        return RealmInfo(
            id=self.realm_id,
            name=self.name,
            description=self.description,
            required_level=self.required_level,
            is_unlocked=is_unlocked,
            challenges=challenges,
            boss_challenge=boss,
            special_rewards=tuple(self.get_special_rewards()),
            mechanics=tuple(self.get_special_mechanics()),
        )

    # ========================================================================
    # HELPERS FOR SUBCLASSES
    # ========================================================================

    def _make_challenge(
        self,
        challenge_type: ChallengeType,
        slug: str,
        difficulty: int,
        title: str,
        description: str,
        content: ChallengeContent,
        *,
        time_limit: Optional[int],
        concepts: Sequence[str],
        game_data: Optional[Mapping[str, Any]] = None,
        rewards: Sequence[Reward] = (),
    ) -> Challenge:
        """Shared challenge template: id scheme, level gate and metadata."""
        metadata: Dict[str, Any] = {
            "concepts": list(concepts),
            "curriculum_standards": list(CURRICULUM_STANDARDS),
            "estimated_duration": difficulty * 60,
        }
        if game_data is not None:
            metadata["game_data"] = dict(game_data)

        return Challenge(
            id=f"{self.realm_id}:{challenge_type.value}:{slug}",
            realm_id=self.realm_id,
            type=challenge_type,
            difficulty=difficulty,
            title=title,
            description=description,
            content=content,
            time_limit=time_limit,
            required_level=max(1, difficulty // 2),
            rewards=tuple(rewards),
            metadata=metadata,
        )

    @staticmethod
    def _seeded(*parts: Any) -> random.Random:
        """Deterministic generator for catalogue construction."""
        return random.Random(":".join(str(part) for part in parts))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(realm_id={self.realm_id!r})"
