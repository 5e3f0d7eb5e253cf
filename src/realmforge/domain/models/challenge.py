"""
Challenge-side value objects.

Purpose
-------
Immutable types exchanged between the realm strategies, the engine and the
caller: challenge definitions, learner answers, validation results, rewards,
and the results returned from a submission, a level-up or a boss encounter.

Design Notes
------------
- All types are frozen dataclasses validated in `__post_init__`.
- `ValidationResult.metadata` belongs to the realm that produced it; the
  engine passes it through without reading it.
- `Answer.response` is deliberately loose (string, list of strings, or a
  mapping) because its shape depends on the challenge type.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from realmforge.domain.models.base import (
    DomainValidationError,
    utcnow,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
    validate_range,
)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5


class ChallengeType(str, Enum):
    """Mini-game kinds. Each realm owns a subset."""

    EQUATION_BALANCE = "equation_balance"
    STOICHIOMETRY = "stoichiometry"
    GAS_TEST = "gas_test"
    ION_IDENTIFICATION = "ion_identification"
    PRECIPITATION = "precipitation"
    COLOR_CHANGE = "color_change"
    # Memory Labyrinth
    MEMORY_MATCH = "memory_match"
    QUICK_RECALL = "quick_recall"
    SURVIVAL = "survival"
    # Seer's Challenge
    PRECIPITATION_POKER = "precipitation_poker"
    COLOR_CLASH = "color_clash"
    MYSTERY_REACTION = "mystery_reaction"
    # Encounters
    BOSS_BATTLE = "boss_battle"

    @classmethod
    def parse(cls, value: "ChallengeType | str") -> "ChallengeType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise DomainValidationError(f"Unknown challenge type: {value}", field="type") from None


class RewardType(str, Enum):
    XP = "xp"
    GOLD = "gold"
    BADGE = "badge"
    ITEM = "item"
    UNLOCK = "unlock"


# ============================================================================
# Rewards
# ============================================================================


@dataclass(frozen=True)
class Reward:
    """
    A write-only instruction consumed by reward application.

    xp and gold rewards carry an `amount`; badge, item and unlock rewards
    carry an `item_id`.
    """

    type: RewardType
    amount: int = 0
    item_id: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", RewardType(self.type))
        validate_non_negative(self.amount, "amount")
        if self.type in (RewardType.BADGE, RewardType.ITEM, RewardType.UNLOCK):
            validate_not_empty(self.item_id or "", "item_id")

    @classmethod
    def xp(cls, amount: int, description: str = "") -> "Reward":
        return cls(RewardType.XP, amount=amount, description=description)

    @classmethod
    def gold(cls, amount: int, description: str = "") -> "Reward":
        return cls(RewardType.GOLD, amount=amount, description=description)

    @classmethod
    def badge(cls, item_id: str, description: str) -> "Reward":
        return cls(RewardType.BADGE, item_id=item_id, description=description)

    @classmethod
    def item(cls, item_id: str, description: str) -> "Reward":
        return cls(RewardType.ITEM, item_id=item_id, description=description)

    @classmethod
    def unlock(cls, item_id: str, description: str) -> "Reward":
        return cls(RewardType.UNLOCK, item_id=item_id, description=description)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value, "description": self.description}
        if self.type in (RewardType.XP, RewardType.GOLD):
            data["amount"] = self.amount
        else:
            data["item_id"] = self.item_id
        return data


# ============================================================================
# Challenges
# ============================================================================


@dataclass(frozen=True)
class ChallengeContent:
    question: str
    correct_answer: Any
    explanation: str = ""
    hints: Tuple[str, ...] = ()
    visual_aids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "hints", tuple(self.hints))
        object.__setattr__(self, "visual_aids", tuple(self.visual_aids))


@dataclass(frozen=True)
class Challenge:
    """
    Immutable challenge definition.

    Attributes
    ----------
    id : str
        Globally unique across realms.
    difficulty : int
        1 to 5.
    time_limit : Optional[int]
        Seconds; None means no limit and no speed bonus.
    required_level : int
        Minimum character level.
    rewards : Tuple[Reward, ...]
        Granted verbatim on every correct completion.
    metadata : Mapping[str, Any]
        Realm-specific payload.
    """

    id: str
    realm_id: str
    type: ChallengeType
    difficulty: int
    title: str
    description: str
    content: ChallengeContent
    time_limit: Optional[int] = None
    required_level: int = 1
    rewards: Tuple[Reward, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        validate_not_empty(self.realm_id, "realm_id")
        object.__setattr__(self, "type", ChallengeType.parse(self.type))
        validate_range(self.difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY, "difficulty")
        validate_positive(self.required_level, "required_level")
        if self.time_limit is not None:
            validate_positive(self.time_limit, "time_limit")
        object.__setattr__(self, "rewards", tuple(self.rewards))

    @property
    def hints(self) -> Tuple[str, ...]:
        return self.content.hints

    @property
    def hint_count(self) -> int:
        return len(self.content.hints)

    @property
    def is_boss(self) -> bool:
        return self.type is ChallengeType.BOSS_BATTLE

    def summary(self) -> Dict[str, Any]:
        return {
            "challenge_id": self.id,
            "realm_id": self.realm_id,
            "type": self.type.value,
            "difficulty": self.difficulty,
            "required_level": self.required_level,
        }


# ============================================================================
# Answers & validation
# ============================================================================


@dataclass(frozen=True)
class Answer:
    """Caller-supplied answer. Never persisted verbatim."""

    challenge_id: str
    response: Any
    time_elapsed: float = 0.0
    hints_used: int = 0
    user_id: Optional[str] = None
    submitted_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        validate_non_negative(self.time_elapsed, "time_elapsed")
        validate_non_negative(self.hints_used, "hints_used")

    @property
    def has_response(self) -> bool:
        if self.response is None:
            return False
        if isinstance(self.response, str):
            return bool(self.response.strip())
        return True

    def with_bookkeeping(self, *, time_elapsed: float, hints_used: int) -> "Answer":
        return replace(self, time_elapsed=time_elapsed, hints_used=hints_used)


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a realm's answer validation.

    `score` is the realm's raw 0-100 score; the engine substitutes the
    adjusted final score in the result it returns.
    """

    is_correct: bool
    score: int
    feedback: str
    explanation: str = ""
    partial_credit: Optional[float] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_non_negative(self.score, "score")
        if self.partial_credit is not None:
            validate_range(self.partial_credit, 0.0, 1.0, "partial_credit")

    @classmethod
    def rejected(cls, feedback: str, explanation: str = "") -> "ValidationResult":
        """Zero-score result for a malformed or unsupported response."""
        return cls(is_correct=False, score=0, feedback=feedback, explanation=explanation)

    def with_score(self, score: int) -> "ValidationResult":
        return replace(self, score=score)


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class LevelUpResult:
    previous_level: int
    new_level: int
    unlocked_realms: Tuple[str, ...] = ()
    unlocked_features: Tuple[str, ...] = ()
    bonus_rewards: Tuple[Reward, ...] = ()

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.previous_level


@dataclass(frozen=True)
class ChallengeResult:
    challenge_id: str
    user_id: str
    validation: ValidationResult
    rewards: Tuple[Reward, ...]
    experience_gained: int
    gold_earned: int
    score: int
    answer: Answer
    completed_at: datetime = field(default_factory=utcnow)
    level_up: Optional[LevelUpResult] = None

    @property
    def is_correct(self) -> bool:
        return self.validation.is_correct


@dataclass(frozen=True)
class BossResult:
    boss_id: str
    realm_id: str
    defeated: bool
    score: int
    special_rewards: Tuple[Reward, ...] = ()
    unlocked_content: Tuple[str, ...] = ()


# ============================================================================
# Realm description
# ============================================================================


@dataclass(frozen=True)
class RealmMechanic:
    id: str
    name: str
    description: str
    parameters: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RealmInfo:
    id: str
    name: str
    description: str
    required_level: int
    is_unlocked: bool
    challenges: Tuple[Challenge, ...]
    boss_challenge: Optional[Challenge]
    special_rewards: Tuple[Reward, ...]
    mechanics: Tuple[RealmMechanic, ...] = ()
