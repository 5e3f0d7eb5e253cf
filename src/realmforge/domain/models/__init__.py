"""
Rich domain models for the progression engine.

Domain models are separate from the ORM record in
`realmforge.modules.character.model`; stores convert between the two.
"""

from realmforge.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    DomainValidationError,
    Entity,
)
from realmforge.domain.models.challenge import (
    Answer,
    BossResult,
    Challenge,
    ChallengeContent,
    ChallengeResult,
    ChallengeType,
    LevelUpResult,
    RealmInfo,
    RealmMechanic,
    Reward,
    RewardType,
    ValidationResult,
)
from realmforge.domain.models.character import (
    Achievement,
    Character,
    InventoryItem,
    UnlockedRealm,
)

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "DomainValidationError",
    "Entity",
    "Achievement",
    "Answer",
    "BossResult",
    "Challenge",
    "ChallengeContent",
    "ChallengeResult",
    "ChallengeType",
    "Character",
    "InventoryItem",
    "LevelUpResult",
    "RealmInfo",
    "RealmMechanic",
    "Reward",
    "RewardType",
    "UnlockedRealm",
    "ValidationResult",
]
