"""Shared building blocks: domain exceptions, pure formulas and BaseService."""

from .base_service import BaseService
from .exceptions import (
    BossNotFoundError,
    ChallengeNotFoundError,
    CharacterNotFoundError,
    CharacterNotInitializedError,
    EligibilityError,
    ErrorSeverity,
    HintNotAvailableError,
    LevelRequirementError,
    NoActiveAttemptError,
    NoSuitableChallengeError,
    NotFoundError,
    RealmforgeDomainException,
    RealmLockedError,
    RealmNotFoundError,
    ValidationError,
)

__all__ = [
    "BaseService",
    "BossNotFoundError",
    "ChallengeNotFoundError",
    "CharacterNotFoundError",
    "CharacterNotInitializedError",
    "EligibilityError",
    "ErrorSeverity",
    "HintNotAvailableError",
    "LevelRequirementError",
    "NoActiveAttemptError",
    "NoSuitableChallengeError",
    "NotFoundError",
    "RealmforgeDomainException",
    "RealmLockedError",
    "RealmNotFoundError",
    "ValidationError",
]
