"""
Domain exceptions for the Realmforge progression engine.

Purpose
-------
Define the structured exception hierarchy raised by the engine and the
challenge service. Callers (an HTTP layer, a bot, a CLI) translate these into
learner-facing messages.

Design Notes
------------
- All domain exceptions inherit from `RealmforgeDomainException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- Categories:
  - Not found: character, challenge, realm, boss, hint
  - Eligibility: level too low, realm locked
  - Invalid input: `ValidationError`
  - Stale attempt: `NoActiveAttemptError`
  - Invariant: `CharacterNotInitializedError`
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning
    INFO = "info"  # Normal operation (e.g., validation failures)
    WARNING = "warning"  # Concerning but handled
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # System-level failures


class RealmforgeDomainException(Exception):
    """
    Base exception for all Realmforge domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise RealmforgeDomainException("Submission failed", {"reason": "stale"})
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


# ============================================================================
# Not found
# ============================================================================


class NotFoundError(RealmforgeDomainException):
    """
    Raised when a requested resource cannot be found.

    Args:
        resource_type: Type of resource (e.g., "Challenge", "Realm")
        identifier: Optional identifier for the missing resource
        message: Optional override for the default message
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(
        self,
        resource_type: str,
        identifier: Optional[Any] = None,
        message: Optional[str] = None,
    ) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if message is None:
            message = (
                f"{resource_type} not found: {identifier}"
                if identifier is not None
                else f"{resource_type} not found"
            )

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class CharacterNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__("Character", user_id)


class ChallengeNotFoundError(NotFoundError):
    def __init__(self, challenge_id: str) -> None:
        self.challenge_id = challenge_id
        super().__init__("Challenge", challenge_id, message="Challenge not found")


class RealmNotFoundError(NotFoundError):
    def __init__(self, realm_id: str) -> None:
        self.realm_id = realm_id
        super().__init__("Realm", realm_id, message=f"Realm {realm_id} not found")


class BossNotFoundError(NotFoundError):
    def __init__(self, realm_id: str, boss_id: str) -> None:
        self.realm_id = realm_id
        self.boss_id = boss_id
        super().__init__("Boss", boss_id, message=f"Unknown boss: {boss_id}")
        self.details["realm_id"] = realm_id


class HintNotAvailableError(NotFoundError):
    def __init__(self, challenge_id: str, hint_index: int) -> None:
        self.challenge_id = challenge_id
        self.hint_index = hint_index
        super().__init__("Hint", hint_index, message="Hint not available")
        self.details["challenge_id"] = challenge_id


# ============================================================================
# Eligibility
# ============================================================================


class EligibilityError(RealmforgeDomainException):
    """The learner is not allowed to attempt this challenge yet."""

    DEFAULT_SEVERITY = ErrorSeverity.INFO


class LevelRequirementError(EligibilityError):
    """
    Args:
        required_level: Minimum level for the challenge
        current_level: The learner's level
    """

    def __init__(self, required_level: int, current_level: int) -> None:
        self.required_level = required_level
        self.current_level = current_level
        super().__init__(
            f"Level {required_level} required for this challenge",
            details={"required_level": required_level, "current_level": current_level},
            error_code="LEVEL_REQUIRED",
        )


class RealmLockedError(EligibilityError):
    def __init__(self, realm_id: str) -> None:
        self.realm_id = realm_id
        super().__init__(
            "Realm not unlocked",
            details={"realm_id": realm_id},
            error_code="REALM_LOCKED",
        )


# ============================================================================
# Input, attempt and invariant errors
# ============================================================================


class ValidationError(RealmforgeDomainException):
    """
    Raised when caller input fails validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


class NoActiveAttemptError(RealmforgeDomainException):
    """
    No live attempt exists: never started, already submitted, abandoned, or
    swept after expiry.
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, user_id: str, challenge_id: str) -> None:
        self.user_id = user_id
        self.challenge_id = challenge_id
        super().__init__(
            "No active attempt found for this challenge",
            details={"user_id": user_id, "challenge_id": challenge_id},
            error_code="NO_ACTIVE_ATTEMPT",
        )


class NoSuitableChallengeError(RealmforgeDomainException):
    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, realm_id: str, challenge_type: Optional[str], difficulty: Optional[int]) -> None:
        super().__init__(
            "No suitable challenges found",
            details={
                "realm_id": realm_id,
                "challenge_type": challenge_type,
                "difficulty": difficulty,
            },
            error_code="NO_SUITABLE_CHALLENGE",
        )


class CharacterNotInitializedError(RealmforgeDomainException):
    """A character exists but has no unlocked realm, which initialization guarantees."""

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(
            "Character has no unlocked realms",
            details={"user_id": user_id},
            error_code="CHARACTER_NOT_INITIALIZED",
        )


# Utility functions for exception handling patterns


def is_transient_error(exc: Exception) -> bool:
    """
    Check if an exception represents a transient error that can be retried.

    Lock acquisition timeouts are transient as well.
    """
    if isinstance(exc, RealmforgeDomainException):
        return exc.is_retryable
    return isinstance(exc, TimeoutError)


def get_error_severity(exc: Exception) -> ErrorSeverity:
    if isinstance(exc, RealmforgeDomainException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """True if severity is ERROR or CRITICAL."""
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
