"""Unit tests for the domain exception hierarchy."""

import pytest

from realmforge.modules.shared.exceptions import (
    BossNotFoundError,
    ChallengeNotFoundError,
    EligibilityError,
    ErrorSeverity,
    LevelRequirementError,
    NoActiveAttemptError,
    NotFoundError,
    RealmforgeDomainException,
    RealmLockedError,
    ValidationError,
    get_error_severity,
    is_transient_error,
    should_alert,
)


@pytest.mark.unit
class TestDomainExceptions:
    def test_to_dict(self):
        error = LevelRequirementError(5, 3)

        assert error.to_dict() == {
            "error_type": "LevelRequirementError",
            "error_code": "LEVEL_REQUIRED",
            "message": "Level 5 required for this challenge",
            "details": {"required_level": 5, "current_level": 3},
            "severity": "info",
            "is_retryable": False,
        }

    def test_hierarchy(self):
        assert isinstance(RealmLockedError("seers-challenge"), EligibilityError)
        assert isinstance(ChallengeNotFoundError("x"), NotFoundError)
        assert isinstance(NoActiveAttemptError("u", "c"), RealmforgeDomainException)

    def test_not_found_codes(self):
        assert ChallengeNotFoundError("x").error_code == "CHALLENGE_NOT_FOUND"
        boss = BossNotFoundError("mathmage-trials", "dragon")
        assert boss.error_code == "BOSS_NOT_FOUND"
        assert boss.details["realm_id"] == "mathmage-trials"

    def test_str_includes_details(self):
        assert str(ValidationError("response", "required")).startswith("[VALIDATION_RESPONSE]")

    def test_base_defaults(self):
        error = RealmforgeDomainException("failed")

        assert error.severity is ErrorSeverity.ERROR
        assert error.details == {}
        assert error.error_code == "RealmforgeDomainException"

    @pytest.mark.parametrize(
        "error,expected",
        [
            (RealmforgeDomainException("retry me", is_retryable=True), True),
            (NoActiveAttemptError("u", "c"), False),
            (TimeoutError("lock"), True),
            (RuntimeError("boom"), False),
        ],
    )
    def test_is_transient_error(self, error, expected):
        assert is_transient_error(error) is expected

    def test_severity_drives_alerting(self):
        assert get_error_severity(RealmLockedError("x")) is ErrorSeverity.INFO
        assert get_error_severity(RuntimeError("boom")) is ErrorSeverity.ERROR
        assert should_alert(RuntimeError("boom")) is True
        assert should_alert(LevelRequirementError(5, 1)) is False
