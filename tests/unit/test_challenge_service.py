"""
Unit tests for ChallengeService.

Test Coverage:
- Challenge selection (explicit id, random within the current realm, by realm)
- Submission from raw client input
- Attempt bookkeeping passthroughs (active attempt, stats, cleanup)
"""

import pytest

from realmforge.domain.models.challenge import ChallengeType
from realmforge.modules.realms.mathmage_trials import MathmageTrialsRealm
from realmforge.modules.shared.exceptions import (
    CharacterNotFoundError,
    NoActiveAttemptError,
    NoSuitableChallengeError,
    RealmNotFoundError,
)
from tests.conftest import GOGGLES, GROVE, TIMED, UNTIMED

USER = "learner-7"


@pytest.mark.unit
class TestChallengeSelection:
    async def test_load_challenge_starts_attempt(self, service):
        await service.initialize_character(USER)

        challenge = await service.load_challenge(USER, TIMED)

        assert challenge.id == TIMED
        assert await service.get_active_attempt(USER, TIMED) is not None

    async def test_random_challenge_uses_recommended_difficulty(self, service):
        await service.initialize_character(USER)

        for _ in range(10):
            challenge = await service.generate_random_challenge(USER)
            assert challenge.id in (UNTIMED, GOGGLES)

    async def test_random_challenge_does_not_start_attempt(self, service):
        await service.initialize_character(USER)

        challenge = await service.generate_random_challenge(USER)

        assert await service.get_active_attempt(USER, challenge.id) is None

    async def test_random_challenge_filters_type_and_difficulty(self, service):
        await service.initialize_character(USER)

        challenge = await service.generate_random_challenge(USER, ChallengeType.EQUATION_BALANCE, difficulty=2)

        assert challenge.id == TIMED

    async def test_nearest_difficulty_when_recommendation_missing(self, service):
        await service.initialize_character(USER)

        challenge = await service.generate_random_challenge(USER, ChallengeType.GAS_TEST)

        assert challenge.id == GOGGLES

    async def test_explicit_difficulty_without_match(self, service):
        await service.initialize_character(USER)

        with pytest.raises(NoSuitableChallengeError) as exc_info:
            await service.generate_random_challenge(USER, ChallengeType.GAS_TEST, difficulty=4)

        assert exc_info.value.details == {"realm_id": GROVE, "challenge_type": "gas_test", "difficulty": 4}

    async def test_type_not_offered_by_realm(self, service):
        await service.initialize_character(USER)

        with pytest.raises(NoSuitableChallengeError):
            await service.generate_random_challenge(USER, ChallengeType.SURVIVAL)

    async def test_random_challenge_for_unknown_user(self, service):
        with pytest.raises(CharacterNotFoundError):
            await service.generate_random_challenge("ghost")

    async def test_start_realm_challenge(self, service, registry):
        registry.register(MathmageTrialsRealm())
        await service.initialize_character(USER)
        await service.engine.unlock_realm(USER, "mathmage-trials")

        challenge = await service.start_realm_challenge(USER, "mathmage-trials", difficulty=1)

        assert challenge.realm_id == "mathmage-trials"
        assert challenge.difficulty == 1
        assert await service.get_active_attempt(USER, challenge.id) is not None

    async def test_start_challenge_in_unknown_realm(self, service):
        await service.initialize_character(USER)

        with pytest.raises(RealmNotFoundError):
            await service.start_realm_challenge(USER, "atlantis")


@pytest.mark.unit
class TestSubmission:
    async def test_submit_uses_tracked_time_by_default(self, service, clock):
        await service.initialize_character(USER)
        await service.load_challenge(USER, TIMED)
        clock.advance(30)

        result = await service.submit_answer(USER, TIMED, "correct")

        assert result.answer.time_elapsed == 30
        assert result.score == 137

    async def test_hint_then_submit(self, service, clock):
        await service.initialize_character(USER)
        await service.load_challenge(USER, TIMED)

        assert await service.get_hint(USER, TIMED, 0) == "Starts with c"
        clock.advance(30)
        result = await service.submit_answer(USER, TIMED, "correct", time_elapsed=30)

        assert result.answer.hints_used == 1
        assert result.score == 123

    async def test_submit_without_attempt(self, service):
        await service.initialize_character(USER)

        with pytest.raises(NoActiveAttemptError):
            await service.submit_answer(USER, TIMED, "correct")

    async def test_abandon(self, service):
        await service.initialize_character(USER)
        await service.load_challenge(USER, TIMED)

        assert await service.abandon_challenge(USER, TIMED) is True
        assert await service.get_active_attempt(USER, TIMED) is None


@pytest.mark.unit
class TestAttemptBookkeeping:
    async def test_challenge_stats(self, service, clock):
        await service.initialize_character(USER)
        for response in ("correct", "nope"):
            await service.load_challenge(USER, UNTIMED)
            clock.advance(10)
            await service.submit_answer(USER, UNTIMED, response)

        stats = service.get_challenge_stats(USER, UNTIMED)

        assert stats.total_attempts == 2
        assert stats.average_time == 10
        assert stats.success_rate == 0.5

    async def test_cleanup_expired_attempts(self, service, clock, tracker):
        await service.initialize_character(USER)
        await service.load_challenge(USER, TIMED)
        await service.load_challenge(USER, UNTIMED)
        clock.advance(tracker.ttl_seconds + 1)

        assert await service.cleanup_expired_attempts() == 2
        assert await service.cleanup_expired_attempts() == 0

    async def test_boss_passthrough(self, service):
        await service.initialize_character(USER)

        result = await service.process_boss_challenge(USER, GROVE, "grove-warden")

        assert result.score == 90

    async def test_current_realm_and_difficulty(self, service):
        await service.initialize_character(USER)

        assert (await service.get_current_realm(USER)).id == GROVE
        assert await service.get_recommended_difficulty(USER) == 1
