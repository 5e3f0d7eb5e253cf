"""Unit tests for the Mathmage Trials realm."""

import random

import pytest

from realmforge.domain.models import Answer, ChallengeType
from realmforge.modules.realms.data.equations import EQUATIONS
from realmforge.modules.realms.mathmage_trials import MathmageTrialsRealm, parse_coefficients
from realmforge.modules.shared.exceptions import BossNotFoundError

FIRST = "mathmage-trials:equation_balance:eq-01"


@pytest.fixture
def realm():
    return MathmageTrialsRealm(random.Random(11))


def answer(response, **kwargs):
    return Answer(challenge_id=FIRST, response=response, **kwargs)


@pytest.mark.unit
class TestCatalogue:
    def test_one_challenge_per_equation(self, realm):
        challenges = realm.get_challenges()

        assert len(challenges) == len(EQUATIONS)
        assert all(c.type is ChallengeType.EQUATION_BALANCE for c in challenges)
        assert realm.challenge_types() == [ChallengeType.EQUATION_BALANCE]
        assert len({c.id for c in challenges}) == len(challenges)

    def test_challenge_shape(self, realm):
        challenge = realm.get_challenge(FIRST)

        assert challenge.realm_id == "mathmage-trials"
        assert challenge.content.correct_answer == "2,1,2"
        assert challenge.time_limit == 60
        assert challenge.required_level == 1
        assert challenge.hint_count == 4
        assert challenge.metadata["game_data"]["term_count"] == 3

    def test_required_level_follows_difficulty(self, realm):
        for challenge in realm.get_challenges():
            assert challenge.required_level == max(1, challenge.difficulty // 2)

    def test_catalogue_is_stable_across_instances(self):
        first = [c.id for c in MathmageTrialsRealm(random.Random(1)).get_challenges()]
        second = [c.id for c in MathmageTrialsRealm(random.Random(2)).get_challenges()]
        assert first == second

    def test_generate_prefers_requested_difficulty(self, realm):
        for difficulty in range(1, 6):
            assert realm.generate_challenge(difficulty).difficulty == difficulty


@pytest.mark.unit
class TestValidation:
    def test_parse_coefficients(self):
        assert parse_coefficients(" 4, 3 ,2 ") == (4, 3, 2)
        assert parse_coefficients("") is None
        assert parse_coefficients(["2", "1"]) is None
        assert parse_coefficients("2;1;2") is None
        assert parse_coefficients("2 1 2") is None

    async def test_exact_answer_is_correct(self, realm):
        result = await realm.validate_answer(realm.get_challenge(FIRST), answer("2, 1, 2"))

        assert result.is_correct
        assert result.score == 100
        assert result.partial_credit == 1.0

    async def test_partial_credit_by_position(self, realm):
        result = await realm.validate_answer(realm.get_challenge(FIRST), answer("2,1,1"))

        assert not result.is_correct
        assert result.score == 66
        assert "66%" in result.feedback
        assert result.metadata["matched_positions"] == 2
        assert result.metadata["balanced_but_not_minimal"] is False

    async def test_balanced_but_not_minimal(self, realm):
        result = await realm.validate_answer(realm.get_challenge(FIRST), answer("4,2,4"))

        assert not result.is_correct
        assert result.score == 0
        assert result.metadata["balanced_but_not_minimal"] is True
        assert "smallest whole numbers" in result.feedback

    @pytest.mark.parametrize("response", ["two, one, two", "2 1 2", "2,,1", "2,1,", {"a": 1}, 212])
    async def test_malformed_answer_scores_zero(self, realm, response):
        result = await realm.validate_answer(realm.get_challenge(FIRST), answer(response))

        assert not result.is_correct
        assert result.score == 0
        assert "comma-separated" in result.feedback

    def test_score_estimate_includes_speed_bonus(self, realm):
        challenge = realm.get_challenge(FIRST)

        assert realm.calculate_score(challenge, answer("2,1,2"), time_elapsed=30) == 125
        assert realm.calculate_score(challenge, answer("2,1,2", hints_used=5), time_elapsed=60) == 50


@pytest.mark.unit
class TestBossAndInfo:
    async def test_hydra_boss(self, realm):
        result = await realm.process_boss_challenge("learner-1", "limiting-reagent-hydra")

        assert result.defeated
        assert result.realm_id == "mathmage-trials"
        assert {r.item_id for r in result.special_rewards} == {"arcane_formulae", "hydra_slayer"}

    async def test_unknown_boss(self, realm):
        with pytest.raises(BossNotFoundError):
            await realm.process_boss_challenge("learner-1", "dragon")

    def test_realm_info(self, realm):
        info = realm.get_realm_info(is_unlocked=True)

        assert info.id == "mathmage-trials"
        assert info.is_unlocked
        assert info.boss_challenge is None
        assert len(info.challenges) == len(EQUATIONS)
        assert [m.id for m in info.mechanics] == ["mana_system", "hp_system", "explosion_animation"]
