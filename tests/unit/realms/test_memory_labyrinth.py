"""Unit tests for the Memory Labyrinth realm."""

import random

import pytest

from realmforge.domain.models import Answer, ChallengeType
from realmforge.modules.realms.memory_labyrinth import MemoryLabyrinthRealm, is_answer_acceptable

FLASHCARD = "memory-labyrinth:memory_match:flashcard-d1"
ROULETTE = "memory-labyrinth:quick_recall:roulette-d1"
SURVIVAL = "memory-labyrinth:survival:survival-d1"


@pytest.fixture
def realm():
    return MemoryLabyrinthRealm(random.Random(5))


def answer(challenge_id, response):
    return Answer(challenge_id=challenge_id, response=response)


@pytest.mark.unit
class TestCatalogue:
    def test_games_and_difficulties(self, realm):
        by_type = {}
        for challenge in realm.get_challenges():
            by_type.setdefault(challenge.type, []).append(challenge.difficulty)

        assert by_type == {
            ChallengeType.MEMORY_MATCH: [1, 2, 3, 4, 5],
            ChallengeType.QUICK_RECALL: [1, 2, 3],
            ChallengeType.SURVIVAL: [1, 2, 3],
        }

    def test_early_flashcards_only_use_gas_and_flame_tests(self, realm):
        pairs = realm.get_challenge(FLASHCARD).content.correct_answer

        assert pairs
        assert {pair["category"] for pair in pairs} <= {"gas_test", "flame_color"}

    def test_catalogue_is_deterministic(self):
        first = MemoryLabyrinthRealm(random.Random(1)).get_challenge(FLASHCARD)
        second = MemoryLabyrinthRealm(random.Random(2)).get_challenge(FLASHCARD)
        assert first.content.correct_answer == second.content.correct_answer

    def test_survival_answers_follow_solubility_rules(self, realm):
        expected = {
            "NaNO₃": "Soluble",
            "CaCO₃": "Insoluble",
            "Na₂CO₃": "Soluble",
            "BaSO₄": "Insoluble",
            "Mg(OH)₂": "Insoluble",
            "NaOH": "Soluble",
        }
        checked = 0
        for challenge in realm.get_challenges():
            if challenge.type is not ChallengeType.SURVIVAL:
                continue
            for question in challenge.content.correct_answer:
                for compound, solubility in expected.items():
                    if question["question"] == f"Is {compound} soluble in water?":
                        assert question["correct_answer"] == solubility
                        checked += 1

        assert checked > 0


@pytest.mark.unit
class TestFlashcards:
    async def test_all_pairs_matched(self, realm):
        challenge = realm.get_challenge(FLASHCARD)
        matches = {pair["front"]: pair["back"] for pair in challenge.content.correct_answer}
        matches["combo"] = 3

        result = await realm.validate_answer(challenge, answer(FLASHCARD, matches))

        assert result.is_correct
        assert result.score == 100
        assert result.metadata["combo_multiplier"] == pytest.approx(1.4)

    async def test_below_threshold_is_incorrect(self, realm):
        challenge = realm.get_challenge(FLASHCARD)
        pairs = challenge.content.correct_answer
        half = {pair["front"]: pair["back"] for pair in pairs[: len(pairs) // 2]}

        result = await realm.validate_answer(challenge, answer(FLASHCARD, half))

        assert not result.is_correct
        assert result.score == 100 * (len(pairs) // 2) // len(pairs)

    async def test_malformed_response(self, realm):
        result = await realm.validate_answer(realm.get_challenge(FLASHCARD), answer(FLASHCARD, "pairs"))

        assert not result.is_correct
        assert result.score == 0


@pytest.mark.unit
class TestRoulette:
    def test_answer_matching(self):
        assert is_answer_acceptable("White precipitate", "white precipitate")
        assert is_answer_acceptable("a cream coloured solid", "Cream precipitate")
        assert not is_answer_acceptable("it fizzes", "Yellow precipitate")

    async def test_fast_correct_answers(self, realm):
        challenge = realm.get_challenge(ROULETTE)
        answers = [
            {"ion": entry["ion"], "response": entry["result"], "time_elapsed": 5}
            for entry in challenge.content.correct_answer
        ]

        result = await realm.validate_answer(challenge, answer(ROULETTE, {"answers": answers}))

        assert result.is_correct
        assert result.score == 100
        assert result.metadata["bonus_points"] == 10 * len(answers)

    async def test_non_text_ions_are_skipped(self, realm):
        challenge = realm.get_challenge(ROULETTE)
        first = challenge.content.correct_answer[0]
        answers = [
            {"ion": [first["ion"]], "response": first["result"]},
            {"ion": {"name": first["ion"]}, "response": first["result"]},
            {"ion": first["ion"], "response": first["result"]},
        ]

        result = await realm.validate_answer(challenge, answer(ROULETTE, {"answers": answers}))

        assert result.metadata["correct_answers"] == 1
        assert result.metadata["total_questions"] == 3
        assert not result.is_correct

    async def test_missing_answers_list(self, realm):
        result = await realm.validate_answer(realm.get_challenge(ROULETTE), answer(ROULETTE, {"answers": "x"}))

        assert result.score == 0
        assert not result.is_correct


@pytest.mark.unit
class TestSurvival:
    async def test_survived_enough_questions(self, realm):
        data = {"questions_answered": 12, "correct_answers": 10, "lives_remaining": 1}

        result = await realm.validate_answer(realm.get_challenge(SURVIVAL), answer(SURVIVAL, data))

        assert result.is_correct
        assert result.score == 83
        assert result.metadata["bonus_points"] == 145

    async def test_too_few_questions(self, realm):
        data = {"questions_answered": 5, "correct_answers": 5, "lives_remaining": 3}

        result = await realm.validate_answer(realm.get_challenge(SURVIVAL), answer(SURVIVAL, data))

        assert not result.is_correct
        assert result.score == 100

    @pytest.mark.parametrize(
        "data",
        [
            {"questions_answered": 5, "correct_answers": 6, "lives_remaining": 1},
            {"questions_answered": 12, "correct_answers": 10, "lives_remaining": 4},
            {"questions_answered": -1, "correct_answers": 0, "lives_remaining": 1},
            {"questions_answered": "12", "correct_answers": 10, "lives_remaining": 1},
        ],
    )
    async def test_impossible_game_data_rejected(self, realm, data):
        result = await realm.validate_answer(realm.get_challenge(SURVIVAL), answer(SURVIVAL, data))

        assert not result.is_correct
        assert result.score == 0


@pytest.mark.unit
class TestBoss:
    async def test_grimoire_master(self, realm):
        result = await realm.process_boss_challenge("learner-1", "grimoire-master")

        assert result.defeated
        assert result.score == 300
        assert "animated_mnemonics" in result.unlocked_content
