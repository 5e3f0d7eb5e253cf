"""
The Memory Labyrinth.

Memorisation mini-games over the qualitative-analysis tables:

- Flashcard Match (`MEMORY_MATCH`): pair each test with its result.
- QA Roulette (`QUICK_RECALL`): recite ion test results against the clock.
- Survival Mode (`SURVIVAL`): solubility questions, three lives.

Responses are mappings whose shape depends on the game. Bonuses the
original games displayed (combo, speed, survival) are reported in the
validation metadata; the raw score stays on the 0-100 scale.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Mapping, Optional

from realmforge.domain.models.challenge import (
    Answer,
    Challenge,
    ChallengeContent,
    ChallengeType,
    RealmMechanic,
    Reward,
    ValidationResult,
)
from realmforge.modules.realms.base import BossDefinition, RealmStrategy
from realmforge.modules.realms.data.qualitative import QUALITATIVE_TESTS, SOLUBILITY_RULES

MATCH_THRESHOLD = 0.8
RECALL_THRESHOLD = 0.7
SURVIVAL_MIN_QUESTIONS = 10
SURVIVAL_LIVES = 3
SPEED_BONUS_SECONDS = 15


def is_answer_acceptable(response: str, expected: str) -> bool:
    """
    Exact match, or the response contains a key word (longer than two
    characters) of the expected result.

    >>> is_answer_acceptable("it turns milky", "Turns milky/cloudy")
    True
    >>> is_answer_acceptable("no", "Relights the splint")
    False
    """
    given = response.lower().strip()
    wanted = expected.lower().strip()
    if given == wanted:
        return True
    phrases = [phrase for phrase in re.split(r"[,\s]+", wanted) if len(phrase) > 2]
    return any(phrase in given for phrase in phrases)


def _count(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


class MemoryLabyrinthRealm(RealmStrategy):
    realm_id = "memory-labyrinth"
    name = "The Memory Labyrinth"
    description = "Master memorization through interactive games and unlock animated mnemonics"
    required_level = 3

    bosses = (
        BossDefinition(
            boss_id="grimoire-master",
            score=300,
            special_rewards=(
                Reward.unlock("alchemists_grimoire", "Alchemist's Grimoire - Animated Mnemonics Collection"),
                Reward.badge("memory_master", "Memory Master Badge"),
            ),
            unlocked_content=("animated_mnemonics", "advanced_memory_techniques"),
        ),
    )

    # ========================================================================
    # CATALOGUE
    # ========================================================================

    def _build_catalogue(self) -> List[Challenge]:
        challenges = [self._flashcard_challenge(d) for d in range(1, 6)]
        challenges += [self._roulette_challenge(d) for d in range(1, 4)]
        challenges += [self._survival_challenge(d) for d in range(1, 4)]
        return challenges

    def _flashcard_challenge(self, difficulty: int) -> Challenge:
        available = [
            test for test in QUALITATIVE_TESTS
            if difficulty > 2 or test.category in ("gas_test", "flame_color")
        ]
        grid_size = min(4 + difficulty, 6)
        pair_count = min(grid_size * grid_size // 2, len(available))

        rng = self._seeded(self.realm_id, ChallengeType.MEMORY_MATCH.value, difficulty)
        selected = rng.sample(available, pair_count)
        pairs = [
            {"id": test.ion, "front": test.ion, "back": test.result, "category": test.category, "color": test.color}
            for test in selected
        ]

        content = ChallengeContent(
            question=f"Match the {pair_count} pairs of chemical tests with their results. Build combos for bonus points!",
            correct_answer=pairs,
            explanation="Memorizing gas tests and flame colors is essential for qualitative analysis in chemistry.",
            hints=(
                "Start with the tests you know best",
                "Group similar colors together for flame tests",
                "Remember: hydrogen pops, oxygen relights, CO₂ turns limewater milky",
                "Build combos by matching pairs quickly in succession",
            ),
            visual_aids=("/images/memory/gas_tests_diagram.png",),
        )
        return self._make_challenge(
            ChallengeType.MEMORY_MATCH,
            f"flashcard-d{difficulty}",
            difficulty,
            "Flashcard Match",
            "Match gas tests and flame colors with their results to earn combo multipliers!",
            content,
            time_limit=120 + difficulty * 30,
            concepts=("gas tests", "flame colors", "qualitative analysis", "memory"),
            game_data={"grid_size": grid_size, "pairs": pairs, "combo_multiplier": True, "time_bonus": True},
        )

    def _roulette_challenge(self, difficulty: int) -> Challenge:
        available = [
            test for test in QUALITATIVE_TESTS
            if test.category in ("ion_identification", "flame_color")
        ]
        rng = self._seeded(self.realm_id, ChallengeType.QUICK_RECALL.value, difficulty)
        selected = rng.sample(available, min(25, len(available)))
        ions = [{"ion": test.ion, "test": test.test, "result": test.result} for test in selected]
        time_limit = max(10, 30 - difficulty * 3)

        content = ChallengeContent(
            question="The roulette wheel will select random ions. Quickly state the test procedure and expected result!",
            correct_answer=ions,
            explanation="Quick recall of ion tests is crucial for efficient laboratory work and examinations.",
            hints=(
                "Practice the most common tests first",
                "Remember the reagents: AgNO₃ for halides, NaOH for metal ions",
                "State both the test AND the expected result",
                "Speed is key - the faster you answer, the more points you earn",
            ),
        )
        return self._make_challenge(
            ChallengeType.QUICK_RECALL,
            f"roulette-d{difficulty}",
            difficulty,
            "QA Roulette",
            "Spin the wheel and quickly recite ion test procedures before time runs out!",
            content,
            time_limit=time_limit,
            concepts=("ion identification", "qualitative analysis", "quick recall"),
            game_data={"ions": ions, "time_per_question": time_limit, "speed_bonus": True},
        )

    def _survival_challenge(self, difficulty: int) -> Challenge:
        questions = self._solubility_questions(difficulty)
        content = ChallengeContent(
            question="Answer solubility rule questions to survive as long as possible. You have 3 lives!",
            correct_answer=questions,
            explanation="Mastering solubility rules is essential for predicting precipitation reactions.",
            hints=(
                "All nitrates and Group 1 compounds are soluble",
                "Most chlorides and sulfates are soluble (with exceptions)",
                "Most carbonates and hydroxides are insoluble (with exceptions)",
                "Learn the common exceptions to each rule",
            ),
        )
        return self._make_challenge(
            ChallengeType.SURVIVAL,
            f"survival-d{difficulty}",
            difficulty,
            "Survival Mode",
            "Answer solubility rule questions continuously. Three strikes and you're out!",
            content,
            time_limit=600,
            concepts=("solubility rules", "precipitation", "survival challenge"),
            game_data={"questions": questions, "lives": SURVIVAL_LIVES, "increasing_difficulty": True},
        )

    def _solubility_questions(self, difficulty: int) -> List[Dict[str, Any]]:
        questions: List[Dict[str, Any]] = []
        for rule in SOLUBILITY_RULES:
            if rule.difficulty > difficulty + 1:
                continue

            subject = rule.rule.split(" ")[1]
            questions.append({
                "question": f"Which statement about {rule.rule.lower()} is correct?",
                "options": [
                    rule.rule,
                    f"Most {subject} are insoluble",
                    f"Only some {subject} are soluble",
                    f"{rule.rule} except in acidic conditions",
                ],
                "correct_answer": rule.rule,
                "explanation": f"{rule.rule}. Examples include: {', '.join(rule.examples)}",
                "difficulty": rule.difficulty,
            })

            # Examples follow the rule; exceptions go against it.
            rule_says_soluble = "insoluble" not in rule.rule.lower()
            follows = "Soluble" if rule_says_soluble else "Insoluble"
            breaks = "Insoluble" if rule_says_soluble else "Soluble"

            for example in rule.examples:
                questions.append({
                    "question": f"Is {example} soluble in water?",
                    "options": ["Soluble", "Insoluble", "Partially soluble", "Depends on temperature"],
                    "correct_answer": follows,
                    "explanation": f"{example} is {follows.lower()} because {rule.rule.lower()}.",
                    "difficulty": rule.difficulty,
                })
            for exception in rule.exceptions:
                questions.append({
                    "question": f"Is {exception} soluble in water?",
                    "options": ["Soluble", "Insoluble", "Partially soluble", "Depends on pH"],
                    "correct_answer": breaks,
                    "explanation": f"{exception} is an exception to the rule that {rule.rule.lower()}.",
                    "difficulty": rule.difficulty + 1,
                })

        rng = self._seeded(self.realm_id, ChallengeType.SURVIVAL.value, difficulty)
        rng.shuffle(questions)
        return questions[:40]

    # ========================================================================
    # VALIDATION
    # ========================================================================

    async def validate_answer(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        if challenge.type is ChallengeType.MEMORY_MATCH:
            return self._validate_flashcards(challenge, answer)
        if challenge.type is ChallengeType.QUICK_RECALL:
            return self._validate_roulette(challenge, answer)
        if challenge.type is ChallengeType.SURVIVAL:
            return self._validate_survival(challenge, answer)
        return ValidationResult.rejected("Unknown challenge type", "This challenge type is not supported")

    def _validate_flashcards(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        matches = answer.response
        if not isinstance(matches, Mapping):
            return ValidationResult.rejected(
                "Invalid answer format for flashcard matching",
                "Answer should contain matched pairs data",
            )

        pairs = challenge.content.correct_answer
        correct = sum(1 for pair in pairs if matches.get(pair["front"]) == pair["back"])
        total = len(pairs)
        accuracy = correct / total if total else 0.0
        is_correct = accuracy >= MATCH_THRESHOLD

        combo = matches.get("combo", 0)
        multiplier = 1.0
        if isinstance(combo, int) and not isinstance(combo, bool) and combo > 1:
            multiplier = min(3.0, 1 + (combo - 1) * 0.2)

        feedback = (
            f"Excellent! {correct}/{total} pairs matched correctly!"
            if is_correct
            else f"Good effort! {correct}/{total} pairs matched correctly. Keep practicing!"
        )
        return ValidationResult(
            is_correct=is_correct,
            score=math.floor(100 * accuracy),
            feedback=feedback,
            explanation=challenge.content.explanation,
            partial_credit=accuracy,
            metadata={
                "matched": correct,
                "total_pairs": total,
                "combo_multiplier": multiplier,
                "bonus_points": math.floor((multiplier - 1) * 50),
            },
        )

    def _validate_roulette(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        response = answer.response
        answers = response.get("answers") if isinstance(response, Mapping) else None
        if not isinstance(answers, list):
            return ValidationResult.rejected(
                "Invalid answer format for QA Roulette",
                "Answer should contain ion test responses",
            )

        expected = {entry["ion"]: entry["result"] for entry in challenge.content.correct_answer}
        correct = 0
        speed_bonus = 0
        for entry in answers:
            if not isinstance(entry, Mapping) or not isinstance(entry.get("response"), str):
                continue
            if not isinstance(entry.get("ion"), str):
                continue
            result = expected.get(entry["ion"])
            if result is not None and is_answer_acceptable(entry["response"], result):
                correct += 1
                elapsed = entry.get("time_elapsed")
                if isinstance(elapsed, (int, float)) and elapsed < SPEED_BONUS_SECONDS:
                    speed_bonus += 10

        total = len(answers)
        accuracy = correct / total if total else 0.0
        is_correct = accuracy >= RECALL_THRESHOLD
        feedback = (
            f"Outstanding! {correct}/{total} correct answers!"
            if is_correct
            else f"Good try! {correct}/{total} correct. Practice more for better results!"
        )
        return ValidationResult(
            is_correct=is_correct,
            score=math.floor(100 * accuracy),
            feedback=feedback,
            explanation=challenge.content.explanation,
            partial_credit=accuracy,
            metadata={"correct_answers": correct, "total_questions": total, "bonus_points": speed_bonus},
        )

    def _validate_survival(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        data = answer.response
        if not isinstance(data, Mapping):
            return ValidationResult.rejected(
                "Invalid answer format for Survival Mode",
                "Answer should contain survival game data",
            )

        answered = _count(data, "questions_answered")
        correct = _count(data, "correct_answers")
        lives = _count(data, "lives_remaining")
        if answered is None or correct is None or lives is None or correct > answered or lives > SURVIVAL_LIVES:
            return ValidationResult.rejected(
                "Invalid answer format for Survival Mode",
                "Answer should contain survival game data",
            )

        accuracy = correct / answered if answered else 0.0
        if accuracy >= 0.8:
            grade = "excellent"
        elif accuracy >= 0.6:
            grade = "good"
        else:
            grade = "basic"

        return ValidationResult(
            is_correct=answered >= SURVIVAL_MIN_QUESTIONS,
            score=math.floor(100 * accuracy),
            feedback=f"Survived {answered} questions with {correct} correct answers!",
            explanation=f"You demonstrated {grade} knowledge of solubility rules.",
            partial_credit=accuracy,
            metadata={
                "survival_bonus": answered * 10,
                "lives_bonus": lives * 25,
                "bonus_points": answered * 10 + lives * 25,
            },
        )

    # ========================================================================
    # REWARDS & MECHANICS
    # ========================================================================

    def get_special_rewards(self) -> List[Reward]:
        return [
            Reward.badge("memory_apprentice", "Memory Apprentice Badge"),
            Reward.unlock("alchemists_grimoire", "Alchemist's Grimoire - Animated Mnemonics"),
        ]

    def get_special_mechanics(self) -> List[RealmMechanic]:
        return [
            RealmMechanic(
                "combo_multiplier",
                "Combo Multiplier",
                "Build combos by matching pairs quickly for bonus points",
                {"maxCombo": 10, "comboTimeWindow": 3000, "bonusPerCombo": 0.2},
            ),
            RealmMechanic(
                "time_pressure",
                "Time Pressure",
                "Answer quickly to earn speed bonuses",
                {"speedBonusThreshold": SPEED_BONUS_SECONDS, "maxSpeedBonus": 50},
            ),
            RealmMechanic(
                "three_strikes",
                "Three Strikes System",
                "Three wrong answers end the survival challenge",
                {"maxStrikes": SURVIVAL_LIVES, "strikeWarning": True},
            ),
            RealmMechanic(
                "memory_palace",
                "Memory Palace",
                "Unlock animated mnemonics as rewards",
                {"mnemonicsUnlocked": 0, "totalMnemonics": 15},
            ),
        ]
