"""
The Mathmage Trials.

Equation-balancing duels. Every entry in the equation table becomes one
catalogue challenge; the learner answers with the coefficients as
comma-separated integers.

Scoring
-------
- Exact coefficient match: correct, raw score 100.
- Otherwise partial credit = matching positions / number of coefficients,
  raw score floor(100 * partial).
- A response that balances the equation with non-minimal coefficients is
  still incorrect, but the feedback says so.
"""

from __future__ import annotations

import math
import re
from typing import Any, List, Optional, Tuple

from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.challenge import (
    Answer,
    Challenge,
    ChallengeContent,
    ChallengeType,
    RealmMechanic,
    Reward,
    ValidationResult,
)
from realmforge.modules.realms import chemistry
from realmforge.modules.realms.base import BossDefinition, RealmStrategy
from realmforge.modules.realms.data.equations import EQUATIONS, EquationEntry

logger = get_logger(__name__)

_COEFFICIENTS = re.compile(r"^\s*\d+(\s*,\s*\d+)*\s*$")

_FORMAT_FEEDBACK = "Please provide coefficients as comma-separated numbers (e.g., 2,1,2)"
_FORMAT_EXPLANATION = "Answer format should be numbers separated by commas"


def parse_coefficients(response: Any) -> Optional[Tuple[int, ...]]:
    """
    Parse "2, 1, 2" into (2, 1, 2). Returns None for anything malformed.

    >>> parse_coefficients("2, 1,2")
    (2, 1, 2)
    >>> parse_coefficients("two, one") is None
    True
    >>> parse_coefficients("2 1 2") is None
    True
    """
    if not isinstance(response, str) or not _COEFFICIENTS.match(response.strip()):
        return None
    return tuple(int(part) for part in response.split(","))


class MathmageTrialsRealm(RealmStrategy):
    realm_id = "mathmage-trials"
    name = "The Mathmage Trials"
    description = "Master calculation and symbol skills through combat-style chemistry games"
    required_level = 1
    default_time_limit = 120

    bosses = (
        BossDefinition(
            boss_id="limiting-reagent-hydra",
            score=500,
            special_rewards=(
                Reward.unlock("arcane_formulae", "Arcane Formulae Reference Guide"),
                Reward.badge("hydra_slayer", "Hydra Slayer Badge"),
            ),
            unlocked_content=("arcane_formulae", "advanced_stoichiometry"),
        ),
    )

    def _build_catalogue(self) -> List[Challenge]:
        return [self._equation_challenge(index, entry) for index, entry in enumerate(EQUATIONS, start=1)]

    def _equation_challenge(self, index: int, entry: EquationEntry) -> Challenge:
        coefficients = ", ".join(str(c) for c in entry.coefficients)
        content = ChallengeContent(
            question=f"Balance the following chemical equation:\n\n{entry.unbalanced}",
            correct_answer=",".join(str(c) for c in entry.coefficients),
            explanation=f"The balanced equation is: {entry.balanced}\n\nCoefficients: {coefficients}",
            hints=(
                "Start by counting atoms of each element on both sides",
                "Balance metals first, then non-metals, then hydrogen and oxygen",
                "Use the smallest whole number coefficients possible",
                f"This is a {entry.topic.lower()} reaction",
            ),
        )
        return self._make_challenge(
            ChallengeType.EQUATION_BALANCE,
            f"eq-{index:02d}",
            entry.difficulty,
            "Balance the Chemical Equation",
            f"Balance this {entry.topic.lower()} equation by finding the correct coefficients.",
            content,
            time_limit=max(60, entry.difficulty * 30),
            concepts=("equation_balancing", "conservation_of_mass", entry.topic.lower()),
            game_data={
                "unbalanced": entry.unbalanced,
                "balanced": entry.balanced,
                "term_count": len(entry.coefficients),
            },
        )

    async def validate_answer(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        submitted = parse_coefficients(answer.response)
        if submitted is None:
            return ValidationResult.rejected(_FORMAT_FEEDBACK, _FORMAT_EXPLANATION)

        expected = tuple(int(part) for part in str(challenge.content.correct_answer).split(","))
        if submitted == expected:
            return ValidationResult(
                is_correct=True,
                score=100,
                feedback="Excellent! You've balanced the equation correctly!",
                explanation=challenge.content.explanation,
                partial_credit=1.0,
                metadata={"coefficients": list(submitted)},
            )

        matches = sum(1 for got, want in zip(submitted, expected) if got == want)
        partial = matches / len(expected)
        percent = math.floor(partial * 100)

        feedback = f"Not quite right. You got {percent}% of the coefficients correct."
        balanced_but_not_minimal = self._balances(challenge, submitted)
        if balanced_but_not_minimal:
            feedback += " Your coefficients balance the equation, but use the smallest whole numbers."

        return ValidationResult(
            is_correct=False,
            score=math.floor(100 * partial),
            feedback=feedback,
            explanation=challenge.content.explanation,
            partial_credit=partial,
            metadata={
                "coefficients": list(submitted),
                "matched_positions": matches,
                "balanced_but_not_minimal": balanced_but_not_minimal,
            },
        )

    @staticmethod
    def _balances(challenge: Challenge, coefficients: Tuple[int, ...]) -> bool:
        unbalanced = challenge.metadata.get("game_data", {}).get("unbalanced")
        if not unbalanced:
            return False
        try:
            return chemistry.is_balanced(unbalanced, coefficients)
        except chemistry.FormulaError:
            logger.warning(
                "Catalogue equation failed to parse",
                extra={"challenge_id": challenge.id},
            )
            return False

    def get_special_rewards(self) -> List[Reward]:
        return [
            Reward.badge("mathmage_apprentice", "Mathmage Apprentice Badge"),
            Reward.unlock("arcane_formulae", "Arcane Formulae Reference Guide"),
        ]

    def get_special_mechanics(self) -> List[RealmMechanic]:
        return [
            RealmMechanic(
                "mana_system",
                "Mana Points",
                "Correct answers restore mana; mistakes drain it",
                {"maxMana": 100, "manaPerCorrect": 20, "manaLossPerError": 15},
            ),
            RealmMechanic(
                "hp_system",
                "Health Points",
                "Each wrong answer costs health",
                {"maxHP": 100, "hpLossPerError": 25, "hpRegenPerCorrect": 5},
            ),
            RealmMechanic(
                "explosion_animation",
                "Explosion Effects",
                "Failed balancing attempts trigger an explosion",
                {"animationDuration": 2000, "shakeIntensity": "medium"},
            ),
        ]
