"""
The Seer's Challenge.

Observation and prediction games:

- Precipitate Poker (`PRECIPITATION_POKER`): bet virtual gold on whether a
  precipitate forms.
- Color Clash (`COLOR_CLASH`): describe the colour change from a text clue.
- Mystery Reaction (`MYSTERY_REACTION`): name the evolved gas and write the
  balanced equation.

The realm has no bosses. Poker winnings and the virtual bankroll are
reported in validation metadata only; they never touch the character's
real gold.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Mapping

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
from realmforge.modules.realms.base import RealmStrategy
from realmforge.modules.realms.data.reactions import (
    COLOR_CHANGE_REACTIONS,
    COLOR_SYNONYMS,
    COLOR_WORDS,
    GAS_CHOICES,
    MYSTERY_REACTIONS,
    PRECIPITATION_REACTIONS,
    ColorChangeReaction,
    MysteryReaction,
    PrecipitationReaction,
)

STARTING_BANKROLL = 1000
MIN_BET = 10
MAX_BET = 500

# (odds when the prediction is right, odds when it is wrong)
CONFIDENCE_ODDS = {
    "high": (1.2, 0.1),
    "medium": (1.5, 0.3),
    "low": (2.0, 0.5),
}
CONFIDENCE_SCORES = {"high": 100, "medium": 80, "low": 60}
# Percent added to the score estimate for confident bets.
CONFIDENCE_BONUS = {"high": 20, "medium": 10}

_POKER_FEEDBACK = "Please select a betting option and specify your wager amount"
_MYSTERY_FEEDBACK = "Please provide both gas identification and chemical equation"


def _slug(text: str) -> str:
    return re.sub(r"\s+", "_", text.strip())


def bet_options(will_precipitate: bool) -> List[Dict[str, Any]]:
    """Six betting options: yes/no at three confidence levels."""
    options = []
    for outcome, right in (("yes", will_precipitate), ("no", not will_precipitate)):
        label = "Precipitate will form" if outcome == "yes" else "No precipitate will form"
        for confidence, (win, lose) in CONFIDENCE_ODDS.items():
            options.append({
                "id": f"precipitate_{outcome}_{confidence}",
                "description": f"{label} ({confidence.capitalize()} confidence)",
                "odds": win if right else lose,
                "confidence_level": confidence,
            })
    return options


class SeersChallengeRealm(RealmStrategy):
    realm_id = "seers-challenge"
    name = "The Seer's Challenge"
    description = "Master observation and interpretation skills through prediction games"
    required_level = 4
    default_time_limit = 60

    # ========================================================================
    # CATALOGUE
    # ========================================================================

    def _build_catalogue(self) -> List[Challenge]:
        challenges = [
            self._poker_challenge(index, reaction)
            for index, reaction in enumerate(PRECIPITATION_REACTIONS, start=1)
        ]
        challenges += [self._color_clash_challenge(reaction) for reaction in COLOR_CHANGE_REACTIONS]
        challenges += [self._mystery_challenge(reaction) for reaction in MYSTERY_REACTIONS]
        return challenges

    def _poker_challenge(self, index: int, reaction: PrecipitationReaction) -> Challenge:
        content = ChallengeContent(
            question=(
                f"What happens when {reaction.reactant1} solution is mixed with "
                f"{reaction.reactant2} solution?\n\nPlace your bet on the outcome:"
            ),
            correct_answer="precipitate" if reaction.will_precipitate else "no_precipitate",
            explanation=reaction.explanation,
            hints=(
                "Consider the solubility rules for ionic compounds",
                "Check if any of the possible products are insoluble",
                "Remember: most nitrates and acetates are soluble",
                f"This involves {reaction.topic}",
            ),
            visual_aids=(f"/images/reactions/{_slug(reaction.topic)}.png",),
        )
        return self._make_challenge(
            ChallengeType.PRECIPITATION_POKER,
            f"pp-{index:02d}",
            reaction.difficulty,
            f"Precipitate Poker: {reaction.topic}",
            "Predict whether a precipitate will form and bet virtual gold on your confidence.",
            content,
            time_limit=max(45, reaction.difficulty * 15),
            concepts=("precipitation", "solubility rules", reaction.topic),
            game_data={
                "reactants": [reaction.reactant1, reaction.reactant2],
                "precipitate": reaction.precipitate,
                "bet_options": bet_options(reaction.will_precipitate),
                "current_bankroll": STARTING_BANKROLL,
            },
        )

    def _color_clash_challenge(self, reaction: ColorChangeReaction) -> Challenge:
        content = ChallengeContent(
            question=f"{reaction.text_clue}\n\nDescribe the color change you would observe:",
            correct_answer=reaction.color_description.lower(),
            explanation=reaction.explanation,
            hints=(
                "Consider the initial and final states of the reaction",
                "Think about what chemical species are responsible for the colors",
                "Look for clues about the type of reaction occurring",
                f"This involves {reaction.topic}",
            ),
            visual_aids=(f"/images/color_changes/{_slug(reaction.topic)}.png",),
        )
        return self._make_challenge(
            ChallengeType.COLOR_CLASH,
            reaction.id,
            reaction.difficulty,
            f"Color Clash: {reaction.topic}",
            "Describe the color change in this chemical reaction based on the given clues.",
            content,
            time_limit=max(90, reaction.difficulty * 20),
            concepts=("color changes", "chemical reactions", reaction.topic),
            game_data={
                "reactants": list(reaction.reactants),
                "initial_color": reaction.initial_color,
                "final_color": reaction.final_color,
                "color_description": reaction.color_description,
                "additional_observations": list(reaction.additional_observations),
            },
        )

    def _mystery_challenge(self, reaction: MysteryReaction) -> Challenge:
        rng = self._seeded(self.realm_id, ChallengeType.MYSTERY_REACTION.value, reaction.id)
        distractors = [gas for gas in GAS_CHOICES if gas != reaction.gas_produced]
        gas_options = [reaction.gas_produced] + rng.sample(distractors, 3)
        rng.shuffle(gas_options)

        content = ChallengeContent(
            question=(
                "Watch the animated reaction and answer the following:\n\n"
                "1. What gas is being produced?\n"
                "2. Write the balanced chemical equation for this reaction.\n\n"
                f"Reactants: {' + '.join(reaction.reactants)}\n"
                f"Visual effects: {', '.join(reaction.visual_effects)}"
            ),
            correct_answer={"gas": reaction.gas_produced, "equation": reaction.equation},
            explanation=reaction.explanation,
            hints=(
                "Observe the visual effects carefully - they give clues about the gas",
                "Consider the properties of different gases (color, smell, density)",
                "Think about what type of reaction this might be",
                f"This involves {reaction.topic}",
            ),
            visual_aids=(f"/animations/reactions/{reaction.id}.mp4",),
        )
        return self._make_challenge(
            ChallengeType.MYSTERY_REACTION,
            reaction.id,
            reaction.difficulty,
            f"Mystery Reaction: {reaction.topic}",
            "Watch the animated reaction and identify the gas produced, then write the balanced equation.",
            content,
            time_limit=max(120, reaction.difficulty * 30),
            concepts=("gas identification", "chemical equations", reaction.topic),
            game_data={"gas_options": gas_options, "visual_effects": list(reaction.visual_effects)},
        )

    # ========================================================================
    # VALIDATION
    # ========================================================================

    async def validate_answer(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        if challenge.type is ChallengeType.PRECIPITATION_POKER:
            return self._validate_poker(challenge, answer)
        if challenge.type is ChallengeType.COLOR_CLASH:
            return self._validate_color_clash(challenge, answer)
        if challenge.type is ChallengeType.MYSTERY_REACTION:
            return self._validate_mystery(challenge, answer)
        return ValidationResult.rejected("Unknown challenge type", "This challenge type is not supported")

    def _validate_poker(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        bet = answer.response
        if not isinstance(bet, Mapping):
            return ValidationResult.rejected(_POKER_FEEDBACK, "Answer should include both prediction and bet amount")

        prediction = bet.get("prediction")
        amount = bet.get("bet_amount")
        confidence = bet.get("confidence_level")
        if (
            not isinstance(prediction, str)
            or not prediction
            or isinstance(amount, bool)
            or not isinstance(amount, int)
            or not isinstance(confidence, str)
            or confidence not in CONFIDENCE_ODDS
        ):
            return ValidationResult.rejected(
                "Please provide prediction, bet amount, and confidence level",
                "Complete betting information is required",
            )
        if not MIN_BET <= amount <= MAX_BET:
            return ValidationResult.rejected(
                _POKER_FEEDBACK,
                f"Bets must be between {MIN_BET} and {MAX_BET} gold",
            )

        expected = challenge.content.correct_answer
        is_correct = (expected == "precipitate" and "yes" in prediction) or (
            expected == "no_precipitate" and "no" in prediction
        )

        options = challenge.metadata.get("game_data", {}).get("bet_options", [])
        selected = next((option for option in options if option["id"] == prediction), None)

        if is_correct:
            odds = selected["odds"] if selected else CONFIDENCE_ODDS[confidence][0]
            winnings = math.floor(amount * odds)
            score = CONFIDENCE_SCORES[confidence]
            feedback = f"Correct! You won {winnings} gold with {confidence} confidence!"
        else:
            winnings = -amount
            score = 0
            feedback = f"Incorrect prediction. You lost {amount} gold."

        bankroll = challenge.metadata.get("game_data", {}).get("current_bankroll", STARTING_BANKROLL)
        return ValidationResult(
            is_correct=is_correct,
            score=score,
            feedback=feedback,
            explanation=challenge.content.explanation,
            metadata={"winnings": winnings, "new_bankroll": bankroll + winnings, "confidence_level": confidence},
        )

    def _validate_color_clash(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        if not isinstance(answer.response, str):
            return ValidationResult.rejected(
                "Please provide a text description of the color change",
                "Answer should be a text description",
            )

        description = answer.response.lower().strip()
        expected = str(challenge.content.correct_answer).lower()
        game_data = challenge.metadata.get("game_data", {})

        is_correct = False
        if description == expected:
            is_correct, score = True, 100
            feedback = "Perfect! You described the color change exactly right!"
        elif self._color_match(description, expected):
            is_correct, score = True, 80
            feedback = "Great! You got the main color change correct!"
        elif self._color_mentioned(description, game_data, expected):
            score = 60
            feedback = "Good! You mentioned the right colors, but could be more specific about the change."
        elif any(color in description for color in COLOR_WORDS):
            score = 30
            feedback = "You mentioned some colors, but not quite the right description."
        else:
            score = 0
            feedback = "Not quite right. Try to describe what color change you would observe."

        return ValidationResult(
            is_correct=is_correct,
            score=score,
            feedback=feedback,
            explanation=challenge.content.explanation,
            metadata={
                "user_description": description,
                "expected_description": expected,
                "detailed_feedback": self._detailed_color_feedback(game_data),
            },
        )

    @staticmethod
    def _color_match(description: str, expected: str) -> bool:
        """A word of the expected description, or a synonym of it, appears in the answer."""
        given = description.split()
        for word in expected.split():
            if word in given:
                return True
            for base, synonyms in COLOR_SYNONYMS.items():
                if word in synonyms and any(w == base or w in synonyms for w in given):
                    return True
        return False

    @staticmethod
    def _color_mentioned(description: str, game_data: Mapping[str, Any], expected: str) -> bool:
        initial = str(game_data.get("initial_color", "")).lower()
        final = str(game_data.get("final_color", "")).lower()
        return any(color and color in description for color in (initial, final, expected))

    @staticmethod
    def _detailed_color_feedback(game_data: Mapping[str, Any]) -> str:
        lines = [
            f"Expected: {game_data.get('color_description', '')}",
            f"Initial color: {game_data.get('initial_color', '')}",
            f"Final color: {game_data.get('final_color', '')}",
        ]
        observations = game_data.get("additional_observations")
        if observations:
            lines.append(f"Additional observations: {', '.join(observations)}")
        return "\n".join(lines)

    def _validate_mystery(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        response = answer.response
        if not isinstance(response, Mapping):
            return ValidationResult.rejected(_MYSTERY_FEEDBACK, "Answer should include both gas and equation")

        gas = response.get("gas")
        equation = response.get("equation")
        if not isinstance(gas, str) or not gas.strip() or not isinstance(equation, str) or not equation.strip():
            return ValidationResult.rejected(_MYSTERY_FEEDBACK, "Both parts are required for full credit")

        expected = challenge.content.correct_answer
        gas_correct = chemistry.normalize_formula(gas) == chemistry.normalize_formula(expected["gas"])
        equation_correct = chemistry.equations_equivalent(equation, expected["equation"])

        is_correct = gas_correct and equation_correct
        if is_correct:
            score = 100
            feedback = "Excellent! You correctly identified the gas and wrote the balanced equation!"
        elif gas_correct:
            score = 60
            feedback = "Good! You identified the gas correctly, but the equation needs work."
        elif equation_correct:
            score = 40
            feedback = "Nice equation! But the gas identification is incorrect."
        else:
            score = 0
            feedback = "Not quite right. Review the visual clues and try again."

        return ValidationResult(
            is_correct=is_correct,
            score=score,
            feedback=feedback,
            explanation=challenge.content.explanation,
            metadata={
                "gas_correct": gas_correct,
                "equation_correct": equation_correct,
                "correct_gas": expected["gas"],
                "correct_equation": expected["equation"],
            },
        )

    # ========================================================================
    # SCORING, BOSSES, REWARDS
    # ========================================================================

    def calculate_score(self, challenge: Challenge, answer: Answer, time_elapsed: float) -> int:
        """Base estimate plus a bonus for confident bets."""
        score = super().calculate_score(challenge, answer, time_elapsed)
        response = answer.response
        confidence = response.get("confidence_level") if isinstance(response, Mapping) else None
        bonus = CONFIDENCE_BONUS.get(confidence, 0) if isinstance(confidence, str) else 0
        return score * (100 + bonus) // 100

    def get_special_rewards(self) -> List[Reward]:
        return [
            Reward.badge("precipitation_prophet", "Precipitation Prophet Badge"),
            Reward.badge("color_clash_champion", "Color Clash Champion Badge"),
            Reward.unlock("solubility_tables", "Advanced Solubility Tables"),
            Reward.unlock("color_change_guide", "Color Change Reference Guide"),
        ]

    def get_special_mechanics(self) -> List[RealmMechanic]:
        return [
            RealmMechanic(
                "virtual_gold_system",
                "Virtual Gold Wagering",
                "Bet virtual gold on precipitation outcomes with variable payouts",
                {
                    "startingBankroll": STARTING_BANKROLL,
                    "minimumBet": MIN_BET,
                    "maximumBet": MAX_BET,
                    "bankruptcyThreshold": 0,
                },
            ),
            RealmMechanic(
                "confidence_betting",
                "Confidence Level Betting",
                "Higher confidence bets have different risk/reward ratios",
                {"highConfidenceOdds": 1.2, "mediumConfidenceOdds": 1.5, "lowConfidenceOdds": 2.0},
            ),
            RealmMechanic(
                "bankroll_management",
                "Bankroll Tracking",
                "Track wins and losses across multiple betting rounds",
                {"trackingEnabled": True, "showStatistics": True, "resetOnBankruptcy": True},
            ),
        ]
