"""
Realmforge Progression Formulas

Purpose
-------
Pure calculation functions for the progression rules: the leveling curve,
uniform score adjustment (speed, difficulty, hints), experience gain, and the
gold amounts that rewards are built from.

Design Notes
------------
- Pure functions only: no config access, every tunable is a parameter whose
  default matches `config/progression.yaml`.
- Score adjustment uses `fractions.Fraction` so that products such as
  `100 * 1.25 * 1.1` floor to 137, not 137.49999.
- Integer results are always floored.

Usage
-----
    from realmforge.modules.shared.formulas import calculate_level_from_experience

    level = calculate_level_from_experience(400)   # 3
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Optional, Union

Number = Union[int, float, Fraction]


def _exact(value: Number) -> Fraction:
    """Convert a config number to an exact fraction (0.1 becomes 1/10)."""
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    return Fraction(str(value))


# ============================================================================
# Leveling
# ============================================================================


def calculate_level_from_experience(experience: int, xp_per_level_unit: int = 100) -> int:
    """
    Derive the level from total experience: floor(sqrt(xp / unit)) + 1.

    Args:
        experience: Total experience accumulated (negative treated as 0)
        xp_per_level_unit: Curve scale

    Returns:
        Level, minimum 1

    Example:
        >>> calculate_level_from_experience(0)
        1
        >>> calculate_level_from_experience(99)
        1
        >>> calculate_level_from_experience(100)
        2
        >>> calculate_level_from_experience(400)
        3
    """
    if experience <= 0:
        return 1
    return math.isqrt(experience // xp_per_level_unit) + 1


def calculate_experience_for_level(level: int, xp_per_level_unit: int = 100) -> int:
    """
    Minimum total experience at which `level` is reached.

    Example:
        >>> calculate_experience_for_level(1)
        0
        >>> calculate_experience_for_level(3)
        400
    """
    if level <= 1:
        return 0
    return xp_per_level_unit * (level - 1) ** 2


def calculate_level_up_gold(level: int, gold_per_level: int = 50) -> int:
    """
    Bonus gold granted on reaching `level`.

    Example:
        >>> calculate_level_up_gold(3)
        150
    """
    return level * gold_per_level


def is_badge_level(level: int, interval: int = 5) -> bool:
    """
    Every `interval`-th level grants an achievement badge.

    Example:
        >>> is_badge_level(5), is_badge_level(6)
        (True, False)
    """
    return interval > 0 and level > 0 and level % interval == 0


# ============================================================================
# Score adjustment
# ============================================================================


def calculate_time_bonus(
    time_elapsed: float,
    time_limit: Optional[float],
    max_bonus: Number = 0.5,
    weight: Number = 0.5,
) -> Fraction:
    """
    Speed bonus as a fraction of the raw score.

    bonus = clamp(0, max_bonus, (1 - elapsed / limit) * weight)

    Args:
        time_elapsed: Seconds taken
        time_limit: Challenge time limit; no bonus when missing or not positive

    Returns:
        Bonus in [0, max_bonus]

    Example:
        >>> calculate_time_bonus(30, 60)
        Fraction(1, 4)
        >>> calculate_time_bonus(90, 60)
        Fraction(0, 1)
        >>> calculate_time_bonus(10, None)
        Fraction(0, 1)
    """
    if not time_limit or time_limit <= 0:
        return Fraction(0)

    ratio = _exact(max(0.0, time_elapsed)) / _exact(time_limit)
    bonus = (1 - ratio) * _exact(weight)
    return min(_exact(max_bonus), max(Fraction(0), bonus))


def calculate_difficulty_multiplier(difficulty: int, step: Number = 0.1) -> Fraction:
    """
    Example:
        >>> calculate_difficulty_multiplier(1)
        Fraction(1, 1)
        >>> calculate_difficulty_multiplier(3)
        Fraction(6, 5)
    """
    return 1 + (difficulty - 1) * _exact(step)


def calculate_hint_factor(hints_used: int, penalty: Number = 0.1) -> Fraction:
    """
    Example:
        >>> calculate_hint_factor(2)
        Fraction(4, 5)
        >>> calculate_hint_factor(15)
        Fraction(0, 1)
    """
    return max(Fraction(0), 1 - max(0, hints_used) * _exact(penalty))


def calculate_final_score(
    raw_score: int,
    *,
    is_correct: bool,
    difficulty: int,
    hints_used: int,
    time_elapsed: float,
    time_limit: Optional[float],
    time_bonus_max: Number = 0.5,
    time_bonus_weight: Number = 0.5,
    difficulty_step: Number = 0.1,
    hint_penalty: Number = 0.1,
    min_correct_score: int = 1,
) -> int:
    """
    Apply the uniform adjustments to a realm's raw score.

    Incorrect answers keep the raw score untouched. Correct answers get
    raw * (1 + time_bonus) * difficulty_multiplier * hint_factor, floored,
    and never less than `min_correct_score`.

    Example:
        >>> calculate_final_score(100, is_correct=True, difficulty=2, hints_used=0,
        ...                       time_elapsed=30, time_limit=60)
        137
        >>> calculate_final_score(100, is_correct=True, difficulty=1, hints_used=0,
        ...                       time_elapsed=45, time_limit=None)
        100
        >>> calculate_final_score(80, is_correct=True, difficulty=3, hints_used=2,
        ...                       time_elapsed=0, time_limit=None)
        76
        >>> calculate_final_score(40, is_correct=False, difficulty=5, hints_used=0,
        ...                       time_elapsed=1, time_limit=60)
        40
    """
    if not is_correct:
        return raw_score

    bonus = calculate_time_bonus(time_elapsed, time_limit, time_bonus_max, time_bonus_weight)
    score = (
        Fraction(raw_score)
        * (1 + bonus)
        * calculate_difficulty_multiplier(difficulty, difficulty_step)
        * calculate_hint_factor(hints_used, hint_penalty)
    )
    return max(min_correct_score, math.floor(score))


# ============================================================================
# Rewards
# ============================================================================


def calculate_experience_gain(score: int, difficulty: int, divisor: int = 10) -> int:
    """
    Experience added to the character for a correct completion.

    Example:
        >>> calculate_experience_gain(137, 2)
        27
        >>> calculate_experience_gain(110, 1)
        11
    """
    return max(0, score) * difficulty // divisor


def calculate_challenge_xp(difficulty: int, xp_per_difficulty: int = 10) -> int:
    """
    Example:
        >>> calculate_challenge_xp(3)
        30
    """
    return difficulty * xp_per_difficulty


def calculate_challenge_gold(score: int, difficulty: int, gold_per_difficulty: int = 5) -> int:
    """
    Gold = floor(difficulty * gold_per_difficulty * score / 100).

    Example:
        >>> calculate_challenge_gold(100, 2)
        10
        >>> calculate_challenge_gold(50, 1)
        2
    """
    return difficulty * gold_per_difficulty * max(0, score) // 100


def calculate_perfect_bonus(gold: int, ratio: Number = 0.5) -> int:
    """
    Example:
        >>> calculate_perfect_bonus(13)
        6
    """
    return math.floor(gold * _exact(ratio))


def calculate_realm_progress(completed: int, total: int) -> int:
    """
    Percentage of a realm's catalogue completed, clamped to [0, 100].

    Example:
        >>> calculate_realm_progress(1, 3)
        33
        >>> calculate_realm_progress(5, 0)
        0
    """
    if total <= 0:
        return 0
    return max(0, min(100, 100 * completed // total))
