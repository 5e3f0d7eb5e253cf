"""Reward calculation, reward application and level-up bonuses."""

from realmforge.modules.progression.rewards import (
    RewardPolicy,
    apply_rewards,
    calculate_rewards,
    level_up_rewards,
    realms_unlocked_at,
    total_experience,
    total_gold,
)

__all__ = [
    "RewardPolicy",
    "apply_rewards",
    "calculate_rewards",
    "level_up_rewards",
    "realms_unlocked_at",
    "total_experience",
    "total_gold",
]
