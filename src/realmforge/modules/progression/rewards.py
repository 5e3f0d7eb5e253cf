"""
Reward & Leveling Calculator.

Purpose
-------
Turn a validated submission into reward instructions, apply reward
instructions to a character, and work out what a level-up grants.

Business Rules
--------------
- Incorrect answers earn nothing.
- Correct answers earn `difficulty * 10` xp and
  `floor(difficulty * 5 * score / 100)` gold, plus 50% of that gold when
  the score reaches 100, plus the challenge's own rewards verbatim.
- Rewards are additive: xp and gold sum; badges and items append to the
  inventory; unlocks append to achievements. Nothing is ever removed.
- A level-up grants `level * 50` gold and a `level_{n}_badge` badge for
  every multiple of 5 reached.

Design Notes
------------
Pure functions plus a frozen `RewardPolicy` built from ConfigManager, so
every constant is tunable from `config/progression.yaml` and the functions
stay trivially testable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from realmforge.domain.models.base import utcnow
from realmforge.domain.models.challenge import Challenge, Reward, RewardType, ValidationResult
from realmforge.domain.models.character import Achievement, Character, InventoryItem
from realmforge.modules.shared import formulas


@dataclass(frozen=True)
class RewardPolicy:
    xp_per_difficulty: int = 10
    gold_per_difficulty: int = 5
    perfect_score_threshold: int = 100
    perfect_bonus_ratio: float = 0.5
    experience_divisor: int = 10
    xp_per_level_unit: int = 100
    level_up_gold_per_level: int = 50
    badge_level_interval: int = 5
    realm_unlocks: Mapping[int, Sequence[str]] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config_manager: Any) -> "RewardPolicy":
        """Read every reward and leveling constant from balance config."""
        get = config_manager.get
        unlocks = get("leveling.realm_unlocks", {}) or {}
        return cls(
            xp_per_difficulty=int(get("rewards.xp_per_difficulty", 10)),
            gold_per_difficulty=int(get("rewards.gold_per_difficulty", 5)),
            perfect_score_threshold=int(get("rewards.perfect_score_threshold", 100)),
            perfect_bonus_ratio=float(get("rewards.perfect_bonus_ratio", 0.5)),
            experience_divisor=int(get("rewards.experience_divisor", 10)),
            xp_per_level_unit=int(get("leveling.xp_per_level_unit", 100)),
            level_up_gold_per_level=int(get("leveling.level_up_gold_per_level", 50)),
            badge_level_interval=int(get("leveling.badge_level_interval", 5)),
            realm_unlocks={int(level): tuple(realms) for level, realms in unlocks.items()},
        )


# ============================================================================
# CHALLENGE REWARDS
# ============================================================================


def calculate_rewards(
    challenge: Challenge,
    validation: ValidationResult,
    time_elapsed: float,
    policy: Optional[RewardPolicy] = None,
) -> List[Reward]:
    """
    Reward instructions for a validated submission.

    `validation` is the realm's raw result, so `score` is on the 0..100
    scale and the perfect bonus means a perfect answer. `time_elapsed` is
    accepted for analytics parity; the reward amounts do not depend on it.

    A difficulty 2 challenge answered perfectly yields xp 20, gold 10 and a
    perfect bonus of 5.
    """
    policy = policy or RewardPolicy()
    if not validation.is_correct:
        return []

    gold = formulas.calculate_challenge_gold(validation.score, challenge.difficulty, policy.gold_per_difficulty)
    rewards = [
        Reward.xp(
            formulas.calculate_challenge_xp(challenge.difficulty, policy.xp_per_difficulty),
            "Challenge completion XP",
        ),
        Reward.gold(gold, "Challenge completion gold"),
    ]
    if validation.score >= policy.perfect_score_threshold:
        rewards.append(
            Reward.gold(formulas.calculate_perfect_bonus(gold, policy.perfect_bonus_ratio), "Perfect score bonus")
        )

    rewards.extend(challenge.rewards)
    return rewards


def total_gold(rewards: Iterable[Reward]) -> int:
    return sum(reward.amount for reward in rewards if reward.type is RewardType.GOLD)


def total_experience(rewards: Iterable[Reward]) -> int:
    return sum(reward.amount for reward in rewards if reward.type is RewardType.XP)


def apply_rewards(character: Character, rewards: Iterable[Reward], now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Apply reward instructions to `character` in memory.

    Additive only: badges and items are appended to the inventory and
    unlocks to the achievements, even when an entry with the same id exists.

    Returns:
        Counts of what was applied: experience, gold, items, achievements
    """
    now = now or utcnow()
    applied = {"experience": 0, "gold": 0, "items": 0, "achievements": 0}

    for reward in rewards:
        if reward.type is RewardType.XP:
            character.add_experience(reward.amount)
            applied["experience"] += reward.amount
        elif reward.type is RewardType.GOLD:
            character.add_gold(reward.amount)
            applied["gold"] += reward.amount
        elif reward.type in (RewardType.BADGE, RewardType.ITEM):
            character.add_inventory_item(
                InventoryItem(
                    id=reward.item_id,
                    type=reward.type.value,
                    name=reward.description,
                    acquired_at=now,
                )
            )
            applied["items"] += 1
        elif reward.type is RewardType.UNLOCK:
            character.add_achievement(Achievement(id=reward.item_id, name=reward.description, unlocked_at=now))
            applied["achievements"] += 1

    return applied


def unclaimed_rewards(character: Character, rewards: Iterable[Reward]) -> List[Reward]:
    """Drop badge and item rewards already owned and unlocks already earned."""
    kept: List[Reward] = []
    for reward in rewards:
        if reward.type in (RewardType.BADGE, RewardType.ITEM) and character.owns_item(reward.item_id or ""):
            continue
        if reward.type is RewardType.UNLOCK and character.has_achievement(reward.item_id or ""):
            continue
        kept.append(reward)
    return kept


# ============================================================================
# LEVELING
# ============================================================================


def realms_unlocked_at(level: int, table: Mapping[int, Sequence[str]]) -> List[str]:
    """
    Every realm whose unlock threshold is at or below `level`, in threshold order.

    Example:
        >>> realms_unlocked_at(3, {1: ["a"], 3: ["b"], 5: ["c"]})
        ['a', 'b']
    """
    unlocked: List[str] = []
    for threshold in sorted(table):
        if threshold <= level:
            unlocked.extend(realm for realm in table[threshold] if realm not in unlocked)
    return unlocked


def level_up_rewards(previous_level: int, new_level: int, policy: Optional[RewardPolicy] = None) -> List[Reward]:
    """
    Bonus rewards for reaching `new_level` from `previous_level`.

    Gold is granted once, for the level reached. A badge is granted for
    every badge level crossed, so a jump from 4 to 6 still earns the
    level 5 badge.
    """
    policy = policy or RewardPolicy()
    if new_level <= previous_level:
        return []

    rewards = [
        Reward.gold(
            formulas.calculate_level_up_gold(new_level, policy.level_up_gold_per_level),
            f"Level {new_level} bonus gold",
        )
    ]
    for level in range(previous_level + 1, new_level + 1):
        if formulas.is_badge_level(level, policy.badge_level_interval):
            rewards.append(Reward.badge(f"level_{level}_badge", f"Level {level} Achievement Badge"))
    return rewards
