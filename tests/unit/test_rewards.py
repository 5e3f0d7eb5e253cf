"""
Unit tests for reward calculation, reward application and level-up bonuses.
"""

from datetime import datetime, timezone

import pytest

from realmforge.domain.models.challenge import (
    Challenge,
    ChallengeContent,
    ChallengeType,
    Reward,
    RewardType,
    ValidationResult,
)
from realmforge.domain.models.character import Character
from realmforge.modules.progression.rewards import (
    RewardPolicy,
    apply_rewards,
    calculate_rewards,
    level_up_rewards,
    realms_unlocked_at,
    total_experience,
    total_gold,
    unclaimed_rewards,
)

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_challenge(difficulty=2, rewards=()):
    return Challenge(
        id="grove:gas_test:one",
        realm_id="grove",
        type=ChallengeType.GAS_TEST,
        difficulty=difficulty,
        title="One",
        description="Test challenge",
        content=ChallengeContent(question="?", correct_answer="x"),
        rewards=rewards,
    )


@pytest.mark.unit
class TestCalculateRewards:
    def test_incorrect_answer_earns_nothing(self):
        validation = ValidationResult(is_correct=False, score=90, feedback="no")
        assert calculate_rewards(make_challenge(), validation, 10) == []

    def test_correct_answer_xp_gold_and_perfect_bonus(self):
        validation = ValidationResult(is_correct=True, score=100, feedback="yes")

        rewards = calculate_rewards(make_challenge(difficulty=2), validation, 30)

        assert total_experience(rewards) == 20
        assert [r.amount for r in rewards if r.type is RewardType.GOLD] == [10, 5]
        assert total_gold(rewards) == 15

    def test_no_perfect_bonus_below_threshold(self):
        validation = ValidationResult(is_correct=True, score=99, feedback="yes")

        rewards = calculate_rewards(make_challenge(difficulty=3), validation, 30)

        assert [r.description for r in rewards] == ["Challenge completion XP", "Challenge completion gold"]
        assert total_gold(rewards) == 14

    def test_challenge_rewards_are_appended_verbatim(self):
        goggles = Reward.item("lab_goggles", "Lab Goggles")
        validation = ValidationResult(is_correct=True, score=50, feedback="yes")

        rewards = calculate_rewards(make_challenge(rewards=(goggles,)), validation, 5)

        assert rewards[-1] == goggles

    def test_policy_from_config_reads_balance_file(self, mocker):
        config = mocker.MagicMock()
        config.get.side_effect = lambda key, default=None: {
            "rewards.xp_per_difficulty": 20,
            "leveling.realm_unlocks": {"3": ["memory-labyrinth"]},
        }.get(key, default)

        policy = RewardPolicy.from_config(config)

        assert policy.xp_per_difficulty == 20
        assert policy.gold_per_difficulty == 5
        assert policy.realm_unlocks == {3: ("memory-labyrinth",)}


@pytest.mark.unit
class TestApplyRewards:
    def test_rewards_are_additive(self):
        character = Character.new("u-1")
        character.add_gold(10)

        applied = apply_rewards(
            character,
            [Reward.xp(30), Reward.gold(15), Reward.badge("b1", "Badge"), Reward.unlock("lab", "Lab access")],
            now=NOW,
        )

        assert character.experience == 30
        assert character.gold == 25
        assert [item.id for item in character.inventory] == ["b1"]
        assert character.inventory[0].type == "badge"
        assert [a.id for a in character.achievements] == ["lab"]
        assert applied == {"experience": 30, "gold": 15, "items": 1, "achievements": 1}

    def test_repeated_rewards_append(self):
        character = Character.new("u-1")
        rewards = [Reward.item("goggles", "Goggles"), Reward.unlock("lab", "Lab")]

        apply_rewards(character, rewards, now=NOW)
        applied = apply_rewards(character, rewards, now=NOW)

        assert [item.id for item in character.inventory] == ["goggles", "goggles"]
        assert [a.id for a in character.achievements] == ["lab", "lab"]
        assert applied["items"] == 1 and applied["achievements"] == 1

    def test_existing_inventory_is_kept(self):
        character = Character.new("u-1")
        apply_rewards(character, [Reward.item("a", "A")], now=NOW)
        apply_rewards(character, [Reward.item("b", "B")], now=NOW)

        assert [item.id for item in character.inventory] == ["a", "b"]

    def test_unclaimed_rewards_skip_held_entries(self):
        character = Character.new("u-1")
        apply_rewards(character, [Reward.badge("slayer", "Slayer"), Reward.unlock("lab", "Lab")], now=NOW)
        rewards = [
            Reward.badge("slayer", "Slayer"),
            Reward.item("slayer", "Slayer replica"),
            Reward.unlock("lab", "Lab"),
            Reward.unlock("vault", "Vault"),
            Reward.gold(25),
            Reward.xp(40),
        ]

        kept = unclaimed_rewards(character, rewards)

        assert kept == [Reward.unlock("vault", "Vault"), Reward.gold(25), Reward.xp(40)]


@pytest.mark.unit
class TestLeveling:
    def test_realms_unlocked_at_follows_thresholds(self):
        table = {1: ("a",), 3: ("b", "c"), 7: ("d",)}
        assert realms_unlocked_at(1, table) == ["a"]
        assert realms_unlocked_at(6, table) == ["a", "b", "c"]
        assert realms_unlocked_at(99, table) == ["a", "b", "c", "d"]

    def test_level_up_grants_gold_for_new_level(self):
        rewards = level_up_rewards(2, 3)
        assert rewards == [Reward.gold(150, "Level 3 bonus gold")]

    def test_level_up_across_badge_level(self):
        rewards = level_up_rewards(4, 6)

        assert total_gold(rewards) == 300
        badges = [r.item_id for r in rewards if r.type is RewardType.BADGE]
        assert badges == ["level_5_badge"]

    def test_no_level_change_grants_nothing(self):
        assert level_up_rewards(3, 3) == []
