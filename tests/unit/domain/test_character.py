"""
Unit Tests for the Character Domain Model
=========================================

Test Coverage
-------------
- Initialization and validation
- Experience, gold and derived level
- Realm unlocks and progress
- Change tracking and record round trip
- Domain event emission

Testing Strategy
----------------
- Pure domain tests (no store, no engine)
- AAA pattern (Arrange, Act, Assert)
"""

from datetime import datetime, timezone

import pytest

from realmforge.domain.models import Achievement, Character, InventoryItem
from realmforge.domain.models.base import DomainValidationError

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# INITIALIZATION
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestCharacterInitialization:
    def test_new_character_defaults(self):
        character = Character.new("learner-1")

        assert character.user_id == "learner-1"
        assert character.level == 1
        assert character.experience == 0
        assert character.gold == 0
        assert character.unlocked_realms == ()
        assert not character.has_changes

    def test_user_id_required(self):
        with pytest.raises(DomainValidationError) as exc_info:
            Character.new("  ")

        assert exc_info.value.field == "user_id"

    def test_negative_gold_rejected(self):
        with pytest.raises(DomainValidationError):
            Character("learner-1", gold=-1)


# ============================================================================
# PROGRESSION
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestCharacterProgression:
    def test_experience_and_gold_are_additive(self):
        character = Character.new("learner-1")

        character.add_experience(40)
        character.add_experience(60)
        character.add_gold(7)

        assert character.experience == 100
        assert character.gold == 7

    def test_negative_amounts_rejected(self):
        character = Character.new("learner-1")

        with pytest.raises(DomainValidationError):
            character.add_experience(-5)
        with pytest.raises(DomainValidationError):
            character.add_gold(-5)

    def test_level_is_derived_only_by_sync(self):
        character = Character.new("learner-1")
        character.add_experience(400)

        assert character.level == 1
        assert character.sync_level() == (1, 3)
        assert character.level == 3

    def test_sync_level_emits_leveled_up_event(self):
        character = Character.new("learner-1")
        character.add_experience(100)

        character.sync_level()

        events = character.clear_domain_events()
        assert [e.event_name for e in events] == ["character.leveled_up"]
        assert events[0].payload == {"user_id": "learner-1", "old_level": 1, "new_level": 2}

    def test_sync_level_without_change_emits_nothing(self):
        character = Character.new("learner-1")
        character.add_experience(50)

        assert character.sync_level() == (1, 1)
        assert character.get_pending_events() == []


# ============================================================================
# REALMS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestRealmUnlocks:
    def test_unlock_is_idempotent(self):
        character = Character.new("learner-1")

        assert character.unlock_realm("mathmage-trials", unlocked_at=T0) is True
        assert character.unlock_realm("mathmage-trials") is False

        assert len(character.unlocked_realms) == 1
        entry = character.unlocked_realms[0]
        assert entry.progress == 0
        assert entry.unlocked_at == T0

    def test_unlock_emits_event_once(self):
        character = Character.new("learner-1")
        character.unlock_realm("memory-labyrinth")
        character.unlock_realm("memory-labyrinth")

        names = [e.event_name for e in character.clear_domain_events()]
        assert names == ["realm.unlocked"]

    def test_progress_is_clamped_and_monotonic(self):
        character = Character.new("learner-1")
        character.unlock_realm("mathmage-trials")

        character.set_realm_progress("mathmage-trials", 40)
        character.set_realm_progress("mathmage-trials", 10)
        assert character.get_unlocked_realm("mathmage-trials").progress == 40

        character.set_realm_progress("mathmage-trials", 250)
        assert character.get_unlocked_realm("mathmage-trials").progress == 100

    def test_progress_for_locked_realm_is_ignored(self):
        character = Character.new("learner-1")

        character.set_realm_progress("seers-challenge", 50)

        assert character.get_unlocked_realm("seers-challenge") is None

    def test_record_completion_once(self):
        character = Character.new("learner-1")

        assert character.record_completion("c-1") is True
        assert character.record_completion("c-1") is False
        assert character.completed_challenges == frozenset({"c-1"})


# ============================================================================
# CHANGE TRACKING & SERIALIZATION
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestCharacterSerialization:
    def test_collect_changes_returns_only_dirty_fields(self):
        character = Character.new("learner-1")
        character.add_gold(5)
        character.unlock_realm("mathmage-trials", unlocked_at=T0)

        assert character.dirty_fields() == {"gold", "unlocked_realms"}
        changes = character.collect_changes()

        assert set(changes) == {"gold", "unlocked_realms"}
        assert changes["unlocked_realms"] == [
            {"realm_id": "mathmage-trials", "unlocked_at": T0.isoformat(), "progress": 0}
        ]
        assert character.collect_changes() == {}

    def test_record_round_trip(self):
        character = Character.new("learner-1")
        character.add_experience(450)
        character.sync_level()
        character.add_gold(12)
        character.unlock_realm("mathmage-trials", unlocked_at=T0)
        character.add_inventory_item(InventoryItem(id="goggles", type="item", name="Goggles", acquired_at=T0))
        character.add_achievement(Achievement(id="lab", name="Lab access", unlocked_at=T0))
        character.record_completion("c-1")

        restored = Character.from_record(character.to_record())

        assert restored.to_record() == character.to_record()
        assert restored.level == 3
        assert restored.owns_item("goggles")
        assert restored.has_achievement("lab")
        assert restored == character
