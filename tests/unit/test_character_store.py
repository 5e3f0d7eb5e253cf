"""
Unit tests for InMemoryCharacterStore.

Test Coverage:
- Create is idempotent
- Partial updates touch only the named fields
- Returned characters never share state with the store
- Unknown users and unknown fields are rejected
"""

from datetime import datetime, timezone

import pytest

from realmforge.domain.models.character import InventoryItem
from realmforge.modules.character.store import InMemoryCharacterStore
from realmforge.modules.shared.exceptions import CharacterNotFoundError, ValidationError


@pytest.fixture
def memory_store():
    return InMemoryCharacterStore()


@pytest.mark.unit
class TestInMemoryCharacterStore:
    async def test_get_unknown_returns_none(self, memory_store):
        assert await memory_store.get("nobody") is None

    async def test_create_is_idempotent(self, memory_store):
        first = await memory_store.create("u1")
        await memory_store.update("u1", {"gold": 40})

        second = await memory_store.create("u1")

        assert first.level == 1
        assert second.gold == 40
        assert len(memory_store) == 1

    async def test_partial_update(self, memory_store):
        await memory_store.create("u1")

        updated = await memory_store.update("u1", {"experience": 250, "level": 2})

        assert (updated.experience, updated.level, updated.gold) == (250, 2, 0)

    async def test_update_unknown_user(self, memory_store):
        with pytest.raises(CharacterNotFoundError):
            await memory_store.update("ghost", {"gold": 1})

    async def test_update_unknown_field(self, memory_store):
        await memory_store.create("u1")

        with pytest.raises(ValidationError):
            await memory_store.update("u1", {"mana": 3})

    async def test_returned_characters_are_copies(self, memory_store):
        character = await memory_store.create("u1")
        character.add_gold(500)
        character.unlock_realm("mathmage-trials")

        stored = await memory_store.get("u1")

        assert stored.gold == 0
        assert stored.unlocked_realms == ()

    async def test_save_writes_only_changes(self, memory_store):
        character = await memory_store.create("u1")
        character.add_experience(30)
        character.add_inventory_item(
            InventoryItem(id="lab_goggles", type="equipment", name="Lab Goggles", acquired_at=datetime.now(timezone.utc))
        )
        await memory_store.update("u1", {"gold": 40})

        saved = await memory_store.save(character)

        assert saved.experience == 30
        assert saved.owns_item("lab_goggles")
        assert saved.gold == 40

    async def test_save_without_changes_skips_write(self, memory_store):
        character = await memory_store.create("u1")
        await memory_store.update("u1", {"gold": 40})

        assert await memory_store.save(character) is character
        assert (await memory_store.get("u1")).gold == 40
