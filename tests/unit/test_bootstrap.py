"""
Unit tests for application wiring.

Test Coverage:
- build_application assembles every default realm and collaborator
- start/shutdown manage the attempt sweeper
- A full learner flow runs through the assembled service
"""

import random

import pytest

from realmforge.bootstrap import build_application, build_application_from_config, build_locks
from realmforge.core.locks import LocalUserLocks
from realmforge.modules.character.store import InMemoryCharacterStore

USER = "learner-1"


@pytest.fixture
def app():
    return build_application(
        store=InMemoryCharacterStore(),
        locks=LocalUserLocks(wait_timeout=1.0),
        rng=random.Random(7),
    )


@pytest.mark.unit
class TestBuildApplication:
    def test_default_realms_registered(self, app):
        assert app.registry.realm_ids() == ["mathmage-trials", "memory-labyrinth", "seers-challenge"]
        assert app.service.engine is app.engine

    def test_build_locks_without_redis(self):
        assert isinstance(build_locks(redis_url="", wait_timeout=0.5), LocalUserLocks)

    async def test_from_config_keeps_injected_store(self):
        store = InMemoryCharacterStore()

        app = await build_application_from_config(store=store, locks=LocalUserLocks())

        assert app.store is store
        assert app.owns_database is False


@pytest.mark.unit
class TestApplicationLifecycle:
    async def test_start_and_shutdown(self, app):
        await app.start()
        assert app.tracker.sweeper_running

        await app.shutdown()
        assert not app.tracker.sweeper_running

        await app.shutdown()

    async def test_async_context_manager(self, app):
        async with app as running:
            assert running.tracker.sweeper_running

        assert not app.tracker.sweeper_running

    async def test_health(self, app):
        async with app:
            health = app.health()

        assert health["started"] is True
        assert health["engine"]["sweeper_running"] is True
        assert health["logging"]["initialized"] is True
        assert "progression.yaml" in health["config"]["yaml_files"]

    async def test_learner_flow(self, app):
        async with app:
            character = await app.service.initialize_character(USER)
            assert character.has_unlocked("mathmage-trials")

            challenge = await app.service.start_realm_challenge(USER, "mathmage-trials", difficulty=1)
            result = await app.service.submit_answer(
                USER, challenge.id, challenge.content.correct_answer, time_elapsed=0
            )

        assert result.is_correct
        assert result.experience_gained > 0
        assert (await app.engine.get_character(USER)).experience >= result.experience_gained
