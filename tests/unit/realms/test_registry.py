"""Unit tests for RealmRegistry."""

import random

import pytest

from realmforge.modules.realms import RealmRegistry, default_realms
from realmforge.modules.realms.mathmage_trials import MathmageTrialsRealm
from realmforge.modules.shared.exceptions import RealmNotFoundError
from tests.conftest import GROVE, TIMED, GroveRealm


@pytest.mark.unit
class TestRealmRegistry:
    def test_default_realms_register_cleanly(self):
        registry = RealmRegistry(default_realms(random.Random(0)))

        assert registry.realm_ids() == ["mathmage-trials", "memory-labyrinth", "seers-challenge"]
        assert len(registry) == 3
        assert "seers-challenge" in registry

    def test_get_unknown_realm_raises(self):
        registry = RealmRegistry()

        with pytest.raises(RealmNotFoundError) as exc_info:
            registry.get("atlantis")

        assert exc_info.value.realm_id == "atlantis"
        assert registry.find("atlantis") is None

    def test_duplicate_realm_rejected(self):
        registry = RealmRegistry([MathmageTrialsRealm()])

        with pytest.raises(ValueError):
            registry.register(MathmageTrialsRealm())

    def test_find_challenge_resolves_owner(self):
        registry = RealmRegistry([GroveRealm()])

        realm, challenge = registry.find_challenge(TIMED)

        assert realm.realm_id == GROVE
        assert challenge.id == TIMED
        assert registry.find_challenge("nowhere:equation_balance:x") is None

    def test_iteration_yields_realms_in_registration_order(self):
        registry = RealmRegistry([GroveRealm(), MathmageTrialsRealm()])

        assert [realm.realm_id for realm in registry] == [GROVE, "mathmage-trials"]
