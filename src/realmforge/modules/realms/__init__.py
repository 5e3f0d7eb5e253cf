"""
Realm strategies and the registry that holds them.

    from realmforge.modules.realms import RealmRegistry, default_realms

    registry = RealmRegistry(default_realms())
"""

import random
from typing import List, Optional

from realmforge.modules.realms.base import BossDefinition, RealmStrategy
from realmforge.modules.realms.mathmage_trials import MathmageTrialsRealm
from realmforge.modules.realms.memory_labyrinth import MemoryLabyrinthRealm
from realmforge.modules.realms.registry import RealmRegistry
from realmforge.modules.realms.seers_challenge import SeersChallengeRealm


def default_realms(rng: Optional[random.Random] = None) -> List[RealmStrategy]:
    """The built-in realms, sharing one random generator."""
    return [
        MathmageTrialsRealm(rng),
        MemoryLabyrinthRealm(rng),
        SeersChallengeRealm(rng),
    ]


__all__ = [
    "BossDefinition",
    "MathmageTrialsRealm",
    "MemoryLabyrinthRealm",
    "RealmRegistry",
    "RealmStrategy",
    "SeersChallengeRealm",
    "default_realms",
]
