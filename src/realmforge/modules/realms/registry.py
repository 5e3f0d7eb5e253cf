"""
Realm registry.

Maps realm ids to strategy instances. Populated eagerly at start-up (see
`realmforge.bootstrap`) so that a broken realm fails at boot, not on the
first request that touches it.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.challenge import Challenge
from realmforge.modules.realms.base import RealmStrategy
from realmforge.modules.shared.exceptions import RealmNotFoundError

logger = get_logger(__name__)


class RealmRegistry:
    def __init__(self, realms: Iterable[RealmStrategy] = ()) -> None:
        self._realms: Dict[str, RealmStrategy] = {}
        self._challenge_owner: Dict[str, str] = {}
        for realm in realms:
            self.register(realm)

    def register(self, realm: RealmStrategy) -> None:
        """
        Add a realm and index its catalogue.

        Raises:
            ValueError: duplicate realm id, or a challenge id already owned
                by another realm
        """
        if realm.realm_id in self._realms:
            raise ValueError(f"Realm already registered: {realm.realm_id}")

        challenges = realm.get_challenges()
        for challenge in challenges:
            owner = self._challenge_owner.get(challenge.id)
            if owner is not None:
                raise ValueError(f"Challenge id {challenge.id} already registered by realm {owner}")

        self._realms[realm.realm_id] = realm
        for challenge in challenges:
            self._challenge_owner[challenge.id] = realm.realm_id

        logger.info(
            "Realm registered",
            extra={"realm_id": realm.realm_id, "challenge_count": len(challenges)},
        )

    def get(self, realm_id: str) -> RealmStrategy:
        realm = self._realms.get(realm_id)
        if realm is None:
            raise RealmNotFoundError(realm_id)
        return realm

    def find(self, realm_id: str) -> Optional[RealmStrategy]:
        return self._realms.get(realm_id)

    def find_challenge(self, challenge_id: str) -> Optional[Tuple[RealmStrategy, Challenge]]:
        """Resolve a globally unique challenge id to its realm and definition."""
        realm_id = self._challenge_owner.get(challenge_id)
        if realm_id is None:
            return None
        realm = self._realms[realm_id]
        challenge = realm.get_challenge(challenge_id)
        if challenge is None:
            return None
        return realm, challenge

    def realm_ids(self) -> List[str]:
        return list(self._realms)

    def __contains__(self, realm_id: object) -> bool:
        return realm_id in self._realms

    def __iter__(self) -> Iterator[RealmStrategy]:
        return iter(list(self._realms.values()))

    def __len__(self) -> int:
        return len(self._realms)
