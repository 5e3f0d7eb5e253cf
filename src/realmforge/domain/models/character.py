"""
Character domain model.

Purpose
-------
The learner's durable progression record: level, experience, gold, unlocked
realms, inventory and achievements. The aggregate enforces its invariants
and records which fields changed so that stores apply partial updates.

Business Rules
--------------
- Experience and gold never decrease and never go negative.
- Level is derived. It only changes through `sync_level()`, which sets it to
  floor(sqrt(experience / unit)) + 1.
- A realm is unlocked at most once; progress stays within [0, 100].
- Inventory and achievements only grow.

Serialization
-------------
`to_record()` / `from_record()` convert to and from plain JSON-compatible
dictionaries; `collect_changes()` returns the changed subset in the same
shape. Both character stores speak this format.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from realmforge.domain.models.base import (
    AggregateRoot,
    utcnow,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
    validate_range,
)
from realmforge.modules.shared.formulas import calculate_level_from_experience

CHARACTER_FIELDS: Tuple[str, ...] = (
    "level",
    "experience",
    "gold",
    "unlocked_realms",
    "inventory",
    "achievements",
    "completed_challenges",
)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


# ============================================================================
# VALUE OBJECTS
# ============================================================================


@dataclass(frozen=True)
class UnlockedRealm:
    realm_id: str
    unlocked_at: datetime
    progress: int = 0

    def __post_init__(self) -> None:
        validate_not_empty(self.realm_id, "realm_id")
        validate_range(self.progress, 0, 100, "progress")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "realm_id": self.realm_id,
            "unlocked_at": self.unlocked_at.isoformat(),
            "progress": self.progress,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnlockedRealm":
        return cls(
            realm_id=data["realm_id"],
            unlocked_at=_parse_datetime(data["unlocked_at"]),
            progress=int(data.get("progress", 0)),
        )


@dataclass(frozen=True)
class InventoryItem:
    id: str
    type: str
    name: str
    acquired_at: datetime

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "acquired_at": self.acquired_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryItem":
        return cls(
            id=data["id"],
            type=data["type"],
            name=data.get("name", ""),
            acquired_at=_parse_datetime(data["acquired_at"]),
        )


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    unlocked_at: datetime

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "unlocked_at": self.unlocked_at.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Achievement":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            unlocked_at=_parse_datetime(data["unlocked_at"]),
        )


# ============================================================================
# AGGREGATE
# ============================================================================


class Character(AggregateRoot):
    """
    Learner progression aggregate.

    Examples
    --------
    >>> character = Character.new("user-1")
    >>> character.add_experience(400)
    >>> character.sync_level()
    (1, 3)
    """

    def __init__(
        self,
        user_id: str,
        *,
        level: int = 1,
        experience: int = 0,
        gold: int = 0,
        unlocked_realms: Iterable[UnlockedRealm] = (),
        inventory: Iterable[InventoryItem] = (),
        achievements: Iterable[Achievement] = (),
        completed_challenges: Iterable[str] = (),
        created_at: Optional[datetime] = None,
    ) -> None:
        validate_not_empty(user_id, "user_id")
        validate_positive(level, "level")
        validate_non_negative(experience, "experience")
        validate_non_negative(gold, "gold")
        super().__init__(user_id)

        self._level = level
        self._experience = experience
        self._gold = gold
        self._unlocked_realms: List[UnlockedRealm] = list(unlocked_realms)
        self._inventory: List[InventoryItem] = list(inventory)
        self._achievements: List[Achievement] = list(achievements)
        self._completed_challenges: Set[str] = set(completed_challenges)
        self.created_at = created_at or utcnow()

    @classmethod
    def new(cls, user_id: str) -> "Character":
        return cls(user_id)

    # ========================================================================
    # READ ACCESS
    # ========================================================================

    @property
    def user_id(self) -> str:
        return str(self.id)

    @property
    def level(self) -> int:
        return self._level

    @property
    def experience(self) -> int:
        return self._experience

    @property
    def gold(self) -> int:
        return self._gold

    @property
    def unlocked_realms(self) -> Tuple[UnlockedRealm, ...]:
        return tuple(self._unlocked_realms)

    @property
    def inventory(self) -> Tuple[InventoryItem, ...]:
        return tuple(self._inventory)

    @property
    def achievements(self) -> Tuple[Achievement, ...]:
        return tuple(self._achievements)

    @property
    def completed_challenges(self) -> frozenset:
        return frozenset(self._completed_challenges)

    def has_unlocked(self, realm_id: str) -> bool:
        return any(entry.realm_id == realm_id for entry in self._unlocked_realms)

    def get_unlocked_realm(self, realm_id: str) -> Optional[UnlockedRealm]:
        for entry in self._unlocked_realms:
            if entry.realm_id == realm_id:
                return entry
        return None

    def owns_item(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self._inventory)

    def has_achievement(self, achievement_id: str) -> bool:
        return any(entry.id == achievement_id for entry in self._achievements)

    # ========================================================================
    # BUSINESS LOGIC
    # ========================================================================

    def add_experience(self, amount: int) -> None:
        validate_non_negative(amount, "amount")
        if amount:
            self._experience += amount
            self._mark_dirty("experience")

    def add_gold(self, amount: int) -> None:
        validate_non_negative(amount, "amount")
        if amount:
            self._gold += amount
            self._mark_dirty("gold")

    def sync_level(self, xp_per_level_unit: int = 100) -> Tuple[int, int]:
        """
        Set level to the value derived from experience.

        Returns
        -------
        Tuple[int, int]
            (previous_level, new_level)
        """
        previous = self._level
        derived = calculate_level_from_experience(self._experience, xp_per_level_unit)
        if derived != previous:
            self._level = derived
            self._mark_dirty("level")
            if derived > previous:
                self.add_domain_event(
                    "character.leveled_up",
                    {"user_id": self.user_id, "old_level": previous, "new_level": derived},
                )
        return previous, derived

    def unlock_realm(self, realm_id: str, unlocked_at: Optional[datetime] = None) -> bool:
        """Append an unlock record; returns False if already unlocked."""
        if self.has_unlocked(realm_id):
            return False

        self._unlocked_realms.append(
            UnlockedRealm(realm_id=realm_id, unlocked_at=unlocked_at or utcnow(), progress=0)
        )
        self._mark_dirty("unlocked_realms")
        self.add_domain_event("realm.unlocked", {"user_id": self.user_id, "realm_id": realm_id})
        return True

    def set_realm_progress(self, realm_id: str, progress: int) -> None:
        """Progress only moves forward; unknown realms are ignored."""
        for index, entry in enumerate(self._unlocked_realms):
            if entry.realm_id == realm_id:
                clamped = max(0, min(100, progress))
                if clamped > entry.progress:
                    self._unlocked_realms[index] = replace(entry, progress=clamped)
                    self._mark_dirty("unlocked_realms")
                return

    def record_completion(self, challenge_id: str) -> bool:
        if challenge_id in self._completed_challenges:
            return False
        self._completed_challenges.add(challenge_id)
        self._mark_dirty("completed_challenges")
        return True

    def add_inventory_item(self, item: InventoryItem) -> None:
        self._inventory.append(item)
        self._mark_dirty("inventory")

    def add_achievement(self, achievement: Achievement) -> None:
        self._achievements.append(achievement)
        self._mark_dirty("achievements")

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def _serialize_field(self, name: str) -> Any:
        if name == "unlocked_realms":
            return [entry.to_dict() for entry in self._unlocked_realms]
        if name == "inventory":
            return [item.to_dict() for item in self._inventory]
        if name == "achievements":
            return [entry.to_dict() for entry in self._achievements]
        if name == "completed_challenges":
            return sorted(self._completed_challenges)
        return getattr(self, name)

    def collect_changes(self) -> Dict[str, Any]:
        """Changed fields in record format; resets the change tracker."""
        changes = {name: self._serialize_field(name) for name in sorted(self._dirty)}
        self._dirty.clear()
        return changes

    def to_record(self) -> Dict[str, Any]:
        record = {name: self._serialize_field(name) for name in CHARACTER_FIELDS}
        record["user_id"] = self.user_id
        record["created_at"] = self.created_at.isoformat()
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Character":
        return cls(
            record["user_id"],
            level=int(record.get("level", 1)),
            experience=int(record.get("experience", 0)),
            gold=int(record.get("gold", 0)),
            unlocked_realms=[UnlockedRealm.from_dict(d) for d in record.get("unlocked_realms", [])],
            inventory=[InventoryItem.from_dict(d) for d in record.get("inventory", [])],
            achievements=[Achievement.from_dict(d) for d in record.get("achievements", [])],
            completed_challenges=record.get("completed_challenges", []),
            created_at=_parse_datetime(record["created_at"]) if record.get("created_at") else None,
        )

    def __repr__(self) -> str:
        return (
            f"Character(user_id={self.user_id!r}, level={self._level}, "
            f"experience={self._experience}, gold={self._gold}, "
            f"realms={[r.realm_id for r in self._unlocked_realms]})"
        )
