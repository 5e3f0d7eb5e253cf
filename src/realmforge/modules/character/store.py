"""
Character store contract and the in-process implementation.

Purpose
-------
The engine reads a character, mutates the aggregate, and writes back only
the fields that changed (`Character.collect_changes()`). Stores persist the
plain record format produced by `Character.to_record()`.

Implementations
---------------
- InMemoryCharacterStore: dictionary of records; used by default and in tests
- SqlCharacterStore: SQLAlchemy, see `realmforge.modules.character.sql_store`

Concurrency
-----------
Stores do not serialize callers themselves. The engine holds the user's lock
around every read-modify-write; the SQL store additionally row-locks inside
its transaction.
"""

from __future__ import annotations

import asyncio
import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.character import CHARACTER_FIELDS, Character
from realmforge.modules.shared.exceptions import CharacterNotFoundError, ValidationError

logger = get_logger(__name__)


class CharacterStore(ABC):
    """Durable character persistence."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[Character]:
        """Return the character, or None if the learner has none yet."""

    @abstractmethod
    async def create(self, user_id: str) -> Character:
        """Create a fresh character; an existing record is returned unchanged."""

    @abstractmethod
    async def update(self, user_id: str, changes: Dict[str, Any]) -> Character:
        """
        Apply a partial update atomically and return the stored character.

        Raises:
            CharacterNotFoundError: no record for `user_id`
            ValidationError: `changes` names an unknown field
        """

    async def save(self, character: Character) -> Character:
        """Persist whatever the aggregate has marked as changed."""
        changes = character.collect_changes()
        if not changes:
            return character
        return await self.update(character.user_id, changes)

    @staticmethod
    def _check_fields(changes: Dict[str, Any]) -> None:
        unknown = sorted(set(changes) - set(CHARACTER_FIELDS))
        if unknown:
            raise ValidationError("changes", f"Unknown character fields: {', '.join(unknown)}")


class InMemoryCharacterStore(CharacterStore):
    """
    Character records kept in a dictionary.

    Records are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> Optional[Character]:
        record = self._records.get(user_id)
        if record is None:
            return None
        return Character.from_record(copy.deepcopy(record))

    async def create(self, user_id: str) -> Character:
        async with self._lock:
            record = self._records.get(user_id)
            if record is None:
                record = Character.new(user_id).to_record()
                self._records[user_id] = record
                logger.info("Character record created", extra={"user_id": user_id})
            return Character.from_record(copy.deepcopy(record))

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Character:
        self._check_fields(changes)
        async with self._lock:
            record = self._records.get(user_id)
            if record is None:
                raise CharacterNotFoundError(user_id)
            record.update(copy.deepcopy(changes))
            logger.debug(
                "Character record updated",
                extra={"user_id": user_id, "fields": sorted(changes)},
            )
            return Character.from_record(copy.deepcopy(record))

    def __len__(self) -> int:
        return len(self._records)
