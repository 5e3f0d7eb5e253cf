"""
SQLAlchemy-backed character store.

Every write runs in one `DatabaseService.get_transaction()` block and locks
the row with SELECT ... FOR UPDATE before applying the partial update, so
concurrent writers in other processes are serialized by the database.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional, Type

from realmforge.core.database.service import DatabaseService
from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.character import Character
from realmforge.modules.character.model import CharacterRecord
from realmforge.modules.character.store import CharacterStore
from realmforge.modules.shared.exceptions import CharacterNotFoundError

logger = get_logger(__name__)


class SqlCharacterStore(CharacterStore):
    def __init__(self, database_service: Type[DatabaseService] = DatabaseService) -> None:
        self._db = database_service

    async def get(self, user_id: str) -> Optional[Character]:
        async with self._db.get_session() as session:
            row = await session.get(CharacterRecord, user_id)
            return Character.from_record(row.to_record()) if row else None

    async def create(self, user_id: str) -> Character:
        async with self._db.get_transaction() as session:
            row = await self._db.get_locked_entity(session, CharacterRecord, user_id)
            if row is None:
                fresh = Character.new(user_id).to_record()
                row = CharacterRecord(
                    user_id=user_id,
                    level=fresh["level"],
                    experience=fresh["experience"],
                    gold=fresh["gold"],
                    unlocked_realms=[],
                    inventory=[],
                    achievements=[],
                    completed_challenges=[],
                )
                session.add(row)
                await session.flush()
                await session.refresh(row)
                logger.info("Character row created", extra={"user_id": user_id})
            return Character.from_record(row.to_record())

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Character:
        self._check_fields(changes)
        start = time.monotonic()

        async with self._db.get_transaction() as session:
            row = await self._db.get_locked_entity(session, CharacterRecord, user_id)
            if row is None:
                raise CharacterNotFoundError(user_id)

            for name, value in changes.items():
                setattr(row, name, value)
            await session.flush()
            await session.refresh(row)
            character = Character.from_record(row.to_record())

        logger.debug(
            "Character row updated",
            extra={
                "user_id": user_id,
                "fields": sorted(changes),
                "latency_ms": round((time.monotonic() - start) * 1000, 2),
            },
        )
        return character
