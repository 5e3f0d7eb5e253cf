"""
Character ORM model.

Stores one row per learner. Collections (unlocked realms, inventory,
achievements, completed challenge ids) are JSON columns holding the record
format of `realmforge.domain.models.character`.

Non-Responsibilities
--------------------
- No business logic (the Character aggregate owns it)
- No queries (SqlCharacterStore owns them)
"""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import JSON, BigInteger, CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from realmforge.core.database.base import Base, TimestampMixin


class CharacterRecord(TimestampMixin, Base):
    __tablename__ = "characters"
    __table_args__ = (
        CheckConstraint("level >= 1", name="ck_characters_level_positive"),
        CheckConstraint("experience >= 0", name="ck_characters_experience_non_negative"),
        CheckConstraint("gold >= 0", name="ck_characters_gold_non_negative"),
        Index("ix_characters_level", "level"),
    )

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    # ========================================================================
    # PROGRESSION
    # ========================================================================

    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    experience: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    gold: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # ========================================================================
    # COLLECTIONS
    # ========================================================================

    unlocked_realms: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    inventory: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    achievements: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    completed_challenges: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    def to_record(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "level": self.level,
            "experience": self.experience,
            "gold": self.gold,
            "unlocked_realms": list(self.unlocked_realms or []),
            "inventory": list(self.inventory or []),
            "achievements": list(self.achievements or []),
            "completed_challenges": list(self.completed_challenges or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<CharacterRecord(user_id={self.user_id!r}, level={self.level}, xp={self.experience})>"
