"""
Character persistence.

- CharacterStore: abstract get/create/update contract
- InMemoryCharacterStore: default in-process store
- SqlCharacterStore: SQLAlchemy store over the `characters` table
"""

from .store import CharacterStore, InMemoryCharacterStore

__all__ = ["CharacterStore", "InMemoryCharacterStore"]
