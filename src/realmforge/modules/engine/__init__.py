"""Challenge lifecycle and progression orchestration."""

from realmforge.modules.engine.service import GameEngine, ScoringPolicy

__all__ = ["GameEngine", "ScoringPolicy"]
