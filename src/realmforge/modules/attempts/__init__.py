"""In-memory attempt lifecycle tracking."""

from realmforge.modules.attempts.tracker import (
    Attempt,
    AttemptOutcome,
    AttemptState,
    AttemptStats,
    AttemptTracker,
)

__all__ = ["Attempt", "AttemptOutcome", "AttemptState", "AttemptStats", "AttemptTracker"]
