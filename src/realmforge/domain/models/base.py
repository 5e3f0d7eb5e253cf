"""
Base domain model classes.

Purpose
-------
Foundational abstractions for rich domain models: entities with identity,
aggregate roots that record their own changes, domain events, and the small
validation helpers that value objects call from `__post_init__`.

Non-Responsibilities
--------------------
- Persistence (handled by character stores)
- Service orchestration (handled by the engine)

Design Patterns
---------------
- **Entity**: identity-based equality
- **Aggregate Root**: consistency boundary that tracks which fields changed,
  so a store can apply a partial update instead of rewriting the record
- **Domain Events**: raised by the aggregate, published by the service layer
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, List, Optional, Set


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# DOMAIN EVENTS
# ============================================================================


@dataclass
class DomainEvent:
    """
    A state change that other parts of the system may react to.

    Attributes
    ----------
    event_name : str
        Event name (e.g., "realm.unlocked")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event occurred (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=utcnow)


# ============================================================================
# ENTITY / AGGREGATE ROOT
# ============================================================================


class Entity(ABC):
    """
    Base class for entities with identity.

    Two entities with the same ID are the same entity, even if their
    attributes differ.
    """

    def __init__(self, entity_id: Hashable) -> None:
        self._id = entity_id
        self._domain_events: List[DomainEvent] = []

    @property
    def id(self) -> Hashable:
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return type(self) is type(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def add_domain_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        self._domain_events.append(DomainEvent(event_name=event_name, payload=payload))

    def clear_domain_events(self) -> List[DomainEvent]:
        """Clear and return all pending domain events."""
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    def get_pending_events(self) -> List[DomainEvent]:
        return self._domain_events.copy()


class AggregateRoot(Entity):
    """
    Entity that is the entry point for all changes to its cluster.

    Mutating methods call `_mark_dirty(field)`; `collect_changes()` returns
    the changed fields and resets the tracker.
    """

    def __init__(self, entity_id: Hashable) -> None:
        super().__init__(entity_id)
        self._dirty: Set[str] = set()

    def _mark_dirty(self, field_name: str) -> None:
        self._dirty.add(field_name)

    @property
    def has_changes(self) -> bool:
        return bool(self._dirty)

    def dirty_fields(self) -> Set[str]:
        return set(self._dirty)

    def collect_changes(self) -> Dict[str, Any]:
        changes = {name: getattr(self, name) for name in sorted(self._dirty)}
        self._dirty.clear()
        return changes


# ============================================================================
# DOMAIN MODEL VALIDATION
# ============================================================================


class DomainValidationError(Exception):
    """Raised when a domain object would violate one of its invariants."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_positive(value: int, field_name: str) -> None:
    if value <= 0:
        raise DomainValidationError(f"{field_name} must be positive, got {value}", field=field_name)


def validate_non_negative(value: float, field_name: str) -> None:
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}", field=field_name
        )


def validate_range(value: float, min_val: float, max_val: float, field_name: str) -> None:
    if not (min_val <= value <= max_val):
        raise DomainValidationError(
            f"{field_name} must be between {min_val} and {max_val}, got {value}",
            field=field_name,
        )


def validate_not_empty(value: str, field_name: str) -> None:
    if not value or not value.strip():
        raise DomainValidationError(f"{field_name} cannot be empty", field=field_name)
