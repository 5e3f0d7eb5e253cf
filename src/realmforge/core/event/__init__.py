"""
Event system for Realmforge.

Engine outcomes are published on an EventBus instance owned by the
application container (see `realmforge.bootstrap`).
"""

from .bus import EventBus
from .registry import ListenerRegistry
from .router import EventRouter
from .types import CallbackType, EventListener, EventPayload, ListenerPriority

__all__ = [
    "EventBus",
    "EventPayload",
    "EventRouter",
    "ListenerPriority",
    "ListenerRegistry",
    "EventListener",
    "CallbackType",
]
