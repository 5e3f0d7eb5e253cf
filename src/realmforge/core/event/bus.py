"""
EventBus: in-process publish/subscribe for engine side effects.

Purpose
-------
Decouple the progression engine from consumers of its outcomes (notifications,
leaderboards, audit trails). The engine publishes `challenge.completed`,
`character.leveled_up`, `realm.unlocked` and friends; subscribers react.

Design Notes
------------
Tiered concurrency by listener priority:

- CRITICAL / HIGH: sequential, ordered, awaited with a timeout
- NORMAL: concurrent (asyncio.gather), awaited
- LOW: fire-and-forget tracked background tasks

Each listener runs in isolation: an exception or timeout is logged and the
remaining listeners still run. Publishing never raises because of a listener.
Sync callbacks run in the default executor so they cannot block the loop.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Optional

from realmforge.core.event.registry import ListenerRegistry
from realmforge.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from realmforge.core.logging.logger import get_logger

logger = get_logger(__name__)


class EventBus:
    """
    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("character.leveled_up", on_level_up, priority=ListenerPriority.HIGH)
    >>> await bus.publish("character.leveled_up", {"user_id": "u-1", "new_level": 3})
    """

    def __init__(
        self,
        registry: Optional[ListenerRegistry] = None,
        config_manager: Any = None,
        *,
        listener_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._registry = registry or ListenerRegistry()
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self._published: dict[str, int] = {}
        self._errors: dict[str, int] = {}

        if listener_timeout_seconds is None and config_manager is not None:
            listener_timeout_seconds = config_manager.get("event_bus.listener_timeout_seconds", 5.0)
        self._timeout = float(listener_timeout_seconds if listener_timeout_seconds is not None else 5.0)

        logger.debug("EventBus initialized", extra={"listener_timeout_seconds": self._timeout})

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """Reject callbacks that cannot take exactly one payload argument."""
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            return

        params = list(sig.parameters.values())
        if len(params) != 1:
            name = getattr(callback, "__qualname__", None) or repr(callback)
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(params)} parameters for '{name}'"
            )

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
        allow_duplicates: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Returns
        -------
        str:
            The listener identifier, for unsubscribing later.

        Raises
        ------
        ValueError:
            If the callback signature is invalid.
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        if self._registry.add_listener(event_name, listener, allow_duplicates=allow_duplicates):
            logger.debug(
                "EventBus: subscribed listener",
                extra={
                    "event_name": event_name,
                    "listener_id": listener.identifier,
                    "priority": listener.priority.name,
                },
            )
        else:
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )

        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        removed = self._registry.remove_listener(event_name=event_name, identifier=identifier)
        if removed:
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        total = self._registry.clear_all()
        logger.info("EventBus: cleared all listeners", extra={"previous_listener_count": total})

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Publish an event to all matching listeners.

        Returns
        -------
        list[Any]:
            Results from CRITICAL/HIGH/NORMAL listeners (None for failures).
            LOW-tier listeners are not included.
        """
        self._published[event_name] = self._published.get(event_name, 0) + 1

        listeners = self._registry.extract_listeners_for_event(event_name)
        if not listeners:
            return []

        results: list[Any] = []

        for listener in listeners:
            if listener.priority in (ListenerPriority.CRITICAL, ListenerPriority.HIGH):
                results.append(await self._run_with_timeout(listener, event_name, data))

        normal = [lst for lst in listeners if lst.priority == ListenerPriority.NORMAL]
        if normal:
            results.extend(
                await asyncio.gather(*(self._run_listener(lst, event_name, data) for lst in normal))
            )

        for listener in listeners:
            if listener.priority == ListenerPriority.LOW:
                task = asyncio.get_running_loop().create_task(
                    self._run_listener(listener, event_name, data),
                    name=f"eventbus-low-{event_name}-{listener.identifier}",
                )
                self._background_tasks.add(task)
                task.add_done_callback(self._background_tasks.discard)

        return results

    async def _run_with_timeout(
        self, listener: EventListener, event_name: str, payload: EventPayload
    ) -> Any:
        try:
            return await asyncio.wait_for(
                self._run_listener(listener, event_name, payload), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            self._record_error(event_name)
            logger.error(
                "EventBus listener timeout",
                extra={
                    "event_name": event_name,
                    "listener_id": listener.identifier,
                    "priority": listener.priority.name,
                    "timeout_seconds": self._timeout,
                },
            )
            return None

    async def _run_listener(
        self, listener: EventListener, event_name: str, payload: EventPayload
    ) -> Any:
        try:
            if asyncio.iscoroutinefunction(listener.callback):
                return await listener.callback(payload)
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, listener.callback, payload)
        except Exception as exc:
            self._record_error(event_name)
            logger.error(
                "EventBus listener failed",
                extra={
                    "event_name": event_name,
                    "listener_id": listener.identifier,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            return None

    def _record_error(self, event_name: str) -> None:
        self._errors[event_name] = self._errors.get(event_name, 0) + 1

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    async def drain(self) -> None:
        """Wait for outstanding LOW-tier tasks. Used on shutdown and in tests."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name:
            return self._registry.get_listener_count_for_event(event_name)
        return self._registry.get_total_listener_count()

    def get_metrics_summary(self) -> dict[str, Any]:
        total = sum(self._published.values())
        errors = sum(self._errors.values())
        return {
            "total_events_published": total,
            "events_by_type": dict(self._published),
            "total_errors": errors,
            "errors_by_event": dict(self._errors),
            "total_listeners": self._registry.get_total_listener_count(),
            "background_tasks": len(self._background_tasks),
        }
