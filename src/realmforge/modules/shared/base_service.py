"""
Base Service Foundation

Purpose
-------
Foundational class for the engine-level services (GameEngine,
ChallengeService). Services implement business rules, coordinate the
character store, and emit domain events.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access
- Event emission helpers
- Input validation that raises domain `ValidationError`

What this class does NOT do:
- Manage database transactions (the character store does)
- Contain realm-specific rules (realm strategies do)

Usage
-----
    class GameEngine(BaseService):
        def __init__(self, store, registry, config_manager, event_bus, logger):
            super().__init__(config_manager, event_bus, logger)
            self._store = store
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from realmforge.modules.shared.exceptions import ValidationError, get_error_severity, should_alert

if TYPE_CHECKING:
    from logging import Logger

    from realmforge.core.config.manager import ConfigManager
    from realmforge.core.event.bus import EventBus


class BaseService:
    """
    Base class for domain services.

    Args:
        config_manager: Balance configuration access (anything with `get(key, default)`)
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(self, key: str, default: Optional[Any] = None, required: bool = False) -> Any:
        """
        Retrieve a configuration value.

        Raises:
            ValidationError: If required=True and the key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ValidationError(key, f"Required configuration key '{key}' is missing")
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Publish a domain event; listener failures are isolated by the bus."""
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        """Log at ERROR for alert-worthy failures, WARNING for expected domain errors."""
        log = self.log.error if should_alert(error) else self.log.warning
        log(
            f"Service error during {operation}: {error}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "severity": get_error_severity(error).value,
                **context,
            },
        )

    def validate_identifier(self, value: Any, name: str) -> str:
        """Require a non-empty string identifier and return it stripped."""
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(name, f"{name} must be a non-empty string")
        return value.strip()
