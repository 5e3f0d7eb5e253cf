"""
Realmforge - Application Wiring
===============================

Builds the object graph once, at start-up:

- ConfigManager (balance YAML) and the event bus
- Realm registry, eagerly populated with every realm
- Character store (in-memory unless one is supplied, SQL when configured)
- Per-user locks (Redis when `REDIS_URL` is set, in-process otherwise)
- Attempt tracker, GameEngine and ChallengeService

`Application.start()` starts the attempt sweeper; `Application.shutdown()`
stops it and releases everything the application owns.
"""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from realmforge.core.config.config import Config
from realmforge.core.config.manager import ConfigManager
from realmforge.core.database.service import DatabaseService
from realmforge.core.event.bus import EventBus
from realmforge.core.locks import LocalUserLocks, RedisUserLocks, UserLockProvider
from realmforge.core.logging.logger import get_logger, get_logging_health
from realmforge.modules.analytics.collaborators import (
    AnalyticsRecorder,
    DifficultyAdvisor,
    LoggingAnalyticsRecorder,
)
from realmforge.modules.attempts.tracker import AttemptTracker
from realmforge.modules.challenge.service import ChallengeService
from realmforge.modules.character.sql_store import SqlCharacterStore
from realmforge.modules.character.store import CharacterStore, InMemoryCharacterStore
from realmforge.modules.engine.service import GameEngine
from realmforge.modules.realms import RealmStrategy, default_realms
from realmforge.modules.realms.registry import RealmRegistry

logger = get_logger(__name__)


# ============================================================================
# Application
# ============================================================================


@dataclass
class Application:
    config_manager: Any
    event_bus: EventBus
    registry: RealmRegistry
    store: CharacterStore
    locks: UserLockProvider
    tracker: AttemptTracker
    engine: GameEngine
    service: ChallengeService
    sweep_interval_seconds: float = 300.0
    owns_database: bool = False
    _started: bool = field(default=False, init=False, repr=False)

    async def start(self) -> None:
        if self._started:
            return
        self.tracker.start_sweeper(self.sweep_interval_seconds)
        self._started = True
        logger.info(
            "Application started",
            extra={"realms": self.registry.realm_ids(), "sweep_interval_seconds": self.sweep_interval_seconds},
        )

    async def shutdown(self) -> None:
        """Stop background work and release owned resources. Safe to call twice."""
        await self.tracker.stop_sweeper()
        await self.engine.drain()
        await self.event_bus.drain()

        if isinstance(self.locks, RedisUserLocks):
            await self.locks.close()
        if self.owns_database:
            await DatabaseService.shutdown()
            self.owns_database = False

        self._started = False
        logger.info("Application shut down")

    def health(self) -> Dict[str, Any]:
        """Combined snapshot of the engine, config, event bus and logging pipeline."""
        return {
            "started": self._started,
            "engine": self.engine.health_snapshot(),
            "config": self.config_manager.health_snapshot(),
            "events": self.event_bus.get_metrics_summary(),
            "logging": asdict(get_logging_health()),
        }

    async def __aenter__(self) -> "Application":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()


# ============================================================================
# Builders
# ============================================================================


def build_locks(redis_url: Optional[str] = None, wait_timeout: Optional[float] = None) -> UserLockProvider:
    """Redis-backed locks when a URL is configured, in-process locks otherwise."""
    redis_url = Config.REDIS_URL if redis_url is None else redis_url
    wait_timeout = Config.USER_LOCK_TIMEOUT_SECONDS if wait_timeout is None else wait_timeout

    if redis_url:
        logger.info("Using Redis user locks")
        return RedisUserLocks.from_url(redis_url, wait_timeout=wait_timeout)
    return LocalUserLocks(wait_timeout=wait_timeout)


def build_application(
    *,
    store: Optional[CharacterStore] = None,
    realms: Optional[Iterable[RealmStrategy]] = None,
    locks: Optional[UserLockProvider] = None,
    tracker: Optional[AttemptTracker] = None,
    event_bus: Optional[EventBus] = None,
    config_manager: Any = ConfigManager,
    config_dir: Optional[Path] = None,
    analytics: Optional[AnalyticsRecorder] = None,
    difficulty_advisor: Optional[DifficultyAdvisor] = None,
    rng: Optional[random.Random] = None,
) -> Application:
    """
    Assemble an Application. Every collaborator can be injected; the rest
    come from Config and ConfigManager.
    """
    if config_dir is not None:
        config_manager.initialize(config_dir)

    event_bus = event_bus or EventBus(config_manager=config_manager)
    registry = RealmRegistry(default_realms(rng) if realms is None else realms)
    store = store or InMemoryCharacterStore()
    locks = locks or build_locks()
    tracker = tracker or AttemptTracker(
        ttl_seconds=Config.ATTEMPT_TTL_SECONDS,
        stats_window=int(config_manager.get("attempts.stats_window", 500)),
    )

    engine = GameEngine(
        store,
        registry,
        tracker,
        locks,
        config_manager,
        event_bus,
        analytics=analytics or LoggingAnalyticsRecorder(),
        difficulty_advisor=difficulty_advisor,
        starter_realm_id=Config.STARTER_REALM_ID,
        analytics_timeout=Config.ANALYTICS_TIMEOUT_SECONDS,
    )

    logger.info(
        "Application built",
        extra={"store": type(store).__name__, "locks": type(locks).__name__, "realm_count": len(registry)},
    )
    return Application(
        config_manager=config_manager,
        event_bus=event_bus,
        registry=registry,
        store=store,
        locks=locks,
        tracker=tracker,
        engine=engine,
        service=ChallengeService(engine, rng),
        sweep_interval_seconds=float(Config.ATTEMPT_SWEEP_INTERVAL_SECONDS),
    )


async def build_application_from_config(**overrides: Any) -> Application:
    """
    Validate Config and build an Application backed by the configured
    database (when `DATABASE_URL` is set).
    """
    Config.validate()

    owns_database = False
    if "store" not in overrides and Config.DATABASE_URL:
        await DatabaseService.initialize(Config.DATABASE_URL, create_schema=True)
        overrides["store"] = SqlCharacterStore()
        owns_database = True

    app = build_application(**overrides)
    app.owns_database = owns_database
    return app
