"""
Pytest Configuration and Fixtures for Realmforge Tests
======================================================

Purpose
-------
Shared fixtures for the unit and integration suites: a deterministic test
realm, a controllable clock, a fully wired engine on in-memory
infrastructure, an event recorder, and testcontainers for PostgreSQL/Redis.

Architecture Notes
------------------
- Unit tests run against InMemoryCharacterStore + LocalUserLocks (fast, isolated)
- Integration tests use testcontainers and are skipped when Docker is absent
- The test realm returns fixed raw scores so scoring can be asserted exactly
"""

from __future__ import annotations

import random
from typing import Any, Dict, Generator, List, Tuple

import pytest
from testcontainers.postgres import PostgresContainer
from testcontainers.redis import RedisContainer

from realmforge.core.config.manager import ConfigManager
from realmforge.core.event.bus import EventBus
from realmforge.core.locks import LocalUserLocks
from realmforge.core.logging.logger import get_logger
from realmforge.domain.models.challenge import (
    Answer,
    Challenge,
    ChallengeContent,
    ChallengeType,
    Reward,
    ValidationResult,
)
from realmforge.modules.attempts.tracker import AttemptTracker
from realmforge.modules.challenge.service import ChallengeService
from realmforge.modules.character.store import InMemoryCharacterStore
from realmforge.modules.engine.service import GameEngine
from realmforge.modules.realms.base import BossDefinition, RealmStrategy
from realmforge.modules.realms.registry import RealmRegistry

logger = get_logger(__name__)

GROVE = "test-grove"
TIMED = f"{GROVE}:equation_balance:timed"
UNTIMED = f"{GROVE}:equation_balance:untimed"
ADVANCED = f"{GROVE}:gas_test:advanced"
GOGGLES = f"{GROVE}:gas_test:goggles"

ENGINE_EVENTS = (
    "challenge.started",
    "challenge.completed",
    "challenge.abandoned",
    "character.initialized",
    "character.leveled_up",
    "realm.unlocked",
    "boss.resolved",
)


# ============================================================================
# TEST DOUBLES
# ============================================================================


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class GroveRealm(RealmStrategy):
    """
    Deterministic realm: "correct" scores 100, "partial" scores 50 (incorrect),
    anything else scores 0.
    """

    realm_id = GROVE
    name = "Test Grove"
    description = "Fixed-score realm for engine tests"
    bosses = (
        BossDefinition(
            boss_id="grove-warden",
            score=90,
            special_rewards=(
                Reward.badge("warden_slayer", "Warden Slayer"),
                Reward.gold(25, "Warden hoard"),
            ),
            unlocked_content=("grove-depths",),
        ),
    )

    def _build_catalogue(self) -> List[Challenge]:
        content = ChallengeContent(
            question="Type 'correct'",
            correct_answer="correct",
            explanation="The answer is 'correct'.",
            hints=("Starts with c", "Ends with t"),
        )

        def make(challenge_id: str, challenge_type: ChallengeType, difficulty: int, **kwargs: Any) -> Challenge:
            return Challenge(
                id=challenge_id,
                realm_id=GROVE,
                type=challenge_type,
                difficulty=difficulty,
                title=challenge_id.rsplit(":", 1)[-1].title(),
                description="Grove challenge",
                content=content,
                **kwargs,
            )

        return [
            make(TIMED, ChallengeType.EQUATION_BALANCE, 2, time_limit=60),
            make(UNTIMED, ChallengeType.EQUATION_BALANCE, 1),
            make(ADVANCED, ChallengeType.GAS_TEST, 3, time_limit=60, required_level=5),
            make(
                GOGGLES,
                ChallengeType.GAS_TEST,
                1,
                rewards=(Reward.item("lab_goggles", "Lab Goggles"),),
            ),
        ]

    async def validate_answer(self, challenge: Challenge, answer: Answer) -> ValidationResult:
        response = str(answer.response).strip().lower()
        if response == "correct":
            return ValidationResult(is_correct=True, score=100, feedback="Correct!")
        if response == "partial":
            return ValidationResult(is_correct=False, score=50, feedback="Half right.")
        return ValidationResult(is_correct=False, score=0, feedback="Incorrect.")


class EventRecorder:
    """Collects (event_name, payload) pairs published on a bus."""

    def __init__(self, bus: EventBus, names: Tuple[str, ...] = ENGINE_EVENTS) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        for name in names:
            bus.subscribe(name, self._listener(name), identifier=f"recorder:{name}")

    def _listener(self, name: str):
        async def handler(payload: Dict[str, Any]) -> None:
            self.events.append((name, payload))

        return handler

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> List[Dict[str, Any]]:
        return [payload for event_name, payload in self.events if event_name == name]


# ============================================================================
# CONFIGURATION
# ============================================================================


@pytest.fixture(autouse=True)
def balance_config() -> Generator[None, None, None]:
    """Fresh balance config per test; overrides never leak between tests."""
    ConfigManager.initialize()
    yield
    ConfigManager.clear_overrides()


# ============================================================================
# ENGINE FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryCharacterStore:
    return InMemoryCharacterStore()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus(listener_timeout_seconds=1.0)


@pytest.fixture
def recorder(event_bus: EventBus) -> EventRecorder:
    return EventRecorder(event_bus)


@pytest.fixture
def registry() -> RealmRegistry:
    return RealmRegistry([GroveRealm(random.Random(1))])


@pytest.fixture
def tracker(clock: FakeClock) -> AttemptTracker:
    return AttemptTracker(ttl_seconds=3600, stats_window=50, clock=clock)


@pytest.fixture
def analytics(mocker):
    recorder = mocker.MagicMock()
    recorder.record_attempt = mocker.AsyncMock(return_value=None)
    return recorder


@pytest.fixture
def engine(store, registry, tracker, event_bus, analytics) -> GameEngine:
    return GameEngine(
        store,
        registry,
        tracker,
        LocalUserLocks(wait_timeout=2.0),
        ConfigManager,
        event_bus,
        analytics=analytics,
        starter_realm_id=GROVE,
        analytics_timeout=0.5,
    )


@pytest.fixture
def service(engine: GameEngine) -> ChallengeService:
    return ChallengeService(engine, random.Random(3))


# ============================================================================
# TESTCONTAINERS FIXTURES (Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    PostgreSQL testcontainer with the asyncpg driver.

    Scope: session (container persists across all tests)
    """
    logger.info("Starting PostgreSQL testcontainer...")
    container = PostgresContainer(image="postgres:17-alpine", driver="asyncpg")
    try:
        container.start()
    except Exception as exc:
        pytest.skip(f"Docker is not available: {exc}")

    yield container

    logger.info("Stopping PostgreSQL testcontainer...")
    container.stop()


@pytest.fixture(scope="session")
def redis_container() -> Generator[RedisContainer, None, None]:
    """
    Redis testcontainer.

    Scope: session (container persists across all tests)
    """
    logger.info("Starting Redis testcontainer...")
    container = RedisContainer(image="redis:7-alpine")
    try:
        container.start()
    except Exception as exc:
        pytest.skip(f"Docker is not available: {exc}")

    yield container

    logger.info("Stopping Redis testcontainer...")
    container.stop()


@pytest.fixture
def redis_url(redis_container: RedisContainer) -> str:
    host = redis_container.get_container_host_ip()
    port = redis_container.get_exposed_port(6379)
    return f"redis://{host}:{port}/0"
