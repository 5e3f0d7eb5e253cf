"""
GameEngine: challenge lifecycle and progression orchestration.

Purpose
-------
Own the path from "learner starts a challenge" to "character state updated":
eligibility, realm dispatch, uniform scoring, rewards, experience, level-ups
and realm unlocks.

Responsibilities
----------------
- Initialize characters with the starter realm (idempotent)
- Resolve challenges globally and enforce level and realm-unlock gates
- Track attempts (start, hint, submit, abandon) through the AttemptTracker
- Score submissions: realm raw score -> speed, difficulty and hint adjustments
- Apply rewards, experience, realm progress and level-ups in one
  read-modify-write under the user's lock
- Forward results to analytics without ever failing the caller
- Publish `challenge.*`, `character.*`, `realm.unlocked` and `boss.resolved`

Non-Responsibilities
--------------------
- Realm rules (RealmStrategy implementations)
- Persistence technology (CharacterStore implementations)
- Generation policy and caller-facing composition (ChallengeService)

Concurrency
-----------
- `AttemptTracker.end` is the single gate for a submission: of two concurrent
  submits for the same attempt, one proceeds and the other raises
  `NoActiveAttemptError`.
- A submission that raises after `end` puts the attempt back with its
  start time and hints, so nothing is lost on a lock timeout.
- Every character mutation happens inside `locks.hold(user_id)`.
- Events are published after the lock is released.

Design Notes
------------
- The client's `time_elapsed` is untrusted and capped at the attempt's real
  age; the hint count is the larger of the tracked and reported counts,
  capped at the number of hints the challenge has.
- The engine never reads `ValidationResult.metadata`.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from realmforge.core.event.bus import EventBus
from realmforge.core.locks import UserLockProvider
from realmforge.core.logging.logger import LogContext, get_logger
from realmforge.domain.models.base import DomainEvent
from realmforge.domain.models.challenge import (
    Answer,
    BossResult,
    Challenge,
    ChallengeResult,
    ChallengeType,
    LevelUpResult,
    RealmInfo,
)
from realmforge.domain.models.character import Character
from realmforge.modules.analytics.collaborators import (
    AnalyticsRecorder,
    DifficultyAdvisor,
    StaticDifficultyAdvisor,
)
from realmforge.modules.attempts.tracker import Attempt, AttemptState, AttemptTracker
from realmforge.modules.character.store import CharacterStore
from realmforge.modules.progression.rewards import (
    RewardPolicy,
    apply_rewards,
    calculate_rewards,
    level_up_rewards,
    realms_unlocked_at,
    total_gold,
    unclaimed_rewards,
)
from realmforge.modules.realms.base import RealmStrategy
from realmforge.modules.realms.registry import RealmRegistry
from realmforge.modules.shared import formulas
from realmforge.modules.shared.base_service import BaseService
from realmforge.modules.shared.exceptions import (
    ChallengeNotFoundError,
    CharacterNotFoundError,
    CharacterNotInitializedError,
    HintNotAvailableError,
    LevelRequirementError,
    NoActiveAttemptError,
    RealmLockedError,
    ValidationError,
)


@dataclass(frozen=True)
class ScoringPolicy:
    time_bonus_max: float = 0.5
    time_bonus_weight: float = 0.5
    difficulty_step: float = 0.1
    hint_penalty: float = 0.1
    min_correct_score: int = 1
    max_raw_score: int = 100

    @classmethod
    def from_config(cls, config_manager: Any) -> "ScoringPolicy":
        get = config_manager.get
        return cls(
            time_bonus_max=float(get("scoring.time_bonus_max", 0.5)),
            time_bonus_weight=float(get("scoring.time_bonus_weight", 0.5)),
            difficulty_step=float(get("scoring.difficulty_step", 0.1)),
            hint_penalty=float(get("scoring.hint_penalty", 0.1)),
            min_correct_score=int(get("scoring.min_correct_score", 1)),
            max_raw_score=int(get("scoring.max_raw_score", 100)),
        )

    def final_score(
        self,
        raw_score: int,
        *,
        is_correct: bool,
        difficulty: int,
        hints_used: int,
        time_elapsed: float,
        time_limit: Optional[float],
    ) -> int:
        return formulas.calculate_final_score(
            max(0, min(self.max_raw_score, raw_score)),
            is_correct=is_correct,
            difficulty=difficulty,
            hints_used=hints_used,
            time_elapsed=time_elapsed,
            time_limit=time_limit,
            time_bonus_max=self.time_bonus_max,
            time_bonus_weight=self.time_bonus_weight,
            difficulty_step=self.difficulty_step,
            hint_penalty=self.hint_penalty,
            min_correct_score=self.min_correct_score,
        )


class GameEngine(BaseService):
    """
    Root orchestrator of the progression core.

    Args:
        store: Character persistence
        registry: Eagerly populated realm registry
        tracker: Live attempt bookkeeping
        locks: Per-user lock provider
        config_manager: Balance configuration (`get(key, default)`)
        event_bus: Event bus for engine events
        analytics: Best-effort attempt recorder
        difficulty_advisor: Adaptive difficulty; defaults to the level-based advisor
        starter_realm_id: Realm unlocked on initialization
        analytics_timeout: Upper bound on one analytics call, in seconds
    """

    def __init__(
        self,
        store: CharacterStore,
        registry: RealmRegistry,
        tracker: AttemptTracker,
        locks: UserLockProvider,
        config_manager: Any,
        event_bus: EventBus,
        *,
        analytics: Optional[AnalyticsRecorder] = None,
        difficulty_advisor: Optional[DifficultyAdvisor] = None,
        starter_realm_id: str = "mathmage-trials",
        analytics_timeout: float = 2.0,
    ) -> None:
        super().__init__(config_manager, event_bus, get_logger(__name__))
        self._store = store
        self._registry = registry
        self._tracker = tracker
        self._locks = locks
        self._analytics = analytics
        self._advisor = difficulty_advisor or StaticDifficultyAdvisor(store)
        self._starter_realm_id = starter_realm_id
        self._analytics_timeout = analytics_timeout

        self._scoring = ScoringPolicy.from_config(config_manager)
        self._rewards = RewardPolicy.from_config(config_manager)
        self._background: Set[asyncio.Task[None]] = set()

    @property
    def registry(self) -> RealmRegistry:
        return self._registry

    @property
    def tracker(self) -> AttemptTracker:
        return self._tracker

    # ========================================================================
    # CHARACTERS
    # ========================================================================

    async def initialize_character(self, user_id: str) -> Character:
        """
        Create the character if absent and unlock the starter realm.

        Idempotent: a second call returns the existing character and never
        adds a second starter unlock.
        """
        user_id = self.validate_identifier(user_id, "user_id")

        async with self._locks.hold(user_id):
            character = await self._store.get(user_id)
            created = character is None
            if character is None:
                character = await self._store.create(user_id)

            character.unlock_realm(self._starter_realm_id)
            events = character.clear_domain_events()
            character = await self._store.save(character)

        if created:
            self.log_operation("initialize_character", user_id=user_id, starter_realm_id=self._starter_realm_id)
            await self.emit_event("character.initialized", {"user_id": user_id})
        await self._publish_domain_events(events)
        return character

    async def get_character(self, user_id: str) -> Character:
        character = await self._store.get(user_id)
        if character is None:
            raise CharacterNotFoundError(user_id)
        return character

    async def unlock_realm(self, user_id: str, realm_id: str) -> bool:
        """Append an unlock record unless the realm is already unlocked."""
        async with self._locks.hold(user_id):
            character = await self.get_character(user_id)
            unlocked = character.unlock_realm(realm_id)
            events = character.clear_domain_events()
            await self._store.save(character)

        await self._publish_domain_events(events)
        return unlocked

    # ========================================================================
    # REALMS
    # ========================================================================

    async def get_current_realm(self, user_id: str) -> RealmInfo:
        """
        The most recently unlocked registered realm that is not complete,
        else the first unlocked registered realm.

        Raises:
            CharacterNotFoundError: unknown user
            CharacterNotInitializedError: no unlocked (registered) realm
        """
        character = await self.get_character(user_id)
        unlocked = [entry for entry in character.unlocked_realms if entry.realm_id in self._registry]
        if not unlocked:
            raise CharacterNotInitializedError(user_id)

        # sorted() is stable, so equal timestamps keep unlock order
        by_recency = list(reversed(sorted(unlocked, key=lambda entry: entry.unlocked_at)))
        current = next((entry for entry in by_recency if entry.progress < 100), unlocked[0])
        return self._registry.get(current.realm_id).get_realm_info(is_unlocked=True)

    async def get_realm_info(self, user_id: str, realm_id: str) -> RealmInfo:
        realm = self._registry.get(realm_id)
        character = await self.get_character(user_id)
        return realm.get_realm_info(is_unlocked=character.has_unlocked(realm_id))

    async def list_realms(self, user_id: str) -> List[RealmInfo]:
        character = await self.get_character(user_id)
        return [realm.get_realm_info(is_unlocked=character.has_unlocked(realm.realm_id)) for realm in self._registry]

    async def get_recommended_difficulty(self, user_id: str, challenge_type: Optional[ChallengeType] = None) -> int:
        """Advisor's difficulty clamped to 1..5; falls back to the level rule if the advisor fails."""
        character = await self.get_character(user_id)
        try:
            difficulty = await self._advisor.recommended_difficulty(user_id, challenge_type)
        except Exception as exc:
            self.log_error("get_recommended_difficulty", exc, user_id=user_id)
            return StaticDifficultyAdvisor.for_level(character.level)

        low = int(self.get_config("difficulty.min", 1))
        high = int(self.get_config("difficulty.max", 5))
        return max(low, min(high, int(difficulty)))

    # ========================================================================
    # CHALLENGE LIFECYCLE
    # ========================================================================

    async def check_eligibility(self, user_id: str, challenge_id: str) -> Tuple[RealmStrategy, Challenge, Character]:
        """
        Resolve a challenge and verify the learner may attempt it.

        Raises:
            ChallengeNotFoundError: no registered realm owns `challenge_id`
            CharacterNotFoundError: unknown user
            LevelRequirementError: level below the challenge's requirement
            RealmLockedError: owning realm not unlocked
        """
        found = self._registry.find_challenge(challenge_id)
        if found is None:
            raise ChallengeNotFoundError(challenge_id)
        realm, challenge = found

        character = await self.get_character(user_id)
        if character.level < challenge.required_level:
            raise LevelRequirementError(challenge.required_level, character.level)
        if not character.has_unlocked(realm.realm_id):
            raise RealmLockedError(realm.realm_id)
        return realm, challenge, character

    async def start_challenge(self, user_id: str, challenge_id: str) -> Challenge:
        """Check eligibility and open (or restart) the attempt."""
        _, challenge, _ = await self.check_eligibility(user_id, challenge_id)
        await self._tracker.start(user_id, challenge.id)

        self.log_operation("start_challenge", user_id=user_id, challenge_id=challenge.id, realm_id=challenge.realm_id)
        await self.emit_event("challenge.started", {"user_id": user_id, **challenge.summary()})
        return challenge

    async def reveal_hint(self, user_id: str, challenge_id: str, hint_index: int) -> str:
        """
        Return hint `hint_index` and record it against the live attempt.

        Raises:
            HintNotAvailableError: index outside the challenge's hints
            NoActiveAttemptError: no live attempt
        """
        _, challenge, _ = await self.check_eligibility(user_id, challenge_id)
        if isinstance(hint_index, bool) or not isinstance(hint_index, int) or not 0 <= hint_index < challenge.hint_count:
            raise HintNotAvailableError(challenge_id, hint_index)

        await self._tracker.touch(user_id, challenge_id, hint_index)
        return challenge.hints[hint_index]

    async def abandon_challenge(self, user_id: str, challenge_id: str) -> bool:
        attempt = await self._tracker.abandon(user_id, challenge_id)
        if attempt is None:
            return False
        await self.emit_event("challenge.abandoned", {"user_id": user_id, "challenge_id": challenge_id})
        return True

    async def get_active_attempt(self, user_id: str, challenge_id: str) -> Optional[Attempt]:
        return await self._tracker.get(user_id, challenge_id)

    async def submit_answer(self, user_id: str, challenge_id: str, answer: Answer) -> ChallengeResult:
        """
        Validate, score and reward one submission.

        Raises:
            ValidationError: empty response
            NoActiveAttemptError: not started, already submitted, abandoned or expired
            plus everything `check_eligibility` raises
        """
        async with LogContext(user_id=user_id, challenge_id=challenge_id, operation="submit_answer"):
            started = time.perf_counter()
            realm, challenge, _ = await self.check_eligibility(user_id, challenge_id)
            if not answer.has_response:
                raise ValidationError("response", "An answer response is required")

            attempt = await self._tracker.end(user_id, challenge_id)
            if attempt is None:
                raise NoActiveAttemptError(user_id, challenge_id)

            answer = answer.with_bookkeeping(
                time_elapsed=min(answer.time_elapsed, self._tracker.elapsed(attempt)),
                hints_used=min(challenge.hint_count, max(attempt.hints_used, answer.hints_used)),
            )

            try:
                validation = await realm.validate_answer(challenge, answer)
                score = self._scoring.final_score(
                    validation.score,
                    is_correct=validation.is_correct,
                    difficulty=challenge.difficulty,
                    hints_used=answer.hints_used,
                    time_elapsed=answer.time_elapsed,
                    time_limit=challenge.time_limit,
                )
                rewards = calculate_rewards(challenge, validation, answer.time_elapsed, self._rewards)
                validation = validation.with_score(score)

                experience = (
                    formulas.calculate_experience_gain(score, challenge.difficulty, self._rewards.experience_divisor)
                    if validation.is_correct
                    else 0
                )

                async with self._locks.hold(user_id):
                    character = await self.get_character(user_id)
                    apply_rewards(character, rewards)
                    character.add_experience(experience)
                    if validation.is_correct:
                        self._record_progress(character, realm, challenge)
                    level_up = self._apply_level_up(character)
                    events = character.clear_domain_events()
                    await self._store.save(character)
            except Exception as exc:
                # Nothing was persisted; the learner may resubmit
                await self._tracker.restore(attempt)
                self.log_error("submit_answer", exc, user_id=user_id, challenge_id=challenge_id)
                raise

            attempt.transition(AttemptState.COMPLETED)
            result = ChallengeResult(
                challenge_id=challenge.id,
                user_id=user_id,
                validation=validation,
                rewards=tuple(rewards),
                experience_gained=experience,
                gold_earned=total_gold(rewards),
                score=score,
                answer=answer,
                level_up=level_up if level_up.leveled_up else None,
            )

            await self._tracker.record_outcome(
                user_id,
                challenge.id,
                score=score,
                time_elapsed=answer.time_elapsed,
                is_correct=validation.is_correct,
            )
            self._schedule_analytics(user_id, challenge, answer, result)

            self.log.info(
                "Answer submitted",
                extra={
                    "user_id": user_id,
                    "challenge_id": challenge.id,
                    "realm_id": realm.realm_id,
                    "is_correct": validation.is_correct,
                    "score": score,
                    "experience_gained": experience,
                    "gold_earned": result.gold_earned,
                    "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

        await self.emit_event(
            "challenge.completed",
            {
                "user_id": user_id,
                **challenge.summary(),
                "is_correct": validation.is_correct,
                "score": score,
                "experience_gained": experience,
                "gold_earned": result.gold_earned,
            },
        )
        await self._publish_domain_events(events)
        return result

    # ========================================================================
    # LEVELING
    # ========================================================================

    async def level_up(self, user_id: str) -> LevelUpResult:
        """
        Recompute the level from experience and grant what it unlocks.

        Newly eligible realms are unlocked even without a level change; the
        gold bonus and badges are only granted for levels actually gained.
        """
        async with self._locks.hold(user_id):
            character = await self.get_character(user_id)
            result = self._apply_level_up(character)
            events = character.clear_domain_events()
            await self._store.save(character)

        await self._publish_domain_events(events)
        return result

    def _apply_level_up(self, character: Character) -> LevelUpResult:
        """In-memory level evaluation; caller holds the user's lock and saves."""
        previous, new = character.sync_level(self._rewards.xp_per_level_unit)

        unlocked = tuple(
            realm_id
            for realm_id in realms_unlocked_at(new, self._rewards.realm_unlocks)
            if character.unlock_realm(realm_id)
        )
        bonus = level_up_rewards(previous, new, self._rewards)
        apply_rewards(character, bonus)

        if new > previous:
            self.log_operation(
                "level_up",
                user_id=character.user_id,
                previous_level=previous,
                new_level=new,
                unlocked_realms=list(unlocked),
            )
        return LevelUpResult(
            previous_level=previous,
            new_level=new,
            unlocked_realms=unlocked,
            bonus_rewards=tuple(bonus),
        )

    def _record_progress(self, character: Character, realm: RealmStrategy, challenge: Challenge) -> None:
        character.record_completion(challenge.id)
        catalogue = realm.get_challenges()
        completed = sum(1 for entry in catalogue if entry.id in character.completed_challenges)
        character.set_realm_progress(realm.realm_id, formulas.calculate_realm_progress(completed, len(catalogue)))

    # ========================================================================
    # BOSSES
    # ========================================================================

    async def process_boss_challenge(self, user_id: str, realm_id: str, boss_id: str) -> BossResult:
        """
        Delegate to the realm; a defeated boss's special rewards are applied.

        Badges, items and unlocks the character already holds are not granted
        again on a rematch; xp and gold are. Experience from the rewards runs
        through the same level-up evaluation as a challenge submission.

        Raises:
            RealmNotFoundError: realm not registered
            BossNotFoundError: the realm has no such boss
        """
        realm = self._registry.get(realm_id)
        result = await realm.process_boss_challenge(user_id, boss_id)

        events: List[DomainEvent] = []
        if result.defeated and result.special_rewards:
            async with self._locks.hold(user_id):
                character = await self.get_character(user_id)
                apply_rewards(character, unclaimed_rewards(character, result.special_rewards))
                self._apply_level_up(character)
                events = character.clear_domain_events()
                await self._store.save(character)

        self.log_operation("process_boss_challenge", user_id=user_id, realm_id=realm_id, boss_id=boss_id)
        await self.emit_event(
            "boss.resolved",
            {
                "user_id": user_id,
                "realm_id": realm_id,
                "boss_id": boss_id,
                "defeated": result.defeated,
                "score": result.score,
            },
        )
        await self._publish_domain_events(events)
        return result

    # ========================================================================
    # SIDE CHANNELS
    # ========================================================================

    def _schedule_analytics(self, user_id: str, challenge: Challenge, answer: Answer, result: ChallengeResult) -> None:
        if self._analytics is None:
            return
        task = asyncio.create_task(self._record_analytics(user_id, challenge, answer, result))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _record_analytics(
        self,
        user_id: str,
        challenge: Challenge,
        answer: Answer,
        result: ChallengeResult,
    ) -> None:
        assert self._analytics is not None
        try:
            await asyncio.wait_for(
                self._analytics.record_attempt(user_id, challenge.id, challenge, answer, result),
                timeout=self._analytics_timeout,
            )
        except asyncio.TimeoutError:
            self.log.warning(
                "Analytics recording timed out",
                extra={"user_id": user_id, "challenge_id": challenge.id, "timeout_seconds": self._analytics_timeout},
            )
        except Exception as exc:
            # Analytics never fails a submission
            self.log_error("record_analytics", exc, user_id=user_id, challenge_id=challenge.id)

    async def drain(self) -> None:
        """Wait for pending analytics tasks."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _publish_domain_events(self, events: List[DomainEvent]) -> None:
        for event in events:
            await self.emit_event(event.event_name, dict(event.payload))

    def health_snapshot(self) -> Dict[str, Any]:
        return {
            "realms": self._registry.realm_ids(),
            "active_attempts": self._tracker.active_count(),
            "pending_analytics": len(self._background),
            "sweeper_running": self._tracker.sweeper_running,
        }
