"""
StatsService - Aggregated user stats

Combines parallel reads from the habit and XP stores into one immutable
StatsSnapshot, and offers a local optimistic XP update for instant feedback.

Ordering: the snapshot always reflects the most recently *resolved* refresh.
An optimistic update is a prediction that the next refresh overwrites,
whichever way it moves the level.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from nuvoria import config
from nuvoria.exceptions import ValidationError, wrap_store_exception
from nuvoria.gamification.achievement_system import get_current_title, title_for_level
from nuvoria.gamification.xp_system import apply_xp_delta, calculate_level_progress, xp_for_next_level
from nuvoria.models.progression import OptimisticResult, StatsSnapshot
from nuvoria.services.observable import Observable

logger = logging.getLogger(__name__)


class StatsService:
    """
    Service for the user's aggregated stats snapshot.

    Responsibilities:
    - Debounced refresh with parallel store reads
    - Stale-but-present snapshot on fetch failures
    - Optimistic XP updates with level rollover
    """

    def __init__(
        self,
        habit_store,
        xp_store,
        identity,
        debounce_seconds: Optional[float] = None,
        fetch_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize StatsService.

        Args:
            habit_store: HabitStore implementation
            xp_store: XPStore implementation
            identity: IdentityProvider for the current user
            debounce_seconds: Minimum gap between non-forced refreshes
            fetch_timeout: Per-read timeout for store calls
            clock: Monotonic clock, injectable for tests
        """
        self.habit_store = habit_store
        self.xp_store = xp_store
        self.identity = identity
        self.debounce_seconds = (
            config.STATS_REFRESH_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.fetch_timeout = config.STORE_FETCH_TIMEOUT_SECONDS if fetch_timeout is None else fetch_timeout
        self._clock = clock

        self.snapshot: Observable[StatsSnapshot] = Observable(None, name="stats_snapshot")
        self._last_updated: Optional[float] = None
        self._loading = False
        self._closed = False
        logger.debug("StatsService initialized")

    @property
    def stats(self) -> Optional[StatsSnapshot]:
        return self.snapshot.value

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def last_updated(self) -> Optional[float]:
        """Clock value of the last successful refresh, None if there was none"""
        return self._last_updated

    # ==========================================
    # Refresh
    # ==========================================

    async def refresh_stats(self, force_refresh: bool = False) -> None:
        """
        Fetch fresh stats from the stores and replace the snapshot.

        Never raises. Non-forced calls within the debounce window of the last
        successful refresh are skipped.

        Args:
            force_refresh: Bypass the debounce window
        """
        user_id = self.identity.current_user_id
        if not user_id:
            logger.debug("No user, clearing stats")
            self.clear()
            return

        if not force_refresh and self._last_updated is not None:
            if self._clock() - self._last_updated < self.debounce_seconds:
                logger.debug("Skipping stats refresh (debounced)")
                return

        self._loading = True
        try:
            new_stats = await self._load_snapshot(user_id)
        except Exception as e:
            logger.error(f"Error refreshing stats for user {user_id}: {e}", exc_info=True)
            return
        finally:
            self._loading = False

        if new_stats is None:
            return

        if self._closed:
            logger.debug("StatsService closed during refresh, dropping result")
            return
        if self.identity.current_user_id != user_id:
            logger.debug(f"User changed during refresh for {user_id}, dropping result")
            return

        self.snapshot.set(new_stats)
        self._last_updated = self._clock()
        logger.debug(
            f"Stats refreshed for user {user_id}: level={new_stats.level}, "
            f"xp={new_stats.current_level_xp}/{new_stats.xp_for_next_level}"
        )

    async def _fetch(self, operation: str, call: Callable[[str], Awaitable[Any]], user_id: str) -> Any:
        return await asyncio.wait_for(call(user_id), timeout=self.fetch_timeout)

    async def _load_snapshot(self, user_id: str) -> Optional[StatsSnapshot]:
        """Fan out to the stores and compose a snapshot; None when every read failed"""
        operations = [
            ("get_user_xp_stats", self.xp_store.get_user_xp_stats),
            ("get_aggregated_stats", self.habit_store.get_aggregated_stats),
            ("get_active_habits_count", self.habit_store.get_active_habits_count),
            ("get_today_stats", self.habit_store.get_today_stats),
            ("get_global_streak", self.habit_store.get_global_streak),
        ]

        results = await asyncio.gather(
            *(self._fetch(name, call, user_id) for name, call in operations),
            return_exceptions=True
        )

        fetched: Dict[str, Any] = {}
        for (name, _), result in zip(operations, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                # Creating the wrapped error logs it with full context
                wrap_store_exception(result, operation=name, user_id=user_id)
                continue
            fetched[name] = result

        if not fetched:
            logger.warning(f"All stats reads failed for user {user_id}, keeping previous snapshot")
            return None

        return self._compose_snapshot(fetched, self.stats)

    def _compose_snapshot(self, fetched: Dict[str, Any], previous: Optional[StatsSnapshot]) -> StatsSnapshot:
        """Build a snapshot, falling back to the previous one for reads that failed"""
        xp_stats = fetched.get("get_user_xp_stats")
        if xp_stats is not None:
            total_xp = xp_stats.get("total_xp") or 0
            level = xp_stats.get("current_level") or 1
            current_level_xp = max(0, xp_stats.get("current_level_xp") or 0)
            next_level_xp = xp_stats.get("xp_for_next_level") or xp_for_next_level(level)
        elif previous is not None:
            total_xp = previous.total_xp
            level = previous.level
            current_level_xp = previous.current_level_xp
            next_level_xp = previous.xp_for_next_level
        else:
            total_xp = 0
            level = 1
            current_level_xp = 0
            next_level_xp = xp_for_next_level(1)

        if "get_today_stats" in fetched:
            today = fetched["get_today_stats"] or {}
            completed_today = today.get("completed") or today.get("completed_tasks") or 0
            total_today = today.get("total") or today.get("total_tasks") or 0
        else:
            completed_today = previous.completed_tasks_today if previous else 0
            total_today = previous.total_tasks_today if previous else 0

        if "get_global_streak" in fetched:
            total_streak = fetched["get_global_streak"] or 0
        else:
            total_streak = previous.total_streak if previous else 0

        if "get_active_habits_count" in fetched:
            active_habits = fetched["get_active_habits_count"] or 0
        else:
            active_habits = previous.active_habits if previous else 0

        if "get_aggregated_stats" in fetched:
            aggregated = fetched["get_aggregated_stats"] or {}
            total_completions = aggregated.get("total_completions") or 0
            total_days_tracked = aggregated.get("total_days_tracked") or 0
        else:
            total_completions = previous.total_completions if previous else 0
            total_days_tracked = previous.total_days_tracked if previous else 0

        achievement = get_current_title(level)

        return StatsSnapshot(
            title=title_for_level(level),
            level=level,
            current_level_xp=current_level_xp,
            xp_for_next_level=next_level_xp,
            level_progress=calculate_level_progress(current_level_xp, next_level_xp),
            total_streak=total_streak,
            active_habits=active_habits,
            completed_tasks_today=completed_today,
            total_tasks_today=total_today,
            total_xp=total_xp,
            total_completions=total_completions,
            total_days_tracked=total_days_tracked,
            current_achievement=achievement,
        )

    # ==========================================
    # Optimistic update
    # ==========================================

    def update_stats_optimistically(self, xp_delta: int) -> Optional[OptimisticResult]:
        """
        Apply an XP gain locally before the store confirms it.

        Overflow rolls into as many levels as it covers. The result is a
        prediction: the next refresh replaces it.

        Args:
            xp_delta: Non-negative XP to add

        Returns:
            OptimisticResult, or None when there is no snapshot yet

        Raises:
            ValidationError: If xp_delta is negative
        """
        if xp_delta < 0:
            raise ValidationError(
                message="XP delta must be non-negative",
                field="xp_delta",
                value=xp_delta,
                operation="update_stats_optimistically"
            )

        stats = self.stats
        if stats is None:
            logger.warning("Cannot update stats optimistically, no stats available")
            return None

        rolled = apply_xp_delta(stats.level, stats.current_level_xp, stats.xp_for_next_level, xp_delta)
        new_level = rolled["new_level"]
        achievement = get_current_title(new_level)

        updated = stats.model_copy(update={
            "level": new_level,
            "current_level_xp": rolled["current_level_xp"],
            "xp_for_next_level": rolled["xp_for_next_level"],
            "level_progress": calculate_level_progress(rolled["current_level_xp"], rolled["xp_for_next_level"]),
            "total_xp": stats.total_xp + xp_delta,
            "current_achievement": achievement or stats.current_achievement,
            "title": achievement.title if achievement else stats.title,
        })
        self.snapshot.set(updated)

        if new_level > stats.level:
            logger.info(f"Optimistic level up: {stats.level} -> {new_level}")

        return OptimisticResult(
            leveled_up=new_level > stats.level,
            new_level=new_level,
            previous_level=stats.level,
        )

    # ==========================================
    # Lifecycle
    # ==========================================

    def clear(self) -> None:
        """Drop the snapshot and reset the debounce window"""
        self.snapshot.set(None)
        self._last_updated = None

    def close(self) -> None:
        """Stop publishing results of refreshes still in flight"""
        self._closed = True
