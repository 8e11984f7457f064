"""
Level-Up Watcher

Turns level changes in the stats snapshot into level-up celebrations.
The first level seen in a session is a baseline, not a level-up.
"""

import asyncio
import logging
from typing import Callable, Optional, Set

from nuvoria import config
from nuvoria.gamification.achievement_system import get_achievement_by_level
from nuvoria.models.progression import StatsSnapshot
from nuvoria.services.celebration_queue import CelebrationQueue
from nuvoria.services.observable import Observable

logger = logging.getLogger(__name__)


class LevelUpWatcher:
    """Watches StatsSnapshot.level and feeds the celebration queue"""

    def __init__(
        self,
        stats: Observable[StatsSnapshot],
        celebrations: CelebrationQueue,
        grace_seconds: Optional[float] = None
    ):
        self.stats = stats
        self.celebrations = celebrations
        self.grace_seconds = config.LEVEL_WATCHER_GRACE_SECONDS if grace_seconds is None else grace_seconds

        self._previous_level: Optional[int] = None
        self._has_shown_for_level: Set[int] = set()
        self._initialized = False
        self._grace_handle: Optional[asyncio.TimerHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def previous_level(self) -> Optional[int]:
        return self._previous_level

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def has_shown_for_level(self) -> frozenset:
        return frozenset(self._has_shown_for_level)

    def start(self) -> None:
        """Subscribe to the stats observable and observe its current value"""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self.stats.subscribe(self.observe)
        if self.stats.value is not None:
            self.observe(self.stats.value)

    def observe(self, snapshot: Optional[StatsSnapshot]) -> None:
        """Handle a new snapshot value"""
        if snapshot is None:
            self.reset()
            return

        new_level = snapshot.level

        if self._previous_level is None:
            self._previous_level = new_level
            logger.debug(f"Level baseline set to {new_level}")
            self._schedule_initialization()
            return

        if not self._initialized:
            # Data still settling after load
            self._previous_level = new_level
            return

        if new_level > self._previous_level and new_level not in self._has_shown_for_level:
            logger.info(f"Level up detected: {self._previous_level} -> {new_level}")
            self._has_shown_for_level.add(new_level)
            self.celebrations.queue_level_up(new_level, self._previous_level, get_achievement_by_level(new_level))

        self._previous_level = new_level

    def trigger_level_up(self, new_level: int, previous_level: int) -> bool:
        """Manual trigger; skips watcher state but not the queue's de-duplication"""
        return self.celebrations.queue_level_up(new_level, previous_level, get_achievement_by_level(new_level))

    def _schedule_initialization(self) -> None:
        if self._grace_handle is not None:
            self._grace_handle.cancel()
        if self.grace_seconds <= 0:
            self._grace_handle = None
            self._initialized = True
            return
        loop = asyncio.get_running_loop()
        self._grace_handle = loop.call_later(self.grace_seconds, self._mark_initialized)

    def _mark_initialized(self) -> None:
        self._grace_handle = None
        self._initialized = True
        logger.debug(f"Level watcher initialized at level {self._previous_level}")

    def reset(self) -> None:
        """Forget the baseline so the next session starts fresh"""
        if self._grace_handle is not None:
            self._grace_handle.cancel()
            self._grace_handle = None
        self._previous_level = None
        self._has_shown_for_level.clear()
        self._initialized = False

    def close(self) -> None:
        self.reset()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
