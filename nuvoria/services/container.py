"""
Service Container - Composition root

Owns every stateful progression service for the app process. Services are
lazy-loaded on first access. Per-session state (celebration queue, level-up
watcher and their de-duplication sets) is rebuilt whenever a user signs in
and discarded when they sign out.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Dependency injection container for the progression services.

    External collaborators (stores and identity provider) are injected.
    """

    # External collaborators (injected)
    habit_store: object  # HabitStore implementation
    xp_store: object  # XPStore implementation
    identity: object  # IdentityProvider implementation

    # Services (lazy-loaded via properties)
    _stats_service: Optional[object] = field(default=None, init=False, repr=False)
    _celebration_queue: Optional[object] = field(default=None, init=False, repr=False)
    _level_up_watcher: Optional[object] = field(default=None, init=False, repr=False)
    _quest_toast_queue: Optional[object] = field(default=None, init=False, repr=False)
    _progression_service: Optional[object] = field(default=None, init=False, repr=False)

    _unsubscribe_identity: Optional[Callable[[], None]] = field(default=None, init=False, repr=False)
    _tasks: Set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    @property
    def stats_service(self):
        """Get StatsService instance (lazy-loaded)"""
        if self._stats_service is None:
            from nuvoria.services.stats_service import StatsService
            self._stats_service = StatsService(self.habit_store, self.xp_store, self.identity)
            logger.debug("StatsService instantiated")
        return self._stats_service

    @property
    def celebration_queue(self):
        """Get CelebrationQueue for the current session (lazy-loaded)"""
        if self._celebration_queue is None:
            from nuvoria.services.celebration_queue import CelebrationQueue
            self._celebration_queue = CelebrationQueue()
            logger.debug("CelebrationQueue instantiated")
        return self._celebration_queue

    @property
    def level_up_watcher(self):
        """Get LevelUpWatcher for the current session (lazy-loaded)"""
        if self._level_up_watcher is None:
            from nuvoria.services.level_up_watcher import LevelUpWatcher
            self._level_up_watcher = LevelUpWatcher(self.stats_service.snapshot, self.celebration_queue)
            logger.debug("LevelUpWatcher instantiated")
        return self._level_up_watcher

    @property
    def quest_toast_queue(self):
        """Get QuestToastQueue instance (lazy-loaded)"""
        if self._quest_toast_queue is None:
            from nuvoria.services.quest_toast_queue import QuestToastQueue
            self._quest_toast_queue = QuestToastQueue()
            logger.debug("QuestToastQueue instantiated")
        return self._quest_toast_queue

    @property
    def progression_service(self):
        """Get ProgressionService for the current session (lazy-loaded)"""
        if self._progression_service is None:
            from nuvoria.services.progression_service import ProgressionService
            self._progression_service = ProgressionService(
                self.habit_store,
                self.xp_store,
                self.identity,
                self.stats_service,
                self.celebration_queue,
                self.quest_toast_queue
            )
            logger.debug("ProgressionService instantiated")
        return self._progression_service

    # ==========================================
    # Session lifecycle
    # ==========================================

    def bind_identity(self) -> None:
        """Start and end sessions as the identity provider reports sign-in and sign-out"""
        if self._unsubscribe_identity is not None:
            return
        self._unsubscribe_identity = self.identity.subscribe(self._on_user_changed)

    def _on_user_changed(self, user_id: Optional[str]) -> None:
        if user_id:
            task = asyncio.get_running_loop().create_task(self.start_session())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            self.end_session()

    async def wait_idle(self) -> None:
        """Wait for session starts scheduled by identity changes"""
        pending = [task for task in self._tasks if not task.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [task for task in self._tasks if not task.done()]

    async def start_session(self) -> None:
        """Fresh celebration state for the signed-in user, then a forced stats load"""
        user_id = self.identity.current_user_id
        if not user_id:
            logger.warning("start_session called without a signed-in user")
            return

        # A previous user's snapshot must not become the new baseline
        self.stats_service.clear()
        self._reset_session_services()
        self.level_up_watcher.start()
        logger.info(f"Session started for user {user_id}")
        await self.stats_service.refresh_stats(force_refresh=True)

    def end_session(self) -> None:
        """Clear the snapshot and drop per-session celebration state"""
        if self._stats_service is not None:
            self._stats_service.clear()
        self._reset_session_services()
        if self._quest_toast_queue is not None:
            self._quest_toast_queue.close()
        logger.info("Session ended")

    def _reset_session_services(self) -> None:
        if self._level_up_watcher is not None:
            self._level_up_watcher.close()
        if self._celebration_queue is not None:
            self._celebration_queue.close()
        self._level_up_watcher = None
        self._celebration_queue = None
        self._progression_service = None

    async def shutdown(self) -> None:
        """Cancel timers and pending tasks, unsubscribe from the identity provider"""
        if self._unsubscribe_identity is not None:
            self._unsubscribe_identity()
            self._unsubscribe_identity = None

        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        self._reset_session_services()
        if self._quest_toast_queue is not None:
            self._quest_toast_queue.close()
        if self._stats_service is not None:
            self._stats_service.close()
        logger.info("Service container shut down")
