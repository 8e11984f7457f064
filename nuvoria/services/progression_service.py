"""
ProgressionService - Habit progression flow

Glues the stores to the stats snapshot and the notification queues:
task toggles, streak and age milestones, and quest completion toasts.
"""

import logging
from datetime import date
from typing import List, Optional, Set, Tuple

from nuvoria.exceptions import NuvoriaError, wrap_store_exception
from nuvoria.gamification.milestones import milestone_reached, unclaimed_milestones
from nuvoria.models.celebration import MilestoneEntry, QuestReward, QuestToastNotification
from nuvoria.models.habit import Habit, TaskToggleResult
from nuvoria.models.progression import Milestone
from nuvoria.services.celebration_queue import CelebrationQueue
from nuvoria.services.quest_toast_queue import QuestToastQueue
from nuvoria.services.stats_service import StatsService

logger = logging.getLogger(__name__)


class ProgressionService:
    """
    Service for habit progression.

    Responsibilities:
    - Task toggling with optimistic XP feedback
    - Streak milestone detection and claiming
    - Age milestone catch-up on load
    - Quest completion toasts
    """

    def __init__(
        self,
        habit_store,
        xp_store,
        identity,
        stats_service: StatsService,
        celebrations: CelebrationQueue,
        toasts: QuestToastQueue
    ):
        """
        Initialize ProgressionService.

        Args:
            habit_store: HabitStore implementation
            xp_store: XPStore implementation
            identity: IdentityProvider for the current user
            stats_service: Session stats snapshot
            celebrations: Session celebration queue
            toasts: Quest toast queue
        """
        self.habit_store = habit_store
        self.xp_store = xp_store
        self.identity = identity
        self.stats_service = stats_service
        self.celebrations = celebrations
        self.toasts = toasts
        self._in_flight: Set[Tuple[str, str, str]] = set()
        logger.debug("ProgressionService initialized")

    async def toggle_task(self, habit_id: str, date: str, task_id: str) -> Optional[TaskToggleResult]:
        """
        Toggle one task of a habit for one date.

        Args:
            habit_id: Habit ID
            date: Date key (YYYY-MM-DD)
            task_id: Task within the habit

        Returns:
            Store result, or None if there is no user, the same toggle is
            already in flight, or the store failed
        """
        user_id = self.identity.current_user_id
        if not user_id:
            logger.warning(f"Cannot toggle task {task_id}: no signed-in user")
            return None

        key = (habit_id, date, task_id)
        if key in self._in_flight:
            logger.debug(f"Toggle already in flight for {habit_id}/{date}/{task_id}")
            return None

        self._in_flight.add(key)
        try:
            result = await self.habit_store.toggle_task(habit_id, user_id, date, task_id)
        except NuvoriaError:
            return None
        except Exception as e:
            wrap_store_exception(
                e,
                operation="toggle_task",
                user_id=user_id,
                context={"habit_id": habit_id, "date": date, "task_id": task_id}
            )
            return None
        finally:
            self._in_flight.discard(key)

        if result.xp_earned > 0:
            self.stats_service.update_stats_optimistically(result.xp_earned)

        reached = milestone_reached(result.current_streak, result.milestones_unlocked)
        if reached:
            milestone, index = reached
            if await self._claim_milestone(habit_id, user_id, milestone):
                self.celebrations.queue_milestone_single(milestone, index)

        await self.stats_service.refresh_stats()
        return result

    async def _claim_milestone(self, habit_id: str, user_id: str, milestone: Milestone) -> bool:
        """Persist a milestone and pay its XP reward"""
        try:
            await self.habit_store.record_milestone(habit_id, user_id, milestone.title)
            if milestone.xp_reward:
                await self.xp_store.award_xp(
                    user_id,
                    milestone.xp_reward,
                    "milestone",
                    habit_id,
                    f"Milestone: {milestone.title}"
                )
        except NuvoriaError:
            return False
        except Exception as e:
            wrap_store_exception(
                e,
                operation="record_milestone",
                user_id=user_id,
                context={"habit_id": habit_id, "milestone": milestone.title}
            )
            return False

        if milestone.xp_reward:
            self.stats_service.update_stats_optimistically(milestone.xp_reward)
        logger.info(f"Milestone '{milestone.title}' unlocked for habit {habit_id}")
        return True

    async def check_unclaimed_milestones(self, habits: List[Habit], today: Optional[date] = None) -> int:
        """
        Celebrate age milestones each habit reached since it was last claimed.

        Returns:
            Number of celebrations queued
        """
        user_id = self.identity.current_user_id
        if not user_id:
            return 0

        queued = 0
        for habit in habits:
            pending = unclaimed_milestones(habit.created_at, habit.current_tier_level, today)
            if not pending:
                continue

            claimed = []
            for milestone, index in pending:
                if await self._claim_milestone(habit.id, user_id, milestone):
                    claimed.append((milestone, index))

            if len(claimed) == 1:
                milestone, index = claimed[0]
                queued += self.celebrations.queue_milestone_single(milestone, index)
            elif claimed:
                entries = [MilestoneEntry(milestone=m, index=i) for m, i in claimed]
                queued += self.celebrations.queue_milestone_multiple(entries)

        if queued:
            await self.stats_service.refresh_stats()
        return queued

    def show_quest_completion(self, quest_name: str, reward: QuestReward) -> QuestToastNotification:
        logger.info(f"Quest completed: {quest_name}")
        return self.toasts.show(quest_name, reward)
