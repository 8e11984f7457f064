"""
In-memory habit and XP store

Implements the HabitStore and XPStore protocols without a backend. Used by the
test suite and the demo session; nothing is persisted.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from nuvoria.exceptions import RecordNotFoundError, ValidationError
from nuvoria.models.habit import DailyTaskProgress, Habit, TaskToggleResult
from nuvoria.gamification.dashboards import calculate_today_tasks, calculate_total_streak
from nuvoria.gamification.milestones import MILESTONES
from nuvoria.gamification.streak_system import calculate_habit_streaks
from nuvoria.gamification.xp_system import calculate_level_from_xp

logger = logging.getLogger(__name__)

TASK_COMPLETION_XP = 10
ALL_TASKS_BONUS_XP = 20


class InMemoryStore:
    """In-memory store for habits, task completions and XP"""

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today
        self._habits: Dict[str, Dict[str, Habit]] = {}
        self._xp: Dict[str, int] = {}
        self._xp_transactions: List[Dict[str, Any]] = []
        self._xp_earned_keys: set[str] = set()
        logger.debug("InMemoryStore initialized (not persisted)")

    # ==========================================
    # Seeding helpers
    # ==========================================

    def add_habit(self, user_id: str, habit: Habit) -> None:
        self._habits.setdefault(user_id, {})[habit.id] = habit.model_copy(deep=True)

    def set_total_xp(self, user_id: str, total_xp: int) -> None:
        self._xp[user_id] = total_xp

    def get_habit(self, user_id: str, habit_id: str) -> Habit:
        habit = self._habits.get(user_id, {}).get(habit_id)
        if habit is None:
            raise RecordNotFoundError("habit", habit_id, user_id=user_id)
        return habit

    @property
    def xp_transactions(self) -> List[Dict[str, Any]]:
        return list(self._xp_transactions)

    # ==========================================
    # HabitStore
    # ==========================================

    async def fetch_habits(self, user_id: str) -> List[Habit]:
        return [h.model_copy(deep=True) for h in self._habits.get(user_id, {}).values()]

    async def get_aggregated_stats(self, user_id: str) -> Dict[str, Any]:
        habits = list(self._habits.get(user_id, {}).values())
        today = self._today()

        tracked_days = set()
        total_completions = 0
        streak_data = []
        for habit in habits:
            for day, progress in habit.daily_tasks.items():
                if progress.completed_tasks:
                    tracked_days.add(day)
                if progress.all_completed:
                    total_completions += 1
            streaks = calculate_habit_streaks(habit, today)
            streak_data.append({
                "habit_id": habit.id,
                "current_streak": streaks.current,
                "best_streak": streaks.best,
            })

        habit_xp = sum(
            tx["amount"] for tx in self._xp_transactions
            if tx["user_id"] == user_id and tx["source_type"] == "habit"
        )

        return {
            "total_completions": total_completions,
            "total_days_tracked": len(tracked_days),
            "streak_data": streak_data,
            "total_habit_xp": habit_xp,
        }

    async def get_active_habits_count(self, user_id: str) -> int:
        return len(self._habits.get(user_id, {}))

    async def get_today_stats(self, user_id: str) -> Dict[str, int]:
        return calculate_today_tasks(list(self._habits.get(user_id, {}).values()), self._today())

    async def get_global_streak(self, user_id: str) -> int:
        return calculate_total_streak(list(self._habits.get(user_id, {}).values()), self._today())

    async def toggle_task(self, habit_id: str, user_id: str, date: str, task_id: str) -> TaskToggleResult:
        """
        Flip one task for one date, update streaks and award XP

        XP is awarded once per (habit, date, task): un-checking and
        re-checking a task does not pay out again.
        """
        habit = self.get_habit(user_id, habit_id)
        if task_id not in habit.tasks:
            raise ValidationError(
                message=f"Task {task_id} is not part of habit {habit_id}",
                field="task_id",
                value=task_id,
                user_id=user_id
            )

        current = habit.daily_tasks.get(date) or DailyTaskProgress()
        if task_id in current.completed_tasks:
            completed = [t for t in current.completed_tasks if t != task_id]
        else:
            completed = current.completed_tasks + [task_id]

        progress = DailyTaskProgress.for_tasks(completed, habit.tasks)
        daily_tasks = dict(habit.daily_tasks)
        if progress.completed_tasks:
            daily_tasks[date] = progress
        else:
            daily_tasks.pop(date, None)

        xp_earned = 0
        key = f"{habit_id}:{date}:{task_id}"
        if task_id in progress.completed_tasks and key not in self._xp_earned_keys:
            self._xp_earned_keys.add(key)
            xp_earned += TASK_COMPLETION_XP
            bonus_key = f"{habit_id}:{date}:all"
            if progress.all_completed and bonus_key not in self._xp_earned_keys:
                self._xp_earned_keys.add(bonus_key)
                xp_earned += ALL_TASKS_BONUS_XP

        updated = habit.model_copy(update={"daily_tasks": daily_tasks})
        streaks = calculate_habit_streaks(updated, self._today())
        updated = updated.model_copy(update={
            "current_streak": streaks.current,
            "best_streak": streaks.best,
        })
        self._habits[user_id][habit_id] = updated

        if xp_earned:
            await self.award_xp(user_id, xp_earned, "habit", habit_id, f"Task {task_id} on {date}")

        return TaskToggleResult(
            success=True,
            completed_tasks=progress.completed_tasks,
            all_completed=progress.all_completed,
            xp_earned=xp_earned,
            current_streak=streaks.current,
            best_streak=streaks.best,
            milestones_unlocked=list(updated.milestones_unlocked),
        )

    async def record_milestone(self, habit_id: str, user_id: str, title: str) -> None:
        habit = self.get_habit(user_id, habit_id)
        if title in habit.milestones_unlocked:
            return

        titles = [m.title for m in MILESTONES]
        tier_level = habit.current_tier_level
        if title in titles:
            tier_level = max(tier_level, titles.index(title) + 1)

        self._habits[user_id][habit_id] = habit.model_copy(update={
            "milestones_unlocked": habit.milestones_unlocked + [title],
            "current_tier_level": tier_level,
        })
        logger.info(f"Recorded milestone '{title}' for habit {habit_id}")

    # ==========================================
    # XPStore
    # ==========================================

    async def get_user_xp_stats(self, user_id: str) -> Dict[str, Any]:
        total_xp = self._xp.get(user_id, 0)
        level_info = calculate_level_from_xp(total_xp)
        return {
            "total_xp": total_xp,
            "current_level": level_info["current_level"],
            "current_level_xp": level_info["xp_in_current_level"],
            "xp_for_next_level": level_info["xp_for_next_level"],
            "level_progress": level_info["level_progress"],
        }

    async def award_xp(
        self,
        user_id: str,
        amount: int,
        source_type: str,
        source_id: Optional[str] = None,
        description: str = ""
    ) -> bool:
        if amount < 0:
            raise ValidationError("XP amount must be non-negative", field="amount", value=amount, user_id=user_id)

        self._xp[user_id] = self._xp.get(user_id, 0) + amount
        self._xp_transactions.append({
            "user_id": user_id,
            "amount": amount,
            "source_type": source_type,
            "source_id": source_id,
            "description": description,
        })
        logger.info(f"Awarded {amount} XP to user {user_id} for {source_type}. Total: {self._xp[user_id]} XP")
        return True
