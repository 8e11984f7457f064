"""
Streak Tracking System

Derives current and best streaks from a habit's per-date task records.

Rules:
- A date counts if the habit has any recorded progress that date
  (at least one completed task), not only fully completed days
- Current streak walks backward from today; if today has no progress the
  walk may start from yesterday (one-day grace window)
- Best streak is the longest run of consecutive dates, never below the
  current streak

The stricter historical rule (only fully completed days count) is available
through `require_all_completed=True` for cross-checking older data.
"""

from typing import Dict, Iterable, List, Optional
from datetime import date, timedelta
import logging

from nuvoria.models.habit import DailyTaskProgress, Habit
from nuvoria.models.progression import StreakResult

logger = logging.getLogger(__name__)


def has_progress(progress: Optional[DailyTaskProgress], require_all_completed: bool = False) -> bool:
    """Whether a daily record counts toward a streak. Missing records never count."""
    if progress is None:
        return False
    if require_all_completed:
        return progress.all_completed
    return progress.all_completed or len(progress.completed_tasks) > 0


def progress_dates(
    daily_tasks: Dict[str, DailyTaskProgress],
    require_all_completed: bool = False
) -> List[date]:
    """
    Sorted distinct dates that count toward a streak

    Keys that are not valid ISO dates are skipped.
    """
    dates = set()
    for key, progress in daily_tasks.items():
        if not has_progress(progress, require_all_completed):
            continue
        try:
            dates.add(date.fromisoformat(key))
        except (TypeError, ValueError):
            logger.debug(f"Skipping malformed completion date key: {key!r}")
    return sorted(dates)


def calculate_current_streak(dates: Iterable[date], today: Optional[date] = None) -> int:
    """Consecutive days with progress ending today, or yesterday if today is empty"""
    date_set = set(dates)
    if not date_set:
        return 0

    today = today or date.today()
    check = today
    if check not in date_set:
        check = today - timedelta(days=1)
        if check not in date_set:
            return 0

    streak = 0
    while check in date_set:
        streak += 1
        check -= timedelta(days=1)
    return streak


def calculate_best_streak(dates: Iterable[date]) -> int:
    """Longest run of dates whose successive difference is exactly one day"""
    sorted_dates = sorted(set(dates))
    if not sorted_dates:
        return 0

    best = 1
    run = 1
    for prev, curr in zip(sorted_dates, sorted_dates[1:]):
        if (curr - prev).days == 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
    return best


def calculate_streaks(
    daily_tasks: Dict[str, DailyTaskProgress],
    today: Optional[date] = None,
    require_all_completed: bool = False
) -> StreakResult:
    """
    Current and best streak for one habit's completion history

    Args:
        daily_tasks: Per-date task records keyed by YYYY-MM-DD
        today: Reference date (defaults to date.today())
        require_all_completed: Only count fully completed days

    Returns:
        StreakResult(current, best) with best >= current
    """
    dates = progress_dates(daily_tasks, require_all_completed)
    current = calculate_current_streak(dates, today)
    best = max(calculate_best_streak(dates), current)
    return StreakResult(current=current, best=best)


def calculate_habit_streaks(habit: Habit, today: Optional[date] = None) -> StreakResult:
    """
    Streaks for a habit snapshot, reconciled with the stored best streak

    The stored best streak may come from history no longer present in
    `daily_tasks`, so it is never lowered.
    """
    result = calculate_streaks(habit.daily_tasks, today)
    best = max(result.best, habit.best_streak, result.current)
    if best != result.best:
        logger.debug(f"Habit {habit.id}: keeping stored best streak {habit.best_streak}")
    return StreakResult(current=result.current, best=best)
