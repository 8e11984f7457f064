"""
Gamification Dashboards

Cross-habit figures for the dashboard header: global streak, seven-day
progress and today's completions.
"""

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from nuvoria.models.habit import Habit
from nuvoria.gamification.streak_system import calculate_habit_streaks, has_progress

logger = logging.getLogger(__name__)


def calculate_total_streak(habits: List[Habit], today: Optional[date] = None) -> int:
    """Best live streak across all habits"""
    return max((calculate_habit_streaks(h, today).current for h in habits), default=0)


def calculate_week_progress(habits: List[Habit], today: Optional[date] = None) -> int:
    """Percentage of (habit, day) slots fully completed over the last seven days"""
    if not habits:
        return 0

    today = today or date.today()
    last_7_days = [(today - timedelta(days=i)).isoformat() for i in range(7)]

    completions = sum(
        1
        for day in last_7_days
        for habit in habits
        if has_progress(habit.progress_for(day), require_all_completed=True)
    )
    return round(completions / (len(habits) * 7) * 100)


def calculate_today_completed(habits: List[Habit], today: Optional[date] = None) -> int:
    """Number of habits whose tasks are all done today"""
    today_str = (today or date.today()).isoformat()
    return len([
        h for h in habits
        if has_progress(h.progress_for(today_str), require_all_completed=True)
    ])


def calculate_today_tasks(habits: List[Habit], today: Optional[date] = None) -> Dict[str, int]:
    """Completed and total task counts for today across all habits"""
    today_str = (today or date.today()).isoformat()
    completed = 0
    total = 0
    for habit in habits:
        total += len(habit.tasks)
        progress = habit.progress_for(today_str)
        if progress:
            completed += len([t for t in progress.completed_tasks if t in habit.tasks])
    return {"completed": completed, "total": total}


def get_dashboard_stats(habits: List[Habit], today: Optional[date] = None) -> Dict[str, int]:
    """
    Dashboard header figures

    Returns:
        {
            'total_streak': int,
            'week_progress': int (0-100),
            'today_completed': int,
            'total_active': int,
            'completion_rate': int (0-100)
        }
    """
    today_completed = calculate_today_completed(habits, today)
    completion_rate = round(today_completed / len(habits) * 100) if habits else 0

    return {
        "total_streak": calculate_total_streak(habits, today),
        "week_progress": calculate_week_progress(habits, today),
        "today_completed": today_completed,
        "total_active": len(habits),
        "completion_rate": completion_rate,
    }
