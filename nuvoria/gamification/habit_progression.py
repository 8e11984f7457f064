"""
Habit Progression Details

Read-only bundle for a habit detail view: streaks, tier, milestones and
performance metrics, all computed from one habit snapshot.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from nuvoria.models.habit import Habit
from nuvoria.gamification.milestones import (
    calculate_milestones_from_age,
    calculate_tier_from_streak,
    get_milestone_status,
    get_next_tier,
)
from nuvoria.gamification.streak_system import calculate_habit_streaks, has_progress

logger = logging.getLogger(__name__)

CONSISTENCY_WINDOW_DAYS = 30


def calculate_consistency_score(habit: Habit, today: Optional[date] = None) -> int:
    """Fully completed days in the last 30 days, as a rounded percentage"""
    today = today or date.today()
    window = [(today - timedelta(days=i)).isoformat() for i in range(CONSISTENCY_WINDOW_DAYS)]
    perfect = len([
        d for d in window
        if has_progress(habit.progress_for(d), require_all_completed=True)
    ])
    return round(perfect / CONSISTENCY_WINDOW_DAYS * 100)


def calculate_performance_metrics(habit: Habit, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Averages over every recorded day of a habit

    Returns:
        {
            'avg_tasks_per_day': float,
            'perfect_day_rate': float (0-100),
            'perfect_days': int,
            'total_tasks_completed': int,
            'consistency': int (0-100)
        }
    """
    records = list(habit.daily_tasks.values())
    total_days = len(records)
    total_tasks = sum(len(r.completed_tasks) for r in records)
    perfect_days = len([r for r in records if r.all_completed])

    return {
        "avg_tasks_per_day": total_tasks / total_days if total_days else 0.0,
        "perfect_day_rate": perfect_days / total_days * 100 if total_days else 0.0,
        "perfect_days": perfect_days,
        "total_tasks_completed": total_tasks,
        "consistency": calculate_consistency_score(habit, today),
    }


def get_habit_details(habit: Habit, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Everything a habit detail view shows

    Args:
        habit: Habit snapshot from the store
        today: Reference date (defaults to date.today())

    Returns:
        {
            'current_streak': int,
            'best_streak': int,
            'tier': TierInfo,
            'tier_progress': float,
            'next_tier': Optional[TierInfo],
            'milestone_status': dict (see get_milestone_status),
            'milestones_from_age': int,
            'performance': dict (see calculate_performance_metrics)
        }
    """
    streaks = calculate_habit_streaks(habit, today)
    tier, tier_progress = calculate_tier_from_streak(streaks.current)

    return {
        "current_streak": streaks.current,
        "best_streak": streaks.best,
        "tier": tier,
        "tier_progress": tier_progress,
        "next_tier": get_next_tier(tier),
        "milestone_status": get_milestone_status(streaks.current, habit.milestones_unlocked),
        "milestones_from_age": calculate_milestones_from_age(habit.created_at, today),
        "performance": calculate_performance_metrics(habit, today),
    }
