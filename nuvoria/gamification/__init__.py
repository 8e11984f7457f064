"""
Progression rules for Nuvoria

Pure calculations, no I/O:
- XP curve and level derivation
- Daily-habit streaks with a one-day grace window
- Habit tiers and milestones (streak-based and age-based)
- Level titles
- Dashboard aggregates and per-habit details
"""

from nuvoria.gamification.xp_system import (
    xp_for_next_level,
    total_xp_for_level,
    calculate_level_from_xp,
    calculate_level_progress,
    apply_xp_delta,
)
from nuvoria.gamification.streak_system import calculate_streaks, calculate_habit_streaks
from nuvoria.gamification.milestones import (
    TIERS,
    MILESTONES,
    calculate_tier_from_streak,
    get_milestone_status,
    calculate_milestones_from_age,
    has_unclaimed_milestone,
)
from nuvoria.gamification.achievement_system import get_achievement_by_level, get_current_title
from nuvoria.gamification.dashboards import get_dashboard_stats
from nuvoria.gamification.habit_progression import get_habit_details

__all__ = [
    "xp_for_next_level",
    "total_xp_for_level",
    "calculate_level_from_xp",
    "calculate_level_progress",
    "apply_xp_delta",
    "calculate_streaks",
    "calculate_habit_streaks",
    "TIERS",
    "MILESTONES",
    "calculate_tier_from_streak",
    "get_milestone_status",
    "calculate_milestones_from_age",
    "has_unclaimed_milestone",
    "get_achievement_by_level",
    "get_current_title",
    "get_dashboard_stats",
    "get_habit_details",
]
