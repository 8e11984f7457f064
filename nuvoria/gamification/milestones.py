"""
Habit Tiers and Milestones

Static catalogues for per-habit progression:
- Tiers: maturity bands derived from the current streak, each with an XP multiplier
- Milestones: day thresholds with a title, description and XP reward

Milestone unlocking is derived, never stored as a counter here. Two rules exist:
- Streak-based: a milestone is reached when the live streak hits its day count
- Age-based: the unlocked count is the number of thresholds <= habit age in days
"""

from typing import Dict, List, Optional, Tuple, Any
from datetime import date, datetime
import logging

from nuvoria.models.progression import HabitTier, Milestone, TierInfo

logger = logging.getLogger(__name__)


TIERS: List[TierInfo] = [
    TierInfo(name=HabitTier.BEGINNER, min_days=0, max_days=6, multiplier=1.0, icon="🌱", description="Just getting started"),
    TierInfo(name=HabitTier.NOVICE, min_days=7, max_days=13, multiplier=1.1, icon="🌿", description="Building momentum"),
    TierInfo(name=HabitTier.ADEPT, min_days=14, max_days=29, multiplier=1.2, icon="🌳", description="Forming the habit"),
    TierInfo(name=HabitTier.EXPERT, min_days=30, max_days=59, multiplier=1.3, icon="⭐", description="Habit established"),
    TierInfo(name=HabitTier.MASTER, min_days=60, max_days=99, multiplier=1.5, icon="🔥", description="Mastery achieved"),
    TierInfo(name=HabitTier.LEGENDARY, min_days=100, multiplier=2.0, icon="👑", description="Legendary status"),
]

MILESTONES: List[Milestone] = [
    Milestone(days=3, title="Getting Started", description="3 days of habit building", xp_reward=50, badge="🎯", tier="Beginner"),
    Milestone(days=7, title="Week Warrior", description="One week of habit building", xp_reward=100, badge="📅", tier="Beginner"),
    Milestone(days=14, title="Fortnight Fighter", description="Two weeks strong", xp_reward=200, badge="💪", tier="Novice"),
    Milestone(days=21, title="Habit Former", description="21 days to form a habit", xp_reward=300, badge="🧠", tier="Novice"),
    Milestone(days=30, title="Monthly Master", description="One month achieved", xp_reward=500, badge="🏆", tier="Novice"),
    Milestone(days=45, title="Persistent Path", description="45 days of dedication", xp_reward=600, badge="🛤️", tier="Adept"),
    Milestone(days=60, title="Committed", description="Two months of dedication", xp_reward=750, badge="💎", tier="Adept"),
    Milestone(days=75, title="Steadfast Soul", description="75 days unwavering", xp_reward=850, badge="🪨", tier="Expert"),
    Milestone(days=90, title="Quarter Champion", description="Three months strong", xp_reward=1000, badge="🌟", tier="Expert"),
    Milestone(days=100, title="Century", description="100 days milestone", xp_reward=1500, badge="💯", tier="Expert"),
    Milestone(days=150, title="Resilient Spirit", description="150 days of growth", xp_reward=2000, badge="🌊", tier="Master"),
    Milestone(days=200, title="Unstoppable Force", description="200 days mastered", xp_reward=2500, badge="⚡", tier="Master"),
    Milestone(days=250, title="Elite Achiever", description="250 days of excellence", xp_reward=3000, badge="🎖️", tier="Master"),
    Milestone(days=300, title="Legendary Warrior", description="300 days conquered", xp_reward=4000, badge="🛡️", tier="Legendary"),
    Milestone(days=365, title="Year Legend", description="One full year completed", xp_reward=5000, badge="🎊", tier="Legendary"),
]

MILESTONE_DAYS: List[int] = [m.days for m in MILESTONES]


# ==========================================
# Tiers
# ==========================================

def calculate_tier_from_streak(current_streak: int) -> Tuple[TierInfo, float]:
    """
    Tier for a streak value, plus progress (0-100) towards the next tier

    The top tier always reports 100.
    """
    current = TIERS[0]
    for tier in TIERS:
        if tier.max_days is None:
            if current_streak >= tier.min_days:
                current = tier
        elif tier.min_days <= current_streak <= tier.max_days:
            current = tier

    progress = 100.0
    idx = TIERS.index(current)
    if idx < len(TIERS) - 1:
        nxt = TIERS[idx + 1]
        span = nxt.min_days - current.min_days
        in_tier = current_streak - current.min_days
        progress = max(0.0, min(100.0, in_tier / span * 100))

    return current, progress


def get_next_tier(current_tier: TierInfo) -> Optional[TierInfo]:
    """Next tier up, or None at the top"""
    idx = TIERS.index(current_tier)
    if idx < len(TIERS) - 1:
        return TIERS[idx + 1]
    return None


# ==========================================
# Streak-based milestones
# ==========================================

def get_milestone_status(current_streak: int, unlocked_titles: List[str]) -> Dict[str, Any]:
    """
    Split the catalogue into unlocked and upcoming milestones

    Returns:
        {
            'unlocked': List[Milestone],
            'next': Optional[Milestone],
            'upcoming': List[Milestone] (at most 3),
            'all': List[Milestone]
        }
    """
    unlocked_set = set(unlocked_titles)
    unlocked = [m for m in MILESTONES if m.title in unlocked_set or m.days <= current_streak]
    upcoming = [m for m in MILESTONES if m.days > current_streak and m.title not in unlocked_set]

    return {
        "unlocked": unlocked,
        "next": upcoming[0] if upcoming else None,
        "upcoming": upcoming[:3],
        "all": list(MILESTONES),
    }


def milestone_reached(current_streak: int, unlocked_titles: List[str]) -> Optional[Tuple[Milestone, int]]:
    """Milestone (and its catalogue index) whose day count equals the streak, if not yet unlocked"""
    for index, milestone in enumerate(MILESTONES):
        if milestone.days == current_streak and milestone.title not in unlocked_titles:
            return milestone, index
    return None


# ==========================================
# Age-based milestones
# ==========================================

def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def habit_age_days(created_at: Optional[datetime], today: Optional[date] = None) -> int:
    """Days since creation, counting the creation day as day 1"""
    if created_at is None:
        return 0
    today = today or date.today()
    return (today - _as_date(created_at)).days + 1


def calculate_milestones_from_age(created_at: Optional[datetime], today: Optional[date] = None) -> int:
    """
    Number of milestones unlocked purely from habit age

    Monotonically non-decreasing in wall-clock time and independent of
    actual completions.
    """
    age = habit_age_days(created_at, today)
    return len([days for days in MILESTONE_DAYS if days <= age])


def has_unclaimed_milestone(
    created_at: Optional[datetime],
    current_tier_level: Optional[int],
    today: Optional[date] = None
) -> bool:
    """True when the age-derived count is ahead of what the store says was claimed"""
    if created_at is None:
        return False
    expected = calculate_milestones_from_age(created_at, today)
    return expected > (current_tier_level or 0)


def unclaimed_milestones(
    created_at: Optional[datetime],
    current_tier_level: Optional[int],
    today: Optional[date] = None
) -> List[Tuple[Milestone, int]]:
    """Milestones between the claimed count and the age-derived count, with catalogue indexes"""
    expected = calculate_milestones_from_age(created_at, today)
    claimed = current_tier_level or 0
    return [(MILESTONES[i], i) for i in range(claimed, expected)]
