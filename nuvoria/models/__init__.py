"""Pydantic models for habits, progression and celebrations"""

from nuvoria.models.habit import Habit, HabitType, DailyTaskProgress, TaskToggleResult
from nuvoria.models.progression import (
    Achievement,
    HabitTier,
    Milestone,
    OptimisticResult,
    StatsSnapshot,
    StreakResult,
    TierInfo,
)
from nuvoria.models.celebration import (
    describe_reward,
    BoostReward,
    Celebration,
    CelebrationType,
    LevelUpCelebration,
    MilestoneEntry,
    MilestoneMultipleCelebration,
    MilestoneSingleCelebration,
    QuestReward,
    QuestToastNotification,
    TitleReward,
    XPReward,
)

__all__ = [
    "Habit",
    "HabitType",
    "DailyTaskProgress",
    "TaskToggleResult",
    "Achievement",
    "HabitTier",
    "Milestone",
    "OptimisticResult",
    "StatsSnapshot",
    "StreakResult",
    "TierInfo",
    "BoostReward",
    "Celebration",
    "CelebrationType",
    "LevelUpCelebration",
    "MilestoneEntry",
    "MilestoneMultipleCelebration",
    "MilestoneSingleCelebration",
    "QuestReward",
    "QuestToastNotification",
    "TitleReward",
    "XPReward",
    "describe_reward",
]
