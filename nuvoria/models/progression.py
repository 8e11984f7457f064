"""Progression models for gamification"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class HabitTier(str, Enum):
    """Habit maturity bands, derived from streak length"""
    BEGINNER = "Beginner"
    NOVICE = "Novice"
    ADEPT = "Adept"
    EXPERT = "Expert"
    MASTER = "Master"
    LEGENDARY = "Legendary"


class TierInfo(BaseModel):
    """Habit tier definition"""
    model_config = ConfigDict(frozen=True)

    name: HabitTier
    min_days: int
    max_days: Optional[int] = None  # None for the open-ended top tier
    multiplier: float
    icon: str
    description: str


class Milestone(BaseModel):
    """Fixed day-threshold achievement tied to a habit"""
    model_config = ConfigDict(frozen=True)

    days: int
    title: str
    description: str
    xp_reward: int
    badge: str = ""
    tier: str = ""


class Achievement(BaseModel):
    """Level title entry"""
    model_config = ConfigDict(frozen=True)

    level: int
    title: str
    tier: str


class StreakResult(BaseModel):
    """Current and best streak for one habit"""
    model_config = ConfigDict(frozen=True)

    current: int = 0
    best: int = 0


class StatsSnapshot(BaseModel):
    """
    Aggregated user stats.

    Immutable: every refresh or optimistic update produces a new instance.
    """
    model_config = ConfigDict(frozen=True)

    title: str
    level: int = Field(ge=1)
    current_level_xp: int = Field(ge=0)
    xp_for_next_level: int = Field(ge=0)
    level_progress: float = Field(ge=0, le=100)
    total_streak: int = Field(default=0, ge=0)
    active_habits: int = Field(default=0, ge=0)
    completed_tasks_today: int = Field(default=0, ge=0)
    total_tasks_today: int = Field(default=0, ge=0)
    total_xp: int = Field(default=0, ge=0)
    total_completions: int = Field(default=0, ge=0)
    total_days_tracked: int = Field(default=0, ge=0)
    current_achievement: Optional[Achievement] = None


class OptimisticResult(BaseModel):
    """Result of a local, unconfirmed XP update"""
    model_config = ConfigDict(frozen=True)

    leveled_up: bool
    new_level: int
    previous_level: int
