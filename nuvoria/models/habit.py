"""Habit models"""
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class HabitType(str, Enum):
    """Habit polarity"""
    GOOD = "good"
    BAD = "bad"


class DailyTaskProgress(BaseModel):
    """Tasks completed for one habit on one date"""
    completed_tasks: list[str] = Field(default_factory=list)
    all_completed: bool = False

    @classmethod
    def for_tasks(cls, completed_tasks: list[str], tasks: list[str]) -> "DailyTaskProgress":
        """Build a record whose all_completed flag agrees with the habit's task list"""
        completed = list(dict.fromkeys(completed_tasks))
        return cls(
            completed_tasks=completed,
            all_completed=len(tasks) > 0 and len(completed) == len(tasks),
        )


class Habit(BaseModel):
    """A tracked routine, as read from the habit store"""
    id: str
    name: str
    type: HabitType = HabitType.GOOD
    category: str = "general"
    tasks: list[str] = Field(default_factory=list)
    daily_tasks: dict[str, DailyTaskProgress] = Field(default_factory=dict)  # keyed by YYYY-MM-DD
    created_at: datetime
    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    current_tier_level: int = Field(default=0, ge=0)  # milestones already claimed
    milestones_unlocked: list[str] = Field(default_factory=list)

    def progress_for(self, date_str: str) -> Optional[DailyTaskProgress]:
        return self.daily_tasks.get(date_str)


class TaskToggleResult(BaseModel):
    """Outcome of a task toggle as reported by the habit store"""
    success: bool
    completed_tasks: list[str] = Field(default_factory=list)
    all_completed: bool = False
    xp_earned: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    milestones_unlocked: list[str] = Field(default_factory=list)
