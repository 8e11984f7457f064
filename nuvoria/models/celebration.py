"""Celebration and quest toast models"""
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field

from nuvoria.models.progression import Achievement, Milestone

CelebrationType = Literal["level_up", "milestone_single", "milestone_multiple"]


def _celebration_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


class MilestoneEntry(BaseModel):
    """A milestone together with its position in the catalogue"""
    model_config = ConfigDict(frozen=True)

    milestone: Milestone
    index: int


class LevelUpCelebration(BaseModel):
    """User reached a new global level"""
    model_config = ConfigDict(frozen=True)

    type: Literal["level_up"] = "level_up"
    id: str = Field(default_factory=lambda: _celebration_id("level_up"))
    new_level: int
    previous_level: int
    achievement: Optional[Achievement] = None

    @property
    def dedup_key(self) -> int:
        return self.new_level


class MilestoneSingleCelebration(BaseModel):
    """One habit milestone unlocked"""
    model_config = ConfigDict(frozen=True)

    type: Literal["milestone_single"] = "milestone_single"
    id: str = Field(default_factory=lambda: _celebration_id("milestone"))
    milestone: Milestone
    milestone_index: int

    @property
    def dedup_key(self) -> str:
        return self.milestone.title


class MilestoneMultipleCelebration(BaseModel):
    """Several habit milestones unlocked at once"""
    model_config = ConfigDict(frozen=True)

    type: Literal["milestone_multiple"] = "milestone_multiple"
    id: str = Field(default_factory=lambda: _celebration_id("milestones_multiple"))
    milestones: list[MilestoneEntry]

    @property
    def dedup_key(self) -> tuple[str, ...]:
        return tuple(entry.milestone.title for entry in self.milestones)


Celebration = Annotated[
    Union[LevelUpCelebration, MilestoneSingleCelebration, MilestoneMultipleCelebration],
    Field(discriminator="type"),
]


# ==========================================
# Quest rewards
# ==========================================

class XPReward(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["XP"] = "XP"
    amount: int = Field(ge=0)


class BoostReward(BaseModel):
    """Temporary habit XP boost"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["BOOST"] = "BOOST"
    percent: Literal[10, 15, 20, 25]
    duration_hours: Literal[12, 24, 48, 72]


class TitleReward(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["TITLE"] = "TITLE"
    key: str  # i18n key for the title


QuestReward = Annotated[
    Union[XPReward, BoostReward, TitleReward],
    Field(discriminator="kind"),
]


class QuestToastNotification(BaseModel):
    """Quest completion toast waiting for, or in, the display slot"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"quest_{uuid4().hex[:12]}")
    quest_name: str
    reward: QuestReward


def describe_reward(reward: Union[XPReward, BoostReward, TitleReward]) -> str:
    """Short human-readable reward text, matched on the reward kind"""
    if isinstance(reward, XPReward):
        return f"+{reward.amount} XP"
    if isinstance(reward, BoostReward):
        return f"+{reward.percent}% habit XP for {reward.duration_hours}h"
    if isinstance(reward, TitleReward):
        return f"New title: {reward.key}"
    raise TypeError(f"Unknown quest reward: {reward!r}")
