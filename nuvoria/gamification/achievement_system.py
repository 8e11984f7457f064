"""
Achievement System

Static level -> title table. Every global level from 1 to 30 carries a title,
grouped into six tiers of five levels:
- Novice (1-5)
- Rising Hero (6-10)
- Mastery Awakens (11-15)
- Legendary Ascent (16-20)
- Epic Mastery (21-25)
- Mythic Glory (26-30)

Levels beyond the table keep the last title.
"""

from typing import List, Optional
import logging

from nuvoria.models.progression import Achievement

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Novice"

TIER_NAMES = [
    "Novice",
    "Rising Hero",
    "Mastery Awakens",
    "Legendary Ascent",
    "Epic Mastery",
    "Mythic Glory",
]

_LEVEL_TITLES = [
    # Novice
    "First Step", "Curious Mind", "Early Riser", "Routine Seeker", "Spark Keeper",
    # Rising Hero
    "Path Finder", "Steady Hand", "Focus Forger", "Rhythm Builder", "Rising Hero",
    # Mastery Awakens
    "Discipline Adept", "Will Shaper", "Time Bender", "Habit Sculptor", "Awakened Master",
    # Legendary Ascent
    "Summit Climber", "Iron Resolve", "Storm Walker", "Flame Bearer", "Legend in Making",
    # Epic Mastery
    "Epic Strategist", "Unbreakable", "Tide Turner", "Star Forger", "Epic Master",
    # Mythic Glory
    "Mythic Seeker", "Eternal Flame", "Dawn Keeper", "Sky Sovereign", "Mythic Legend",
]

ACHIEVEMENT_TITLES: List[Achievement] = [
    Achievement(level=i + 1, title=title, tier=TIER_NAMES[i // 5])
    for i, title in enumerate(_LEVEL_TITLES)
]

_BY_LEVEL = {a.level: a for a in ACHIEVEMENT_TITLES}


def get_achievement_by_level(level: int) -> Optional[Achievement]:
    """Exact table entry for a level, or None if the level has no entry"""
    return _BY_LEVEL.get(level)


def get_current_title(level: int) -> Optional[Achievement]:
    """Last entry whose level is <= `level`"""
    current = None
    for achievement in ACHIEVEMENT_TITLES:
        if achievement.level > level:
            break
        current = achievement
    return current


def get_next_title(level: int) -> Optional[Achievement]:
    """First entry whose level is > `level`"""
    for achievement in ACHIEVEMENT_TITLES:
        if achievement.level > level:
            return achievement
    return None


def title_for_level(level: int) -> str:
    current = get_current_title(level)
    return current.title if current else DEFAULT_TITLE
