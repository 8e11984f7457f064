"""
XP and Leveling System

Maps accumulated XP to a level and progress within that level.

Leveling Curve (XP needed to go from level L to L+1):
- Level 1-5 (Tutorial): 80 + (L-1)*20          -> 80 .. 160
- Level 6-10 (Early game): 160 + (L-5)*40      -> 200 .. 360
- Level 11-15 (Mid game): 360 + (L-10)*80      -> 440 .. 760
- Level 16-20 (Late mid-game): 760 + (L-15)*120  -> 880 .. 1360
- Level 21-25 (End game): 1360 + (L-20)*200    -> 1560 .. 2360
- Level 26-30 (Prestige): 2360 + (L-25)*300    -> 2660 .. 3860
- Level 31-35 (Celestial): 3860 + (L-30)*400   -> 4260 .. 5860
- Level 36+ (Infernal): 5860 + (L-35)*500      -> 6360, 6860, ...

Each band starts from the previous band's final value, so the curve never
decreases across a band boundary.
"""

from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

# (last level of band, base offset, first level of band - 1, increment per level)
LEVEL_BANDS = [
    (5, 80, 1, 20),
    (10, 160, 5, 40),
    (15, 360, 10, 80),
    (20, 760, 15, 120),
    (25, 1360, 20, 200),
    (30, 2360, 25, 300),
    (35, 3860, 30, 400),
]
OPEN_BAND = (5860, 35, 500)


def xp_for_next_level(level: int) -> int:
    """XP required to advance from `level` to `level + 1`."""
    level = max(1, level)

    for last_level, base, anchor, increment in LEVEL_BANDS:
        if level <= last_level:
            return base + (level - anchor) * increment

    base, anchor, increment = OPEN_BAND
    return base + (level - anchor) * increment


def total_xp_for_level(target_level: int) -> int:
    """Total XP needed to reach `target_level` from zero."""
    return sum(xp_for_next_level(lv) for lv in range(1, target_level))


def calculate_level_progress(current_level_xp: int, xp_needed: int) -> float:
    """Percentage of the current level completed, clamped to 0-100."""
    if xp_needed <= 0:
        return 0.0
    return min(max(current_level_xp, 0) / xp_needed * 100, 100.0)


def calculate_level_from_xp(total_xp: int) -> Dict[str, Any]:
    """
    Calculate level and in-level progress from total XP

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_for_next_level': int,
            'xp_to_next_level': int,
            'level_progress': float (0-100)
        }
    """
    level = 1
    xp_remaining = max(0, total_xp)

    while xp_remaining >= xp_for_next_level(level):
        xp_remaining -= xp_for_next_level(level)
        level += 1

    needed = xp_for_next_level(level)

    return {
        "current_level": level,
        "xp_in_current_level": xp_remaining,
        "xp_for_next_level": needed,
        "xp_to_next_level": needed - xp_remaining,
        "level_progress": calculate_level_progress(xp_remaining, needed),
    }


def apply_xp_delta(level: int, current_level_xp: int, xp_needed: int, xp_delta: int) -> Dict[str, Any]:
    """
    Add XP to an in-level position, rolling overflow into as many levels as it covers

    Args:
        level: Level before the delta
        current_level_xp: XP already earned inside `level`
        xp_needed: XP threshold for leaving `level` (as last reported by the store)
        xp_delta: Non-negative XP to add

    Returns:
        {
            'new_level': int,
            'current_level_xp': int,
            'xp_for_next_level': int,
            'levels_gained': int
        }
    """
    new_level = level
    xp = current_level_xp + xp_delta
    needed = xp_needed

    while needed > 0 and xp >= needed:
        xp -= needed
        new_level += 1
        needed = xp_for_next_level(new_level)

    if new_level > level:
        logger.debug(f"XP delta {xp_delta} rolled level {level} -> {new_level} (overflow {xp})")

    return {
        "new_level": new_level,
        "current_level_xp": xp,
        "xp_for_next_level": needed,
        "levels_gained": new_level - level,
    }
