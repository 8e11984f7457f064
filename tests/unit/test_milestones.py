"""Unit tests for habit tiers and milestones (nuvoria/gamification/milestones.py)"""
import pytest
from datetime import datetime, timedelta

from nuvoria.gamification.milestones import (
    MILESTONE_DAYS,
    MILESTONES,
    TIERS,
    calculate_milestones_from_age,
    calculate_tier_from_streak,
    get_milestone_status,
    get_next_tier,
    habit_age_days,
    has_unclaimed_milestone,
    milestone_reached,
    unclaimed_milestones,
)
from nuvoria.models import HabitTier


def created_days_ago(today, days):
    return datetime.combine(today - timedelta(days=days), datetime.min.time())


# ============================================================================
# Catalogue Tests
# ============================================================================

def test_milestone_days_catalogue():
    assert MILESTONE_DAYS == [3, 7, 14, 21, 30, 45, 60, 75, 90, 100, 150, 200, 250, 300, 365]


def test_milestone_titles_unique():
    titles = [m.title for m in MILESTONES]
    assert len(titles) == len(set(titles))


def test_tiers_contiguous():
    for current, nxt in zip(TIERS, TIERS[1:]):
        assert nxt.min_days == current.max_days + 1
    assert TIERS[-1].max_days is None


# ============================================================================
# Tier Tests
# ============================================================================

class TestTierFromStreak:

    @pytest.mark.parametrize("streak,tier,multiplier", [
        (0, HabitTier.BEGINNER, 1.0),
        (6, HabitTier.BEGINNER, 1.0),
        (7, HabitTier.NOVICE, 1.1),
        (14, HabitTier.ADEPT, 1.2),
        (30, HabitTier.EXPERT, 1.3),
        (60, HabitTier.MASTER, 1.5),
        (99, HabitTier.MASTER, 1.5),
        (100, HabitTier.LEGENDARY, 2.0),
        (500, HabitTier.LEGENDARY, 2.0),
    ])
    def test_tier_bands(self, streak, tier, multiplier):
        info, _ = calculate_tier_from_streak(streak)
        assert info.name == tier
        assert info.multiplier == multiplier

    def test_progress_within_tier(self):
        _, progress = calculate_tier_from_streak(10)
        assert progress == pytest.approx(3 / 7 * 100)

    def test_top_tier_progress_is_full(self):
        _, progress = calculate_tier_from_streak(150)
        assert progress == 100.0

    def test_next_tier(self):
        beginner, _ = calculate_tier_from_streak(0)
        legendary, _ = calculate_tier_from_streak(100)

        assert get_next_tier(beginner).name == HabitTier.NOVICE
        assert get_next_tier(legendary) is None


# ============================================================================
# Streak Milestone Tests
# ============================================================================

class TestMilestoneStatus:

    def test_status_splits_catalogue(self):
        status = get_milestone_status(10, [])

        assert [m.title for m in status["unlocked"]] == ["Getting Started", "Week Warrior"]
        assert status["next"].title == "Fortnight Fighter"
        assert len(status["upcoming"]) == 3
        assert len(status["all"]) == len(MILESTONES)

    def test_recorded_titles_stay_unlocked_after_streak_drops(self):
        status = get_milestone_status(0, ["Week Warrior"])

        assert [m.title for m in status["unlocked"]] == ["Week Warrior"]
        assert status["next"].title == "Getting Started"

    def test_all_unlocked(self):
        status = get_milestone_status(400, [])
        assert status["next"] is None
        assert status["upcoming"] == []


class TestMilestoneReached:

    def test_exact_day_count(self):
        milestone, index = milestone_reached(7, [])
        assert milestone.title == "Week Warrior"
        assert index == 1

    def test_already_unlocked(self):
        assert milestone_reached(7, ["Week Warrior"]) is None

    def test_between_thresholds(self):
        assert milestone_reached(8, []) is None


# ============================================================================
# Age Milestone Tests
# ============================================================================

class TestAgeMilestones:

    def test_age_counts_creation_day(self, today):
        assert habit_age_days(created_days_ago(today, 0), today) == 1
        assert habit_age_days(created_days_ago(today, 2), today) == 3

    def test_age_without_creation_date(self, today):
        assert habit_age_days(None, today) == 0
        assert calculate_milestones_from_age(None, today) == 0

    @pytest.mark.parametrize("days_ago,expected", [
        (0, 0),
        (1, 0),
        (2, 1),
        (6, 2),
        (13, 3),
        (364, 15),
    ])
    def test_milestones_from_age(self, today, days_ago, expected):
        assert calculate_milestones_from_age(created_days_ago(today, days_ago), today) == expected

    def test_has_unclaimed_milestone(self, today):
        created = created_days_ago(today, 6)

        assert has_unclaimed_milestone(created, 0, today) is True
        assert has_unclaimed_milestone(created, 1, today) is True
        assert has_unclaimed_milestone(created, 2, today) is False
        assert has_unclaimed_milestone(None, 0, today) is False

    def test_unclaimed_milestones_range(self, today):
        pending = unclaimed_milestones(created_days_ago(today, 6), 0, today)

        assert [(m.title, i) for m, i in pending] == [("Getting Started", 0), ("Week Warrior", 1)]

    def test_unclaimed_milestones_none_pending(self, today):
        assert unclaimed_milestones(created_days_ago(today, 6), 2, today) == []
