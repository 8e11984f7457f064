"""Global test fixtures and utilities for nuvoria tests"""
import pytest
from unittest.mock import AsyncMock, Mock
from datetime import date, datetime, timedelta

from nuvoria.gamification.mock_store import InMemoryStore
from nuvoria.models import DailyTaskProgress, Habit, StatsSnapshot
from nuvoria.services.identity import SessionIdentityProvider


# ============================================================================
# Dates
# ============================================================================

@pytest.fixture
def today():
    """Fixed reference date for streak and age calculations"""
    return date(2024, 3, 15)


def day(base: date, offset: int) -> str:
    """ISO key for base + offset days"""
    return (base + timedelta(days=offset)).isoformat()


@pytest.fixture
def day_key(today):
    """ISO key relative to the reference date: day_key(-1) is yesterday"""
    return lambda offset: day(today, offset)


# ============================================================================
# Habits
# ============================================================================

def make_habit(
    habit_id: str = "habit-1",
    tasks=None,
    completed_days=None,
    partial_days=None,
    created_at=None,
    **kwargs
) -> Habit:
    """
    Build a habit with fully completed and partially completed dates

    Args:
        completed_days: ISO dates where every task was done
        partial_days: ISO dates where only the first task was done
    """
    tasks = tasks if tasks is not None else ["t1", "t2", "t3"]
    daily_tasks = {}
    for d in partial_days or []:
        daily_tasks[d] = DailyTaskProgress.for_tasks(tasks[:1], tasks)
    for d in completed_days or []:
        daily_tasks[d] = DailyTaskProgress.for_tasks(list(tasks), tasks)
    return Habit(
        id=habit_id,
        name=kwargs.pop("name", "Morning routine"),
        tasks=tasks,
        daily_tasks=daily_tasks,
        created_at=created_at or datetime(2024, 1, 1),
        **kwargs
    )


@pytest.fixture
def habit_factory():
    return make_habit


# ============================================================================
# Stats
# ============================================================================

def make_snapshot(**overrides) -> StatsSnapshot:
    values = {
        "title": "First Step",
        "level": 1,
        "current_level_xp": 0,
        "xp_for_next_level": 80,
        "level_progress": 0.0,
        "total_streak": 0,
        "active_habits": 1,
        "completed_tasks_today": 0,
        "total_tasks_today": 3,
        "total_xp": 0,
    }
    values.update(overrides)
    return StatsSnapshot(**values)


@pytest.fixture
def snapshot_factory():
    return make_snapshot


# ============================================================================
# Stores & Identity
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def identity(test_user_id):
    """Identity provider with the test user signed in"""
    return SessionIdentityProvider(test_user_id)


@pytest.fixture
def memory_store(today):
    """In-memory habit + XP store pinned to the reference date"""
    return InMemoryStore(today=lambda: today)


@pytest.fixture
def mock_habit_store():
    """Mock HabitStore with empty-but-valid results"""
    store = Mock()
    store.fetch_habits = AsyncMock(return_value=[])
    store.get_aggregated_stats = AsyncMock(return_value={
        "total_completions": 12,
        "total_days_tracked": 9,
        "streak_data": [],
        "total_habit_xp": 0,
    })
    store.get_active_habits_count = AsyncMock(return_value=2)
    store.get_today_stats = AsyncMock(return_value={"completed": 1, "total": 4})
    store.get_global_streak = AsyncMock(return_value=5)
    store.toggle_task = AsyncMock()
    store.record_milestone = AsyncMock(return_value=None)
    return store


@pytest.fixture
def mock_xp_store():
    """Mock XPStore reporting level 3 with 40/120 XP"""
    store = Mock()
    store.get_user_xp_stats = AsyncMock(return_value={
        "total_xp": 220,
        "current_level": 3,
        "current_level_xp": 40,
        "xp_for_next_level": 120,
        "level_progress": 33.3,
    })
    store.award_xp = AsyncMock(return_value=True)
    return store
