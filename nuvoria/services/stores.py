"""
External collaborator interfaces

The progression core never talks to a backend directly. It depends on these
protocols, implemented by the app's backend adapters (or by
`nuvoria.gamification.mock_store.InMemoryStore` in tests and the demo).
"""

from typing import Any, Callable, Dict, List, Optional, Protocol

from nuvoria.models.habit import Habit, TaskToggleResult


class HabitStore(Protocol):
    """Habit and task-completion persistence"""

    async def fetch_habits(self, user_id: str) -> List[Habit]: ...

    async def get_aggregated_stats(self, user_id: str) -> Dict[str, Any]:
        """{'total_completions', 'total_days_tracked', 'streak_data', 'total_habit_xp'}"""
        ...

    async def get_active_habits_count(self, user_id: str) -> int: ...

    async def get_today_stats(self, user_id: str) -> Dict[str, int]:
        """{'completed', 'total'}"""
        ...

    async def get_global_streak(self, user_id: str) -> int: ...

    async def toggle_task(self, habit_id: str, user_id: str, date: str, task_id: str) -> TaskToggleResult: ...

    async def record_milestone(self, habit_id: str, user_id: str, title: str) -> None: ...


class XPStore(Protocol):
    """User XP and level persistence"""

    async def get_user_xp_stats(self, user_id: str) -> Dict[str, Any]:
        """{'total_xp', 'current_level', 'current_level_xp', 'xp_for_next_level', 'level_progress'}"""
        ...

    async def award_xp(
        self,
        user_id: str,
        amount: int,
        source_type: str,
        source_id: Optional[str] = None,
        description: str = ""
    ) -> bool: ...


class IdentityProvider(Protocol):
    """Current authenticated user"""

    @property
    def current_user_id(self) -> Optional[str]: ...

    def subscribe(self, callback: Callable[[Optional[str]], None]) -> Callable[[], None]:
        """Register for user changes; returns an unsubscribe function"""
        ...
