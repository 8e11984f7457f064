"""
Service Layer Package

Stateful services between the stores and the presentation layer:
- StatsService: aggregated stats snapshot, debounced refresh, optimistic XP
- CelebrationQueue: one-at-a-time de-duplicated level-up and milestone modals
- LevelUpWatcher: turns snapshot level changes into level-up celebrations
- QuestToastQueue: auto-dismissing quest completion toasts
- ProgressionService: task toggles and milestone claiming

All of them are wired together by ServiceContainer.
"""

from nuvoria.services.container import ServiceContainer
from nuvoria.services.observable import Observable
from nuvoria.services.identity import SessionIdentityProvider
from nuvoria.services.stats_service import StatsService
from nuvoria.services.celebration_queue import CelebrationQueue
from nuvoria.services.level_up_watcher import LevelUpWatcher
from nuvoria.services.quest_toast_queue import QuestToastQueue
from nuvoria.services.progression_service import ProgressionService

__all__ = [
    "ServiceContainer",
    "Observable",
    "SessionIdentityProvider",
    "StatsService",
    "CelebrationQueue",
    "LevelUpWatcher",
    "QuestToastQueue",
    "ProgressionService",
]
