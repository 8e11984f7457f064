"""
Celebration Queue

One-at-a-time, de-duplicated modal celebrations (level-ups and habit
milestones). Items are shown in strict enqueue order; after a dismissal the
next item is promoted only once a short settle delay has elapsed.

Lifecycle of a celebration: absent -> queued -> current -> dismissing -> absent
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Iterable, List, Optional, Set, Tuple, Union

from nuvoria import config
from nuvoria.models.celebration import (
    LevelUpCelebration,
    MilestoneEntry,
    MilestoneMultipleCelebration,
    MilestoneSingleCelebration,
)
from nuvoria.models.progression import Achievement, Milestone
from nuvoria.services.observable import Observable

logger = logging.getLogger(__name__)

AnyCelebration = Union[LevelUpCelebration, MilestoneSingleCelebration, MilestoneMultipleCelebration]


class CelebrationQueue:
    """
    FIFO queue of celebrations with a single "current" slot.

    Shown-key sets live as long as the queue; the service container builds a
    fresh queue for every session.
    """

    def __init__(self, settle_delay: Optional[float] = None):
        self.settle_delay = config.CELEBRATION_SETTLE_DELAY_SECONDS if settle_delay is None else settle_delay
        self.current: Observable[AnyCelebration] = Observable(None, name="current_celebration")
        self._queue: Deque[AnyCelebration] = deque()
        self._shown_level_ups: Set[int] = set()
        self._shown_milestones: Set[str] = set()
        self._settle_handle: Optional[asyncio.TimerHandle] = None
        self._closed = False

    # ==========================================
    # Queue
    # ==========================================

    def enqueue(self, celebration: AnyCelebration) -> None:
        """Show immediately when idle, otherwise append to the tail"""
        if self._closed:
            logger.debug(f"Celebration queue closed, ignoring {celebration.type}")
            return

        if self.current.value is None and not self._queue and self._settle_handle is None:
            logger.debug(f"Showing {celebration.type} celebration {celebration.id}")
            self.current.set(celebration)
        else:
            self._queue.append(celebration)
            logger.debug(f"Queued {celebration.type} celebration {celebration.id} (queue: {len(self._queue)})")

    def dismiss_current_celebration(self) -> None:
        """Clear the current celebration now and promote the next one after the settle delay"""
        dismissed = self.current.value
        self.current.set(None)
        if dismissed is not None:
            logger.debug(f"Dismissed {dismissed.type} celebration {dismissed.id}")

        if self._settle_handle is not None:
            self._settle_handle.cancel()
        loop = asyncio.get_running_loop()
        self._settle_handle = loop.call_later(self.settle_delay, self._promote_next)

    def _promote_next(self) -> None:
        self._settle_handle = None
        if self._closed or self.current.value is not None or not self._queue:
            return
        celebration = self._queue.popleft()
        logger.debug(f"Showing {celebration.type} celebration {celebration.id}")
        self.current.set(celebration)

    def has_pending_celebration(self, celebration_type: str) -> bool:
        """True if the current or any queued celebration has this type"""
        current = self.current.value
        if current is not None and current.type == celebration_type:
            return True
        return any(item.type == celebration_type for item in self._queue)

    @property
    def queue_length(self) -> int:
        """Queued items plus the current one"""
        return len(self._queue) + (1 if self.current.value is not None else 0)

    @property
    def pending(self) -> List[AnyCelebration]:
        return list(self._queue)

    # ==========================================
    # Producers
    # ==========================================

    def queue_level_up(
        self,
        new_level: int,
        previous_level: int,
        achievement: Optional[Achievement] = None
    ) -> bool:
        """
        Queue a level-up celebration unless this level was already celebrated.

        Returns:
            True if a celebration was queued
        """
        if new_level in self._shown_level_ups:
            logger.debug(f"Level {new_level} celebration already shown, skipping")
            return False

        self._shown_level_ups.add(new_level)
        self.enqueue(LevelUpCelebration(
            new_level=new_level,
            previous_level=previous_level,
            achievement=achievement,
        ))
        return True

    def queue_milestone_single(self, milestone: Milestone, milestone_index: int) -> bool:
        """Queue one milestone unless its title was already celebrated"""
        if milestone.title in self._shown_milestones:
            logger.debug(f"Milestone '{milestone.title}' already shown, skipping")
            return False

        self._shown_milestones.add(milestone.title)
        self.enqueue(MilestoneSingleCelebration(milestone=milestone, milestone_index=milestone_index))
        return True

    def queue_milestone_multiple(
        self,
        milestones: Iterable[Union[MilestoneEntry, Tuple[Milestone, int]]]
    ) -> bool:
        """
        Queue several milestones as one celebration.

        Titles already celebrated (by either milestone producer) are filtered
        out; nothing is queued if none remain.
        """
        fresh: List[MilestoneEntry] = []
        for entry in milestones:
            if not isinstance(entry, MilestoneEntry):
                milestone, index = entry
                entry = MilestoneEntry(milestone=milestone, index=index)
            title = entry.milestone.title
            if title in self._shown_milestones:
                continue
            self._shown_milestones.add(title)
            fresh.append(entry)

        if not fresh:
            logger.debug("All milestones already shown, skipping")
            return False

        self.enqueue(MilestoneMultipleCelebration(milestones=fresh))
        return True

    # ==========================================
    # Lifecycle
    # ==========================================

    def close(self) -> None:
        """Cancel the settle timer and drop queued items"""
        if self._settle_handle is not None:
            self._settle_handle.cancel()
            self._settle_handle = None
        self._queue.clear()
        self._closed = True
