"""
Quest Toast Queue

Auto-dismissing quest completion toasts, shown one at a time in arrival order.
No de-duplication: every show() call produces a toast.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Optional

from nuvoria import config
from nuvoria.models.celebration import QuestReward, QuestToastNotification, describe_reward
from nuvoria.services.observable import Observable

logger = logging.getLogger(__name__)


class QuestToastQueue:
    """
    Toast slot with a FIFO backlog.

    Display sequence per toast: visible for `display_seconds`, then hidden,
    then cleared after `hide_animation_seconds + delay_before_next_seconds`,
    then the next toast is promoted.
    """

    def __init__(
        self,
        display_seconds: Optional[float] = None,
        hide_animation_seconds: Optional[float] = None,
        delay_before_next_seconds: Optional[float] = None
    ):
        self.display_seconds = config.TOAST_DISPLAY_SECONDS if display_seconds is None else display_seconds
        self.hide_animation_seconds = (
            config.TOAST_HIDE_ANIMATION_SECONDS if hide_animation_seconds is None else hide_animation_seconds
        )
        self.delay_before_next_seconds = (
            config.TOAST_DELAY_BEFORE_NEXT_SECONDS if delay_before_next_seconds is None else delay_before_next_seconds
        )

        self.current: Observable[QuestToastNotification] = Observable(None, name="current_toast")
        self.visible: Observable[bool] = Observable(False, name="toast_visible")
        self._queue: Deque[QuestToastNotification] = deque()
        self._processing = False
        self._auto_dismiss_handle: Optional[asyncio.TimerHandle] = None
        self._clear_handle: Optional[asyncio.TimerHandle] = None

    @property
    def queue_length(self) -> int:
        """Toasts waiting behind the displayed one"""
        return len(self._queue)

    def show(self, quest_name: str, reward: QuestReward) -> QuestToastNotification:
        """Queue a quest completion toast; displays it at once when the slot is free"""
        toast = QuestToastNotification(quest_name=quest_name, reward=reward)
        self._queue.append(toast)
        logger.debug(f"Queued quest toast '{quest_name}' ({describe_reward(reward)})")

        if self.current.value is None and not self._processing:
            self._process_next()
        return toast

    def dismiss(self) -> None:
        """Hide the displayed toast now instead of waiting for auto-dismiss"""
        if self.current.value is None or not self.visible.value:
            return
        self._hide()

    def _process_next(self) -> None:
        if not self._queue:
            self._processing = False
            return

        self._processing = True
        toast = self._queue.popleft()
        self.current.set(toast)
        self.visible.set(True)
        logger.debug(f"Showing quest toast {toast.id}")

        loop = asyncio.get_running_loop()
        self._auto_dismiss_handle = loop.call_later(self.display_seconds, self._hide)

    def _hide(self) -> None:
        if self._auto_dismiss_handle is not None:
            self._auto_dismiss_handle.cancel()
            self._auto_dismiss_handle = None

        self.visible.set(False)
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(
            self.hide_animation_seconds + self.delay_before_next_seconds,
            self._clear_and_next
        )

    def _clear_and_next(self) -> None:
        self._clear_handle = None
        self.current.set(None)
        self._processing = False
        self._process_next()

    def close(self) -> None:
        """Cancel timers and drop everything queued or displayed"""
        for handle in (self._auto_dismiss_handle, self._clear_handle):
            if handle is not None:
                handle.cancel()
        self._auto_dismiss_handle = None
        self._clear_handle = None
        self._queue.clear()
        self._processing = False
        self.visible.set(False)
        self.current.set(None)
