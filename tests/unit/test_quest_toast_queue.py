"""Unit tests for QuestToastQueue (nuvoria/services/quest_toast_queue.py)"""
import asyncio
import pytest

from nuvoria.models import BoostReward, TitleReward, XPReward
from nuvoria.services.quest_toast_queue import QuestToastQueue

DISPLAY = 0.1
HIDE = 0.05
DELAY = 0.05
# call_later may fire within the clock resolution of its deadline
EPSILON = 0.005


@pytest.fixture
def toasts():
    q = QuestToastQueue(display_seconds=DISPLAY, hide_animation_seconds=HIDE, delay_before_next_seconds=DELAY)
    yield q
    q.close()


class TestShow:

    @pytest.mark.asyncio
    async def test_show_displays_immediately(self, toasts):
        toast = toasts.show("Early bird", XPReward(amount=50))

        assert toasts.current.value is toast
        assert toasts.visible.value is True
        assert toasts.queue_length == 0

    @pytest.mark.asyncio
    async def test_second_toast_waits(self, toasts):
        first = toasts.show("Early bird", XPReward(amount=50))
        toasts.show("Night owl", TitleReward(key="titles.night_owl"))

        assert toasts.current.value is first
        assert toasts.queue_length == 1

    @pytest.mark.asyncio
    async def test_no_deduplication(self, toasts):
        a = toasts.show("Early bird", XPReward(amount=50))
        b = toasts.show("Early bird", XPReward(amount=50))

        assert a.id != b.id
        assert toasts.queue_length == 1


class TestAutoDismiss:

    @pytest.mark.asyncio
    async def test_auto_dismiss_sequence(self, toasts):
        first = toasts.show("Early bird", XPReward(amount=50))
        second = toasts.show("Streak keeper", BoostReward(percent=10, duration_hours=24))

        await asyncio.sleep(DISPLAY / 2)
        assert toasts.visible.value is True
        assert toasts.current.value is first

        await asyncio.sleep(DISPLAY / 2 + (HIDE + DELAY) / 2)
        assert toasts.visible.value is False
        assert toasts.current.value is first

        await asyncio.sleep((HIDE + DELAY) / 2 + DISPLAY / 2)
        assert toasts.current.value is second
        assert toasts.visible.value is True

    @pytest.mark.asyncio
    async def test_timing_windows(self, toasts):
        loop = asyncio.get_running_loop()
        events = {}
        toasts.visible.subscribe(lambda v: v is False and events.setdefault("hidden", loop.time()))
        toasts.current.subscribe(
            lambda t: t is not None and t.quest_name == "Second" and events.setdefault("promoted", loop.time())
        )

        started = loop.time()
        toasts.show("First", XPReward(amount=10))
        toasts.show("Second", XPReward(amount=20))
        await asyncio.sleep(DISPLAY + HIDE + DELAY + 0.1)

        assert events["hidden"] - started >= DISPLAY - EPSILON
        assert events["promoted"] - events["hidden"] >= HIDE + DELAY - EPSILON

    @pytest.mark.asyncio
    async def test_queue_drains(self, toasts):
        toasts.show("First", XPReward(amount=10))

        await asyncio.sleep(DISPLAY + HIDE + DELAY + 0.05)

        assert toasts.current.value is None
        assert toasts.visible.value is False


class TestManualDismiss:

    @pytest.mark.asyncio
    async def test_dismiss_hides_immediately(self, toasts):
        toasts.show("First", XPReward(amount=10))
        second = toasts.show("Second", XPReward(amount=20))

        toasts.dismiss()
        assert toasts.visible.value is False

        await asyncio.sleep(HIDE + DELAY + 0.03)
        assert toasts.current.value is second
        assert toasts.visible.value is True

    @pytest.mark.asyncio
    async def test_dismiss_cancels_auto_dismiss(self, toasts):
        toasts.show("First", XPReward(amount=10))
        second = toasts.show("Second", XPReward(amount=20))

        await asyncio.sleep(DISPLAY / 2)
        toasts.dismiss()

        # Past the first toast's original auto-dismiss, before the second's
        await asyncio.sleep(HIDE + DELAY + DISPLAY * 0.7)

        assert toasts.current.value is second
        assert toasts.visible.value is True

    @pytest.mark.asyncio
    async def test_second_dismiss_during_hide_is_noop(self, toasts):
        toasts.show("First", XPReward(amount=10))
        second = toasts.show("Second", XPReward(amount=20))

        toasts.dismiss()
        await asyncio.sleep((HIDE + DELAY) / 2)
        toasts.dismiss()

        await asyncio.sleep((HIDE + DELAY) / 2 + 0.02)
        assert toasts.current.value is second

    def test_dismiss_with_nothing_shown(self, toasts):
        toasts.dismiss()
        assert toasts.current.value is None


@pytest.mark.asyncio
async def test_close_cancels_timers(toasts):
    toasts.show("First", XPReward(amount=10))
    toasts.show("Second", XPReward(amount=20))

    toasts.close()
    await asyncio.sleep(DISPLAY + HIDE + DELAY + 0.05)

    assert toasts.current.value is None
    assert toasts.visible.value is False
    assert toasts.queue_length == 0
