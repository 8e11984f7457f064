"""Integration tests for ServiceContainer session lifecycle"""
import asyncio
import pytest
from datetime import datetime

from nuvoria.models import Habit, XPReward
from nuvoria.services.container import ServiceContainer
from nuvoria.services.identity import SessionIdentityProvider


@pytest.fixture
def fast_config(monkeypatch):
    """Shrink every timer so lifecycle tests run quickly"""
    from nuvoria import config

    monkeypatch.setattr(config, "STATS_REFRESH_DEBOUNCE_SECONDS", 0.0)
    monkeypatch.setattr(config, "CELEBRATION_SETTLE_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(config, "LEVEL_WATCHER_GRACE_SECONDS", 0.01)
    monkeypatch.setattr(config, "TOAST_DISPLAY_SECONDS", 0.05)
    monkeypatch.setattr(config, "TOAST_HIDE_ANIMATION_SECONDS", 0.01)
    monkeypatch.setattr(config, "TOAST_DELAY_BEFORE_NEXT_SECONDS", 0.01)


@pytest.fixture
def identity():
    return SessionIdentityProvider()


@pytest.fixture
def container(fast_config, memory_store, identity, test_user_id, today):
    memory_store.add_habit(test_user_id, Habit(
        id="h1",
        name="Morning routine",
        tasks=["stretch", "water"],
        created_at=datetime.combine(today, datetime.min.time()),
    ))
    memory_store.set_total_xp(test_user_id, 70)
    c = ServiceContainer(habit_store=memory_store, xp_store=memory_store, identity=identity)
    c.bind_identity()
    return c


class TestLazyServices:

    def test_services_are_cached(self, container):
        assert container.stats_service is container.stats_service
        assert container.celebration_queue is container.celebration_queue
        assert container.quest_toast_queue is container.quest_toast_queue
        assert container.progression_service.stats_service is container.stats_service
        assert container.level_up_watcher.celebrations is container.celebration_queue


class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_sign_in_loads_stats(self, container, identity, test_user_id):
        identity.sign_in(test_user_id)
        await container.wait_idle()

        stats = container.stats_service.stats
        assert stats.level == 1
        assert stats.current_level_xp == 70
        assert stats.active_habits == 1
        assert container.level_up_watcher.previous_level == 1

        await container.shutdown()

    @pytest.mark.asyncio
    async def test_sign_out_clears_session(self, container, identity, test_user_id):
        identity.sign_in(test_user_id)
        await container.wait_idle()
        queue = container.celebration_queue
        queue.queue_level_up(5, 4)

        identity.sign_out()

        assert container.stats_service.stats is None
        assert queue.queue_length == 1  # closed queue keeps its current item
        assert container.celebration_queue is not queue
        assert container.celebration_queue.queue_level_up(5, 4) is True

        await container.shutdown()

    @pytest.mark.asyncio
    async def test_new_session_gets_fresh_dedup_state(self, container, identity, test_user_id):
        identity.sign_in(test_user_id)
        await container.wait_idle()
        assert container.celebration_queue.queue_level_up(3, 2) is True

        identity.sign_out()
        identity.sign_in(test_user_id)
        await container.wait_idle()

        assert container.celebration_queue.queue_level_up(3, 2) is True

        await container.shutdown()

    @pytest.mark.asyncio
    async def test_level_up_during_session(self, container, identity, test_user_id, today):
        identity.sign_in(test_user_id)
        await container.wait_idle()
        await asyncio.sleep(0.05)

        await container.progression_service.toggle_task("h1", today.isoformat(), "stretch")

        assert container.stats_service.stats.level == 2
        celebration = container.celebration_queue.current.value
        assert celebration.type == "level_up"
        assert celebration.new_level == 2
        assert celebration.previous_level == 1

        await container.shutdown()

    @pytest.mark.asyncio
    async def test_switching_users_sets_fresh_baseline(self, container, identity, memory_store, monkeypatch):
        memory_store.set_total_xp("alice", 0)
        memory_store.set_total_xp("bob", 500)
        identity.sign_in("alice")
        await container.wait_idle()
        await asyncio.sleep(0.03)
        assert container.stats_service.stats.level == 1

        original = memory_store.get_user_xp_stats

        async def slow_xp_stats(user_id):
            if user_id == "bob":
                await asyncio.sleep(0.05)
            return await original(user_id)

        monkeypatch.setattr(memory_store, "get_user_xp_stats", slow_xp_stats)

        # No sign-out in between
        identity.sign_in("bob")
        await container.wait_idle()
        await asyncio.sleep(0.03)

        assert container.stats_service.stats.level == 5
        assert container.level_up_watcher.previous_level == 5
        assert container.celebration_queue.current.value is None
        assert container.celebration_queue.queue_length == 0

        await container.shutdown()

    @pytest.mark.asyncio
    async def test_sign_out_closes_toasts(self, container, identity, test_user_id):
        identity.sign_in(test_user_id)
        await container.wait_idle()
        container.progression_service.show_quest_completion("First steps", XPReward(amount=10))

        identity.sign_out()

        assert container.quest_toast_queue.current.value is None
        await container.shutdown()


class TestShutdown:

    @pytest.mark.asyncio
    async def test_shutdown_unsubscribes_identity(self, container, identity, test_user_id):
        await container.shutdown()

        identity.sign_in(test_user_id)
        await container.wait_idle()

        assert container.stats_service.stats is None

    @pytest.mark.asyncio
    async def test_shutdown_cancels_pending_session_start(self, container, identity, test_user_id):
        identity.sign_in(test_user_id)

        await container.shutdown()

        assert container.stats_service.stats is None

    @pytest.mark.asyncio
    async def test_start_session_without_user(self, container):
        await container.start_session()

        assert container.stats_service.stats is None
        await container.shutdown()
