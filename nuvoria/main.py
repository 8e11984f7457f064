"""Demo session against the in-memory store"""
import logging
import asyncio
from datetime import date, datetime, timedelta

from nuvoria.config import validate_config, LOG_LEVEL
from nuvoria.gamification.mock_store import InMemoryStore
from nuvoria.gamification.dashboards import get_dashboard_stats
from nuvoria.models import Habit, XPReward, describe_reward
from nuvoria.services import ServiceContainer, SessionIdentityProvider

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper())
)

logger = logging.getLogger(__name__)

DEMO_USER = "demo-user"


def _seed(store: InMemoryStore, today: date) -> Habit:
    habit = Habit(
        id="morning-routine",
        name="Morning routine",
        tasks=["stretch", "water", "journal"],
        created_at=datetime.combine(today - timedelta(days=7), datetime.min.time()),
    )
    store.add_habit(DEMO_USER, habit)
    store.set_total_xp(DEMO_USER, 70)
    return habit


def _log_stats(snapshot) -> None:
    if snapshot is not None:
        logger.info(
            f"Stats: level {snapshot.level} ({snapshot.title}), "
            f"{snapshot.current_level_xp}/{snapshot.xp_for_next_level} XP"
        )


def _log_celebration(celebration) -> None:
    if celebration is not None:
        logger.info(f"Celebration: {celebration.type} ({celebration.id})")


def _log_toast(toast) -> None:
    if toast is not None:
        logger.info(f"Toast: {toast.quest_name} {describe_reward(toast.reward)}")


async def main() -> None:
    """Run one scripted session: sign in, complete tasks, finish a quest, sign out"""
    container = None
    try:
        logger.info("Validating configuration...")
        validate_config()

        today = date.today()
        store = InMemoryStore(today=lambda: today)
        habit = _seed(store, today)

        identity = SessionIdentityProvider()
        container = ServiceContainer(habit_store=store, xp_store=store, identity=identity)
        container.bind_identity()

        identity.sign_in(DEMO_USER)
        await container.wait_idle()
        await asyncio.sleep(container.level_up_watcher.grace_seconds)

        container.stats_service.snapshot.subscribe(_log_stats)
        container.celebration_queue.current.subscribe(_log_celebration)
        container.quest_toast_queue.current.subscribe(_log_toast)

        habits = await store.fetch_habits(DEMO_USER)
        await container.progression_service.check_unclaimed_milestones(habits, today)

        for task_id in habit.tasks:
            await container.progression_service.toggle_task(habit.id, today.isoformat(), task_id)

        celebrations = container.celebration_queue
        while celebrations.queue_length:
            # Nothing current means the next one is still settling
            if celebrations.current.value is not None:
                celebrations.dismiss_current_celebration()
            await asyncio.sleep(celebrations.settle_delay * 2)

        container.progression_service.show_quest_completion("First steps", XPReward(amount=50))
        container.quest_toast_queue.dismiss()

        habits = await store.fetch_habits(DEMO_USER)
        logger.info(f"Dashboard: {get_dashboard_stats(habits, today)}")

        identity.sign_out()

    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        if container:
            await container.shutdown()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
