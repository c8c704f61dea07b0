"""
Application Container

Wires the engine, the stores and the services together once per process
(or once per test). The FastAPI app keeps it on ``app.state.container``;
scripts and tests build their own.

Usage:
    container = build_container("sqlite+aiosqlite:///./studytimer.db")
    await container.init()
    tasks = await container.tasks.get_all_active()
    await container.dispose()
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from studytimer.db.base import create_engine, create_session_factory, init_db
from studytimer.services.study import (
    CalendarCountMerger,
    PomodoroSettingsService,
    PremiumPolicy,
    SessionLifecycleManager,
    StatsAggregator,
    TodayTasksService,
)
from studytimer.stores import (
    ReviewTaskStore,
    SettingsStore,
    StatsStore,
    StudySessionStore,
    SubjectGroupStore,
    TaskStore,
)

logger = logging.getLogger(__name__)


@dataclass
class Container:
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    # Stores
    groups: SubjectGroupStore
    tasks: TaskStore
    sessions: StudySessionStore
    reviews: ReviewTaskStore
    stats_store: StatsStore
    settings_store: SettingsStore

    # Services
    policy: PremiumPolicy
    stats: StatsAggregator
    calendar: CalendarCountMerger
    today: TodayTasksService
    lifecycle: SessionLifecycleManager
    settings: PomodoroSettingsService

    async def init(self) -> None:
        """Create missing tables."""
        await init_db(self.engine)

    async def dispose(self) -> None:
        await self.engine.dispose()


def build_container(
    url: Optional[str] = None, engine: Optional[AsyncEngine] = None
) -> Container:
    """
    Build every store and service on one engine.

    Args:
        url: Database URL (defaults to settings.DATABASE_URL); ignored when
            ``engine`` is given
        engine: Existing engine to reuse
    """
    engine = engine or create_engine(url)
    session_factory = create_session_factory(engine)

    groups = SubjectGroupStore(session_factory)
    tasks = TaskStore(session_factory)
    sessions = StudySessionStore(session_factory)
    reviews = ReviewTaskStore(session_factory)
    stats_store = StatsStore(session_factory)
    settings_store = SettingsStore(session_factory)

    # ON DELETE rules reach these stores' rows
    groups.cascade_to(tasks)
    tasks.cascade_to(sessions, reviews)
    sessions.cascade_to(reviews)

    policy = PremiumPolicy()
    stats = StatsAggregator(stats_store)

    logger.debug(f"Container built on {engine.url.render_as_string(hide_password=True)}")
    return Container(
        engine=engine,
        session_factory=session_factory,
        groups=groups,
        tasks=tasks,
        sessions=sessions,
        reviews=reviews,
        stats_store=stats_store,
        settings_store=settings_store,
        policy=policy,
        stats=stats,
        calendar=CalendarCountMerger(tasks, reviews),
        today=TodayTasksService(tasks, reviews),
        lifecycle=SessionLifecycleManager(session_factory, tasks, sessions, reviews, stats),
        settings=PomodoroSettingsService(settings_store, policy),
    )
