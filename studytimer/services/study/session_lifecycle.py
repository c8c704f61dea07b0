"""
Session Lifecycle Manager

Starts and finishes study sessions.

States: NOT_STARTED → RUNNING (start) → FINISHED (finish, terminal).

Finishing a session writes to four stores in one transaction:
1. The session row (end time, minutes, cycles, interruption flag)
2. The task's last_studied_at
3. The daily stats of the completion date
4. The review reminders, when reviews apply

Either all of it commits or none of it does. A session that is already
finished cannot be finished again (VALIDATION failure, nothing written).

Usage:
    manager = SessionLifecycleManager(session_factory, tasks, sessions, reviews, stats)

    session_id = (await manager.start(task, settings, cycles=4)).unwrap()
    outcome = await manager.finish(
        session_id, task, settings,
        total_work_minutes=100, current_cycle=4, total_cycles=4,
        is_interrupted=False, is_session_completed=True,
        review_intervals=[1, 3, 7],
    )
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studytimer.db.base import session_scope
from studytimer.enums.study import ErrorKind, SessionState
from studytimer.models.result import DomainError, DomainException, Failure, Result, Success
from studytimer.models.study import FinishOutcome, PomodoroSettings, Task
from studytimer.services.study import review_scheduler
from studytimer.services.study.overrides import effective_work_minutes
from studytimer.services.study.stats_aggregator import StatsAggregator
from studytimer.stores.base import store_operation
from studytimer.stores.review_task_store import ReviewTaskStore
from studytimer.stores.session_store import StudySessionStore
from studytimer.stores.task_store import TaskStore

logger = logging.getLogger(__name__)


class SessionLifecycleManager:
    """Orchestrates session start and finish across the stores."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tasks: TaskStore,
        sessions: StudySessionStore,
        reviews: ReviewTaskStore,
        stats: StatsAggregator,
    ):
        self.session_factory = session_factory
        self.tasks = tasks
        self.sessions = sessions
        self.reviews = reviews
        self.stats = stats

    async def start(
        self,
        task: Task,
        settings: PomodoroSettings,
        cycles: int,
        start_time: Optional[datetime] = None,
    ) -> Result[int]:
        """
        Persist a new running session.

        Planned duration is the effective work minutes (task override, else
        the global setting) times the number of cycles.

        Returns:
            The new session's id
        """
        if cycles < 1:
            return Failure(DomainError.validation("Cycles must be at least 1", field="cycles"))

        planned = effective_work_minutes(task, settings) * cycles
        result = await self.sessions.insert(task.id, start_time or datetime.now(), planned)
        if result.is_success:
            logger.info(
                f"Started session {result.value} for task {task.id} "
                f"({cycles} cycles, {planned} planned minutes)"
            )
        return result

    @store_operation("Failed to finish session")
    async def finish(
        self,
        session_id: int,
        task: Task,
        settings: PomodoroSettings,
        total_work_minutes: int,
        current_cycle: int,
        total_cycles: int,
        is_interrupted: bool,
        is_session_completed: bool,
        review_intervals: list[int],
        completion_date: Optional[date] = None,
    ) -> Result[FinishOutcome]:
        """
        Finish a running session.

        Args:
            session_id: Session to finish
            task: The session's task
            settings: Settings in effect (global review switch)
            total_work_minutes: Minutes actually worked
            current_cycle: Cycle reached when stopping
            total_cycles: Cycles planned
            is_interrupted: Stopped by the user before the end
            is_session_completed: All cycles were run
            review_intervals: Effective intervals (after the premium policy)
            completion_date: Date credited in stats and used for reminders
                (defaults to today)

        Returns:
            FinishOutcome with the updated session, daily stats and the
            reminders created
        """
        ended_at = datetime.now()
        completion_date = completion_date or ended_at.date()

        # Only fully completed sessions get credit for the last cycle
        cycles_completed = total_cycles if is_session_completed else current_cycle

        drafts = []
        if review_scheduler.should_generate(
            settings.review_enabled, task.review_enabled, is_interrupted, review_intervals
        ):
            drafts = review_scheduler.generate(
                session_id, task.id, completion_date, review_intervals
            )

        async with session_scope(self.session_factory) as db:
            session = (
                await self.sessions.finish(
                    session_id,
                    ended_at,
                    total_work_minutes,
                    cycles_completed,
                    is_interrupted,
                    db=db,
                )
            ).unwrap()
            if session.task_id != task.id:
                raise DomainException(
                    DomainError.validation(
                        f"Session {session_id} belongs to task {session.task_id}, not {task.id}",
                        field="task_id",
                    )
                )

            (await self.tasks.update_last_studied_at(task.id, ended_at, db=db)).unwrap()
            daily_stats = (
                await self.stats.update_stats(
                    completion_date, total_work_minutes, task.subject_name, db=db
                )
            ).unwrap()
            (await self.reviews.insert_all(drafts, db=db)).unwrap()

        logger.info(
            f"Finished session {session_id} for task {task.id}: {total_work_minutes} min, "
            f"{cycles_completed} cycles, interrupted={is_interrupted}, "
            f"{len(drafts)} review tasks"
        )
        return Success(
            FinishOutcome(session=session, daily_stats=daily_stats, reminders=drafts)
        )

    async def current_state(self, session_id: int) -> Result[SessionState]:
        """Lifecycle state of a session; unknown ids have not started."""
        result = await self.sessions.get_by_id(session_id)
        if result.is_failure and result.error.kind == ErrorKind.NOT_FOUND:
            return Success(SessionState.NOT_STARTED)
        return result.map(lambda session: session.state)
