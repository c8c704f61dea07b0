"""
Study Session Store

Persists timed study sessions. A session row is created when the timer
starts and written exactly once more when it finishes; a finished session
is never reopened.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from studytimer.db.models import StudySessionRow, TaskRow
from studytimer.models.result import DomainError, Failure, Result, Success
from studytimer.models.study import StudySession
from studytimer.stores.base import BaseStore, store_operation

logger = logging.getLogger(__name__)


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class StudySessionStore(BaseStore):
    """Persistence for StudySession rows."""

    @store_operation("Failed to load study session")
    async def get_by_id(
        self, session_id: int, db: Optional[AsyncSession] = None
    ) -> Result[StudySession]:
        async with self.transaction(db) as session:
            row = await session.get(StudySessionRow, session_id)
            if row is None:
                return Failure(DomainError.not_found(f"Study session {session_id} not found"))
            return Success(StudySession.model_validate(row))

    @store_operation("Failed to load sessions for task")
    async def get_by_task(self, task_id: int) -> Result[list[StudySession]]:
        async with self.transaction() as session:
            rows = await session.scalars(
                select(StudySessionRow)
                .where(StudySessionRow.task_id == task_id)
                .order_by(StudySessionRow.started_at.desc())
            )
            return Success([StudySession.model_validate(row) for row in rows])

    @store_operation("Failed to load sessions for day")
    async def get_for_day(self, day: date) -> Result[list[StudySession]]:
        start, end = _day_bounds(day)
        async with self.transaction() as session:
            rows = await session.scalars(
                select(StudySessionRow)
                .where(StudySessionRow.started_at >= start, StudySessionRow.started_at < end)
                .order_by(StudySessionRow.started_at)
            )
            return Success([StudySession.model_validate(row) for row in rows])

    @store_operation("Failed to total minutes for day")
    async def get_total_minutes_for_day(self, day: date) -> Result[int]:
        return await self._sum_for_day(StudySessionRow.work_duration_minutes, day)

    @store_operation("Failed to total cycles for day")
    async def get_total_cycles_for_day(self, day: date) -> Result[int]:
        return await self._sum_for_day(StudySessionRow.cycles_completed, day)

    async def _sum_for_day(self, column, day: date) -> Result[int]:
        start, end = _day_bounds(day)
        async with self.transaction() as session:
            total = await session.scalar(
                select(func.coalesce(func.sum(column), 0)).where(
                    StudySessionRow.started_at >= start, StudySessionRow.started_at < end
                )
            )
            return Success(int(total or 0))

    @store_operation("Failed to create study session")
    async def insert(
        self,
        task_id: int,
        started_at: datetime,
        planned_duration_minutes: int,
        db: Optional[AsyncSession] = None,
    ) -> Result[int]:
        async with self.transaction(db) as session:
            if await session.get(TaskRow, task_id) is None:
                return Failure(DomainError.not_found(f"Task {task_id} not found"))
            row = StudySessionRow(
                task_id=task_id,
                started_at=started_at,
                planned_duration_minutes=planned_duration_minutes,
            )
            session.add(row)
            await session.flush()
            self._changed(session)
            return Success(row.id)

    @store_operation("Failed to finish study session")
    async def finish(
        self,
        session_id: int,
        ended_at: datetime,
        work_duration_minutes: int,
        cycles_completed: int,
        was_interrupted: bool,
        db: Optional[AsyncSession] = None,
    ) -> Result[StudySession]:
        """
        Close a running session.

        The ``ended_at IS NULL`` guard makes the transition atomic: a second
        finish of the same session matches no row and fails with VALIDATION.
        """
        async with self.transaction(db) as session:
            result = await session.execute(
                update(StudySessionRow)
                .where(StudySessionRow.id == session_id, StudySessionRow.ended_at.is_(None))
                .values(
                    ended_at=ended_at,
                    work_duration_minutes=work_duration_minutes,
                    cycles_completed=cycles_completed,
                    was_interrupted=was_interrupted,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                exists = await session.scalar(
                    select(StudySessionRow.id).where(StudySessionRow.id == session_id)
                )
                if exists is None:
                    return Failure(DomainError.not_found(f"Study session {session_id} not found"))
                return Failure(
                    DomainError.validation(
                        f"Study session {session_id} is already finished", field="session_id"
                    )
                )

            row = await session.get(StudySessionRow, session_id, populate_existing=True)
            self._changed(session)
            return Success(StudySession.model_validate(row))

    @store_operation("Failed to delete study session")
    async def delete(self, session_id: int, db: Optional[AsyncSession] = None) -> Result[None]:
        """Delete a session; its review reminders cascade."""
        async with self.transaction(db) as session:
            result = await session.execute(
                delete(StudySessionRow).where(StudySessionRow.id == session_id)
            )
            if result.rowcount == 0:
                return Failure(DomainError.not_found(f"Study session {session_id} not found"))
            self._changed(session, cascade=True)
            logger.info(f"Deleted study session {session_id}")
            return Success(None)
