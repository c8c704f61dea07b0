"""
Task Store

Persists study tasks and answers the schedule queries used by the today
view and the calendar.

Schedule rules:
- REPEAT tasks occur on every date whose ISO weekday is in repeat_days
- DEADLINE / SPECIFIC tasks occur once, on deadline_date / specific_date
- NONE tasks never appear on the calendar

Only active tasks take part in schedule queries and counts.
"""

import logging
from collections import Counter
from collections.abc import AsyncIterator
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from studytimer.db.models import SubjectGroupRow, TaskRow
from studytimer.enums.study import ScheduleType
from studytimer.models.result import DomainError, DomainException, Failure, Result, Success
from studytimer.models.study import Task, TaskCreate, TaskProgressUpdate
from studytimer.stores.base import BaseStore, store_operation

logger = logging.getLogger(__name__)

_ONE_OFF_TYPES = (ScheduleType.DEADLINE, ScheduleType.SPECIFIC)


def _to_task(row: TaskRow) -> Task:
    return Task.model_validate(row)


def _schedule_columns(task) -> dict:
    """Column values for a task's schedule, clearing fields its type ignores."""
    schedule_type = task.schedule_type
    return {
        "schedule_type": schedule_type,
        "repeat_days": sorted(task.repeat_days) if schedule_type == ScheduleType.REPEAT else [],
        "deadline_date": task.deadline_date if schedule_type == ScheduleType.DEADLINE else None,
        "specific_date": task.specific_date if schedule_type == ScheduleType.SPECIFIC else None,
    }


async def _check_group(session: AsyncSession, group_id: Optional[int]) -> None:
    if group_id is not None and await session.get(SubjectGroupRow, group_id) is None:
        raise DomainException(DomainError.not_found(f"Subject group {group_id} not found"))


class TaskStore(BaseStore):
    """Persistence for Task rows."""

    # =========================================================================
    # Reads
    # =========================================================================

    @store_operation("Failed to load task")
    async def get_by_id(self, task_id: int, db: Optional[AsyncSession] = None) -> Result[Task]:
        async with self.transaction(db) as session:
            row = await session.get(TaskRow, task_id)
            if row is None:
                return Failure(DomainError.not_found(f"Task {task_id} not found"))
            await _check_group(session, row.group_id)
            return Success(_to_task(row))

    @store_operation("Failed to load active tasks")
    async def get_all_active(self) -> Result[list[Task]]:
        async with self.transaction() as session:
            rows = await session.scalars(
                select(TaskRow)
                .where(TaskRow.is_active.is_(True))
                .order_by(TaskRow.updated_at.desc(), TaskRow.id.desc())
            )
            return Success([_to_task(row) for row in rows.unique()])

    @store_operation("Failed to load tasks for group")
    async def get_by_group(self, group_id: int) -> Result[list[Task]]:
        async with self.transaction() as session:
            rows = await session.scalars(
                select(TaskRow)
                .where(TaskRow.group_id == group_id, TaskRow.is_active.is_(True))
                .order_by(TaskRow.created_at.desc(), TaskRow.id.desc())
            )
            return Success([_to_task(row) for row in rows.unique()])

    @store_operation("Failed to load scheduled tasks")
    async def get_scheduled_for_date(self, day: date) -> Result[list[Task]]:
        """Active tasks whose schedule rule places them on ``day``."""
        async with self.transaction() as session:
            rows = await session.scalars(
                select(TaskRow)
                .where(
                    TaskRow.is_active.is_(True),
                    or_(
                        TaskRow.schedule_type == ScheduleType.REPEAT,
                        (TaskRow.schedule_type == ScheduleType.DEADLINE)
                        & (TaskRow.deadline_date == day),
                        (TaskRow.schedule_type == ScheduleType.SPECIFIC)
                        & (TaskRow.specific_date == day),
                    ),
                )
                .order_by(TaskRow.id)
            )
            # Weekday membership is checked on the decoded JSON list
            tasks = [_to_task(row) for row in rows.unique()]
            return Success([task for task in tasks if task.is_scheduled_on(day)])

    @store_operation("Failed to load upcoming deadlines")
    async def get_upcoming_deadlines(self, start: date, end: date) -> Result[list[Task]]:
        """Active deadline tasks due strictly after ``start`` and up to ``end``."""
        async with self.transaction() as session:
            rows = await session.scalars(
                select(TaskRow)
                .where(
                    TaskRow.is_active.is_(True),
                    TaskRow.schedule_type == ScheduleType.DEADLINE,
                    TaskRow.deadline_date > start,
                    TaskRow.deadline_date <= end,
                )
                .order_by(TaskRow.deadline_date, TaskRow.id)
            )
            return Success([_to_task(row) for row in rows.unique()])

    @store_operation("Failed to load recurring tasks")
    async def get_repeat_tasks(self) -> Result[list[Task]]:
        async with self.transaction() as session:
            rows = await session.scalars(
                select(TaskRow).where(
                    TaskRow.is_active.is_(True),
                    TaskRow.schedule_type == ScheduleType.REPEAT,
                )
            )
            return Success([_to_task(row) for row in rows.unique()])

    @store_operation("Failed to count tasks by date")
    async def count_by_date_range(self, start: date, end: date) -> Result[dict[date, int]]:
        """
        Per-date count of active scheduled tasks in [start, end].

        One-off tasks are counted on their date; recurring tasks are counted
        on every matching weekday. Dates with no tasks are absent.
        """
        counts: Counter[date] = Counter()
        async with self.transaction() as session:
            for column, schedule_type in (
                (TaskRow.deadline_date, ScheduleType.DEADLINE),
                (TaskRow.specific_date, ScheduleType.SPECIFIC),
            ):
                result = await session.execute(
                    select(column, func.count())
                    .where(
                        TaskRow.is_active.is_(True),
                        TaskRow.schedule_type == schedule_type,
                        column.between(start, end),
                    )
                    .group_by(column)
                )
                for day, count in result:
                    counts[day] += count

            repeat_rows = await session.scalars(
                select(TaskRow.repeat_days).where(
                    TaskRow.is_active.is_(True),
                    TaskRow.schedule_type == ScheduleType.REPEAT,
                )
            )
            repeat_days = [set(days or []) for days in repeat_rows]

        # Offsets never step past ``end``, which may be date.max
        for offset in range((end - start).days + 1):
            day = start + timedelta(days=offset)
            matching = sum(1 for days in repeat_days if day.isoweekday() in days)
            if matching:
                counts[day] += matching

        return Success(dict(counts))

    async def watch_all_active(self) -> AsyncIterator[Result[list[Task]]]:
        async for result in self._watch(self.get_all_active):
            yield result

    # =========================================================================
    # Mutations
    # =========================================================================

    @store_operation("Failed to create task")
    async def insert(self, draft: TaskCreate, db: Optional[AsyncSession] = None) -> Result[int]:
        error = draft.schedule_error()
        if error is not None:
            return Failure(error)

        async with self.transaction(db) as session:
            await _check_group(session, draft.group_id)
            row = TaskRow(
                group_id=draft.group_id,
                name=draft.name,
                work_duration_minutes=draft.work_duration_minutes,
                review_count=draft.review_count,
                review_enabled=draft.review_enabled,
                **_schedule_columns(draft),
            )
            session.add(row)
            await session.flush()
            self._changed(session)
            logger.info(f"Created task {row.id} ({draft.name!r}, {draft.schedule_type.value})")
            return Success(row.id)

    @store_operation("Failed to update task")
    async def update(self, task: Task, db: Optional[AsyncSession] = None) -> Result[Task]:
        error = task.schedule_error()
        if error is not None:
            return Failure(error)

        async with self.transaction(db) as session:
            row = await session.get(TaskRow, task.id)
            if row is None:
                return Failure(DomainError.not_found(f"Task {task.id} not found"))
            await _check_group(session, task.group_id)

            row.group_id = task.group_id
            row.name = task.name
            row.work_duration_minutes = task.work_duration_minutes
            row.is_active = task.is_active
            row.review_count = task.review_count
            row.review_enabled = task.review_enabled
            for column, value in _schedule_columns(task).items():
                setattr(row, column, value)
            row.updated_at = datetime.now()

            await session.flush()
            # Reload so the joined group reflects a changed group_id
            row = await session.get(TaskRow, task.id, populate_existing=True)
            self._changed(session)
            return Success(_to_task(row))

    @store_operation("Failed to delete task")
    async def delete(self, task_id: int, db: Optional[AsyncSession] = None) -> Result[None]:
        """Delete a task; its sessions and review reminders cascade."""
        async with self.transaction(db) as session:
            result = await session.execute(delete(TaskRow).where(TaskRow.id == task_id))
            if result.rowcount == 0:
                return Failure(DomainError.not_found(f"Task {task_id} not found"))
            self._changed(session, cascade=True)
            logger.info(f"Deleted task {task_id}")
            return Success(None)

    @store_operation("Failed to deactivate task")
    async def deactivate(self, task_id: int, db: Optional[AsyncSession] = None) -> Result[None]:
        return await self._update_columns(task_id, db, is_active=False)

    @store_operation("Failed to update task progress")
    async def update_progress(
        self, task_id: int, progress: TaskProgressUpdate, db: Optional[AsyncSession] = None
    ) -> Result[None]:
        return await self._update_columns(
            task_id,
            db,
            progress_note=progress.progress_note,
            progress_percent=progress.progress_percent,
            next_goal=progress.next_goal,
        )

    @store_operation("Failed to update last studied time")
    async def update_last_studied_at(
        self, task_id: int, studied_at: datetime, db: Optional[AsyncSession] = None
    ) -> Result[None]:
        return await self._update_columns(task_id, db, last_studied_at=studied_at)

    async def _update_columns(
        self, task_id: int, db: Optional[AsyncSession], **values
    ) -> Result[None]:
        async with self.transaction(db) as session:
            result = await session.execute(
                update(TaskRow)
                .where(TaskRow.id == task_id)
                .values(updated_at=datetime.now(), **values)
            )
            if result.rowcount == 0:
                raise DomainException(DomainError.not_found(f"Task {task_id} not found"))
            self._changed(session)
            return Success(None)
