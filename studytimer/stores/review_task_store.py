"""
Review Task Store

Persists spaced-repetition reminders generated when a study session
finishes, and answers the date and classification queries of the review
screens and the calendar.

Completion invariant: ``completed_at`` is set exactly when ``is_completed``
is true. Marking a completed reminder completed again keeps the original
``completed_at``. Rescheduling only moves ``scheduled_date``.
"""

import logging
from collections.abc import AsyncIterator
from datetime import date, datetime
from typing import Optional

from sqlalchemy import and_, delete, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from studytimer.db.models import ReviewTaskRow, SubjectGroupRow, TaskRow
from studytimer.models.result import DomainError, Failure, Result, Success
from studytimer.models.study import ReviewTask, ReviewTaskDraft
from studytimer.stores.base import BaseStore, store_operation

logger = logging.getLogger(__name__)

_ORDER = (ReviewTaskRow.scheduled_date, ReviewTaskRow.review_number, ReviewTaskRow.id)


def _details_query():
    """Reminders joined with their task and group names."""
    return (
        select(
            ReviewTaskRow,
            TaskRow.name.label("task_name"),
            SubjectGroupRow.name.label("group_name"),
        )
        .join(TaskRow, TaskRow.id == ReviewTaskRow.task_id)
        .outerjoin(SubjectGroupRow, SubjectGroupRow.id == TaskRow.group_id)
    )


def _to_review(row: ReviewTaskRow, task_name=None, group_name=None) -> ReviewTask:
    review = ReviewTask.model_validate(row)
    if task_name is None and group_name is None:
        return review
    return review.model_copy(update={"task_name": task_name, "group_name": group_name})


class ReviewTaskStore(BaseStore):
    """Persistence for ReviewTask rows."""

    # =========================================================================
    # Reads
    # =========================================================================

    @store_operation("Failed to load review task")
    async def get_by_id(self, review_id: int) -> Result[ReviewTask]:
        async with self.transaction() as session:
            row = await session.get(ReviewTaskRow, review_id)
            if row is None:
                return Failure(DomainError.not_found(f"Review task {review_id} not found"))
            return Success(_to_review(row))

    @store_operation("Failed to load review tasks for session")
    async def get_by_session(self, study_session_id: int) -> Result[list[ReviewTask]]:
        return await self._select_with_details(
            ReviewTaskRow.study_session_id == study_session_id
        )

    @store_operation("Failed to load review tasks for task")
    async def get_by_task(self, task_id: int) -> Result[list[ReviewTask]]:
        return await self._select_with_details(ReviewTaskRow.task_id == task_id)

    @store_operation("Failed to load pending review tasks")
    async def get_pending_for_date(self, day: date) -> Result[list[ReviewTask]]:
        return await self._select_with_details(
            ReviewTaskRow.scheduled_date == day,
            ReviewTaskRow.is_completed.is_(False),
        )

    @store_operation("Failed to load review tasks for date")
    async def get_all_for_date(self, day: date) -> Result[list[ReviewTask]]:
        return await self._select_with_details(ReviewTaskRow.scheduled_date == day)

    @store_operation("Failed to load overdue and today's review tasks")
    async def get_overdue_and_today(self, day: date) -> Result[list[ReviewTask]]:
        """Incomplete reminders before ``day`` plus every reminder on ``day``."""
        return await self._select_with_details(
            or_(
                and_(
                    ReviewTaskRow.scheduled_date < day,
                    ReviewTaskRow.is_completed.is_(False),
                ),
                ReviewTaskRow.scheduled_date == day,
            )
        )

    @store_operation("Failed to load review tasks")
    async def get_all_with_details(self) -> Result[list[ReviewTask]]:
        return await self._select_with_details()

    async def _select_with_details(self, *conditions) -> Result[list[ReviewTask]]:
        async with self.transaction() as session:
            result = await session.execute(_details_query().where(*conditions).order_by(*_ORDER))
            return Success(
                [_to_review(row, task_name, group_name) for row, task_name, group_name in result]
            )

    @store_operation("Failed to count review tasks by date")
    async def count_by_date_range(self, start: date, end: date) -> Result[dict[date, int]]:
        """Per-date reminder count in [start, end], completed ones included."""
        async with self.transaction() as session:
            result = await session.execute(
                select(ReviewTaskRow.scheduled_date, func.count())
                .where(ReviewTaskRow.scheduled_date.between(start, end))
                .group_by(ReviewTaskRow.scheduled_date)
            )
            return Success({day: count for day, count in result})

    @store_operation("Failed to count pending review tasks")
    async def get_pending_count_for_date(self, day: date) -> Result[int]:
        return await self._count(
            ReviewTaskRow.scheduled_date == day, ReviewTaskRow.is_completed.is_(False)
        )

    @store_operation("Failed to count review tasks")
    async def get_total_count(self) -> Result[int]:
        return await self._count()

    @store_operation("Failed to count incomplete review tasks")
    async def get_incomplete_count(self) -> Result[int]:
        return await self._count(ReviewTaskRow.is_completed.is_(False))

    async def _count(self, *conditions) -> Result[int]:
        async with self.transaction() as session:
            total = await session.scalar(
                select(func.count()).select_from(ReviewTaskRow).where(*conditions)
            )
            return Success(int(total or 0))

    async def watch_all_with_details(self) -> AsyncIterator[Result[list[ReviewTask]]]:
        async for result in self._watch(self.get_all_with_details):
            yield result

    async def watch_overdue_and_today(self, day: date) -> AsyncIterator[Result[list[ReviewTask]]]:
        async for result in self._watch(lambda: self.get_overdue_and_today(day)):
            yield result

    # =========================================================================
    # Mutations
    # =========================================================================

    @store_operation("Failed to create review task")
    async def insert(self, draft: ReviewTaskDraft, db: Optional[AsyncSession] = None) -> Result[int]:
        async with self.transaction(db) as session:
            row = ReviewTaskRow(**draft.model_dump())
            session.add(row)
            await session.flush()
            self._changed(session)
            return Success(row.id)

    @store_operation("Failed to create review tasks")
    async def insert_all(
        self, drafts: list[ReviewTaskDraft], db: Optional[AsyncSession] = None
    ) -> Result[int]:
        """Insert a batch of reminders in one statement; returns how many."""
        if not drafts:
            return Success(0)
        async with self.transaction(db) as session:
            now = datetime.now()
            await session.execute(
                insert(ReviewTaskRow),
                [{**draft.model_dump(), "created_at": now} for draft in drafts],
            )
            self._changed(session)
            logger.info(
                f"Inserted {len(drafts)} review tasks for session {drafts[0].study_session_id}"
            )
            return Success(len(drafts))

    @store_operation("Failed to complete review task")
    async def mark_completed(self, review_id: int) -> Result[None]:
        """Complete a reminder; an already completed one keeps its completed_at."""
        async with self.transaction() as session:
            result = await session.execute(
                update(ReviewTaskRow)
                .where(ReviewTaskRow.id == review_id, ReviewTaskRow.is_completed.is_(False))
                .values(is_completed=True, completed_at=datetime.now())
            )
            if result.rowcount == 0:
                return await self._require_exists(session, review_id)
            self._changed(session)
            return Success(None)

    @store_operation("Failed to reopen review task")
    async def mark_incomplete(self, review_id: int) -> Result[None]:
        return await self._update(review_id, is_completed=False, completed_at=None)

    @store_operation("Failed to reschedule review task")
    async def reschedule(self, review_id: int, new_date: date) -> Result[None]:
        return await self._update(review_id, scheduled_date=new_date)

    async def _update(self, review_id: int, **values) -> Result[None]:
        async with self.transaction() as session:
            result = await session.execute(
                update(ReviewTaskRow).where(ReviewTaskRow.id == review_id).values(**values)
            )
            if result.rowcount == 0:
                return Failure(DomainError.not_found(f"Review task {review_id} not found"))
            self._changed(session)
            return Success(None)

    async def _require_exists(self, session: AsyncSession, review_id: int) -> Result[None]:
        exists = await session.scalar(select(ReviewTaskRow.id).where(ReviewTaskRow.id == review_id))
        if exists is None:
            return Failure(DomainError.not_found(f"Review task {review_id} not found"))
        return Success(None)

    @store_operation("Failed to delete review task")
    async def delete(self, review_id: int) -> Result[int]:
        return await self._delete(ReviewTaskRow.id == review_id, missing_id=review_id)

    @store_operation("Failed to delete review tasks for session")
    async def delete_for_session(self, study_session_id: int) -> Result[int]:
        return await self._delete(ReviewTaskRow.study_session_id == study_session_id)

    @store_operation("Failed to delete review tasks for task")
    async def delete_for_task(self, task_id: int) -> Result[int]:
        return await self._delete(ReviewTaskRow.task_id == task_id)

    @store_operation("Failed to delete review tasks")
    async def delete_all(self) -> Result[int]:
        return await self._delete()

    async def _delete(self, *conditions, missing_id: Optional[int] = None) -> Result[int]:
        async with self.transaction() as session:
            result = await session.execute(delete(ReviewTaskRow).where(*conditions))
            if missing_id is not None and result.rowcount == 0:
                return Failure(DomainError.not_found(f"Review task {missing_id} not found"))
            if result.rowcount:
                self._changed(session)
            logger.debug(f"Deleted {result.rowcount} review tasks")
            return Success(result.rowcount)
