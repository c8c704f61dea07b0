"""
Today's Tasks Service

Collects what the home screen shows for a day: tasks scheduled on it,
review reminders that are overdue or due that day, and the deadlines
coming up in the following days.
"""

import logging
from collections.abc import AsyncIterator
from datetime import date, timedelta
from typing import Optional

from studytimer.config import settings
from studytimer.models.result import Result, Success
from studytimer.models.study import TodayTasks
from studytimer.stores.base import store_operation
from studytimer.stores.broadcast import merge_changes
from studytimer.stores.review_task_store import ReviewTaskStore
from studytimer.stores.task_store import TaskStore

logger = logging.getLogger(__name__)


class TodayTasksService:
    def __init__(
        self,
        tasks: TaskStore,
        reviews: ReviewTaskStore,
        deadline_window_days: Optional[int] = None,
    ):
        self.tasks = tasks
        self.reviews = reviews
        if deadline_window_days is None:
            deadline_window_days = settings.UPCOMING_DEADLINE_DAYS
        self.deadline_window_days = deadline_window_days

    @store_operation("Failed to load today's tasks")
    async def get_today_tasks(self, day: Optional[date] = None) -> Result[TodayTasks]:
        day = day or date.today()
        scheduled = (await self.tasks.get_scheduled_for_date(day)).unwrap()
        reviews = (await self.reviews.get_overdue_and_today(day)).unwrap()
        upcoming = (
            await self.tasks.get_upcoming_deadlines(
                day, day + timedelta(days=self.deadline_window_days)
            )
        ).unwrap()
        return Success(
            TodayTasks(
                date=day,
                scheduled_tasks=scheduled,
                review_tasks=reviews,
                upcoming_deadlines=upcoming,
            )
        )

    async def watch_today_tasks(self, day: Optional[date] = None) -> AsyncIterator[Result[TodayTasks]]:
        """Re-emit whenever a task or a reminder changes."""
        async with self.tasks.subscribe() as task_changes, self.reviews.subscribe() as review_changes:
            yield await self.get_today_tasks(day)
            async for _ in merge_changes(task_changes, review_changes):
                yield await self.get_today_tasks(day)
