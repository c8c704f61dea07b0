"""
Calendar Count Merger

Builds the per-date task counts shown on the calendar from three sources:

1. Active one-off tasks (deadline / specific date) on their date
2. Active recurring tasks on every matching weekday (TaskStore walks the
   range day by day)
3. Review reminders scheduled in the range, completed or not

Contributions are added, never deduplicated: a date with two deadlines,
one recurring task and one reminder counts 4. Dates whose total is zero
are left out of the result.
"""

import calendar
import logging
from collections.abc import AsyncIterator, Mapping
from datetime import date

from studytimer.config import settings
from studytimer.models.result import DomainError, Failure, Result
from studytimer.stores.broadcast import merge_changes
from studytimer.stores.review_task_store import ReviewTaskStore
from studytimer.stores.task_store import TaskStore

logger = logging.getLogger(__name__)


def merge_counts(*sources: Mapping[date, int]) -> dict[date, int]:
    """Add per-date counts from several sources, dropping zero totals."""
    merged: dict[date, int] = {}
    for source in sources:
        for day, count in source.items():
            merged[day] = merged.get(day, 0) + count
    return {day: count for day, count in sorted(merged.items()) if count != 0}


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last date of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class CalendarCountMerger:
    """Per-date task counts for the calendar view."""

    def __init__(self, tasks: TaskStore, reviews: ReviewTaskStore):
        self.tasks = tasks
        self.reviews = reviews

    async def counts_by_date_range(self, start: date, end: date) -> Result[dict[date, int]]:
        """
        Combined counts for every date in [start, end].

        Args:
            start: First date (inclusive)
            end: Last date (inclusive)

        Returns:
            date → count for dates with at least one item
        """
        if start > end:
            return Failure(
                DomainError.validation(f"Range start {start} is after end {end}", field="start")
            )
        span = (end - start).days + 1
        if span > settings.MAX_CALENDAR_RANGE_DAYS:
            return Failure(
                DomainError.validation(
                    f"Range of {span} days exceeds {settings.MAX_CALENDAR_RANGE_DAYS}", field="end"
                )
            )

        logger.debug(f"Counting calendar items from {start} to {end}")
        task_counts = await self.tasks.count_by_date_range(start, end)
        review_counts = await self.reviews.count_by_date_range(start, end)

        return task_counts.flat_map(
            lambda tasks: review_counts.map(lambda reviews: merge_counts(tasks, reviews))
        )

    async def counts_for_month(self, year: int, month: int) -> Result[dict[date, int]]:
        return await self.counts_by_date_range(*month_range(year, month))

    async def watch_counts(self, start: date, end: date) -> AsyncIterator[Result[dict[date, int]]]:
        """Yield the counts now and again after every task or reminder change."""
        async with self.tasks.subscribe() as task_changes, self.reviews.subscribe() as review_changes:
            yield await self.counts_by_date_range(start, end)
            async for _ in merge_changes(task_changes, review_changes):
                yield await self.counts_by_date_range(start, end)
