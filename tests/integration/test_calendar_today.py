"""Integration tests for the calendar counts and the today view."""

import asyncio
from datetime import date, timedelta

import pytest

from studytimer.enums.study import ErrorKind, ScheduleType
from studytimer.models.study import PomodoroSettings, TaskCreate
from studytimer.services.study import TodayTasksService

pytestmark = pytest.mark.integration

TODAY = date(2024, 3, 13)
MONDAY = date(2024, 3, 11)
SUNDAY = date(2024, 3, 17)


async def study(container, task, completion_date, intervals) -> int:
    pomodoro = PomodoroSettings()
    session_id = (await container.lifecycle.start(task, pomodoro, cycles=1)).unwrap()
    (
        await container.lifecycle.finish(
            session_id,
            task,
            pomodoro,
            total_work_minutes=25,
            current_cycle=1,
            total_cycles=1,
            is_interrupted=False,
            is_session_completed=True,
            review_intervals=intervals,
            completion_date=completion_date,
        )
    ).unwrap()
    return session_id


class TestCalendarCounts:
    async def test_tasks_and_reminders_add_up(self, container, repeat_task, deadline_task, math_task):
        # Reminders on the 14th and the 16th
        await study(container, math_task, TODAY, [1, 3])

        counts = (await container.calendar.counts_by_date_range(MONDAY, SUNDAY)).unwrap()

        assert counts == {
            date(2024, 3, 11): 1,
            date(2024, 3, 13): 1,
            date(2024, 3, 14): 1,
            date(2024, 3, 15): 1,
            date(2024, 3, 16): 2,
        }

    async def test_completed_reminders_still_count(self, container, math_task):
        session_id = await study(container, math_task, TODAY, [1])
        review = (await container.reviews.get_by_session(session_id)).unwrap()[0]
        await container.reviews.mark_completed(review.id)

        counts = (await container.calendar.counts_by_date_range(MONDAY, SUNDAY)).unwrap()

        assert counts == {date(2024, 3, 14): 1}

    async def test_reversed_range(self, container):
        result = await container.calendar.counts_by_date_range(SUNDAY, MONDAY)

        assert result.error.kind == ErrorKind.VALIDATION

    async def test_month(self, container, repeat_task):
        counts = (await container.calendar.counts_for_month(2024, 3)).unwrap()

        # March 2024 has 4 Mondays, 4 Wednesdays and 5 Fridays
        assert len(counts) == 13
        assert min(counts) == date(2024, 3, 1)
        assert max(counts) == date(2024, 3, 29)

    async def test_last_month_of_the_calendar(self, container, repeat_task):
        counts = (await container.calendar.counts_for_month(9999, 12)).unwrap()

        days = [date(9999, 12, day) for day in range(1, 32)]
        assert sorted(counts) == [day for day in days if day.isoweekday() in {1, 3, 5}]

    async def test_range_longer_than_a_year(self, container):
        result = await container.calendar.counts_by_date_range(MONDAY, MONDAY + timedelta(days=400))

        assert result.error.kind == ErrorKind.VALIDATION
        assert result.error.field == "end"

    async def test_watch_emits_after_change(self, container):
        stream = container.calendar.watch_counts(MONDAY, SUNDAY)
        try:
            first = (await asyncio.wait_for(stream.__anext__(), timeout=5)).unwrap()
            await container.tasks.insert(
                TaskCreate(name="Exam", schedule_type=ScheduleType.SPECIFIC, specific_date=TODAY)
            )
            second = (await asyncio.wait_for(stream.__anext__(), timeout=5)).unwrap()
        finally:
            await stream.aclose()

        assert first == {}
        assert second == {TODAY: 1}

    async def test_watch_emits_after_cascading_delete(self, container, math_task):
        session_id = await study(container, math_task, TODAY, [1])
        stream = container.calendar.watch_counts(MONDAY, SUNDAY)
        try:
            first = (await asyncio.wait_for(stream.__anext__(), timeout=5)).unwrap()
            (await container.sessions.delete(session_id)).unwrap()
            second = (await asyncio.wait_for(stream.__anext__(), timeout=5)).unwrap()
        finally:
            await stream.aclose()

        assert first == {date(2024, 3, 14): 1}
        assert second == {}


class TestTodayTasks:
    async def test_today_view(self, container, repeat_task, deadline_task, history_task):
        await study(container, history_task, TODAY - timedelta(days=1), [1])

        today = (await container.today.get_today_tasks(TODAY)).unwrap()

        assert today.date == TODAY
        assert [t.id for t in today.scheduled_tasks] == [repeat_task.id]
        assert [r.task_name for r in today.review_tasks] == ["History"]
        assert [t.id for t in today.upcoming_deadlines] == [deadline_task.id]
        assert today.total_count == 2

    async def test_overdue_reminders_are_included(self, container, history_task):
        await study(container, history_task, TODAY - timedelta(days=5), [1, 3])

        today = (await container.today.get_today_tasks(TODAY)).unwrap()

        assert [r.review_number for r in today.review_tasks] == [1, 2]

    async def test_empty_day(self, container):
        today = (await container.today.get_today_tasks(TODAY)).unwrap()

        assert today.total_count == 0
        assert today.upcoming_deadlines == []

    async def test_zero_day_deadline_window(self, container, deadline_task):
        today_view = TodayTasksService(container.tasks, container.reviews, deadline_window_days=0)

        today = (await today_view.get_today_tasks(TODAY)).unwrap()

        assert today.upcoming_deadlines == []
