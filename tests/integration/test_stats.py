"""Integration tests for the daily stats upsert and StatsAggregator queries."""

import asyncio
from datetime import date, timedelta

import pytest

from studytimer.enums.study import ErrorKind
from studytimer.services.study import StatsAggregator

pytestmark = pytest.mark.integration

TODAY = date(2024, 3, 13)


class TestUpdateStats:
    async def test_first_update_creates_row(self, container):
        stats = (await container.stats.update_stats(TODAY, 25, "Math")).unwrap()

        assert stats.date == TODAY
        assert stats.total_study_minutes == 25
        assert stats.session_count == 1
        assert stats.subject_breakdown == {"Math": 25}

    async def test_updates_accumulate_per_subject(self, container):
        await container.stats.update_stats(TODAY, 25, "Math")
        await container.stats.update_stats(TODAY, 30, "History")
        await container.stats.update_stats(TODAY, 10, "Math")

        stats = (await container.stats.get_by_date(TODAY)).unwrap()

        assert stats.total_study_minutes == 65
        assert stats.session_count == 3
        assert stats.subject_breakdown == {"Math": 35, "History": 30}

    async def test_concurrent_updates_are_not_lost(self, container):
        results = await asyncio.gather(
            *(container.stats.update_stats(TODAY, 5, "Math") for _ in range(10))
        )

        stats = (await container.stats.get_by_date(TODAY)).unwrap()

        assert all(result.is_success for result in results)
        assert stats.total_study_minutes == 50
        assert stats.session_count == 10

    async def test_negative_minutes_rejected(self, container):
        result = await container.stats.update_stats(TODAY, -5, "Math")

        assert result.error.kind == ErrorKind.VALIDATION
        assert (await container.stats.get_by_date(TODAY)).unwrap() is None

    async def test_zero_minutes_is_not_a_study_day(self, container):
        await container.stats.update_stats(TODAY, 0, "Math")

        assert (await container.stats_store.get_study_days()).unwrap() == []
        assert (await container.stats.get_by_date(TODAY)).unwrap().session_count == 1


class TestStreaks:
    async def _study_on(self, container, *days: date) -> None:
        for day in days:
            (await container.stats.update_stats(day, 30, "Math")).unwrap()

    async def test_five_day_streak_ending_today(self, container):
        await self._study_on(container, *(TODAY - timedelta(days=n) for n in range(5)))

        assert (await container.stats.get_current_streak(TODAY)).unwrap() == 5

    async def test_streak_continues_from_yesterday(self, container):
        await self._study_on(container, TODAY - timedelta(days=1), TODAY - timedelta(days=2))

        assert (await container.stats.get_current_streak(TODAY)).unwrap() == 2

    async def test_gap_breaks_streak(self, container):
        await self._study_on(
            container,
            TODAY,
            TODAY - timedelta(days=2),
            TODAY - timedelta(days=3),
            TODAY - timedelta(days=4),
        )

        assert (await container.stats.get_current_streak(TODAY)).unwrap() == 1
        assert (await container.stats.get_max_streak()).unwrap() == 3

    async def test_streak_data_milestones(self, container):
        await self._study_on(container, *(TODAY - timedelta(days=n) for n in range(4)))

        streak = (await container.stats.get_streak_data(TODAY)).unwrap()

        assert streak.current_streak == 4
        assert streak.streak_start == TODAY - timedelta(days=3)
        assert streak.last_study_date == TODAY
        assert streak.milestones_reached == [3]
        assert streak.next_milestone == 7
        assert streak.days_to_next_milestone == 3

    async def test_empty_milestone_list_is_kept(self, container):
        await self._study_on(container, TODAY)
        aggregator = StatsAggregator(container.stats_store, milestones=[])

        streak = (await aggregator.get_streak_data(TODAY)).unwrap()

        assert streak.milestones_reached == []
        assert streak.next_milestone is None

    async def test_no_study_days(self, container):
        streak = (await container.stats.get_streak_data(TODAY)).unwrap()

        assert streak.current_streak == 0
        assert streak.longest_streak == 0
        assert streak.last_study_date is None


class TestWeeklyAndSummary:
    async def test_weekly_data_zero_fills(self, container):
        monday = date(2024, 3, 11)
        await container.stats.update_stats(monday + timedelta(days=2), 40, "Math")

        week = (await container.stats.get_weekly_data(monday)).unwrap()

        assert len(week) == 7
        assert [d.day_of_week for d in week] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert [d.minutes for d in week] == [0, 0, 40, 0, 0, 0, 0]

    async def test_summary(self, container):
        await container.stats.update_stats(TODAY, 30, "Math")
        await container.stats.update_stats(TODAY - timedelta(days=1), 20, "Math")
        await container.stats.update_stats(date(2024, 2, 20), 60, "Math")

        summary = (await container.stats.get_summary(TODAY)).unwrap()

        assert summary.today_minutes == 30
        assert summary.this_week_minutes == 50
        assert summary.this_month_minutes == 50
        assert summary.last_30_days_minutes == 110
        assert summary.average_daily_minutes == round(110 / 30, 1)
        assert summary.current_streak == 2
        assert len(summary.weekly_data) == 7

    async def test_range_queries(self, container):
        await container.stats.update_stats(date(2024, 3, 1), 10, "Math")
        await container.stats.update_stats(date(2024, 3, 5), 15, "Math")

        stats = (
            await container.stats.get_stats_between(date(2024, 3, 1), date(2024, 3, 4))
        ).unwrap()
        total = (
            await container.stats.get_total_minutes_between(date(2024, 3, 1), date(2024, 3, 31))
        ).unwrap()

        assert [s.date for s in stats] == [date(2024, 3, 1)]
        assert total == 25
