"""
Stats Aggregation Service

Daily totals, weekly chart data and study streaks.

Responsibilities:
- Add finished sessions to the per-date aggregates (atomic upsert in StatsStore)
- Calculate current and longest study streaks
- Track streak milestones
- Build the 7-day chart and the statistics summary

A study day is a date whose total_study_minutes is greater than zero.

Usage:
    from studytimer.services.study.stats_aggregator import StatsAggregator

    aggregator = StatsAggregator(stats_store)
    await aggregator.update_stats(date.today(), 50, "Math")
    streak = (await aggregator.get_current_streak()).get_or_default(0)
"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from studytimer.config import settings
from studytimer.models.result import DomainError, Failure, Result, Success
from studytimer.models.study import (
    WEEKDAY_LABELS,
    DailyStats,
    DayStats,
    StatsSummary,
    StreakData,
)
from studytimer.stores.base import store_operation
from studytimer.stores.broadcast import Subscription
from studytimer.stores.stats_store import StatsStore

logger = logging.getLogger(__name__)


def calculate_current_streak(
    study_days: list[date], today: date
) -> tuple[int, Optional[date]]:
    """
    Calculate the current consecutive study streak.

    The streak ends today when today has study time, otherwise at the most
    recent study day before today, and extends backward one day at a time
    until a day without study time.

    Args:
        study_days: Study dates, any order; days after ``today`` are ignored.
        today: Reference date.

    Returns:
        tuple[int, Optional[date]]: Streak length and the date it began
        (None when there is no study day).
    """
    days = {d for d in study_days if d <= today}
    if not days:
        return 0, None

    anchor = today if today in days else max(days)
    streak = 0
    current = anchor
    while current in days:
        streak += 1
        current -= timedelta(days=1)

    return streak, current + timedelta(days=1)


def calculate_longest_streak(study_days: list[date]) -> int:
    """
    Calculate the longest run of consecutive study days ever achieved.

    Args:
        study_days: Study dates, any order.

    Returns:
        int: Length of the longest run.
    """
    if not study_days:
        return 0

    sorted_days = sorted(set(study_days))
    longest = 1
    current = 1

    for i in range(1, len(sorted_days)):
        if sorted_days[i] == sorted_days[i - 1] + timedelta(days=1):
            current += 1
            longest = max(longest, current)
        else:
            current = 1

    return longest


def build_week(week_start: date, stats: list[DailyStats]) -> list[DayStats]:
    """Seven consecutive days from ``week_start``, zero-filled."""
    minutes_by_day = {s.date: s.total_study_minutes for s in stats}
    week = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        week.append(
            DayStats(
                day_of_week=WEEKDAY_LABELS[offset],
                date=day,
                minutes=minutes_by_day.get(day, 0),
            )
        )
    return week


class StatsAggregator:
    """
    Service for study statistics and streaks.

    Reads and writes go through StatsStore; streak arithmetic is done on
    the list of study days in memory.
    """

    def __init__(self, stats: StatsStore, milestones: Optional[list[int]] = None):
        """
        Initialize the aggregator.

        Args:
            stats: Store holding the per-date aggregates.
            milestones: Streak lengths worth celebrating (defaults to settings).
        """
        self.stats = stats
        self.milestones = sorted(
            milestones if milestones is not None else settings.STREAK_MILESTONES
        )

    def subscribe(self) -> Subscription:
        """Signal after every committed stats change."""
        return self.stats.subscribe()

    async def update_stats(
        self,
        day: date,
        study_minutes: int,
        subject_name: str,
        db: Optional[AsyncSession] = None,
    ) -> Result[DailyStats]:
        """Add one session's minutes to ``day`` (atomic per date)."""
        if study_minutes < 0:
            return Failure(
                DomainError.validation("Study minutes cannot be negative", field="study_minutes")
            )
        return await self.stats.update_stats(day, study_minutes, subject_name, db=db)

    async def get_by_date(self, day: date) -> Result[Optional[DailyStats]]:
        return await self.stats.get_by_date(day)

    async def get_stats_between(self, start: date, end: date) -> Result[list[DailyStats]]:
        return await self.stats.get_between(start, end)

    async def get_total_minutes_between(self, start: date, end: date) -> Result[int]:
        return await self.stats.get_total_minutes_between(start, end)

    async def get_current_streak(self, today: Optional[date] = None) -> Result[int]:
        today = today or date.today()
        return (await self.stats.get_study_days(until=today)).map(
            lambda days: calculate_current_streak(days, today)[0]
        )

    async def get_max_streak(self) -> Result[int]:
        return (await self.stats.get_study_days()).map(calculate_longest_streak)

    async def get_weekly_data(self, week_start: date) -> Result[list[DayStats]]:
        """Always exactly 7 entries, labelled Mon..Sun from ``week_start``."""
        week_end = week_start + timedelta(days=6)
        return (await self.stats.get_between(week_start, week_end)).map(
            lambda stats: build_week(week_start, stats)
        )

    async def get_streak_data(self, today: Optional[date] = None) -> Result[StreakData]:
        """Current and longest streak with milestone progress."""
        today = today or date.today()
        days_result = await self.stats.get_study_days(until=today)
        if days_result.is_failure:
            return days_result

        study_days = days_result.value
        current, streak_start = calculate_current_streak(study_days, today)
        longest = calculate_longest_streak(study_days)
        next_milestone = next((m for m in self.milestones if m > current), None)

        return Success(
            StreakData(
                current_streak=current,
                longest_streak=longest,
                streak_start=streak_start,
                last_study_date=max(study_days) if study_days else None,
                milestones_reached=[m for m in self.milestones if longest >= m],
                next_milestone=next_milestone,
                days_to_next_milestone=(
                    next_milestone - current if next_milestone is not None else None
                ),
            )
        )

    @store_operation("Failed to build stats summary")
    async def get_summary(self, today: Optional[date] = None) -> Result[StatsSummary]:
        """
        Everything the statistics screen shows.

        The week runs Monday..Sunday around ``today``; the month is the
        calendar month of ``today``; the 30-day window ends at ``today``.
        """
        today = today or date.today()
        week_start = today - timedelta(days=today.weekday())
        month_start = today.replace(day=1)
        window_start = today - timedelta(days=29)

        today_stats = (await self.get_by_date(today)).unwrap()
        week = (await self.get_weekly_data(week_start)).unwrap()
        month_minutes = (await self.get_total_minutes_between(month_start, today)).unwrap()
        window_minutes = (await self.get_total_minutes_between(window_start, today)).unwrap()
        streak = (await self.get_streak_data(today)).unwrap()

        return Success(
            StatsSummary(
                today_minutes=today_stats.total_study_minutes if today_stats else 0,
                current_streak=streak.current_streak,
                max_streak=streak.longest_streak,
                this_week_minutes=sum(day.minutes for day in week),
                this_month_minutes=month_minutes,
                last_30_days_minutes=window_minutes,
                average_daily_minutes=round(window_minutes / 30, 1),
                weekly_data=week,
            )
        )
