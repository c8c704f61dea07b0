"""
Statistics API Router

Endpoints:
- GET /api/stats/daily - Aggregates of one day
- GET /api/stats/range - Aggregates of every studied day in a range
- GET /api/stats/weekly - Seven-day chart data
- GET /api/stats/streak - Current / longest streak and milestones
- GET /api/stats/summary - Everything the statistics screen shows
"""

from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from studytimer.container import Container
from studytimer.dependencies import get_container
from studytimer.middleware.error_handling import ValidationError, raise_for_failure
from studytimer.models.study import DailyStats, DayStats, StatsSummary, StreakData

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/daily", response_model=DailyStats)
async def get_daily_stats(
    day: Optional[date] = Query(None, description="Day (defaults to today)"),
    container: Container = Depends(get_container),
) -> DailyStats:
    """A day without study time reports zeros."""
    day = day or date.today()
    stats = raise_for_failure(await container.stats.get_by_date(day))
    return stats or DailyStats(date=day)


@router.get("/range", response_model=list[DailyStats])
async def get_stats_range(
    start: date = Query(...),
    end: date = Query(...),
    container: Container = Depends(get_container),
) -> list[DailyStats]:
    if start > end:
        raise ValidationError(f"Range start {start} is after end {end}", details={"field": "start"})
    return raise_for_failure(await container.stats.get_stats_between(start, end))


@router.get("/weekly", response_model=list[DayStats])
async def get_weekly_stats(
    week_start: Optional[date] = Query(None, description="First day (defaults to this Monday)"),
    container: Container = Depends(get_container),
) -> list[DayStats]:
    if week_start is None:
        today = date.today()
        week_start = today - timedelta(days=today.weekday())
    return raise_for_failure(await container.stats.get_weekly_data(week_start))


@router.get("/streak", response_model=StreakData)
async def get_streak(
    today: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    container: Container = Depends(get_container),
) -> StreakData:
    return raise_for_failure(await container.stats.get_streak_data(today))


@router.get("/summary", response_model=StatsSummary)
async def get_summary(
    today: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    container: Container = Depends(get_container),
) -> StatsSummary:
    return raise_for_failure(await container.stats.get_summary(today))
