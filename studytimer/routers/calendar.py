"""
Calendar API Router

Endpoints:
- GET /api/calendar/counts - Per-date item counts in a date range
- GET /api/calendar/month/{year}/{month} - Per-date item counts of a month
"""

from datetime import date

from fastapi import APIRouter, Depends, Path, Query

from studytimer.container import Container
from studytimer.dependencies import get_container
from studytimer.middleware.error_handling import raise_for_failure
from studytimer.models.study import CalendarCountsResponse
from studytimer.services.study.calendar_counts import month_range

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/counts", response_model=CalendarCountsResponse)
async def get_calendar_counts(
    start: date = Query(..., description="First date (inclusive)"),
    end: date = Query(..., description="Last date (inclusive)"),
    container: Container = Depends(get_container),
) -> CalendarCountsResponse:
    """
    Scheduled tasks plus review reminders per date.

    Recurring tasks count on every matching weekday; dates with nothing
    scheduled are omitted.
    """
    counts = raise_for_failure(await container.calendar.counts_by_date_range(start, end))
    return CalendarCountsResponse(start=start, end=end, counts=counts)


@router.get("/month/{year}/{month}", response_model=CalendarCountsResponse)
async def get_month_counts(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    container: Container = Depends(get_container),
) -> CalendarCountsResponse:
    start, end = month_range(year, month)
    counts = raise_for_failure(await container.calendar.counts_for_month(year, month))
    return CalendarCountsResponse(start=start, end=end, counts=counts)
