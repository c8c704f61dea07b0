"""
Review Reminders API Router

Endpoints for the spaced-repetition reminders created when sessions finish.

Endpoints:
- GET /api/reviews - Reminders with a status filter and the status counts
- GET /api/reviews/due - Overdue reminders plus everything due on a day
- GET /api/reviews/schedule - Reminders grouped by scheduled date
- GET /api/reviews/date/{day} - Reminders scheduled on a day
- GET /api/reviews/counts - Pending count for a day and overall totals
- POST /api/reviews/{id}/complete - Mark done (idempotent)
- POST /api/reviews/{id}/incomplete - Reopen
- POST /api/reviews/{id}/reschedule - Move to another date
- DELETE /api/reviews/{id} - Delete one reminder
- DELETE /api/reviews/session/{id} - Delete a session's reminders
- DELETE /api/reviews/task/{id} - Delete a task's reminders
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from studytimer.container import Container
from studytimer.dependencies import get_container
from studytimer.enums.study import ReviewFilter
from studytimer.middleware.error_handling import raise_for_failure
from studytimer.models.base import StrictResponse, SuccessResponse
from studytimer.models.study import RescheduleRequest, ReviewTask
from studytimer.services.study.review_classification import (
    ReviewCounts,
    filter_reminders,
    group_by_date,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/reviews", tags=["reviews"])


class ReviewListResponse(StrictResponse):
    reviews: list[ReviewTask]
    counts: ReviewCounts


# ===========================================
# Listing Endpoints
# ===========================================


@router.get("", response_model=ReviewListResponse)
async def list_reviews(
    review_filter: ReviewFilter = Query(ReviewFilter.ALL, alias="filter"),
    day: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    container: Container = Depends(get_container),
) -> ReviewListResponse:
    """
    Reminders of one class, with counts over all reminders.

    Counts always cover the full set, so pending + completed + overdue
    equals total whatever the filter.
    """
    day = day or date.today()
    reminders = raise_for_failure(await container.reviews.get_all_with_details())
    return ReviewListResponse(
        reviews=filter_reminders(reminders, review_filter, day),
        counts=ReviewCounts.from_reminders(reminders, day),
    )


@router.get("/due", response_model=list[ReviewTask])
async def get_due_reviews(
    day: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    container: Container = Depends(get_container),
) -> list[ReviewTask]:
    return raise_for_failure(await container.reviews.get_overdue_and_today(day or date.today()))


@router.get("/schedule", response_model=dict[date, list[ReviewTask]])
async def get_review_schedule(
    container: Container = Depends(get_container),
) -> dict[date, list[ReviewTask]]:
    reminders = raise_for_failure(await container.reviews.get_all_with_details())
    return group_by_date(reminders)


@router.get("/date/{day}", response_model=list[ReviewTask])
async def get_reviews_for_date(
    day: date,
    pending_only: bool = Query(False, description="Only reminders not yet completed"),
    container: Container = Depends(get_container),
) -> list[ReviewTask]:
    if pending_only:
        return raise_for_failure(await container.reviews.get_pending_for_date(day))
    return raise_for_failure(await container.reviews.get_all_for_date(day))


@router.get("/counts")
async def get_review_counts(
    day: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    container: Container = Depends(get_container),
) -> dict:
    day = day or date.today()
    return {
        "date": day.isoformat(),
        "pending_today": raise_for_failure(await container.reviews.get_pending_count_for_date(day)),
        "total": raise_for_failure(await container.reviews.get_total_count()),
        "incomplete": raise_for_failure(await container.reviews.get_incomplete_count()),
    }


# ===========================================
# Mutation Endpoints
# ===========================================


@router.post("/{review_id}/complete", response_model=ReviewTask)
async def complete_review(
    review_id: int,
    container: Container = Depends(get_container),
) -> ReviewTask:
    """Mark a reminder done. Completing it again keeps the first completion time."""
    raise_for_failure(await container.reviews.mark_completed(review_id))
    return raise_for_failure(await container.reviews.get_by_id(review_id))


@router.post("/{review_id}/incomplete", response_model=ReviewTask)
async def reopen_review(
    review_id: int,
    container: Container = Depends(get_container),
) -> ReviewTask:
    raise_for_failure(await container.reviews.mark_incomplete(review_id))
    return raise_for_failure(await container.reviews.get_by_id(review_id))


@router.post("/{review_id}/reschedule", response_model=ReviewTask)
async def reschedule_review(
    review_id: int,
    request: RescheduleRequest,
    container: Container = Depends(get_container),
) -> ReviewTask:
    raise_for_failure(await container.reviews.reschedule(review_id, request.scheduled_date))
    return raise_for_failure(await container.reviews.get_by_id(review_id))


@router.delete("/{review_id}", response_model=SuccessResponse)
async def delete_review(
    review_id: int,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    raise_for_failure(await container.reviews.delete(review_id))
    return SuccessResponse(message=f"Review task {review_id} deleted")


@router.delete("/session/{session_id}", response_model=SuccessResponse)
async def delete_session_reviews(
    session_id: int,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    deleted = raise_for_failure(await container.reviews.delete_for_session(session_id))
    return SuccessResponse(message=f"Deleted {deleted} review tasks")


@router.delete("/task/{task_id}", response_model=SuccessResponse)
async def delete_task_reviews(
    task_id: int,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    deleted = raise_for_failure(await container.reviews.delete_for_task(task_id))
    return SuccessResponse(message=f"Deleted {deleted} review tasks")
