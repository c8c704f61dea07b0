"""
Tasks API Router

Endpoints for study tasks and what is scheduled when.

Endpoints:
- GET /api/tasks - Active tasks (optionally one group's)
- POST /api/tasks - Create a task
- GET /api/tasks/today - Scheduled tasks, due reminders and upcoming deadlines
- GET /api/tasks/scheduled - Tasks scheduled on a date
- GET /api/tasks/deadlines - Deadlines after a date, within a window
- GET /api/tasks/{id} - Get a task
- PATCH /api/tasks/{id} - Update a task
- DELETE /api/tasks/{id} - Delete a task with its sessions and reminders
- POST /api/tasks/{id}/deactivate - Hide a task without deleting it
- PUT /api/tasks/{id}/progress - Update progress note / percent / next goal
- GET /api/tasks/{id}/sessions - Sessions of a task
"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from studytimer.config import settings
from studytimer.container import Container
from studytimer.dependencies import get_container
from studytimer.middleware.error_handling import raise_for_failure
from studytimer.models.base import SuccessResponse
from studytimer.models.study import (
    StudySession,
    Task,
    TaskCreate,
    TaskProgressUpdate,
    TaskUpdate,
    TodayTasksResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tasks", tags=["tasks"])


async def _check_review_count(container: Container, review_count: Optional[int]) -> None:
    """Reject review counts the user's plan does not allow."""
    if review_count is None:
        return
    is_premium = raise_for_failure(await container.settings.is_premium())
    raise_for_failure(container.policy.check_review_count(is_premium, review_count))


# ===========================================
# Collection Endpoints
# ===========================================


@router.get("", response_model=list[Task])
async def list_tasks(
    group_id: Optional[int] = Query(None, description="Only tasks of this subject group"),
    container: Container = Depends(get_container),
) -> list[Task]:
    """Active tasks, most recently updated first."""
    if group_id is not None:
        return raise_for_failure(await container.tasks.get_by_group(group_id))
    return raise_for_failure(await container.tasks.get_all_active())


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    draft: TaskCreate,
    container: Container = Depends(get_container),
) -> Task:
    """
    Create a task.

    The schedule fields must match the schedule type; a review count above
    the plan's maximum needs premium.
    """
    await _check_review_count(container, draft.review_count)
    task_id = raise_for_failure(await container.tasks.insert(draft))
    return raise_for_failure(await container.tasks.get_by_id(task_id))


@router.get("/today", response_model=TodayTasksResponse)
async def get_today_tasks(
    day: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    container: Container = Depends(get_container),
) -> TodayTasksResponse:
    today = raise_for_failure(await container.today.get_today_tasks(day))
    return TodayTasksResponse(
        date=today.date,
        scheduled_tasks=today.scheduled_tasks,
        review_tasks=today.review_tasks,
        upcoming_deadlines=today.upcoming_deadlines,
        total_count=today.total_count,
    )


@router.get("/scheduled", response_model=list[Task])
async def get_scheduled_tasks(
    day: date = Query(..., description="Date to list"),
    container: Container = Depends(get_container),
) -> list[Task]:
    """Active tasks whose schedule rule places them on ``day``."""
    return raise_for_failure(await container.tasks.get_scheduled_for_date(day))


@router.get("/deadlines", response_model=list[Task])
async def get_upcoming_deadlines(
    start: Optional[date] = Query(None, description="Exclusive start (defaults to today)"),
    days: int = Query(
        settings.UPCOMING_DEADLINE_DAYS, ge=1, le=365, description="Window length in days"
    ),
    container: Container = Depends(get_container),
) -> list[Task]:
    """Deadline tasks due after ``start`` and at most ``days`` later."""
    start = start or date.today()
    return raise_for_failure(
        await container.tasks.get_upcoming_deadlines(start, start + timedelta(days=days))
    )


# ===========================================
# Single Task Endpoints
# ===========================================


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: int,
    container: Container = Depends(get_container),
) -> Task:
    return raise_for_failure(await container.tasks.get_by_id(task_id))


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: int,
    update: TaskUpdate,
    container: Container = Depends(get_container),
) -> Task:
    """Apply the fields that were sent; the result must still be a valid schedule."""
    task = raise_for_failure(await container.tasks.get_by_id(task_id))
    if "review_count" in update.model_fields_set:
        await _check_review_count(container, update.review_count)
    return raise_for_failure(await container.tasks.update(update.apply_to(task)))


@router.delete("/{task_id}", response_model=SuccessResponse)
async def delete_task(
    task_id: int,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    """Delete a task. Its sessions and review reminders are deleted with it."""
    raise_for_failure(await container.tasks.delete(task_id))
    return SuccessResponse(message=f"Task {task_id} deleted")


@router.post("/{task_id}/deactivate", response_model=SuccessResponse)
async def deactivate_task(
    task_id: int,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    raise_for_failure(await container.tasks.deactivate(task_id))
    return SuccessResponse(message=f"Task {task_id} deactivated")


@router.put("/{task_id}/progress", response_model=Task)
async def update_task_progress(
    task_id: int,
    progress: TaskProgressUpdate,
    container: Container = Depends(get_container),
) -> Task:
    raise_for_failure(await container.tasks.update_progress(task_id, progress))
    return raise_for_failure(await container.tasks.get_by_id(task_id))


@router.get("/{task_id}/sessions", response_model=list[StudySession])
async def get_task_sessions(
    task_id: int,
    container: Container = Depends(get_container),
) -> list[StudySession]:
    """Sessions of a task, newest first."""
    raise_for_failure(await container.tasks.get_by_id(task_id))
    return raise_for_failure(await container.sessions.get_by_task(task_id))
