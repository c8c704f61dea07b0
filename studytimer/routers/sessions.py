"""
Study Sessions API Router

Endpoints for running the study timer.

Endpoints:
- POST /api/sessions/start - Start a session for a task
- POST /api/sessions/{id}/finish - Finish a session (stats, reminders)
- GET /api/sessions - Sessions started on a day
- GET /api/sessions/totals - Minutes and cycles of a day
- GET /api/sessions/{id} - Get a session
- GET /api/sessions/{id}/state - Lifecycle state of a session id
- DELETE /api/sessions/{id} - Delete a session and its reminders
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from studytimer.container import Container
from studytimer.dependencies import get_container
from studytimer.middleware.error_handling import raise_for_failure
from studytimer.models.base import SuccessResponse
from studytimer.models.study import (
    FinishResponse,
    SessionFinishRequest,
    SessionStartRequest,
    SessionStartResponse,
    StudySession,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("/start", response_model=SessionStartResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: SessionStartRequest,
    container: Container = Depends(get_container),
) -> SessionStartResponse:
    """
    Start a study session.

    The planned duration uses the task's work-duration override when set,
    otherwise the global work duration.
    """
    task = raise_for_failure(await container.tasks.get_by_id(request.task_id))
    pomodoro = raise_for_failure(await container.settings.get_settings())
    session_id = raise_for_failure(
        await container.lifecycle.start(task, pomodoro, request.cycles, request.started_at)
    )
    session = raise_for_failure(await container.sessions.get_by_id(session_id))
    return SessionStartResponse(
        session_id=session_id,
        planned_duration_minutes=session.planned_duration_minutes,
    )


@router.post("/{session_id}/finish", response_model=FinishResponse)
async def finish_session(
    session_id: int,
    request: SessionFinishRequest,
    container: Container = Depends(get_container),
) -> FinishResponse:
    """
    Finish a running session.

    Records the worked minutes in the daily stats, stamps the task's last
    study time and, for uninterrupted sessions with reviews on, schedules
    the review reminders allowed by the user's plan. Finishing twice fails
    with 422 and changes nothing.
    """
    task = raise_for_failure(await container.tasks.get_by_id(request.task_id))
    pomodoro = raise_for_failure(await container.settings.get_settings())
    intervals = raise_for_failure(await container.settings.review_intervals_for(task))

    outcome = raise_for_failure(
        await container.lifecycle.finish(
            session_id,
            task,
            pomodoro,
            total_work_minutes=request.total_work_minutes,
            current_cycle=request.current_cycle,
            total_cycles=request.total_cycles,
            is_interrupted=request.is_interrupted,
            is_session_completed=request.is_session_completed,
            review_intervals=intervals,
            completion_date=request.completion_date,
        )
    )
    return FinishResponse(
        session=outcome.session,
        daily_stats=outcome.daily_stats,
        reminders_created=outcome.reminders_created,
        review_dates=[reminder.scheduled_date for reminder in outcome.reminders],
    )


@router.get("", response_model=list[StudySession])
async def list_sessions_for_day(
    day: Optional[date] = Query(None, description="Day (defaults to today)"),
    container: Container = Depends(get_container),
) -> list[StudySession]:
    return raise_for_failure(await container.sessions.get_for_day(day or date.today()))


@router.get("/totals")
async def get_day_totals(
    day: Optional[date] = Query(None, description="Day (defaults to today)"),
    container: Container = Depends(get_container),
) -> dict:
    """Total worked minutes and completed cycles of sessions started on a day."""
    day = day or date.today()
    return {
        "date": day.isoformat(),
        "total_minutes": raise_for_failure(await container.sessions.get_total_minutes_for_day(day)),
        "total_cycles": raise_for_failure(await container.sessions.get_total_cycles_for_day(day)),
    }


@router.get("/{session_id}", response_model=StudySession)
async def get_session(
    session_id: int,
    container: Container = Depends(get_container),
) -> StudySession:
    return raise_for_failure(await container.sessions.get_by_id(session_id))


@router.get("/{session_id}/state")
async def get_session_state(
    session_id: int,
    container: Container = Depends(get_container),
) -> dict:
    state = raise_for_failure(await container.lifecycle.current_state(session_id))
    return {"session_id": session_id, "state": state.value}


@router.delete("/{session_id}", response_model=SuccessResponse)
async def delete_session(
    session_id: int,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    raise_for_failure(await container.sessions.delete(session_id))
    return SuccessResponse(message=f"Session {session_id} deleted")
