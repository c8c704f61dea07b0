"""Pydantic models for the application."""

from studytimer.models.result import (
    DomainError,
    DomainException,
    Failure,
    Result,
    Success,
)
from studytimer.models.study import (
    DailyStats,
    DayStats,
    FinishOutcome,
    PomodoroSettings,
    ReviewTask,
    ReviewTaskDraft,
    StatsSummary,
    StreakData,
    StudySession,
    SubjectGroup,
    SubscriptionStatus,
    Task,
    TaskCreate,
    TodayTasks,
)

__all__ = [
    # Results
    "DomainError",
    "DomainException",
    "Failure",
    "Result",
    "Success",
    # Study domain
    "DailyStats",
    "DayStats",
    "FinishOutcome",
    "PomodoroSettings",
    "ReviewTask",
    "ReviewTaskDraft",
    "StatsSummary",
    "StreakData",
    "StudySession",
    "SubjectGroup",
    "SubscriptionStatus",
    "Task",
    "TaskCreate",
    "TodayTasks",
]
