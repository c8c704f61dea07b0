"""
Study Domain Models

Pydantic records for the study timer: tasks and their schedule rules,
subject groups, study sessions, review reminders, daily statistics and
the user's timer settings and subscription.

Domain records (DomainModel) are what stores return and services consume.
Request models (StrictRequest) validate API input; several of them double as
store input (TaskCreate, SubjectGroupCreate).
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from studytimer.config import settings
from studytimer.enums.study import ScheduleType, SessionState, SubscriptionType
from studytimer.models.base import DomainModel, StrictRequest, StrictResponse
from studytimer.models.result import DomainError

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


# ===========================================
# Subject Groups
# ===========================================


class SubjectGroup(DomainModel):
    """A subject/category that owns tasks. Its name is the stats "subject"."""

    id: int
    name: str
    color_hex: str = "#00838F"
    display_order: int = 0
    created_at: Optional[datetime] = None


class SubjectGroupCreate(StrictRequest):
    name: str = Field(..., min_length=1, max_length=100)
    color_hex: str = Field("#00838F", pattern=r"^#[0-9A-Fa-f]{6}$")
    display_order: int = Field(0, ge=0)


# ===========================================
# Tasks
# ===========================================


class ScheduleRuleMixin:
    """
    Schedule rule helpers shared by task records and task drafts.

    Only the field matching ``schedule_type`` is consulted: repeat_days for
    REPEAT, deadline_date for DEADLINE, specific_date for SPECIFIC, nothing
    for NONE. Classes using it declare schedule_type, repeat_days,
    deadline_date and specific_date as fields.
    """

    def schedule_error(self) -> Optional[DomainError]:
        """Return a validation error naming the offending field, or None."""
        if self.schedule_type == ScheduleType.REPEAT:
            if not self.repeat_days:
                return DomainError.validation(
                    "Repeat schedule needs at least one weekday", field="repeat_days"
                )
            invalid = sorted(d for d in self.repeat_days if d < 1 or d > 7)
            if invalid:
                return DomainError.validation(
                    f"Weekday numbers must be 1..7 (Monday=1), got {invalid}",
                    field="repeat_days",
                )
        elif self.schedule_type == ScheduleType.DEADLINE:
            if self.deadline_date is None:
                return DomainError.validation(
                    "Deadline schedule needs a deadline date", field="deadline_date"
                )
        elif self.schedule_type == ScheduleType.SPECIFIC:
            if self.specific_date is None:
                return DomainError.validation(
                    "Specific-date schedule needs a date", field="specific_date"
                )
        return None

    @property
    def one_off_date(self) -> Optional[date]:
        """The single calendar date of a deadline/specific task."""
        if self.schedule_type == ScheduleType.DEADLINE:
            return self.deadline_date
        if self.schedule_type == ScheduleType.SPECIFIC:
            return self.specific_date
        return None

    def is_scheduled_on(self, day: date) -> bool:
        """Whether the task's schedule rule places it on ``day``."""
        if self.schedule_type == ScheduleType.REPEAT:
            return day.isoweekday() in self.repeat_days
        return self.one_off_date == day


class Task(ScheduleRuleMixin, DomainModel):
    """A study item, optionally scheduled and carrying per-task overrides."""

    id: int
    group_id: Optional[int] = None
    name: str
    work_duration_minutes: Optional[int] = None
    is_active: bool = True
    schedule_type: ScheduleType = ScheduleType.NONE
    repeat_days: set[int] = Field(default_factory=set)
    deadline_date: Optional[date] = None
    specific_date: Optional[date] = None
    last_studied_at: Optional[datetime] = None
    review_count: Optional[int] = None
    review_enabled: bool = True
    progress_note: Optional[str] = None
    progress_percent: Optional[int] = None
    next_goal: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Denormalized from the owning group on reads
    group_name: Optional[str] = None

    @property
    def subject_name(self) -> str:
        """Subject used for the daily stats breakdown."""
        return self.group_name or self.name


class TaskCreate(ScheduleRuleMixin, StrictRequest):
    """Input for creating a task (API body and store input)."""

    group_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    work_duration_minutes: Optional[int] = Field(
        None, ge=settings.MIN_WORK_MINUTES, le=settings.MAX_WORK_MINUTES
    )
    schedule_type: ScheduleType = ScheduleType.NONE
    repeat_days: set[int] = Field(default_factory=set)
    deadline_date: Optional[date] = None
    specific_date: Optional[date] = None
    review_count: Optional[int] = Field(None, ge=1)
    review_enabled: bool = True


class TaskUpdate(StrictRequest):
    """Partial task update; only fields that were sent are applied."""

    group_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    work_duration_minutes: Optional[int] = Field(
        None, ge=settings.MIN_WORK_MINUTES, le=settings.MAX_WORK_MINUTES
    )
    is_active: Optional[bool] = None
    schedule_type: Optional[ScheduleType] = None
    repeat_days: Optional[set[int]] = None
    deadline_date: Optional[date] = None
    specific_date: Optional[date] = None
    review_count: Optional[int] = Field(None, ge=1)
    review_enabled: Optional[bool] = None

    def apply_to(self, task: Task) -> Task:
        return task.model_copy(update=self.model_dump(exclude_unset=True))


class TaskProgressUpdate(StrictRequest):
    progress_note: Optional[str] = Field(None, max_length=2000)
    progress_percent: Optional[int] = Field(None, ge=0, le=100)
    next_goal: Optional[str] = Field(None, max_length=500)


# ===========================================
# Study Sessions
# ===========================================


class StudySession(DomainModel):
    """
    One timed study session.

    Created on start with ``ended_at`` unset; mutated exactly once on finish.
    """

    id: int
    task_id: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    work_duration_minutes: int = 0
    planned_duration_minutes: int = 0
    cycles_completed: int = 0
    was_interrupted: bool = False
    notes: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return SessionState.FINISHED if self.ended_at is not None else SessionState.RUNNING


# ===========================================
# Review Reminders
# ===========================================


class ReviewTaskDraft(DomainModel):
    """A reminder produced by the scheduler, not yet persisted."""

    study_session_id: int
    task_id: int
    scheduled_date: date
    review_number: int
    is_completed: bool = False


class ReviewTask(DomainModel):
    """A persisted spaced-repetition reminder."""

    id: int
    study_session_id: int
    task_id: int
    scheduled_date: date
    review_number: int
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    # Denormalized on detail queries
    task_name: Optional[str] = None
    group_name: Optional[str] = None


# ===========================================
# Statistics
# ===========================================


class DailyStats(DomainModel):
    """Aggregate study time for one calendar date."""

    date: date
    total_study_minutes: int = 0
    session_count: int = 0
    subject_breakdown: dict[str, int] = Field(default_factory=dict)


class DayStats(DomainModel):
    """One entry of the weekly chart."""

    day_of_week: str
    date: date
    minutes: int = 0


class StreakData(DomainModel):
    """Streak information with milestones."""

    current_streak: int = 0
    longest_streak: int = 0
    streak_start: Optional[date] = None
    last_study_date: Optional[date] = None
    milestones_reached: list[int] = Field(default_factory=list)
    next_milestone: Optional[int] = None
    days_to_next_milestone: Optional[int] = None


class StatsSummary(DomainModel):
    """Everything the statistics screen shows at once."""

    today_minutes: int = 0
    current_streak: int = 0
    max_streak: int = 0
    this_week_minutes: int = 0
    this_month_minutes: int = 0
    last_30_days_minutes: int = 0
    average_daily_minutes: float = 0.0
    weekly_data: list[DayStats] = Field(default_factory=list)


# ===========================================
# Settings and Subscription
# ===========================================


def _positive_intervals(value: Optional[list[int]]) -> Optional[list[int]]:
    if value is not None and any(v <= 0 for v in value):
        raise ValueError("review intervals must be positive day counts")
    return value


class PomodoroSettings(DomainModel):
    """Timer and review settings read by the core at call time."""

    work_duration_minutes: int = Field(
        settings.DEFAULT_WORK_MINUTES,
        ge=settings.MIN_WORK_MINUTES,
        le=settings.MAX_WORK_MINUTES,
    )
    short_break_minutes: int = Field(
        settings.DEFAULT_SHORT_BREAK_MINUTES,
        ge=settings.MIN_BREAK_MINUTES,
        le=settings.MAX_BREAK_MINUTES,
    )
    long_break_minutes: int = Field(
        settings.DEFAULT_LONG_BREAK_MINUTES,
        ge=settings.MIN_BREAK_MINUTES,
        le=settings.MAX_BREAK_MINUTES,
    )
    cycles_before_long_break: int = Field(
        settings.DEFAULT_CYCLES, ge=settings.MIN_CYCLES, le=settings.MAX_CYCLES
    )
    focus_mode_enabled: bool = False
    focus_mode_strict: bool = False
    auto_loop_enabled: bool = False
    review_enabled: bool = True
    review_intervals: list[int] = Field(default_factory=lambda: [1, 3, 7, 14, 30, 60])
    default_review_count: int = Field(2, ge=1)
    notifications_enabled: bool = True

    @field_validator("review_intervals")
    @classmethod
    def check_intervals(cls, value):
        return _positive_intervals(value)


class PomodoroSettingsUpdate(StrictRequest):
    """Partial settings update; every sent field is written in one transaction."""

    work_duration_minutes: Optional[int] = Field(
        None, ge=settings.MIN_WORK_MINUTES, le=settings.MAX_WORK_MINUTES
    )
    short_break_minutes: Optional[int] = Field(
        None, ge=settings.MIN_BREAK_MINUTES, le=settings.MAX_BREAK_MINUTES
    )
    long_break_minutes: Optional[int] = Field(
        None, ge=settings.MIN_BREAK_MINUTES, le=settings.MAX_BREAK_MINUTES
    )
    cycles_before_long_break: Optional[int] = Field(
        None, ge=settings.MIN_CYCLES, le=settings.MAX_CYCLES
    )
    focus_mode_enabled: Optional[bool] = None
    focus_mode_strict: Optional[bool] = None
    auto_loop_enabled: Optional[bool] = None
    review_enabled: Optional[bool] = None
    review_intervals: Optional[list[int]] = None
    default_review_count: Optional[int] = Field(None, ge=1)
    notifications_enabled: Optional[bool] = None

    @field_validator("review_intervals")
    @classmethod
    def check_intervals(cls, value):
        return _positive_intervals(value)


class SubscriptionStatus(DomainModel):
    """
    The user's plan and trial window.

    Premium when: LIFETIME always; FREE only while the trial is running;
    any other plan while ``expires_at`` lies in the future.
    """

    type: SubscriptionType = SubscriptionType.FREE
    expires_at: Optional[datetime] = None
    trial_started_at: Optional[datetime] = None
    trial_expires_at: Optional[datetime] = None
    is_trial_used: bool = False
    has_seen_trial_offer: bool = False

    def is_in_trial_period(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        return self.trial_expires_at is not None and self.trial_expires_at > now

    def is_premium(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        if self.type == SubscriptionType.FREE:
            return self.is_in_trial_period(now)
        if self.type == SubscriptionType.LIFETIME:
            return True
        return self.expires_at is not None and self.expires_at > now

    def days_remaining_in_trial(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now()
        if not self.is_in_trial_period(now):
            return 0
        return max((self.trial_expires_at - now).days, 0)

    @property
    def can_start_trial(self) -> bool:
        return not self.is_trial_used and self.type == SubscriptionType.FREE


class SubscriptionResponse(StrictResponse):
    """Subscription status with the derived flags evaluated."""

    type: SubscriptionType
    expires_at: Optional[datetime] = None
    trial_expires_at: Optional[datetime] = None
    is_premium: bool
    is_in_trial_period: bool
    days_remaining_in_trial: int
    can_start_trial: bool

    @classmethod
    def from_status(cls, status: SubscriptionStatus) -> "SubscriptionResponse":
        now = datetime.now()
        return cls(
            type=status.type,
            expires_at=status.expires_at,
            trial_expires_at=status.trial_expires_at,
            is_premium=status.is_premium(now),
            is_in_trial_period=status.is_in_trial_period(now),
            days_remaining_in_trial=status.days_remaining_in_trial(now),
            can_start_trial=status.can_start_trial,
        )


class SubscriptionUpdate(StrictRequest):
    type: SubscriptionType
    expires_at: Optional[datetime] = None


class AllowedAppsUpdate(StrictRequest):
    packages: list[str] = Field(default_factory=list)


# ===========================================
# Session Lifecycle Outcomes
# ===========================================


class FinishOutcome(DomainModel):
    """What finishing a session changed."""

    session: StudySession
    daily_stats: DailyStats
    reminders: list[ReviewTaskDraft] = Field(default_factory=list)

    @property
    def reminders_created(self) -> int:
        return len(self.reminders)


class TodayTasks(DomainModel):
    """Tasks scheduled for a day plus overdue-and-today reminders."""

    date: date
    scheduled_tasks: list[Task] = Field(default_factory=list)
    review_tasks: list[ReviewTask] = Field(default_factory=list)
    upcoming_deadlines: list[Task] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.scheduled_tasks) + len(self.review_tasks)


# ===========================================
# API Request / Response Models
# ===========================================


class SessionStartRequest(StrictRequest):
    task_id: int
    cycles: int = Field(settings.DEFAULT_CYCLES, ge=1)
    started_at: Optional[datetime] = None


class SessionFinishRequest(StrictRequest):
    task_id: int
    total_work_minutes: int = Field(..., ge=0)
    current_cycle: int = Field(..., ge=0)
    total_cycles: int = Field(..., ge=1)
    is_interrupted: bool = False
    is_session_completed: bool = False
    completion_date: Optional[date] = None


class SessionStartResponse(StrictResponse):
    session_id: int
    planned_duration_minutes: int


class FinishResponse(StrictResponse):
    session: StudySession
    daily_stats: DailyStats
    reminders_created: int
    review_dates: list[date] = Field(default_factory=list)


class RescheduleRequest(StrictRequest):
    scheduled_date: date


class TodayTasksResponse(StrictResponse):
    date: date
    scheduled_tasks: list[Task]
    review_tasks: list[ReviewTask]
    upcoming_deadlines: list[Task]
    total_count: int


class CalendarCountsResponse(StrictResponse):
    start: date
    end: date
    counts: dict[date, int]
