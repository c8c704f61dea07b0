"""
SQLAlchemy Database Models

These models define the schema for the study timer. Relations are id-based;
review reminders and sessions cascade away with their task, and reminders
cascade away with their originating session.

Tables:
- subject_groups: Subjects/categories owning tasks
- tasks: Study items with optional schedule rules and overrides
- study_sessions: Timed work sessions
- review_tasks: Spaced-repetition reminders generated on session finish
- daily_stats: One aggregate row per calendar date
- daily_subject_minutes: Per-subject minutes for a date
- settings: Key/value user settings
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studytimer.db.base import Base
from studytimer.enums.study import ScheduleType


class SubjectGroupRow(Base):
    """Subject groups. A group's name is the subject in daily stats."""

    __tablename__ = "subject_groups"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    color_hex: Mapped[str] = mapped_column(String(7), default="#00838F")
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class TaskRow(Base):
    """
    Study items.

    Only the scheduling column matching schedule_type is meaningful:
    repeat_days (JSON list of ISO weekdays) for REPEAT, deadline_date for
    DEADLINE, specific_date for SPECIFIC.
    """

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    group_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("subject_groups.id", ondelete="SET NULL"), index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    work_duration_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    # Scheduling
    schedule_type: Mapped[ScheduleType] = mapped_column(
        SQLEnum(ScheduleType), default=ScheduleType.NONE
    )
    repeat_days: Mapped[list] = mapped_column(JSON, default=list)
    deadline_date: Mapped[Optional[date]] = mapped_column(Date)
    specific_date: Mapped[Optional[date]] = mapped_column(Date)

    # Study tracking
    last_studied_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    review_count: Mapped[Optional[int]] = mapped_column(Integer)  # Override of default count
    review_enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    # Progress
    progress_note: Mapped[Optional[str]] = mapped_column(Text)
    progress_percent: Mapped[Optional[int]] = mapped_column(Integer)
    next_goal: Mapped[Optional[str]] = mapped_column(String(500))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )

    # Loaded in the same SELECT so the name is available without lazy IO
    group: Mapped[Optional["SubjectGroupRow"]] = relationship(lazy="joined")

    @property
    def group_name(self) -> Optional[str]:
        return self.group.name if self.group is not None else None


class StudySessionRow(Base):
    """Timed study sessions. ended_at stays NULL while the session runs."""

    __tablename__ = "study_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), index=True
    )
    started_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    work_duration_minutes: Mapped[int] = mapped_column(Integer, default=0)
    planned_duration_minutes: Mapped[int] = mapped_column(Integer, default=0)
    cycles_completed: Mapped[int] = mapped_column(Integer, default=0)
    was_interrupted: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)


class ReviewTaskRow(Base):
    """
    Review reminders.

    review_number runs 1..N per originating session. completed_at is set
    exactly when is_completed is true.
    """

    __tablename__ = "review_tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    study_session_id: Mapped[int] = mapped_column(
        ForeignKey("study_sessions.id", ondelete="CASCADE"), index=True
    )
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), index=True
    )
    scheduled_date: Mapped[date] = mapped_column(Date)
    review_number: Mapped[int] = mapped_column(Integer)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    __table_args__ = (
        Index("ix_review_tasks_scheduled_completed", "scheduled_date", "is_completed"),
    )


class DailyStatsRow(Base):
    """One aggregate row per date, updated additively."""

    __tablename__ = "daily_stats"

    day: Mapped[date] = mapped_column(Date, primary_key=True)
    total_study_minutes: Mapped[int] = mapped_column(Integer, default=0)
    session_count: Mapped[int] = mapped_column(Integer, default=0)


class DailySubjectMinutesRow(Base):
    """Subject breakdown entries of a daily_stats row."""

    __tablename__ = "daily_subject_minutes"

    day: Mapped[date] = mapped_column(
        ForeignKey("daily_stats.day", ondelete="CASCADE"), primary_key=True
    )
    subject: Mapped[str] = mapped_column(String(200), primary_key=True)
    minutes: Mapped[int] = mapped_column(Integer, default=0)


class SettingRow(Base):
    """Key/value settings. Lists and objects are stored as JSON text."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
