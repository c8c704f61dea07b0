"""
Unit tests for the study domain models and the Result type.

Tests:
- Schedule rule validation and date matching
- Settings bounds and interval validation
- Subscription premium derivation
- Result composition
"""

from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError

from studytimer.enums.study import ErrorKind, ScheduleType, SessionState, SubscriptionType
from studytimer.models.result import DomainError, DomainException, Failure, Success
from studytimer.models.study import (
    PomodoroSettings,
    PomodoroSettingsUpdate,
    StudySession,
    SubscriptionStatus,
    Task,
    TaskCreate,
    TaskUpdate,
)


class TestScheduleRules:
    def test_unscheduled_task_is_valid(self):
        assert TaskCreate(name="Reading").schedule_error() is None

    def test_repeat_needs_weekdays(self):
        error = TaskCreate(name="Drill", schedule_type=ScheduleType.REPEAT).schedule_error()

        assert error.kind == ErrorKind.VALIDATION
        assert error.field == "repeat_days"

    def test_repeat_weekdays_must_be_iso(self):
        draft = TaskCreate(name="Drill", schedule_type=ScheduleType.REPEAT, repeat_days={0, 3})

        assert draft.schedule_error().field == "repeat_days"

    def test_deadline_needs_date(self):
        draft = TaskCreate(name="Essay", schedule_type=ScheduleType.DEADLINE)

        assert draft.schedule_error().field == "deadline_date"

    def test_specific_needs_date(self):
        draft = TaskCreate(name="Exam", schedule_type=ScheduleType.SPECIFIC)

        assert draft.schedule_error().field == "specific_date"

    def test_only_matching_field_is_consulted(self):
        """A deadline task ignores stray repeat days."""
        task = Task(
            id=1,
            name="Essay",
            schedule_type=ScheduleType.DEADLINE,
            deadline_date=date(2024, 3, 15),
            repeat_days={1, 2, 3},
        )

        assert task.schedule_error() is None
        assert task.is_scheduled_on(date(2024, 3, 15))
        assert not task.is_scheduled_on(date(2024, 3, 11))  # a Monday

    def test_repeat_matches_iso_weekdays(self):
        task = Task(id=1, name="Drill", schedule_type=ScheduleType.REPEAT, repeat_days={1, 7})

        assert task.is_scheduled_on(date(2024, 3, 11))  # Monday
        assert task.is_scheduled_on(date(2024, 3, 17))  # Sunday
        assert not task.is_scheduled_on(date(2024, 3, 13))

    def test_unscheduled_task_is_never_on_a_date(self):
        task = Task(id=1, name="Reading")

        assert task.one_off_date is None
        assert not task.is_scheduled_on(date(2024, 3, 13))

    def test_request_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            TaskCreate(name="Reading", colour="blue")


class TestTask:
    def test_subject_prefers_group_name(self):
        assert Task(id=1, name="Calculus", group_name="Math").subject_name == "Math"

    def test_subject_falls_back_to_task_name(self):
        assert Task(id=1, name="History").subject_name == "History"

    def test_update_applies_only_sent_fields(self):
        task = Task(id=1, name="Calculus", review_count=4, work_duration_minutes=30)

        updated = TaskUpdate(name="Algebra").apply_to(task)

        assert updated.name == "Algebra"
        assert updated.review_count == 4
        assert updated.work_duration_minutes == 30

    def test_update_can_clear_an_override(self):
        task = Task(id=1, name="Calculus", work_duration_minutes=30)

        updated = TaskUpdate(work_duration_minutes=None).apply_to(task)

        assert updated.work_duration_minutes is None


class TestStudySession:
    def test_running_until_ended(self):
        session = StudySession(id=1, task_id=1, started_at=datetime(2024, 3, 13, 9))

        assert session.state == SessionState.RUNNING
        assert session.model_copy(update={"ended_at": datetime(2024, 3, 13, 10)}).state == (
            SessionState.FINISHED
        )


class TestPomodoroSettings:
    def test_defaults(self):
        settings = PomodoroSettings()

        assert settings.work_duration_minutes == 25
        assert settings.review_intervals == [1, 3, 7, 14, 30, 60]
        assert settings.review_enabled is True

    @pytest.mark.parametrize(
        "field, value",
        [
            ("work_duration_minutes", 0),
            ("work_duration_minutes", 121),
            ("short_break_minutes", 0),
            ("cycles_before_long_break", 11),
        ],
    )
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            PomodoroSettings(**{field: value})

    def test_intervals_must_be_positive(self):
        with pytest.raises(ValidationError):
            PomodoroSettings(review_intervals=[1, 0, 7])

    def test_update_validates_intervals(self):
        with pytest.raises(ValidationError):
            PomodoroSettingsUpdate(review_intervals=[-1])


class TestSubscriptionStatus:
    NOW = datetime(2024, 3, 13, 12, 0)

    def test_free_is_not_premium(self):
        assert SubscriptionStatus().is_premium(self.NOW) is False

    def test_lifetime_is_premium(self):
        assert SubscriptionStatus(type=SubscriptionType.LIFETIME).is_premium(self.NOW) is True

    def test_paid_plan_until_expiry(self):
        status = SubscriptionStatus(
            type=SubscriptionType.MONTHLY, expires_at=self.NOW + timedelta(days=10)
        )

        assert status.is_premium(self.NOW)
        assert not status.is_premium(self.NOW + timedelta(days=11))

    def test_trial_makes_free_user_premium(self):
        status = SubscriptionStatus(
            trial_started_at=self.NOW,
            trial_expires_at=self.NOW + timedelta(days=3),
            is_trial_used=True,
        )

        assert status.is_premium(self.NOW + timedelta(hours=1))
        assert status.days_remaining_in_trial(self.NOW) == 3
        assert status.can_start_trial is False

    def test_no_trial_days_after_expiry(self):
        status = SubscriptionStatus(trial_expires_at=self.NOW - timedelta(days=1))

        assert status.days_remaining_in_trial(self.NOW) == 0


class TestResult:
    def test_map_and_flat_map(self):
        assert Success(2).map(lambda n: n * 3).value == 6
        assert Success(2).flat_map(lambda n: Success(n + 1)).value == 3

    def test_failure_short_circuits(self):
        failure = Failure(DomainError.not_found("Task 9 not found"))

        assert failure.map(lambda n: n * 3) is failure
        assert failure.get_or_default(0) == 0
        assert failure.get_or_none() is None

    def test_recover(self):
        failure = Failure(DomainError.validation("bad", field="name"))

        assert failure.recover(lambda error: error.field).value == "name"

    def test_unwrap_failure_raises_domain_exception(self):
        error = DomainError.premium_required("auto_loop")

        with pytest.raises(DomainException) as exc_info:
            Failure(error).unwrap()

        assert exc_info.value.error == error

    def test_error_to_dict_reduces_cause(self):
        error = DomainError.database("Failed to load task", cause=RuntimeError("locked"))

        assert error.to_dict() == {
            "kind": "database",
            "message": "Failed to load task",
            "cause": "RuntimeError: locked",
        }
