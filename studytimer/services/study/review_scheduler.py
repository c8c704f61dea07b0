"""
Review Scheduler

Turns a finished study session into spaced-repetition reminders. Pure
functions: no I/O, deterministic, never fail.

Reminder i (1-based) is due ``intervals[i-1]`` days after the completion
date. Interval values are validated where they are configured
(PomodoroSettings), not here.
"""

from datetime import date, timedelta

from studytimer.models.study import ReviewTaskDraft


def generate(
    origin_session_id: int,
    task_id: int,
    completion_date: date,
    intervals: list[int],
) -> list[ReviewTaskDraft]:
    """
    Build the reminders for one session.

    Args:
        origin_session_id: Session the reminders come from
        task_id: Task being reviewed
        completion_date: Date the session finished
        intervals: Ordered day offsets

    Returns:
        One draft per interval, review_number 1..len(intervals); empty for
        an empty interval list
    """
    return [
        ReviewTaskDraft(
            study_session_id=origin_session_id,
            task_id=task_id,
            scheduled_date=completion_date + timedelta(days=interval),
            review_number=index + 1,
            is_completed=False,
        )
        for index, interval in enumerate(intervals)
    ]


def should_generate(
    review_enabled_globally: bool,
    task_review_enabled: bool,
    is_interrupted: bool,
    intervals: list[int],
) -> bool:
    """Reminders are created only for uninterrupted sessions with reviews on."""
    return (
        review_enabled_globally
        and task_review_enabled
        and not is_interrupted
        and len(intervals) > 0
    )
