"""
Review Classification

Every reminder is in exactly one class relative to a reference date:

- COMPLETED: completed, whatever its date
- OVERDUE: not completed and scheduled before the reference date
- PENDING: not completed and scheduled on or after the reference date

Counts are taken from this partition, so pending + completed + overdue
always equals the total.
"""

from collections import defaultdict
from datetime import date

from studytimer.enums.study import ReviewFilter, ReviewStatus
from studytimer.models.base import StrictResponse
from studytimer.models.study import ReviewTask


def classify(reminder: ReviewTask, today: date) -> ReviewStatus:
    if reminder.is_completed:
        return ReviewStatus.COMPLETED
    elif reminder.scheduled_date < today:
        return ReviewStatus.OVERDUE
    else:
        return ReviewStatus.PENDING


class ReviewCounts(StrictResponse):
    """Sizes of the classification partition."""

    total: int = 0
    pending: int = 0
    completed: int = 0
    overdue: int = 0

    @classmethod
    def from_reminders(cls, reminders: list[ReviewTask], today: date) -> "ReviewCounts":
        counts = {status: 0 for status in ReviewStatus}
        for reminder in reminders:
            counts[classify(reminder, today)] += 1
        return cls(
            total=len(reminders),
            pending=counts[ReviewStatus.PENDING],
            completed=counts[ReviewStatus.COMPLETED],
            overdue=counts[ReviewStatus.OVERDUE],
        )


_FILTER_STATUS = {
    ReviewFilter.PENDING: ReviewStatus.PENDING,
    ReviewFilter.COMPLETED: ReviewStatus.COMPLETED,
    ReviewFilter.OVERDUE: ReviewStatus.OVERDUE,
}


def filter_reminders(
    reminders: list[ReviewTask], review_filter: ReviewFilter, today: date
) -> list[ReviewTask]:
    """Reminders of one class (or all of them), order preserved."""
    if review_filter == ReviewFilter.ALL:
        return list(reminders)
    wanted = _FILTER_STATUS[review_filter]
    return [r for r in reminders if classify(r, today) == wanted]


def group_by_date(reminders: list[ReviewTask]) -> dict[date, list[ReviewTask]]:
    """Reminders keyed by scheduled date, dates ascending."""
    grouped: dict[date, list[ReviewTask]] = defaultdict(list)
    for reminder in reminders:
        grouped[reminder.scheduled_date].append(reminder)
    return {day: grouped[day] for day in sorted(grouped)}
