"""
Unit tests for review reminder classification.

Every reminder falls into exactly one of COMPLETED, OVERDUE and PENDING,
so the counts always add up to the total.
"""

from datetime import date, timedelta

import pytest

from studytimer.enums.study import ReviewFilter, ReviewStatus
from studytimer.models.study import ReviewTask
from studytimer.services.study.review_classification import (
    ReviewCounts,
    classify,
    filter_reminders,
    group_by_date,
)

TODAY = date(2024, 3, 13)


def make_reminder(review_id: int, offset_days: int, completed: bool = False) -> ReviewTask:
    return ReviewTask(
        id=review_id,
        study_session_id=1,
        task_id=1,
        scheduled_date=TODAY + timedelta(days=offset_days),
        review_number=1,
        is_completed=completed,
    )


@pytest.fixture
def reminders() -> list[ReviewTask]:
    return [
        make_reminder(1, -3),  # overdue
        make_reminder(2, -1, completed=True),  # completed in the past
        make_reminder(3, 0),  # due today
        make_reminder(4, 2),  # future
        make_reminder(5, 5, completed=True),  # completed early
    ]


class TestClassify:
    def test_completed_wins_over_date(self):
        assert classify(make_reminder(1, -10, completed=True), TODAY) == ReviewStatus.COMPLETED
        assert classify(make_reminder(1, 10, completed=True), TODAY) == ReviewStatus.COMPLETED

    def test_past_incomplete_is_overdue(self):
        assert classify(make_reminder(1, -1), TODAY) == ReviewStatus.OVERDUE

    def test_today_is_pending_not_overdue(self):
        assert classify(make_reminder(1, 0), TODAY) == ReviewStatus.PENDING

    def test_future_is_pending(self):
        assert classify(make_reminder(1, 4), TODAY) == ReviewStatus.PENDING


class TestReviewCounts:
    def test_counts_partition_the_total(self, reminders):
        counts = ReviewCounts.from_reminders(reminders, TODAY)

        assert counts.total == 5
        assert counts.pending == 2
        assert counts.completed == 2
        assert counts.overdue == 1
        assert counts.pending + counts.completed + counts.overdue == counts.total

    def test_empty_list(self):
        counts = ReviewCounts.from_reminders([], TODAY)

        assert counts.total == counts.pending == counts.completed == counts.overdue == 0


class TestFilterReminders:
    def test_all_returns_everything(self, reminders):
        assert filter_reminders(reminders, ReviewFilter.ALL, TODAY) == reminders

    @pytest.mark.parametrize(
        "review_filter, expected_ids",
        [
            (ReviewFilter.PENDING, [3, 4]),
            (ReviewFilter.COMPLETED, [2, 5]),
            (ReviewFilter.OVERDUE, [1]),
        ],
    )
    def test_filters_select_one_class(self, reminders, review_filter, expected_ids):
        result = filter_reminders(reminders, review_filter, TODAY)

        assert [r.id for r in result] == expected_ids

    def test_filtered_lists_are_disjoint_and_cover_all(self, reminders):
        ids = []
        for review_filter in (ReviewFilter.PENDING, ReviewFilter.COMPLETED, ReviewFilter.OVERDUE):
            ids.extend(r.id for r in filter_reminders(reminders, review_filter, TODAY))

        assert sorted(ids) == [1, 2, 3, 4, 5]


class TestGroupByDate:
    def test_groups_sorted_by_date(self, reminders):
        grouped = group_by_date(list(reversed(reminders)))

        assert list(grouped) == sorted(grouped)
        assert [r.id for r in grouped[TODAY]] == [3]

    def test_same_date_keeps_order(self):
        first = make_reminder(1, 1)
        second = make_reminder(2, 1)

        grouped = group_by_date([first, second])

        assert grouped == {TODAY + timedelta(days=1): [first, second]}
