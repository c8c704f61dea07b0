"""Unit tests for calendar count merging."""

from datetime import date

from studytimer.services.study.calendar_counts import merge_counts, month_range


class TestMergeCounts:
    def test_contributions_are_added(self):
        tasks = {date(2024, 3, 1): 2, date(2024, 3, 2): 1}
        reviews = {date(2024, 3, 1): 1, date(2024, 3, 5): 3}

        assert merge_counts(tasks, reviews) == {
            date(2024, 3, 1): 3,
            date(2024, 3, 2): 1,
            date(2024, 3, 5): 3,
        }

    def test_zero_totals_are_dropped(self):
        assert merge_counts({date(2024, 3, 1): 0}, {}) == {}

    def test_result_is_sorted_by_date(self):
        merged = merge_counts({date(2024, 3, 9): 1}, {date(2024, 3, 2): 1})

        assert list(merged) == [date(2024, 3, 2), date(2024, 3, 9)]

    def test_no_sources(self):
        assert merge_counts() == {}


class TestMonthRange:
    def test_thirty_one_day_month(self):
        assert month_range(2024, 1) == (date(2024, 1, 1), date(2024, 1, 31))

    def test_leap_february(self):
        assert month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_common_february(self):
        assert month_range(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))
