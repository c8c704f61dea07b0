"""
Unit tests for the streak and weekly-chart helpers.

These functions work on plain date lists, so no database is needed.
"""

from datetime import date, timedelta

from studytimer.models.study import DailyStats
from studytimer.services.study.stats_aggregator import (
    build_week,
    calculate_current_streak,
    calculate_longest_streak,
)

TODAY = date(2024, 3, 13)


def days_ago(*offsets: int) -> list[date]:
    return [TODAY - timedelta(days=offset) for offset in offsets]


class TestCurrentStreak:
    def test_no_study_days(self):
        assert calculate_current_streak([], TODAY) == (0, None)

    def test_five_consecutive_days_ending_today(self):
        streak, start = calculate_current_streak(days_ago(0, 1, 2, 3, 4), TODAY)

        assert streak == 5
        assert start == TODAY - timedelta(days=4)

    def test_streak_survives_until_today_is_studied(self):
        """Without study today the streak ends at the most recent study day."""
        streak, start = calculate_current_streak(days_ago(1, 2, 3), TODAY)

        assert streak == 3
        assert start == TODAY - timedelta(days=3)

    def test_gap_breaks_the_streak(self):
        streak, _ = calculate_current_streak(days_ago(0, 1, 3, 4, 5, 6), TODAY)

        assert streak == 2

    def test_order_and_duplicates_do_not_matter(self):
        streak, _ = calculate_current_streak(days_ago(2, 0, 1, 0), TODAY)

        assert streak == 3

    def test_future_days_are_ignored(self):
        study_days = days_ago(0, 1) + [TODAY + timedelta(days=1)]

        assert calculate_current_streak(study_days, TODAY)[0] == 2


class TestLongestStreak:
    def test_empty(self):
        assert calculate_longest_streak([]) == 0

    def test_single_day(self):
        assert calculate_longest_streak([TODAY]) == 1

    def test_longest_run_wins(self):
        study_days = days_ago(0, 1, 5, 6, 7, 8, 20)

        assert calculate_longest_streak(study_days) == 4

    def test_longest_is_at_least_current(self):
        study_days = days_ago(0, 1, 2, 10, 11)

        assert calculate_longest_streak(study_days) >= calculate_current_streak(study_days, TODAY)[0]


class TestBuildWeek:
    def test_always_seven_days(self):
        week = build_week(date(2024, 3, 11), [])

        assert len(week) == 7
        assert all(day.minutes == 0 for day in week)

    def test_labels_and_dates(self):
        week = build_week(date(2024, 3, 11), [])

        assert [day.day_of_week for day in week] == [
            "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun",
        ]
        assert week[0].date == date(2024, 3, 11)
        assert week[6].date == date(2024, 3, 17)

    def test_minutes_filled_from_stats(self):
        stats = [
            DailyStats(date=date(2024, 3, 12), total_study_minutes=50, session_count=2),
            DailyStats(date=date(2024, 3, 16), total_study_minutes=25, session_count=1),
        ]

        week = build_week(date(2024, 3, 11), stats)

        assert [day.minutes for day in week] == [0, 50, 0, 0, 0, 25, 0]
