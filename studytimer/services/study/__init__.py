"""
Study Services

Domain logic on top of the stores: session lifecycle, review scheduling,
statistics, calendar counts, premium rules and settings.

Modules:
- overrides: task-over-global value resolution
- premium_policy: plan-dependent intervals, counts and feature gates
- review_scheduler: reminder dates from a completion date
- review_classification: pending / overdue / completed partition
- stats_aggregator: daily stats, streaks and weekly summaries
- calendar_counts: per-date task counts for the calendar
- today_tasks: what the home screen shows for a day
- session_lifecycle: start and finish study sessions
- settings_service: pomodoro settings, allowed apps and subscription

Usage:
    from studytimer.services.study import (
        SessionLifecycleManager,
        StatsAggregator,
        PremiumPolicy,
    )
"""

from studytimer.services.study.calendar_counts import CalendarCountMerger, merge_counts
from studytimer.services.study.premium_policy import PremiumPolicy
from studytimer.services.study.review_classification import (
    ReviewCounts,
    classify,
    filter_reminders,
    group_by_date,
)
from studytimer.services.study.session_lifecycle import SessionLifecycleManager
from studytimer.services.study.settings_service import PomodoroSettingsService
from studytimer.services.study.stats_aggregator import (
    StatsAggregator,
    calculate_current_streak,
    calculate_longest_streak,
)
from studytimer.services.study.today_tasks import TodayTasksService

__all__ = [
    # Calendar
    "CalendarCountMerger",
    "merge_counts",
    # Premium
    "PremiumPolicy",
    # Reviews
    "ReviewCounts",
    "classify",
    "filter_reminders",
    "group_by_date",
    # Sessions
    "SessionLifecycleManager",
    # Settings
    "PomodoroSettingsService",
    # Stats
    "StatsAggregator",
    "calculate_current_streak",
    "calculate_longest_streak",
    # Home screen
    "TodayTasksService",
]
