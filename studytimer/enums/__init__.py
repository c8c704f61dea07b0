"""
Centralized enum definitions for the application.

Usage:
    from studytimer.enums import ScheduleType, ReviewStatus, ErrorKind
"""

from studytimer.enums.study import (
    ErrorKind,
    PremiumFeature,
    ReviewFilter,
    ReviewStatus,
    ScheduleType,
    SessionState,
    SubscriptionType,
)

__all__ = [
    "ErrorKind",
    "PremiumFeature",
    "ReviewFilter",
    "ReviewStatus",
    "ScheduleType",
    "SessionState",
    "SubscriptionType",
]
