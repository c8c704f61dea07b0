"""
Study Domain Enums

Defines enums for task scheduling, session lifecycle, review reminder
classification, subscriptions and domain error kinds.
"""

from enum import Enum


class ScheduleType(str, Enum):
    """
    How a task is placed on the calendar.

    Only the scheduling field matching the type is consulted:
    - NONE: no scheduling fields
    - REPEAT: repeat_days (weekday numbers 1..7, Monday=1)
    - DEADLINE: deadline_date
    - SPECIFIC: specific_date
    """

    NONE = "none"
    REPEAT = "repeat"
    DEADLINE = "deadline"
    SPECIFIC = "specific"


class SessionState(str, Enum):
    """
    Study session lifecycle states.

    State transitions:
    - NOT_STARTED → RUNNING (start)
    - RUNNING → FINISHED (finish, terminal)
    """

    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"


class ReviewStatus(str, Enum):
    """
    Classification of a review reminder relative to a reference date.

    The three values partition every reminder set:
    - COMPLETED: completed, regardless of date
    - OVERDUE: not completed and scheduled before the reference date
    - PENDING: not completed and scheduled on or after the reference date
    """

    PENDING = "pending"
    OVERDUE = "overdue"
    COMPLETED = "completed"


class ReviewFilter(str, Enum):
    """List filters for the review schedule view."""

    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class SubscriptionType(str, Enum):
    """Subscription plans."""

    FREE = "free"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half_yearly"
    YEARLY = "yearly"
    LIFETIME = "lifetime"


class PremiumFeature(str, Enum):
    """Features gated behind a premium subscription."""

    EXTENDED_REVIEW_INTERVALS = "extended_review_intervals"
    CUSTOM_REVIEW_COUNT = "custom_review_count"
    AUTO_LOOP = "auto_loop"
    STRICT_FOCUS_MODE = "strict_focus_mode"


class ErrorKind(str, Enum):
    """
    Domain error kinds.

    Every store and service operation reports failures as one of these,
    carried by DomainError together with its associated data.
    """

    DATABASE = "database"  # Storage operation failed, cause attached
    NOT_FOUND = "not_found"  # Referenced id absent
    VALIDATION = "validation"  # Input violates an invariant, may name a field
    NETWORK = "network"  # Cloud-dependent collaborators only
    PREMIUM_REQUIRED = "premium_required"  # Feature gated, carries feature name
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"  # Catch-all with cause
