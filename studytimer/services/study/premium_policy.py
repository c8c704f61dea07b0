"""
Premium Policy

Decides what a user's plan allows: which review intervals apply, how many
reviews per session may be scheduled and which features are unlocked.

Free users always get FREE_REVIEW_INTERVALS, the first two premium
defaults, whatever list they configured. The user's stored interval
preference is never modified, so upgrading again restores it.

Usage:
    policy = PremiumPolicy()

    policy.effective_intervals(is_premium=False)            # [1, 3]
    policy.effective_intervals(True, configured=[2, 5, 9])  # [2, 5, 9]
    policy.check_review_count(False, 4)                     # Failure(PREMIUM_REQUIRED)
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from studytimer.config import settings
from studytimer.enums.study import PremiumFeature
from studytimer.models.result import DomainError, Failure, Result, Success
from studytimer.models.study import SubscriptionStatus
from studytimer.services.study.overrides import resolve

logger = logging.getLogger(__name__)

PREMIUM_REVIEW_INTERVALS = [1, 3, 7, 14, 30, 60]
FREE_REVIEW_INTERVALS = [1, 3]

PREMIUM_REVIEW_COUNT_OPTIONS = [2, 4, 6]
FREE_REVIEW_COUNT_OPTIONS = [2]
DEFAULT_REVIEW_COUNT_PREMIUM = 6
DEFAULT_REVIEW_COUNT_FREE = 2
MIN_REVIEW_COUNT = 1
MAX_REVIEW_COUNT_PREMIUM = 6
MAX_REVIEW_COUNT_FREE = 2


class PremiumPolicy:
    """Plan-dependent limits. Pure: no I/O, no stored state."""

    def effective_intervals(
        self, is_premium: bool, configured: Optional[list[int]] = None
    ) -> list[int]:
        """
        Review intervals that apply to the user.

        Args:
            is_premium: Whether the user currently has premium access
            configured: The user's configured interval list (None = premium default)

        Returns:
            A new list; the full configured list for premium users,
            FREE_REVIEW_INTERVALS for free users
        """
        if not is_premium:
            return list(FREE_REVIEW_INTERVALS)
        return list(PREMIUM_REVIEW_INTERVALS if configured is None else configured)

    def intervals_for_task(
        self,
        is_premium: bool,
        review_count: Optional[int],
        default_review_count: Optional[int] = None,
        configured: Optional[list[int]] = None,
    ) -> list[int]:
        """
        Intervals for a task, honouring its review-count override.

        The count resolves to the task override, then the user's default,
        then the plan default. Free users are clamped to the free maximum.
        """
        plan_default = self.default_review_count(is_premium)
        count = resolve(review_count, resolve(default_review_count, plan_default))
        count = max(count, MIN_REVIEW_COUNT)
        if not is_premium:
            count = min(count, MAX_REVIEW_COUNT_FREE)
        return self.effective_intervals(is_premium, configured)[:count]

    def review_count_options(self, is_premium: bool) -> list[int]:
        options = PREMIUM_REVIEW_COUNT_OPTIONS if is_premium else FREE_REVIEW_COUNT_OPTIONS
        return list(options)

    def default_review_count(self, is_premium: bool) -> int:
        return DEFAULT_REVIEW_COUNT_PREMIUM if is_premium else DEFAULT_REVIEW_COUNT_FREE

    def max_review_count(self, is_premium: bool) -> int:
        return MAX_REVIEW_COUNT_PREMIUM if is_premium else MAX_REVIEW_COUNT_FREE

    def check_review_count(self, is_premium: bool, review_count: Optional[int]) -> Result[Optional[int]]:
        """Validate a requested per-task review count against the plan."""
        if review_count is None:
            return Success(None)
        if review_count < MIN_REVIEW_COUNT:
            return Failure(
                DomainError.validation(
                    f"Review count must be at least {MIN_REVIEW_COUNT}", field="review_count"
                )
            )
        if review_count > MAX_REVIEW_COUNT_PREMIUM:
            return Failure(
                DomainError.validation(
                    f"Review count must be at most {MAX_REVIEW_COUNT_PREMIUM}",
                    field="review_count",
                )
            )
        if review_count > self.max_review_count(is_premium):
            return Failure(DomainError.premium_required(PremiumFeature.CUSTOM_REVIEW_COUNT.value))
        return Success(review_count)

    def can_access(self, feature: PremiumFeature, is_premium: bool) -> bool:
        # Every gated feature currently requires premium
        return is_premium

    def require_feature(self, feature: PremiumFeature, is_premium: bool) -> Result[None]:
        if self.can_access(feature, is_premium):
            return Success(None)
        return Failure(DomainError.premium_required(feature.value))

    def start_trial(
        self, status: SubscriptionStatus, now: Optional[datetime] = None
    ) -> Result[SubscriptionStatus]:
        """Begin the free trial window if the user may still start one."""
        if not status.can_start_trial:
            return Failure(
                DomainError.validation("Trial already used or not available", field="trial")
            )
        now = now or datetime.now()
        logger.info(f"Starting {settings.TRIAL_DURATION_DAYS}-day trial")
        return Success(
            status.model_copy(
                update={
                    "trial_started_at": now,
                    "trial_expires_at": now + timedelta(days=settings.TRIAL_DURATION_DAYS),
                    "is_trial_used": True,
                    "has_seen_trial_offer": True,
                }
            )
        )
