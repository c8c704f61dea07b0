"""
Pomodoro Settings Service

Reads and updates the user's timer/review settings, the allowed-apps list
and the subscription status, applying the premium rules on the way.

Updates are read-modify-write: the current settings are loaded, the
change is applied and validated, and every key is written in one
transaction. Single-field helpers (update_work_duration, toggle_review,
...) are thin wrappers over the same path.

Configuration hierarchy for review intervals:
1. Task review-count override
2. User's default review count
3. Plan default (PremiumPolicy)
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from studytimer.enums.study import PremiumFeature, SubscriptionType
from studytimer.models.result import DomainError, Failure, Result, Success
from studytimer.models.study import (
    PomodoroSettings,
    PomodoroSettingsUpdate,
    SubscriptionStatus,
    Task,
)
from studytimer.services.study.premium_policy import PremiumPolicy
from studytimer.stores.settings_store import SettingsStore

logger = logging.getLogger(__name__)


def _validation_failure(error: ValidationError) -> Failure:
    first = error.errors()[0]
    field = str(first["loc"][0]) if first["loc"] else None
    return Failure(DomainError.validation(first["msg"], field=field))


class PomodoroSettingsService:
    """Settings, allowed apps and subscription on top of SettingsStore."""

    def __init__(self, store: SettingsStore, policy: PremiumPolicy):
        self.store = store
        self.policy = policy

    # =========================================================================
    # Pomodoro settings
    # =========================================================================

    async def get_settings(self) -> Result[PomodoroSettings]:
        return await self.store.get_pomodoro_settings()

    async def update_settings(self, update: PomodoroSettingsUpdate) -> Result[PomodoroSettings]:
        """Apply every field that was sent, all or nothing."""
        changes = update.model_dump(exclude_unset=True)
        return await self._update(lambda current: {**current.model_dump(), **changes})

    async def replace_settings(self, pomodoro: PomodoroSettings) -> Result[PomodoroSettings]:
        return await self._update(lambda current: pomodoro.model_dump())

    async def update_work_duration(self, minutes: int) -> Result[PomodoroSettings]:
        return await self._update_field("work_duration_minutes", minutes)

    async def update_short_break(self, minutes: int) -> Result[PomodoroSettings]:
        return await self._update_field("short_break_minutes", minutes)

    async def update_long_break(self, minutes: int) -> Result[PomodoroSettings]:
        return await self._update_field("long_break_minutes", minutes)

    async def update_cycles(self, cycles: int) -> Result[PomodoroSettings]:
        return await self._update_field("cycles_before_long_break", cycles)

    async def toggle_focus_mode(self, enabled: bool) -> Result[PomodoroSettings]:
        return await self._update_field("focus_mode_enabled", enabled)

    async def toggle_auto_loop(self, enabled: bool) -> Result[PomodoroSettings]:
        return await self._update_field("auto_loop_enabled", enabled)

    async def toggle_review(self, enabled: bool) -> Result[PomodoroSettings]:
        return await self._update_field("review_enabled", enabled)

    async def toggle_notifications(self, enabled: bool) -> Result[PomodoroSettings]:
        return await self._update_field("notifications_enabled", enabled)

    async def _update_field(self, field: str, value) -> Result[PomodoroSettings]:
        return await self._update(lambda current: {**current.model_dump(), field: value})

    async def _update(
        self, transform: Callable[[PomodoroSettings], dict]
    ) -> Result[PomodoroSettings]:
        current_result = await self.get_settings()
        if current_result.is_failure:
            return current_result
        current = current_result.value

        try:
            updated = PomodoroSettings.model_validate(transform(current))
        except ValidationError as e:
            return _validation_failure(e)

        gate = await self._check_premium_features(current, updated)
        if gate.is_failure:
            return gate

        return (await self.store.update_pomodoro_settings(updated)).map(lambda _: updated)

    async def _check_premium_features(
        self, current: PomodoroSettings, updated: PomodoroSettings
    ) -> Result[None]:
        # Only switching a gated feature on needs premium; switching off never does
        gated = []
        if updated.auto_loop_enabled and not current.auto_loop_enabled:
            gated.append(PremiumFeature.AUTO_LOOP)
        if updated.focus_mode_strict and not current.focus_mode_strict:
            gated.append(PremiumFeature.STRICT_FOCUS_MODE)
        if not gated:
            return Success(None)

        premium_result = await self.is_premium()
        if premium_result.is_failure:
            return premium_result
        for feature in gated:
            check = self.policy.require_feature(feature, premium_result.value)
            if check.is_failure:
                return check
        return Success(None)

    # =========================================================================
    # Review intervals
    # =========================================================================

    async def review_intervals_for(self, task: Optional[Task] = None) -> Result[list[int]]:
        """Intervals to schedule for ``task`` under the user's plan and settings."""
        settings_result = await self.get_settings()
        if settings_result.is_failure:
            return settings_result
        premium_result = await self.is_premium()
        if premium_result.is_failure:
            return premium_result

        pomodoro = settings_result.value
        return Success(
            self.policy.intervals_for_task(
                premium_result.value,
                task.review_count if task is not None else None,
                pomodoro.default_review_count,
                pomodoro.review_intervals,
            )
        )

    # =========================================================================
    # Allowed apps
    # =========================================================================

    async def get_allowed_apps(self) -> Result[list[str]]:
        return await self.store.get_allowed_apps()

    async def set_allowed_apps(self, packages: list[str]) -> Result[list[str]]:
        unique = list(dict.fromkeys(p.strip() for p in packages if p.strip()))
        return (await self.store.set_allowed_apps(unique)).map(lambda _: unique)

    # =========================================================================
    # Subscription
    # =========================================================================

    async def get_subscription_status(self) -> Result[SubscriptionStatus]:
        return await self.store.get_subscription_status()

    async def is_premium(self, now: Optional[datetime] = None) -> Result[bool]:
        return (await self.get_subscription_status()).map(lambda status: status.is_premium(now))

    async def update_subscription(
        self, subscription_type: SubscriptionType, expires_at: Optional[datetime] = None
    ) -> Result[SubscriptionStatus]:
        """Record a plan change (purchase verification happens elsewhere)."""
        if subscription_type not in (SubscriptionType.FREE, SubscriptionType.LIFETIME) and (
            expires_at is None
        ):
            return Failure(
                DomainError.validation(
                    f"{subscription_type.value} plans need an expiry", field="expires_at"
                )
            )
        current = await self.get_subscription_status()
        if current.is_failure:
            return current

        status = current.value.model_copy(
            update={"type": subscription_type, "expires_at": expires_at}
        )
        logger.info(f"Subscription changed to {subscription_type.value}")
        return (await self.store.set_subscription_status(status)).map(lambda _: status)

    async def start_trial(self, now: Optional[datetime] = None) -> Result[SubscriptionStatus]:
        current = await self.get_subscription_status()
        started = current.flat_map(lambda status: self.policy.start_trial(status, now))
        if started.is_failure:
            return started
        return (await self.store.set_subscription_status(started.value)).map(
            lambda _: started.value
        )

    async def mark_trial_offer_seen(self) -> Result[SubscriptionStatus]:
        current = await self.get_subscription_status()
        if current.is_failure:
            return current
        status = current.value.model_copy(update={"has_seen_trial_offer": True})
        return (await self.store.set_subscription_status(status)).map(lambda _: status)
