"""
Settings API Router

Endpoints for the user's timer settings, focus-mode allowed apps and
subscription.

Endpoints:
- GET /api/settings - Current pomodoro settings
- PATCH /api/settings - Update the fields that were sent (all or nothing)
- PUT /api/settings - Replace every setting
- GET /api/settings/review-options - Intervals and counts the plan allows
- GET /api/settings/allowed-apps - Apps allowed during focus mode
- PUT /api/settings/allowed-apps - Replace the allowed apps
- GET /api/settings/subscription - Plan, trial window and premium flag
- PUT /api/settings/subscription - Record a plan change
- POST /api/settings/subscription/trial - Start the free trial
- POST /api/settings/subscription/trial-offer-seen - Dismiss the trial offer
"""

import logging

from fastapi import APIRouter, Depends

from studytimer.container import Container
from studytimer.dependencies import get_container
from studytimer.middleware.error_handling import raise_for_failure
from studytimer.models.study import (
    AllowedAppsUpdate,
    PomodoroSettings,
    PomodoroSettingsUpdate,
    SubscriptionResponse,
    SubscriptionUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/settings", tags=["settings"])


# ===========================================
# Pomodoro Settings
# ===========================================


@router.get("", response_model=PomodoroSettings)
async def get_settings(container: Container = Depends(get_container)) -> PomodoroSettings:
    return raise_for_failure(await container.settings.get_settings())


@router.patch("", response_model=PomodoroSettings)
async def update_settings(
    update: PomodoroSettingsUpdate,
    container: Container = Depends(get_container),
) -> PomodoroSettings:
    """
    Update some settings.

    Every sent field is written in one transaction; if any write fails none
    of them is kept. Turning on auto loop or strict focus mode needs premium.
    """
    return raise_for_failure(await container.settings.update_settings(update))


@router.put("", response_model=PomodoroSettings)
async def replace_settings(
    pomodoro: PomodoroSettings,
    container: Container = Depends(get_container),
) -> PomodoroSettings:
    return raise_for_failure(await container.settings.replace_settings(pomodoro))


@router.get("/review-options")
async def get_review_options(container: Container = Depends(get_container)) -> dict:
    """Review intervals and per-task counts available on the current plan."""
    is_premium = raise_for_failure(await container.settings.is_premium())
    pomodoro = raise_for_failure(await container.settings.get_settings())
    policy = container.policy
    return {
        "is_premium": is_premium,
        "intervals": policy.effective_intervals(is_premium, pomodoro.review_intervals),
        "review_count_options": policy.review_count_options(is_premium),
        "default_review_count": policy.default_review_count(is_premium),
        "max_review_count": policy.max_review_count(is_premium),
    }


# ===========================================
# Allowed Apps
# ===========================================


@router.get("/allowed-apps", response_model=list[str])
async def get_allowed_apps(container: Container = Depends(get_container)) -> list[str]:
    return raise_for_failure(await container.settings.get_allowed_apps())


@router.put("/allowed-apps", response_model=list[str])
async def set_allowed_apps(
    update: AllowedAppsUpdate,
    container: Container = Depends(get_container),
) -> list[str]:
    return raise_for_failure(await container.settings.set_allowed_apps(update.packages))


# ===========================================
# Subscription
# ===========================================


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(container: Container = Depends(get_container)) -> SubscriptionResponse:
    status = raise_for_failure(await container.settings.get_subscription_status())
    return SubscriptionResponse.from_status(status)


@router.put("/subscription", response_model=SubscriptionResponse)
async def update_subscription(
    update: SubscriptionUpdate,
    container: Container = Depends(get_container),
) -> SubscriptionResponse:
    status = raise_for_failure(
        await container.settings.update_subscription(update.type, update.expires_at)
    )
    return SubscriptionResponse.from_status(status)


@router.post("/subscription/trial", response_model=SubscriptionResponse)
async def start_trial(container: Container = Depends(get_container)) -> SubscriptionResponse:
    """Start the free trial. Fails with 422 once the trial has been used."""
    status = raise_for_failure(await container.settings.start_trial())
    return SubscriptionResponse.from_status(status)


@router.post("/subscription/trial-offer-seen", response_model=SubscriptionResponse)
async def mark_trial_offer_seen(
    container: Container = Depends(get_container),
) -> SubscriptionResponse:
    status = raise_for_failure(await container.settings.mark_trial_offer_seen())
    return SubscriptionResponse.from_status(status)
