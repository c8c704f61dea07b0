"""API Routers package."""

from studytimer.routers import calendar as calendar_router
from studytimer.routers import groups as groups_router
from studytimer.routers import health as health_router
from studytimer.routers import reviews as reviews_router
from studytimer.routers import sessions as sessions_router
from studytimer.routers import settings as settings_router
from studytimer.routers import stats as stats_router
from studytimer.routers import tasks as tasks_router

__all__ = [
    "calendar_router",
    "groups_router",
    "health_router",
    "reviews_router",
    "sessions_router",
    "settings_router",
    "stats_router",
    "tasks_router",
]
