"""
Settings Store

Key/value persistence for user settings. Scalars are stored as text,
lists and objects as JSON under named keys.

Reads never fail on bad stored data: a value that cannot be parsed falls
back to its documented default and the problem is logged at WARNING.
Writes of several keys run in one transaction, so a failed update leaves
the previous settings intact.
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studytimer.db.models import SettingRow
from studytimer.models.result import Result, Success
from studytimer.models.study import PomodoroSettings, SubscriptionStatus
from studytimer.stores.base import BaseStore, store_operation

logger = logging.getLogger(__name__)

# Setting keys
WORK_DURATION_MINUTES = "work_duration_minutes"
SHORT_BREAK_MINUTES = "short_break_minutes"
LONG_BREAK_MINUTES = "long_break_minutes"
CYCLES_BEFORE_LONG_BREAK = "cycles_before_long_break"
FOCUS_MODE_ENABLED = "focus_mode_enabled"
FOCUS_MODE_STRICT = "focus_mode_strict"
AUTO_LOOP_ENABLED = "auto_loop_enabled"
REVIEW_ENABLED = "review_enabled"
REVIEW_INTERVALS = "review_intervals"
DEFAULT_REVIEW_COUNT = "default_review_count"
NOTIFICATIONS_ENABLED = "notifications_enabled"
ALLOWED_APPS = "allowed_apps"
SUBSCRIPTION_STATUS = "subscription_status"

POMODORO_KEYS = (
    WORK_DURATION_MINUTES,
    SHORT_BREAK_MINUTES,
    LONG_BREAK_MINUTES,
    CYCLES_BEFORE_LONG_BREAK,
    FOCUS_MODE_ENABLED,
    FOCUS_MODE_STRICT,
    AUTO_LOOP_ENABLED,
    REVIEW_ENABLED,
    REVIEW_INTERVALS,
    DEFAULT_REVIEW_COUNT,
    NOTIFICATIONS_ENABLED,
)

_BOOL_KEYS = {
    FOCUS_MODE_ENABLED,
    FOCUS_MODE_STRICT,
    AUTO_LOOP_ENABLED,
    REVIEW_ENABLED,
    NOTIFICATIONS_ENABLED,
}


# =============================================================================
# Parsing
# =============================================================================


def parse_bool(raw: str, key: str) -> Optional[bool]:
    value = raw.strip().lower()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    logger.warning(f"Ignoring unparseable boolean setting {key}={raw!r}")
    return None


def parse_int(raw: str, key: str) -> Optional[int]:
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring unparseable integer setting {key}={raw!r}")
        return None


def parse_int_list(raw: Optional[str], key: str, default: list[int]) -> list[int]:
    """Decode a JSON list of integers, falling back to ``default``."""
    if raw is None:
        return list(default)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Setting {key} is not valid JSON, using default {default}")
        return list(default)
    if not isinstance(value, list) or not all(
        isinstance(v, int) and not isinstance(v, bool) for v in value
    ):
        logger.warning(f"Setting {key} is not a list of integers, using default {default}")
        return list(default)
    return value


def parse_str_list(raw: Optional[str], key: str) -> list[str]:
    """Decode a JSON list of strings, falling back to an empty list."""
    if raw is None:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Setting {key} is not valid JSON, using an empty list")
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        logger.warning(f"Setting {key} is not a list of strings, using an empty list")
        return []
    return value


def parse_pomodoro_settings(values: dict[str, str]) -> PomodoroSettings:
    """
    Build PomodoroSettings from stored strings.

    Missing keys take model defaults. Values that fail to parse or fall
    outside the allowed bounds are dropped (with a WARNING) and replaced by
    their defaults, so a single bad key never hides the others.
    """
    defaults = PomodoroSettings()
    fields: dict[str, Any] = {}
    for key in POMODORO_KEYS:
        raw = values.get(key)
        if raw is None:
            continue
        if key == REVIEW_INTERVALS:
            fields[key] = parse_int_list(raw, key, defaults.review_intervals)
        elif key in _BOOL_KEYS:
            parsed = parse_bool(raw, key)
            if parsed is not None:
                fields[key] = parsed
        else:
            parsed = parse_int(raw, key)
            if parsed is not None:
                fields[key] = parsed

    try:
        return PomodoroSettings(**fields)
    except ValidationError as e:
        invalid = {str(error["loc"][0]) for error in e.errors() if error["loc"]}
        logger.warning(f"Settings out of range, using defaults for {sorted(invalid)}")
        return PomodoroSettings(**{k: v for k, v in fields.items() if k not in invalid})


def serialize_pomodoro_settings(pomodoro: PomodoroSettings) -> dict[str, str]:
    values: dict[str, str] = {}
    for key, value in pomodoro.model_dump().items():
        if isinstance(value, bool):
            values[key] = "true" if value else "false"
        elif isinstance(value, list):
            values[key] = json.dumps(value)
        else:
            values[key] = str(value)
    return values


def parse_subscription_status(raw: Optional[str]) -> SubscriptionStatus:
    if raw is None:
        return SubscriptionStatus()
    try:
        return SubscriptionStatus.model_validate_json(raw)
    except ValidationError:
        logger.warning("Stored subscription status is invalid, treating the user as free")
        return SubscriptionStatus()


# =============================================================================
# Store
# =============================================================================


class SettingsStore(BaseStore):
    """Persistence for key/value settings."""

    @store_operation("Failed to load settings")
    async def get_values(self, keys: Optional[tuple[str, ...]] = None) -> Result[dict[str, str]]:
        query = select(SettingRow.key, SettingRow.value)
        if keys is not None:
            query = query.where(SettingRow.key.in_(keys))
        async with self.transaction() as session:
            rows = await session.execute(query)
            return Success({key: value for key, value in rows})

    @store_operation("Failed to load setting")
    async def get_value(self, key: str) -> Result[Optional[str]]:
        async with self.transaction() as session:
            return Success(await session.scalar(select(SettingRow.value).where(SettingRow.key == key)))

    @store_operation("Failed to save settings")
    async def set_values(
        self, values: dict[str, str], db: Optional[AsyncSession] = None
    ) -> Result[None]:
        """Write every key in one transaction: all of them or none."""
        async with self.transaction(db) as session:
            for key, value in values.items():
                await self._write_value(session, key, value)
            self._changed(session)
            logger.info(f"Saved settings: {sorted(values)}")
            return Success(None)

    async def _write_value(self, session: AsyncSession, key: str, value: str) -> None:
        await session.merge(SettingRow(key=key, value=value))
        await session.flush()

    # =========================================================================
    # Typed accessors
    # =========================================================================

    async def get_pomodoro_settings(self) -> Result[PomodoroSettings]:
        return (await self.get_values(POMODORO_KEYS)).map(parse_pomodoro_settings)

    async def update_pomodoro_settings(
        self, pomodoro: PomodoroSettings, db: Optional[AsyncSession] = None
    ) -> Result[None]:
        return await self.set_values(serialize_pomodoro_settings(pomodoro), db=db)

    async def get_allowed_apps(self) -> Result[list[str]]:
        return (await self.get_value(ALLOWED_APPS)).map(
            lambda raw: parse_str_list(raw, ALLOWED_APPS)
        )

    async def set_allowed_apps(self, packages: list[str]) -> Result[None]:
        return await self.set_values({ALLOWED_APPS: json.dumps(packages)})

    async def get_subscription_status(self) -> Result[SubscriptionStatus]:
        return (await self.get_value(SUBSCRIPTION_STATUS)).map(parse_subscription_status)

    async def set_subscription_status(self, status: SubscriptionStatus) -> Result[None]:
        return await self.set_values({SUBSCRIPTION_STATUS: status.model_dump_json()})
