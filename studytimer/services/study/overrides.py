"""
Override Resolution

Per-task settings are nullable overrides of a global default. Every place
that needs the effective value resolves it the same way.
"""

from typing import Optional, TypeVar

from studytimer.models.study import PomodoroSettings, Task

T = TypeVar("T")


def resolve(override: Optional[T], fallback: T) -> T:
    """
    Return ``override`` unless it is None, else ``fallback``.

    Falsy overrides such as 0 are still overrides.

    Args:
        override: Task-specific value (may be None)
        fallback: Global default

    Returns:
        The effective value
    """
    return fallback if override is None else override


def effective_work_minutes(task: Task, pomodoro: PomodoroSettings) -> int:
    """Work minutes per cycle for ``task``."""
    return resolve(task.work_duration_minutes, pomodoro.work_duration_minutes)
