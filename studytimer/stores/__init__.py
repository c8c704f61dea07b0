"""Stores: async persistence for the study domain, one per table family."""

from studytimer.stores.base import BaseStore, store_operation
from studytimer.stores.broadcast import ChangeNotifier, Subscription, merge_changes
from studytimer.stores.group_store import SubjectGroupStore
from studytimer.stores.review_task_store import ReviewTaskStore
from studytimer.stores.session_store import StudySessionStore
from studytimer.stores.settings_store import SettingsStore
from studytimer.stores.stats_store import StatsStore
from studytimer.stores.task_store import TaskStore

__all__ = [
    "BaseStore",
    "ChangeNotifier",
    "ReviewTaskStore",
    "SettingsStore",
    "StatsStore",
    "StudySessionStore",
    "SubjectGroupStore",
    "Subscription",
    "TaskStore",
    "merge_changes",
    "store_operation",
]
