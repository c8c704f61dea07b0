"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across unit and integration tests.

Database-backed tests run against a fresh SQLite file per test. Set
TEST_DATABASE_URL (for example in .env) to run them against another
database instead; its tables are dropped after every test.
"""

import os
from datetime import date, timedelta
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv

from studytimer.config import settings
from studytimer.container import Container, build_container
from studytimer.db.base import drop_db
from studytimer.enums.study import ScheduleType
from studytimer.models.study import SubjectGroupCreate, Task, TaskCreate

# Load .env file from project root BEFORE any fixtures run
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


# ============================================================================
# Environment Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch) -> None:
    """Run every test with authentication off, whatever .env says."""
    monkeypatch.setattr(settings, "API_KEY", "")


# ============================================================================
# Database
# ============================================================================


@pytest_asyncio.fixture
async def container(tmp_path: Path) -> AsyncGenerator[Container, None]:
    """Container on an empty database with all tables created."""
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    test_container = build_container(url)
    await test_container.init()

    yield test_container

    await drop_db(test_container.engine)
    await test_container.dispose()


# ============================================================================
# Sample Data
# ============================================================================


@pytest.fixture
def today() -> date:
    return date(2024, 3, 13)  # a Wednesday


@pytest_asyncio.fixture
async def math_group_id(container: Container) -> int:
    return (await container.groups.insert(SubjectGroupCreate(name="Math"))).unwrap()


@pytest_asyncio.fixture
async def math_task(container: Container, math_group_id: int) -> Task:
    """Unscheduled task in the Math group."""
    task_id = (
        await container.tasks.insert(TaskCreate(name="Calculus", group_id=math_group_id))
    ).unwrap()
    return (await container.tasks.get_by_id(task_id)).unwrap()


@pytest_asyncio.fixture
async def history_task(container: Container) -> Task:
    """Ungrouped task; its own name is its stats subject."""
    task_id = (await container.tasks.insert(TaskCreate(name="History"))).unwrap()
    return (await container.tasks.get_by_id(task_id)).unwrap()


@pytest_asyncio.fixture
async def repeat_task(container: Container) -> Task:
    """Task repeating on Monday, Wednesday and Friday."""
    task_id = (
        await container.tasks.insert(
            TaskCreate(
                name="Vocabulary",
                schedule_type=ScheduleType.REPEAT,
                repeat_days={1, 3, 5},
            )
        )
    ).unwrap()
    return (await container.tasks.get_by_id(task_id)).unwrap()


@pytest_asyncio.fixture
async def deadline_task(container: Container, today: date) -> Task:
    """Task due three days after ``today``."""
    task_id = (
        await container.tasks.insert(
            TaskCreate(
                name="Essay",
                schedule_type=ScheduleType.DEADLINE,
                deadline_date=today + timedelta(days=3),
            )
        )
    ).unwrap()
    return (await container.tasks.get_by_id(task_id)).unwrap()
