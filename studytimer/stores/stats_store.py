"""
Daily Stats Store

One aggregate row per calendar date (total minutes, session count) plus
per-subject minute rows that make up the subject breakdown.

Rows are created lazily by the first session of a date and only ever
grow. Each update is a single ``INSERT ... ON CONFLICT DO UPDATE`` that
adds to the stored values, so concurrent session completions on the same
date cannot lose updates.
"""

import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from studytimer.db.models import DailyStatsRow, DailySubjectMinutesRow
from studytimer.models.result import Result, Success
from studytimer.models.study import DailyStats
from studytimer.stores.base import BaseStore, store_operation

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT support
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _upsert_insert(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    try:
        return _UPSERT_INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Atomic stats upsert is not supported on {dialect}")


class StatsStore(BaseStore):
    """Persistence for per-date study aggregates."""

    @store_operation("Failed to update daily stats")
    async def update_stats(
        self,
        day: date,
        study_minutes: int,
        subject_name: str,
        db: Optional[AsyncSession] = None,
    ) -> Result[DailyStats]:
        """
        Add one session's minutes to ``day``.

        Creates the row with session_count=1 on first use; afterwards adds
        the minutes, increments session_count and adds to the subject entry.
        """
        async with self.transaction(db) as session:
            insert = _upsert_insert(session)

            stats_stmt = insert(DailyStatsRow).values(
                day=day, total_study_minutes=study_minutes, session_count=1
            )
            stats_stmt = stats_stmt.on_conflict_do_update(
                index_elements=["day"],
                set_={
                    "total_study_minutes": DailyStatsRow.total_study_minutes
                    + stats_stmt.excluded.total_study_minutes,
                    "session_count": DailyStatsRow.session_count + 1,
                },
            )
            await session.execute(stats_stmt)

            subject_stmt = insert(DailySubjectMinutesRow).values(
                day=day, subject=subject_name, minutes=study_minutes
            )
            subject_stmt = subject_stmt.on_conflict_do_update(
                index_elements=["day", "subject"],
                set_={"minutes": DailySubjectMinutesRow.minutes + subject_stmt.excluded.minutes},
            )
            await session.execute(subject_stmt)

            self._changed(session)
            logger.debug(f"Added {study_minutes} minutes to {day} ({subject_name!r})")
            stats = await self._load(session, day, day)
            return Success(stats[0])

    @store_operation("Failed to load daily stats")
    async def get_by_date(self, day: date) -> Result[Optional[DailyStats]]:
        async with self.transaction() as session:
            stats = await self._load(session, day, day)
            return Success(stats[0] if stats else None)

    @store_operation("Failed to load stats range")
    async def get_between(self, start: date, end: date) -> Result[list[DailyStats]]:
        """Stored rows with start <= date <= end, oldest first."""
        async with self.transaction() as session:
            return Success(await self._load(session, start, end))

    @store_operation("Failed to total study minutes")
    async def get_total_minutes_between(self, start: date, end: date) -> Result[int]:
        async with self.transaction() as session:
            total = await session.scalar(
                select(func.coalesce(func.sum(DailyStatsRow.total_study_minutes), 0)).where(
                    DailyStatsRow.day.between(start, end)
                )
            )
            return Success(int(total or 0))

    @store_operation("Failed to load study days")
    async def get_study_days(self, until: Optional[date] = None) -> Result[list[date]]:
        """Dates with study time > 0, oldest first, optionally up to ``until``."""
        query = select(DailyStatsRow.day).where(DailyStatsRow.total_study_minutes > 0)
        if until is not None:
            query = query.where(DailyStatsRow.day <= until)
        async with self.transaction() as session:
            days = await session.scalars(query.order_by(DailyStatsRow.day))
            return Success(list(days))

    async def watch_between(self, start: date, end: date) -> AsyncIterator[Result[list[DailyStats]]]:
        async for result in self._watch(lambda: self.get_between(start, end)):
            yield result

    async def _load(self, session: AsyncSession, start: date, end: date) -> list[DailyStats]:
        rows = await session.scalars(
            select(DailyStatsRow)
            .where(DailyStatsRow.day.between(start, end))
            .order_by(DailyStatsRow.day)
            .execution_options(populate_existing=True)
        )
        stats_rows = list(rows)
        if not stats_rows:
            return []

        breakdowns: dict[date, dict[str, int]] = defaultdict(dict)
        subject_rows = await session.execute(
            select(
                DailySubjectMinutesRow.day,
                DailySubjectMinutesRow.subject,
                DailySubjectMinutesRow.minutes,
            ).where(DailySubjectMinutesRow.day.between(start, end))
        )
        for day, subject, minutes in subject_rows:
            breakdowns[day][subject] = minutes

        return [
            DailyStats(
                date=row.day,
                total_study_minutes=row.total_study_minutes,
                session_count=row.session_count,
                subject_breakdown=breakdowns.get(row.day, {}),
            )
            for row in stats_rows
        ]
