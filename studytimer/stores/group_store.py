"""
Subject Group Store

Persists the subjects that own tasks. Deleting a group leaves its tasks
in place without a group.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from studytimer.db.models import SubjectGroupRow
from studytimer.models.result import DomainError, Failure, Result, Success
from studytimer.models.study import SubjectGroup, SubjectGroupCreate
from studytimer.stores.base import BaseStore, store_operation

logger = logging.getLogger(__name__)


class SubjectGroupStore(BaseStore):
    """Persistence for SubjectGroup rows."""

    @store_operation("Failed to load subject groups")
    async def get_all(self) -> Result[list[SubjectGroup]]:
        async with self.transaction() as session:
            rows = await session.scalars(
                select(SubjectGroupRow).order_by(
                    SubjectGroupRow.display_order, SubjectGroupRow.id
                )
            )
            return Success([SubjectGroup.model_validate(row) for row in rows])

    @store_operation("Failed to load subject group")
    async def get_by_id(self, group_id: int) -> Result[SubjectGroup]:
        async with self.transaction() as session:
            row = await session.get(SubjectGroupRow, group_id)
            if row is None:
                return Failure(DomainError.not_found(f"Subject group {group_id} not found"))
            return Success(SubjectGroup.model_validate(row))

    @store_operation("Failed to create subject group")
    async def insert(
        self, draft: SubjectGroupCreate, db: Optional[AsyncSession] = None
    ) -> Result[int]:
        async with self.transaction(db) as session:
            row = SubjectGroupRow(**draft.model_dump())
            session.add(row)
            await session.flush()
            self._changed(session)
            logger.info(f"Created subject group {row.id} ({draft.name!r})")
            return Success(row.id)

    @store_operation("Failed to delete subject group")
    async def delete(self, group_id: int) -> Result[None]:
        async with self.transaction() as session:
            result = await session.execute(
                delete(SubjectGroupRow).where(SubjectGroupRow.id == group_id)
            )
            if result.rowcount == 0:
                return Failure(DomainError.not_found(f"Subject group {group_id} not found"))
            self._changed(session, cascade=True)
            return Success(None)
