from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.models.staff_commission_history import StaffCommissionHistory
from .base import BaseRepository


class StaffCommissionRepository(BaseRepository[StaffCommissionHistory]):
    model = StaffCommissionHistory

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_for_staff_and_match(
        self, staff_id: str, match_id: str
    ) -> Optional[StaffCommissionHistory]:
        stmt = (
            select(StaffCommissionHistory)
            .where(StaffCommissionHistory.staff_id == staff_id)
            .where(StaffCommissionHistory.match_id == match_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_by_match(self, match_id: str) -> List[StaffCommissionHistory]:
        stmt = (
            select(StaffCommissionHistory)
            .where(StaffCommissionHistory.match_id == match_id)
            .order_by(StaffCommissionHistory.staff_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_staff(self, staff_id: str) -> List[StaffCommissionHistory]:
        stmt = (
            select(StaffCommissionHistory)
            .where(StaffCommissionHistory.staff_id == staff_id)
            .order_by(StaffCommissionHistory.game_finished_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_recent(
        self, match_id: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> List[StaffCommissionHistory]:
        """Newest settlement first, optionally for one match."""
        stmt = select(StaffCommissionHistory)
        if match_id:
            stmt = stmt.where(StaffCommissionHistory.match_id == match_id)
        stmt = (
            stmt.order_by(
                StaffCommissionHistory.game_finished_at.desc(),
                StaffCommissionHistory.staff_id,
            )
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
