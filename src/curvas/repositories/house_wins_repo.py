from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.models.house_wins_history import HouseWinsHistory
from .base import BaseRepository


class HouseWinsRepository(BaseRepository[HouseWinsHistory]):
    """Append-only: there is no update or delete helper on purpose."""

    model = HouseWinsHistory

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_by_match(self, match_id: str) -> List[HouseWinsHistory]:
        stmt = (
            select(HouseWinsHistory)
            .where(HouseWinsHistory.match_id == match_id)
            .order_by(HouseWinsHistory.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_recent(self, limit: int = 100) -> List[HouseWinsHistory]:
        stmt = (
            select(HouseWinsHistory)
            .order_by(HouseWinsHistory.created_at.desc(), HouseWinsHistory.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
