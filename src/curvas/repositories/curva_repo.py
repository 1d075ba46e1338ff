from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.models.base import dump_json_list
from curvas.models.curva import CURVA_CLOSED, Curva
from .base import BaseRepository


class CurvaRepository(BaseRepository[Curva]):
    """Curva rows addressed by (match_id, curva_id).

    Writes are targeted updates of one curva's partition columns, guarded by
    ``version``; nothing here rewrites the whole match.
    """

    model = Curva

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_by_match(self, match_id: str) -> List[Curva]:
        """Curvas of a match in creation order, always re-read from the store."""
        stmt = (
            select(Curva)
            .where(Curva.match_id == match_id)
            .order_by(Curva.position)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_match(self, match_id: str, curva_id: str) -> Optional[Curva]:
        stmt = (
            select(Curva)
            .where(Curva.match_id == match_id)
            .where(Curva.id == curva_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def next_position(self, match_id: str) -> int:
        stmt = select(func.max(Curva.position)).where(Curva.match_id == match_id)
        current = (await self.session.execute(stmt)).scalar()
        return 0 if current is None else current + 1

    async def write_partition(
        self,
        curva_id: str,
        expected_version: int,
        available: List[str],
        sold: List[str],
        status: str,
    ) -> bool:
        """
        Conditional partition write: succeeds only if nobody else wrote the
        curva since ``expected_version`` was read and it has not been closed.
        """
        stmt = (
            update(Curva)
            .where(Curva.id == curva_id)
            .where(Curva.version == expected_version)
            .where(Curva.status != CURVA_CLOSED)
            .values(
                available_results_json=dump_json_list(available),
                sold_results_json=dump_json_list(sold),
                status=status,
                version=Curva.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def close(self, curva_id: str) -> bool:
        """Close one curva; False if it was already closed."""
        stmt = (
            update(Curva)
            .where(Curva.id == curva_id)
            .where(Curva.status != CURVA_CLOSED)
            .values(status=CURVA_CLOSED, version=Curva.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def close_all_for_match(self, match_id: str) -> int:
        """Force every curva of the match to closed, whatever its fill state."""
        stmt = (
            update(Curva)
            .where(Curva.match_id == match_id)
            .where(Curva.status != CURVA_CLOSED)
            .values(status=CURVA_CLOSED, version=Curva.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
