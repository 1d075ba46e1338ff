from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.models.match import ACTIVE_MATCH_STATUSES, Match
from .base import BaseRepository


class MatchRepository(BaseRepository[Match]):
    """Repository for Match entities."""

    model = Match

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_recent(self, limit: int = 100, offset: int = 0) -> List[Match]:
        """Newest first."""
        stmt = (
            select(Match)
            .order_by(Match.created_date.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_active_for_teams(self, home_team: str, away_team: str) -> Optional[Match]:
        """Pending or in-progress match for the same team pair (uses index)."""
        stmt = (
            select(Match)
            .where(Match.home_team == home_team)
            .where(Match.away_team == away_team)
            .where(Match.status.in_(ACTIVE_MATCH_STATUSES))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def set_score(self, match_id: str, home: int, away: int) -> int:
        """Targeted update of the score columns only."""
        stmt = (
            update(Match)
            .where(Match.id == match_id)
            .values(score_home=home, score_away=away)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def transition_status(
        self, match_id: str, from_statuses: tuple, to_status: str, **extra
    ) -> int:
        """Conditional status write; 0 rows means another writer moved the match first."""
        stmt = (
            update(Match)
            .where(Match.id == match_id)
            .where(Match.status.in_(from_statuses))
            .values(status=to_status, **extra)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
