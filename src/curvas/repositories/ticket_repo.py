from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.models.ticket import Ticket
from .base import BaseRepository


class TicketRepository(BaseRepository[Ticket]):
    """Repository for Ticket entities."""

    model = Ticket

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_number(self, ticket_number: int) -> Optional[Ticket]:
        stmt = select(Ticket).where(Ticket.ticket_number == ticket_number)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_payment_reference(self, reference: str) -> Optional[Ticket]:
        stmt = select(Ticket).where(Ticket.payment_reference == reference)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_by_match(self, match_id: str) -> List[Ticket]:
        stmt = (
            select(Ticket)
            .where(Ticket.match_id == match_id)
            .order_by(Ticket.ticket_number)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_user(self, user_id: str, limit: int = 500) -> List[Ticket]:
        stmt = (
            select(Ticket)
            .where(Ticket.user_id == user_id)
            .order_by(Ticket.created_date.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_curva(self, curva_id: str) -> List[Ticket]:
        stmt = (
            select(Ticket)
            .where(Ticket.curva_id == curva_id)
            .order_by(Ticket.ticket_number)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_physical_sales(self, match_id: str) -> List[Ticket]:
        """Tickets sold by staff in person: seller set, no gateway transaction."""
        stmt = (
            select(Ticket)
            .where(Ticket.match_id == match_id)
            .where(Ticket.sold_by.is_not(None))
            .where(Ticket.gateway_transaction_id.is_(None))
            .order_by(Ticket.ticket_number)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
